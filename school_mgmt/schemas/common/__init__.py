from .pagination import PaginationParams, PageMeta, IdRequest

__all__ = [
    'PaginationParams',
    'PageMeta',
    'IdRequest'
]
