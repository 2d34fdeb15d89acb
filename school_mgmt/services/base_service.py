# school_mgmt/services/base_service.py
from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, List, Optional, Tuple, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from school_mgmt.core.config import Settings, settings as default_settings
from school_mgmt.core.context import Principal
from school_mgmt.core.errors import Failure, conflict, forbidden
from school_mgmt.core.logging import logger
from school_mgmt.models.base import Base
from school_mgmt.schemas.common import PageMeta, PaginationParams

ModelT = TypeVar("ModelT", bound=Base)


class BaseService:
    """
    Shared plumbing for the exposed services.

    Subclasses set ``module_name``, the first path segment they answer to.
    """
    module_name: str = ""

    def __init__(self, db: AsyncSession, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or default_settings

    @asynccontextmanager
    async def transaction(self):
        """Context manager for transaction handling"""
        try:
            yield
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    async def get_by_id(self, model: Type[ModelT], record_id: int) -> Optional[ModelT]:
        return await self.db.get(model, record_id)

    async def reload(self, instance: ModelT, *relations: str) -> ModelT:
        """Load ``relations`` of a freshly written record before it is serialized."""
        await self.db.refresh(instance, attribute_names=list(relations))
        return instance

    async def exists(self, query: Select) -> bool:
        result = await self.db.execute(query.limit(1))
        return result.first() is not None

    async def paginate(self, query: Select, params: PaginationParams) -> Tuple[List[Any], PageMeta]:
        """Run ``query`` for one page and count the whole result set."""
        count_query = select(func.count()).select_from(query.order_by(None).subquery())
        total = (await self.db.execute(count_query)).scalar_one()

        result = await self.db.execute(query.offset(params.offset).limit(params.limit))
        return list(result.scalars().all()), PageMeta.build(total, params)

    async def commit_or_conflict(self, message: str) -> Optional[Failure]:
        """Commit, turning a unique-constraint violation into a 409."""
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"Integrity error in {self.module_name}: {e.orig}")
            return conflict(message)
        return None

    @staticmethod
    def check_tenant(principal: Principal, school_id: Optional[int]) -> Optional[Failure]:
        if principal.owns(school_id):
            return None
        return forbidden()

    @staticmethod
    def list_scope(principal: Principal, requested_school_id: Optional[int] = None) -> Tuple[Optional[int], Optional[Failure]]:
        """
        School filter for a listing.

        Superadmins may pass a school or see everything; school admins are
        pinned to their own school; every other role is refused.
        """
        if principal.is_superadmin:
            return requested_school_id, None
        if principal.is_school_admin and principal.school_id is not None:
            return principal.school_id, None
        return None, forbidden()

    @staticmethod
    def update_fields(data) -> dict:
        """Fields present in a PATCH body, without the record id."""
        fields = data.model_dump(exclude_unset=True, exclude_none=True, exclude={"id"})
        return {key: value.value if isinstance(value, Enum) else value for key, value in fields.items()}
