from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from fastapi import Request

from school_mgmt.schemas.enums import UserRole


@dataclass(frozen=True)
class Principal:
    """Identity decoded from an access token; fixed for the whole request."""
    user_id: int
    role: UserRole
    school_id: Optional[int] = None

    @property
    def is_superadmin(self) -> bool:
        return self.role == UserRole.SUPERADMIN

    @property
    def is_school_admin(self) -> bool:
        return self.role == UserRole.SCHOOL_ADMIN

    def owns(self, school_id: Optional[int]) -> bool:
        """True when the principal may act inside ``school_id``."""
        return self.is_superadmin or (
            self.school_id is not None and self.school_id == school_id
        )


@dataclass(frozen=True)
class Device:
    user_agent: str = "unknown"
    address: str = "unknown"


@dataclass
class GuardContext:
    """State shared by the guards of one request."""
    request: Request
    results: Dict[str, Any] = field(default_factory=dict)

    @property
    def principal(self) -> Optional[Principal]:
        return self.results.get("principal")
