# school_mgmt/middleware/guards.py
"""
Guards run before every exposed operation.

Each guard is an async callable taking the request's ``GuardContext`` and
returning ``None`` to continue or a ``Failure`` to stop the chain.
"""
from typing import AbstractSet, Awaitable, Callable, Dict, Optional, Set

from fastapi import Request

from school_mgmt.core.context import GuardContext, Principal
from school_mgmt.core.errors import Failure, forbidden, rate_limited, unauthorized
from school_mgmt.core.logging import logger
from school_mgmt.core.rate_limiter import client_address
from school_mgmt.core.security import TokenHandler, TokenType
from school_mgmt.schemas.enums import UserRole

Guard = Callable[[GuardContext], Awaitable[Optional[Failure]]]

GENERAL_LIMIT_MESSAGE = "Too many requests, please try again later."
SECURITY_LIMIT_MESSAGE = "Too many security-sensitive attempts. Please try again in an hour."


def extract_token(request: Request) -> Optional[str]:
    """Extract token from the ``token`` header or an Authorization Bearer header"""
    token = request.headers.get('token')
    if token:
        return token.strip()

    auth_header = request.headers.get('Authorization')
    if auth_header and auth_header.startswith('Bearer '):
        return auth_header[len('Bearer '):].strip() or None
    return None


def principal_from_payload(payload: dict) -> Optional[Principal]:
    try:
        school_id = payload.get("school_id")
        return Principal(
            user_id=int(payload["sub"]),
            role=UserRole(payload.get("role")),
            school_id=int(school_id) if school_id is not None else None
        )
    except (KeyError, TypeError, ValueError):
        return None


def token_guard(tokens: TokenHandler) -> Guard:
    async def authenticated(ctx: GuardContext) -> Optional[Failure]:
        token = extract_token(ctx.request)
        if not token:
            return unauthorized()

        payload = tokens.decode_token(token, TokenType.ACCESS)
        principal = principal_from_payload(payload) if payload else None
        if principal is None:
            return unauthorized()

        ctx.results["principal"] = principal
        return None

    return authenticated


def role_guard(allowed_roles: Set[UserRole]) -> Guard:
    async def check_role(ctx: GuardContext) -> Optional[Failure]:
        principal = ctx.principal
        if principal is None:
            return unauthorized()
        if principal.role not in allowed_roles:
            logger.warning(
                f"Permission denied: user {principal.user_id} with role {principal.role.value} "
                f"requires one of {sorted(role.value for role in allowed_roles)}"
            )
            return forbidden()
        return None

    return check_role


is_school_admin = role_guard({UserRole.SCHOOL_ADMIN})
is_teacher = role_guard({UserRole.TEACHER, UserRole.SCHOOL_ADMIN, UserRole.SUPERADMIN})
is_superadmin = role_guard({UserRole.SUPERADMIN})


def rate_limit_guard(
    limiter,
    key_prefix: str,
    message: str,
    trusted_proxies: AbstractSet[str] = frozenset()
) -> Guard:
    """Guard counting requests per source address against ``limiter``."""
    async def limit(ctx: GuardContext) -> Optional[Failure]:
        key = f"{key_prefix}:{client_address(ctx.request, trusted_proxies)}"
        if not await limiter.check_rate_limit(key):
            return rate_limited(message)
        return None

    return limit


def build_guards(
    tokens: TokenHandler,
    general_limiter,
    security_limiter,
    trusted_proxies: AbstractSet[str] = frozenset()
) -> Dict[str, Guard]:
    """Named guards available to exposures, wired once at startup."""
    return {
        "rate_limit": rate_limit_guard(general_limiter, "general", GENERAL_LIMIT_MESSAGE, trusted_proxies),
        "security_limit": rate_limit_guard(security_limiter, "security", SECURITY_LIMIT_MESSAGE, trusted_proxies),
        "authenticated": token_guard(tokens),
        "is_school_admin": is_school_admin,
        "is_teacher": is_teacher,
        "is_superadmin": is_superadmin,
    }
