# school_mgmt/core/dispatcher.py
"""
Generic ``/api/{module}/{fn}`` dispatch.

Service classes mark their public operations with :func:`exposed`. At startup
:class:`Dispatcher` collects them into a registry keyed by ``(module, fn)``
and builds each operation's guard chain once.
"""
import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from school_mgmt.core.config import Settings
from school_mgmt.core.context import Device, GuardContext
from school_mgmt.core.errors import (
    Failure,
    format_validation_errors,
    internal_error,
    not_found,
    validation_error,
)
from school_mgmt.core.logging import logger
from school_mgmt.core.rate_limiter import client_address
from school_mgmt.middleware.guards import Guard

EXPOSURE_ATTR = "__exposure__"
HTTP_METHODS = ("GET", "POST", "PATCH", "DELETE")
LIMIT_GUARDS = {"general": "rate_limit", "security": "security_limit"}


@dataclass(frozen=True)
class ExposureSpec:
    fn_name: str
    method: str
    schema: Optional[Type[BaseModel]]
    auth: bool
    role: Optional[str]
    limit: str


def exposed(
    fn_name: str,
    method: str = "post",
    schema: Optional[Type[BaseModel]] = None,
    auth: bool = True,
    role: Optional[str] = None,
    limit: str = "general"
) -> Callable:
    """
    Mark a service coroutine as reachable at ``/api/<module>/<fn_name>``.

    ``role`` names a role guard (``is_school_admin``, ``is_teacher``,
    ``is_superadmin``); it implies ``auth``. ``limit`` picks the rate-limit
    class, ``general`` or ``security``.
    """
    method = method.upper()
    if method not in HTTP_METHODS:
        raise ValueError(f"Unsupported method {method} for {fn_name}")
    if limit not in LIMIT_GUARDS:
        raise ValueError(f"Unknown rate limit class {limit}")

    def decorator(func: Callable) -> Callable:
        setattr(func, EXPOSURE_ATTR, ExposureSpec(
            fn_name=fn_name,
            method=method,
            schema=schema,
            auth=auth or role is not None,
            role=role,
            limit=limit
        ))
        return func

    return decorator


@dataclass(frozen=True)
class Exposure:
    module: str
    fn_name: str
    method: str
    schema: Optional[Type[BaseModel]]
    service_class: type
    attr_name: str
    guard_names: Tuple[str, ...]
    guards: Tuple[Guard, ...]


def _envelope(status_code: int, content: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content)


def failure_response(failure: Failure) -> JSONResponse:
    return _envelope(failure.status_code, jsonable_encoder(failure.to_envelope()))


class Dispatcher:
    def __init__(self, service_classes: List[type], guards: Dict[str, Guard], settings: Settings):
        self.settings = settings
        self.registry: Dict[Tuple[str, str], Exposure] = {}
        for service_class in service_classes:
            self._register(service_class, guards)

    def _register(self, service_class: type, guards: Dict[str, Guard]) -> None:
        module = getattr(service_class, "module_name", None)
        if not module:
            raise ValueError(f"{service_class.__name__} has no module_name")

        for attr_name in dir(service_class):
            spec = getattr(getattr(service_class, attr_name), EXPOSURE_ATTR, None)
            if spec is None:
                continue

            guard_names = [LIMIT_GUARDS[spec.limit]]
            if spec.auth:
                guard_names.append("authenticated")
            if spec.role:
                guard_names.append(spec.role)

            missing = [name for name in guard_names if name not in guards]
            if missing:
                raise ValueError(f"{module}.{spec.fn_name} uses unknown guards {missing}")

            key = (module, spec.fn_name)
            if key in self.registry:
                raise ValueError(f"Duplicate exposure {module}.{spec.fn_name}")

            self.registry[key] = Exposure(
                module=module,
                fn_name=spec.fn_name,
                method=spec.method,
                schema=spec.schema,
                service_class=service_class,
                attr_name=attr_name,
                guard_names=tuple(guard_names),
                guards=tuple(guards[name] for name in guard_names)
            )

    def resolve(self, module: str, fn_name: str, method: str) -> Optional[Exposure]:
        exposure = self.registry.get((module, fn_name))
        if exposure is None or exposure.method != method.upper():
            return None
        return exposure

    def list_endpoints(self) -> List[Dict[str, Any]]:
        return [
            {
                "path": f"/api/{exposure.module}/{exposure.fn_name}",
                "method": exposure.method,
                "guards": list(exposure.guard_names)
            }
            for exposure in sorted(self.registry.values(), key=lambda e: (e.module, e.fn_name))
        ]

    @staticmethod
    async def _read_body(request: Request) -> Tuple[Optional[Dict[str, Any]], Optional[Failure]]:
        raw = await request.body()
        if not raw or not raw.strip():
            return {}, None
        try:
            body = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return None, validation_error("Malformed JSON body")
        if not isinstance(body, dict):
            return None, validation_error("Request body must be a JSON object")
        return body, None

    async def dispatch(self, request: Request, module: str, fn_name: str, db: AsyncSession) -> JSONResponse:
        exposure = self.resolve(module, fn_name, request.method)
        if exposure is None:
            return failure_response(not_found())

        body, failure = await self._read_body(request)
        if failure is not None:
            return failure_response(failure)

        ctx = GuardContext(request=request)
        for name, guard in zip(exposure.guard_names, exposure.guards):
            failure = await guard(ctx)
            if failure is not None:
                logger.warning(
                    f"{module}.{fn_name} rejected by {name}: {failure.kind.value}",
                    extra={"request_id": getattr(request.state, "request_id", None)}
                )
                return failure_response(failure)

        # Body fields win over query parameters of the same name
        merged = {**dict(request.query_params), **body}
        data: Any = merged
        if exposure.schema is not None:
            try:
                data = exposure.schema.model_validate(merged)
            except ValidationError as e:
                return failure_response(validation_error(format_validation_errors(e)))

        device = Device(
            user_agent=request.headers.get("User-Agent", "unknown"),
            address=client_address(request, self.settings.trusted_proxies)
        )

        try:
            service = exposure.service_class(db, self.settings)
            handler = getattr(service, exposure.attr_name)
            result = await handler(data=data, principal=ctx.principal, device=device)
        except Exception as e:
            logger.error(
                f"Unhandled error in {module}.{fn_name}: {type(e).__name__}",
                exc_info=True,
                extra={"request_id": getattr(request.state, "request_id", None)}
            )
            await db.rollback()
            return failure_response(internal_error())

        if isinstance(result, Failure):
            return failure_response(result)

        return _envelope(status.HTTP_200_OK, {"ok": True, "data": jsonable_encoder(result)})
