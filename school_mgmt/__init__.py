# school_mgmt/__init__.py
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.future import select

from school_mgmt.core.config import Settings, settings as default_settings
from school_mgmt.core.database import build_engine, build_session_factory, close_db, init_db
from school_mgmt.core.dispatcher import Dispatcher
from school_mgmt.core.logging import logger
from school_mgmt.core.rate_limiter import RateLimiter, RedisRateLimiter
from school_mgmt.core.redis import close_redis, init_redis
from school_mgmt.core.security import TokenHandler, get_password_hash
from school_mgmt.middleware.guards import build_guards
from school_mgmt.middleware.request_id import RequestIDMiddleware
from school_mgmt.models import User
from school_mgmt.routes import api
from school_mgmt.schemas.enums import UserRole
from school_mgmt.services import SERVICES


def create_limiters(config: Settings):
    """General and security-sensitive limiters, shared through Redis when configured."""
    if config.REDIS_URL:
        client = init_redis(config.REDIS_URL)
        return (
            RedisRateLimiter(client, config.RATE_LIMIT_MAX_REQUESTS, config.RATE_LIMIT_WINDOW_SECONDS, prefix="ratelimit"),
            RedisRateLimiter(client, config.SECURITY_LIMIT_MAX_REQUESTS, config.SECURITY_LIMIT_WINDOW_SECONDS, prefix="securitylimit"),
        )
    return (
        RateLimiter(
            max_requests=config.RATE_LIMIT_MAX_REQUESTS,
            time_window=config.RATE_LIMIT_WINDOW_SECONDS,
            cleanup_interval=config.RATE_LIMIT_CLEANUP_SECONDS
        ),
        RateLimiter(
            max_requests=config.SECURITY_LIMIT_MAX_REQUESTS,
            time_window=config.SECURITY_LIMIT_WINDOW_SECONDS,
            cleanup_interval=config.RATE_LIMIT_CLEANUP_SECONDS
        ),
    )


def create_app(config: Optional[Settings] = None) -> FastAPI:
    config = config or default_settings

    app = FastAPI(
        title=config.APP_NAME,
        description="Multi-tenant school management API",
        version=config.VERSION,
        docs_url="/api/docs" if config.DEBUG else None,
        redoc_url="/api/redoc" if config.DEBUG else None,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware)

    general_limiter, security_limiter = create_limiters(config)
    guards = build_guards(TokenHandler(config), general_limiter, security_limiter, config.trusted_proxies)

    app.state.settings = config
    app.state.engine = build_engine(config)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.dispatcher = Dispatcher(SERVICES, guards, config)

    app.include_router(api.router)

    @app.on_event("startup")
    async def startup_event():
        await init_db(app.state.engine)
        async with app.state.session_factory() as db:
            await create_super_admin(db, config)
        logger.info(f"Application startup completed with {len(app.state.dispatcher.registry)} operations")

    @app.on_event("shutdown")
    async def shutdown_event():
        await close_redis()
        await close_db(app.state.engine)
        logger.info("Application shutdown completed")

    return app


async def create_super_admin(db, config: Settings):
    """Seed the bootstrap superadmin when credentials are configured."""
    if not config.SUPER_ADMIN_EMAIL or not config.SUPER_ADMIN_PASSWORD:
        return None

    email = config.SUPER_ADMIN_EMAIL.lower()
    result = await db.execute(select(User).filter(User.email == email))
    super_admin = result.scalar_one_or_none()

    if super_admin:
        logger.info("Super admin already exists")
        return super_admin

    super_admin = User(
        name=config.SUPER_ADMIN_NAME,
        email=email,
        role=UserRole.SUPERADMIN.value,
        password_hash=get_password_hash(config.SUPER_ADMIN_PASSWORD),
        school_id=None
    )
    db.add(super_admin)
    await db.commit()
    logger.info("Super admin created successfully")
    return super_admin
