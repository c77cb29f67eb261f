"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.asynchronous.mongo_client import AsyncMongoClient

from config import AppSettings
from errors import register_error_handlers
from infrastructure.email.protocol import EmailProvider
from infrastructure.email.smtp import SmtpEmailProvider
from repositories.indexes import (
    PRODUCTS_COLLECTION,
    USERS_COLLECTION,
    VERIFICATION_CODES_COLLECTION,
    ensure_indexes,
)
from repositories.product_repository import ProductRepository
from repositories.user_repository import UserRepository
from repositories.verification_code_repository import VerificationCodeRepository
from routes.auth_routes import router as auth_router
from routes.health_routes import router as health_router
from routes.product_routes import router as product_router
from routes.protected_routes import router as protected_router
from services.auth_service import AuthService
from services.product_service import ProductService
from services.token_service import TokenService
from services.verification_service import VerificationService
from shared.logging import get_logger, setup_logging
from workers.code_sweeper import CodeSweeper

log = get_logger(__name__)


def attach_services(
    app: FastAPI,
    settings: AppSettings,
    users: UserRepository,
    codes: VerificationCodeRepository,
    products: ProductRepository,
    email: EmailProvider,
) -> CodeSweeper:
    """Build the service graph on top of the given repositories and store it on app.state.

    Returns the (not yet started) expired-code sweeper.
    """
    verification = VerificationService(
        codes,
        code_ttl_minutes=settings.mfa.mfa_code_expiration_minutes,
        max_attempts=settings.mfa.mfa_max_attempts,
    )
    tokens = TokenService(settings.jwt)

    app.state.settings = settings
    app.state.email_provider = email
    app.state.token_service = tokens
    app.state.verification_service = verification
    app.state.auth_service = AuthService(
        users,
        verification,
        tokens,
        email,
        require_mfa_delivery=settings.mfa.mfa_require_email_delivery,
    )
    app.state.product_service = ProductService(products)

    sweeper = CodeSweeper(verification, settings.mfa.code_cleanup_interval_seconds)
    app.state.code_sweeper = sweeper
    return sweeper


def register_routes(app: FastAPI) -> None:
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(product_router)
    app.include_router(protected_router)


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            environment=settings.env,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
        )

    setup_logging(
        log_level=settings.logging.log_level,
        log_format="json" if settings.is_production else settings.logging.log_format,
        env=settings.env,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        mongo_client: AsyncMongoClient = AsyncMongoClient(
            settings.db.mongodb_uri, tz_aware=True
        )
        db = mongo_client[settings.db.db_name]
        app.state.mongo_client = mongo_client
        app.state.db = db

        await ensure_indexes(db)

        email = SmtpEmailProvider(
            settings.smtp,
            app_name=settings.app_name,
            app_url=settings.app_url,
            code_ttl_minutes=settings.mfa.mfa_code_expiration_minutes,
        )
        sweeper = attach_services(
            app,
            settings,
            users=UserRepository(db[USERS_COLLECTION]),
            codes=VerificationCodeRepository(
                db[VERIFICATION_CODES_COLLECTION],
                client=mongo_client,
                use_transactions=settings.db.mongodb_transactions,
            ),
            products=ProductRepository(db[PRODUCTS_COLLECTION]),
            email=email,
        )
        if settings.mfa.code_cleanup_interval_seconds > 0:
            sweeper.start()
        log.info("app_started", env=settings.env, db_name=settings.db.db_name)

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await sweeper.stop()
        await mongo_client.close()
        log.info("app_stopped")

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    register_routes(app)

    return app
