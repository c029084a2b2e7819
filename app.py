"""
FastAPI application factory.
create_app() is the single entry point for building the app.

Every stateful collaborator (provider directory, challenge and proof stores,
lifecycle service, expiry sweeper) is built inside the lifespan and hung on
app.state, so each app instance owns its own stores.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import AppSettings
from errors import register_error_handlers
from infrastructure.cache.challenge_store import ChallengeStore
from infrastructure.cache.proof_store import VerifiedProofStore
from infrastructure.captcha.image_captcha import ImageCaptchaGenerator
from infrastructure.captcha.protocol import ChallengeGenerator
from infrastructure.providers.memory_directory import InMemoryProviderDirectory
from infrastructure.providers.protocol import ProviderDirectory
from infrastructure.providers.redis_client import create_redis_client
from infrastructure.providers.redis_directory import RedisProviderDirectory
from routes.captcha_routes import router as captcha_router
from routes.health_routes import router as health_router
from services.captcha_service import CaptchaLifecycleService
from shared.logging import get_logger, sentry_logging_integration, setup_logging
from workers.expiry_sweeper import ExpirySweeper

log = get_logger(__name__)


def create_app(
    settings: Optional[AppSettings] = None,
    provider_directory: Optional[ProviderDirectory] = None,
    generator: Optional[ChallengeGenerator] = None,
) -> FastAPI:
    """Create and return a fully configured FastAPI application.

    *provider_directory* and *generator* override the collaborators built
    from settings; tests use them to avoid Redis and image rendering.
    """
    if settings is None:
        settings = AppSettings()

    setup_logging(settings.logging, env=settings.env)

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
            integrations=[sentry_logging_integration()],
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        redis_client = None
        directory = provider_directory
        if directory is None:
            if settings.redis.redis_uri:
                redis_client = await create_redis_client(
                    settings.redis.redis_uri, timeout=settings.redis.redis_timeout_seconds
                )
                directory = RedisProviderDirectory(
                    redis_client,
                    timeout=settings.redis.redis_timeout_seconds,
                    prefix=settings.redis.redis_key_prefix,
                )
            elif settings.providers.providers_file:
                directory = InMemoryProviderDirectory.from_json_file(
                    settings.providers.providers_file
                )
            else:
                log.warning("provider_store_not_configured")
                directory = InMemoryProviderDirectory()

        service = CaptchaLifecycleService(
            providers=directory,
            generator=generator or ImageCaptchaGenerator(settings.captcha),
            challenges=ChallengeStore(),
            proofs=VerifiedProofStore(),
            settings=settings.captcha,
        )
        sweeper = ExpirySweeper(service, settings.captcha.sweep_interval_seconds)

        app.state.settings = settings
        app.state.provider_directory = directory
        app.state.captcha_service = service
        app.state.sweeper = sweeper

        sweeper.start()

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await sweeper.stop()
        if redis_client is not None:
            await redis_client.aclose()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    # Widgets are embedded on provider sites, so any origin may call the API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(captcha_router, prefix=settings.api_prefix)

    return app
