"""portal-api entrypoint and HTTP route wiring."""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI

from job_portal.application.ports.account_repository_port import AccountRepositoryPort
from job_portal.application.ports.image_upload_port import ImageUploadPort
from job_portal.application.services.account_service import AccountService
from job_portal.config.settings import Settings, load_settings
from job_portal.domain.auth.credentials import parse_account_roles
from job_portal.infrastructure.db.account_repository import SqlAlchemyAccountRepository
from job_portal.infrastructure.db.session import create_session_factory
from job_portal.infrastructure.http.account_router import (
    build_account_router,
    install_request_validation_handler,
)
from job_portal.infrastructure.http.auth_guard import SessionAuthGuard
from job_portal.infrastructure.logging import configure_logging
from job_portal.infrastructure.media.cloudinary_client import CloudinaryImageUploader
from job_portal.infrastructure.security.password_hasher import BcryptPasswordHasher
from job_portal.infrastructure.security.token_service import JwtSessionTokenService

PORTAL_API_HOST = "0.0.0.0"
PORTAL_API_PORT = 8000
logger = logging.getLogger(__name__)


def build_image_uploader(settings: Settings) -> CloudinaryImageUploader:
    """Build Cloudinary upload adapter from process settings."""

    return CloudinaryImageUploader(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
        timeout_seconds=settings.cloudinary_timeout_seconds,
    )


def create_app(
    *,
    settings: Settings | None = None,
    account_repository: AccountRepositoryPort | None = None,
    image_uploader: ImageUploadPort | None = None,
    token_service: JwtSessionTokenService | None = None,
) -> FastAPI:
    """Create FastAPI app exposing account routes.

    Settings are loaded once here; missing required values (the signing secret
    included) raise a validation error and abort startup.
    """

    if settings is None:
        settings = load_settings()
    configure_logging(level=settings.log_level)

    if account_repository is None:
        account_repository = SqlAlchemyAccountRepository(
            create_session_factory(settings.database_url)
        )
    if image_uploader is None:
        image_uploader = build_image_uploader(settings)
    if token_service is None:
        token_service = JwtSessionTokenService(secret_key=settings.secret_key)

    account_service = AccountService(
        accounts=account_repository,
        password_hasher=BcryptPasswordHasher(),
        token_issuer=token_service,
        image_uploader=image_uploader,
        allowed_roles=parse_account_roles(roles=settings.account_roles),
    )

    app = FastAPI()
    install_request_validation_handler(app)
    app.include_router(
        build_account_router(
            account_service=account_service,
            auth_guard=SessionAuthGuard(token_service=token_service),
        )
    )
    logger.info("portal_api_app_created")
    return app


def run_asgi_server(*, host: str = PORTAL_API_HOST, port: int = PORTAL_API_PORT) -> None:
    """Run portal-api as a long-lived ASGI process using application factory mode."""

    uvicorn.run(
        "apps.portal_api.main:create_app",
        host=host,
        port=port,
        factory=True,
    )


def main() -> None:
    """Run portal-api runtime process."""

    run_asgi_server()


if __name__ == "__main__":
    main()
