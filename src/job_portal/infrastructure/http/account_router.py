"""FastAPI router exposing account registration, login, logout and profile update."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Body, Cookie, FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from job_portal.application.dto.account_models import (
    AccountResponse,
    AccountView,
    LoginRequest,
    MessageResponse,
)
from job_portal.application.errors import AccountWorkflowError
from job_portal.application.ports.image_upload_port import FileAttachment
from job_portal.application.services.account_service import (
    LOGIN_MISSING_MESSAGE,
    MISSING_FIELDS_MESSAGE,
    AccountService,
    LoginInput,
    ProfileUpdateInput,
    RegisterAccountInput,
)
from job_portal.infrastructure.http.auth_guard import (
    SESSION_COOKIE_NAME,
    InvalidAuthTokenError,
    MissingAuthTokenError,
    SessionAuthGuard,
)

REGISTER_FAILED_MESSAGE = "An error occurred while creating the account."
INTERNAL_ERROR_MESSAGE = "Internal server error."
INVALID_REQUEST_MESSAGE = "Invalid request."
ACCOUNT_ROUTE_PREFIX = "/api/v1/user"

_INVALID_REQUEST_MESSAGES = {
    f"{ACCOUNT_ROUTE_PREFIX}/register": MISSING_FIELDS_MESSAGE,
    f"{ACCOUNT_ROUTE_PREFIX}/login": LOGIN_MISSING_MESSAGE,
}

logger = logging.getLogger(__name__)

FormText = Annotated[str | None, Form()]


def build_account_router(
    *,
    account_service: AccountService,
    auth_guard: SessionAuthGuard,
) -> APIRouter:
    """Build router mapping each account operation to one HTTP request."""

    router = APIRouter(prefix=ACCOUNT_ROUTE_PREFIX, tags=["account"])

    @router.post("/register")
    async def register(
        fullname: FormText = None,
        email: FormText = None,
        phone_number: Annotated[str | None, Form(alias="phoneNumber")] = None,
        password: FormText = None,
        role: FormText = None,
        file: Annotated[UploadFile | None, File()] = None,
    ) -> JSONResponse:
        try:
            await account_service.register(
                RegisterAccountInput(
                    fullname=fullname,
                    email=email,
                    phone_number=phone_number,
                    password=password,
                    role=role,
                    profile_photo=await _read_attachment(file),
                )
            )
        except AccountWorkflowError as exc:
            return _failure_response(exc)
        except Exception:  # noqa: BLE001
            logger.exception("account_register_unexpected_error")
            return _message_response(500, REGISTER_FAILED_MESSAGE, success=False)

        return _message_response(201, "Account created successfully.", success=True)

    @router.post("/login")
    async def login(
        payload: Annotated[LoginRequest | None, Body()] = None,
    ) -> JSONResponse:
        login_request = payload or LoginRequest()
        try:
            result = await account_service.login(
                LoginInput(
                    email=login_request.email,
                    password=login_request.password,
                    role=login_request.role,
                )
            )
        except AccountWorkflowError as exc:
            return _failure_response(exc)
        except Exception:  # noqa: BLE001
            logger.exception("account_login_unexpected_error")
            return _message_response(500, INTERNAL_ERROR_MESSAGE, success=False)

        body = AccountResponse(
            message=f"Welcome back {result.account.fullname}",
            success=True,
            user=AccountView.from_record(result.account),
        )
        response = JSONResponse(
            status_code=200,
            content=body.model_dump(mode="json", by_alias=True),
        )
        response.set_cookie(
            SESSION_COOKIE_NAME,
            result.session.token,
            max_age=result.session.max_age_seconds,
            httponly=True,
            samesite="strict",
        )
        return response

    @router.get("/logout")
    async def logout() -> JSONResponse:
        result = account_service.logout()
        response = _message_response(200, "Logged out successfully.", success=True)
        if result.clear_session:
            response.set_cookie(SESSION_COOKIE_NAME, "", max_age=0)
        return response

    @router.post("/profile/update")
    async def update_profile(
        session_token: Annotated[str | None, Cookie(alias=SESSION_COOKIE_NAME)] = None,
        fullname: FormText = None,
        email: FormText = None,
        phone_number: Annotated[str | None, Form(alias="phoneNumber")] = None,
        bio: FormText = None,
        skills: FormText = None,
        file: Annotated[UploadFile | None, File()] = None,
    ) -> JSONResponse:
        try:
            account_id = auth_guard.require_account_id(session_token=session_token)
        except (MissingAuthTokenError, InvalidAuthTokenError) as exc:
            return _message_response(401, str(exc), success=False)

        try:
            account = await account_service.update_profile(
                account_id=account_id,
                payload=ProfileUpdateInput(
                    fullname=fullname,
                    email=email,
                    phone_number=phone_number,
                    bio=bio,
                    skills=skills,
                    resume=await _read_attachment(file),
                ),
            )
        except AccountWorkflowError as exc:
            return _failure_response(exc)
        except Exception:  # noqa: BLE001
            logger.exception("account_profile_update_unexpected_error account_id=%s", account_id)
            return _message_response(500, INTERNAL_ERROR_MESSAGE, success=False)

        body = AccountResponse(
            message="Profile updated successfully.",
            success=True,
            user=AccountView.from_record(account),
        )
        return JSONResponse(status_code=200, content=body.model_dump(mode="json", by_alias=True))

    return router


def install_request_validation_handler(app: FastAPI) -> None:
    """Answer malformed request bodies with the failure envelope instead of a 422."""

    @app.exception_handler(RequestValidationError)
    async def _invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        path = request.url.path
        logger.info("account_request_invalid path=%s error_count=%s", path, len(exc.errors()))
        message = _INVALID_REQUEST_MESSAGES.get(path, INVALID_REQUEST_MESSAGE)
        return _message_response(400, message, success=False)


async def _read_attachment(file: UploadFile | None) -> FileAttachment | None:
    """Read an uploaded multipart file; an empty file part counts as absent."""

    if file is None or not file.filename:
        return None
    return FileAttachment(
        content=await file.read(),
        filename=file.filename,
        content_type=file.content_type,
    )


def _failure_response(exc: AccountWorkflowError) -> JSONResponse:
    return _message_response(exc.status_code, exc.message, success=False)


def _message_response(status_code: int, message: str, *, success: bool) -> JSONResponse:
    body = MessageResponse(message=message, success=success)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))
