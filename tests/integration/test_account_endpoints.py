from __future__ import annotations

from pathlib import Path

import sqlalchemy as sa
from alembic.config import Config
from fastapi.testclient import TestClient

from alembic import command
from apps.portal_api.main import create_app
from job_portal.application.ports.image_upload_port import (
    FileAttachment,
    ImageUploadError,
    UploadedImage,
    UploadOptions,
)
from job_portal.config.settings import Settings
from job_portal.infrastructure.db.account_repository import SqlAlchemyAccountRepository
from job_portal.infrastructure.db.session import create_session_factory
from job_portal.infrastructure.http.auth_guard import SESSION_COOKIE_NAME
from job_portal.infrastructure.security.token_service import JwtSessionTokenService

SECRET = "integration-signing-secret-with-enough-length"
PHOTO = ("jane.png", b"\x89PNG\r\n", "image/png")


class FakeImageUploader:
    def __init__(self, *, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple[FileAttachment, UploadOptions | None]] = []

    async def upload(
        self,
        attachment: FileAttachment,
        *,
        options: UploadOptions | None = None,
    ) -> UploadedImage:
        self.calls.append((attachment, options))
        if self.error is not None:
            raise self.error
        return UploadedImage(url=f"https://res.cloudinary.com/demo/{attachment.filename}")


def _upgrade_head(tmp_path: Path, filename: str) -> tuple[str, str]:
    db_path = tmp_path / filename
    sync_url = f"sqlite+pysqlite:///{db_path}"
    async_url = f"sqlite+aiosqlite:///{db_path}"

    alembic_config = Config("alembic.ini")
    alembic_config.set_main_option("sqlalchemy.url", sync_url)
    command.upgrade(alembic_config, "head")
    return sync_url, async_url


def _build_client(async_url: str, *, uploader: FakeImageUploader) -> TestClient:
    settings = Settings(
        _env_file=None,
        DATABASE_URL=async_url,
        SECRET_KEY=SECRET,
        CLOUDINARY_CLOUD_NAME="demo-cloud",
        CLOUDINARY_API_KEY="key-123",
        CLOUDINARY_API_SECRET="secret-xyz",
    )
    app = create_app(
        settings=settings,
        account_repository=SqlAlchemyAccountRepository(create_session_factory(async_url)),
        image_uploader=uploader,
        token_service=JwtSessionTokenService(secret_key=SECRET),
    )
    return TestClient(app)


def _register_form(**overrides: str) -> dict[str, str]:
    form = {
        "fullname": "Jane Doe",
        "email": "jane@x.com",
        "phoneNumber": "555",
        "password": "secret123",
        "role": "applicant",
    }
    form.update(overrides)
    return form


def test_register_login_role_mismatch_and_logout_scenario(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "scenario.db")
    uploader = FakeImageUploader()

    with _build_client(async_url, uploader=uploader) as client:
        register = client.post(
            "/api/v1/user/register",
            data=_register_form(),
            files={"file": PHOTO},
        )
        login = client.post(
            "/api/v1/user/login",
            json={"email": "jane@x.com", "password": "secret123", "role": "applicant"},
        )
        wrong_role = client.post(
            "/api/v1/user/login",
            json={"email": "jane@x.com", "password": "secret123", "role": "recruiter"},
        )
        logout = client.get("/api/v1/user/logout")

    assert register.status_code == 201
    assert register.json() == {"message": "Account created successfully.", "success": True}

    assert login.status_code == 200
    body = login.json()
    assert body["success"] is True
    assert body["message"] == "Welcome back Jane Doe"
    assert body["user"]["fullname"] == "Jane Doe"
    assert body["user"]["phoneNumber"] == "555"
    assert body["user"]["profile"]["profilePhoto"] == "https://res.cloudinary.com/demo/jane.png"
    assert "password" not in str(body["user"]).lower()
    login_cookie = login.headers["set-cookie"]
    assert login_cookie.startswith(f"{SESSION_COOKIE_NAME}=")
    assert "Max-Age=86400" in login_cookie
    assert "httponly" in login_cookie.lower()
    assert "samesite=strict" in login_cookie.lower()

    assert wrong_role.status_code == 400
    assert wrong_role.json() == {
        "message": "Account doesn't exist with current role.",
        "success": False,
    }
    assert SESSION_COOKIE_NAME not in wrong_role.headers.get("set-cookie", "")

    assert logout.status_code == 200
    assert logout.json() == {"message": "Logged out successfully.", "success": True}
    logout_cookie = logout.headers["set-cookie"]
    assert logout_cookie.startswith(f"{SESSION_COOKIE_NAME}=")
    assert "Max-Age=0" in logout_cookie

    with sa.create_engine(sync_url).begin() as connection:
        row = connection.execute(
            sa.text("SELECT email, password_hash, role FROM accounts")
        ).mappings().one()
    assert row["email"] == "jane@x.com"
    assert row["role"] == "applicant"
    assert row["password_hash"] != "secret123"
    assert row["password_hash"].startswith("$2b$10$")


def test_register_validation_and_duplicate_email(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "register_errors.db")
    uploader = FakeImageUploader()

    with _build_client(async_url, uploader=uploader) as client:
        missing_field = client.post(
            "/api/v1/user/register",
            data=_register_form(fullname=""),
            files={"file": PHOTO},
        )
        missing_file = client.post("/api/v1/user/register", data=_register_form())
        first = client.post(
            "/api/v1/user/register",
            data=_register_form(),
            files={"file": PHOTO},
        )
        duplicate = client.post(
            "/api/v1/user/register",
            data=_register_form(fullname="Jane Again"),
            files={"file": PHOTO},
        )

    assert missing_field.status_code == 400
    assert missing_field.json() == {"message": "All fields are required.", "success": False}
    assert missing_file.status_code == 400
    assert missing_file.json() == {"message": "Profile picture is required.", "success": False}
    assert first.status_code == 201
    assert duplicate.status_code == 400
    assert duplicate.json() == {
        "message": "User already exists with this email.",
        "success": False,
    }

    with sa.create_engine(sync_url).begin() as connection:
        count = connection.execute(sa.text("SELECT COUNT(*) FROM accounts")).scalar_one()
    assert count == 1


def test_register_upload_failure_returns_500_without_account(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "register_upload_failure.db")
    uploader = FakeImageUploader(error=ImageUploadError("upload failed with status 500"))

    with _build_client(async_url, uploader=uploader) as client:
        response = client.post(
            "/api/v1/user/register",
            data=_register_form(),
            files={"file": PHOTO},
        )

    assert response.status_code == 500
    assert response.json()["success"] is False
    assert "status 500" not in response.json()["message"]

    with sa.create_engine(sync_url).begin() as connection:
        count = connection.execute(sa.text("SELECT COUNT(*) FROM accounts")).scalar_one()
    assert count == 0


def test_register_unexpected_error_returns_generic_500(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "register_unexpected.db")
    uploader = FakeImageUploader(error=RuntimeError("boom at 0xdeadbeef"))

    with _build_client(async_url, uploader=uploader) as client:
        response = client.post(
            "/api/v1/user/register",
            data=_register_form(),
            files={"file": PHOTO},
        )

    assert response.status_code == 500
    assert response.json() == {
        "message": "An error occurred while creating the account.",
        "success": False,
    }


def test_login_errors_do_not_reveal_which_credential_failed(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "login_errors.db")

    with _build_client(async_url, uploader=FakeImageUploader()) as client:
        client.post("/api/v1/user/register", data=_register_form(), files={"file": PHOTO})
        wrong_password = client.post(
            "/api/v1/user/login",
            json={"email": "jane@x.com", "password": "nope", "role": "applicant"},
        )
        unknown_email = client.post(
            "/api/v1/user/login",
            json={"email": "ghost@x.com", "password": "secret123", "role": "applicant"},
        )
        missing = client.post("/api/v1/user/login", json={"email": "jane@x.com"})

    assert wrong_password.status_code == 400
    assert unknown_email.status_code == 400
    assert wrong_password.json() == unknown_email.json()
    assert wrong_password.json()["message"] == "Incorrect email or password."
    assert missing.status_code == 400
    assert missing.json() == {"message": "Something is missing", "success": False}


def test_profile_update_merges_fields_and_stores_resume(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "profile_update.db")
    uploader = FakeImageUploader()

    with _build_client(async_url, uploader=uploader) as client:
        client.post("/api/v1/user/register", data=_register_form(), files={"file": PHOTO})
        client.post(
            "/api/v1/user/login",
            json={"email": "jane@x.com", "password": "secret123", "role": "applicant"},
        )
        bio_only = client.post("/api/v1/user/profile/update", data={"bio": "x"})
        with_resume = client.post(
            "/api/v1/user/profile/update",
            data={"skills": "python,sql", "phoneNumber": "556"},
            files={"file": ("cv.pdf", b"%PDF-1.4", "application/pdf")},
        )

    assert bio_only.status_code == 200
    user = bio_only.json()["user"]
    assert bio_only.json()["message"] == "Profile updated successfully."
    assert user["profile"]["bio"] == "x"
    assert user["fullname"] == "Jane Doe"
    assert user["email"] == "jane@x.com"
    assert user["phoneNumber"] == "555"
    assert user["profile"]["skills"] == []
    assert user["profile"]["profilePhoto"] == "https://res.cloudinary.com/demo/jane.png"

    assert with_resume.status_code == 200
    user = with_resume.json()["user"]
    assert user["profile"]["bio"] == "x"
    assert user["profile"]["skills"] == ["python", "sql"]
    assert user["phoneNumber"] == "556"
    assert user["profile"]["resume"] == "https://res.cloudinary.com/demo/cv.pdf"
    assert user["profile"]["resumeOriginalName"] == "cv.pdf"
    _, options = uploader.calls[-1]
    assert options is not None
    assert options.folder == "user_profiles"
    assert options.normalize_format == "jpg"


def test_profile_update_requires_valid_session_cookie(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "profile_update_auth.db")

    with _build_client(async_url, uploader=FakeImageUploader()) as client:
        anonymous = client.post("/api/v1/user/profile/update", data={"bio": "x"})
        client.cookies.set(SESSION_COOKIE_NAME, "not-a-jwt")
        forged = client.post("/api/v1/user/profile/update", data={"bio": "x"})

    assert anonymous.status_code == 401
    assert anonymous.json() == {"message": "User not authenticated", "success": False}
    assert forged.status_code == 401
    assert forged.json() == {"message": "Invalid token", "success": False}


def test_profile_update_for_deleted_account_returns_404(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "profile_update_missing.db")

    with _build_client(async_url, uploader=FakeImageUploader()) as client:
        client.post("/api/v1/user/register", data=_register_form(), files={"file": PHOTO})
        client.post(
            "/api/v1/user/login",
            json={"email": "jane@x.com", "password": "secret123", "role": "applicant"},
        )
        with sa.create_engine(sync_url).begin() as connection:
            connection.execute(sa.text("DELETE FROM accounts"))
        response = client.post("/api/v1/user/profile/update", data={"bio": "x"})

    assert response.status_code == 404
    assert response.json() == {"message": "User not found.", "success": False}


def test_password_longer_than_bcrypt_limit_registers_and_logs_in(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "long_password.db")
    long_password = "a" * 80

    with _build_client(async_url, uploader=FakeImageUploader()) as client:
        register = client.post(
            "/api/v1/user/register",
            data=_register_form(password=long_password),
            files={"file": PHOTO},
        )
        login = client.post(
            "/api/v1/user/login",
            json={"email": "jane@x.com", "password": long_password, "role": "applicant"},
        )

    assert register.status_code == 201
    assert login.status_code == 200
    assert login.json()["message"] == "Welcome back Jane Doe"

    with sa.create_engine(sync_url).begin() as connection:
        count = connection.execute(sa.text("SELECT COUNT(*) FROM accounts")).scalar_one()
    assert count == 1


def test_malformed_login_bodies_return_failure_envelope(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "login_malformed.db")

    with _build_client(async_url, uploader=FakeImageUploader()) as client:
        wrong_type = client.post(
            "/api/v1/user/login",
            json={"email": 5, "password": "secret123", "role": "applicant"},
        )
        form_encoded = client.post(
            "/api/v1/user/login",
            data={"email": "jane@x.com", "password": "secret123", "role": "applicant"},
        )
        broken_json = client.post(
            "/api/v1/user/login",
            content=b'{"email": ',
            headers={"Content-Type": "application/json"},
        )

    for response in (wrong_type, form_encoded, broken_json):
        assert response.status_code == 400
        assert response.json() == {"message": "Something is missing", "success": False}
