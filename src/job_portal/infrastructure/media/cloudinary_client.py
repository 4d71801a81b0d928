"""Cloudinary upload adapter implementing the image upload port over HTTP."""

from __future__ import annotations

import asyncio
import base64
import hashlib
import json
import mimetypes
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from job_portal.application.ports.image_upload_port import (
    FileAttachment,
    ImageUploadError,
    ImageUploadPort,
    UploadedImage,
    UploadOptions,
)

CLOUDINARY_API_BASE_URL = "https://api.cloudinary.com/v1_1"
_DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class UploadApiResponse:
    """Status and raw body of one Cloudinary upload API reply."""

    status_code: int
    body_bytes: bytes


class UploadTransportPort(Protocol):
    """Posts a signed upload form to the Cloudinary upload endpoint."""

    async def post_form(
        self,
        *,
        url: str,
        form: dict[str, str],
        timeout_seconds: float,
    ) -> UploadApiResponse:
        """Send `form` url-encoded and return the reply, including non-2xx statuses."""


class UrllibUploadTransport:
    """Upload transport built on urllib; the blocking POST runs in a worker thread."""

    async def post_form(
        self,
        *,
        url: str,
        form: dict[str, str],
        timeout_seconds: float,
    ) -> UploadApiResponse:
        request = Request(
            url=url,
            data=urlencode(form).encode("utf-8"),
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            method="POST",
        )
        return await asyncio.to_thread(_send, request, timeout_seconds)


def _send(request: Request, timeout_seconds: float) -> UploadApiResponse:
    try:
        with urlopen(request, timeout=timeout_seconds) as response:
            status_code = int(response.getcode())
            return UploadApiResponse(status_code=status_code, body_bytes=response.read())
    except HTTPError as error:
        # Cloudinary explains rejected uploads in the JSON error body.
        return UploadApiResponse(status_code=int(error.code), body_bytes=error.read())
    except URLError as error:
        raise ImageUploadError(f"cannot reach upload API: {error.reason}") from error


class CloudinaryImageUploader(ImageUploadPort):
    """Signed Cloudinary upload client returning the `secure_url` of stored assets."""

    def __init__(
        self,
        *,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        transport: UploadTransportPort | None = None,
        timeout_seconds: float = 30.0,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._cloud_name = cloud_name
        self._api_key = api_key
        self._api_secret = api_secret
        self._transport = transport or UrllibUploadTransport()
        self._timeout_seconds = timeout_seconds
        self._clock = clock or time.time

    async def upload(
        self,
        attachment: FileAttachment,
        *,
        options: UploadOptions | None = None,
    ) -> UploadedImage:
        """Upload attachment as a base64 data URI and return its durable URL."""

        resolved = options or UploadOptions()
        params = _upload_params(resolved)
        params["timestamp"] = str(int(self._clock()))
        signature = sign_params(params, api_secret=self._api_secret)

        form = {
            **params,
            "file": to_data_uri(attachment),
            "api_key": self._api_key,
            "signature": signature,
        }
        url = (
            f"{CLOUDINARY_API_BASE_URL}/{quote(self._cloud_name, safe='')}/"
            f"{quote(resolved.resource_type, safe='')}/upload"
        )
        try:
            response = await self._transport.post_form(
                url=url,
                form=form,
                timeout_seconds=self._timeout_seconds,
            )
        except ImageUploadError:
            raise
        except Exception as error:  # noqa: BLE001
            raise ImageUploadError("upload transport failure") from error

        if response.status_code < 200 or response.status_code >= 300:
            raise ImageUploadError(
                f"upload failed with status {response.status_code}: "
                f"{_decode_error_payload(response.body_bytes)}"
            )
        return UploadedImage(url=_extract_secure_url(response.body_bytes))


def to_data_uri(attachment: FileAttachment) -> str:
    """Encode attachment bytes as a base64 data URI using its declared content type."""

    content_type = (
        attachment.content_type
        or mimetypes.guess_type(attachment.filename)[0]
        or _DEFAULT_CONTENT_TYPE
    )
    encoded = base64.b64encode(attachment.content).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


def sign_params(params: dict[str, str], *, api_secret: str) -> str:
    """Return Cloudinary's SHA-1 signature over sorted `key=value` pairs."""

    to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


def _upload_params(options: UploadOptions) -> dict[str, str]:
    params: dict[str, str] = {}
    if options.folder:
        params["folder"] = options.folder
    if options.normalize_format:
        params["format"] = options.normalize_format
    if options.multi_page:
        params["pages"] = "true"
    return params


def _extract_secure_url(payload: bytes) -> str:
    try:
        decoded = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as error:
        raise ImageUploadError("upload returned invalid JSON payload") from error
    if not isinstance(decoded, dict):
        raise ImageUploadError("upload returned non-object JSON payload")
    secure_url = decoded.get("secure_url")
    if isinstance(secure_url, str) and secure_url:
        return secure_url
    raise ImageUploadError("upload response missing secure_url")


def _decode_error_payload(payload: bytes) -> str:
    if not payload:
        return "empty response body"
    try:
        decoded = payload.decode("utf-8")
    except UnicodeDecodeError:
        return "<binary>"
    return decoded[:200]
