"""
Image hosting adapters.

Two interchangeable backends store uploaded images and return public URLs:
ImageHippo (multipart form upload with an API key) and Cloudinary (SDK upload
with folder/public_id options). The rest of the application only sees the
ImageHost interface; IMAGE_HOST_PROVIDER picks the implementation.
"""
import asyncio
import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Optional

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
import httpx
from fastapi import UploadFile, status

from hostel_api.config import Settings, settings
from hostel_api.utils.image_converter import shrink_for_upload
from hostel_api.utils.responses import api_error

logger = logging.getLogger(__name__)

DELETED = "deleted"
NOT_FOUND = "not_found"

UPLOAD_TIMEOUT_SECONDS = 30.0


class ImageHostError(Exception):
    """
    Raised when the image host cannot complete a request.
    status_code is what the API should answer with.
    """

    def __init__(self, message: str, status_code: int = status.HTTP_502_BAD_GATEWAY, details: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class ImageHostConfigError(ImageHostError):
    """Raised when credentials for the configured image host are missing."""

    def __init__(self, message: str):
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@dataclass
class UploadedImage:
    url: str
    deletion_handle: str


class ImageHost(ABC):
    """Capability interface for storing and removing hosted images."""

    name = "image-host"

    @abstractmethod
    async def upload(
        self,
        content: bytes,
        filename: str,
        content_type: str,
        folder: str,
        name_hint: Optional[str] = None,
    ) -> UploadedImage:
        """Store the bytes and return the public URL plus a deletion handle."""

    @abstractmethod
    async def delete(self, handle_or_url: str) -> str:
        """Remove a hosted image. Returns DELETED or NOT_FOUND."""

    def deletion_target(self, image_url: Optional[str] = None, public_id: Optional[str] = None) -> str:
        """
        Pick the identifier this backend deletes by.

        Raises:
            ImageHostError: 400 if the needed identifier is missing
        """
        target = public_id or image_url
        if not target:
            raise ImageHostError("image_url or public_id is required", status_code=status.HTTP_400_BAD_REQUEST)
        return target

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether the credentials this backend needs are present."""


def _parse_body(response: httpx.Response) -> Any:
    """Read the body once; JSON when possible, raw text otherwise."""
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text


def _upstream_details(response: httpx.Response, body: Any) -> Dict[str, Any]:
    return {
        "status": response.status_code,
        "statusText": response.reason_phrase,
        "response": body,
    }


class ImageHippoHost(ImageHost):
    """ImageHippo backend. Images are deleted by their URL."""

    name = "imagehippo"

    def __init__(self, config: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = (config.IMAGEHIPPO_API_KEY or "").strip()
        self.upload_url = config.IMAGEHIPPO_UPLOAD_URL
        self.delete_url = config.IMAGEHIPPO_DELETE_URL
        self._transport = transport

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _require_key(self) -> str:
        if not self.api_key:
            raise ImageHostConfigError("IMAGEHIPPO_API_KEY/IMGHIPPO_API_KEY is missing on server")
        return self.api_key

    def deletion_target(self, image_url=None, public_id=None):
        # ImageHippo only knows images by their URL
        if not image_url:
            raise ImageHostError("image_url is required to delete from ImageHippo", status_code=status.HTTP_400_BAD_REQUEST)
        return image_url

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=UPLOAD_TIMEOUT_SECONDS)

    async def upload(self, content, filename, content_type, folder, name_hint=None):
        api_key = self._require_key()

        form = {"api_key": api_key}
        if name_hint:
            form["title"] = name_hint

        try:
            async with self._client() as client:
                response = await client.post(
                    self.upload_url,
                    data=form,
                    files={"file": (filename, content, content_type)},
                )
        except httpx.HTTPError as e:
            logger.error(f"ImageHippo upload request failed: {str(e)}", exc_info=True)
            raise ImageHostError("Failed to upload image to ImageHippo", details=str(e))

        body = _parse_body(response)

        if not response.is_success:
            logger.warning(f"ImageHippo upload rejected with status {response.status_code}")
            raise ImageHostError(
                "ImageHippo upload failed",
                status_code=response.status_code if response.status_code >= 400 else status.HTTP_502_BAD_GATEWAY,
                details=_upstream_details(response, body),
            )

        payload = body.get("data") if isinstance(body, dict) else None
        url = None
        if isinstance(payload, dict):
            url = payload.get("view_url") or payload.get("url")

        if not isinstance(body, dict) or not body.get("success") or not url:
            logger.error(f"ImageHippo returned no image URL: {body}")
            raise ImageHostError("Failed to get image URL from ImageHippo", details=body)

        logger.info(f"Successfully uploaded image to ImageHippo: {url}")
        return UploadedImage(url=url, deletion_handle=url)

    async def delete(self, handle_or_url):
        api_key = self._require_key()

        try:
            async with self._client() as client:
                response = await client.post(
                    self.delete_url,
                    data={"api_key": api_key, "url": handle_or_url},
                )
        except httpx.HTTPError as e:
            logger.error(f"ImageHippo delete request failed: {str(e)}", exc_info=True)
            raise ImageHostError("Failed to delete image from ImageHippo", details=str(e))

        body = _parse_body(response)

        if response.status_code == status.HTTP_404_NOT_FOUND:
            return NOT_FOUND
        if not response.is_success:
            raise ImageHostError(
                "Failed to delete image from ImageHippo",
                status_code=response.status_code if response.status_code >= 400 else status.HTTP_502_BAD_GATEWAY,
                details=_upstream_details(response, body),
            )
        if isinstance(body, dict) and body.get("success") is False:
            if body.get("status") == status.HTTP_404_NOT_FOUND:
                return NOT_FOUND
            raise ImageHostError("Failed to delete image from ImageHippo", details=body)

        logger.info(f"Successfully deleted image from ImageHippo: {handle_or_url}")
        return DELETED


def extract_public_id_from_url(cloudinary_url: str) -> str:
    """
    Extract Cloudinary public_id from a delivery URL.

    Cloudinary URLs typically look like:
    https://res.cloudinary.com/{cloud_name}/image/upload/v{version}/{public_id}.{format}
    or
    https://res.cloudinary.com/{cloud_name}/image/upload/{public_id}.{format}

    Raises:
        ValueError: If URL format is invalid
    """
    match = re.search(r'/image/upload(?:/v\d+)?/(.+)$', cloudinary_url)
    if not match:
        raise ValueError(f"Invalid Cloudinary URL format: {cloudinary_url}")

    # Strip the extension from the last segment only; folders may contain dots
    parts = match.group(1).split('/')
    if '.' in parts[-1]:
        parts[-1] = parts[-1].rsplit('.', 1)[0]
    return '/'.join(parts)


class CloudinaryHost(ImageHost):
    """Cloudinary backend. Images are deleted by public_id."""

    name = "cloudinary"

    def __init__(self, config: Settings):
        self.cloud_name = config.CLOUDINARY_CLOUD_NAME
        self.api_key = config.CLOUDINARY_API_KEY
        self.api_secret = config.CLOUDINARY_API_SECRET
        if self.is_configured():
            cloudinary.config(
                cloud_name=self.cloud_name,
                api_key=self.api_key,
                api_secret=self.api_secret,
                secure=True  # Always use HTTPS for secure URLs
            )

    def is_configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def _require_config(self) -> None:
        for key in ("CLOUDINARY_CLOUD_NAME", "CLOUDINARY_API_KEY", "CLOUDINARY_API_SECRET"):
            if not getattr(self, key.replace("CLOUDINARY_", "").lower()):
                raise ImageHostConfigError(f"{key} is missing on server")

    async def upload(self, content, filename, content_type, folder, name_hint=None):
        self._require_config()

        try:
            # The SDK blocks; keep the event loop free
            result = await asyncio.to_thread(
                cloudinary.uploader.upload,
                content,
                folder=folder,
                context={"caption": name_hint} if name_hint else None,
                fetch_format="auto",
                quality="auto",
                transformation=[
                    {"width": 1920, "height": 1080, "crop": "limit"}
                ],
            )
        except CloudinaryError as e:
            logger.error(f"Cloudinary upload failed: {str(e)}")
            raise ImageHostError("Cloudinary upload failed", details=str(e))

        url = result.get("secure_url") if isinstance(result, dict) else None
        if not url:
            raise ImageHostError("Failed to get image URL from Cloudinary", details=result)

        logger.info(f"Successfully uploaded image: {result.get('public_id')}")
        return UploadedImage(url=url, deletion_handle=result.get("public_id") or extract_public_id_from_url(url))

    async def delete(self, handle_or_url):
        self._require_config()

        public_id = handle_or_url
        if handle_or_url.startswith(("http://", "https://")):
            try:
                public_id = extract_public_id_from_url(handle_or_url)
            except ValueError as e:
                raise ImageHostError(str(e), status_code=status.HTTP_400_BAD_REQUEST)

        try:
            result = await asyncio.to_thread(
                cloudinary.uploader.destroy,
                public_id,
                invalidate=True,  # Invalidate CDN cache
                resource_type="image",
            )
        except CloudinaryError as e:
            logger.error(f"Cloudinary delete failed for {public_id}: {str(e)}")
            raise ImageHostError("Failed to delete image from Cloudinary", details=str(e))

        outcome = result.get("result") if isinstance(result, dict) else None
        if outcome == "ok":
            logger.info(f"Successfully deleted image from Cloudinary: {public_id}")
            return DELETED
        if outcome == "not found":
            return NOT_FOUND
        raise ImageHostError("Unexpected Cloudinary delete result", details=result)


IMAGE_HOSTS = {
    ImageHippoHost.name: ImageHippoHost,
    CloudinaryHost.name: CloudinaryHost,
}


def build_image_host(config: Settings) -> ImageHost:
    """
    Instantiate the backend named by IMAGE_HOST_PROVIDER.

    Raises:
        ValueError: If the provider name is unknown
    """
    provider = config.IMAGE_HOST_PROVIDER.strip().lower()
    try:
        host_class = IMAGE_HOSTS[provider]
    except KeyError:
        raise ValueError(f"Unknown IMAGE_HOST_PROVIDER '{config.IMAGE_HOST_PROVIDER}'")
    return host_class(config)


@lru_cache
def get_image_host() -> ImageHost:
    """FastAPI dependency returning the process-wide image host."""
    host = build_image_host(settings)
    logger.info(f"Using image host: {host.name}")
    return host


async def upload_file(
    host: ImageHost,
    file: UploadFile,
    folder: str,
    name_hint: Optional[str] = None,
) -> UploadedImage:
    """
    Read an uploaded file and forward it to the image host.

    Raises:
        HTTPException: 400 if the file is empty or not an image
        ImageHostError: If the image host fails
    """
    filename = file.filename or "upload"
    content_type = file.content_type or ""
    if not content_type.startswith("image/"):
        raise api_error(
            status.HTTP_400_BAD_REQUEST,
            "Invalid file type",
            details=f"File '{filename}' is not a valid image file",
        )

    content = await file.read()
    if not content:
        raise api_error(status.HTTP_400_BAD_REQUEST, "Uploaded file is empty")

    if settings.CONVERT_UPLOADS_TO_WEBP:
        content, filename, content_type = await asyncio.to_thread(
            shrink_for_upload, content, filename, content_type
        )

    logger.info(f"Uploading {filename} ({len(content):,} bytes) to {host.name} folder '{folder}'")
    return await host.upload(content, filename, content_type, folder, name_hint)
