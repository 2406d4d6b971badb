import io

import httpx
import pytest
from fastapi import HTTPException
from starlette.datastructures import Headers, UploadFile

from hostel_api.config import Settings
from hostel_api.services.image_host import (
    DELETED,
    NOT_FOUND,
    CloudinaryHost,
    ImageHippoHost,
    ImageHostConfigError,
    ImageHostError,
    build_image_host,
    extract_public_id_from_url,
    upload_file,
)

UPLOAD_URL = "https://hippo.test/v1/upload"
DELETE_URL = "https://hippo.test/v1/delete"


def make_settings(**overrides):
    values = {
        "IMAGEHIPPO_API_KEY": "test-key",
        "IMAGEHIPPO_UPLOAD_URL": UPLOAD_URL,
        "IMAGEHIPPO_DELETE_URL": DELETE_URL,
        "CLOUDINARY_CLOUD_NAME": "",
        "CLOUDINARY_API_KEY": "",
        "CLOUDINARY_API_SECRET": "",
    }
    values.update(overrides)
    return Settings(**values)


def hippo_with(handler, **overrides):
    return ImageHippoHost(make_settings(**overrides), transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_imagehippo_upload_returns_view_url():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = request.read()
        return httpx.Response(200, json={
            "success": True,
            "data": {"view_url": "https://i.imghippo.com/files/abc123.jpg", "url": "https://imghippo.com/i/abc123"},
        })

    host = hippo_with(handler)
    uploaded = await host.upload(b"jpeg-bytes", "room.jpg", "image/jpeg", "gallery", "Study Room")

    assert uploaded.url == "https://i.imghippo.com/files/abc123.jpg"
    assert uploaded.deletion_handle == uploaded.url
    assert seen["url"] == UPLOAD_URL
    assert b'name="api_key"' in seen["body"]
    assert b"test-key" in seen["body"]
    assert b'name="title"' in seen["body"]
    assert b'filename="room.jpg"' in seen["body"]


@pytest.mark.asyncio
async def test_imagehippo_upload_passes_through_error_status():
    def handler(request):
        return httpx.Response(413, text="Payload Too Large")

    host = hippo_with(handler)

    with pytest.raises(ImageHostError) as exc_info:
        await host.upload(b"bytes", "big.jpg", "image/jpeg", "gallery")

    assert exc_info.value.status_code == 413
    assert exc_info.value.details["status"] == 413
    assert exc_info.value.details["response"] == "Payload Too Large"


@pytest.mark.asyncio
async def test_imagehippo_upload_without_url_is_bad_gateway():
    def handler(request):
        return httpx.Response(200, json={"success": True, "data": {}})

    host = hippo_with(handler)

    with pytest.raises(ImageHostError) as exc_info:
        await host.upload(b"bytes", "room.jpg", "image/jpeg", "gallery")

    assert exc_info.value.status_code == 502
    assert exc_info.value.message == "Failed to get image URL from ImageHippo"


@pytest.mark.asyncio
async def test_imagehippo_upload_network_error_is_bad_gateway():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    host = hippo_with(handler)

    with pytest.raises(ImageHostError) as exc_info:
        await host.upload(b"bytes", "room.jpg", "image/jpeg", "gallery")

    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_imagehippo_missing_key_is_config_error():
    def handler(request):
        raise AssertionError("no request expected without an API key")

    host = hippo_with(handler, IMAGEHIPPO_API_KEY="")

    assert host.is_configured() is False
    with pytest.raises(ImageHostConfigError) as exc_info:
        await host.upload(b"bytes", "room.jpg", "image/jpeg", "gallery")
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_imagehippo_delete_outcomes():
    def handler(request):
        body = request.read()
        if b"missing" in body:
            return httpx.Response(404, json={"success": False, "message": "Image not found"})
        if b"gone" in body:
            return httpx.Response(200, json={"success": False, "status": 404})
        return httpx.Response(200, json={"success": True})

    host = hippo_with(handler)

    assert await host.delete("https://i.imghippo.com/files/abc123.jpg") == DELETED
    assert await host.delete("https://i.imghippo.com/files/missing.jpg") == NOT_FOUND
    assert await host.delete("https://i.imghippo.com/files/gone.jpg") == NOT_FOUND


@pytest.mark.asyncio
async def test_imagehippo_delete_failure():
    def handler(request):
        return httpx.Response(500, text="boom")

    host = hippo_with(handler)

    with pytest.raises(ImageHostError) as exc_info:
        await host.delete("https://i.imghippo.com/files/abc123.jpg")
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_cloudinary_without_credentials_is_config_error():
    host = CloudinaryHost(make_settings())

    assert host.is_configured() is False
    with pytest.raises(ImageHostConfigError) as exc_info:
        await host.delete("gallery/abc123")
    assert "CLOUDINARY_CLOUD_NAME" in exc_info.value.message


@pytest.mark.parametrize("url,expected", [
    ("https://res.cloudinary.com/demo/image/upload/v1699999999/gallery/abc123.jpg", "gallery/abc123"),
    ("https://res.cloudinary.com/demo/image/upload/gallery/abc123.webp", "gallery/abc123"),
    ("https://res.cloudinary.com/demo/image/upload/v12/branch.thumbs/front", "branch.thumbs/front"),
])
def test_extract_public_id_from_url(url, expected):
    assert extract_public_id_from_url(url) == expected


def test_extract_public_id_from_invalid_url():
    with pytest.raises(ValueError):
        extract_public_id_from_url("https://example.com/not-cloudinary.jpg")


def test_build_image_host_by_provider():
    assert isinstance(build_image_host(make_settings(IMAGE_HOST_PROVIDER="imagehippo")), ImageHippoHost)
    assert isinstance(build_image_host(make_settings(IMAGE_HOST_PROVIDER=" Cloudinary ")), CloudinaryHost)

    with pytest.raises(ValueError):
        build_image_host(make_settings(IMAGE_HOST_PROVIDER="s3"))


@pytest.mark.asyncio
async def test_upload_file_rejects_empty_file():
    host = hippo_with(lambda request: httpx.Response(200, json={}))
    empty = UploadFile(
        file=io.BytesIO(b""),
        filename="empty.jpg",
        headers=Headers({"content-type": "image/jpeg"}),
    )

    with pytest.raises(HTTPException) as exc_info:
        await upload_file(host, empty, "gallery")

    assert exc_info.value.status_code == 400
    assert exc_info.value.detail["error"] == "Uploaded file is empty"


def test_deletion_target_depends_on_backend():
    url = "https://res.cloudinary.com/demo/image/upload/v1/gallery/abc123.jpg"
    hippo = ImageHippoHost(make_settings())
    cloud = CloudinaryHost(make_settings())

    assert hippo.deletion_target(image_url=url, public_id="gallery/abc123") == url
    assert cloud.deletion_target(image_url=url, public_id="gallery/abc123") == "gallery/abc123"
    assert cloud.deletion_target(image_url=url) == url

    with pytest.raises(ImageHostError) as exc_info:
        hippo.deletion_target(public_id="gallery/abc123")
    assert exc_info.value.status_code == 400

    with pytest.raises(ImageHostError):
        cloud.deletion_target()
