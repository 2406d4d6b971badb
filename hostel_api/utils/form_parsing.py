"""
Coercion of multipart/urlencoded form values into typed branch and gallery fields.

Browsers can only send strings in a form, so the frontend JSON-encodes lists
and objects and sends booleans and numbers as text. Everything here turns
those strings back into Python values before anything touches the database.
"""
import json
import logging
from typing import Any, List, Optional, Tuple

from fastapi import Request, status
from starlette.datastructures import FormData, UploadFile

from hostel_api.utils.responses import api_error

logger = logging.getLogger(__name__)

BRANCH_JSON_FIELDS = ("contact_no", "room_rate", "prime_location_perks", "amenities", "property_features")
BRANCH_BOOL_FIELDS = ("is_mess_available", "is_ladies_only", "is_cooking_allowed")
BRANCH_INT_FIELDS = ("reg_fee", "cooking_price", "display_order")
BRANCH_TEXT_FIELDS = ("name", "address", "gmap_link", "thumbnail")
BRANCH_FILE_FIELDS = ("image", "thumbnail")

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


def is_form_request(request: Request) -> bool:
    content_type = request.headers.get("content-type", "")
    return content_type.startswith(FORM_CONTENT_TYPES)


async def read_json_body(request: Request) -> dict:
    """
    Read a JSON object body.

    Raises:
        HTTPException: 400 if the body is not a JSON object
    """
    raw = await request.body()
    if not raw:
        return {}
    try:
        body = json.loads(raw)
    except ValueError:
        raise api_error(status.HTTP_400_BAD_REQUEST, "Invalid JSON body")
    if not isinstance(body, dict):
        raise api_error(status.HTTP_400_BAD_REQUEST, "Request body must be a JSON object")
    return body


def form_text(form: FormData, name: str) -> Optional[str]:
    """A text form value; file parts and empty strings read as None."""
    value = form.get(name)
    if not isinstance(value, str) or value == "":
        return None
    return value


def parse_json_field(name: str, value: Any) -> Any:
    if not isinstance(value, str):
        return value
    if value.strip() == "":
        return None
    try:
        return json.loads(value)
    except ValueError as e:
        logger.warning(f"Malformed JSON in form field '{name}': {str(e)}")
        raise api_error(
            status.HTTP_400_BAD_REQUEST,
            f"Invalid JSON in field '{name}'",
            details=str(e),
        )


def parse_bool_field(name: str, value: Any) -> Optional[bool]:
    if isinstance(value, bool) or value is None:
        return value
    text = str(value).strip().lower()
    if text in ("true", "1"):
        return True
    if text in ("false", "0"):
        return False
    if text == "":
        return None
    raise api_error(
        status.HTTP_400_BAD_REQUEST,
        f"Invalid boolean in field '{name}'",
        details="Expected 'true' or 'false'",
    )


def parse_int_field(name: str, value: Any) -> Optional[int]:
    if value is None or isinstance(value, int):
        return value
    text = str(value).strip()
    if text == "":
        return None
    try:
        return int(text)
    except ValueError:
        raise api_error(status.HTTP_400_BAD_REQUEST, f"Invalid integer in field '{name}'")


def parse_tags(values: List[Any]) -> Optional[List[str]]:
    """
    Tags arrive either as repeated form fields or as one comma-joined string.
    """
    values = [v for v in values if isinstance(v, str)]
    if not values:
        return None
    if len(values) == 1:
        values = values[0].split(",")
    return [tag.strip() for tag in values if tag.strip()]


def coerce_branch_form(form: FormData) -> Tuple[dict, Optional[UploadFile]]:
    """
    Turn a branch form submission into typed values.

    Only fields present in the form end up in the returned dict, so the same
    result drives both create and partial update.

    Returns:
        Tuple of (typed field values, uploaded thumbnail file or None)

    Raises:
        HTTPException: 400 on malformed JSON, boolean or integer values
    """
    data = {}
    image_file = None

    for field in BRANCH_FILE_FIELDS:
        value = form.get(field)
        if isinstance(value, UploadFile) and value.filename:
            image_file = value
            break

    for field in BRANCH_TEXT_FIELDS:
        if field in form and isinstance(form.get(field), str):
            data[field] = form.get(field)

    for field in BRANCH_JSON_FIELDS:
        if field in form:
            data[field] = parse_json_field(field, form.get(field))

    for field in BRANCH_BOOL_FIELDS:
        if field in form:
            data[field] = parse_bool_field(field, form.get(field))

    for field in BRANCH_INT_FIELDS:
        if field in form:
            data[field] = parse_int_field(field, form.get(field))

    return data, image_file
