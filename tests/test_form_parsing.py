import io

import pytest
from fastapi import HTTPException
from starlette.datastructures import FormData, Headers, UploadFile

from hostel_api.utils.form_parsing import (
    coerce_branch_form,
    parse_bool_field,
    parse_int_field,
    parse_json_field,
    parse_tags,
)


def make_upload(filename="front.jpg", content_type="image/jpeg"):
    return UploadFile(
        file=io.BytesIO(b"jpeg-bytes"),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


@pytest.mark.parametrize("raw,expected", [
    ("true", True),
    ("TRUE", True),
    ("1", True),
    ("false", False),
    ("0", False),
    ("", None),
    (True, True),
    (None, None),
])
def test_parse_bool_field(raw, expected):
    assert parse_bool_field("is_mess_available", raw) is expected


def test_parse_bool_field_rejects_other_text():
    with pytest.raises(HTTPException) as exc_info:
        parse_bool_field("is_mess_available", "yes please")

    assert exc_info.value.status_code == 400
    assert exc_info.value.detail["error"] == "Invalid boolean in field 'is_mess_available'"


def test_parse_int_field():
    assert parse_int_field("reg_fee", " 2000 ") == 2000
    assert parse_int_field("reg_fee", "") is None
    assert parse_int_field("reg_fee", 15) == 15

    with pytest.raises(HTTPException) as exc_info:
        parse_int_field("reg_fee", "2k")
    assert exc_info.value.detail["error"] == "Invalid integer in field 'reg_fee'"


def test_parse_json_field():
    assert parse_json_field("amenities", '["WiFi", "Gym"]') == ["WiFi", "Gym"]
    assert parse_json_field("amenities", ["already", "parsed"]) == ["already", "parsed"]
    assert parse_json_field("amenities", "  ") is None

    with pytest.raises(HTTPException) as exc_info:
        parse_json_field("amenities", "[WiFi")
    assert exc_info.value.status_code == 400
    assert exc_info.value.detail["success"] is False


def test_parse_tags():
    assert parse_tags(["room, single ,modern"]) == ["room", "single", "modern"]
    assert parse_tags(["room", "single"]) == ["room", "single"]
    assert parse_tags(["a,b", "c"]) == ["a,b", "c"]
    assert parse_tags([]) is None
    assert parse_tags([" , "]) == []


def test_coerce_branch_form_only_returns_present_fields():
    form = FormData([
        ("name", "Nyxta Downtown Branch"),
        ("room_rate", '[{"title": "Single Occupancy", "rate_per_month": 8000}]'),
        ("is_mess_available", "false"),
        ("reg_fee", "2000"),
    ])

    values, image = coerce_branch_form(form)

    assert image is None
    assert values == {
        "name": "Nyxta Downtown Branch",
        "room_rate": [{"title": "Single Occupancy", "rate_per_month": 8000}],
        "is_mess_available": False,
        "reg_fee": 2000,
    }


def test_coerce_branch_form_picks_up_thumbnail_file():
    upload = make_upload()
    form = FormData([("name", "With Picture"), ("thumbnail", upload)])

    values, image = coerce_branch_form(form)

    assert image is upload
    assert "thumbnail" not in values


def test_coerce_branch_form_keeps_thumbnail_url():
    form = FormData([("thumbnail", "https://images.test/front.jpg")])

    values, image = coerce_branch_form(form)

    assert image is None
    assert values == {"thumbnail": "https://images.test/front.jpg"}
