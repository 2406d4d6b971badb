"""
Pydantic schemas for request and response data validation.
Defines data structures for API endpoints with automatic validation and serialization.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Optional, List, Union


# Branch

class RoomRate(BaseModel):
    """One pricing tier, e.g. "Double Occupancy" at 6000 per month."""
    title: str
    rate_per_month: Union[int, float]


class LocationPerk(BaseModel):
    """A nearby point of interest advertised for a branch."""
    title: str
    distance: Optional[str] = None
    time_to_reach: Optional[str] = None


class BranchBase(BaseModel):
    contact_no: Optional[List[str]] = None
    address: Optional[str] = None
    gmap_link: Optional[str] = None
    room_rate: Optional[List[RoomRate]] = None
    prime_location_perks: Optional[List[LocationPerk]] = None
    amenities: Optional[List[str]] = None
    property_features: Optional[List[str]] = None
    reg_fee: Optional[int] = None
    is_ladies_only: Optional[bool] = None
    is_cooking_allowed: Optional[bool] = None
    cooking_price: Optional[int] = None
    thumbnail: Optional[str] = None


class BranchCreate(BranchBase):
    """
    Request schema for creating a branch.
    Used by POST /api/branches after form values have been coerced.
    """
    name: str
    is_mess_available: bool = False
    display_order: int = 0

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Branch name must not be empty")
        return v.strip()


class BranchUpdate(BranchBase):
    """
    Request schema for partial branch updates.
    Only fields present in the request are applied (exclude_unset).
    """
    name: Optional[str] = None
    is_mess_available: Optional[bool] = None
    display_order: Optional[int] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is None or not v.strip():
            raise ValueError("Branch name must not be empty")
        return v.strip()

    @field_validator("is_mess_available", "display_order")
    @classmethod
    def validate_not_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class BranchResponse(BranchBase):
    """Response schema for branch data."""
    id: int
    name: str
    is_mess_available: bool
    display_order: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Gallery

class GalleryImageCreate(BaseModel):
    """
    Request schema for creating a gallery image from an already hosted URL.
    Used by POST /api/gallery and POST /api/gallery/branch/{branch_id}.
    """
    branch_id: Optional[int] = None
    image_url: str = Field(min_length=1)
    title: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    display_order: int = 0


class GalleryImageUpdate(BaseModel):
    """
    Request schema for updating gallery images.
    Fields are passed through as supplied.
    """
    branch_id: Optional[int] = None
    image_url: Optional[str] = Field(None, min_length=1)
    title: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    display_order: Optional[int] = None

    @field_validator("branch_id", "image_url", "display_order")
    @classmethod
    def validate_not_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class GalleryImageResponse(BaseModel):
    """Response schema for gallery image data."""
    id: int
    branch_id: int
    image_url: str
    title: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    display_order: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class HostedImageDeleteRequest(BaseModel):
    """
    Request schema for DELETE /api/gallery/delete-from-host.
    ImageHippo needs the URL; Cloudinary accepts a public_id or its URL.
    """
    image_url: Optional[str] = None
    public_id: Optional[str] = None


# Enquiries

class EnquiryCreate(BaseModel):
    """Request schema for enquiry submissions."""
    name: str
    email: str
    phone: str
    message: Optional[str] = None
    branch_id: Optional[int] = None
    source: Optional[str] = None

    @field_validator("name", "email", "phone")
    @classmethod
    def validate_required_text(cls, v):
        if not v or not v.strip():
            raise ValueError("Field must not be empty")
        return v.strip()


class EnquiryUpdate(BaseModel):
    """Request schema for partial enquiry updates."""
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None
    branch_id: Optional[int] = None
    source: Optional[str] = None

    @field_validator("name", "email", "phone")
    @classmethod
    def validate_required_text(cls, v):
        if v is None or not v.strip():
            raise ValueError("Field must not be empty")
        return v.strip()


class EnquiryResponse(BaseModel):
    """Response schema for enquiry data."""
    id: int
    name: str
    email: str
    phone: str
    message: Optional[str] = None
    branch_id: Optional[int] = None
    source: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

