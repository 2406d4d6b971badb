"""
SQLAlchemy models for the application.
All database models inherit from Base (declarative base).
"""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import false, func
from hostel_api.database import Base


class Branch(Base):
    """
    A rentable property location.
    List and object valued attributes are stored as JSON.
    """
    __tablename__ = "branch"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(Text, nullable=False, index=True)
    contact_no = Column(JSON, nullable=True)  # ["+91-..."]
    address = Column(Text, nullable=True)
    gmap_link = Column(Text, nullable=True)
    room_rate = Column(JSON, nullable=True)  # [{title, rate_per_month}]
    prime_location_perks = Column(JSON, nullable=True)  # [{title, distance, time_to_reach}]
    amenities = Column(JSON, nullable=True)
    property_features = Column(JSON, nullable=True)
    reg_fee = Column(Integer, nullable=True)
    is_mess_available = Column(Boolean, nullable=False, default=False, server_default=false())
    is_ladies_only = Column(Boolean, nullable=True)
    is_cooking_allowed = Column(Boolean, nullable=True)
    cooking_price = Column(Integer, nullable=True)
    thumbnail = Column(String, nullable=True)
    display_order = Column(Integer, nullable=False, default=0, server_default="0", index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Deleting a branch removes its images and detaches its enquiries
    gallery_images = relationship(
        "GalleryImage",
        back_populates="branch",
        cascade="all, delete-orphan",
    )
    enquiries = relationship("UserEnquiry", back_populates="branch")


class GalleryImage(Base):
    """
    Gallery image model.
    Stores the hosted image URL and its metadata for one branch.
    """
    __tablename__ = "gallery"

    id = Column(Integer, primary_key=True, index=True)
    branch_id = Column(Integer, ForeignKey("branch.id", ondelete="CASCADE"), nullable=False, index=True)
    image_url = Column(String, nullable=False)
    title = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    tags = Column(JSON, nullable=True)
    display_order = Column(Integer, nullable=False, default=0, server_default="0", index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    branch = relationship("Branch", back_populates="gallery_images")


class UserEnquiry(Base):
    """A contact-form submission, optionally tied to a branch."""
    __tablename__ = "user_enquiries"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    phone = Column(Text, nullable=False)
    message = Column(Text, nullable=True)
    branch_id = Column(Integer, ForeignKey("branch.id", ondelete="SET NULL"), nullable=True, index=True)
    source = Column(Text, nullable=True, default="website")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    branch = relationship("Branch", back_populates="enquiries")
