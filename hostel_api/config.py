"""
Configuration management for the FastAPI application.
Uses Pydantic Settings for environment variable management.
"""
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    API_TITLE: str = "Hostel Listing API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Backend API for branches, gallery images and enquiries"

    # "development" echoes internal error details to clients
    ENVIRONMENT: str = "development"
    PORT: int = 3000

    # CORS Configuration
    # Only these frontends may call the API with credentials
    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "https://nyxta-neon.vercel.app",
        "https://nyxta-josehp304s-projects.vercel.app",
        "https://nyxta-8kupn82gu-josehp304s-projects.vercel.app",
        "https://nyxta-cms.vercel.app",
    ]

    # Database Configuration
    DATABASE_URL: str = ""

    # Image hosting: "imagehippo" or "cloudinary"
    IMAGE_HOST_PROVIDER: str = "imagehippo"

    # ImageHippo Configuration
    IMAGEHIPPO_API_KEY: str = Field("", validation_alias=AliasChoices("IMAGEHIPPO_API_KEY", "IMGHIPPO_API_KEY"))
    IMAGEHIPPO_UPLOAD_URL: str = "https://api.imghippo.com/v1/upload"
    IMAGEHIPPO_DELETE_URL: str = "https://api.imghippo.com/v1/delete"

    # Cloudinary Configuration
    CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_API_KEY: str = ""
    CLOUDINARY_API_SECRET: str = ""

    # Folders (or folder hints) used on the image host
    GALLERY_FOLDER: str = "gallery"
    BRANCH_THUMBNAIL_FOLDER: str = "branch-thumbnails"

    # Re-encode uploads as WebP before sending them to the image host
    CONVERT_UPLOADS_TO_WEBP: bool = False

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings


# Global settings instance
settings = Settings()
