from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from src.domain.entities.media import MediaRecordEntity


class MediaRecordResponse(BaseModel):
    """A stored image with the URLs of its derivatives."""
    id: str = Field(..., description="Unique identifier of the media record", examples=["42"])
    filename: str = Field(..., description="Stored filename", examples=["1718000000000_3fa2c1_photo.jpg"])
    url: str = Field(..., description="URL of the untouched original", examples=["/uploads/images/original/1718000000000_3fa2c1_photo.jpg"])
    url_large: str | None = Field(None, description="Large derivative (fits 1920x1920); absent for small images")
    url_medium: str | None = Field(None, description="Medium derivative (short side 500)")
    url_thumb: str | None = Field(None, description="Thumbnail (fits 150x150); absent for tiny images")
    mime_type: str = Field(..., description="MIME type shared by all derivatives", examples=["image/jpeg"])
    size: int | None = Field(None, description="Size of the original in bytes", examples=[2048576], ge=0)
    width: int | None = Field(None, description="Width of the original in pixels", examples=[2000])
    height: int | None = Field(None, description="Height of the original in pixels", examples=[1000])
    alt_text: str | None = Field(None, description="Alternative text")
    caption: str | None = Field(None, description="Caption")
    created_at: datetime = Field(..., description="When the record was created")

    @classmethod
    def from_entity(cls, entity: MediaRecordEntity) -> MediaRecordResponse:
        return cls(
            id=entity.id,
            filename=entity.filename,
            url=entity.url,
            url_large=entity.url_large,
            url_medium=entity.url_medium,
            url_thumb=entity.url_thumb,
            mime_type=entity.mime_type,
            size=entity.size,
            width=entity.width,
            height=entity.height,
            alt_text=entity.alt_text,
            caption=entity.caption,
            created_at=entity.created_at,
        )


class ListMediaResponse(BaseModel):
    """Paginated media library listing, newest first."""
    media: list[MediaRecordResponse] = Field(..., description="Media records on this page")
    total: int = Field(..., description="Total number of media records", examples=[150], ge=0)
    page: int = Field(..., description="1-based page number", examples=[1], ge=1)
    page_size: int = Field(..., description="Records per page", examples=[20], ge=1, le=100)


class DeleteMediaResponse(BaseModel):
    ok: bool = Field(True, description="Whether the record was deleted")
    files_deleted: int = Field(0, description="Stored files removed alongside the record", ge=0)


class MediaCheckItem(BaseModel):
    """Which files of one record exist. ``None`` means the record has no URL for that tier."""
    id: str = Field(...)
    filename: str = Field(...)
    original: bool = Field(..., description="Original file exists")
    large: bool | None = Field(None)
    medium: bool | None = Field(None)
    thumb: bool | None = Field(None)

    @property
    def complete(self) -> bool:
        return all(v is not False for v in (self.original, self.large, self.medium, self.thumb))


class MediaCheckResponse(BaseModel):
    total: int = Field(..., description="Records checked", ge=0)
    complete: int = Field(..., description="Records with every referenced file present", ge=0)
    missing: int = Field(..., description="Records with at least one file missing", ge=0)
    items: list[MediaCheckItem] = Field(default_factory=list)
