"""
Pydantic schemas for the portfolio API.

Each collection has three models: ``<Entity>Create`` (POST body),
``<Entity>Update`` (PUT/PATCH body, every field optional) and ``<Entity>``
(the stored record). Records are serialized with camelCase keys so the
frontend can consume them unchanged.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True
    )


class PartialUpdate(CamelModel):
    """
    Base for update payloads.

    Fields left out of the request are not touched. Fields listed in
    ``NOT_NULL`` may be omitted but cannot be explicitly set to null.
    """

    NOT_NULL: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="after")
    def _reject_null_required(self):
        for name in self.NOT_NULL:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class SoftDeleteMixin(CamelModel):
    deleted_at: Optional[datetime] = None

    @field_validator("deleted_at")
    @classmethod
    def _deleted_at_utc(cls, value):
        return _as_utc(value)


class TimestampsMixin(CamelModel):
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def _timestamps_utc(cls, value):
        return _as_utc(value)


# Projects


class ProjectCreate(SoftDeleteMixin):
    title: str
    description: str
    image: str
    category: str = Field(..., max_length=10)
    subcategory: str
    is_private: bool = False
    tags: list[str] = Field(default_factory=list)
    project_type: Optional[str] = None
    icon: Optional[str] = None
    images: list[str] = Field(default_factory=list)
    hours_worked: Optional[int] = Field(default=None, ge=0)
    frontend_tech: list[str] = Field(default_factory=list)
    backend_tech: list[str] = Field(default_factory=list)
    initial_release_date: Optional[str] = None
    last_updated_date: Optional[str] = None
    additional_files: list[str] = Field(default_factory=list)
    git_url: Optional[str] = None
    project_url: Optional[str] = None


class ProjectUpdate(SoftDeleteMixin, PartialUpdate):
    NOT_NULL = (
        "title",
        "description",
        "image",
        "category",
        "subcategory",
        "is_private",
        "tags",
        "images",
        "frontend_tech",
        "backend_tech",
        "additional_files",
    )

    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=10)
    subcategory: Optional[str] = None
    is_private: Optional[bool] = None
    tags: Optional[list[str]] = None
    project_type: Optional[str] = None
    icon: Optional[str] = None
    images: Optional[list[str]] = None
    hours_worked: Optional[int] = Field(default=None, ge=0)
    frontend_tech: Optional[list[str]] = None
    backend_tech: Optional[list[str]] = None
    initial_release_date: Optional[str] = None
    last_updated_date: Optional[str] = None
    additional_files: Optional[list[str]] = None
    git_url: Optional[str] = None
    project_url: Optional[str] = None


class Project(TimestampsMixin, ProjectCreate):
    id: int


# Gallery items


class GalleryItemCreate(SoftDeleteMixin):
    title: str
    image: str
    category: str = Field(..., max_length=10)
    subcategory: str
    is_private: bool = False
    medium: Optional[str] = None
    description: Optional[str] = None
    materials: list[str] = Field(default_factory=list)
    dimensions: Optional[str] = None
    date: Optional[str] = None
    # Photography only
    device: Optional[str] = None
    location: Optional[str] = None


class GalleryItemUpdate(SoftDeleteMixin, PartialUpdate):
    NOT_NULL = ("title", "image", "category", "subcategory", "is_private", "materials")

    title: Optional[str] = None
    image: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=10)
    subcategory: Optional[str] = None
    is_private: Optional[bool] = None
    medium: Optional[str] = None
    description: Optional[str] = None
    materials: Optional[list[str]] = None
    dimensions: Optional[str] = None
    date: Optional[str] = None
    device: Optional[str] = None
    location: Optional[str] = None


class GalleryItem(TimestampsMixin, GalleryItemCreate):
    id: int


# CV data


class CVDataCreate(CamelModel):
    file_name: str
    file_url: str
    storage_public_id: str
    mime_type: str = "application/pdf"


class CVData(CVDataCreate):
    id: int
    uploaded_at: datetime

    @field_validator("uploaded_at")
    @classmethod
    def _uploaded_at_utc(cls, value):
        return _as_utc(value)


# Writings


class WritingCreate(SoftDeleteMixin):
    title: str
    type: str
    content: str
    excerpt: str
    word_count: int = Field(default=0, ge=0)
    date_written: str
    last_modified: str
    tags: list[str] = Field(default_factory=list)
    mood: str
    is_private: bool = False
    published: bool = False


class WritingUpdate(SoftDeleteMixin, PartialUpdate):
    NOT_NULL = (
        "title",
        "type",
        "content",
        "excerpt",
        "word_count",
        "date_written",
        "last_modified",
        "tags",
        "mood",
        "is_private",
        "published",
    )

    title: Optional[str] = None
    type: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    word_count: Optional[int] = Field(default=None, ge=0)
    date_written: Optional[str] = None
    last_modified: Optional[str] = None
    tags: Optional[list[str]] = None
    mood: Optional[str] = None
    is_private: Optional[bool] = None
    published: Optional[bool] = None


class Writing(WritingCreate):
    id: int


# Albums

AlbumContentType = Literal["art", "writings"]


class AlbumCreate(CamelModel):
    name: str = Field(..., min_length=1)
    color: Optional[str] = None
    icon: Optional[str] = None
    item_ids: list[int] = Field(default_factory=list)
    content_type: Optional[AlbumContentType] = None


class AlbumUpdate(PartialUpdate):
    NOT_NULL = ("name", "item_ids")

    name: Optional[str] = Field(default=None, min_length=1)
    color: Optional[str] = None
    icon: Optional[str] = None
    item_ids: Optional[list[int]] = None
    content_type: Optional[AlbumContentType] = None


class Album(AlbumCreate):
    id: int


# Tags


class TagCreate(CamelModel):
    name: str = Field(..., min_length=1)
    type: str
    sentiment: Optional[str] = None


class TagUpdate(PartialUpdate):
    NOT_NULL = ("name", "type")

    name: Optional[str] = Field(default=None, min_length=1)
    type: Optional[str] = None
    sentiment: Optional[str] = None


class Tag(TagCreate):
    id: int


# Photo locations / devices share the same shape.


class NamedCreate(CamelModel):
    name: str = Field(..., min_length=1)


class NamedUpdate(PartialUpdate):
    NOT_NULL = ("name",)

    name: Optional[str] = Field(default=None, min_length=1)


class PhotoLocation(NamedCreate):
    id: int


class PhotoDevice(NamedCreate):
    id: int


# Service responses


class HealthResponse(CamelModel):
    status: Literal["ok"]
    timestamp: datetime
    storage: str


class PurgeResponse(CamelModel):
    retention_days: int
    cutoff: datetime
    purged: dict[str, int]
