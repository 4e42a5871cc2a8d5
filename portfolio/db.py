"""
Storage abstraction for the portfolio collections.

``Storage`` is the interface the route handlers depend on. It exposes one
``Repository`` per collection plus the CV singleton. Two implementations are
provided: ``InMemoryStorage`` (dicts, used for development, demo data and
tests) and ``DatabaseStorage`` (SQLAlchemy, Postgres in production and SQLite
in tests).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Generic, Mapping, Optional, Protocol, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Integer,
    String,
    Text,
    create_engine,
    delete,
    inspect,
    select,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from portfolio.schemas import (
    Album,
    CVData,
    CVDataCreate,
    GalleryItem,
    PhotoDevice,
    PhotoLocation,
    Project,
    Tag,
    Writing,
)

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)

# Fields the storage layer owns; callers cannot overwrite them.
_PROTECTED_FIELDS = frozenset({"id", "created_at", "updated_at"})


class ConflictError(Exception):
    """Raised when a write would break a uniqueness constraint."""


@dataclass(frozen=True)
class Collection:
    """Static description of one stored collection."""

    name: str
    label: str
    record: type[BaseModel]
    timestamped: bool = False
    soft_delete: bool = False
    unique: tuple[str, ...] = ()

    def check_filters(self, filters: Mapping[str, Any]) -> None:
        unknown = set(filters) - set(self.record.model_fields)
        if unknown:
            raise ValueError(
                f"Unknown {self.name} fields: {', '.join(sorted(unknown))}"
            )

    def conflict(self, field: str) -> ConflictError:
        return ConflictError(f"{self.label} with this {field} already exists")


PROJECTS = Collection(
    "projects", "Project", Project, timestamped=True, soft_delete=True
)
GALLERY_ITEMS = Collection(
    "gallery_items", "Gallery item", GalleryItem, timestamped=True, soft_delete=True
)
WRITINGS = Collection("writings", "Writing", Writing, soft_delete=True)
ALBUMS = Collection("albums", "Album", Album)
TAGS = Collection("tags", "Tag", Tag, unique=("name",))
PHOTO_LOCATIONS = Collection(
    "photo_locations", "Photo location", PhotoLocation, unique=("name",)
)
PHOTO_DEVICES = Collection(
    "photo_devices", "Photo device", PhotoDevice, unique=("name",)
)

COLLECTIONS: Dict[str, Collection] = {
    c.name: c
    for c in (
        PROJECTS,
        GALLERY_ITEMS,
        WRITINGS,
        ALBUMS,
        TAGS,
        PHOTO_LOCATIONS,
        PHOTO_DEVICES,
    )
}

Payload = Union[BaseModel, Mapping[str, Any]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _values(collection: Collection, payload: Payload, partial: bool = False) -> dict:
    if isinstance(payload, BaseModel):
        data = payload.model_dump(exclude_unset=partial)
    else:
        data = dict(payload)
    fields = collection.record.model_fields
    return {
        k: v for k, v in data.items() if k in fields and k not in _PROTECTED_FIELDS
    }


class Repository(Protocol[RecordT]):
    """CRUD operations shared by every collection."""

    collection: Collection

    def list_all(self) -> list[RecordT]:
        ...

    def get(self, record_id: int) -> Optional[RecordT]:
        ...

    def list_by(self, **filters: Any) -> list[RecordT]:
        ...

    def list_trashed(self, **filters: Any) -> list[RecordT]:
        ...

    def create(self, payload: Payload) -> RecordT:
        ...

    def update(self, record_id: int, changes: Payload) -> Optional[RecordT]:
        ...

    def delete(self, record_id: int) -> bool:
        ...

    def purge_deleted(self, before: datetime) -> int:
        ...

    def clear(self) -> int:
        ...


class Storage(Protocol):
    """Interface for everything the API persists."""

    kind: str
    projects: Repository[Project]
    gallery_items: Repository[GalleryItem]
    writings: Repository[Writing]
    albums: Repository[Album]
    tags: Repository[Tag]
    photo_locations: Repository[PhotoLocation]
    photo_devices: Repository[PhotoDevice]

    def repository(self, name: str) -> Repository:
        ...

    def get_cv_data(self) -> Optional[CVData]:
        ...

    def create_cv_data(self, payload: CVDataCreate) -> CVData:
        ...

    def delete_cv_data(self) -> bool:
        ...


class InMemoryRepository(Generic[RecordT]):
    """Dict-backed repository keyed by auto-incremented id."""

    def __init__(self, collection: Collection):
        self.collection = collection
        self.records: Dict[int, RecordT] = {}
        self._next_id = 1

    def _check_unique(self, values: Mapping[str, Any], exclude_id: int | None = None):
        for field in self.collection.unique:
            if field not in values:
                continue
            for record_id, record in self.records.items():
                if record_id != exclude_id and getattr(record, field) == values[field]:
                    raise self.collection.conflict(field)

    def list_all(self) -> list[RecordT]:
        return [self.records[key].model_copy(deep=True) for key in sorted(self.records)]

    def get(self, record_id: int) -> Optional[RecordT]:
        record = self.records.get(record_id)
        return record.model_copy(deep=True) if record else None

    def list_by(self, **filters: Any) -> list[RecordT]:
        self.collection.check_filters(filters)
        return [
            record
            for record in self.list_all()
            if all(getattr(record, key) == value for key, value in filters.items())
        ]

    def list_trashed(self, **filters: Any) -> list[RecordT]:
        if not self.collection.soft_delete:
            return []
        return [r for r in self.list_by(**filters) if r.deleted_at is not None]

    def create(self, payload: Payload) -> RecordT:
        values = _values(self.collection, payload)
        self._check_unique(values)
        data = dict(values, id=self._next_id)
        if self.collection.timestamped:
            now = _utcnow()
            data["created_at"] = now
            data["updated_at"] = now
        record = self.collection.record.model_validate(data)
        self.records[record.id] = record
        self._next_id += 1
        return record.model_copy(deep=True)

    def update(self, record_id: int, changes: Payload) -> Optional[RecordT]:
        current = self.records.get(record_id)
        if current is None:
            return None
        values = _values(self.collection, changes, partial=True)
        self._check_unique(values, exclude_id=record_id)
        data = current.model_dump()
        data.update(values)
        if self.collection.timestamped:
            data["updated_at"] = _utcnow()
        record = self.collection.record.model_validate(data)
        self.records[record_id] = record
        return record.model_copy(deep=True)

    def delete(self, record_id: int) -> bool:
        return self.records.pop(record_id, None) is not None

    def purge_deleted(self, before: datetime) -> int:
        if not self.collection.soft_delete:
            return 0
        before = _as_utc(before)
        expired = [
            record_id
            for record_id, record in self.records.items()
            if record.deleted_at is not None and record.deleted_at < before
        ]
        for record_id in expired:
            del self.records[record_id]
        return len(expired)

    def clear(self) -> int:
        removed = len(self.records)
        self.records.clear()
        return removed


class InMemoryStorage:
    """Simple in-memory storage for development, demo data and tests."""

    kind = "memory"

    def __init__(self):
        self.projects: InMemoryRepository[Project] = InMemoryRepository(PROJECTS)
        self.gallery_items: InMemoryRepository[GalleryItem] = InMemoryRepository(
            GALLERY_ITEMS
        )
        self.writings: InMemoryRepository[Writing] = InMemoryRepository(WRITINGS)
        self.albums: InMemoryRepository[Album] = InMemoryRepository(ALBUMS)
        self.tags: InMemoryRepository[Tag] = InMemoryRepository(TAGS)
        self.photo_locations: InMemoryRepository[PhotoLocation] = InMemoryRepository(
            PHOTO_LOCATIONS
        )
        self.photo_devices: InMemoryRepository[PhotoDevice] = InMemoryRepository(
            PHOTO_DEVICES
        )
        self.cv_data: Optional[CVData] = None
        self._cv_next_id = 1

    def repository(self, name: str) -> InMemoryRepository:
        if name not in COLLECTIONS:
            raise KeyError(name)
        return getattr(self, name)

    def get_cv_data(self) -> Optional[CVData]:
        return self.cv_data.model_copy() if self.cv_data else None

    def create_cv_data(self, payload: CVDataCreate) -> CVData:
        self.cv_data = CVData(
            id=self._cv_next_id, uploaded_at=_utcnow(), **payload.model_dump()
        )
        self._cv_next_id += 1
        return self.cv_data.model_copy()

    def delete_cv_data(self) -> bool:
        if self.cv_data is None:
            return False
        self.cv_data = None
        return True

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.__init__()


class SqlRepository(Generic[RecordT]):
    """SQLAlchemy-backed repository for one table."""

    def __init__(self, collection: Collection, row: type, session_factory: sessionmaker):
        self.collection = collection
        self.row = row
        self.Session = session_factory

    def _to_record(self, row) -> RecordT:
        data = {attr.key: getattr(row, attr.key) for attr in inspect(row).mapper.column_attrs}
        return self.collection.record.model_validate(data)

    def _commit(self, session: Session) -> None:
        try:
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            if not self.collection.unique:
                raise
            logger.info("Rejected %s write: %s", self.collection.name, exc.orig)
            raise self.collection.conflict(self.collection.unique[0]) from exc

    def list_all(self) -> list[RecordT]:
        with self.Session() as session:
            rows = session.scalars(select(self.row).order_by(self.row.id)).all()
            return [self._to_record(row) for row in rows]

    def get(self, record_id: int) -> Optional[RecordT]:
        with self.Session() as session:
            row = session.get(self.row, record_id)
            if not row:
                return None
            return self._to_record(row)

    def list_by(self, **filters: Any) -> list[RecordT]:
        self.collection.check_filters(filters)
        with self.Session() as session:
            stmt = select(self.row).filter_by(**filters).order_by(self.row.id)
            return [self._to_record(row) for row in session.scalars(stmt).all()]

    def list_trashed(self, **filters: Any) -> list[RecordT]:
        if not self.collection.soft_delete:
            return []
        self.collection.check_filters(filters)
        with self.Session() as session:
            stmt = (
                select(self.row)
                .filter_by(**filters)
                .where(self.row.deleted_at.is_not(None))
                .order_by(self.row.id)
            )
            return [self._to_record(row) for row in session.scalars(stmt).all()]

    def create(self, payload: Payload) -> RecordT:
        values = _values(self.collection, payload)
        if self.collection.timestamped:
            now = _utcnow()
            values["created_at"] = now
            values["updated_at"] = now
        with self.Session() as session:
            row = self.row(**values)
            session.add(row)
            self._commit(session)
            session.refresh(row)
            return self._to_record(row)

    def update(self, record_id: int, changes: Payload) -> Optional[RecordT]:
        values = _values(self.collection, changes, partial=True)
        with self.Session() as session:
            row = session.get(self.row, record_id)
            if not row:
                return None
            data = self._to_record(row).model_dump()
            data.update(values)
            record = self.collection.record.model_validate(data)
            for key in values:
                setattr(row, key, getattr(record, key))
            if self.collection.timestamped:
                row.updated_at = _utcnow()
            self._commit(session)
            session.refresh(row)
            return self._to_record(row)

    def delete(self, record_id: int) -> bool:
        with self.Session() as session:
            row = session.get(self.row, record_id)
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True

    def purge_deleted(self, before: datetime) -> int:
        if not self.collection.soft_delete:
            return 0
        with self.Session() as session:
            result = session.execute(
                delete(self.row).where(
                    self.row.deleted_at.is_not(None),
                    self.row.deleted_at < _as_utc(before),
                )
            )
            session.commit()
            return result.rowcount or 0

    def clear(self) -> int:
        with self.Session() as session:
            result = session.execute(delete(self.row))
            session.commit()
            return result.rowcount or 0


def _engine_options(database_url: str) -> dict:
    if database_url.startswith("sqlite") and ":memory:" in database_url:
        # One shared connection, otherwise every thread sees an empty database.
        return {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    return {"pool_pre_ping": True, "pool_recycle": 1800}


class DatabaseStorage:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    kind = "database"

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for DatabaseStorage")
        self.engine = create_engine(database_url, **_engine_options(database_url))
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False
        )
        Base.metadata.create_all(self.engine)

        self.projects: SqlRepository[Project] = SqlRepository(
            PROJECTS, ProjectRow, self.Session
        )
        self.gallery_items: SqlRepository[GalleryItem] = SqlRepository(
            GALLERY_ITEMS, GalleryItemRow, self.Session
        )
        self.writings: SqlRepository[Writing] = SqlRepository(
            WRITINGS, WritingRow, self.Session
        )
        self.albums: SqlRepository[Album] = SqlRepository(
            ALBUMS, AlbumRow, self.Session
        )
        self.tags: SqlRepository[Tag] = SqlRepository(TAGS, TagRow, self.Session)
        self.photo_locations: SqlRepository[PhotoLocation] = SqlRepository(
            PHOTO_LOCATIONS, PhotoLocationRow, self.Session
        )
        self.photo_devices: SqlRepository[PhotoDevice] = SqlRepository(
            PHOTO_DEVICES, PhotoDeviceRow, self.Session
        )

    def repository(self, name: str) -> SqlRepository:
        if name not in COLLECTIONS:
            raise KeyError(name)
        return getattr(self, name)

    def _to_cv(self, row: "CVDataRow") -> CVData:
        return CVData(
            id=row.id,
            file_name=row.file_name,
            file_url=row.file_url,
            storage_public_id=row.storage_public_id,
            mime_type=row.mime_type,
            uploaded_at=row.uploaded_at,
        )

    def get_cv_data(self) -> Optional[CVData]:
        with self.Session() as session:
            row = session.scalars(select(CVDataRow).order_by(CVDataRow.id).limit(1)).first()
            return self._to_cv(row) if row else None

    def create_cv_data(self, payload: CVDataCreate) -> CVData:
        with self.Session() as session:
            # Replace in one transaction so readers never see two records.
            session.execute(delete(CVDataRow))
            row = CVDataRow(uploaded_at=_utcnow(), **payload.model_dump())
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_cv(row)

    def delete_cv_data(self) -> bool:
        with self.Session() as session:
            result = session.execute(delete(CVDataRow))
            session.commit()
            return (result.rowcount or 0) > 0


Base = declarative_base()


class ProjectRow(Base):
    __tablename__ = "projects"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    image = Column(Text, nullable=False)
    category = Column(String(10), nullable=False, index=True)
    subcategory = Column(Text, nullable=False)
    is_private = Column(Boolean, nullable=False, default=False)
    tags = Column(JSON, nullable=False, default=list)
    project_type = Column(Text, nullable=True)
    icon = Column(Text, nullable=True)
    images = Column(JSON, nullable=False, default=list)
    hours_worked = Column(Integer, nullable=True)
    frontend_tech = Column(JSON, nullable=False, default=list)
    backend_tech = Column(JSON, nullable=False, default=list)
    initial_release_date = Column(Text, nullable=True)
    last_updated_date = Column(Text, nullable=True)
    additional_files = Column(JSON, nullable=False, default=list)
    git_url = Column(Text, nullable=True)
    project_url = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)


class GalleryItemRow(Base):
    __tablename__ = "gallery_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    image = Column(Text, nullable=False)
    category = Column(String(10), nullable=False, index=True)
    subcategory = Column(Text, nullable=False)
    is_private = Column(Boolean, nullable=False, default=False)
    medium = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    materials = Column(JSON, nullable=False, default=list)
    dimensions = Column(Text, nullable=True)
    date = Column(Text, nullable=True)
    device = Column(Text, nullable=True)
    location = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)


class CVDataRow(Base):
    __tablename__ = "cv_data"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    file_name = Column(Text, nullable=False)
    file_url = Column(Text, nullable=False)
    storage_public_id = Column(Text, nullable=False)
    mime_type = Column(Text, nullable=False, default="application/pdf")
    uploaded_at = Column(DateTime(timezone=True), nullable=False)


class WritingRow(Base):
    __tablename__ = "writings"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    type = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    excerpt = Column(Text, nullable=False)
    word_count = Column(Integer, nullable=False, default=0)
    date_written = Column(Text, nullable=False)
    last_modified = Column(Text, nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    mood = Column(Text, nullable=False)
    is_private = Column(Boolean, nullable=False, default=False)
    published = Column(Boolean, nullable=False, default=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)


class AlbumRow(Base):
    __tablename__ = "albums"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    color = Column(Text, nullable=True)
    icon = Column(Text, nullable=True)
    item_ids = Column(JSON, nullable=False, default=list)
    content_type = Column(Text, nullable=True, index=True)


class TagRow(Base):
    __tablename__ = "tags"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False, unique=True)
    type = Column(Text, nullable=False)
    sentiment = Column(Text, nullable=True)


class PhotoLocationRow(Base):
    __tablename__ = "photo_locations"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False, unique=True)


class PhotoDeviceRow(Base):
    __tablename__ = "photo_devices"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False, unique=True)
