"""
HTTP routes for the portfolio API.

Every collection gets the same five endpoints from ``build_crud_router``;
the collection-specific reads (category, trash, filters) are added next to
them. Record ids are matched with the ``int`` path converter so literal
segments such as ``/trash`` never collide with ``/{record_id}``.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from portfolio.config import get_settings
from portfolio.conventions import order_pinned_first
from portfolio.db import COLLECTIONS, ConflictError, Storage
from portfolio.dependencies import get_storage
from portfolio.schemas import (
    Album,
    AlbumContentType,
    AlbumCreate,
    AlbumUpdate,
    CVData,
    CVDataCreate,
    GalleryItem,
    GalleryItemCreate,
    GalleryItemUpdate,
    HealthResponse,
    NamedCreate,
    NamedUpdate,
    PhotoDevice,
    PhotoLocation,
    Project,
    ProjectCreate,
    ProjectUpdate,
    PurgeResponse,
    Tag,
    TagCreate,
    TagUpdate,
    Writing,
    WritingCreate,
    WritingUpdate,
)
from portfolio.trash import purge_trash

logger = logging.getLogger(__name__)

router = APIRouter()


def _conflict(exc: ConflictError) -> HTTPException:
    logger.info("Conflict: %s", exc)
    return HTTPException(status_code=409, detail=str(exc))


def build_crud_router(
    collection_name: str,
    *,
    create_model,
    update_model,
    record_model,
    include_list: bool = True,
) -> APIRouter:
    """
    Build list / get / create / update / delete endpoints for one collection.
    """
    label = COLLECTIONS[collection_name].label
    crud = APIRouter()

    if include_list:

        @crud.get("", response_model=list[record_model])
        def list_records(storage: Storage = Depends(get_storage)):
            return storage.repository(collection_name).list_all()

    @crud.get("/{record_id:int}", response_model=record_model)
    def get_record(record_id: int, storage: Storage = Depends(get_storage)):
        record = storage.repository(collection_name).get(record_id)
        if record is None:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return record

    @crud.post("", response_model=record_model, status_code=201)
    def create_record(payload: create_model, storage: Storage = Depends(get_storage)):
        try:
            return storage.repository(collection_name).create(payload)
        except ConflictError as exc:
            raise _conflict(exc) from exc

    @crud.api_route(
        "/{record_id:int}", methods=["PUT", "PATCH"], response_model=record_model
    )
    def update_record(
        record_id: int,
        payload: update_model,
        storage: Storage = Depends(get_storage),
    ):
        try:
            record = storage.repository(collection_name).update(record_id, payload)
        except ConflictError as exc:
            raise _conflict(exc) from exc
        if record is None:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return record

    @crud.delete("/{record_id:int}", status_code=204)
    def delete_record(record_id: int, storage: Storage = Depends(get_storage)):
        if not storage.repository(collection_name).delete(record_id):
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return Response(status_code=204)

    return crud


# Projects

projects_router = build_crud_router(
    "projects",
    create_model=ProjectCreate,
    update_model=ProjectUpdate,
    record_model=Project,
)


@projects_router.get("/category/{category}", response_model=list[Project])
def list_projects_by_category(category: str, storage: Storage = Depends(get_storage)):
    return storage.projects.list_by(category=category)


@projects_router.get("/trash", response_model=list[Project])
def list_trashed_projects(storage: Storage = Depends(get_storage)):
    return storage.projects.list_trashed()


# Gallery

gallery_router = build_crud_router(
    "gallery_items",
    create_model=GalleryItemCreate,
    update_model=GalleryItemUpdate,
    record_model=GalleryItem,
)


@gallery_router.get("/category/{category}", response_model=list[GalleryItem])
def list_gallery_by_category(category: str, storage: Storage = Depends(get_storage)):
    return storage.gallery_items.list_by(category=category)


@gallery_router.get("/trash", response_model=list[GalleryItem])
def list_trashed_gallery(storage: Storage = Depends(get_storage)):
    return storage.gallery_items.list_trashed()


@gallery_router.get("/trash/{category}", response_model=list[GalleryItem])
def list_trashed_gallery_by_category(
    category: str, storage: Storage = Depends(get_storage)
):
    return storage.gallery_items.list_trashed(category=category)


# Writings

writings_router = build_crud_router(
    "writings",
    create_model=WritingCreate,
    update_model=WritingUpdate,
    record_model=Writing,
    include_list=False,
)


@writings_router.get("", response_model=list[Writing])
def list_writings(
    pinned_first: bool = Query(False, alias="pinnedFirst"),
    storage: Storage = Depends(get_storage),
):
    writings = storage.writings.list_all()
    if pinned_first:
        writings = order_pinned_first(writings)
    return writings


@writings_router.get("/trash", response_model=list[Writing])
def list_trashed_writings(storage: Storage = Depends(get_storage)):
    return storage.writings.list_trashed()


# Albums

albums_router = build_crud_router(
    "albums",
    create_model=AlbumCreate,
    update_model=AlbumUpdate,
    record_model=Album,
    include_list=False,
)


@albums_router.get("", response_model=list[Album])
def list_albums(
    content_type: Optional[AlbumContentType] = Query(None, alias="contentType"),
    storage: Storage = Depends(get_storage),
):
    if content_type:
        return storage.albums.list_by(content_type=content_type)
    return storage.albums.list_all()


# Tags, photo locations, photo devices

tags_router = build_crud_router(
    "tags", create_model=TagCreate, update_model=TagUpdate, record_model=Tag
)
photo_locations_router = build_crud_router(
    "photo_locations",
    create_model=NamedCreate,
    update_model=NamedUpdate,
    record_model=PhotoLocation,
)
photo_devices_router = build_crud_router(
    "photo_devices",
    create_model=NamedCreate,
    update_model=NamedUpdate,
    record_model=PhotoDevice,
)


# CV data (singleton)


@router.get("/cv", response_model=Optional[CVData])
def get_cv(storage: Storage = Depends(get_storage)):
    return storage.get_cv_data()


@router.post("/cv", response_model=CVData, status_code=201)
def create_cv(payload: CVDataCreate, storage: Storage = Depends(get_storage)):
    """
    Store the CV file reference, replacing the previous one.
    """
    return storage.create_cv_data(payload)


@router.delete("/cv", status_code=204)
def delete_cv(storage: Storage = Depends(get_storage)):
    if not storage.delete_cv_data():
        raise HTTPException(status_code=404, detail="CV data not found")
    return Response(status_code=204)


# Maintenance


@router.post("/trash/purge", response_model=PurgeResponse)
def purge_expired_trash(
    retention_days: Optional[int] = Query(None, ge=1, alias="retentionDays"),
    storage: Storage = Depends(get_storage),
):
    days = retention_days or get_settings().trash_retention_days
    cutoff, purged = purge_trash(storage, days)
    return PurgeResponse(retention_days=days, cutoff=cutoff, purged=purged)


@router.get("/health", response_model=HealthResponse)
def health(storage: Storage = Depends(get_storage)):
    return HealthResponse(
        status="ok", timestamp=datetime.now(timezone.utc), storage=storage.kind
    )


router.include_router(projects_router, prefix="/projects", tags=["projects"])
router.include_router(gallery_router, prefix="/gallery", tags=["gallery"])
router.include_router(writings_router, prefix="/writings", tags=["writings"])
router.include_router(albums_router, prefix="/albums", tags=["albums"])
router.include_router(tags_router, prefix="/tags", tags=["tags"])
router.include_router(
    photo_locations_router, prefix="/photo-locations", tags=["photo-locations"]
)
router.include_router(
    photo_devices_router, prefix="/photo-devices", tags=["photo-devices"]
)
