"""
Demo content for a fresh storage backend.

Used to populate the in-memory store at startup and by
``scripts/seed_database.py`` for a new database.
"""

from __future__ import annotations

import logging

from portfolio.conventions import PIN_TAG
from portfolio.db import Storage
from portfolio.schemas import (
    AlbumCreate,
    GalleryItemCreate,
    NamedCreate,
    ProjectCreate,
    TagCreate,
    WritingCreate,
)

logger = logging.getLogger(__name__)

DEMO_WRITINGS = [
    WritingCreate(
        title="Childhood Memories",
        type="Poem",
        content="<p>My grandparents' house smelled of old wood and warm bread...</p>",
        excerpt="My grandparents' house smelled of old wood and warm bread...",
        word_count=12,
        date_written="2024-08-20",
        last_modified="2024-08-20",
        tags=["childhood", "memory", "nostalgia", PIN_TAG],
        mood="Nostalgic",
        published=True,
    ),
    WritingCreate(
        title="The Corner Cafe",
        type="Poem",
        content="<p>The cafe on the corner had something special. It was the atmosphere.</p>",
        excerpt="The cafe on the corner had something special...",
        word_count=13,
        date_written="2024-08-15",
        last_modified="2024-08-15",
        tags=["urban", "observations"],
        mood="Contemplative",
        published=True,
    ),
    WritingCreate(
        title="Whispers of the Wind",
        type="Poem",
        content="<p>The wind whispers through the leaves,<br>telling forgotten secrets.</p>",
        excerpt="The wind whispers through the leaves...",
        word_count=11,
        date_written="2024-07-23",
        last_modified="2024-07-23",
        tags=["nature", "poetry"],
        mood="Melancholic",
        published=True,
    ),
    WritingCreate(
        title="Flight of the Gull",
        type="Story",
        content="<p>The gull glides over the sea, its white wings shining in the morning sun.</p>",
        excerpt="The gull glides over the sea...",
        word_count=15,
        date_written="2024-06-30",
        last_modified="2024-06-30",
        tags=["sea", "freedom"],
        mood="Joyful",
        is_private=True,
    ),
]

DEMO_TAGS = [
    TagCreate(name="childhood", type="theme", sentiment="positive"),
    TagCreate(name="memory", type="theme"),
    TagCreate(name="nostalgia", type="emotion", sentiment="neutral"),
    TagCreate(name="nature", type="theme", sentiment="positive"),
    TagCreate(name="sea", type="place"),
]

DEMO_PROJECTS = [
    ProjectCreate(
        title="Portfolio Dashboard",
        description="Personal dashboard collecting writings, art and projects.",
        image="/images/projects/dashboard.png",
        category="web",
        subcategory="web-development",
        tags=["react", "fastapi"],
        project_type="platform",
        frontend_tech=["React", "Tailwind"],
        backend_tech=["FastAPI", "PostgreSQL"],
        hours_worked=120,
    ),
    ProjectCreate(
        title="Library Catalogue",
        description="Normalized schema and reporting queries for a small library.",
        image="/images/projects/library.png",
        category="data",
        subcategory="database",
        tags=["sql"],
        backend_tech=["PostgreSQL"],
    ),
]

DEMO_GALLERY = [
    GalleryItemCreate(
        title="Harbour at Dawn",
        image="/images/gallery/harbour.jpg",
        category="photo",
        subcategory="landscape",
        device="Fujifilm X-T30",
        location="Constanta",
    ),
    GalleryItemCreate(
        title="Still Life with Pears",
        image="/images/gallery/pears.jpg",
        category="art",
        subcategory="painting",
        medium="Oil on canvas",
        materials=["oil", "canvas"],
        dimensions="40x50 cm",
    ),
]


def seed_demo_data(storage: Storage) -> None:
    """Insert the demo records. Intended for empty storage."""
    writings = [storage.writings.create(w) for w in DEMO_WRITINGS]
    for tag in DEMO_TAGS:
        storage.tags.create(tag)
    storage.albums.create(
        AlbumCreate(
            name="Poems",
            color="#7c3aed",
            icon="feather",
            item_ids=[w.id for w in writings if w.type == "Poem"],
            content_type="writings",
        )
    )
    for project in DEMO_PROJECTS:
        storage.projects.create(project)
    for item in DEMO_GALLERY:
        storage.gallery_items.create(item)
    for item in DEMO_GALLERY:
        if item.location:
            storage.photo_locations.create(NamedCreate(name=item.location))
        if item.device:
            storage.photo_devices.create(NamedCreate(name=item.device))
    logger.info(
        "Seeded demo data: %d writings, %d projects, %d gallery items",
        len(writings),
        len(DEMO_PROJECTS),
        len(DEMO_GALLERY),
    )


# Every collection seed_demo_data writes to.
SEEDED_COLLECTIONS = (
    "writings",
    "albums",
    "tags",
    "projects",
    "gallery_items",
    "photo_locations",
    "photo_devices",
)


def reseed_demo_data(storage: Storage) -> None:
    """Clear the seeded collections, then insert the demo records again."""
    for name in SEEDED_COLLECTIONS:
        removed = storage.repository(name).clear()
        logger.info("Cleared %d %s", removed, name)
    seed_demo_data(storage)
