import unittest
from datetime import datetime, timedelta, timezone
from unittest import mock

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from portfolio.db import ConflictError, DatabaseStorage, InMemoryStorage
from portfolio.schemas import (
    AlbumCreate,
    CVDataCreate,
    GalleryItemCreate,
    GalleryItemUpdate,
    NamedCreate,
    NamedUpdate,
    ProjectCreate,
    ProjectUpdate,
    TagCreate,
    TagUpdate,
    WritingCreate,
    WritingUpdate,
)


def make_project(**overrides) -> ProjectCreate:
    values = dict(
        title="Dashboard",
        description="Personal dashboard",
        image="/img/dashboard.png",
        category="web",
        subcategory="web-development",
    )
    values.update(overrides)
    return ProjectCreate(**values)


def make_writing(**overrides) -> WritingCreate:
    values = dict(
        title="Whispers",
        type="Poem",
        content="<p>The wind whispers</p>",
        excerpt="The wind whispers",
        date_written="2024-07-23",
        last_modified="2024-07-23",
        mood="Melancholic",
    )
    values.update(overrides)
    return WritingCreate(**values)


def make_gallery_item(**overrides) -> GalleryItemCreate:
    values = dict(
        title="Harbour",
        image="/img/harbour.jpg",
        category="photo",
        subcategory="landscape",
    )
    values.update(overrides)
    return GalleryItemCreate(**values)


class StorageContract:
    """CRUD contract every storage implementation must satisfy."""

    def make_storage(self):
        raise NotImplementedError

    def setUp(self):
        self.storage = self.make_storage()

    def test_create_assigns_increasing_ids_and_defaults(self):
        first = self.storage.projects.create(make_project())
        second = self.storage.projects.create(make_project(title="Second"))
        self.assertEqual(first.id, 1)
        self.assertEqual(second.id, 2)
        self.assertFalse(first.is_private)
        self.assertEqual(first.tags, [])
        self.assertIsNone(first.deleted_at)
        self.assertIsNotNone(first.created_at)
        self.assertEqual(first.created_at, first.updated_at)

    def test_get_missing_returns_none(self):
        self.assertIsNone(self.storage.projects.get(42))
        self.assertIsNone(self.storage.tags.get(42))

    def test_list_reflects_writes(self):
        self.assertEqual(self.storage.writings.list_all(), [])
        created = self.storage.writings.create(make_writing())
        self.storage.writings.create(make_writing(title="Second"))
        titles = [w.title for w in self.storage.writings.list_all()]
        self.assertEqual(titles, ["Whispers", "Second"])

        self.storage.writings.delete(created.id)
        titles = [w.title for w in self.storage.writings.list_all()]
        self.assertEqual(titles, ["Second"])

    def test_update_merges_partial_fields(self):
        project = self.storage.projects.create(
            make_project(tags=["react"], hours_worked=10)
        )
        updated = self.storage.projects.update(
            project.id, ProjectUpdate(title="Renamed", backend_tech=["FastAPI"])
        )
        self.assertEqual(updated.title, "Renamed")
        self.assertEqual(updated.backend_tech, ["FastAPI"])
        self.assertEqual(updated.tags, ["react"])
        self.assertEqual(updated.hours_worked, 10)
        self.assertEqual(updated.created_at, project.created_at)
        self.assertGreaterEqual(updated.updated_at, project.updated_at)
        self.assertEqual(self.storage.projects.get(project.id).title, "Renamed")

    def test_update_can_clear_nullable_field(self):
        trashed_at = datetime(2024, 1, 1, tzinfo=timezone.utc)
        writing = self.storage.writings.create(make_writing(deleted_at=trashed_at))
        self.assertEqual(writing.deleted_at, trashed_at)

        restored = self.storage.writings.update(
            writing.id, WritingUpdate(deleted_at=None)
        )
        self.assertIsNone(restored.deleted_at)
        self.assertEqual(restored.title, "Whispers")

    def test_update_missing_returns_none(self):
        self.assertIsNone(self.storage.projects.update(99, ProjectUpdate(title="x")))
        self.assertIsNone(self.storage.albums.update(99, {"name": "x"}))

    def test_update_rejects_invalid_raw_changes(self):
        album = self.storage.albums.create(AlbumCreate(name="Poems"))
        with self.assertRaises(ValidationError):
            self.storage.albums.update(album.id, {"content_type": "films"})
        with self.assertRaises(ValidationError):
            self.storage.albums.update(album.id, {"name": None})
        stored = self.storage.albums.get(album.id)
        self.assertEqual(stored.name, "Poems")
        self.assertIsNone(stored.content_type)

    def test_delete(self):
        album = self.storage.albums.create(AlbumCreate(name="Poems", item_ids=[1, 2]))
        self.assertTrue(self.storage.albums.delete(album.id))
        self.assertIsNone(self.storage.albums.get(album.id))
        self.assertFalse(self.storage.albums.delete(album.id))

    def test_ids_are_not_reused_after_delete(self):
        first = self.storage.tags.create(TagCreate(name="a", type="theme"))
        self.storage.tags.delete(first.id)
        second = self.storage.tags.create(TagCreate(name="b", type="theme"))
        self.assertNotEqual(first.id, second.id)

    def test_list_by_filters(self):
        self.storage.gallery_items.create(make_gallery_item())
        self.storage.gallery_items.create(make_gallery_item(category="art"))
        photos = self.storage.gallery_items.list_by(category="photo")
        self.assertEqual([p.category for p in photos], ["photo"])
        self.assertEqual(self.storage.gallery_items.list_by(category="none"), [])

        self.storage.albums.create(AlbumCreate(name="Art", content_type="art"))
        self.storage.albums.create(AlbumCreate(name="Poems", content_type="writings"))
        scoped = self.storage.albums.list_by(content_type="writings")
        self.assertEqual([a.name for a in scoped], ["Poems"])

    def test_list_by_unknown_field_raises(self):
        with self.assertRaises(ValueError):
            self.storage.projects.list_by(colour="red")

    def test_list_trashed(self):
        now = datetime.now(timezone.utc)
        self.storage.gallery_items.create(make_gallery_item(title="kept"))
        self.storage.gallery_items.create(make_gallery_item(title="gone", deleted_at=now))
        self.storage.gallery_items.create(
            make_gallery_item(title="art gone", category="art", deleted_at=now)
        )

        trashed = self.storage.gallery_items.list_trashed()
        self.assertEqual([g.title for g in trashed], ["gone", "art gone"])
        trashed_art = self.storage.gallery_items.list_trashed(category="art")
        self.assertEqual([g.title for g in trashed_art], ["art gone"])
        # Soft-deleted records are still part of the full listing.
        self.assertEqual(len(self.storage.gallery_items.list_all()), 3)
        self.assertEqual(self.storage.tags.list_trashed(), [])

    def test_purge_deleted_only_removes_expired(self):
        now = datetime.now(timezone.utc)
        old = self.storage.writings.create(
            make_writing(title="old", deleted_at=now - timedelta(days=40))
        )
        recent = self.storage.writings.create(
            make_writing(title="recent", deleted_at=now - timedelta(days=2))
        )
        live = self.storage.writings.create(make_writing(title="live"))

        removed = self.storage.writings.purge_deleted(now - timedelta(days=30))
        self.assertEqual(removed, 1)
        self.assertIsNone(self.storage.writings.get(old.id))
        self.assertIsNotNone(self.storage.writings.get(recent.id))
        self.assertIsNotNone(self.storage.writings.get(live.id))
        self.assertEqual(self.storage.albums.purge_deleted(now), 0)

    def test_unique_name_conflicts(self):
        self.storage.tags.create(TagCreate(name="nature", type="theme"))
        with self.assertRaises(ConflictError):
            self.storage.tags.create(TagCreate(name="nature", type="place"))
        self.assertEqual(len(self.storage.tags.list_all()), 1)

        other = self.storage.tags.create(TagCreate(name="sea", type="place"))
        with self.assertRaises(ConflictError):
            self.storage.tags.update(other.id, TagUpdate(name="nature"))
        self.assertEqual(self.storage.tags.get(other.id).name, "sea")

        # Renaming a record to its own name is not a conflict.
        same = self.storage.tags.update(other.id, TagUpdate(name="sea", sentiment="calm"))
        self.assertEqual(same.sentiment, "calm")

    def test_photo_locations_and_devices(self):
        location = self.storage.photo_locations.create(NamedCreate(name="Constanta"))
        self.storage.photo_devices.create(NamedCreate(name="X-T30"))
        with self.assertRaises(ConflictError):
            self.storage.photo_locations.create(NamedCreate(name="Constanta"))
        # Locations and devices are independent namespaces.
        self.storage.photo_devices.create(NamedCreate(name="Constanta"))

        renamed = self.storage.photo_locations.update(
            location.id, NamedUpdate(name="Sinaia")
        )
        self.assertEqual(renamed.name, "Sinaia")

    def test_cv_data_is_a_singleton(self):
        self.assertIsNone(self.storage.get_cv_data())
        self.assertFalse(self.storage.delete_cv_data())

        first = self.storage.create_cv_data(
            CVDataCreate(
                file_name="cv.pdf", file_url="https://cdn/cv.pdf", storage_public_id="cv1"
            )
        )
        self.assertEqual(first.mime_type, "application/pdf")
        second = self.storage.create_cv_data(
            CVDataCreate(
                file_name="cv-2025.pdf",
                file_url="https://cdn/cv-2025.pdf",
                storage_public_id="cv2",
            )
        )
        self.assertNotEqual(first.id, second.id)
        self.assertEqual(self.storage.get_cv_data().file_name, "cv-2025.pdf")

        self.assertTrue(self.storage.delete_cv_data())
        self.assertIsNone(self.storage.get_cv_data())

    def test_clear(self):
        self.storage.tags.create(TagCreate(name="a", type="theme"))
        self.storage.tags.create(TagCreate(name="b", type="theme"))
        self.assertEqual(self.storage.tags.clear(), 2)
        self.assertEqual(self.storage.tags.list_all(), [])

    def test_repository_lookup(self):
        self.assertIs(self.storage.repository("gallery_items"), self.storage.gallery_items)
        with self.assertRaises(KeyError):
            self.storage.repository("music")

    def test_gallery_update_keeps_photo_fields(self):
        item = self.storage.gallery_items.create(
            make_gallery_item(device="X-T30", location="Sinaia")
        )
        updated = self.storage.gallery_items.update(
            item.id, GalleryItemUpdate(location=None, is_private=True)
        )
        self.assertEqual(updated.device, "X-T30")
        self.assertIsNone(updated.location)
        self.assertTrue(updated.is_private)


class InMemoryStorageTests(StorageContract, unittest.TestCase):
    def make_storage(self):
        return InMemoryStorage()

    def test_returned_records_are_copies(self):
        project = self.storage.projects.create(make_project(tags=["a"]))
        project.tags.append("mutated")
        self.assertEqual(self.storage.projects.get(project.id).tags, ["a"])

    def test_reset(self):
        self.storage.projects.create(make_project())
        self.storage.reset()
        self.assertEqual(self.storage.projects.list_all(), [])
        self.assertEqual(self.storage.projects.create(make_project()).id, 1)


class DatabaseStorageTests(StorageContract, unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the database storage logic.
    """

    def make_storage(self):
        return DatabaseStorage("sqlite+pysqlite:///:memory:")

    def test_requires_url(self):
        with self.assertRaises(ValueError):
            DatabaseStorage("")

    def test_integrity_errors_without_unique_fields_propagate(self):
        session = mock.Mock()
        session.commit.side_effect = IntegrityError(
            "INSERT", {}, Exception("NOT NULL constraint failed: albums.name")
        )
        with self.assertRaises(IntegrityError):
            self.storage.albums._commit(session)
        session.rollback.assert_called_once()

        with self.assertRaises(ConflictError):
            self.storage.tags._commit(session)

    def test_timestamps_come_back_as_utc(self):
        project = self.storage.projects.create(make_project())
        loaded = self.storage.projects.get(project.id)
        self.assertEqual(loaded.created_at.tzinfo, timezone.utc)


if __name__ == "__main__":
    unittest.main()
