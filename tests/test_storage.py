import io
import unittest
from datetime import datetime, timezone
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import mock

import support  # noqa: F401  (puts src/ on sys.path)

from podcastr.errors import NotFound, StorageError, ValidationError
from podcastr.models.blob_storage import BlobStore
from podcastr.models.episode_storage import EpisodeStorage
from podcastr.models.user_storage import UserStorage


class TestBlobStore(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = TemporaryDirectory()
        self.store = BlobStore(Path(self._tmp.name) / "uploads", chunk_size=4)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_upload_stream_and_read_back(self) -> None:
        blob_id = self.store.upload(
            io.BytesIO(b"hello world"),
            filename="greeting.mp3",
            content_type="audio/mpeg",
            metadata={"field_name": "audio", "uploaded_by": "u1"},
        )
        self.assertTrue(BlobStore.is_valid_id(blob_id))
        info = self.store.info(blob_id)
        self.assertEqual(info.length, 11)
        self.assertEqual(info.content_type, "audio/mpeg")
        self.assertEqual(info.filename, "greeting.mp3")
        self.assertEqual(info.metadata["field_name"], "audio")
        self.assertEqual(self.store.read_bytes(blob_id), b"hello world")

    def test_upload_from_iterable(self) -> None:
        blob_id = self.store.upload(iter([b"ab", b"", b"cd"]), filename="x")
        self.assertEqual(self.store.read_bytes(blob_id), b"abcd")

    def test_partial_range(self) -> None:
        blob_id = self.store.upload(b"0123456789", filename="digits")
        _, handle = self.store.open(blob_id)
        self.assertEqual(b"".join(self.store.iter_chunks(handle, 3, 8)), b"345678")
        self.assertTrue(handle.closed)

    def test_write_failure_raises_storage_error_and_cleans_up(self) -> None:
        with mock.patch("podcastr.models.blob_storage.os.fsync", side_effect=OSError("disk full")):
            with self.assertRaises(StorageError):
                self.store.upload(b"data", filename="f")
        self.assertEqual(list(self.store.root_dir.iterdir()), [])

    def test_read_error_mid_stream_ends_quietly(self) -> None:
        class FailingHandle(io.BytesIO):
            def read(self, size=-1):
                raise OSError("device gone")

        handle = FailingHandle(b"abc")
        self.assertEqual(list(self.store.iter_chunks(handle, blob_id="x")), [])
        self.assertTrue(handle.closed)

    def test_lookup_of_invalid_or_missing_ids(self) -> None:
        with self.assertRaises(NotFound):
            self.store.info("not-valid")
        with self.assertRaises(NotFound):
            self.store.open("0123456789abcdef01234567")
        self.assertFalse(self.store.exists("0123456789abcdef01234567"))

    def test_delete(self) -> None:
        blob_id = self.store.upload(b"x", filename="x")
        self.store.delete(blob_id)
        self.assertFalse(self.store.exists(blob_id))
        with self.assertRaises(NotFound):
            self.store.delete(blob_id)


class TestEpisodeStorage(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = TemporaryDirectory()
        self.storage = EpisodeStorage(Path(self._tmp.name) / "episodes.json")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _add(self, title="Title", **kwargs):
        fields = {
            "description": "Desc",
            "author": "Host",
            "audio_file_id": "0123456789abcdef01234567",
            "uploaded_by": "u1",
        }
        fields.update(kwargs)
        return self.storage.add_episode(title=title, **fields)

    def test_add_applies_defaults(self) -> None:
        doc = self._add(title="  Padded  ")
        self.assertEqual(doc["title"], "Padded")
        self.assertEqual(doc["category"], "General")
        self.assertIsNone(doc["image_file_id"])
        self.assertEqual(doc["created_at"], doc["updated_at"])
        self.assertEqual(self.storage.get_episode(doc["id"])["title"], "Padded")

    def test_validation(self) -> None:
        with self.assertRaises(ValidationError):
            self._add(title="x" * 201)
        with self.assertRaises(ValidationError):
            self._add(description="x" * 2001)
        with self.assertRaises(ValidationError):
            self._add(audio_file_id="")
        self.assertEqual(self.storage.list_episodes(), [])

    def test_list_newest_first_and_delete(self) -> None:
        first = self._add(title="One")
        second = self._add(title="Two")
        self.assertEqual([d["id"] for d in self.storage.list_episodes()], [second["id"], first["id"]])

        removed = self.storage.delete_episode(first["id"])
        self.assertEqual(removed["id"], first["id"])
        self.assertIsNone(self.storage.delete_episode(first["id"]))
        self.assertIsNone(self.storage.get_episode("bogus"))

    def test_persists_across_instances(self) -> None:
        doc = self._add()
        reopened = EpisodeStorage(self.storage.storage_file)
        self.assertEqual(reopened.get_episode(doc["id"])["author"], "Host")

    def test_whole_second_timestamps_sort_correctly(self) -> None:
        whole = datetime(2024, 1, 1, 0, 0, 5, tzinfo=timezone.utc)
        later = datetime(2024, 1, 1, 0, 0, 5, 400000, tzinfo=timezone.utc)
        with mock.patch("podcastr.models.document_store.datetime") as clock:
            clock.now.side_effect = [whole, later]
            first = self._add(title="On the second")
            second = self._add(title="Later")

        self.assertEqual(first["created_at"], "2024-01-01T00:00:05.000000Z")
        self.assertEqual(second["created_at"], "2024-01-01T00:00:05.400000Z")
        self.assertEqual([d["id"] for d in self.storage.list_episodes()], [second["id"], first["id"]])


class TestUserStorage(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = TemporaryDirectory()
        self.storage = UserStorage(Path(self._tmp.name) / "users.json")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_unique_normalized_email(self) -> None:
        user = self.storage.create_user(" A@B.com ", "A", "hash")
        self.assertEqual(user["email"], "a@b.com")
        self.assertEqual(self.storage.find_by_email("a@B.COM")["id"], user["id"])
        self.assertEqual(self.storage.get_user(user["id"])["name"], "A")
        with self.assertRaises(ValidationError):
            self.storage.create_user("a@b.com", "Other", "hash")


if __name__ == "__main__":
    unittest.main()
