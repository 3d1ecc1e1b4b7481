import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from support import make_app, register, upload

AUDIO_BYTES = bytes(range(256)) * 8


class TestFileStreaming(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = TemporaryDirectory()

        from fastapi.testclient import TestClient

        self.app = make_app(Path(self._tmp.name))
        self.context = self.app.state.context
        self.client = TestClient(self.app)
        token, _ = register(self.client)
        created = upload(self.client, token, audio=AUDIO_BYTES, image=b"\x89PNG-cover").json()["data"]
        self.audio_id = created["audioFileId"]
        self.image_id = created["imageFileId"]

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_audio_round_trip(self) -> None:
        r = self.client.get(f"/api/files/audio/{self.audio_id}")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.content, AUDIO_BYTES)
        self.assertEqual(r.headers["content-type"], "audio/mpeg")
        self.assertEqual(r.headers["content-length"], str(len(AUDIO_BYTES)))
        self.assertEqual(r.headers["accept-ranges"], "bytes")
        self.assertIn('filename="episode.mp3"', r.headers["content-disposition"])
        self.assertNotIn("cache-control", r.headers)

    def test_image_is_long_cached(self) -> None:
        r = self.client.get(f"/api/files/image/{self.image_id}")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.content, b"\x89PNG-cover")
        self.assertEqual(r.headers["content-type"], "image/png")
        self.assertEqual(r.headers["cache-control"], "public, max-age=31536000")

    def test_missing_content_type_falls_back_per_endpoint(self) -> None:
        blob_id = self.context.blobs.upload(b"raw", filename="raw", content_type=None)
        self.assertEqual(
            self.client.get(f"/api/files/audio/{blob_id}").headers["content-type"], "audio/mpeg"
        )
        self.assertEqual(
            self.client.get(f"/api/files/image/{blob_id}").headers["content-type"], "image/jpeg"
        )

    def test_bad_and_unknown_ids(self) -> None:
        r = self.client.get("/api/files/audio/xyz")
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json(), {"success": False, "message": "Invalid file ID"})

        r = self.client.get("/api/files/audio/0123456789abcdef01234567")
        self.assertEqual(r.status_code, 404)
        self.assertEqual(r.json()["message"], "Audio file not found")

        r = self.client.get("/api/files/image/0123456789abcdef01234567")
        self.assertEqual(r.status_code, 404)
        self.assertEqual(r.json()["message"], "Image file not found")

    def test_byte_range(self) -> None:
        r = self.client.get(f"/api/files/audio/{self.audio_id}", headers={"Range": "bytes=10-19"})
        self.assertEqual(r.status_code, 206)
        self.assertEqual(r.content, AUDIO_BYTES[10:20])
        self.assertEqual(r.headers["content-range"], f"bytes 10-19/{len(AUDIO_BYTES)}")
        self.assertEqual(r.headers["content-length"], "10")

    def test_suffix_and_open_ended_ranges(self) -> None:
        r = self.client.get(f"/api/files/audio/{self.audio_id}", headers={"Range": "bytes=-5"})
        self.assertEqual(r.status_code, 206)
        self.assertEqual(r.content, AUDIO_BYTES[-5:])

        start = len(AUDIO_BYTES) - 3
        r = self.client.get(f"/api/files/audio/{self.audio_id}", headers={"Range": f"bytes={start}-"})
        self.assertEqual(r.status_code, 206)
        self.assertEqual(r.content, AUDIO_BYTES[start:])

    def test_unsatisfiable_range(self) -> None:
        r = self.client.get(
            f"/api/files/audio/{self.audio_id}", headers={"Range": f"bytes={len(AUDIO_BYTES)}-"}
        )
        self.assertEqual(r.status_code, 416)
        self.assertEqual(r.headers["content-range"], f"bytes */{len(AUDIO_BYTES)}")

    def test_reversed_range_is_ignored(self) -> None:
        r = self.client.get(f"/api/files/audio/{self.audio_id}", headers={"Range": "bytes=5-2"})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.content, AUDIO_BYTES)
        self.assertNotIn("content-range", r.headers)

    def test_multi_range_falls_back_to_full_body(self) -> None:
        r = self.client.get(f"/api/files/audio/{self.audio_id}", headers={"Range": "bytes=0-1,4-5"})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.content, AUDIO_BYTES)


class TestParseRange(unittest.TestCase):
    def test_parse(self) -> None:
        from podcastr.errors import RangeNotSatisfiable
        from podcastr.routes.files import parse_range

        self.assertIsNone(parse_range(None, 100))
        self.assertIsNone(parse_range("items=0-1", 100))
        self.assertIsNone(parse_range("bytes=abc", 100))
        self.assertEqual(parse_range("bytes=0-", 100), (0, 99))
        self.assertEqual(parse_range("bytes=90-200", 100), (90, 99))
        self.assertEqual(parse_range("bytes=-200", 100), (0, 99))
        self.assertIsNone(parse_range("bytes=5-2", 100))
        with self.assertRaises(RangeNotSatisfiable):
            parse_range("bytes=0-", 0)


if __name__ == "__main__":
    unittest.main()
