"""Shared setup for the test suites."""
import sys
from pathlib import Path

# Ensure `src/` is on PYTHONPATH so `import podcastr` works in tests.
PROJECT_ROOT = Path(__file__).parent.parent.resolve()
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

TEST_SECRET = "test-secret"


def make_config(storage_dir: Path, **overrides):
    from podcastr.config import Config

    settings = {
        "STORAGE_DIR": storage_dir,
        "JWT_SECRET": TEST_SECRET,
        "ENVIRONMENT": "development",
        "BCRYPT_ROUNDS": 4,
    }
    settings.update(overrides)
    return Config(**settings)


def make_app(storage_dir: Path, **overrides):
    from podcastr.main import create_app

    return create_app(make_config(storage_dir, **overrides))


def register(client, email="a@b.com", password="secret1", name="A"):
    """Register a user through the API and return (token, user)."""
    r = client.post("/api/auth/register", json={"email": email, "password": password, "name": name})
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    return data["token"], data["user"]


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def upload(client, token, title="Episode", audio=b"ID3fake-mp3-bytes", image=None, **fields):
    form = {"title": title, "description": "About things", "author": "Host"}
    form.update(fields)
    files = {}
    if audio is not None:
        files["audio"] = ("episode.mp3", audio, "audio/mpeg")
    if image is not None:
        files["image"] = ("cover.png", image, "image/png")
    return client.post("/api/podcast", data=form, files=files or None, headers=auth(token))


class FakeMedia:
    """Records the calls a PlaybackController makes on its media element."""

    def __init__(self):
        self.calls = []
        self.fail_play = False

    def load(self, url):
        self.calls.append(("load", url))

    def play(self):
        self.calls.append(("play",))
        if self.fail_play:
            raise RuntimeError("autoplay blocked")

    def pause(self):
        self.calls.append(("pause",))

    def seek(self, seconds):
        self.calls.append(("seek", seconds))
