"""
Home screen view-model.

Holds everything the presentation layer renders: the auth session, the episode
library (with the "latest releases" slice), the open episode detail, the upload
dialog and the player. Views read the attributes and call the methods; they do
not talk to the API or the media element directly.
"""
import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional

from .api import ApiClientError, CreatePodcastData, FileField, PodcastApiClient
from .generation import RequestGeneration
from .mappers import Episode, podcast_to_episode, podcasts_to_episodes
from .playback import MediaElement, PlaybackController

logger = logging.getLogger(__name__)

LATEST_COUNT = 2


@dataclass
class UploadForm:
    """Fields of the upload dialog. ``author`` is shown as "Members"."""

    title: str
    description: str
    author: str
    audio: FileField
    category: Optional[str] = None
    image: Optional[FileField] = None


class HomeView:
    """State and actions behind the home page."""

    def __init__(
        self,
        api: PodcastApiClient,
        media: MediaElement,
        rng: Optional[random.Random] = None,
    ):
        self.api = api
        self.player = PlaybackController(media, rng=rng, source_resolver=self._audio_source)
        self._requests = RequestGeneration()

        # Auth session
        self.token: Optional[str] = None
        self.user: Optional[Dict] = None
        self.auth_dialog: Optional[str] = None  # "login" | "register"
        self.auth_error: Optional[str] = None

        # Library
        self.all_episodes: List[Episode] = []
        self.loading = False
        self.error: Optional[str] = None

        # Detail
        self.selected_episode: Optional[Episode] = None
        self.detail_loading = False
        self.detail_error: Optional[str] = None

        # Upload dialog
        self.upload_open = False
        self.uploading = False
        self.upload_error: Optional[str] = None

    # -- auth --------------------------------------------------------------

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def open_auth(self, mode: str) -> None:
        if mode not in ("login", "register"):
            raise ValueError(f"Unknown auth dialog: {mode}")
        self.auth_dialog = mode
        self.auth_error = None

    def close_auth(self) -> None:
        self.auth_dialog = None
        self.auth_error = None

    def _start_session(self, payload: Dict) -> None:
        data = payload.get("data") or {}
        self.token = data.get("token")
        self.user = data.get("user")
        self.close_auth()

    def login(self, email: str, password: str) -> bool:
        try:
            self._start_session(self.api.login(email, password))
        except ApiClientError as e:
            self.auth_error = e.message
            return False
        return True

    def register(self, email: str, password: str, name: str) -> bool:
        try:
            self._start_session(self.api.register(email, password, name))
        except ApiClientError as e:
            self.auth_error = e.message
            return False
        return True

    def logout(self) -> None:
        # Tokens stay valid server-side until they expire
        self.token = None
        self.user = None

    # -- library -----------------------------------------------------------

    @property
    def latest_episodes(self) -> List[Episode]:
        return self.all_episodes[:LATEST_COUNT]

    def _apply_library(self, episodes: List[Episode]) -> None:
        self.all_episodes = episodes
        self.player.set_queue(episodes)
        self.loading = False
        self.error = None

    def refresh(self) -> bool:
        """Reload the episode list. Returns False on error or a superseded response."""
        token = self._requests.begin("library")
        self.loading = True
        try:
            payload = self.api.list_podcasts()
        except ApiClientError as e:
            if self._requests.is_current(token):
                self.loading = False
                self.error = e.message
            return False
        episodes = podcasts_to_episodes(payload.get("data") or [], self.api.server_url)
        return self._requests.commit(token, episodes, self._apply_library)

    # -- detail ------------------------------------------------------------

    def _apply_detail(self, episode: Episode) -> None:
        self.selected_episode = episode
        self.detail_loading = False
        self.detail_error = None

    def open_episode(self, episode_id: str) -> bool:
        """Fetch and show one episode; only the most recently opened one wins."""
        token = self._requests.begin("detail")
        self.detail_loading = True
        try:
            payload = self.api.get_podcast(episode_id)
        except ApiClientError as e:
            if self._requests.is_current(token):
                self.detail_loading = False
                self.detail_error = e.message
            return False
        episode = podcast_to_episode(payload["data"], self.api.server_url)
        return self._requests.commit(token, episode, self._apply_detail)

    def close_episode(self) -> None:
        self._requests.cancel("detail")
        self.selected_episode = None
        self.detail_loading = False
        self.detail_error = None

    # -- playback ----------------------------------------------------------

    def _audio_source(self, episode: Episode) -> str:
        # Listed episodes carry no audio reference; resolve it through the detail endpoint
        if episode.url:
            return episode.url
        payload = self.api.get_podcast(episode.id)
        return podcast_to_episode(payload["data"], self.api.server_url).url

    def play_episode(self, episode: Episode) -> None:
        self.player.set_queue(self.all_episodes)
        self.player.load_episode(episode, autoplay=True)

    def toggle_play(self) -> bool:
        return self.player.toggle_play()

    # -- upload / delete ---------------------------------------------------

    def open_upload(self) -> None:
        self.upload_open = True
        self.upload_error = None

    def close_upload(self) -> None:
        self.upload_open = False
        self.upload_error = None

    def submit_upload(self, form: UploadForm) -> Optional[Episode]:
        """Upload an episode; on success closes the dialog and reloads the list."""
        if not self.is_authenticated:
            self.upload_error = "Please log in to upload a podcast"
            return None
        self.uploading = True
        try:
            payload = self.api.create_podcast(
                CreatePodcastData(
                    title=form.title,
                    description=form.description,
                    author=form.author,
                    audio=form.audio,
                    category=form.category,
                    image=form.image,
                ),
                self.token,
            )
        except ApiClientError as e:
            self.upload_error = e.message
            return None
        finally:
            self.uploading = False
        self.close_upload()
        self.refresh()
        return podcast_to_episode(payload["data"], self.api.server_url)

    def delete_episode(self, episode_id: str) -> bool:
        if not self.is_authenticated:
            self.error = "Please log in to delete a podcast"
            return False
        try:
            self.api.delete_podcast(episode_id, self.token)
        except ApiClientError as e:
            self.error = e.message
            return False
        current = self.player.current_episode
        if current is not None and current.id == episode_id:
            self.player.unload()
        if self.selected_episode is not None and self.selected_episode.id == episode_id:
            self.close_episode()
        self.refresh()
        return True
