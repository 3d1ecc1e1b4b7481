"""
Playback controller: a small state machine driving one media element.

States::

    EMPTY ──load_episode──▶ LOADING ──handle_ready──▶ PAUSED ◀──pause/play──▶ PLAYING

``load_episode`` is accepted from any state and always resets the position to
0. Loads triggered by an advance (next/previous/end of media) or an explicit
"play this episode" request carry ``autoplay`` and start playing as soon as the
media reports ready. A media error from any state drops back to EMPTY with
``last_error`` set.

The media element is reached only through the ``MediaElement`` protocol; its
asynchronous events are fed back by calling the ``handle_*`` methods.
"""
import logging
import math
import random
from enum import Enum
from typing import Callable, List, Optional, Protocol, Sequence

from .mappers import Episode

logger = logging.getLogger(__name__)


class PlaybackState(str, Enum):
    EMPTY = "empty"
    LOADING = "loading"
    PAUSED = "paused"
    PLAYING = "playing"


READY_STATES = (PlaybackState.PAUSED, PlaybackState.PLAYING)


class PlaybackError(Exception):
    """Raised (and surfaced through ``last_error``) when an episode cannot be played."""


class MediaElement(Protocol):
    """The subset of an audio element the controller drives."""

    def load(self, url: str) -> None:
        ...

    def play(self) -> None:
        ...

    def pause(self) -> None:
        ...

    def seek(self, seconds: float) -> None:
        ...


Listener = Callable[["PlaybackController"], None]
SourceResolver = Callable[[Episode], str]


def _episode_source(episode: Episode) -> str:
    return episode.url


class PlaybackController:
    """Owns the playback session for a single media element."""

    def __init__(
        self,
        media: MediaElement,
        rng: Optional[random.Random] = None,
        source_resolver: Optional[SourceResolver] = None,
    ):
        self.media = media
        self._rng = rng or random.Random()
        self._resolve_source = source_resolver or _episode_source
        self._listeners: List[Listener] = []
        self._autoplay_pending = False

        self.state = PlaybackState.EMPTY
        self.current_episode: Optional[Episode] = None
        self.position = 0.0
        self.duration: Optional[float] = None
        self.repeat = False
        self.shuffle = False
        self.queue: List[Episode] = []
        self.last_error: Optional[Exception] = None

    # -- observers ---------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(controller)`` after every change; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _set_state(self, state: PlaybackState) -> None:
        self.state = state
        self._notify()

    # -- derived -----------------------------------------------------------

    @property
    def is_playing(self) -> bool:
        return self.state is PlaybackState.PLAYING

    @property
    def can_play(self) -> bool:
        """False while loading or empty; views disable the play button then."""
        return self.state in READY_STATES

    @property
    def has_next(self) -> bool:
        return self._neighbour(1, pick=False) is not None

    @property
    def has_previous(self) -> bool:
        return self._neighbour(-1, pick=False) is not None

    def _clamp(self, seconds: float) -> float:
        seconds = max(float(seconds), 0.0)
        if self.duration is not None:
            seconds = min(seconds, self.duration)
        return seconds

    def _current_index(self) -> int:
        if self.current_episode is None:
            return -1
        for i, episode in enumerate(self.queue):
            if episode.id == self.current_episode.id:
                return i
        return -1

    def _neighbour(self, step: int, pick: bool = True) -> Optional[Episode]:
        if self.current_episode is None:
            return None
        if self.shuffle:
            if len(self.queue) <= 1:
                return None
            others = [e for e in self.queue if e.id != self.current_episode.id]
            if not others:
                return None
            return self._rng.choice(others) if pick else others[0]
        index = self._current_index()
        if index < 0:
            return None
        target = index + step
        if 0 <= target < len(self.queue):
            return self.queue[target]
        return None

    # -- commands ----------------------------------------------------------

    def set_queue(self, episodes: Sequence[Episode]) -> None:
        """Sequencing order for next/previous, as fetched (newest first)."""
        self.queue = list(episodes)
        self._notify()

    def set_repeat(self, enabled: bool) -> None:
        self.repeat = bool(enabled)
        self._notify()

    def set_shuffle(self, enabled: bool) -> None:
        self.shuffle = bool(enabled)
        self._notify()

    def load_episode(self, episode: Episode, autoplay: bool = False) -> None:
        """Assign a new source; enters LOADING with the position reset to 0."""
        self.current_episode = episode
        self.position = 0.0
        self.duration = None
        self.last_error = None
        self._autoplay_pending = autoplay
        self._set_state(PlaybackState.LOADING)
        try:
            url = self._resolve_source(episode)
            if not url:
                raise PlaybackError(f"Episode {episode.id} has no audio source")
            self.media.load(url)
        except Exception as e:
            self.handle_error(e)

    def play(self) -> bool:
        """
        Start playback. Ignored unless the media is ready.

        A media element that refuses to start is logged; the session still
        reports PLAYING.
        """
        if self.state not in READY_STATES:
            return False
        if self.state is PlaybackState.PLAYING:
            return True
        if self.duration is not None and self.position >= self.duration:
            self.position = 0.0
            self._seek_media(0.0)
        self._set_state(PlaybackState.PLAYING)
        try:
            self.media.play()
        except Exception as e:
            logger.error("Failed to play audio: %s", e)
        return True

    def pause(self) -> bool:
        if self.state is not PlaybackState.PLAYING:
            return False
        self._set_state(PlaybackState.PAUSED)
        try:
            self.media.pause()
        except Exception as e:
            logger.error("Failed to pause audio: %s", e)
        return True

    def toggle_play(self) -> bool:
        if self.is_playing:
            return self.pause()
        return self.play()

    def seek(self, seconds: float) -> Optional[float]:
        """
        Move the playhead, clamped to [0, duration].

        Returns:
            The position actually applied, or None if not ready
        """
        if self.state not in READY_STATES:
            return None
        self.position = self._clamp(seconds)
        self._seek_media(self.position)
        self._notify()
        return self.position

    def _seek_media(self, seconds: float) -> None:
        try:
            self.media.seek(seconds)
        except Exception as e:
            logger.error("Failed to seek audio: %s", e)

    def next(self) -> bool:
        target = self._neighbour(1)
        if target is None:
            return False
        self.load_episode(target, autoplay=True)
        return True

    def previous(self) -> bool:
        target = self._neighbour(-1)
        if target is None:
            return False
        self.load_episode(target, autoplay=True)
        return True

    def unload(self) -> None:
        """Stop and forget the current episode."""
        if self.is_playing:
            try:
                self.media.pause()
            except Exception as e:
                logger.error("Failed to pause audio: %s", e)
        self.current_episode = None
        self.position = 0.0
        self.duration = None
        self._autoplay_pending = False
        self._set_state(PlaybackState.EMPTY)

    # -- media events ------------------------------------------------------

    def handle_ready(self, duration: Optional[float] = None) -> None:
        """Media has loaded enough metadata to play."""
        if self.state is not PlaybackState.LOADING:
            return
        if duration is None or not math.isfinite(duration) or duration <= 0:
            # Fall back to the duration extracted at upload time
            hint = self.current_episode.duration if self.current_episode else 0
            duration = float(hint) if hint else None
        self.duration = duration
        self._set_state(PlaybackState.PAUSED)
        if self._autoplay_pending:
            self._autoplay_pending = False
            self.play()

    def handle_time_update(self, seconds: float) -> None:
        if self.state not in READY_STATES:
            return
        self.position = self._clamp(seconds)
        self._notify()

    def handle_ended(self) -> None:
        """End of media: repeat, advance, or rest at the end."""
        if self.state not in READY_STATES:
            return
        if self.repeat:
            self.position = 0.0
            self._seek_media(0.0)
            self._set_state(PlaybackState.PLAYING)
            try:
                self.media.play()
            except Exception as e:
                logger.error("Failed to restart audio: %s", e)
            return
        if self.next():
            return
        if self.duration is not None:
            self.position = self.duration
        self._set_state(PlaybackState.PAUSED)

    def handle_error(self, error: Exception) -> None:
        """Media failed to load or decode; the session becomes EMPTY."""
        episode_id = self.current_episode.id if self.current_episode else None
        logger.error("Playback error for episode %s: %s", episode_id, error)
        self.last_error = error
        self.current_episode = None
        self.position = 0.0
        self.duration = None
        self._autoplay_pending = False
        self._set_state(PlaybackState.EMPTY)
