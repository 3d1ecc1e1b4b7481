"""Client-side data, playback and view-model layers for the Podcastr API."""

from .api import ApiClientError, CreatePodcastData, PodcastApiClient
from .home import HomeView, UploadForm
from .mappers import Episode, format_date, format_duration, podcast_to_episode, podcasts_to_episodes
from .playback import MediaElement, PlaybackController, PlaybackError, PlaybackState

__all__ = [
    "ApiClientError",
    "CreatePodcastData",
    "Episode",
    "HomeView",
    "MediaElement",
    "PlaybackController",
    "PlaybackError",
    "PlaybackState",
    "PodcastApiClient",
    "UploadForm",
    "format_date",
    "format_duration",
    "podcast_to_episode",
    "podcasts_to_episodes",
]
