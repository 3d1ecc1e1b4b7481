"""
Process-wide handles, built once at startup and passed to request handlers.
"""
import logging
from dataclasses import dataclass

from fastapi import Request

from .config import Config
from .models.blob_storage import BlobStore
from .models.episode_storage import EpisodeStorage
from .models.user_storage import UserStorage
from .services.accounts import AccountService
from .services.episodes import EpisodeService
from .services.identity import IdentityService

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Stores and services shared by every request."""

    config: Config
    users: UserStorage
    episodes: EpisodeStorage
    blobs: BlobStore
    identity: IdentityService
    accounts: AccountService
    episode_service: EpisodeService

    @classmethod
    def from_config(cls, config: Config) -> "AppContext":
        config.validate()
        users = UserStorage(config.users_file)
        episodes = EpisodeStorage(config.episodes_file)
        blobs = BlobStore(config.blobs_dir)
        identity = IdentityService(config.JWT_SECRET, config.token_lifetime_seconds)
        logger.info("Storage opened at %s", config.STORAGE_DIR)
        return cls(
            config=config,
            users=users,
            episodes=episodes,
            blobs=blobs,
            identity=identity,
            accounts=AccountService(users, identity, config.BCRYPT_ROUNDS),
            episode_service=EpisodeService(episodes, users, blobs, config.MAX_FILE_SIZE),
        )


def get_context(request: Request) -> AppContext:
    return request.app.state.context
