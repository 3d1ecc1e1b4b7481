"""
Episode endpoints (list/get/upload/delete).
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from ..context import AppContext, get_context
from ..middleware.auth import get_current_user
from ..models.schemas import (
    EpisodeListResponse,
    EpisodeResponse,
    ErrorResponse,
    MessageResponse,
)
from ..services.identity import TokenIdentity
from ..services.uploads import IncomingFile, measure

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["podcasts"])


def _incoming(upload: Optional[UploadFile], default_name: str) -> Optional[IncomingFile]:
    if upload is None:
        return None
    return IncomingFile(
        file=upload.file,
        filename=upload.filename or default_name,
        content_type=upload.content_type,
        size=measure(upload.file),
    )


@router.get(
    "/podcasts",
    response_model=EpisodeListResponse,
    responses={500: {"model": ErrorResponse}},
)
def list_podcasts(context: AppContext = Depends(get_context)) -> EpisodeListResponse:
    """
    List all episodes, newest first, without their audio references.
    """
    items = context.episode_service.list_episodes()
    return EpisodeListResponse(count=len(items), data=items)


@router.get(
    "/podcast/{podcast_id}",
    response_model=EpisodeResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_podcast(podcast_id: str, context: AppContext = Depends(get_context)) -> EpisodeResponse:
    """
    Get one episode with its audio and image URLs.
    """
    return EpisodeResponse(data=context.episode_service.get_episode(podcast_id))


@router.post(
    "/podcast",
    status_code=status.HTTP_201_CREATED,
    response_model=EpisodeResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def create_podcast(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    author: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    audio: Optional[UploadFile] = File(None),
    image: Optional[UploadFile] = File(None),
    user: TokenIdentity = Depends(get_current_user),
    context: AppContext = Depends(get_context),
) -> EpisodeResponse:
    """
    Upload a new episode: metadata fields plus an audio file and optional image.
    """
    logger.info("Episode upload from %s: %r", user.id, title)
    episode = context.episode_service.create_episode(
        owner_id=user.id,
        title=title,
        description=description,
        author=author,
        category=category,
        audio=_incoming(audio, "audio"),
        image=_incoming(image, "image"),
    )
    return EpisodeResponse(message="Podcast uploaded successfully", data=episode)


@router.delete(
    "/podcast/{podcast_id}",
    response_model=MessageResponse,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
def delete_podcast(
    podcast_id: str,
    user: TokenIdentity = Depends(get_current_user),
    context: AppContext = Depends(get_context),
) -> MessageResponse:
    """
    Delete an episode and its files. Only the uploader may delete.
    """
    context.episode_service.delete_episode(podcast_id, user.id)
    return MessageResponse(message="Podcast deleted successfully")
