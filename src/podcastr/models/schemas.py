"""
Pydantic models for request/response validation.

Responses are serialized with camelCase aliases (``audioFileId``, ``createdAt``...).
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base model serializing field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(BaseModel):
    """Request model for account registration."""

    email: Optional[str] = Field(None, description="Account email (unique)")
    password: Optional[str] = Field(None, description="Plain-text password")
    name: Optional[str] = Field(None, description="Display name")


class LoginRequest(BaseModel):
    """Request model for login."""

    email: Optional[str] = Field(None, description="Account email")
    password: Optional[str] = Field(None, description="Plain-text password")


class UserResponse(ApiModel):
    """Public view of a user."""

    id: str = Field(..., description="User identifier")
    email: str = Field(..., description="User email")
    name: str = Field(..., description="User display name")


class AuthData(ApiModel):
    token: str = Field(..., description="Signed bearer token")
    user: UserResponse


class AuthResponse(ApiModel):
    """Response model for register/login."""

    success: bool = True
    message: str
    data: AuthData


class EpisodeSummary(ApiModel):
    """Episode metadata as listed; never carries the audio blob reference."""

    id: str = Field(..., description="Episode identifier")
    title: str
    description: str
    author: str
    category: str = "General"
    image_file_id: Optional[str] = Field(None, description="Image blob id, if any")
    duration: Optional[int] = Field(None, description="Duration in seconds")
    file_size: int = Field(0, description="Audio file size in bytes")
    uploaded_by: Optional[UserResponse] = None
    created_at: str
    updated_at: str
    image_url: Optional[str] = Field(None, description="Relative URL of the episode image")


class EpisodeDetail(EpisodeSummary):
    """Full episode metadata including media URLs."""

    audio_file_id: str = Field(..., description="Audio blob id")
    audio_url: str = Field(..., description="Relative URL of the audio stream")


class EpisodeListResponse(ApiModel):
    success: bool = True
    count: int
    data: List[EpisodeSummary]


class EpisodeResponse(ApiModel):
    success: bool = True
    message: Optional[str] = None
    data: EpisodeDetail


class MessageResponse(ApiModel):
    success: bool = True
    message: str


class ErrorResponse(ApiModel):
    """Error envelope."""

    success: bool = False
    message: str
    error: Optional[str] = Field(None, description="Error detail (development only)")
