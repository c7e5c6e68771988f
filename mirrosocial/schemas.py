"""
Pydantic schemas for the MirroSocial API.

The web and mobile clients speak camelCase, so every model serializes with
camelCase aliases while accepting either spelling on input.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Auth


class RegisterRequest(CamelModel):
    username: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=6)
    nickname: Optional[str] = None


class LoginRequest(CamelModel):
    email: str
    password: str


class UserSummary(CamelModel):
    id: str
    username: str
    nickname: Optional[str] = None
    profile_image: Optional[str] = None


class UserResponse(UserSummary):
    email: str
    about: Optional[str] = None
    created_at: float
    updated_at: float


class LoginResponse(CamelModel):
    token: str
    expires_at: float
    user: UserResponse


class ValidateUserResponse(CamelModel):
    valid: bool
    user_id: Optional[str] = None
    reason: Optional[str] = None


# Posts


class PostResponse(CamelModel):
    id: int
    user_id: str
    content: Optional[str] = None
    image: Optional[str] = None
    video: Optional[str] = None
    duration: Optional[int] = None
    has_private_location: bool = False
    community_name: Optional[str] = None
    created_at: float
    updated_at: float
    user: Optional[UserSummary] = None
    likes: int = 0
    comments: int = 0
    is_liked: bool = False


class PostListResponse(CamelModel):
    posts: list[PostResponse]


class CreatePostResponse(CamelModel):
    success: bool
    post: PostResponse


class DeletedCounts(CamelModel):
    comments: int
    likes: int
    post: int


class DeletePostResponse(CamelModel):
    message: str
    deleted_counts: DeletedCounts


class LikeResponse(CamelModel):
    liked: bool
    likes: int


class CommentRequest(CamelModel):
    content: str = Field(..., min_length=1)
    parent_comment_id: Optional[int] = None


class CommentResponse(CamelModel):
    id: int
    post_id: int
    user_id: str
    content: str
    parent_comment_id: Optional[int] = None
    created_at: float
    user: Optional[UserSummary] = None


class CommentListResponse(CamelModel):
    comments: list[CommentResponse]


# Themes and events


class ThemeStyle(CamelModel):
    primary_color: str
    secondary_color: str
    accent_color: str
    text_color: str
    background_gradient: Optional[str] = None
    font_family: str
    font_weight: str
    border_radius: int
    shadow_intensity: str


class ThemeResponse(ThemeStyle):
    id: int
    name: str
    display_name: str
    description: Optional[str] = None
    category: str
    is_active: bool = True
    created_at: float


class ThemeListResponse(CamelModel):
    themes: list[ThemeResponse]


class CreateEventRequest(CamelModel):
    # Required fields are checked by the handler so the client gets one combined message.
    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    max_participants: Optional[int] = Field(default=None, ge=0)
    is_invite: bool = False
    invite_description: Optional[str] = None
    group_name: Optional[str] = None
    theme_id: Optional[int] = None
    custom_flyer_url: Optional[str] = None
    custom_background_url: Optional[str] = None
    custom_background_type: Optional[str] = None
    is_repeating: bool = False
    repeat_pattern: Optional[str] = None
    repeat_interval: int = 1
    repeat_end_date: Optional[str] = None
    repeat_days_of_week: Optional[Union[list[int], str]] = None


class EventResponse(CamelModel):
    id: int
    title: str
    description: str
    location: str
    event_date: str
    event_time: str
    created_by: str
    share_token: str
    max_participants: Optional[int] = None
    current_participants: int
    is_active: bool
    is_invite: bool
    invite_description: Optional[str] = None
    group_name: Optional[str] = None
    group_id: Optional[int] = None
    theme_id: Optional[int] = None
    custom_flyer_url: Optional[str] = None
    thumbnail_video_url: Optional[str] = None
    thumbnail_image_url: Optional[str] = None
    custom_background_url: Optional[str] = None
    custom_background_type: Optional[str] = None
    is_repeating: bool = False
    repeat_pattern: Optional[str] = None
    repeat_interval: int = 1
    repeat_end_date: Optional[str] = None
    repeat_days_of_week: Optional[str] = None
    parent_event_id: Optional[int] = None
    created_at: float
    updated_at: float
    created_by_username: str
    share_url: str
    has_joined: bool = False
    theme: Optional[ThemeStyle] = None
    repeat_description: str = ""
    participants: Optional[list[UserSummary]] = None


class EventListResponse(CamelModel):
    events: list[EventResponse]


class CreateEventResponse(CamelModel):
    event: EventResponse


class PublicEvent(CamelModel):
    id: int
    title: str
    description: str
    location: str
    event_date: str
    event_time: str
    max_participants: Optional[int] = None
    current_participants: int
    is_invite: bool
    invite_description: Optional[str] = None
    custom_flyer_url: Optional[str] = None
    thumbnail_video_url: Optional[str] = None
    thumbnail_image_url: Optional[str] = None
    custom_background_url: Optional[str] = None
    custom_background_type: Optional[str] = None
    created_by_username: str
    theme: Optional[ThemeStyle] = None
    repeat_description: str = ""


class PublicEventResponse(CamelModel):
    success: bool
    event: PublicEvent


class OccurrencesResponse(CamelModel):
    occurrences: list[str]
    description: str


class MembershipResponse(CamelModel):
    message: str
    current_participants: int


class EventMediaRequest(CamelModel):
    media_url: Optional[str] = None
    media_type: Optional[str] = None
    thumbnail_url: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    is_public: bool = True


class EventMediaResponse(CamelModel):
    id: int
    event_id: int
    uploaded_by: str
    media_url: str
    media_type: str
    mime_type: Optional[str] = None
    thumbnail_url: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    file_size: Optional[int] = None
    is_public: bool = True
    uploaded_at: float
    uploader: Optional[UserSummary] = None


class EventMediaListResponse(CamelModel):
    media: list[EventMediaResponse]


class EventMediaCreatedResponse(CamelModel):
    media: EventMediaResponse


class CreateVideoRequest(CamelModel):
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[float] = None
    file_size: Optional[float] = None
    mime_type: Optional[str] = None
    is_public: bool = True


class UpdateVideoRequest(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    is_public: Optional[bool] = None


class VideoResponse(EventMediaResponse):
    video_url: str
    can_edit: bool = False
    can_delete: bool = False


class VideoListResponse(CamelModel):
    videos: list[VideoResponse]


class VideoEnvelope(CamelModel):
    video: VideoResponse


class ThumbnailRequest(CamelModel):
    video_id: Optional[int] = None


class ThumbnailResponse(CamelModel):
    message: str
    thumbnail_video_url: Optional[str] = None
    thumbnail_image_url: Optional[str] = None


class EventVideoUploadResponse(CamelModel):
    success: bool
    video_url: str
    thumbnail_url: Optional[str] = None
    file_name: Optional[str] = None
    file_size: int
    file_type: str
    description: Optional[str] = None


# Messages


class AttachmentUploadResponse(CamelModel):
    url: str
    name: Optional[str] = None
    type: str
    size: int
    success: bool


class SendMessageRequest(CamelModel):
    receiver_id: str
    content: Optional[str] = None
    message_type: str = "text"
    attachment_url: Optional[str] = None
    attachment_type: Optional[str] = None
    attachment_name: Optional[str] = None
    attachment_size: Optional[int] = None
    duration: Optional[int] = None


class MessageResponse(CamelModel):
    id: int
    sender_id: str
    receiver_id: str
    content: Optional[str] = None
    message_type: str
    attachment_url: Optional[str] = None
    attachment_type: Optional[str] = None
    attachment_name: Optional[str] = None
    attachment_size: Optional[int] = None
    duration: Optional[int] = None
    is_read: bool
    created_at: float


class MessageEnvelope(CamelModel):
    message: MessageResponse


class ConversationResponse(CamelModel):
    messages: list[MessageResponse]


class MarkReadResponse(CamelModel):
    updated: int


# Maintenance


class FixMediaUrlsRequest(CamelModel):
    old_base: Optional[str] = None
    new_base: Optional[str] = None
    dry_run: bool = False


class FixMediaUrlsResponse(CamelModel):
    message: str
    fixed: int
    posts: list[dict]
    media: list[dict] = Field(default_factory=list)


class EnqueueJobResponse(CamelModel):
    job_id: str
    status: str


class JobStatusResponse(CamelModel):
    job_id: str
    kind: str
    status: str
    params: dict = Field(default_factory=dict)
    result: Optional[dict] = None
    created_at: float
    updated_at: float


class ValidateMediaRequest(CamelModel):
    url: Optional[str] = None
