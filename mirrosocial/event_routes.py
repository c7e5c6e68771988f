"""
HTTP routes for events: creation, invitations, membership, media and videos.
"""

from __future__ import annotations

import logging
import secrets
from datetime import date
from typing import Iterable, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile

from mirrosocial.auth import get_current_user
from mirrosocial.config import get_settings
from mirrosocial.db import (
    AlreadyJoinedError,
    DbClient,
    EventFullError,
    EventMediaRecord,
    EventNotFoundError,
    EventRecord,
    NotParticipantError,
    UserRecord,
)
from mirrosocial.dependencies import get_db_client, get_storage_client
from mirrosocial.media import EVENT_VIDEO, is_valid_http_url, media_kind
from mirrosocial.recurrence import (
    RepeatRule,
    describe_rule,
    format_days_of_week,
    parse_days_of_week,
    upcoming_occurrences,
    validate_rule,
)
from mirrosocial.routes import read_upload, store_upload, user_summary
from mirrosocial.schemas import (
    CreateEventRequest,
    CreateEventResponse,
    CreateVideoRequest,
    EventListResponse,
    EventMediaCreatedResponse,
    EventMediaListResponse,
    EventMediaRequest,
    EventMediaResponse,
    EventResponse,
    EventVideoUploadResponse,
    MembershipResponse,
    OccurrencesResponse,
    PublicEvent,
    PublicEventResponse,
    ThemeListResponse,
    ThemeResponse,
    ThemeStyle,
    ThumbnailRequest,
    ThumbnailResponse,
    UpdateVideoRequest,
    VideoEnvelope,
    VideoListResponse,
    VideoResponse,
)
from mirrosocial.storage import StorageClient
from mirrosocial.themes import theme_style

logger = logging.getLogger(__name__)

router = APIRouter()

UNKNOWN_USER = "Unknown User"


def share_url(event: EventRecord) -> str:
    return f"{get_settings().public_base_url.rstrip('/')}/events/invite/{event.share_token}"


def _theme_style(db: DbClient, event: EventRecord) -> Optional[ThemeStyle]:
    if event.theme_id is None:
        return None
    style = theme_style(db.get_theme(event.theme_id))
    return ThemeStyle(**style) if style else None


def _event_response(
    db: DbClient,
    event: EventRecord,
    viewer: UserRecord,
    creator: Optional[UserRecord] = None,
    participants: Optional[Iterable[UserRecord]] = None,
) -> EventResponse:
    creator = creator or db.get_user(event.created_by)
    return EventResponse(
        **event.as_dict(),
        created_by_username=creator.username if creator else UNKNOWN_USER,
        share_url=share_url(event),
        has_joined=db.is_participant(event.id, viewer.id),
        theme=_theme_style(db, event),
        repeat_description=describe_rule(RepeatRule.from_event(event)),
        participants=(
            [user_summary(u) for u in participants] if participants is not None else None
        ),
    )


def _require_event(db: DbClient, event_id: int) -> EventRecord:
    event = db.get_event(event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def _require_active_event(db: DbClient, event_id: int) -> EventRecord:
    event = _require_event(db, event_id)
    if not event.is_active:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def _is_member(db: DbClient, event: EventRecord, user: UserRecord) -> bool:
    return event.created_by == user.id or db.is_participant(event.id, user.id)


def _parse_event_date(value: str) -> date:
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid event date")


def _repeat_fields(payload: CreateEventRequest, start: date) -> dict:
    if not payload.is_repeating:
        return {"is_repeating": False}
    if not payload.repeat_pattern:
        raise HTTPException(status_code=400, detail="Repeat pattern is required for repeating events")

    raw_days = payload.repeat_days_of_week
    try:
        if isinstance(raw_days, list):
            days = parse_days_of_week(",".join(str(d) for d in raw_days))
        else:
            days = parse_days_of_week(raw_days)
        end_date = date.fromisoformat(payload.repeat_end_date[:10]) if payload.repeat_end_date else None
        rule = RepeatRule(
            pattern=payload.repeat_pattern,
            interval=payload.repeat_interval,
            days_of_week=days,
            end_date=end_date,
        )
        validate_rule(rule, start)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    # The form keeps its last weekday selection after switching away from weekly.
    days = rule.days_of_week if rule.pattern == "weekly" else []
    return {
        "is_repeating": True,
        "repeat_pattern": rule.pattern,
        "repeat_interval": rule.interval,
        "repeat_days_of_week": format_days_of_week(days),
        "repeat_end_date": rule.end_date.isoformat() if rule.end_date else None,
    }


# Listing and creation


@router.get("/events", response_model=EventListResponse)
def list_events(
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    events = db.list_active_events()
    creators = db.get_users(e.created_by for e in events)
    return EventListResponse(
        events=[
            _event_response(db, e, current_user, creator=creators.get(e.created_by))
            for e in events
        ]
    )


@router.post("/events", response_model=CreateEventResponse)
def create_event(
    payload: CreateEventRequest,
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    title = (payload.title or "").strip()
    description = (payload.description or "").strip()
    location = (payload.location or "").strip()
    event_date = (payload.date or "").strip()
    event_time = (payload.time or "").strip()
    if not all((title, description, location, event_date, event_time)):
        raise HTTPException(
            status_code=400,
            detail="Title, description, location, date, and time are required",
        )

    start = _parse_event_date(event_date)
    if start < date.today():
        raise HTTPException(status_code=400, detail="Event date cannot be in the past")

    if payload.theme_id is not None and not db.get_theme(payload.theme_id):
        raise HTTPException(status_code=400, detail="Theme not found")

    event = db.create_event(
        title=title,
        description=description,
        location=location,
        event_date=start.isoformat(),
        event_time=event_time,
        created_by=current_user.id,
        share_token=secrets.token_hex(32),
        # 0 means no limit.
        max_participants=payload.max_participants or None,
        is_invite=payload.is_invite,
        invite_description=payload.invite_description,
        group_name=(payload.group_name or "").strip() or None,
        theme_id=payload.theme_id,
        custom_flyer_url=payload.custom_flyer_url,
        custom_background_url=payload.custom_background_url,
        custom_background_type=payload.custom_background_type,
        **_repeat_fields(payload, start),
    )
    logger.info("User %s created event %s", current_user.id, event.id)
    return CreateEventResponse(event=_event_response(db, event, current_user, creator=current_user))


@router.get("/events/themes", response_model=ThemeListResponse)
def list_themes(
    category: Optional[str] = Query(None),
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    if category == "all":
        category = None
    return ThemeListResponse(themes=[ThemeResponse(**t.as_dict()) for t in db.list_themes(category)])


@router.get("/events/public/{share_token}", response_model=PublicEventResponse)
def get_public_event(share_token: str, db: DbClient = Depends(get_db_client)):
    """Invitation page data; reachable without a session."""
    event = db.get_event_by_share_token(share_token)
    if not event or not event.is_active:
        raise HTTPException(status_code=404, detail="Event not found")
    creator = db.get_user(event.created_by)
    public_fields = {
        name: value for name, value in event.as_dict().items() if name in PublicEvent.model_fields
    }
    return PublicEventResponse(
        success=True,
        event=PublicEvent(
            **public_fields,
            created_by_username=creator.username if creator else UNKNOWN_USER,
            theme=_theme_style(db, event),
            repeat_description=describe_rule(RepeatRule.from_event(event)),
        ),
    )


# Single event


@router.get("/events/{event_id}", response_model=EventResponse)
def get_event(
    event_id: int,
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    event = _require_active_event(db, event_id)
    participant_ids = [p.user_id for p in db.list_participants(event_id)]
    users = db.get_users(participant_ids)
    participants = [users[uid] for uid in participant_ids if uid in users]
    return _event_response(db, event, current_user, participants=participants)


@router.get("/events/{event_id}/occurrences", response_model=OccurrencesResponse)
def get_occurrences(
    event_id: int,
    count: int = Query(5, ge=1, le=50),
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    event = _require_active_event(db, event_id)
    rule = RepeatRule.from_event(event)
    dates = upcoming_occurrences(date.fromisoformat(event.event_date), rule, count)
    return OccurrencesResponse(
        occurrences=[d.isoformat() for d in dates],
        description=describe_rule(rule),
    )


@router.post("/events/{event_id}/join", response_model=MembershipResponse)
def join_event(
    event_id: int,
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    try:
        event = db.join_event(event_id, current_user.id)
    except EventNotFoundError:
        raise HTTPException(status_code=404, detail="Event not found or inactive")
    except EventFullError:
        raise HTTPException(status_code=400, detail="Event is full")
    except AlreadyJoinedError:
        raise HTTPException(status_code=400, detail="Already joined this event")
    logger.info("User %s joined event %s", current_user.id, event_id)
    return MembershipResponse(
        message="Successfully joined event",
        current_participants=event.current_participants,
    )


@router.delete("/events/{event_id}/join", response_model=MembershipResponse)
def leave_event(
    event_id: int,
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    try:
        event = db.leave_event(event_id, current_user.id)
    except EventNotFoundError:
        raise HTTPException(status_code=404, detail="Event not found")
    except NotParticipantError:
        raise HTTPException(status_code=400, detail="Not a participant of this event")
    logger.info("User %s left event %s", current_user.id, event_id)
    return MembershipResponse(
        message="Successfully left event",
        current_participants=event.current_participants,
    )


# Media


@router.get("/events/{event_id}/media", response_model=EventMediaListResponse)
def list_event_media(
    event_id: int,
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    event = _require_event(db, event_id)
    if not _is_member(db, event, current_user):
        raise HTTPException(status_code=403, detail="Access denied")
    items = db.list_event_media(event_id)
    uploaders = db.get_users(m.uploaded_by for m in items)
    return EventMediaListResponse(
        media=[
            EventMediaResponse(**m.as_dict(), uploader=user_summary(uploaders.get(m.uploaded_by)))
            for m in items
        ]
    )


@router.post("/events/{event_id}/media", response_model=EventMediaCreatedResponse)
def add_event_media(
    event_id: int,
    payload: EventMediaRequest,
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    event = _require_event(db, event_id)
    if not _is_member(db, event, current_user):
        raise HTTPException(status_code=403, detail="Access denied")
    if not payload.media_url or not payload.media_type:
        raise HTTPException(status_code=400, detail="Media URL and type are required")
    media = db.add_event_media(
        event_id,
        current_user.id,
        **payload.model_dump(exclude_none=True),
    )
    return EventMediaCreatedResponse(
        media=EventMediaResponse(**media.as_dict(), uploader=user_summary(current_user))
    )


# Videos


def _video_response(
    media: EventMediaRecord,
    event: EventRecord,
    viewer: UserRecord,
    uploader: Optional[UserRecord],
) -> VideoResponse:
    can_manage = media.uploaded_by == viewer.id or event.created_by == viewer.id
    return VideoResponse(
        **media.as_dict(),
        video_url=media.media_url,
        uploader=user_summary(uploader),
        can_edit=can_manage,
        can_delete=can_manage,
    )


def _visible_to(media: EventMediaRecord, event: EventRecord, viewer: UserRecord) -> bool:
    return event.created_by == viewer.id or media.is_public or media.uploaded_by == viewer.id


def _require_video(db: DbClient, event_id: int, video_id: int) -> EventMediaRecord:
    media = db.get_event_media(event_id, video_id)
    if not media or media.media_type != "video":
        raise HTTPException(status_code=404, detail="Video not found")
    return media


@router.get("/events/{event_id}/videos", response_model=VideoListResponse)
def list_videos(
    event_id: int,
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    event = _require_event(db, event_id)
    if not _is_member(db, event, current_user):
        raise HTTPException(status_code=403, detail="Access denied")
    videos = [
        v for v in db.list_event_media(event_id, media_type="video")
        if _visible_to(v, event, current_user)
    ]
    videos.sort(key=lambda v: (v.uploaded_at, v.id), reverse=True)
    uploaders = db.get_users(v.uploaded_by for v in videos)
    return VideoListResponse(
        videos=[
            _video_response(v, event, current_user, uploaders.get(v.uploaded_by)) for v in videos
        ]
    )


@router.post("/events/{event_id}/videos", response_model=VideoEnvelope, status_code=201)
def create_video(
    event_id: int,
    payload: CreateVideoRequest,
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    event = _require_event(db, event_id)
    if not _is_member(db, event, current_user):
        raise HTTPException(status_code=403, detail="Only event participants can upload videos")
    if not payload.video_url:
        raise HTTPException(status_code=400, detail="Video URL is required")
    if not is_valid_http_url(payload.video_url):
        raise HTTPException(status_code=400, detail="Invalid video URL format")
    if payload.thumbnail_url and not is_valid_http_url(payload.thumbnail_url):
        raise HTTPException(status_code=400, detail="Invalid thumbnail URL format")
    if payload.duration is not None and payload.duration <= 0:
        raise HTTPException(status_code=400, detail="Invalid duration")
    if payload.file_size is not None and payload.file_size <= 0:
        raise HTTPException(status_code=400, detail="Invalid file size")

    media = db.add_event_media(
        event_id,
        current_user.id,
        media_url=payload.video_url.strip(),
        media_type="video",
        thumbnail_url=payload.thumbnail_url,
        title=(payload.title or "").strip() or None,
        description=(payload.description or "").strip() or None,
        duration=round(payload.duration) if payload.duration is not None else None,
        file_size=int(payload.file_size) if payload.file_size is not None else None,
        mime_type=payload.mime_type or "video/mp4",
        is_public=payload.is_public,
    )
    logger.info("User %s added video %s to event %s", current_user.id, media.id, event_id)
    return VideoEnvelope(video=_video_response(media, event, current_user, current_user))


@router.get("/events/{event_id}/videos/{video_id}", response_model=VideoEnvelope)
def get_video(
    event_id: int,
    video_id: int,
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    event = _require_event(db, event_id)
    if not _is_member(db, event, current_user):
        raise HTTPException(status_code=403, detail="Access denied")
    media = _require_video(db, event_id, video_id)
    if not _visible_to(media, event, current_user):
        raise HTTPException(status_code=404, detail="Video not found")
    return VideoEnvelope(
        video=_video_response(media, event, current_user, db.get_user(media.uploaded_by))
    )


def _require_video_owner(
    db: DbClient, event_id: int, video_id: int, user: UserRecord
) -> tuple[EventRecord, EventMediaRecord]:
    event = _require_event(db, event_id)
    media = _require_video(db, event_id, video_id)
    if media.uploaded_by != user.id and event.created_by != user.id:
        raise HTTPException(status_code=403, detail="Permission denied")
    return event, media


@router.patch("/events/{event_id}/videos/{video_id}", response_model=VideoEnvelope)
def update_video(
    event_id: int,
    video_id: int,
    payload: UpdateVideoRequest,
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    event, media = _require_video_owner(db, event_id, video_id, current_user)
    updates = payload.model_dump(exclude_none=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No valid fields to update")
    updated = db.update_event_media(media.id, **updates)
    return VideoEnvelope(
        video=_video_response(updated, event, current_user, db.get_user(updated.uploaded_by))
    )


@router.delete("/events/{event_id}/videos/{video_id}")
def delete_video(
    event_id: int,
    video_id: int,
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    _, media = _require_video_owner(db, event_id, video_id, current_user)
    db.delete_event_media(media.id)
    logger.info("User %s deleted video %s from event %s", current_user.id, media.id, event_id)
    return {"message": "Video deleted successfully"}


# Thumbnails


@router.put("/events/{event_id}/thumbnail", response_model=ThumbnailResponse)
def set_thumbnail(
    event_id: int,
    payload: ThumbnailRequest,
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    event = _require_event(db, event_id)
    if event.created_by != current_user.id:
        raise HTTPException(status_code=403, detail="Only event creator can set thumbnail")

    video_url = image_url = None
    if payload.video_id is not None:
        video = _require_video(db, event_id, payload.video_id)
        video_url, image_url = video.media_url, video.thumbnail_url

    db.update_event(event_id, thumbnail_video_url=video_url, thumbnail_image_url=image_url)
    return ThumbnailResponse(
        message=(
            "Event thumbnail set successfully"
            if payload.video_id is not None
            else "Event thumbnail removed successfully"
        ),
        thumbnail_video_url=video_url,
        thumbnail_image_url=image_url,
    )


@router.delete("/events/{event_id}/thumbnail", response_model=ThumbnailResponse)
def remove_thumbnail(
    event_id: int,
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    event = _require_event(db, event_id)
    if event.created_by != current_user.id:
        raise HTTPException(status_code=403, detail="Only event creator can remove thumbnail")
    db.update_event(event_id, thumbnail_video_url=None, thumbnail_image_url=None)
    return ThumbnailResponse(message="Event thumbnail removed successfully")


# Uploads


@router.post("/upload/event-video", response_model=EventVideoUploadResponse)
async def upload_event_video(
    video: Optional[UploadFile] = File(None),
    description: Optional[str] = Form(None),
    storage: StorageClient = Depends(get_storage_client),
    current_user: UserRecord = Depends(get_current_user),
):
    if video is None or not video.filename:
        raise HTTPException(status_code=400, detail="No video file provided")
    data = await read_upload(video, EVENT_VIDEO)
    url = store_upload(storage, data, video, "event-videos", "Upload failed: {reason}")
    logger.info("User %s uploaded event media %s", current_user.id, url)
    return EventVideoUploadResponse(
        success=True,
        video_url=url,
        thumbnail_url=url if media_kind(video.content_type) == "image" else None,
        file_name=video.filename,
        file_size=len(data),
        file_type=video.content_type or "application/octet-stream",
        description=description,
    )
