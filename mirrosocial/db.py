"""
Database abstraction for Postgres and an in-memory test implementation.
"""

from __future__ import annotations

import itertools
import time
import uuid
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Dict, Optional, Protocol

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    and_,
    create_engine,
    delete,
    func,
    or_,
    select,
    update,
)
from sqlalchemy.orm import Session, declarative_base, sessionmaker


class JobStatus(Enum):
    WAITING = "WAITING"
    RUNNING = "RUNNING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


class ParticipationError(Exception):
    """Raised when a join/leave request conflicts with the event's current state."""


class EventNotFoundError(ParticipationError):
    pass


class EventFullError(ParticipationError):
    pass


class AlreadyJoinedError(ParticipationError):
    pass


class NotParticipantError(ParticipationError):
    pass


class _Record:
    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class UserRecord(_Record):
    id: str
    username: str
    email: str
    password_hash: str
    nickname: Optional[str] = None
    profile_image: Optional[str] = None
    about: Optional[str] = None
    created_at: float = field(default_factory=lambda: time.time())
    updated_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        data = asdict(self)
        data.pop("password_hash")
        return data

    def summary(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "nickname": self.nickname,
            "profile_image": self.profile_image,
        }


@dataclass
class SessionRecord(_Record):
    token: str
    user_id: str
    expires_at: float
    created_at: float = field(default_factory=lambda: time.time())

    def is_expired(self, now: Optional[float] = None) -> bool:
        return self.expires_at <= (now if now is not None else time.time())


@dataclass
class PostRecord(_Record):
    id: int
    user_id: str
    content: Optional[str] = None
    image: Optional[str] = None
    video: Optional[str] = None
    duration: Optional[int] = None
    has_private_location: bool = False
    community_name: Optional[str] = None
    created_at: float = field(default_factory=lambda: time.time())
    updated_at: float = field(default_factory=lambda: time.time())


@dataclass
class CommentRecord(_Record):
    id: int
    post_id: int
    user_id: str
    content: str
    parent_comment_id: Optional[int] = None
    created_at: float = field(default_factory=lambda: time.time())


@dataclass
class ThemeRecord(_Record):
    id: int
    name: str
    display_name: str
    primary_color: str
    secondary_color: str
    accent_color: str
    text_color: str
    font_family: str
    category: str
    description: Optional[str] = None
    background_gradient: Optional[str] = None
    font_weight: str = "400"
    border_radius: int = 8
    shadow_intensity: str = "medium"
    is_active: bool = True
    created_at: float = field(default_factory=lambda: time.time())


@dataclass
class EventRecord(_Record):
    id: int
    title: str
    description: str
    location: str
    event_date: str
    event_time: str
    created_by: str
    share_token: str
    max_participants: Optional[int] = None
    current_participants: int = 1
    is_active: bool = True
    is_invite: bool = False
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
    created_at: float = field(default_factory=lambda: time.time())
    updated_at: float = field(default_factory=lambda: time.time())


@dataclass
class ParticipantRecord(_Record):
    event_id: int
    user_id: str
    joined_at: float = field(default_factory=lambda: time.time())


@dataclass
class GroupRecord(_Record):
    id: int
    name: str
    created_by: str
    max_members: Optional[int] = None
    is_active: bool = True
    created_at: float = field(default_factory=lambda: time.time())


@dataclass
class EventMediaRecord(_Record):
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
    uploaded_at: float = field(default_factory=lambda: time.time())


@dataclass
class MessageRecord(_Record):
    id: int
    sender_id: str
    receiver_id: str
    content: Optional[str] = None
    message_type: str = "text"
    attachment_url: Optional[str] = None
    attachment_type: Optional[str] = None
    attachment_name: Optional[str] = None
    attachment_size: Optional[int] = None
    duration: Optional[int] = None
    is_read: bool = False
    created_at: float = field(default_factory=lambda: time.time())


@dataclass
class MaintenanceJobRecord:
    job_id: str
    kind: str
    status: JobStatus
    params: dict = field(default_factory=dict)
    result: Optional[dict] = None
    locked_at: Optional[float] = None
    created_at: float = field(default_factory=lambda: time.time())
    updated_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        return {
            "job_id": self.job_id,
            "kind": self.kind,
            "status": self.status.name,
            "params": self.params,
            "result": self.result,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


POST_UPDATABLE = {"content", "image", "video", "duration", "community_name"}
EVENT_UPDATABLE = {
    "title",
    "description",
    "location",
    "event_date",
    "event_time",
    "max_participants",
    "is_active",
    "is_invite",
    "invite_description",
    "theme_id",
    "custom_flyer_url",
    "thumbnail_video_url",
    "thumbnail_image_url",
    "custom_background_url",
    "custom_background_type",
    "is_repeating",
    "repeat_pattern",
    "repeat_interval",
    "repeat_end_date",
    "repeat_days_of_week",
}
MEDIA_UPDATABLE = {"title", "description", "is_public", "thumbnail_url", "media_url"}


def _check_fields(values: dict, allowed: set) -> None:
    unknown = set(values) - allowed
    if unknown:
        raise ValueError(f"Unknown fields: {', '.join(sorted(unknown))}")


class DbClient(Protocol):
    """Interface for database access."""

    def create_user(
        self, username: str, email: str, password_hash: str, nickname: Optional[str] = None
    ) -> UserRecord:
        ...

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        ...

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    def get_users(self, user_ids) -> Dict[str, UserRecord]:
        ...

    def create_session(self, user_id: str, ttl_seconds: int) -> SessionRecord:
        ...

    def get_session(self, token: str) -> Optional[SessionRecord]:
        ...

    def delete_session(self, token: str) -> None:
        ...

    def create_post(self, user_id: str, **values) -> PostRecord:
        ...

    def get_post(self, post_id: int) -> Optional[PostRecord]:
        ...

    def list_posts(
        self, limit: int = 50, offset: int = 0, user_id: Optional[str] = None
    ) -> list[PostRecord]:
        ...

    def update_post(self, post_id: int, **values) -> Optional[PostRecord]:
        ...

    def delete_post(self, post_id: int) -> dict:
        ...

    def like_post(self, post_id: int, user_id: str) -> bool:
        ...

    def unlike_post(self, post_id: int, user_id: str) -> bool:
        ...

    def has_liked(self, post_id: int, user_id: str) -> bool:
        ...

    def count_likes(self, post_id: int) -> int:
        ...

    def add_comment(
        self, post_id: int, user_id: str, content: str, parent_comment_id: Optional[int] = None
    ) -> CommentRecord:
        ...

    def list_comments(self, post_id: int) -> list[CommentRecord]:
        ...

    def count_comments(self, post_id: int) -> int:
        ...

    def list_posts_with_media_prefix(self, prefix: str) -> list[PostRecord]:
        ...

    def upsert_theme_if_missing(self, **values) -> tuple[ThemeRecord, bool]:
        ...

    def get_theme(self, theme_id: int) -> Optional[ThemeRecord]:
        ...

    def list_themes(self, category: Optional[str] = None) -> list[ThemeRecord]:
        ...

    def create_event(self, **values) -> EventRecord:
        ...

    def get_event(self, event_id: int) -> Optional[EventRecord]:
        ...

    def get_event_by_share_token(self, share_token: str) -> Optional[EventRecord]:
        ...

    def list_active_events(self) -> list[EventRecord]:
        ...

    def update_event(self, event_id: int, **values) -> Optional[EventRecord]:
        ...

    def is_participant(self, event_id: int, user_id: str) -> bool:
        ...

    def list_participants(self, event_id: int) -> list[ParticipantRecord]:
        ...

    def join_event(self, event_id: int, user_id: str) -> EventRecord:
        ...

    def leave_event(self, event_id: int, user_id: str) -> EventRecord:
        ...

    def get_group(self, group_id: int) -> Optional[GroupRecord]:
        ...

    def list_group_members(self, group_id: int) -> list[tuple[str, str]]:
        ...

    def add_event_media(self, event_id: int, uploaded_by: str, **values) -> EventMediaRecord:
        ...

    def get_event_media(self, event_id: int, media_id: int) -> Optional[EventMediaRecord]:
        ...

    def list_event_media(
        self, event_id: int, media_type: Optional[str] = None
    ) -> list[EventMediaRecord]:
        ...

    def update_event_media(self, media_id: int, **values) -> Optional[EventMediaRecord]:
        ...

    def delete_event_media(self, media_id: int) -> bool:
        ...

    def list_event_media_with_prefix(self, prefix: str) -> list[EventMediaRecord]:
        ...

    def create_message(self, sender_id: str, receiver_id: str, **values) -> MessageRecord:
        ...

    def list_conversation(self, user_a: str, user_b: str, limit: int = 50) -> list[MessageRecord]:
        ...

    def mark_conversation_read(self, receiver_id: str, sender_id: str) -> int:
        ...

    def create_job(self, kind: str, params: Optional[dict] = None) -> MaintenanceJobRecord:
        ...

    def get_job(self, job_id: str) -> Optional[MaintenanceJobRecord]:
        ...

    def claim_job(self, job_id: str) -> Optional[MaintenanceJobRecord]:
        ...

    def claim_next_waiting_job(self) -> Optional[MaintenanceJobRecord]:
        ...

    def update_job(
        self,
        job_id: str,
        *,
        status: Optional[JobStatus] = None,
        result: Optional[dict] = None,
    ) -> None:
        ...

    def requeue_stale_locks(self, lock_timeout_seconds: float = 600) -> int:
        ...


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.users: Dict[str, UserRecord] = {}
        self.sessions: Dict[str, SessionRecord] = {}
        self.posts: Dict[int, PostRecord] = {}
        self.likes: set[tuple[int, str]] = set()
        self.comments: Dict[int, CommentRecord] = {}
        self.themes: Dict[int, ThemeRecord] = {}
        self.events: Dict[int, EventRecord] = {}
        self.participants: Dict[tuple[int, str], ParticipantRecord] = {}
        self.groups: Dict[int, GroupRecord] = {}
        self.group_members: Dict[tuple[int, str], str] = {}
        self.media: Dict[int, EventMediaRecord] = {}
        self.messages: Dict[int, MessageRecord] = {}
        self.jobs: Dict[str, MaintenanceJobRecord] = {}
        self._ids = {
            name: itertools.count(1)
            for name in ("post", "comment", "theme", "event", "group", "media", "message")
        }

    def _next_id(self, name: str) -> int:
        return next(self._ids[name])

    # Users and sessions

    def create_user(
        self, username: str, email: str, password_hash: str, nickname: Optional[str] = None
    ) -> UserRecord:
        record = UserRecord(
            id=str(uuid.uuid4()),
            username=username,
            email=email.lower(),
            password_hash=password_hash,
            nickname=nickname,
        )
        self.users[record.id] = record
        return record

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        return self.users.get(user_id)

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        email = email.lower()
        for user in self.users.values():
            if user.email == email:
                return user
        return None

    def get_users(self, user_ids) -> Dict[str, UserRecord]:
        return {uid: self.users[uid] for uid in set(user_ids) if uid in self.users}

    def create_session(self, user_id: str, ttl_seconds: int) -> SessionRecord:
        record = SessionRecord(
            token=uuid.uuid4().hex + uuid.uuid4().hex,
            user_id=user_id,
            expires_at=time.time() + ttl_seconds,
        )
        self.sessions[record.token] = record
        return record

    def get_session(self, token: str) -> Optional[SessionRecord]:
        return self.sessions.get(token)

    def delete_session(self, token: str) -> None:
        self.sessions.pop(token, None)

    # Posts

    def create_post(self, user_id: str, **values) -> PostRecord:
        _check_fields(values, POST_UPDATABLE | {"has_private_location"})
        record = PostRecord(id=self._next_id("post"), user_id=user_id, **values)
        self.posts[record.id] = record
        return record

    def get_post(self, post_id: int) -> Optional[PostRecord]:
        return self.posts.get(post_id)

    def list_posts(
        self, limit: int = 50, offset: int = 0, user_id: Optional[str] = None
    ) -> list[PostRecord]:
        posts = [p for p in self.posts.values() if user_id is None or p.user_id == user_id]
        posts.sort(key=lambda p: (p.created_at, p.id), reverse=True)
        return posts[offset:offset + limit]

    def update_post(self, post_id: int, **values) -> Optional[PostRecord]:
        _check_fields(values, POST_UPDATABLE)
        post = self.posts.get(post_id)
        if not post:
            return None
        for key, value in values.items():
            setattr(post, key, value)
        post.updated_at = time.time()
        return post

    def delete_post(self, post_id: int) -> dict:
        comment_ids = [c.id for c in self.comments.values() if c.post_id == post_id]
        for comment_id in comment_ids:
            del self.comments[comment_id]
        like_keys = [key for key in self.likes if key[0] == post_id]
        self.likes.difference_update(like_keys)
        deleted = self.posts.pop(post_id, None) is not None
        return {
            "comments": len(comment_ids),
            "likes": len(like_keys),
            "post": int(deleted),
        }

    def like_post(self, post_id: int, user_id: str) -> bool:
        key = (post_id, user_id)
        if key in self.likes:
            return False
        self.likes.add(key)
        return True

    def unlike_post(self, post_id: int, user_id: str) -> bool:
        key = (post_id, user_id)
        if key not in self.likes:
            return False
        self.likes.discard(key)
        return True

    def has_liked(self, post_id: int, user_id: str) -> bool:
        return (post_id, user_id) in self.likes

    def count_likes(self, post_id: int) -> int:
        return sum(1 for pid, _ in self.likes if pid == post_id)

    def add_comment(
        self, post_id: int, user_id: str, content: str, parent_comment_id: Optional[int] = None
    ) -> CommentRecord:
        record = CommentRecord(
            id=self._next_id("comment"),
            post_id=post_id,
            user_id=user_id,
            content=content,
            parent_comment_id=parent_comment_id,
        )
        self.comments[record.id] = record
        return record

    def list_comments(self, post_id: int) -> list[CommentRecord]:
        return sorted(
            (c for c in self.comments.values() if c.post_id == post_id),
            key=lambda c: (c.created_at, c.id),
        )

    def count_comments(self, post_id: int) -> int:
        return sum(1 for c in self.comments.values() if c.post_id == post_id)

    def list_posts_with_media_prefix(self, prefix: str) -> list[PostRecord]:
        return [
            p
            for p in sorted(self.posts.values(), key=lambda p: p.id)
            if (p.image or "").startswith(prefix) or (p.video or "").startswith(prefix)
        ]

    # Themes

    def upsert_theme_if_missing(self, **values) -> tuple[ThemeRecord, bool]:
        for theme in self.themes.values():
            if theme.name == values["name"]:
                return theme, False
        record = ThemeRecord(id=self._next_id("theme"), **values)
        self.themes[record.id] = record
        return record, True

    def get_theme(self, theme_id: int) -> Optional[ThemeRecord]:
        return self.themes.get(theme_id)

    def list_themes(self, category: Optional[str] = None) -> list[ThemeRecord]:
        themes = [
            t
            for t in self.themes.values()
            if t.is_active and (category is None or t.category == category)
        ]
        return sorted(themes, key=lambda t: (t.category, t.name))

    # Events

    def create_event(self, **values) -> EventRecord:
        values.pop("current_participants", None)
        record = EventRecord(id=self._next_id("event"), current_participants=1, **values)
        if record.group_name:
            group = GroupRecord(
                id=self._next_id("group"),
                name=record.group_name,
                created_by=record.created_by,
                max_members=record.max_participants,
            )
            self.groups[group.id] = group
            self.group_members[(group.id, record.created_by)] = "admin"
            record.group_id = group.id
        self.events[record.id] = record
        self.participants[(record.id, record.created_by)] = ParticipantRecord(
            event_id=record.id, user_id=record.created_by
        )
        return record

    def get_event(self, event_id: int) -> Optional[EventRecord]:
        return self.events.get(event_id)

    def get_event_by_share_token(self, share_token: str) -> Optional[EventRecord]:
        for event in self.events.values():
            if event.share_token == share_token:
                return event
        return None

    def list_active_events(self) -> list[EventRecord]:
        events = [e for e in self.events.values() if e.is_active]
        return sorted(events, key=lambda e: (e.created_at, e.id), reverse=True)

    def update_event(self, event_id: int, **values) -> Optional[EventRecord]:
        _check_fields(values, EVENT_UPDATABLE)
        event = self.events.get(event_id)
        if not event:
            return None
        for key, value in values.items():
            setattr(event, key, value)
        event.updated_at = time.time()
        return event

    def is_participant(self, event_id: int, user_id: str) -> bool:
        return (event_id, user_id) in self.participants

    def list_participants(self, event_id: int) -> list[ParticipantRecord]:
        return sorted(
            (p for (eid, _), p in self.participants.items() if eid == event_id),
            key=lambda p: p.joined_at,
        )

    def join_event(self, event_id: int, user_id: str) -> EventRecord:
        event = self.events.get(event_id)
        if not event or not event.is_active:
            raise EventNotFoundError(event_id)
        if event.max_participants and event.current_participants >= event.max_participants:
            raise EventFullError(event_id)
        if (event_id, user_id) in self.participants:
            raise AlreadyJoinedError(event_id)
        self.participants[(event_id, user_id)] = ParticipantRecord(
            event_id=event_id, user_id=user_id
        )
        if event.group_id is not None:
            self.group_members.setdefault((event.group_id, user_id), "member")
        event.current_participants += 1
        event.updated_at = time.time()
        return event

    def leave_event(self, event_id: int, user_id: str) -> EventRecord:
        event = self.events.get(event_id)
        if not event:
            raise EventNotFoundError(event_id)
        if (event_id, user_id) not in self.participants:
            raise NotParticipantError(event_id)
        del self.participants[(event_id, user_id)]
        if event.group_id is not None and self.group_members.get((event.group_id, user_id)) == "member":
            del self.group_members[(event.group_id, user_id)]
        event.current_participants = max(0, event.current_participants - 1)
        event.updated_at = time.time()
        return event

    def get_group(self, group_id: int) -> Optional[GroupRecord]:
        return self.groups.get(group_id)

    def list_group_members(self, group_id: int) -> list[tuple[str, str]]:
        return [(uid, role) for (gid, uid), role in self.group_members.items() if gid == group_id]

    # Event media

    def add_event_media(self, event_id: int, uploaded_by: str, **values) -> EventMediaRecord:
        record = EventMediaRecord(
            id=self._next_id("media"), event_id=event_id, uploaded_by=uploaded_by, **values
        )
        self.media[record.id] = record
        return record

    def get_event_media(self, event_id: int, media_id: int) -> Optional[EventMediaRecord]:
        media = self.media.get(media_id)
        if media and media.event_id == event_id:
            return media
        return None

    def list_event_media(
        self, event_id: int, media_type: Optional[str] = None
    ) -> list[EventMediaRecord]:
        items = [
            m
            for m in self.media.values()
            if m.event_id == event_id and (media_type is None or m.media_type == media_type)
        ]
        return sorted(items, key=lambda m: (m.uploaded_at, m.id))

    def update_event_media(self, media_id: int, **values) -> Optional[EventMediaRecord]:
        _check_fields(values, MEDIA_UPDATABLE)
        media = self.media.get(media_id)
        if not media:
            return None
        for key, value in values.items():
            setattr(media, key, value)
        return media

    def delete_event_media(self, media_id: int) -> bool:
        return self.media.pop(media_id, None) is not None

    def list_event_media_with_prefix(self, prefix: str) -> list[EventMediaRecord]:
        return [
            m
            for m in sorted(self.media.values(), key=lambda m: m.id)
            if m.media_url.startswith(prefix) or (m.thumbnail_url or "").startswith(prefix)
        ]

    # Messages

    def create_message(self, sender_id: str, receiver_id: str, **values) -> MessageRecord:
        record = MessageRecord(
            id=self._next_id("message"), sender_id=sender_id, receiver_id=receiver_id, **values
        )
        self.messages[record.id] = record
        return record

    def list_conversation(self, user_a: str, user_b: str, limit: int = 50) -> list[MessageRecord]:
        pair = {user_a, user_b}
        items = [
            m
            for m in self.messages.values()
            if {m.sender_id, m.receiver_id} == pair
        ]
        items.sort(key=lambda m: (m.created_at, m.id))
        return items[-limit:] if limit else items

    def mark_conversation_read(self, receiver_id: str, sender_id: str) -> int:
        updated = 0
        for message in self.messages.values():
            if (
                message.receiver_id == receiver_id
                and message.sender_id == sender_id
                and not message.is_read
            ):
                message.is_read = True
                updated += 1
        return updated

    # Maintenance jobs

    def create_job(self, kind: str, params: Optional[dict] = None) -> MaintenanceJobRecord:
        record = MaintenanceJobRecord(
            job_id=uuid.uuid4().hex,
            kind=kind,
            status=JobStatus.WAITING,
            params=dict(params or {}),
        )
        self.jobs[record.job_id] = record
        return record

    def get_job(self, job_id: str) -> Optional[MaintenanceJobRecord]:
        return self.jobs.get(job_id)

    def claim_job(self, job_id: str) -> Optional[MaintenanceJobRecord]:
        job = self.jobs.get(job_id)
        if not job or job.status != JobStatus.WAITING:
            return None
        job.status = JobStatus.RUNNING
        job.locked_at = time.time()
        job.updated_at = job.locked_at
        return job

    def claim_next_waiting_job(self) -> Optional[MaintenanceJobRecord]:
        waiting = sorted(
            (j for j in self.jobs.values() if j.status == JobStatus.WAITING),
            key=lambda j: j.created_at,
        )
        if not waiting:
            return None
        return self.claim_job(waiting[0].job_id)

    def update_job(
        self,
        job_id: str,
        *,
        status: Optional[JobStatus] = None,
        result: Optional[dict] = None,
    ) -> None:
        job = self.jobs.get(job_id)
        if not job:
            return
        if status:
            job.status = status
        if result is not None:
            job.result = result
        job.updated_at = time.time()

    def requeue_stale_locks(self, lock_timeout_seconds: float = 600) -> int:
        now = time.time()
        requeued = 0
        for job in self.jobs.values():
            if (
                job.status == JobStatus.RUNNING
                and job.locked_at
                and now - job.locked_at > lock_timeout_seconds
            ):
                job.status = JobStatus.WAITING
                job.locked_at = None
                job.updated_at = now
                requeued += 1
        return requeued


def _to_record(row, record_cls):
    return record_cls(**{f.name: getattr(row, f.name) for f in fields(record_cls)})


class SqlDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    # Users and sessions

    def create_user(
        self, username: str, email: str, password_hash: str, nickname: Optional[str] = None
    ) -> UserRecord:
        now = time.time()
        with self.Session() as session:
            row = UserRow(
                id=str(uuid.uuid4()),
                username=username,
                email=email.lower(),
                password_hash=password_hash,
                nickname=nickname,
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            session.commit()
            return _to_record(row, UserRecord)

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        with self.Session() as session:
            row = session.get(UserRow, user_id)
            return _to_record(row, UserRecord) if row else None

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        with self.Session() as session:
            row = session.execute(
                select(UserRow).where(UserRow.email == email.lower())
            ).scalar_one_or_none()
            return _to_record(row, UserRecord) if row else None

    def get_users(self, user_ids) -> Dict[str, UserRecord]:
        ids = list(set(user_ids))
        if not ids:
            return {}
        with self.Session() as session:
            rows = session.execute(select(UserRow).where(UserRow.id.in_(ids))).scalars()
            return {row.id: _to_record(row, UserRecord) for row in rows}

    def create_session(self, user_id: str, ttl_seconds: int) -> SessionRecord:
        now = time.time()
        with self.Session() as session:
            row = SessionRow(
                token=uuid.uuid4().hex + uuid.uuid4().hex,
                user_id=user_id,
                expires_at=now + ttl_seconds,
                created_at=now,
            )
            session.add(row)
            session.commit()
            return _to_record(row, SessionRecord)

    def get_session(self, token: str) -> Optional[SessionRecord]:
        with self.Session() as session:
            row = session.get(SessionRow, token)
            return _to_record(row, SessionRecord) if row else None

    def delete_session(self, token: str) -> None:
        with self.Session() as session:
            session.execute(delete(SessionRow).where(SessionRow.token == token))
            session.commit()

    # Posts

    def create_post(self, user_id: str, **values) -> PostRecord:
        _check_fields(values, POST_UPDATABLE | {"has_private_location"})
        now = time.time()
        with self.Session() as session:
            row = PostRow(user_id=user_id, created_at=now, updated_at=now, **values)
            session.add(row)
            session.commit()
            return _to_record(row, PostRecord)

    def get_post(self, post_id: int) -> Optional[PostRecord]:
        with self.Session() as session:
            row = session.get(PostRow, post_id)
            return _to_record(row, PostRecord) if row else None

    def list_posts(
        self, limit: int = 50, offset: int = 0, user_id: Optional[str] = None
    ) -> list[PostRecord]:
        with self.Session() as session:
            stmt = select(PostRow)
            if user_id is not None:
                stmt = stmt.where(PostRow.user_id == user_id)
            stmt = (
                stmt.order_by(PostRow.created_at.desc(), PostRow.id.desc())
                .offset(offset)
                .limit(limit)
            )
            return [_to_record(row, PostRecord) for row in session.execute(stmt).scalars()]

    def update_post(self, post_id: int, **values) -> Optional[PostRecord]:
        _check_fields(values, POST_UPDATABLE)
        with self.Session() as session:
            row = session.get(PostRow, post_id)
            if not row:
                return None
            for key, value in values.items():
                setattr(row, key, value)
            row.updated_at = time.time()
            session.commit()
            return _to_record(row, PostRecord)

    def delete_post(self, post_id: int) -> dict:
        with self.Session() as session:
            comments = session.execute(
                delete(CommentRow).where(CommentRow.post_id == post_id)
            ).rowcount
            likes = session.execute(
                delete(PostLikeRow).where(PostLikeRow.post_id == post_id)
            ).rowcount
            post = session.execute(delete(PostRow).where(PostRow.id == post_id)).rowcount
            session.commit()
            return {"comments": comments or 0, "likes": likes or 0, "post": post or 0}

    def like_post(self, post_id: int, user_id: str) -> bool:
        with self.Session() as session:
            if session.get(PostLikeRow, (post_id, user_id)):
                return False
            session.add(PostLikeRow(post_id=post_id, user_id=user_id, created_at=time.time()))
            session.commit()
            return True

    def unlike_post(self, post_id: int, user_id: str) -> bool:
        with self.Session() as session:
            removed = session.execute(
                delete(PostLikeRow).where(
                    PostLikeRow.post_id == post_id, PostLikeRow.user_id == user_id
                )
            ).rowcount
            session.commit()
            return bool(removed)

    def has_liked(self, post_id: int, user_id: str) -> bool:
        with self.Session() as session:
            return session.get(PostLikeRow, (post_id, user_id)) is not None

    def count_likes(self, post_id: int) -> int:
        with self.Session() as session:
            return session.execute(
                select(func.count()).select_from(PostLikeRow).where(PostLikeRow.post_id == post_id)
            ).scalar_one()

    def add_comment(
        self, post_id: int, user_id: str, content: str, parent_comment_id: Optional[int] = None
    ) -> CommentRecord:
        with self.Session() as session:
            row = CommentRow(
                post_id=post_id,
                user_id=user_id,
                content=content,
                parent_comment_id=parent_comment_id,
                created_at=time.time(),
            )
            session.add(row)
            session.commit()
            return _to_record(row, CommentRecord)

    def list_comments(self, post_id: int) -> list[CommentRecord]:
        with self.Session() as session:
            stmt = (
                select(CommentRow)
                .where(CommentRow.post_id == post_id)
                .order_by(CommentRow.created_at.asc(), CommentRow.id.asc())
            )
            return [_to_record(row, CommentRecord) for row in session.execute(stmt).scalars()]

    def count_comments(self, post_id: int) -> int:
        with self.Session() as session:
            return session.execute(
                select(func.count()).select_from(CommentRow).where(CommentRow.post_id == post_id)
            ).scalar_one()

    def list_posts_with_media_prefix(self, prefix: str) -> list[PostRecord]:
        pattern = f"{prefix}%"
        with self.Session() as session:
            stmt = (
                select(PostRow)
                .where(or_(PostRow.image.like(pattern), PostRow.video.like(pattern)))
                .order_by(PostRow.id.asc())
            )
            return [_to_record(row, PostRecord) for row in session.execute(stmt).scalars()]

    # Themes

    def upsert_theme_if_missing(self, **values) -> tuple[ThemeRecord, bool]:
        with self.Session() as session:
            existing = session.execute(
                select(ThemeRow).where(ThemeRow.name == values["name"])
            ).scalar_one_or_none()
            if existing:
                return _to_record(existing, ThemeRecord), False
            row = ThemeRow(created_at=time.time(), **values)
            session.add(row)
            session.commit()
            return _to_record(row, ThemeRecord), True

    def get_theme(self, theme_id: int) -> Optional[ThemeRecord]:
        with self.Session() as session:
            row = session.get(ThemeRow, theme_id)
            return _to_record(row, ThemeRecord) if row else None

    def list_themes(self, category: Optional[str] = None) -> list[ThemeRecord]:
        with self.Session() as session:
            stmt = select(ThemeRow).where(ThemeRow.is_active.is_(True))
            if category is not None:
                stmt = stmt.where(ThemeRow.category == category)
            stmt = stmt.order_by(ThemeRow.category.asc(), ThemeRow.name.asc())
            return [_to_record(row, ThemeRecord) for row in session.execute(stmt).scalars()]

    # Events

    def create_event(self, **values) -> EventRecord:
        values.pop("current_participants", None)
        now = time.time()
        with self.Session() as session:
            row = EventRow(current_participants=1, created_at=now, updated_at=now, **values)
            session.add(row)
            session.flush()
            if row.group_name:
                group = GroupRow(
                    name=row.group_name,
                    created_by=row.created_by,
                    max_members=row.max_participants,
                    is_active=True,
                    created_at=now,
                )
                session.add(group)
                session.flush()
                session.add(
                    GroupMemberRow(
                        group_id=group.id, user_id=row.created_by, role="admin", joined_at=now
                    )
                )
                row.group_id = group.id
            session.add(ParticipantRow(event_id=row.id, user_id=row.created_by, joined_at=now))
            session.commit()
            return _to_record(row, EventRecord)

    def get_event(self, event_id: int) -> Optional[EventRecord]:
        with self.Session() as session:
            row = session.get(EventRow, event_id)
            return _to_record(row, EventRecord) if row else None

    def get_event_by_share_token(self, share_token: str) -> Optional[EventRecord]:
        with self.Session() as session:
            row = session.execute(
                select(EventRow).where(EventRow.share_token == share_token)
            ).scalar_one_or_none()
            return _to_record(row, EventRecord) if row else None

    def list_active_events(self) -> list[EventRecord]:
        with self.Session() as session:
            stmt = (
                select(EventRow)
                .where(EventRow.is_active.is_(True))
                .order_by(EventRow.created_at.desc(), EventRow.id.desc())
            )
            return [_to_record(row, EventRecord) for row in session.execute(stmt).scalars()]

    def update_event(self, event_id: int, **values) -> Optional[EventRecord]:
        _check_fields(values, EVENT_UPDATABLE)
        with self.Session() as session:
            row = session.get(EventRow, event_id)
            if not row:
                return None
            for key, value in values.items():
                setattr(row, key, value)
            row.updated_at = time.time()
            session.commit()
            return _to_record(row, EventRecord)

    def is_participant(self, event_id: int, user_id: str) -> bool:
        with self.Session() as session:
            return session.get(ParticipantRow, (event_id, user_id)) is not None

    def list_participants(self, event_id: int) -> list[ParticipantRecord]:
        with self.Session() as session:
            stmt = (
                select(ParticipantRow)
                .where(ParticipantRow.event_id == event_id)
                .order_by(ParticipantRow.joined_at.asc())
            )
            return [
                _to_record(row, ParticipantRecord) for row in session.execute(stmt).scalars()
            ]

    def join_event(self, event_id: int, user_id: str) -> EventRecord:
        now = time.time()
        with self.Session() as session:
            event = session.get(EventRow, event_id, with_for_update=True)
            if not event or not event.is_active:
                raise EventNotFoundError(event_id)
            if event.max_participants and event.current_participants >= event.max_participants:
                raise EventFullError(event_id)
            if session.get(ParticipantRow, (event_id, user_id)):
                raise AlreadyJoinedError(event_id)
            session.add(ParticipantRow(event_id=event_id, user_id=user_id, joined_at=now))
            if event.group_id is not None and not session.get(
                GroupMemberRow, (event.group_id, user_id)
            ):
                session.add(
                    GroupMemberRow(
                        group_id=event.group_id, user_id=user_id, role="member", joined_at=now
                    )
                )
            event.current_participants = event.current_participants + 1
            event.updated_at = now
            session.commit()
            return _to_record(event, EventRecord)

    def leave_event(self, event_id: int, user_id: str) -> EventRecord:
        now = time.time()
        with self.Session() as session:
            event = session.get(EventRow, event_id, with_for_update=True)
            if not event:
                raise EventNotFoundError(event_id)
            participant = session.get(ParticipantRow, (event_id, user_id))
            if not participant:
                raise NotParticipantError(event_id)
            session.delete(participant)
            if event.group_id is not None:
                session.execute(
                    delete(GroupMemberRow).where(
                        GroupMemberRow.group_id == event.group_id,
                        GroupMemberRow.user_id == user_id,
                        GroupMemberRow.role == "member",
                    )
                )
            event.current_participants = max(0, event.current_participants - 1)
            event.updated_at = now
            session.commit()
            return _to_record(event, EventRecord)

    def get_group(self, group_id: int) -> Optional[GroupRecord]:
        with self.Session() as session:
            row = session.get(GroupRow, group_id)
            return _to_record(row, GroupRecord) if row else None

    def list_group_members(self, group_id: int) -> list[tuple[str, str]]:
        with self.Session() as session:
            stmt = (
                select(GroupMemberRow)
                .where(GroupMemberRow.group_id == group_id)
                .order_by(GroupMemberRow.joined_at.asc())
            )
            return [(row.user_id, row.role) for row in session.execute(stmt).scalars()]

    # Event media

    def add_event_media(self, event_id: int, uploaded_by: str, **values) -> EventMediaRecord:
        with self.Session() as session:
            row = EventMediaRow(
                event_id=event_id, uploaded_by=uploaded_by, uploaded_at=time.time(), **values
            )
            session.add(row)
            session.commit()
            return _to_record(row, EventMediaRecord)

    def get_event_media(self, event_id: int, media_id: int) -> Optional[EventMediaRecord]:
        with self.Session() as session:
            row = session.get(EventMediaRow, media_id)
            if not row or row.event_id != event_id:
                return None
            return _to_record(row, EventMediaRecord)

    def list_event_media(
        self, event_id: int, media_type: Optional[str] = None
    ) -> list[EventMediaRecord]:
        with self.Session() as session:
            stmt = select(EventMediaRow).where(EventMediaRow.event_id == event_id)
            if media_type is not None:
                stmt = stmt.where(EventMediaRow.media_type == media_type)
            stmt = stmt.order_by(EventMediaRow.uploaded_at.asc(), EventMediaRow.id.asc())
            return [
                _to_record(row, EventMediaRecord) for row in session.execute(stmt).scalars()
            ]

    def update_event_media(self, media_id: int, **values) -> Optional[EventMediaRecord]:
        _check_fields(values, MEDIA_UPDATABLE)
        with self.Session() as session:
            row = session.get(EventMediaRow, media_id)
            if not row:
                return None
            for key, value in values.items():
                setattr(row, key, value)
            session.commit()
            return _to_record(row, EventMediaRecord)

    def delete_event_media(self, media_id: int) -> bool:
        with self.Session() as session:
            removed = session.execute(
                delete(EventMediaRow).where(EventMediaRow.id == media_id)
            ).rowcount
            session.commit()
            return bool(removed)

    def list_event_media_with_prefix(self, prefix: str) -> list[EventMediaRecord]:
        pattern = f"{prefix}%"
        with self.Session() as session:
            stmt = (
                select(EventMediaRow)
                .where(
                    or_(
                        EventMediaRow.media_url.like(pattern),
                        EventMediaRow.thumbnail_url.like(pattern),
                    )
                )
                .order_by(EventMediaRow.id.asc())
            )
            return [
                _to_record(row, EventMediaRecord) for row in session.execute(stmt).scalars()
            ]

    # Messages

    def create_message(self, sender_id: str, receiver_id: str, **values) -> MessageRecord:
        with self.Session() as session:
            row = MessageRow(
                sender_id=sender_id, receiver_id=receiver_id, created_at=time.time(), **values
            )
            session.add(row)
            session.commit()
            return _to_record(row, MessageRecord)

    def list_conversation(self, user_a: str, user_b: str, limit: int = 50) -> list[MessageRecord]:
        with self.Session() as session:
            stmt = (
                select(MessageRow)
                .where(
                    or_(
                        and_(MessageRow.sender_id == user_a, MessageRow.receiver_id == user_b),
                        and_(MessageRow.sender_id == user_b, MessageRow.receiver_id == user_a),
                    )
                )
                .order_by(MessageRow.created_at.desc(), MessageRow.id.desc())
                .limit(limit)
            )
            rows = list(session.execute(stmt).scalars())
            return [_to_record(row, MessageRecord) for row in reversed(rows)]

    def mark_conversation_read(self, receiver_id: str, sender_id: str) -> int:
        with self.Session() as session:
            updated = session.execute(
                update(MessageRow)
                .where(
                    MessageRow.receiver_id == receiver_id,
                    MessageRow.sender_id == sender_id,
                    MessageRow.is_read.is_(False),
                )
                .values(is_read=True)
            ).rowcount
            session.commit()
            return updated or 0

    # Maintenance jobs

    def _to_job_record(self, row: "MaintenanceJobRow") -> MaintenanceJobRecord:
        return MaintenanceJobRecord(
            job_id=row.job_id,
            kind=row.kind,
            status=JobStatus(row.status),
            params=row.params or {},
            result=row.result,
            locked_at=row.locked_at,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def create_job(self, kind: str, params: Optional[dict] = None) -> MaintenanceJobRecord:
        now = time.time()
        with self.Session() as session:
            row = MaintenanceJobRow(
                job_id=uuid.uuid4().hex,
                kind=kind,
                status=JobStatus.WAITING.value,
                params=dict(params or {}),
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            session.commit()
            return self._to_job_record(row)

    def get_job(self, job_id: str) -> Optional[MaintenanceJobRecord]:
        with self.Session() as session:
            row = session.get(MaintenanceJobRow, job_id)
            return self._to_job_record(row) if row else None

    def claim_job(self, job_id: str) -> Optional[MaintenanceJobRecord]:
        now = time.time()
        with self.Session() as session:
            claimed = session.execute(
                update(MaintenanceJobRow)
                .where(
                    MaintenanceJobRow.job_id == job_id,
                    MaintenanceJobRow.status == JobStatus.WAITING.value,
                )
                .values(status=JobStatus.RUNNING.value, locked_at=now, updated_at=now)
            ).rowcount
            session.commit()
            if not claimed:
                return None
            return self._to_job_record(session.get(MaintenanceJobRow, job_id))

    def claim_next_waiting_job(self) -> Optional[MaintenanceJobRecord]:
        now = time.time()
        with self.Session() as session:
            stmt = (
                select(MaintenanceJobRow)
                .where(MaintenanceJobRow.status == JobStatus.WAITING.value)
                .order_by(MaintenanceJobRow.created_at.asc())
                .limit(1)
                .with_for_update(skip_locked=True)
            )
            row = session.execute(stmt).scalar_one_or_none()
            if not row:
                return None
            row.status = JobStatus.RUNNING.value
            row.locked_at = now
            row.updated_at = now
            session.commit()
            return self._to_job_record(row)

    def update_job(
        self,
        job_id: str,
        *,
        status: Optional[JobStatus] = None,
        result: Optional[dict] = None,
    ) -> None:
        with self.Session() as session:
            row = session.get(MaintenanceJobRow, job_id)
            if not row:
                return
            if status:
                row.status = status.value
            if result is not None:
                row.result = result
            row.updated_at = time.time()
            session.commit()

    def requeue_stale_locks(self, lock_timeout_seconds: float = 600) -> int:
        cutoff = time.time() - lock_timeout_seconds
        with self.Session() as session:
            updated = session.execute(
                update(MaintenanceJobRow)
                .where(
                    MaintenanceJobRow.status == JobStatus.RUNNING.value,
                    MaintenanceJobRow.locked_at.is_not(None),
                    MaintenanceJobRow.locked_at < cutoff,
                )
                .values(
                    status=JobStatus.WAITING.value,
                    locked_at=None,
                    updated_at=time.time(),
                )
            ).rowcount
            session.commit()
            return updated or 0


Base = declarative_base()


class UserRow(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    username = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    nickname = Column(String(100), nullable=True)
    profile_image = Column(String(500), nullable=True)
    about = Column(Text, nullable=True)
    created_at = Column(Float, nullable=False)
    updated_at = Column(Float, nullable=False)


class SessionRow(Base):
    __tablename__ = "sessions"

    token = Column(String(64), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    expires_at = Column(Float, nullable=False)
    created_at = Column(Float, nullable=False)


class PostRow(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=True)
    image = Column(String(500), nullable=True)
    video = Column(String(500), nullable=True)
    duration = Column(Integer, nullable=True)
    has_private_location = Column(Boolean, nullable=False, default=False)
    community_name = Column(String(100), nullable=True)
    created_at = Column(Float, nullable=False)
    updated_at = Column(Float, nullable=False)


class PostLikeRow(Base):
    __tablename__ = "post_likes"

    post_id = Column(Integer, ForeignKey("posts.id"), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), primary_key=True)
    created_at = Column(Float, nullable=False)


class CommentRow(Base):
    __tablename__ = "post_comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    post_id = Column(Integer, ForeignKey("posts.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    parent_comment_id = Column(Integer, nullable=True)
    content = Column(Text, nullable=False)
    created_at = Column(Float, nullable=False)


class ThemeRow(Base):
    __tablename__ = "event_themes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    display_name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    primary_color = Column(String(7), nullable=False)
    secondary_color = Column(String(7), nullable=False)
    accent_color = Column(String(7), nullable=False)
    text_color = Column(String(7), nullable=False)
    background_gradient = Column(Text, nullable=True)
    font_family = Column(String(100), nullable=False)
    font_weight = Column(String(20), nullable=False, default="400")
    border_radius = Column(Integer, nullable=False, default=8)
    shadow_intensity = Column(String(20), nullable=False, default="medium")
    category = Column(String(50), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(Float, nullable=False)


class GroupRow(Base):
    __tablename__ = "groups"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    max_members = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(Float, nullable=False)


class GroupMemberRow(Base):
    __tablename__ = "group_members"

    group_id = Column(Integer, ForeignKey("groups.id"), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), primary_key=True)
    role = Column(String(20), nullable=False, default="member")
    joined_at = Column(Float, nullable=False)


class EventRow(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    location = Column(String(300), nullable=False)
    event_date = Column(String(10), nullable=False)
    event_time = Column(String(10), nullable=False)
    max_participants = Column(Integer, nullable=True)
    current_participants = Column(Integer, nullable=False, default=1)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    share_token = Column(String(64), nullable=False, unique=True)
    is_active = Column(Boolean, nullable=False, default=True)
    is_invite = Column(Boolean, nullable=False, default=False)
    invite_description = Column(Text, nullable=True)
    group_name = Column(String(100), nullable=True)
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=True)
    theme_id = Column(Integer, ForeignKey("event_themes.id"), nullable=True)
    custom_flyer_url = Column(String(500), nullable=True)
    thumbnail_video_url = Column(String(500), nullable=True)
    thumbnail_image_url = Column(String(500), nullable=True)
    custom_background_url = Column(String(500), nullable=True)
    custom_background_type = Column(String(20), nullable=True)
    is_repeating = Column(Boolean, nullable=False, default=False)
    repeat_pattern = Column(String(20), nullable=True)
    repeat_interval = Column(Integer, nullable=False, default=1)
    repeat_end_date = Column(String(10), nullable=True)
    repeat_days_of_week = Column(String(20), nullable=True)
    parent_event_id = Column(Integer, ForeignKey("events.id"), nullable=True)
    created_at = Column(Float, nullable=False)
    updated_at = Column(Float, nullable=False)


class ParticipantRow(Base):
    __tablename__ = "event_participants"

    event_id = Column(Integer, ForeignKey("events.id"), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), primary_key=True)
    joined_at = Column(Float, nullable=False)


class EventMediaRow(Base):
    __tablename__ = "event_media"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    uploaded_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    media_url = Column(String(500), nullable=False)
    thumbnail_url = Column(String(500), nullable=True)
    title = Column(String(200), nullable=True)
    description = Column(Text, nullable=True)
    media_type = Column(String(20), nullable=False)
    duration = Column(Integer, nullable=True)
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    file_size = Column(Integer, nullable=True)
    mime_type = Column(String(100), nullable=True)
    is_public = Column(Boolean, nullable=False, default=True)
    uploaded_at = Column(Float, nullable=False)


class MessageRow(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sender_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    receiver_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=True)
    message_type = Column(String(20), nullable=False, default="text")
    attachment_url = Column(Text, nullable=True)
    attachment_type = Column(String(50), nullable=True)
    attachment_name = Column(String(255), nullable=True)
    attachment_size = Column(Integer, nullable=True)
    duration = Column(Integer, nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(Float, nullable=False)


class MaintenanceJobRow(Base):
    __tablename__ = "maintenance_jobs"

    job_id = Column(String, primary_key=True)
    kind = Column(String(50), nullable=False)
    status = Column(String, nullable=False, index=True)
    params = Column(JSON, nullable=False)
    result = Column(JSON, nullable=True)
    locked_at = Column(Float, nullable=True)
    created_at = Column(Float, nullable=False)
    updated_at = Column(Float, nullable=False)
