"""
HTTP routes for posts, direct messages and operator maintenance.
"""

from __future__ import annotations

import logging
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import JSONResponse

from mirrosocial.auth import get_current_user, get_optional_user
from mirrosocial.config import get_settings, r2_missing_settings
from mirrosocial.db import DbClient, PostRecord, UserRecord
from mirrosocial.dependencies import get_db_client, get_queue_client, get_storage_client
from mirrosocial.maintenance import (
    autocomplete_places,
    rewrite_legacy_media_urls,
    validate_media_url,
)
from mirrosocial.media import (
    MESSAGE_ATTACHMENT,
    POST_MEDIA,
    UploadPolicy,
    UploadRejected,
    media_kind,
    upload_media,
    validate_upload,
)
from mirrosocial.queue import JobQueue
from mirrosocial.schemas import (
    AttachmentUploadResponse,
    CommentListResponse,
    CommentRequest,
    CommentResponse,
    ConversationResponse,
    CreatePostResponse,
    DeletePostResponse,
    EnqueueJobResponse,
    FixMediaUrlsRequest,
    FixMediaUrlsResponse,
    JobStatusResponse,
    LikeResponse,
    MarkReadResponse,
    MessageEnvelope,
    MessageResponse,
    PostListResponse,
    PostResponse,
    SendMessageRequest,
    UserSummary,
    ValidateMediaRequest,
)
from mirrosocial.storage import StorageClient
from mirrosocial.worker import FIX_MEDIA_URLS

logger = logging.getLogger(__name__)

router = APIRouter()


async def read_upload(file: UploadFile, policy: UploadPolicy) -> bytes:
    """Read an uploaded file and enforce the policy, as a 400 on rejection."""
    data = await file.read()
    try:
        validate_upload(policy, file.content_type, len(data))
    except UploadRejected as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return data


def store_upload(
    storage: StorageClient, data: bytes, file: UploadFile, folder: str, error_detail: str
) -> str:
    try:
        return upload_media(storage, data, file.filename, file.content_type, folder)
    except (BotoCoreError, ClientError) as exc:
        logger.exception("Upload of %s to %s failed", file.filename, folder)
        raise HTTPException(status_code=500, detail=error_detail.format(reason=exc))


def user_summary(user: Optional[UserRecord]) -> Optional[UserSummary]:
    return UserSummary(**user.summary()) if user else None


def _post_response(
    db: DbClient, post: PostRecord, author: Optional[UserRecord], viewer: Optional[UserRecord]
) -> PostResponse:
    return PostResponse(
        **post.as_dict(),
        user=user_summary(author),
        likes=db.count_likes(post.id),
        comments=db.count_comments(post.id),
        is_liked=bool(viewer) and db.has_liked(post.id, viewer.id),
    )


# Posts


@router.get("/posts", response_model=PostListResponse)
def list_posts(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_id: Optional[str] = Query(None, alias="userId"),
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    posts = db.list_posts(limit=limit, offset=offset, user_id=user_id)
    authors = db.get_users(p.user_id for p in posts)
    return PostListResponse(
        posts=[_post_response(db, p, authors.get(p.user_id), current_user) for p in posts]
    )


@router.post("/posts", response_model=CreatePostResponse, status_code=201)
async def create_post(
    content: Optional[str] = Form(None),
    media: Optional[UploadFile] = File(None),
    db: DbClient = Depends(get_db_client),
    storage: StorageClient = Depends(get_storage_client),
    current_user: UserRecord = Depends(get_current_user),
):
    content = (content or "").strip()
    if media is not None and not media.filename:
        media = None
    if not content and media is None:
        raise HTTPException(status_code=400, detail="Content or media is required")

    values = {"content": content or None}
    if media is not None:
        data = await read_upload(media, POST_MEDIA)
        url = store_upload(storage, data, media, "post-media", "Failed to upload media")
        if media_kind(media.content_type) == "video":
            values["video"] = url
        else:
            values["image"] = url

    post = db.create_post(current_user.id, **values)
    logger.info("User %s created post %s", current_user.id, post.id)
    return CreatePostResponse(
        success=True, post=_post_response(db, post, current_user, current_user)
    )


@router.get("/posts/{post_id}", response_model=PostResponse)
def get_post(
    post_id: int,
    db: DbClient = Depends(get_db_client),
    viewer: Optional[UserRecord] = Depends(get_optional_user),
):
    post = db.get_post(post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return _post_response(db, post, db.get_user(post.user_id), viewer)


@router.put("/posts/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: int,
    content: Optional[str] = Form(None),
    media: Optional[UploadFile] = File(None),
    remove_media: Optional[str] = Form(None, alias="removeMedia"),
    db: DbClient = Depends(get_db_client),
    storage: StorageClient = Depends(get_storage_client),
    current_user: UserRecord = Depends(get_current_user),
):
    post = db.get_post(post_id)
    if not post or post.user_id != current_user.id:
        raise HTTPException(status_code=404, detail="Post not found or unauthorized")

    if media is not None and not media.filename:
        media = None
    content = (content or "").strip()
    updates = {"content": content or None}
    image, video = post.image, post.video
    if remove_media == "true":
        image = video = None

    if media is not None:
        data = await read_upload(media, POST_MEDIA)
        url = store_upload(storage, data, media, "post-media", "Failed to upload media")
        if media_kind(media.content_type) == "video":
            image, video = None, url
        else:
            image, video = url, None

    if not content and not image and not video:
        raise HTTPException(status_code=400, detail="Content or media is required")

    updates["image"] = image
    updates["video"] = video
    updated = db.update_post(post_id, **updates)
    return _post_response(db, updated, current_user, current_user)


@router.delete("/posts/{post_id}", response_model=DeletePostResponse)
def delete_post(
    post_id: int,
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    post = db.get_post(post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    if post.user_id != current_user.id:
        raise HTTPException(status_code=403, detail="Unauthorized - you don't own this post")
    counts = db.delete_post(post_id)
    logger.info("Deleted post %s: %s", post_id, counts)
    return DeletePostResponse(message="Post deleted successfully", deleted_counts=counts)


def _require_post(db: DbClient, post_id: int) -> PostRecord:
    post = db.get_post(post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


@router.post("/posts/{post_id}/like", response_model=LikeResponse)
def like_post(
    post_id: int,
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    _require_post(db, post_id)
    db.like_post(post_id, current_user.id)
    return LikeResponse(liked=True, likes=db.count_likes(post_id))


@router.delete("/posts/{post_id}/like", response_model=LikeResponse)
def unlike_post(
    post_id: int,
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    _require_post(db, post_id)
    db.unlike_post(post_id, current_user.id)
    return LikeResponse(liked=False, likes=db.count_likes(post_id))


@router.get("/posts/{post_id}/comments", response_model=CommentListResponse)
def list_comments(
    post_id: int,
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    _require_post(db, post_id)
    comments = db.list_comments(post_id)
    authors = db.get_users(c.user_id for c in comments)
    return CommentListResponse(
        comments=[
            CommentResponse(**c.as_dict(), user=user_summary(authors.get(c.user_id)))
            for c in comments
        ]
    )


@router.post("/posts/{post_id}/comments", response_model=CommentResponse, status_code=201)
def add_comment(
    post_id: int,
    payload: CommentRequest,
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    _require_post(db, post_id)
    content = payload.content.strip()
    if not content:
        raise HTTPException(status_code=400, detail="Content is required")
    comment = db.add_comment(post_id, current_user.id, content, payload.parent_comment_id)
    return CommentResponse(**comment.as_dict(), user=user_summary(current_user))


# Messages


@router.post("/messages/upload", response_model=AttachmentUploadResponse)
async def upload_message_attachment(
    file: Optional[UploadFile] = File(None),
    storage: StorageClient = Depends(get_storage_client),
    current_user: UserRecord = Depends(get_current_user),
):
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file provided")
    data = await read_upload(file, MESSAGE_ATTACHMENT)
    url = store_upload(storage, data, file, "messages", "Upload failed: {reason}")
    return AttachmentUploadResponse(
        url=url,
        name=file.filename,
        type=file.content_type or "application/octet-stream",
        size=len(data),
        success=True,
    )


@router.post("/messages", response_model=MessageEnvelope, status_code=201)
def send_message(
    payload: SendMessageRequest,
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    if not db.get_user(payload.receiver_id):
        raise HTTPException(status_code=404, detail="Receiver not found")
    content = (payload.content or "").strip() or None
    if not content and not payload.attachment_url:
        raise HTTPException(status_code=400, detail="Message content or attachment is required")
    message = db.create_message(
        current_user.id,
        payload.receiver_id,
        content=content,
        message_type=payload.message_type,
        attachment_url=payload.attachment_url,
        attachment_type=payload.attachment_type,
        attachment_name=payload.attachment_name,
        attachment_size=payload.attachment_size,
        duration=payload.duration,
    )
    return MessageEnvelope(message=MessageResponse(**message.as_dict()))


@router.get("/messages/{other_user_id}", response_model=ConversationResponse)
def get_conversation(
    other_user_id: str,
    limit: int = Query(50, ge=1, le=200),
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    messages = db.list_conversation(current_user.id, other_user_id, limit=limit)
    return ConversationResponse(messages=[MessageResponse(**m.as_dict()) for m in messages])


@router.post("/messages/{other_user_id}/read", response_model=MarkReadResponse)
def mark_read(
    other_user_id: str,
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    return MarkReadResponse(updated=db.mark_conversation_read(current_user.id, other_user_id))


# Maintenance


@router.post("/fix-media-urls", response_model=FixMediaUrlsResponse)
def fix_media_urls(
    payload: Optional[FixMediaUrlsRequest] = None,
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    settings = get_settings()
    payload = payload or FixMediaUrlsRequest()
    new_base = payload.new_base or settings.r2_public_url
    if not new_base:
        raise HTTPException(status_code=400, detail="R2_PUBLIC_URL is not configured")
    old_base = payload.old_base or settings.legacy_media_base_url
    logger.info("User %s requested media URL repair", current_user.id)
    report = rewrite_legacy_media_urls(db, old_base, new_base, dry_run=payload.dry_run)
    if report["fixed"]:
        message = f"Successfully fixed {report['fixed']} rows"
    else:
        message = "No broken URLs found"
    return FixMediaUrlsResponse(message=message, **report)


@router.post(
    "/maintenance/jobs/fix-media-urls", response_model=EnqueueJobResponse, status_code=202
)
def enqueue_fix_media_urls(
    payload: Optional[FixMediaUrlsRequest] = None,
    db: DbClient = Depends(get_db_client),
    queue: JobQueue = Depends(get_queue_client),
    current_user: UserRecord = Depends(get_current_user),
):
    """Queue the media URL repair for the worker instead of running it in-request."""
    payload = payload or FixMediaUrlsRequest()
    job = db.create_job(FIX_MEDIA_URLS, payload.model_dump(exclude_none=True))
    queue.enqueue(job)
    logger.info("[%s] Requested by user %s", job.job_id, current_user.id)
    return EnqueueJobResponse(job_id=job.job_id, status=job.status.name)


@router.get("/maintenance/jobs/{job_id}", response_model=JobStatusResponse)
def get_job_status(
    job_id: str,
    db: DbClient = Depends(get_db_client),
    current_user: UserRecord = Depends(get_current_user),
):
    job = db.get_job(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return JobStatusResponse(**job.as_dict())


@router.post("/validate-media")
def validate_media(payload: ValidateMediaRequest):
    if not payload.url:
        raise HTTPException(status_code=400, detail="URL is required")
    return validate_media_url(payload.url, timeout=get_settings().http_timeout_seconds)


@router.get("/storage/health")
def storage_health(storage: StorageClient = Depends(get_storage_client)):
    settings = get_settings()
    missing = r2_missing_settings(settings)
    if missing:
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": "Missing environment variables",
                "missing": missing,
            },
        )
    return {
        "success": True,
        "reachable": storage.check_connection(),
        "config": {
            "endpoint": settings.r2_endpoint,
            "bucket": settings.r2_bucket_name,
            "publicUrl": settings.r2_public_url,
            "hasCredentials": bool(
                settings.r2_access_key_id and settings.r2_secret_access_key
            ),
        },
    }


@router.get("/places/autocomplete")
def places_autocomplete(input: Optional[str] = Query(None)):
    if not input:
        raise HTTPException(status_code=400, detail="Input parameter is required")
    settings = get_settings()
    return autocomplete_places(
        input,
        google_api_key=settings.google_places_api_key,
        mapbox_token=settings.mapbox_access_token,
        timeout=settings.http_timeout_seconds,
    )
