"""
Operator maintenance: media URL repair, media reachability checks and
location autocomplete lookups.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

import requests

from mirrosocial.db import DbClient
from mirrosocial.media import rewrite_media_url

logger = logging.getLogger(__name__)

VALIDATOR_USER_AGENT = "MirroSocial-MediaValidator/1.0"
GOOGLE_AUTOCOMPLETE_URL = "https://maps.googleapis.com/maps/api/place/autocomplete/json"
MAPBOX_GEOCODE_URL = "https://api.mapbox.com/geocoding/v5/mapbox.places/{query}.json"


def rewrite_legacy_media_urls(
    db: DbClient, old_base: str, new_base: str, dry_run: bool = False
) -> dict:
    """
    Point posts and event media served from `old_base` at `new_base`.

    Returns a report of every row that was (or, with dry_run, would be) changed.
    """
    prefix = old_base.rstrip("/")
    report = {"fixed": 0, "posts": [], "media": []}

    for post in db.list_posts_with_media_prefix(prefix):
        updates = {}
        fixed_video = rewrite_media_url(post.video, prefix, new_base)
        fixed_image = rewrite_media_url(post.image, prefix, new_base)
        if fixed_video:
            updates["video"] = fixed_video
        if fixed_image:
            updates["image"] = fixed_image
        if not updates:
            continue
        # Captured before the update: in-memory records are mutated in place.
        entry = {
            "id": post.id,
            "originalVideo": post.video,
            "originalImage": post.image,
            "fixedVideo": fixed_video or post.video,
            "fixedImage": fixed_image or post.image,
        }
        if not dry_run:
            try:
                db.update_post(post.id, **updates)
            except Exception:
                logger.exception("Failed to fix media URLs for post %s", post.id)
                continue
        report["fixed"] += 1
        report["posts"].append(entry)

    for media in db.list_event_media_with_prefix(prefix):
        updates = {}
        fixed_url = rewrite_media_url(media.media_url, prefix, new_base)
        fixed_thumbnail = rewrite_media_url(media.thumbnail_url, prefix, new_base)
        if fixed_url:
            updates["media_url"] = fixed_url
        if fixed_thumbnail:
            updates["thumbnail_url"] = fixed_thumbnail
        if not updates:
            continue
        entry = {
            "id": media.id,
            "eventId": media.event_id,
            "originalUrl": media.media_url,
            "originalThumbnail": media.thumbnail_url,
            "fixedUrl": fixed_url or media.media_url,
            "fixedThumbnail": fixed_thumbnail or media.thumbnail_url,
        }
        if not dry_run:
            try:
                db.update_event_media(media.id, **updates)
            except Exception:
                logger.exception("Failed to fix media URLs for event media %s", media.id)
                continue
        report["fixed"] += 1
        report["media"].append(entry)

    logger.info(
        "Media URL repair %s: %d rows (%d posts, %d media) from %s to %s",
        "dry run" if dry_run else "applied",
        report["fixed"],
        len(report["posts"]),
        len(report["media"]),
        prefix,
        new_base,
    )
    return report


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def validate_media_url(url: str, timeout: float = 10.0) -> dict:
    """HEAD the URL and describe whether it is reachable."""
    try:
        response = requests.head(
            url,
            headers={"User-Agent": VALIDATOR_USER_AGENT},
            timeout=timeout,
            allow_redirects=True,
        )
    except requests.RequestException as exc:
        logger.warning("Media URL %s unreachable: %s", url, exc)
        return {
            "url": url,
            "accessible": False,
            "error": str(exc),
            "timestamp": _utc_now_iso(),
        }
    return {
        "url": url,
        "accessible": response.ok,
        "status": response.status_code,
        "statusText": response.reason,
        "contentType": response.headers.get("content-type"),
        "contentLength": response.headers.get("content-length"),
        "lastModified": response.headers.get("last-modified"),
        "timestamp": _utc_now_iso(),
    }


def _mapbox_prediction(feature: dict) -> dict:
    text = feature.get("text", "")
    place_name = feature.get("place_name", "")
    return {
        "place_id": feature.get("id"),
        "description": place_name,
        "structured_formatting": {
            "main_text": text,
            "secondary_text": place_name.replace(f"{text}, ", ""),
        },
    }


def autocomplete_places(
    query: str,
    *,
    google_api_key: Optional[str] = None,
    mapbox_token: Optional[str] = None,
    timeout: float = 10.0,
) -> dict:
    """
    Location suggestions in the Google Places `predictions` shape.

    Google is used when a key is configured, Mapbox otherwise; with neither
    (or both failing) the result is an empty prediction list.
    """
    if google_api_key:
        try:
            response = requests.get(
                GOOGLE_AUTOCOMPLETE_URL,
                params={"input": query, "key": google_api_key, "types": "establishment|geocode"},
                timeout=timeout,
            )
            if response.ok:
                return response.json()
            logger.warning("Google Places returned %s", response.status_code)
        except requests.RequestException as exc:
            logger.warning("Google Places request failed: %s", exc)

    if mapbox_token:
        try:
            response = requests.get(
                MAPBOX_GEOCODE_URL.format(query=requests.utils.quote(query, safe="")),
                params={
                    "access_token": mapbox_token,
                    "types": "place,locality,neighborhood,address",
                    "limit": 5,
                },
                timeout=timeout,
            )
            if response.ok:
                features = response.json().get("features") or []
                return {"predictions": [_mapbox_prediction(f) for f in features]}
            logger.warning("Mapbox geocoding returned %s", response.status_code)
        except requests.RequestException as exc:
            logger.warning("Mapbox geocoding request failed: %s", exc)

    return {"predictions": []}
