from __future__ import annotations

"""Authoring path: attach video references to topics.

`create_video` appends a topic to a course (``order_index = count + 1``),
keeps the literal URL on the topic for older readers and writes a companion
`videos` row. The companion row holds the bucket-relative path when the URL
points into the default bucket, otherwise the literal value. If that second
insert fails the topic still stands (it resolves through its literal URL) and
the failure is only logged.

`set_topic_video` repoints an existing topic: both the literal field and the
`videos` rows are replaced so the new reference wins resolution.
"""

import logging
from typing import Optional

from app.api.http_utils import clean_str, parse_uuid
from app.core.config import settings
from app.core.exceptions import BadRequestException, InternalErrorException, TopicNotFoundException
from app.repositories.topics import ReferenceStoreProtocol, TopicRecord
from app.services.locators import parse_storage_url

logger = logging.getLogger(__name__)

__all__ = ["companion_video_path", "create_video", "set_topic_video"]

MISSING_FIELDS_MESSAGE = "Missing required fields: title, url, courseId"


def companion_video_path(url: str, default_bucket: Optional[str] = None) -> str:
    """Value stored in `videos.video_path` for a submitted URL."""
    bucket = default_bucket or settings.STORAGE_DEFAULT_BUCKET
    ref = parse_storage_url(url)
    if ref is not None and ref.bucket == bucket:
        return ref.path
    return url.strip()


async def create_video(
    store: ReferenceStoreProtocol,
    *,
    title: Optional[str],
    url: Optional[str],
    course_id: Optional[str],
) -> TopicRecord:
    """
    Create a topic carrying `url` plus its companion media record.

    Raises
    ------
    BadRequestException
        A required field is missing/blank or `course_id` is not a UUID.
    InternalErrorException
        The topic insert failed ("Failed to create topic record").
    """
    title_s, url_s, course_s = clean_str(title), clean_str(url), clean_str(course_id)
    if not (title_s and url_s and course_s):
        raise BadRequestException(MISSING_FIELDS_MESSAGE)
    if parse_uuid(course_s) is None:
        raise BadRequestException("Invalid courseId", context={"course_id": course_s})

    order_index = await store.count_topics(course_s) + 1

    try:
        topic = await store.create_topic(course_id=course_s, title=title_s, video_url=url_s, order_index=order_index)
    except Exception as e:
        raise InternalErrorException(
            message="Failed to create topic record",
            reason=f"{e.__class__.__name__}: {e}",
        ) from e

    video_path = companion_video_path(url_s)
    try:
        await store.create_video_record(topic_id=topic.id, title=title_s, video_path=video_path)
    except Exception:
        logger.exception("Companion video record insert failed for topic %s; topic kept", topic.id)

    logger.info("Created topic %s in course %s at position %s", topic.id, course_s, order_index)
    return topic


async def set_topic_video(store: ReferenceStoreProtocol, topic_id: str, *, url: Optional[str]) -> TopicRecord:
    """Repoint `topic_id` at `url` (None or blank clears the reference)."""
    url_s = clean_str(url)
    video_path = companion_video_path(url_s) if url_s else None

    topic = await store.set_topic_video(topic_id, video_url=url_s, video_path=video_path)
    if topic is None:
        raise TopicNotFoundException(topic_id=topic_id)

    logger.info("Topic %s video %s", topic_id, "updated" if url_s else "cleared")
    return topic
