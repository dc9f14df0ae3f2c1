from __future__ import annotations

"""Topic → media locator resolution.

Precedence:
1) newest non-empty `videos.video_path` for the topic (``videoRecord``)
2) the topic's legacy `video_url` (``legacyField``)
3) nothing → `VideoNotFoundException` (404)
"""

import logging
from dataclasses import dataclass
from typing import Literal

from fastapi import Depends

from app.core.config import settings
from app.core.exceptions import VideoNotFoundException
from app.repositories.topics import ReferenceStoreProtocol, get_reference_store
from app.services.locators import MediaLocator, classify_locator

logger = logging.getLogger(__name__)

OriginKind = Literal["videoRecord", "legacyField"]


@dataclass(frozen=True)
class ResolvedSource:
    topic_id: str
    locator: MediaLocator
    origin_kind: OriginKind


class VideoReferenceResolver:
    def __init__(self, store: ReferenceStoreProtocol, default_bucket: str | None = None) -> None:
        self.store = store
        self.default_bucket = default_bucket or settings.STORAGE_DEFAULT_BUCKET

    async def resolve(self, topic_id: str) -> ResolvedSource:
        """Resolve `topic_id` to its preferred locator or raise `VideoNotFoundException`."""
        locator = classify_locator(await self.store.get_video_path(topic_id), self.default_bucket)
        if locator is not None:
            return ResolvedSource(topic_id=topic_id, locator=locator, origin_kind="videoRecord")

        topic = await self.store.get_topic(topic_id)
        locator = classify_locator(topic.video_url if topic is not None else None, self.default_bucket)
        if locator is not None:
            return ResolvedSource(topic_id=topic_id, locator=locator, origin_kind="legacyField")

        logger.info("No video reference for topic %s", topic_id)
        raise VideoNotFoundException(topic_id=topic_id)


def get_video_resolver(store: ReferenceStoreProtocol = Depends(get_reference_store)) -> VideoReferenceResolver:
    """FastAPI dependency."""
    return VideoReferenceResolver(store)


__all__ = ["OriginKind", "ResolvedSource", "VideoReferenceResolver", "get_video_resolver"]
