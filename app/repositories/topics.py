from __future__ import annotations

"""Reference store repository.

Read/write access to the tables owned by the surrounding course platform:

- `topics.video_url` (legacy literal locator) and `videos.video_path`
  (preferred per-topic media record)
- topic → course linkage for the existence checks on `/video`

The protocol documents the interface the services depend on; the SQL
implementation is the production one and tests substitute in-memory fakes.
Ids arrive as strings; anything that is not a UUID simply does not exist.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import Depends
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.http_utils import parse_uuid
from app.db.models import Course, Topic, Video
from app.db.session import get_async_db

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TopicRecord:
    id: str
    course_id: str
    title: str
    video_url: Optional[str] = None
    order_index: int = 1
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "course_id": self.course_id,
            "title": self.title,
            "video_url": self.video_url,
            "order_index": self.order_index,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class CourseRecord:
    id: str
    is_published: bool = False
    lab_id: Optional[str] = None


class ReferenceStoreProtocol:
    async def get_topic(self, topic_id: str) -> Optional[TopicRecord]:
        raise NotImplementedError

    async def get_course(self, course_id: str) -> Optional[CourseRecord]:
        raise NotImplementedError

    async def get_video_path(self, topic_id: str) -> Optional[str]:
        """Newest non-empty `videos.video_path` for the topic."""
        raise NotImplementedError

    async def count_topics(self, course_id: str) -> int:
        raise NotImplementedError

    async def create_topic(self, *, course_id: str, title: str, video_url: str, order_index: int) -> TopicRecord:
        raise NotImplementedError

    async def create_video_record(self, *, topic_id: str, title: str, video_path: str) -> None:
        raise NotImplementedError

    async def set_topic_video(
        self, topic_id: str, *, video_url: Optional[str], video_path: Optional[str], title: Optional[str] = None
    ) -> Optional[TopicRecord]:
        """Point the topic at a new reference; replaces its `videos` rows."""
        raise NotImplementedError


def _topic_record(topic: Topic) -> TopicRecord:
    return TopicRecord(
        id=str(topic.id),
        course_id=str(topic.course_id),
        title=topic.title,
        video_url=topic.video_url,
        order_index=topic.order_index,
        created_at=topic.created_at,
    )


class SqlReferenceStore(ReferenceStoreProtocol):
    """SQLAlchemy (async) implementation over `courses`/`topics`/`videos`."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_topic(self, topic_id: str) -> Optional[TopicRecord]:
        tid = parse_uuid(topic_id)
        if tid is None:
            return None
        topic = await self.db.get(Topic, tid)
        return _topic_record(topic) if topic is not None else None

    async def get_course(self, course_id: str) -> Optional[CourseRecord]:
        cid = parse_uuid(course_id)
        if cid is None:
            return None
        course = await self.db.get(Course, cid)
        if course is None:
            return None
        return CourseRecord(id=str(course.id), is_published=bool(course.is_published), lab_id=course.lab_id)

    async def get_video_path(self, topic_id: str) -> Optional[str]:
        tid = parse_uuid(topic_id)
        if tid is None:
            return None
        stmt = (
            select(Video.video_path)
            .where(Video.topic_id == tid)
            .where(Video.video_path.is_not(None))
            .where(func.length(func.trim(Video.video_path)) > 0)
            .order_by(Video.created_at.desc())
            .limit(1)
        )
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def count_topics(self, course_id: str) -> int:
        cid = parse_uuid(course_id)
        if cid is None:
            return 0
        stmt = select(func.count()).select_from(Topic).where(Topic.course_id == cid)
        return int((await self.db.execute(stmt)).scalar_one())

    async def create_topic(self, *, course_id: str, title: str, video_url: str, order_index: int) -> TopicRecord:
        topic = Topic(
            course_id=uuid.UUID(str(course_id)),
            title=title,
            video_url=video_url,
            order_index=order_index,
        )
        self.db.add(topic)
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        await self.db.refresh(topic)
        return _topic_record(topic)

    async def create_video_record(self, *, topic_id: str, title: str, video_path: str) -> None:
        self.db.add(Video(topic_id=uuid.UUID(str(topic_id)), title=title, video_path=video_path))
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def set_topic_video(
        self, topic_id: str, *, video_url: Optional[str], video_path: Optional[str], title: Optional[str] = None
    ) -> Optional[TopicRecord]:
        tid = parse_uuid(topic_id)
        if tid is None:
            return None
        topic = await self.db.get(Topic, tid)
        if topic is None:
            return None

        topic.video_url = video_url
        await self.db.execute(delete(Video).where(Video.topic_id == tid))
        if video_path:
            self.db.add(Video(topic_id=tid, title=title or topic.title, video_path=video_path))
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        await self.db.refresh(topic)
        return _topic_record(topic)


def get_reference_store(db: AsyncSession = Depends(get_async_db)) -> ReferenceStoreProtocol:
    """FastAPI dependency returning the SQL-backed reference store."""
    return SqlReferenceStore(db)


__all__ = [
    "TopicRecord",
    "CourseRecord",
    "ReferenceStoreProtocol",
    "SqlReferenceStore",
    "get_reference_store",
]
