# tests/fixtures/store.py

"""
🗂️ In-memory reference store:
- Same interface as `SqlReferenceStore`
- Helpers to seed courses, topics and `videos` rows
- Toggles to make either authoring insert fail
"""

import uuid
from typing import Dict, List, Optional

import pytest

from app.repositories.topics import CourseRecord, ReferenceStoreProtocol, TopicRecord

__all__ = ["FakeReferenceStore", "store"]


class FakeReferenceStore(ReferenceStoreProtocol):
    def __init__(self) -> None:
        self.courses: Dict[str, CourseRecord] = {}
        self.topics: Dict[str, TopicRecord] = {}
        self.video_paths: Dict[str, List[str]] = {}  # oldest first
        self.video_records: List[dict] = []
        self.fail_topic_insert = False
        self.fail_video_insert = False

    # ── Seeding ──────────────────────────────────────────────
    def add_course(self, course_id: Optional[str] = None) -> str:
        cid = course_id or str(uuid.uuid4())
        self.courses[cid] = CourseRecord(id=cid, is_published=True)
        return cid

    def add_topic(
        self,
        course_id: str,
        *,
        video_url: Optional[str] = None,
        title: str = "Intro",
        topic_id: Optional[str] = None,
    ) -> str:
        tid = topic_id or str(uuid.uuid4())
        order = sum(1 for t in self.topics.values() if t.course_id == course_id) + 1
        self.topics[tid] = TopicRecord(id=tid, course_id=course_id, title=title, video_url=video_url, order_index=order)
        return tid

    def add_video_path(self, topic_id: str, path: str) -> None:
        self.video_paths.setdefault(topic_id, []).append(path)

    # ── Protocol ─────────────────────────────────────────────
    async def get_topic(self, topic_id):
        return self.topics.get(topic_id)

    async def get_course(self, course_id):
        return self.courses.get(course_id)

    async def get_video_path(self, topic_id):
        for path in reversed(self.video_paths.get(topic_id, [])):
            if path and path.strip():
                return path
        return None

    async def count_topics(self, course_id):
        return sum(1 for t in self.topics.values() if t.course_id == course_id)

    async def create_topic(self, *, course_id, title, video_url, order_index):
        if self.fail_topic_insert:
            raise RuntimeError("insert into topics failed")
        tid = str(uuid.uuid4())
        self.topics[tid] = TopicRecord(
            id=tid, course_id=course_id, title=title, video_url=video_url, order_index=order_index
        )
        return self.topics[tid]

    async def create_video_record(self, *, topic_id, title, video_path):
        if self.fail_video_insert:
            raise RuntimeError("insert into videos failed")
        self.video_records.append({"topic_id": topic_id, "title": title, "video_path": video_path})
        self.add_video_path(topic_id, video_path)

    async def set_topic_video(self, topic_id, *, video_url, video_path, title=None):
        topic = self.topics.get(topic_id)
        if topic is None:
            return None
        updated = TopicRecord(
            id=topic.id,
            course_id=topic.course_id,
            title=topic.title,
            video_url=video_url,
            order_index=topic.order_index,
        )
        self.topics[topic_id] = updated
        self.video_paths[topic_id] = [video_path] if video_path else []
        return updated


@pytest.fixture
def store() -> FakeReferenceStore:
    return FakeReferenceStore()
