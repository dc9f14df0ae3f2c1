# tests/test_repositories/test_topics_repository.py

"""
SqlReferenceStore against an in-memory SQLite database (aiosqlite).
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.db.models import Base, Course, Topic, Video
from app.repositories.topics import SqlReferenceStore
from app.services import video_authoring
from app.services.locators import StoragePath
from app.services.video_resolver import VideoReferenceResolver

pytestmark = pytest.mark.anyio

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
async def db_session():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    maker = async_sessionmaker(engine, expire_on_commit=False)
    async with maker() as session:
        yield session
    await engine.dispose()


@pytest.fixture
async def course(db_session):
    c = Course(title="Physics 101", is_published=True, lab_id="lab-7")
    db_session.add(c)
    await db_session.commit()
    return c


async def _topic(db_session, course, *, video_url=None, order_index=1) -> Topic:
    t = Topic(course_id=course.id, title=f"Topic {order_index}", video_url=video_url, order_index=order_index)
    db_session.add(t)
    await db_session.commit()
    return t


async def test_get_topic_and_course(db_session, course):
    topic = await _topic(db_session, course, video_url="https://cdn.example.com/a.mp4")
    store = SqlReferenceStore(db_session)

    record = await store.get_topic(str(topic.id))
    assert record.id == str(topic.id)
    assert record.course_id == str(course.id)
    assert record.video_url == "https://cdn.example.com/a.mp4"

    c = await store.get_course(record.course_id)
    assert c.id == str(course.id)
    assert c.is_published is True
    assert c.lab_id == "lab-7"


@pytest.mark.parametrize("bad", ["", "not-a-uuid", "123"])
async def test_non_uuid_ids_do_not_exist(db_session, bad):
    store = SqlReferenceStore(db_session)
    assert await store.get_topic(bad) is None
    assert await store.get_course(bad) is None
    assert await store.get_video_path(bad) is None
    assert await store.count_topics(bad) == 0
    assert await store.set_topic_video(bad, video_url=None, video_path=None) is None


async def test_unknown_ids_do_not_exist(db_session):
    store = SqlReferenceStore(db_session)
    assert await store.get_topic(str(uuid.uuid4())) is None
    assert await store.get_course(str(uuid.uuid4())) is None


async def test_newest_non_empty_video_path_wins(db_session, course):
    topic = await _topic(db_session, course)
    db_session.add_all(
        [
            Video(topic_id=topic.id, video_path="lesson-videos/old.mp4", created_at=T0),
            Video(topic_id=topic.id, video_path="lesson-videos/new.mp4", created_at=T0 + timedelta(days=1)),
            Video(topic_id=topic.id, video_path="   ", created_at=T0 + timedelta(days=2)),
            Video(topic_id=topic.id, video_path=None, created_at=T0 + timedelta(days=3)),
        ]
    )
    await db_session.commit()

    assert await SqlReferenceStore(db_session).get_video_path(str(topic.id)) == "lesson-videos/new.mp4"


async def test_create_topic_and_count(db_session, course):
    store = SqlReferenceStore(db_session)
    assert await store.count_topics(str(course.id)) == 0

    record = await store.create_topic(
        course_id=str(course.id), title="Intro", video_url="lesson-videos/a.mp4", order_index=1
    )
    assert record.order_index == 1
    assert record.created_at is not None
    assert record.to_dict()["created_at"] == record.created_at.isoformat()
    assert await store.count_topics(str(course.id)) == 1

    await store.create_video_record(topic_id=record.id, title="Intro", video_path="lesson-videos/a.mp4")
    assert await store.get_video_path(record.id) == "lesson-videos/a.mp4"


async def test_set_topic_video_replaces_records(db_session, course):
    topic = await _topic(db_session, course, video_url="https://cdn.example.com/old.mp4")
    db_session.add_all([Video(topic_id=topic.id, video_path="a.mp4"), Video(topic_id=topic.id, video_path="b.mp4")])
    await db_session.commit()
    store = SqlReferenceStore(db_session)

    record = await store.set_topic_video(str(topic.id), video_url="lesson-videos/c.mp4", video_path="lesson-videos/c.mp4")

    assert record.video_url == "lesson-videos/c.mp4"
    paths = (await db_session.execute(select(Video.video_path).where(Video.topic_id == topic.id))).scalars().all()
    assert paths == ["lesson-videos/c.mp4"]


async def test_set_topic_video_can_clear(db_session, course):
    topic = await _topic(db_session, course, video_url="https://cdn.example.com/old.mp4")
    db_session.add(Video(topic_id=topic.id, video_path="a.mp4"))
    await db_session.commit()
    store = SqlReferenceStore(db_session)

    record = await store.set_topic_video(str(topic.id), video_url=None, video_path=None)

    assert record.video_url is None
    assert await store.get_video_path(str(topic.id)) is None


# ─────────────────────────────────────────────────────────────
# Authoring → resolution, end to end on SQL
# ─────────────────────────────────────────────────────────────

async def test_authored_video_resolves_to_its_record(db_session, course):
    store = SqlReferenceStore(db_session)
    await _topic(db_session, course, order_index=1)

    url = "https://proj.supabase.co/storage/v1/object/sign/videos/lesson-videos/x.mp4?token=t"
    topic = await video_authoring.create_video(store, title="Second", url=url, course_id=str(course.id))
    assert topic.order_index == 2

    source = await VideoReferenceResolver(store, "videos").resolve(topic.id)
    assert source.origin_kind == "videoRecord"
    assert source.locator == StoragePath(bucket="videos", path="lesson-videos/x.mp4")
