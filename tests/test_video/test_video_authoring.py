# tests/test_video/test_video_authoring.py

import pytest

from app.core.exceptions import TopicNotFoundException
from app.services.video_authoring import companion_video_path, set_topic_video


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://proj.supabase.co/storage/v1/object/public/videos/lesson-videos/a.mp4", "lesson-videos/a.mp4"),
        ("https://proj.supabase.co/storage/v1/object/sign/videos/a%20b.mp4?token=t", "a b.mp4"),
        (
            "https://proj.supabase.co/storage/v1/object/sign/archive/a.mp4?token=t",
            "https://proj.supabase.co/storage/v1/object/sign/archive/a.mp4?token=t",
        ),
        ("https://cdn.example.com/a.mp4", "https://cdn.example.com/a.mp4"),
        ("  lesson-videos/a.mp4 ", "lesson-videos/a.mp4"),
    ],
)
def test_companion_video_path(url, expected):
    assert companion_video_path(url, "videos") == expected


@pytest.mark.anyio
async def test_set_topic_video_unknown_topic(store):
    with pytest.raises(TopicNotFoundException):
        await set_topic_video(store, "missing", url="https://cdn.example.com/a.mp4")


@pytest.mark.anyio
async def test_blank_url_clears(store):
    tid = store.add_topic(store.add_course(), video_url="https://cdn.example.com/a.mp4")
    store.add_video_path(tid, "a.mp4")

    topic = await set_topic_video(store, tid, url="   ")

    assert topic.video_url is None
    assert await store.get_video_path(tid) is None
