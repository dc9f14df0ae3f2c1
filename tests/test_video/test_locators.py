# tests/test_video/test_locators.py

import pytest

from app.services.locators import (
    AbsoluteURL,
    StoragePath,
    classify_locator,
    is_http_url,
    parse_storage_url,
)

ORIGIN = "https://proj.supabase.co"


# ─────────────────────────────────────────────────────────────
# Storage URLs
# ─────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "value",
    [
        f"{ORIGIN}/storage/v1/object/sign/videos/lesson-videos/a.mp4?token=eyJhbGciOi",
        f"{ORIGIN}/storage/v1/object/authenticated/videos/lesson-videos/a.mp4",
        f"{ORIGIN}/storage/v1/s3/videos/lesson-videos/a.mp4?X-Amz-Signature=abc&X-Amz-Expires=60",
        "lesson-videos/a.mp4",
        "/lesson-videos/a.mp4",
        "  lesson-videos/a.mp4  ",
    ],
)
def test_every_form_of_the_same_object_yields_one_storage_path(value):
    assert classify_locator(value, "videos") == StoragePath(bucket="videos", path="lesson-videos/a.mp4")


def test_public_object_url_is_fetched_as_is():
    url = f"{ORIGIN}/storage/v1/object/public/videos/lesson-videos/a.mp4"
    assert classify_locator(url, "videos") == AbsoluteURL(url)


def test_signed_url_in_other_bucket_keeps_its_bucket():
    url = f"{ORIGIN}/storage/v1/object/sign/archive/2023/intro.mp4?token=t"
    assert classify_locator(url, "videos") == StoragePath(bucket="archive", path="2023/intro.mp4")


def test_percent_encoded_path_is_decoded():
    url = f"{ORIGIN}/storage/v1/s3/videos/lesson-videos/intro%20lesson.mp4?X-Amz-Signature=x"
    ref = parse_storage_url(url)
    assert ref is not None
    assert ref.path == "lesson-videos/intro lesson.mp4"
    assert ref.access == "s3"
    assert ref.needs_signing


@pytest.mark.parametrize(
    "url",
    [
        "https://cdn.example.com/videos/intro.mp4",
        "http://media.example.org/stream?id=42",
        "https://www.youtube.com/watch?v=abc",
    ],
)
def test_external_urls_pass_through(url):
    assert classify_locator(url, "videos") == AbsoluteURL(url)


@pytest.mark.parametrize("value", [None, "", "   ", "/"])
def test_blank_values_are_no_locator(value):
    assert classify_locator(value, "videos") is None


def test_parse_storage_url_rejects_non_storage_values():
    assert parse_storage_url("https://cdn.example.com/storage/v2/s3/videos/a.mp4") is None
    assert parse_storage_url("lesson-videos/a.mp4") is None
    assert parse_storage_url(f"{ORIGIN}/storage/v1/object/public/videos/") is None
    assert parse_storage_url(None) is None


def test_is_http_url():
    assert is_http_url("https://a.example/x")
    assert is_http_url("HTTP://a.example")
    assert not is_http_url("ftp://a.example/x")
    assert not is_http_url("videos/a.mp4")
    assert not is_http_url("https://")


def test_storage_path_str():
    assert str(StoragePath(bucket="videos", path="lesson-videos/a.mp4")) == "videos/lesson-videos/a.mp4"
