from __future__ import annotations

"""
Lesson Video API • Video Schemas
================================

Request/response models for `/video`. Wire names are camelCase (`courseId`,
`expiresIn`, `contentType`) while topic records are returned snake_case.

Required-ness of authoring fields is checked by the service, not here, so a
missing field answers 400 with a readable message instead of a 422.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, constr


class CreateVideoIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    url: Optional[str] = None
    course_id: Optional[str] = Field(None, alias="courseId")


class UpdateVideoIn(BaseModel):
    """`url: null` clears the topic's reference."""
    url: Optional[str] = None


class TopicOut(BaseModel):
    id: str
    course_id: str
    title: str
    video_url: Optional[str] = None
    order_index: int
    created_at: Optional[str] = None


class CreateVideoOut(BaseModel):
    message: str
    data: TopicOut


class SignedUrlOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    expires_in: Optional[int] = Field(None, alias="expiresIn", description="Seconds; null when not time-bounded")


class UploadUrlIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    filename: Optional[constr(strip_whitespace=True, max_length=255)] = None
    content_type: constr(strip_whitespace=True, min_length=1, max_length=128) = Field(..., alias="contentType")


class UploadUrlOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    upload_url: str = Field(..., alias="uploadUrl")
    bucket: str
    path: str
    public_url: Optional[str] = Field(None, alias="publicUrl")
    expires_in: int = Field(..., alias="expiresIn")


__all__ = [
    "CreateVideoIn",
    "UpdateVideoIn",
    "TopicOut",
    "CreateVideoOut",
    "SignedUrlOut",
    "UploadUrlIn",
    "UploadUrlOut",
]
