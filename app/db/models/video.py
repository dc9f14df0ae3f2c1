from __future__ import annotations

"""
🎞️ Lesson Video API • Video (media record)
===========================================

Preferred source of a topic's media. `video_path` is normally a path inside
the default bucket; rows written from a non-storage URL keep the literal URL.
When several rows exist for one topic the newest (`created_at`) wins.
"""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from app.db.base_class import Base, CreatedAtMixin, UUIDPKMixin


class Video(UUIDPKMixin, CreatedAtMixin, Base):
    __tablename__ = "videos"

    topic_id = Column(Uuid(as_uuid=True), ForeignKey("topics.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(255), nullable=True)
    video_path = Column(Text, nullable=True)
    duration = Column(Integer, nullable=True, doc="Seconds, when known.")

    __table_args__ = (
        CheckConstraint("duration IS NULL OR duration >= 0", name="duration_nonneg"),
        Index("ix_videos_topic_created", "topic_id", "created_at"),
    )

    topic = relationship("Topic", back_populates="videos")
