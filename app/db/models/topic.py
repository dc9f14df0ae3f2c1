from __future__ import annotations

"""
🎓 Lesson Video API • Topic (the lesson leaf)
=============================================

A topic belongs to one course and optionally carries a **legacy** video
reference in `video_url`: an absolute URL (public or signed storage URL, or
any external host) or a bucket-relative path.

Design highlights
-----------------
• `order_index` is 1-based within the course (`count + 1` at creation).
• `video_url` is the fallback source; a `Video` row, when present, wins.
"""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from app.db.base_class import Base, CreatedAtMixin, UUIDPKMixin


class Topic(UUIDPKMixin, CreatedAtMixin, Base):
    __tablename__ = "topics"

    course_id = Column(Uuid(as_uuid=True), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    video_url = Column(Text, nullable=True, doc="Legacy locator: absolute URL or bucket-relative path.")
    order_index = Column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("order_index >= 1", name="order_index_positive"),
        Index("ix_topics_course_order", "course_id", "order_index"),
    )

    course = relationship("Course", back_populates="topics")
    videos = relationship(
        "Video",
        back_populates="topic",
        passive_deletes=True,
        cascade="all, delete-orphan",
    )
