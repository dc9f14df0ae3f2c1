from __future__ import annotations

"""
📚 Lesson Video API • Course
============================

Owner of an ordered list of topics. Only the existence of the course matters
to video delivery; `is_published` and `lab_id` are carried for the
surrounding platform's access policy.
"""

from sqlalchemy import Boolean, Column, String, text
from sqlalchemy.orm import relationship

from app.db.base_class import Base, CreatedAtMixin, UUIDPKMixin


class Course(UUIDPKMixin, CreatedAtMixin, Base):
    __tablename__ = "courses"

    title = Column(String(255), nullable=False)
    is_published = Column(Boolean, nullable=False, server_default=text("false"), default=False)
    lab_id = Column(String(64), nullable=True, index=True, doc="Owning lab, when the course is lab-scoped.")

    topics = relationship(
        "Topic",
        back_populates="course",
        order_by="Topic.order_index",
        passive_deletes=True,
    )
