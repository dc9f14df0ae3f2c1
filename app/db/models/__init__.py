"""
Lesson Video API • ORM models
=============================

Importing this package registers every table on `Base.metadata`.
"""

from app.db.base_class import Base

from .course import Course
from .topic import Topic
from .video import Video

__all__ = ["Base", "Course", "Topic", "Video"]
