"""Utility helpers for the Lesson Video API.

Submodules:
- aws: S3-compatible storage client (presigned GET/PUT, HEAD)
"""

__all__: list[str] = []
