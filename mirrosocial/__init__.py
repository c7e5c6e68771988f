"""
Backend package for MirroSocial.

This package provides a FastAPI application with storage, queue and database
abstractions behind the posts, events and messaging features, plus the
operator tooling that keeps media URLs and event themes in shape.
"""
