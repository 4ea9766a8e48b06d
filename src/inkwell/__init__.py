"""Inkwell — blog backend.

Users, posts, comments, categories, tags and likes behind a FastAPI
API, with JWT access/refresh authentication and role-based access control.
"""

__version__ = "0.1.0"
