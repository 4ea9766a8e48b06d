"""Slug generation.

Learn: "Hello, World!  Again" → "hello-world-again". Blog slugs must be
unique, so BlogService retries with a random suffix on collision
(random_suffix); categories and tags treat a collision as a Conflict.
"""

import re
import secrets
import string

FALLBACK_SLUG = "post"
_ALPHABET = string.ascii_lowercase + string.digits

_STRIP = re.compile(r"[^\w\s-]", re.ASCII)
_COLLAPSE = re.compile(r"[\s_-]+")


def slugify(text: str, fallback: str = FALLBACK_SLUG) -> str:
    slug = _STRIP.sub("", text.lower().strip())
    slug = _COLLAPSE.sub("-", slug).strip("-")
    return slug or fallback


def random_suffix(length: int = 4) -> str:
    """Random base-36 string, e.g. "k3x9"."""
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))
