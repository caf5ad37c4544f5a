"""
Text helpers shared by the transformer and the post reconciler.
"""

import html
import re
from typing import Optional

import bleach

SLUG_MAX_LENGTH = 100

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(value: Optional[str]) -> str:
    """
    Build a url key: lowercase, runs of non-alphanumerics collapsed to one
    hyphen, no leading/trailing hyphens, at most 100 characters.

    >>> slugify("Hello, World!")
    'hello-world'
    """
    if not value:
        return ""

    slug = _NON_ALNUM.sub("-", value.lower()).strip("-")

    if len(slug) > SLUG_MAX_LENGTH:
        slug = slug[:SLUG_MAX_LENGTH].rstrip("-")

    return slug


def strip_tags(value: Optional[str]) -> str:
    """Remove HTML markup and return the plain text"""
    if not value:
        return ""

    # bleach escapes bare entities it leaves behind
    return html.unescape(bleach.clean(value, tags=[], strip=True)).strip()


def truncate(value: Optional[str], length: int) -> str:
    if not value:
        return ""
    return value[:length]
