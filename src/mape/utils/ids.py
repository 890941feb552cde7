"""Identifier helpers for freshly instantiated plans."""

from __future__ import annotations

import hashlib
import re
from datetime import datetime, timezone
from typing import Pattern
from uuid import uuid4

_NON_SLUG: Pattern[str] = re.compile(r"[^a-z0-9]+")


def slugify(value: str | None, *, fallback: str = "plan", max_length: int = 48) -> str:
    """Lowercase ``value`` into hyphen-separated tokens no longer than ``max_length``."""
    slug = _NON_SLUG.sub("-", (value or "").strip().lower()).strip("-")
    if not slug:
        slug = fallback
    if len(slug) <= max_length:
        return slug
    digest = hashlib.sha256(slug.encode("utf-8")).hexdigest()[:6]
    prefix = slug[: max(max_length - len(digest) - 1, 1)].rstrip("-")
    return f"{prefix}-{digest}"


def new_plan_id(name: str | None, *, now: datetime | None = None) -> str:
    """Build ``plan-<slug>-<yyyymmddHHMMSS>-<random>`` for a plan named ``name``.

    The random suffix keeps ids distinct when the same template is
    instantiated several times within one second.
    """
    moment = now or datetime.now(timezone.utc)
    timestamp = moment.astimezone(timezone.utc).strftime("%Y%m%d%H%M%S")
    return f"plan-{slugify(name)}-{timestamp}-{uuid4().hex[:8]}"


__all__ = ["new_plan_id", "slugify"]
