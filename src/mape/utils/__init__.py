"""Shared helper utilities."""

from .ids import new_plan_id, slugify

__all__ = ["new_plan_id", "slugify"]
