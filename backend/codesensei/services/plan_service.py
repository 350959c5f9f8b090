"""
Learning plan generation helpers.

The model is asked for a JSON array of stages; these helpers pull that array
out of the reply and lay the stages out back to back on the calendar.
"""

from datetime import date, timedelta
from typing import Any, List, Optional
import json
import logging
import math
import re

from ..constants import (
    PLAN_CATEGORIES,
    DEFAULT_PLAN_CATEGORY,
    DEFAULT_PLAN_DURATION_DAYS,
    MAX_PLAN_DURATION_DAYS
)
from ..models.plan import LearningPlan


logger = logging.getLogger(__name__)

JSON_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


def extract_plan_items(content: str) -> Optional[List[Any]]:
    """
    Return the first JSON array found in ``content``.

    ``None`` means the reply could not be parsed; an empty list means there was
    nothing to parse.
    """
    match = JSON_ARRAY_RE.search(content or "")
    if not match:
        return []

    try:
        items = json.loads(match.group(0))
    except ValueError:
        logger.error("Failed to parse plan JSON: %s", content)
        return None

    if not isinstance(items, list):
        return None
    return items


def _duration(item: dict) -> int:
    value = item.get("duration_days")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_PLAN_DURATION_DAYS
    if isinstance(value, float) and not math.isfinite(value):
        return DEFAULT_PLAN_DURATION_DAYS
    if value < 1:
        return DEFAULT_PLAN_DURATION_DAYS
    return min(int(value), MAX_PLAN_DURATION_DAYS)


def build_learning_plans(user_id: int, items: List[Any], start: date) -> List[LearningPlan]:
    """Turn parsed stages into consecutive ``pending`` plans starting at ``start``."""
    plans = []
    offset = 0

    for item in items:
        if not isinstance(item, dict):
            continue

        duration = _duration(item)
        category = item.get("category")
        if category not in PLAN_CATEGORIES:
            category = DEFAULT_PLAN_CATEGORY

        description = item.get("description")
        if description is not None:
            description = str(description)

        begin = start + timedelta(days=offset)
        plans.append(LearningPlan(
            user_id=user_id,
            title=str(item.get("title") or "Untitled stage")[:200],
            description=description,
            category=category,
            status="pending",
            progress=0,
            start_date=begin,
            end_date=begin + timedelta(days=duration)
        ))
        offset += duration

    return plans
