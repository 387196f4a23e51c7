"""Deterministic identifiers for recurring task occurrences - Tempo Lite.

An occurrence ID is ``<template_id>::<base36(start_of_day_millis)>``. The suffix
alphabet never contains ``:``, so splitting on the last separator recovers the
template ID even when the template ID itself contains ``::``.
"""

import logging
import re
import string
from typing import Any, Optional

from .lite_calendar_context import DateLike, LiteCalendarContext
from .lite_models import LiteInstanceRef

logger = logging.getLogger(__name__)

INSTANCE_ID_SEPARATOR = "::"

_BASE36_DIGITS = string.digits + string.ascii_lowercase
_BASE36_PATTERN = re.compile(r"-?[0-9a-z]+")

_DEFAULT_CONTEXT = LiteCalendarContext()


def to_base36(value: int) -> str:
    """Render an integer in lowercase base 36."""
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    value = abs(value)
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return sign + "".join(reversed(digits))


def make_instance_id(
    template_id: str,
    value: DateLike,
    context: Optional[LiteCalendarContext] = None,
) -> str:
    """Build the occurrence ID for a template on a given day.

    Args:
        template_id: ID of the recurring template
        value: Occurrence day (date, datetime or epoch milliseconds)
        context: Calendar context for start-of-day normalization

    Returns:
        Stable occurrence identifier

    Raises:
        ValueError: If template_id is empty
    """
    if not template_id:
        raise ValueError("template_id must be a non-empty string")
    ctx = context or _DEFAULT_CONTEXT
    millis = ctx.start_of_day_millis(value)
    return f"{template_id}{INSTANCE_ID_SEPARATOR}{to_base36(millis)}"


def parse_instance_id(instance_id: Any) -> Optional[LiteInstanceRef]:
    """Recover template ID and start-of-day timestamp from an occurrence ID.

    Returns None for anything that is not a well-formed occurrence ID.
    """
    if not isinstance(instance_id, str):
        return None

    template_id, separator, encoded = instance_id.rpartition(INSTANCE_ID_SEPARATOR)
    if not separator or not template_id or not _BASE36_PATTERN.fullmatch(encoded):
        logger.debug("Not an occurrence ID: %r", instance_id)
        return None

    return LiteInstanceRef(template_id=template_id, date_millis=int(encoded, 36))


def is_instance_of(
    task_id: str,
    template_id: str,
    value: DateLike,
    context: Optional[LiteCalendarContext] = None,
) -> bool:
    """Check whether task_id is the occurrence ID of template_id on the given day."""
    if not template_id:
        return False
    return task_id == make_instance_id(template_id, value, context)
