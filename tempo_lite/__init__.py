"""tempo_lite - recurrence engine for the Tempo task and calendar app.

Expands recurring task templates into virtual occurrences for a date window and
reconciles them with persisted rows (completed or edited occurrences).
"""

__version__ = "0.1.0"

import logging
import os
import sys
from typing import Optional

from .lite_calendar_context import LiteCalendarContext, TimeProvider, now_utc
from .lite_instance_identity import (
    INSTANCE_ID_SEPARATOR,
    is_instance_of,
    make_instance_id,
    parse_instance_id,
)
from .lite_models import (
    LiteInstanceRef,
    LiteRecurrence,
    LiteTask,
    LiteTaskKind,
    LiteTaskType,
    RecurrencePattern,
    create_deep_task,
    create_quick_task,
)
from .lite_occurrence_matcher import should_occur_on
from .lite_recurrence_expander import (
    LiteRecurrenceError,
    LiteRecurrenceExpander,
    LiteRecurrenceExpansionError,
    RecurrenceExpanderConfig,
    generate_instances,
)
from .lite_recurrence_format import create_recurrence, describe_recurrence
from .lite_recurrence_stepper import fast_forward, next_occurrence
from .lite_task_merger import LiteTaskMerger

__all__ = [
    "INSTANCE_ID_SEPARATOR",
    "LiteCalendarContext",
    "LiteInstanceRef",
    "LiteRecurrence",
    "LiteRecurrenceError",
    "LiteRecurrenceExpander",
    "LiteRecurrenceExpansionError",
    "LiteTask",
    "LiteTaskKind",
    "LiteTaskMerger",
    "LiteTaskType",
    "RecurrenceExpanderConfig",
    "RecurrencePattern",
    "TimeProvider",
    "create_deep_task",
    "create_expander_from_env",
    "create_quick_task",
    "create_recurrence",
    "describe_recurrence",
    "fast_forward",
    "generate_instances",
    "is_instance_of",
    "make_instance_id",
    "next_occurrence",
    "now_utc",
    "parse_instance_id",
    "should_occur_on",
]


def _init_logging(level_name: Optional[str]) -> None:
    """Initialize root logging to stream to console.

    Honors the TEMPO_DEBUG environment variable (truthy values: "1", "true",
    "yes", "on"), which forces DEBUG verbosity so expansion traces can be
    inspected without changing code.
    """
    from colorlog import ColoredFormatter

    debug_env = os.environ.get("TEMPO_DEBUG", "")
    if debug_env.strip().lower() in ("1", "true", "yes", "on"):
        level_name = "DEBUG"

    root = logging.getLogger()
    # Only configure basic handler if no handlers are present to avoid duplicate output.
    if not root.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        # HH:MM:SS  LEVEL   logger.name: message
        fmt = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s %(name)s: %(message)s"
        log_colors = {
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "bold_red",
        }
        handler.setFormatter(ColoredFormatter(fmt, datefmt="%H:%M:%S", log_colors=log_colors))
        root.addHandler(handler)

    level = logging.INFO
    if isinstance(level_name, str):
        level = getattr(logging, level_name.upper(), logging.INFO)
    root.setLevel(level)
    logging.getLogger(__name__).debug(
        "Logging initialized at level %s", logging.getLevelName(level)
    )


def create_expander_from_env(env_file_path: Optional[str] = None) -> LiteRecurrenceExpander:
    """Build an expander configured from the environment and an optional .env file.

    Args:
        env_file_path: Path to a .env file (defaults to .env in the current directory)

    Returns:
        Configured LiteRecurrenceExpander
    """
    from pathlib import Path

    from .config_manager import ConfigManager
    from .lite_logging import configure_lite_logging

    cfg = ConfigManager(Path(env_file_path) if env_file_path else None).load_full_config()
    _init_logging(cfg.get("log_level"))
    configure_lite_logging(debug_mode=False)
    return LiteRecurrenceExpander(cfg)
