"""
Central logging configuration for tempo_lite.

Keeps recurrence engine diagnostics available at DEBUG while leaving the
application's root logger at a quiet default.
"""

import logging
import os
from typing import Optional

# Modules whose level follows the debug switch
LITE_MODULES = [
    "tempo_lite",
    "tempo_lite.lite_recurrence_expander",
    "tempo_lite.lite_recurrence_stepper",
    "tempo_lite.lite_occurrence_matcher",
    "tempo_lite.lite_instance_identity",
    "tempo_lite.lite_task_merger",
    "tempo_lite.config_manager",
]


def configure_lite_logging(debug_mode: bool = False, force_debug: Optional[bool] = None) -> None:
    """
    Configure logging levels for tempo_lite.

    Args:
        debug_mode: Whether to enable debug logging for tempo_lite modules
        force_debug: Override debug mode setting (None to use env var detection)

    Environment Variables:
        TEMPO_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        TEMPO_LOG_LEVEL: Override root log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_debug = os.getenv("TEMPO_DEBUG", "").lower() in ("1", "true", "yes")
    env_log_level = os.getenv("TEMPO_LOG_LEVEL", "").upper()

    if force_debug is not None:
        final_debug = force_debug
    elif env_debug:
        final_debug = True
    else:
        final_debug = debug_mode

    root_level = logging.DEBUG if final_debug else logging.INFO
    if env_log_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        root_level = getattr(logging, env_log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    # Only add basic config if no handlers exist (preserve colorful setup from __init__.py)
    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(root_level)
        handler.setFormatter(
            logging.Formatter("[%(asctime)s] %(levelname)s - %(name)s - %(message)s")
        )
        root_logger.addHandler(handler)

    lite_level = logging.DEBUG if final_debug else logging.INFO
    for module in LITE_MODULES:
        logging.getLogger(module).setLevel(lite_level)

    if final_debug:
        root_logger.info("Debug logging enabled for tempo_lite modules.")
    else:
        root_logger.info("Production logging configuration applied.")


def reset_logging_to_debug() -> None:
    """
    Reset tempo_lite loggers to DEBUG level for troubleshooting.
    """
    logging.getLogger().setLevel(logging.DEBUG)
    for module in LITE_MODULES:
        logging.getLogger(module).setLevel(logging.DEBUG)

    logging.getLogger().info("All loggers reset to DEBUG level for troubleshooting")


def get_logging_status() -> dict[str, str]:
    """
    Get current logging configuration status.

    Returns:
        Dictionary mapping logger names to their current levels
    """
    status = {"root": logging.getLevelName(logging.getLogger().level)}
    for logger_name in ("tempo_lite", "tempo_lite.lite_recurrence_expander"):
        status[logger_name] = logging.getLevelName(logging.getLogger(logger_name).level)
    return status
