"""
Utility functions and helpers.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional


logger = logging.getLogger(__name__)

ENTITY_PREFIXES = {
    "project": "P",
    "epic": "E",
    "issue": "I",
    "sub-issue": "I",
}


def format_project_number(number: int) -> str:
    return f"P-{number}"


def format_epic_number(number: int) -> str:
    return f"E-{number}"


def format_issue_number(number: int) -> str:
    return f"I-{number}"


def format_entity_number(entity_type: str, number: int) -> str:
    """
    Format an entity number with its type prefix.

    Args:
        entity_type: 'project', 'epic', 'issue' or 'sub-issue'
        number: Entity number from the database

    Returns:
        Formatted string (e.g., "E-3")
    """
    prefix = ENTITY_PREFIXES.get(entity_type, "I")
    return f"{prefix}-{number}"


def format_entity_title(entity_type: str, number: int, name: str) -> str:
    """
    Format an entity with number and title.

    Args:
        entity_type: 'project', 'epic' or 'issue'
        number: Entity number from the database
        name: Entity name or title

    Returns:
        Formatted string (e.g., "I-123: Fix login bug")
    """
    return f"{format_entity_number(entity_type, number)}: {name}"


def format_file_size(size_bytes: int) -> str:
    """
    Format a file size in human-readable form.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted string (e.g., "1.5 MB")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1024 ** 2:
        return f"{size_bytes / 1024:.1f} KB"
    if size_bytes < 1024 ** 3:
        return f"{size_bytes / 1024 ** 2:.1f} MB"
    return f"{size_bytes / 1024 ** 3:.1f} GB"


def format_date(value: Optional[str]) -> str:
    """
    Format an ISO date or timestamp for display.

    Args:
        value: ISO 8601 string (or None)

    Returns:
        Formatted date (e.g., "Oct 19, 2026"), the raw value if it cannot
        be parsed, or an empty string for None
    """
    if not value:
        return ""

    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value

    return f"{parsed.strftime('%b')} {parsed.day}, {parsed.year}"


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    enable_color: bool = True,
) -> None:
    """
    Set up logging configuration.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Path to log file (optional)
        enable_color: Enable colored console output
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    # Clear existing handlers
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, log_level.upper()))

    if enable_color:
        # Rich handles colored output
        console_format = "%(message)s"
    else:
        console_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    console_handler.setFormatter(logging.Formatter(console_format))
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)  # Always DEBUG for file
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        root_logger.addHandler(file_handler)


def load_config(config_path: Path) -> Dict[str, Any]:
    """
    Load configuration from JSON file.

    Args:
        config_path: Path to config file

    Returns:
        Configuration dictionary with defaults
    """
    defaults = {
        "log_directory": "logs/",
        "log_level": "INFO",
        "enable_color": True,
        "schema_path": None,
        "expand_all": False,
        "show_sub_issues": True,
    }

    if not config_path.exists():
        return defaults

    try:
        with open(config_path, 'r') as f:
            user_config = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Ignoring unreadable config file '{config_path}': {e}")
        return defaults

    if not isinstance(user_config, dict):
        logger.warning(f"Ignoring config file '{config_path}': expected a JSON object")
        return defaults

    defaults.update(user_config)
    return defaults
