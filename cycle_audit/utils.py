"""
Common helpers for the cycle audit engine: logging, JSON output, formatting.
"""

import json
import logging
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional, Union


# Logging utilities
def get_logger(
    name: str,
    level: Optional[Union[str, int]] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> Union[logging.Logger, logging.LoggerAdapter]:
    """
    Get a module logger, optionally bound to extra context.

    Handlers are installed once on the root logger by logging_config.setup();
    module loggers only carry a name, an optional level and context.

    Args:
        name: Logger name (typically __name__)
        level: Logging level, left unset to inherit from the root
        extra: Context fields prefixed to every message, e.g. {"cycle": 3}

    Returns:
        Logger, or LoggerAdapter when extra is given
    """
    logger = logging.getLogger(name)

    if level is not None and logger.level == logging.NOTSET:
        logger.setLevel(level)

    if extra:
        return ContextAdapter(logger, extra)

    return logger


class ContextAdapter(logging.LoggerAdapter):
    """Prefix messages with key=value context, e.g. "[cycle=3] ..."."""

    def process(self, msg, kwargs):
        context = " ".join(f"{k}={v}" for k, v in self.extra.items())
        return f"[{context}] {msg}", kwargs


# JSON utilities
def safe_json_dump(data: Any, **kwargs) -> str:
    """
    Serialize data to JSON with sensible defaults.

    Args:
        data: Data to serialize
        **kwargs: Additional arguments to json.dumps

    Returns:
        JSON string
    """
    defaults = {"ensure_ascii": False, "indent": 2, "default": _json_default_handler}
    defaults.update(kwargs)
    return json.dumps(data, **defaults)


def _json_default_handler(obj: Any) -> Any:
    """Default JSON serialization handler for custom types."""
    if isinstance(obj, datetime):
        return obj.isoformat()
    elif isinstance(obj, Decimal):
        return str(obj)
    elif hasattr(obj, "to_dict"):
        return obj.to_dict()
    elif hasattr(obj, "__dict__"):
        return obj.__dict__
    else:
        return str(obj)


# Path utilities
def ensure_path_exists(path: Union[str, Path], is_file: bool = False) -> Path:
    """
    Ensure a path exists, creating directories if necessary.

    Args:
        path: Path to ensure exists
        is_file: If True, create parent directories for file path

    Returns:
        Path object
    """
    path_obj = Path(path)

    if is_file:
        path_obj.parent.mkdir(parents=True, exist_ok=True)
    else:
        path_obj.mkdir(parents=True, exist_ok=True)

    return path_obj


# Formatting utilities
def format_amount(value: Union[Decimal, float], places: int = 6) -> str:
    """Fixed-point rendering, e.g. format_amount(Decimal("0.0048")) -> '0.004800'."""
    return f"{float(value):.{places}f}"


def short_id(identifier: str, width: int = 10) -> str:
    """Shorten a token address for log output: 0xc02aaa39...6cc2"""
    if len(identifier) <= width + 4:
        return identifier
    return f"{identifier[:width]}...{identifier[-4:]}"
