"""
Logging setup for the skill graph application.

Levels and the optional log file come from the ``log_level`` and
``log_file`` config keys.  Handlers installed here are tagged so a second
call replaces them without touching handlers that someone else (a test
runner, an embedding app) put on the root logger.
"""
import logging
import sys
from typing import Optional, Union

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%H:%M:%S'


def resolve_level(level: Union[int, str, None], default: int = logging.INFO) -> int:
    """Turn ``'debug'``, ``'INFO'``, ``10`` ... into a logging level."""
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        value = logging.getLevelName(level.strip().upper())
        if isinstance(value, int):
            return value
    return default


def _is_ours(handler: logging.Handler) -> bool:
    return getattr(handler, '_skill_graph', False)


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Install console (and optional file) handlers on the root logger.

    Args:
        level: Logging level, as a number or a name such as ``'debug'``.
        log_file: Optional path the log is also written to.

    Returns:
        The root logger.
    """
    level = resolve_level(level)
    root = logging.getLogger()
    root.setLevel(level)
    for handler in [h for h in root.handlers if _is_ours(h)]:
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler._skill_graph = True
        root.addHandler(handler)

    root.debug("Logging at %s%s", logging.getLevelName(level), f" to {log_file}" if log_file else "")
    return root


def setup_logging_from_config(loader) -> logging.Logger:
    """Configure logging from a :class:`config.ConfigLoader`."""
    return setup_logging(loader.get('log_level', 'INFO'), loader.get('log_file'))
