"""
Application configuration.

``ConfigLoader`` reads ``config.json`` (next to this module, or in the
working directory) and overlays it on the built-in defaults below, so a
partial file only needs the keys it changes.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULTS: dict = {
    'window_size': [1280, 800],
    'fps': 60,
    'log_level': 'INFO',
    'log_file': None,
    'skills': [
        'C#',
        'Python',
        'SQL',
        'HTML/CSS',
        'JavaScript',
        'WordPress',
        'Vercel',
        'Git',
        'DB Design',
    ],
    'graph': {
        'edge_threshold': 150.0,
        'edge_base_alpha': 0.3,
        'edge_color': [80, 0, 0],
        'max_speed': 0.5,
        'text_color': '#1e293b',
        'font_size': 14,
        'font_family': 'Inter',
        'label_offset': 4.0,
        'include_self_pairs': False,
    },
    'page': {
        'background': '#f8fafc',
        'heading_color': '#0f172a',
        'parallax_range': 20.0,
        'scroll_step': 60,
        'sections': [
            {'name': 'hero', 'title': 'Hello, I build things for the web', 'height': 1.0},
            {'name': 'skills', 'title': 'Skills', 'height': 0.9},
            {'name': 'roadmap', 'title': 'Roadmap', 'height': 0.8},
            {'name': 'projects', 'title': 'Projects', 'height': 0.8},
            {'name': 'experience', 'title': 'Experience', 'height': 0.7},
            {'name': 'contact', 'title': 'Contact', 'height': 0.6},
        ],
        'roadmap': [
            'Learn the fundamentals',
            'First freelance websites',
            'Backend and databases',
            'Full-stack products',
        ],
        'projects': [
            'Portfolio site',
            'Booking system',
            'Inventory dashboard',
        ],
    },
}

_CONFIG_FILENAME = 'config.json'


def _merge(base: dict, override: dict) -> dict:
    """Recursively overlay ``override`` on a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def find_config_path(filename: str = _CONFIG_FILENAME) -> Optional[Path]:
    """Return the first existing config file, or ``None``."""
    candidates = [Path(__file__).resolve().parent / filename, Path.cwd() / filename]
    for path in candidates:
        if path.exists():
            return path
    return None


class ConfigLoader:
    """Dictionary-style access to the merged configuration."""

    def __init__(self, path: Optional[Path] = None):
        self.path: Optional[Path] = Path(path) if path is not None else find_config_path()
        self._loader: dict = _merge(DEFAULTS, self._read(self.path))

    @staticmethod
    def _read(path: Optional[Path]) -> dict:
        if path is None:
            return {}
        try:
            with Path(path).open('r', encoding='utf-8') as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            logger.warning("Could not read %s (%s); using defaults", path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("%s does not contain a JSON object; using defaults", path)
            return {}
        return data

    def __getitem__(self, key: str) -> Any:
        return self._loader[key]

    def __contains__(self, key: str) -> bool:
        return key in self._loader

    def get(self, key: str, default: Any = None) -> Any:
        return self._loader.get(key, default)
