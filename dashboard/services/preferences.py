"""Persisted user preferences (color theme)."""

import json
from pathlib import Path

import structlog

logger = structlog.get_logger()

THEMES = ("light", "dark")
DEFAULT_THEME = "light"


class PreferenceStore:
    """Theme preference kept in a small JSON file, read at startup and written on toggle."""

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._theme = DEFAULT_THEME

    @property
    def theme(self) -> str:
        return self._theme

    def load(self) -> str:
        if not self._path.exists():
            return self._theme
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.warning("preferences_unreadable", path=str(self._path))
            return self._theme
        theme = data.get("theme") if isinstance(data, dict) else None
        if theme in THEMES:
            self._theme = theme
        return self._theme

    def set_theme(self, theme: str) -> str:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme: {theme}")
        self._theme = theme
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps({"theme": theme}), encoding="utf-8")
        logger.info("theme_changed", theme=theme)
        return theme

    def toggle(self) -> str:
        return self.set_theme("dark" if self._theme == "light" else "light")
