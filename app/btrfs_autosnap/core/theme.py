"""Theme management for the btrfs-auto-snapshot CLI.

Provides console colors with overrides from the ``[colors]`` table of
the configuration file.
"""

import logging
import sys
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.theme import Theme

from btrfs_autosnap.core.settings import SettingsError, load_settings

logger = logging.getLogger(__name__)


class ThemeColors(BaseModel):
    """Color configuration for the CLI.

    All colors must be valid hex codes (#RRGGBB or #RGB).
    """

    model_config = ConfigDict(extra="forbid")

    # Base colors
    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"

    # Semantic colors
    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"

    # Snapshot outcomes
    created: str = "#c1ff62"
    deleted: str = "#f5b332"
    kept: str = "#0e8ac8"

    @field_validator("*", mode="before")
    @classmethod
    def validate_hex_color(cls, v: object, info: Any) -> str:
        """Validate that all color values are valid hex codes."""
        if not isinstance(v, str):
            msg = f"{info.field_name}: color must be a string"
            raise ValueError(msg)
        color = v.strip()
        if not color.startswith("#"):
            msg = f"{info.field_name}: color must start with '#'"
            raise ValueError(msg)
        color_part = color[1:]
        if len(color_part) not in (3, 6):
            msg = f"{info.field_name}: color must be #RGB or #RRGGBB format"
            raise ValueError(msg)
        try:
            int(color_part, 16)
        except ValueError:
            msg = f"{info.field_name}: invalid hex color '{color}'"
            raise ValueError(msg) from None
        return color


def load_theme(overrides: dict[str, str] | None = None) -> ThemeColors:
    """Build theme colors from defaults and overrides.

    Args:
        overrides: Color name to hex value. If None, the ``colors`` table of
            the configuration file is used.

    Returns:
        ThemeColors instance; defaults if the overrides are invalid.
    """
    if overrides is None:
        try:
            overrides = load_settings().colors
        except SettingsError as e:
            logger.debug("Using default colors, settings unreadable: %s", e)
            overrides = {}

    try:
        return ThemeColors(**overrides)
    except ValidationError as e:
        logger.warning("Theme validation failed, using defaults: %s", e)
        print(f"Warning: Invalid color configuration: {e}", file=sys.stderr)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Convert ThemeColors to a Rich Theme.

    Args:
        colors: ThemeColors instance to convert. If None, loads theme automatically.

    Returns:
        Rich Theme instance configured with the color scheme.
    """
    if colors is None:
        colors = load_theme()

    styles: dict[str, str] = {
        # Direct color mappings
        "text": colors.text,
        "muted": colors.muted,
        "header": colors.header,
        "border": colors.border,
        "success": colors.success,
        "warning": colors.warning,
        "error": f"bold {colors.error}",
        "info": colors.info,
        "created": colors.created,
        "deleted": colors.deleted,
        "kept": colors.kept,
        # Convenience styles
        "bold_header": f"bold {colors.header}",
        "dim": colors.muted,
        "path": f"bold {colors.text}",
    }

    return Theme(styles)


# Module-level cached theme instance
_cached_theme: Theme | None = None


def get_theme() -> Theme:
    """Get the Rich theme, loading and caching it if necessary.

    Returns:
        Cached Rich Theme instance.
    """
    global _cached_theme
    if _cached_theme is None:
        _cached_theme = get_rich_theme()
    return _cached_theme


def reload_theme(overrides: dict[str, str] | None = None) -> Theme:
    """Rebuild the cached theme, e.g. once another configuration file is loaded.

    Args:
        overrides: Color name to hex value, as for load_theme.

    Returns:
        The new cached Rich Theme instance.
    """
    global _cached_theme
    _cached_theme = get_rich_theme(load_theme(overrides))
    return _cached_theme
