"""Tessellation and color settings shared by the primitive builders.

The engine tessellates every shape at a fixed resolution.  Those
resolutions, together with the default per-shape colors, live in a
``MeshSettings`` value.  ``DEFAULT_SETTINGS`` is used whenever a builder
is called without an explicit ``settings`` argument; alternative values
can be loaded from a YAML document such as::

    sphere_slices: 24
    torus_minor_segments: 16
    palette:
      torus: [0.2, 0.8, 0.2, 0.5]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple, Union

from surfacemesh.errors import SettingsError

logger = logging.getLogger(__name__)

Color = Tuple[float, float, float, float]

SHAPE_KINDS = ("plane", "sphere", "cylinder", "cone", "torus", "elliptical_torus")

DEFAULT_PALETTE: Dict[str, Color] = {
    "plane": (1.0, 0.0, 0.0, 0.5),
    "sphere": (1.0, 1.0, 0.0, 0.5),
    "cylinder": (0.0, 1.0, 0.0, 0.5),
    "cone": (0.0, 1.0, 1.0, 0.5),
    "torus": (1.0, 0.0, 1.0, 0.5),
    "elliptical_torus": (1.0, 0.5, 0.0, 0.5),
}

# minimum usable value per segment count
_SEGMENT_MINIMUMS = {
    "sphere_slices": 3,
    "sphere_stacks": 2,
    "radial_segments": 3,
    "height_segments": 1,
    "torus_major_segments": 3,
    "torus_minor_segments": 3,
}


def _check_color(kind: str, value: Any) -> Color:
    if not isinstance(value, (list, tuple)) or len(value) != 4:
        raise SettingsError(f"palette entry for {kind!r} must be four RGBA values")
    rgba = []
    for channel in value:
        if isinstance(channel, bool) or not isinstance(channel, (int, float)):
            raise SettingsError(f"palette entry for {kind!r} has non-numeric channel {channel!r}")
        if not 0.0 <= channel <= 1.0:
            raise SettingsError(f"palette entry for {kind!r} has channel {channel!r} outside [0, 1]")
        rgba.append(float(channel))
    return (rgba[0], rgba[1], rgba[2], rgba[3])


@dataclass(frozen=True)
class MeshSettings:
    """Fixed tessellation resolution and default colors."""

    sphere_slices: int = 32
    sphere_stacks: int = 16
    radial_segments: int = 32
    height_segments: int = 1
    torus_major_segments: int = 48
    torus_minor_segments: int = 24
    palette: Mapping[str, Color] = field(default_factory=lambda: dict(DEFAULT_PALETTE))

    def __post_init__(self) -> None:
        for name, minimum in _SEGMENT_MINIMUMS.items():
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise SettingsError(f"{name} must be an integer, got {value!r}")
            if value < minimum:
                raise SettingsError(f"{name} must be at least {minimum}, got {value}")

        palette = self.palette if self.palette is not None else {}
        if not isinstance(palette, Mapping):
            raise SettingsError("palette must map shape kinds to RGBA colors")
        merged = dict(DEFAULT_PALETTE)
        for kind, rgba in palette.items():
            if kind not in SHAPE_KINDS:
                raise SettingsError(f"unknown shape kind in palette: {kind!r}")
            merged[kind] = _check_color(kind, rgba)
        object.__setattr__(self, "palette", MappingProxyType(merged))

    def color_for(self, kind: str) -> Color:
        return self.palette[kind]

    def replace(self, **changes: Any) -> "MeshSettings":
        """Return a validated copy with ``changes`` applied."""
        return replace(self, **changes)


DEFAULT_SETTINGS = MeshSettings()


def settings_from_dict(data: Mapping[str, Any]) -> MeshSettings:
    """Build ``MeshSettings`` from a mapping, keeping defaults for missing keys."""

    if not isinstance(data, Mapping):
        raise SettingsError("settings document must be a mapping")
    known = {f.name for f in fields(MeshSettings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise SettingsError(f"unknown settings: {', '.join(unknown)}")
    return MeshSettings(**dict(data))


def load_settings(path: Union[str, Path]) -> MeshSettings:
    """Load ``MeshSettings`` from a YAML file."""

    import yaml

    settings_path = Path(path)
    if not settings_path.exists():
        raise FileNotFoundError(f"settings file not found: {settings_path}")
    try:
        with settings_path.open("r", encoding="utf-8") as fp:
            data = yaml.safe_load(fp) or {}
    except yaml.YAMLError as exc:
        raise SettingsError(f"failed to parse {settings_path}: {exc}") from exc
    settings = settings_from_dict(data)
    logger.debug("loaded mesh settings from %s", settings_path)
    return settings


__all__ = [
    "Color",
    "SHAPE_KINDS",
    "DEFAULT_PALETTE",
    "MeshSettings",
    "DEFAULT_SETTINGS",
    "settings_from_dict",
    "load_settings",
]
