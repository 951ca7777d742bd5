"""
mirrorpinch: Defaults (Presets, widget registry, hand-tracking settings)

All tunables live here so nothing is scattered across modules.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

from mirrorpinch.core.types import Point, Size, clamp


HANDTRACKING_APP_ID = "handtracking"
PREVIEW_APP_ID = "handtracking_preview"

PINCH_SENSITIVITY_RANGE: Tuple[float, float] = (0.05, 0.5)


@dataclass(frozen=True)
class HandTrackingSettings:
    """
    User-facing options of the hand channel.

    sensitivity is reserved for cursor gain and is accepted but not applied.
    smoothing feeds the cursor filter when the preset enables one.
    """
    enabled: bool = False
    show_preview: bool = False
    sensitivity: float = 1.0
    smoothing: float = 0.8
    pinch_sensitivity: float = 0.2

    @classmethod
    def from_dict(cls, raw: Optional[Mapping[str, Any]]) -> "HandTrackingSettings":
        raw = raw or {}
        base = cls()

        def number(key: str, default: float) -> float:
            v = raw.get(key, default)
            if isinstance(v, bool) or not isinstance(v, (int, float)):
                print(f"[Settings] ignoring non-numeric {key}={v!r}, using {default}")
                return default
            return float(v)

        pinch = number("pinchSensitivity", base.pinch_sensitivity)
        lo, hi = PINCH_SENSITIVITY_RANGE
        if not lo <= pinch <= hi:
            clamped = clamp(pinch, lo, hi)
            print(f"[Settings] pinchSensitivity={pinch} out of range, using {clamped}")
            pinch = clamped

        return cls(
            enabled=bool(raw.get("enabled", base.enabled)),
            show_preview=bool(raw.get("showPreview", base.show_preview)),
            sensitivity=number("sensitivity", base.sensitivity),
            smoothing=clamp(number("smoothing", base.smoothing), 0.0, 1.0),
            pinch_sensitivity=pinch,
        )

    def to_dict(self) -> dict:
        return {
            "enabled": self.enabled,
            "showPreview": self.show_preview,
            "sensitivity": self.sensitivity,
            "smoothing": self.smoothing,
            "pinchSensitivity": self.pinch_sensitivity,
        }


# ------------------------------------------------------------
# Engine tuning
# ------------------------------------------------------------

@dataclass(frozen=True)
class PinchCalibration:
    # normalized = (pinch_px - offset_px) / (scale_ref * scale_multiplier)
    offset_px: float = 10.0
    scale_multiplier: float = 4.5


@dataclass(frozen=True)
class CursorFilter:
    enabled: bool = False
    min_cutoff_hz: float = 2.0
    beta: float = 0.06
    d_cutoff_hz: float = 1.0


class PresetName(str, Enum):
    DEFAULT = "Default"
    PRECISION = "Precision"
    CHILL = "Chill"


@dataclass(frozen=True)
class Preset:
    name: PresetName
    calibration: PinchCalibration = PinchCalibration()
    cursor_filter: CursorFilter = CursorFilter()


DEFAULT_PRESET = Preset(name=PresetName.DEFAULT)

PRECISION_PRESET = Preset(
    name=PresetName.PRECISION,
    calibration=PinchCalibration(offset_px=8.0, scale_multiplier=4.5),
    cursor_filter=CursorFilter(enabled=True, min_cutoff_hz=1.5, beta=0.04, d_cutoff_hz=1.0),
)

CHILL_PRESET = Preset(
    name=PresetName.CHILL,
    calibration=PinchCalibration(offset_px=10.0, scale_multiplier=5.0),
    cursor_filter=CursorFilter(enabled=True, min_cutoff_hz=2.5, beta=0.08, d_cutoff_hz=1.0),
)

PRESETS = {
    PresetName.DEFAULT: DEFAULT_PRESET,
    PresetName.PRECISION: PRECISION_PRESET,
    PresetName.CHILL: CHILL_PRESET,
}


# ------------------------------------------------------------
# Widgets
# ------------------------------------------------------------

@dataclass(frozen=True)
class WidgetSpec:
    id: str
    name: str
    default_position: Point
    default_size: Size
    z_order: int = 0
    background: bool = False   # runs as a service, never drawn


DEFAULT_WIDGET_SIZE = Size(200, 150)

WIDGETS: Tuple[WidgetSpec, ...] = (
    WidgetSpec("clock", "Clock", Point(50, 50), Size(300, 120)),
    WidgetSpec("date", "Date", Point(50, 200), Size(250, 80)),
    WidgetSpec("weather", "Weather", Point(400, 50), Size(320, 200)),
    WidgetSpec("news", "News", Point(50, 400), Size(400, 250)),
    WidgetSpec("spotify", "Now Playing", Point(800, 400), Size(350, 150)),
    WidgetSpec(PREVIEW_APP_ID, "Hand Tracking Preview", Point(16, 16), Size(256, 192), z_order=40),
    WidgetSpec(HANDTRACKING_APP_ID, "Hand Tracking", Point(800, 50), Size(350, 300), background=True),
)

WIDGETS_BY_ID = {w.id: w for w in WIDGETS}

# per-app settings defaults, overlaid by whatever the store holds
APP_DEFAULT_SETTINGS = {
    "clock": {"format24h": False, "showSeconds": True, "fontSize": "large"},
    "date": {"format": "long", "showYear": True},
    "weather": {"location": "", "units": "fahrenheit", "showDetails": True},
    "news": {"source": "general", "maxItems": 5, "refreshInterval": 300000},
    "spotify": {},
    HANDTRACKING_APP_ID: HandTrackingSettings().to_dict(),
}

DISPLAY_SIZE = Size(1280, 720)
