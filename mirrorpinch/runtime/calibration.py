from __future__ import annotations

import time
from dataclasses import dataclass
from typing import List, Optional

from mirrorpinch.core.config import HANDTRACKING_APP_ID, PINCH_SENSITIVITY_RANGE
from mirrorpinch.core.types import CursorState, clamp
from mirrorpinch.store.app_settings import save_app_settings
from mirrorpinch.store.settings_store import SettingsStore


@dataclass
class CalibResult:
    pinch_sensitivity: float
    open_samples: int
    pinch_samples: int


def percentile(xs, q):
    if not xs:
        return None
    xs = sorted(xs)
    k = int(round((q / 100.0) * (len(xs) - 1)))
    return xs[max(0, min(len(xs) - 1, k))]


def save_calibration(store: SettingsStore, r: CalibResult) -> None:
    save_app_settings(store, HANDTRACKING_APP_ID, {"pinchSensitivity": r.pinch_sensitivity})


class Calibrator:
    """
    Two-step wizard for the pinch threshold:
    - hold the hand open, relaxed
    - pinch thumb and index a few times
    The threshold lands halfway between the two clusters of normalized
    pinch distance.
    """
    STEP_MS = 4000

    def __init__(self) -> None:
        self.step = 0
        self.step_start: Optional[int] = None
        self.open_d: List[float] = []
        self.pinch_d: List[float] = []
        self.done = False

    def start(self, t_ms: Optional[int] = None) -> None:
        self.step = 0
        self.step_start = t_ms if t_ms is not None else int(time.time() * 1000)
        self.done = False
        self.open_d.clear()
        self.pinch_d.clear()

    def instruction(self) -> str:
        steps = [
            "Calibration 1/2: Hold your hand open and relaxed.",
            "Calibration 2/2: Pinch thumb and index together a few times.",
        ]
        return steps[self.step] if self.step < len(steps) else "Calibration complete."

    def update(self, cursor: CursorState, t_ms: int) -> None:
        if self.done:
            return
        if self.step_start is None:
            self.step_start = t_ms

        if (t_ms - self.step_start) > self.STEP_MS:
            self.step += 1
            self.step_start = t_ms
            if self.step >= 2:
                self.done = True
            return

        if not cursor.detected:
            return
        if self.step == 0:
            self.open_d.append(cursor.pinch_distance)
        else:
            self.pinch_d.append(cursor.pinch_distance)

    def finalize(self, default: float = 0.2) -> CalibResult:
        # pinched samples are noisy (the hand opens between pinches): use the tight end
        closed = percentile(self.pinch_d, 20)
        opened = percentile(self.open_d, 20)
        if closed is None or opened is None or opened <= closed:
            threshold = default
        else:
            threshold = closed + (opened - closed) / 2.0
        lo, hi = PINCH_SENSITIVITY_RANGE
        return CalibResult(
            pinch_sensitivity=clamp(threshold, lo, hi),
            open_samples=len(self.open_d),
            pinch_samples=len(self.pinch_d),
        )
