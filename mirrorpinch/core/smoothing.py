from __future__ import annotations

import math
from dataclasses import replace

from mirrorpinch.core.config import CursorFilter
from mirrorpinch.core.types import CursorState, Point


def _alpha(cutoff_hz: float, dt: float) -> float:
    # smoothing factor from cutoff frequency
    tau = 1.0 / (2.0 * math.pi * cutoff_hz)
    return 1.0 / (1.0 + tau / max(dt, 1e-6))


class LowPass:
    def __init__(self) -> None:
        self.x = 0.0
        self.initialized = False

    def reset(self) -> None:
        self.initialized = False

    def apply(self, x: float, a: float) -> float:
        if not self.initialized:
            self.x = x
            self.initialized = True
            return x
        self.x = a * x + (1.0 - a) * self.x
        return self.x


class OneEuro:
    """
    One Euro Filter (Casiez et al. 2012).
    Smooths jitter when slow, low latency when fast.
    """

    def __init__(self, min_cutoff: float = 2.0, beta: float = 0.06, d_cutoff: float = 1.0):
        self.min_cutoff = float(min_cutoff)
        self.beta = float(beta)
        self.d_cutoff = float(d_cutoff)

        self._x = LowPass()
        self._dx = LowPass()
        self._last_t: float | None = None

    def reset(self) -> None:
        self._x.reset()
        self._dx.reset()
        self._last_t = None

    def apply(self, x: float, t: float) -> float:
        if self._last_t is None:
            self._last_t = t
            self._dx.reset()
            return self._x.apply(x, 1.0)

        dt = max(1e-4, t - self._last_t)
        self._last_t = t

        prev = self._x.x if self._x.initialized else x
        edx = self._dx.apply((x - prev) / dt, _alpha(self.d_cutoff, dt))

        cutoff = self.min_cutoff + self.beta * abs(edx)
        return self._x.apply(x, _alpha(cutoff, dt))


class CursorSmoother:
    """
    Optional jitter filter for the cursor position.

    Disabled filters are an exact passthrough. When enabled, the user's
    `smoothing` option (0..1) lowers the base cutoff: 0 keeps the preset
    cutoff, 1 divides it by 4. Pinch values are never filtered.
    """

    def __init__(self, params: CursorFilter, smoothing: float = 0.8) -> None:
        self.enabled = params.enabled
        cutoff = params.min_cutoff_hz / (1.0 + 3.0 * smoothing)
        self._fx = OneEuro(min_cutoff=cutoff, beta=params.beta, d_cutoff=params.d_cutoff_hz)
        self._fy = OneEuro(min_cutoff=cutoff, beta=params.beta, d_cutoff=params.d_cutoff_hz)

    def reset(self) -> None:
        self._fx.reset()
        self._fy.reset()

    def apply(self, cursor: CursorState, t_ms: int) -> CursorState:
        if not cursor.detected:
            self.reset()
            return cursor
        if not self.enabled:
            return cursor
        t = t_ms / 1000.0
        p = Point(self._fx.apply(cursor.x, t), self._fy.apply(cursor.y, t))
        return replace(cursor, x=p.x, y=p.y)
