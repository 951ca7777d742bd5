import pytest

from mirrorpinch.core.types import CursorState
from mirrorpinch.runtime.calibration import Calibrator, percentile, save_calibration
from mirrorpinch.store.app_settings import load_hand_tracking_settings
from mirrorpinch.store.settings_store import SettingsStore


def cursor(nd, detected=True):
    return CursorState(x=0, y=0, detected=detected, pinch_distance=nd)


def test_calibration_midpoint():
    c = Calibrator()
    c.start(0)
    for t in range(100, 4000, 100):
        c.update(cursor(0.6), t)
    c.update(cursor(0.6), 4100)
    assert c.step == 1
    assert len(c.open_d) == 39
    for t in range(4200, 8100, 100):
        c.update(cursor(0.05), t)
    c.update(cursor(0.05), 8200)
    assert c.done
    assert c.instruction() == "Calibration complete."

    r = c.finalize()
    assert r.pinch_sensitivity == pytest.approx(0.325)
    assert (r.open_samples, r.pinch_samples) == (39, 39)

    store = SettingsStore()
    save_calibration(store, r)
    assert load_hand_tracking_settings(store).pinch_sensitivity == pytest.approx(0.325)


def test_calibration_without_usable_data():
    c = Calibrator()
    c.start(0)
    assert c.finalize(default=0.25).pinch_sensitivity == 0.25

    # open hand reads tighter than the pinch: keep the default
    c.update(cursor(0.1), 100)
    c.update(cursor(0.3), 4200)
    c.update(cursor(0.3), 4300)
    assert c.finalize().pinch_sensitivity == 0.2

    c.start(0)
    c.update(cursor(0.6, detected=False), 100)
    assert c.open_d == []


def test_percentile():
    assert percentile([], 50) is None
    assert percentile([5, 1, 3], 0) == 1
    assert percentile([5, 1, 3], 100) == 5
    assert percentile([5, 1, 3], 50) == 3
