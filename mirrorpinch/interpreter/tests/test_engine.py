import random

import pytest

from mirrorpinch.core.config import HandTrackingSettings
from mirrorpinch.core.control import ControlState
from mirrorpinch.core.types import (
    LOST_CURSOR, Channel, CursorState, GestureState, LandmarkFrame, Point, Size, WidgetLayout,
)
from mirrorpinch.interpreter.board import WidgetBoard
from mirrorpinch.interpreter.drag import DragSessionManager, clamp_position
from mirrorpinch.interpreter.engine import GestureEngine
from mirrorpinch.interpreter.normalizer import classify_pinch
from mirrorpinch.pointer.mouse_drag import PointerDragChannel
from mirrorpinch.runtime.kill_switch import KillSwitch
from mirrorpinch.runtime.run_loop import fake_hand
from mirrorpinch.store.layout_store import LayoutStore, layout_key
from mirrorpinch.store.settings_store import MemoryBackend, SettingsStore

VIEW = Size(1280, 720)


class BrokenDisk(MemoryBackend):
    def save_key(self, key, value):
        raise OSError("disk full")


def cur(x, y, nd, threshold=0.2):
    pinching, strength = classify_pinch(nd, threshold)
    return CursorState(x=x, y=y, detected=True, is_pinching=pinching,
                       pinch_strength=strength, pinch_distance=nd)


def setup(*layouts, backend=None):
    store = SettingsStore(backend)
    ls = LayoutStore(store)
    board = WidgetBoard(ls, [])
    for layout in layouts:
        board.place(layout)
    engine = GestureEngine(board, ls)
    return store, ls, board, engine


def W():
    return WidgetLayout("w", Point(100, 100), Size(300, 120), 1)


def test_no_hand_frames():
    _, _, _, engine = setup(W())
    for _ in range(3):
        res = engine.step(LOST_CURSOR, VIEW)
        assert res.cursor.detected is False
        assert res.focused_widget_id is None
        assert res.dragging_widget_id is None
        assert engine.state.active_session is None


def test_pinch_drag_and_commit():
    store, ls, board, engine = setup(W())

    # closing towards the threshold is not a pinch yet
    for nd in (0.5, 0.4, 0.3, 0.2):
        res = engine.step(cur(150, 150, nd), VIEW)
        assert res.gesture_state == GestureState.IDLE
        assert res.focused_widget_id == "w"
    assert engine.state.active_session is None

    res = engine.step(cur(150, 150, 0.1), VIEW)
    assert res.gesture_state == GestureState.DRAGGING
    assert res.dragging_widget_id == "w"
    s = engine.state.active_session
    assert s.anchor_widget_position == Point(100, 100)
    assert s.anchor_cursor == Point(150, 150)

    res = engine.step(cur(200, 180, 0.1), VIEW)
    assert board.get("w").position == Point(150, 130)
    # nothing reaches the store mid-drag
    assert store.get(layout_key("w")) is None

    res = engine.step(cur(200, 180, 0.3), VIEW)
    assert res.gesture_state == GestureState.IDLE
    assert res.committed.position == Point(150, 130)
    assert res.focused_widget_id is None
    assert res.dragging_widget_id is None
    assert ls.get("w").position == Point(150, 130)
    assert ls.get("w").size == Size(300, 120)
    assert board.holder("w") is None

    # hover comes back on the next frame
    assert engine.step(cur(200, 180, 0.3), VIEW).focused_widget_id == "w"


def test_losing_the_hand_commits():
    _, ls, _, engine = setup(W())
    engine.step(cur(150, 150, 0.1), VIEW)
    engine.step(cur(250, 250, 0.1), VIEW)
    res = engine.step(LOST_CURSOR, VIEW)
    assert res.gesture_state == GestureState.IDLE
    assert res.committed.position == Point(200, 200)
    assert ls.get("w").position == Point(200, 200)
    assert res.focused_widget_id is None


def test_pinch_started_in_empty_space_does_not_grab():
    _, _, board, engine = setup(W())
    engine.step(cur(50, 50, 0.1), VIEW)
    for x in (100, 150, 200):
        res = engine.step(cur(x, 150, 0.1), VIEW)
        assert res.gesture_state == GestureState.IDLE
        assert res.focused_widget_id == "w"
    assert board.get("w").position == Point(100, 100)

    engine.step(cur(200, 150, 0.5), VIEW)
    assert engine.step(cur(200, 150, 0.1), VIEW).gesture_state == GestureState.DRAGGING


def test_higher_widget_is_grabbed():
    v = WidgetLayout("v", Point(200, 100), Size(300, 200), 2)
    _, _, _, engine = setup(W(), v)
    res = engine.step(cur(250, 150, 0.5), VIEW)
    assert res.focused_widget_id == "v"
    res = engine.step(cur(250, 150, 0.1), VIEW)
    assert res.dragging_widget_id == "v"


def test_idle_frames_are_idempotent():
    _, _, board, engine = setup(W())
    first = engine.step(cur(150, 150, 0.5), VIEW)
    for _ in range(5):
        assert engine.step(cur(150, 150, 0.5), VIEW) == first
    assert board.get("w") == W()


def test_pinch_without_moving_leaves_the_store_as_it_was():
    store, ls, board, engine = setup(W())
    ls.set("w", Point(100, 100), Size(300, 120))
    before = store.snapshot()

    engine.step(cur(150, 150, 0.1), VIEW)
    for _ in range(5):
        engine.step(cur(150, 150, 0.1), VIEW)
    res = engine.step(cur(150, 150, 0.5), VIEW)

    assert res.committed.position == Point(100, 100)
    assert store.snapshot() == before
    assert board.get("w") == W()


def test_drag_stays_inside_the_viewport():
    _, ls, board, engine = setup(W())
    rng = random.Random(7)
    engine.step(cur(150, 150, 0.1), VIEW)
    for _ in range(300):
        engine.step(cur(rng.uniform(-2000, 3000), rng.uniform(-2000, 3000), 0.1), VIEW)
        p = board.get("w").position
        assert 0 <= p.x <= VIEW.width - 300
        assert 0 <= p.y <= VIEW.height - 120
    res = engine.step(cur(0, 0, 0.5), VIEW)
    p = ls.get("w").position
    assert 0 <= p.x <= VIEW.width - 300
    assert 0 <= p.y <= VIEW.height - 120
    assert res.committed.position == p


def test_clamp_position():
    widget = Size(300, 120)
    assert clamp_position(Point(-40, 900), widget, VIEW) == Point(0, 600)
    assert clamp_position(Point(5000, -1), widget, VIEW) == Point(980, 0)
    assert clamp_position(Point(10, 20), widget, VIEW) == Point(10, 20)
    # wider than the container pins to the origin
    assert clamp_position(Point(50, 50), Size(2000, 100), VIEW) == Point(0, 50)


def test_kill_switch_commits_the_drag(capsys):
    store, ls, board, engine = setup(W())
    state = ControlState(store=store)
    state.set_enabled(True)
    ks = KillSwitch(state=state, engine=engine)
    assert ks.guard() is True

    engine.step(cur(150, 150, 0.1), VIEW)
    engine.step(cur(180, 170, 0.1), VIEW)

    state.set_enabled(False)
    assert ks.guard() is False
    assert ls.get("w").position == Point(130, 120)
    assert engine.state.gesture_state == GestureState.IDLE
    assert engine.state.focused_widget_id is None
    assert board.holder("w") is None
    assert "OFF: released 'w'" in capsys.readouterr().out

    # disabled channel reports no hand even for pinched frames
    res = engine.step(cur(150, 150, 0.1), VIEW)
    assert res.cursor.detected is False
    assert res.gesture_state == GestureState.IDLE


def test_failed_commit_keeps_the_dragged_position(capsys):
    _, ls, board, engine = setup(W(), backend=BrokenDisk())
    engine.step(cur(150, 150, 0.1), VIEW)
    engine.step(cur(170, 150, 0.1), VIEW)
    res = engine.step(cur(170, 150, 0.5), VIEW)

    assert res.gesture_state == GestureState.IDLE
    assert res.committed.position == Point(120, 100)
    assert board.get("w").position == Point(120, 100)
    # still readable in this process
    assert ls.get("w").position == Point(120, 100)
    assert "[Drag] commit of 'w' failed" in capsys.readouterr().out


def test_pointer_moves_are_visible_to_the_hand():
    _, ls, board, engine = setup(W())
    pointer = PointerDragChannel(board, ls)

    assert pointer.press(150, 150, VIEW) == "w"
    pointer.move(450, 350, VIEW)
    assert board.get("w").position == Point(400, 300)

    # the hand cannot grab what the pointer holds
    res = engine.step(cur(450, 350, 0.1), VIEW)
    assert res.gesture_state == GestureState.IDLE
    assert res.focused_widget_id == "w"

    pointer.release()
    assert ls.get("w").position == Point(400, 300)

    engine.step(cur(450, 350, 0.5), VIEW)
    assert engine.step(cur(450, 350, 0.1), VIEW).dragging_widget_id == "w"


def test_pointer_ignores_a_widget_the_hand_holds():
    _, ls, board, engine = setup(W())
    pointer = PointerDragChannel(board, ls)
    engine.step(cur(150, 150, 0.1), VIEW)
    assert board.holder("w") == Channel.GESTURE

    assert pointer.press(150, 150, VIEW) is None
    assert pointer.dragging_widget_id is None
    assert pointer.release() is None


def test_both_channels_drag_different_widgets_at_once():
    v = WidgetLayout("v", Point(600, 400), Size(200, 100), 0)
    _, ls, board, engine = setup(W(), v)
    pointer = PointerDragChannel(board, ls)

    engine.step(cur(150, 150, 0.1), VIEW)
    assert pointer.press(650, 450, VIEW) == "v"
    engine.step(cur(160, 160, 0.1), VIEW)
    pointer.move(700, 450, VIEW)

    assert board.dragging() == {"w": Channel.GESTURE, "v": Channel.POINTER}
    engine.step(cur(160, 160, 0.5), VIEW)
    pointer.release()
    assert ls.get("w").position == Point(110, 110)
    assert ls.get("v").position == Point(650, 400)


def test_new_drag_completes_the_previous_one():
    v = WidgetLayout("v", Point(600, 400), Size(200, 100), 0)
    _, ls, board, _ = setup(W(), v)
    mgr = DragSessionManager(board, ls, Channel.POINTER)

    mgr.begin("w", Point(150, 150))
    mgr.update(Point(160, 150), VIEW)
    mgr.begin("v", Point(650, 450))

    assert ls.get("w").position == Point(110, 100)
    assert board.holder("w") is None
    assert board.holder("v") == Channel.POINTER
    assert mgr.session.target_widget_id == "v"


def test_widget_removed_mid_drag_still_commits():
    _, ls, board, engine = setup(W())
    engine.step(cur(150, 150, 0.1), VIEW)
    engine.step(cur(170, 150, 0.1), VIEW)
    board.remove("w")
    res = engine.step(cur(170, 150, 0.5), VIEW)
    assert res.committed is None
    assert ls.get("w").position == Point(120, 100)


def test_settings_change_while_dragging():
    _, ls, _, engine = setup(W())
    engine.step(cur(150, 150, 0.1), VIEW)
    engine.step(cur(170, 150, 0.1), VIEW)

    committed = engine.configure(HandTrackingSettings(enabled=False))
    assert committed.position == Point(120, 100)
    assert ls.get("w").position == Point(120, 100)
    assert engine.state.last_cursor == LOST_CURSOR

    engine.configure(HandTrackingSettings(enabled=True))
    assert engine.step(cur(170, 150, 0.1), VIEW).gesture_state == GestureState.DRAGGING


def test_process_landmark_frames_end_to_end():
    _, ls, _, engine = setup(W())

    def frame(t, x, y, gap):
        return LandmarkFrame(t_ms=t, landmarks=fake_hand(1.0 - x / VIEW.width, y / VIEW.height, gap))

    assert engine.process(None, VIEW).cursor.detected is False
    assert engine.process(LandmarkFrame(t_ms=0), VIEW).cursor.detected is False

    res = engine.process(frame(20, 250, 160, 0.08), VIEW)
    assert res.cursor.x == pytest.approx(250)
    assert res.cursor.y == pytest.approx(160)
    assert res.focused_widget_id == "w"
    assert res.gesture_state == GestureState.IDLE

    res = engine.process(frame(40, 250, 160, 0.005), VIEW)
    assert res.gesture_state == GestureState.DRAGGING

    engine.process(frame(60, 300, 200, 0.005), VIEW)
    res = engine.process(frame(80, 300, 200, 0.08), VIEW)
    assert res.gesture_state == GestureState.IDLE
    p = ls.get("w").position
    assert p.x == pytest.approx(150)
    assert p.y == pytest.approx(140)


def test_disabled_engine_sees_no_hand():
    store, ls, board, _ = setup(W())
    engine = GestureEngine(board, ls, HandTrackingSettings(enabled=False))
    res = engine.process(LandmarkFrame(t_ms=0, landmarks=fake_hand(0.8, 0.2, 0.005)), VIEW)
    assert res.cursor.detected is False
    assert res.gesture_state == GestureState.IDLE
