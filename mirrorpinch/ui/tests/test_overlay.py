import pytest

from mirrorpinch.core.types import LOST_CURSOR, Channel, CursorState, Point, Size, WidgetLayout
from mirrorpinch.ui.overlay import blank_canvas, cursor_indicator, draw_board, draw_cursor, hex_to_bgr


def test_no_indicator_without_hand():
    assert cursor_indicator(LOST_CURSOR) is None


def test_open_hand_ring():
    ind = cursor_indicator(CursorState(x=40, y=60, detected=True, pinch_distance=0.6))
    assert ind.center == (40, 60)
    assert ind.size == 32.0
    assert ind.border_width == 4.0
    assert ind.fill_opacity == 0.2
    assert ind.glow == 20.0
    assert ind.dot_size == 4.0
    assert not ind.ripple


def test_full_pinch_ring():
    ind = cursor_indicator(CursorState(x=0, y=0, detected=True, is_pinching=True, pinch_strength=1.0, pinch_distance=0.0))
    assert ind.size == 24.0
    assert ind.border_width == 5.0
    assert ind.fill_opacity == pytest.approx(0.8)
    assert ind.glow == 60.0
    assert ind.dot_size == 6.0
    assert ind.ripple


def test_half_pinch_ring():
    ind = cursor_indicator(CursorState(x=0, y=0, detected=True, is_pinching=True, pinch_strength=0.5, pinch_distance=0.1))
    assert ind.size == 28.0
    assert ind.glow == 45.0


def test_accent_color():
    assert hex_to_bgr("#10B981") == (0x81, 0xB9, 0x10)


def test_drawing_marks_the_canvas():
    canvas = blank_canvas(Size(320, 240))
    assert canvas.shape == (240, 320, 3)
    layouts = [
        WidgetLayout("a", Point(10, 10), Size(100, 60)),
        WidgetLayout("b", Point(150, 100), Size(100, 60)),
    ]
    draw_board(canvas, layouts, {"a": "Clock"}, focused_id="a", held={"b": Channel.POINTER})
    ind = cursor_indicator(CursorState(x=200, y=200, detected=True))
    draw_cursor(canvas, ind)
    assert canvas[10, 10].any()
    assert canvas[200, 200].any()
    # nothing outside the widgets and the cursor
    assert not canvas[230, 20].any()
    draw_cursor(canvas, None)
