from mirrorpinch.core.types import Point, Size, WidgetLayout
from mirrorpinch.interpreter.hit_test import topmost_at, widget_at


def w(wid, x, y, width, height, z=0):
    return WidgetLayout(wid, Point(x, y), Size(width, height), z)


def test_higher_z_wins_over_lower():
    layouts = [w("W", 100, 100, 300, 120, z=1), w("V", 200, 100, 300, 200, z=2)]
    assert widget_at(Point(250, 150), layouts) == "V"
    # only W covers this point
    assert widget_at(Point(150, 150), layouts) == "W"


def test_full_overlap_picks_top_regardless_of_order():
    a = w("low", 0, 0, 200, 200, z=3)
    b = w("high", 0, 0, 200, 200, z=5)
    for layouts in ([a, b], [b, a]):
        for p in (Point(0, 0), Point(100, 100), Point(200, 200)):
            assert widget_at(p, layouts) == "high"


def test_equal_z_last_one_wins():
    a = w("first", 0, 0, 100, 100)
    b = w("second", 50, 50, 100, 100)
    assert widget_at(Point(75, 75), [a, b]) == "second"
    assert widget_at(Point(75, 75), [b, a]) == "first"


def test_edges_are_inside():
    layouts = [w("W", 100, 100, 300, 120)]
    assert widget_at(Point(100, 100), layouts) == "W"
    assert widget_at(Point(400, 220), layouts) == "W"
    assert widget_at(Point(400.01, 220), layouts) is None
    assert widget_at(Point(99.99, 150), layouts) is None


def test_empty_space_and_empty_board():
    layouts = [w("W", 100, 100, 300, 120)]
    assert widget_at(Point(10, 10), layouts) is None
    assert widget_at(Point(10, 10), []) is None
    assert topmost_at(Point(150, 150), layouts) == layouts[0]
