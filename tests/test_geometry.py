import pytest

from realtime_number_reader.geometry import (
    CoordinateOrigin,
    NormalizedRect,
    Orientation,
    Point,
    Rect,
    Size,
)


def test_rect_center_and_recentering():
    rect = Rect(10.0, 20.0, 100.0, 50.0)
    assert rect.center == Point(60.0, 45.0)
    moved = rect.with_center(Point(0.0, 0.0))
    assert moved == Rect(-50.0, -25.0, 100.0, 50.0)
    assert moved.size == rect.size


def test_rect_scaled_about_center_keeps_center():
    rect = Rect(250.0, 250.0, 500.0, 500.0)
    scaled = rect.scaled_about_center(0.5, 2.0)
    assert scaled == Rect(375.0, 0.0, 250.0, 1000.0)
    assert scaled.center == rect.center


def test_rect_from_origin_size():
    rect = Rect.from_origin_size(Point(1.0, 2.0), Size(3.0, 4.0))
    assert rect.as_tuple() == (1.0, 2.0, 3.0, 4.0)
    assert rect.origin == Point(1.0, 2.0)


def test_flip_swaps_convention():
    rect = NormalizedRect(0.1, 0.2, 0.3, 0.4)
    flipped = rect.flipped_vertically()
    assert flipped.origin is CoordinateOrigin.BOTTOM_LEFT
    assert flipped.y == pytest.approx(0.4)
    assert flipped.flipped_vertically().is_close(rect)


def test_is_close_requires_same_convention():
    rect = NormalizedRect(0.0, 0.0, 1.0, 1.0)
    assert not rect.is_close(NormalizedRect.unit(CoordinateOrigin.BOTTOM_LEFT))
    assert rect.is_close(NormalizedRect(1e-12, 0.0, 1.0, 1.0))


@pytest.mark.parametrize("name, expected", [
    ("portrait", Orientation.PORTRAIT),
    ("PORTRAIT", Orientation.PORTRAIT),
    ("portrait_upside_down", Orientation.PORTRAIT_UPSIDE_DOWN),
    ("landscape-left", Orientation.LANDSCAPE_LEFT),
    ("landscapeRight", Orientation.LANDSCAPE_RIGHT),
])
def test_orientation_parse(name, expected):
    assert Orientation.parse(name) is expected


def test_orientation_parse_rejects_unknown():
    with pytest.raises(ValueError):
        Orientation.parse("faceUp")


def test_device_orientation_swaps_landscape():
    assert Orientation.from_device_orientation("landscapeLeft") is Orientation.LANDSCAPE_RIGHT
    assert Orientation.from_device_orientation("landscapeRight") is Orientation.LANDSCAPE_LEFT
    assert Orientation.from_device_orientation("portrait") is Orientation.PORTRAIT
    assert (
        Orientation.from_device_orientation("portraitUpsideDown")
        is Orientation.PORTRAIT_UPSIDE_DOWN
    )


@pytest.mark.parametrize("name", ["faceUp", "faceDown", "unknown", ""])
def test_device_orientation_without_capture_orientation(name):
    assert Orientation.from_device_orientation(name) is None
