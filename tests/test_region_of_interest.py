import pytest

from realtime_number_reader.affine_transform import (
    VERTICAL_FLIP,
    compose_roi_to_render_transform,
    orientation_transform,
)
from realtime_number_reader.geometry import CoordinateOrigin, NormalizedRect, Orientation, Rect, Size
from realtime_number_reader.region_of_interest import RegionOfInterestManager

TOL = 1e-9


def test_initial_state_is_derived(centered_roi):
    assert centered_roi.current_normalized_roi().is_close(NormalizedRect(0.25, 0.25, 0.5, 0.5), TOL)
    recognition = centered_roi.current_recognition_roi()
    assert recognition.origin is CoordinateOrigin.BOTTOM_LEFT
    assert recognition.y == pytest.approx(0.25)
    assert centered_roi.orientation is Orientation.PORTRAIT


def test_set_rect_recomputes_eagerly(centered_roi):
    centered_roi.set_rect(Rect(100.0, 200.0, 300.0, 400.0))

    state = centered_roi.state
    assert state.normalized_roi.is_close(NormalizedRect(0.1, 0.2, 0.3, 0.4), TOL)
    assert state.recognition_roi.is_close(
        NormalizedRect(0.1, 0.4, 0.3, 0.4, CoordinateOrigin.BOTTOM_LEFT), TOL
    )
    expected = compose_roi_to_render_transform(
        state.recognition_roi, VERTICAL_FLIP, orientation_transform(Orientation.PORTRAIT)
    )
    assert centered_roi.current_transform().is_close(expected)


def test_set_orientation_recomputes_transform():
    roi = RegionOfInterestManager(Rect(100.0, 200.0, 300.0, 400.0), Size(1000.0, 1000.0))
    before = roi.current_transform()
    roi.set_orientation(Orientation.LANDSCAPE_RIGHT)
    after = roi.current_transform()

    assert not after.is_close(before)
    expected = compose_roi_to_render_transform(
        roi.current_recognition_roi(), VERTICAL_FLIP, orientation_transform(Orientation.LANDSCAPE_RIGHT)
    )
    assert after.is_close(expected)
    assert roi.state.orientation is Orientation.LANDSCAPE_RIGHT


def test_set_reference_frame_size(centered_roi):
    centered_roi.set_reference_frame_size(Size(2000.0, 1000.0))
    assert centered_roi.current_normalized_roi().is_close(NormalizedRect(0.125, 0.25, 0.25, 0.5), TOL)


def test_invalid_reference_size_leaves_state_unchanged(centered_roi):
    before = centered_roi.state
    with pytest.raises(ValueError):
        centered_roi.set_reference_frame_size(Size(0.0, 1000.0))
    assert centered_roi.state is before


def test_invalid_initial_reference_size():
    with pytest.raises(ValueError):
        RegionOfInterestManager(Rect(0.0, 0.0, 10.0, 10.0), Size(100.0, -1.0))


def test_pan_translation_is_cumulative(centered_roi):
    centered_roi.begin_pan()
    centered_roi.update_pan(10.0, 20.0)
    centered_roi.update_pan(30.0, 40.0)
    centered_roi.end_pan()

    assert centered_roi.rect == Rect(280.0, 290.0, 500.0, 500.0)
    assert centered_roi.current_normalized_roi().is_close(NormalizedRect(0.28, 0.29, 0.5, 0.5), TOL)


def test_pan_without_begin_starts_from_current_center(centered_roi):
    centered_roi.update_pan(-50.0, 0.0)
    assert centered_roi.rect == Rect(200.0, 250.0, 500.0, 500.0)


def test_pinch_scales_about_center(centered_roi):
    centered_roi.pinch(2.0)
    assert centered_roi.rect == Rect(0.0, 0.0, 1000.0, 1000.0)
    centered_roi.pinch(0.5)
    assert centered_roi.rect == Rect(250.0, 250.0, 500.0, 500.0)


def test_pinch_ignores_non_positive_scale(centered_roi):
    before = centered_roi.state
    centered_roi.pinch(0.0)
    centered_roi.pinch(-1.0)
    assert centered_roi.state is before


def test_pinch_clamps_to_min_side(centered_roi):
    centered_roi.pinch(0.001)
    rect = centered_roi.rect
    assert rect.width == pytest.approx(centered_roi.min_side)
    assert rect.height == pytest.approx(centered_roi.min_side)
    assert rect.center.x == pytest.approx(500.0)
    assert rect.center.y == pytest.approx(500.0)


def test_reset_restores_starting_rect(centered_roi):
    centered_roi.update_pan(100.0, 100.0)
    centered_roi.pinch(1.5)
    centered_roi.reset()
    assert centered_roi.rect == Rect(250.0, 250.0, 500.0, 500.0)
    assert centered_roi.current_normalized_roi().is_close(NormalizedRect(0.25, 0.25, 0.5, 0.5), TOL)
