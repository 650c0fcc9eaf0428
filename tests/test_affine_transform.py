import math

import numpy as np
import pytest

from realtime_number_reader.affine_transform import (
    ORIENTATION_TRANSFORMS,
    VERTICAL_FLIP,
    AffineTransform,
    compose_roi_to_render_transform,
    layer_rect_from_normalized,
    orientation_transform,
    to_normalized,
)
from realtime_number_reader.geometry import (
    CoordinateOrigin,
    NormalizedRect,
    Orientation,
    Rect,
    Size,
)

TOL = 1e-9


def _assert_point(actual, expected):
    assert actual == pytest.approx(expected, abs=TOL)


def test_concatenation_applies_left_first():
    translate = AffineTransform.translation(1.0, 0.0)
    scale = AffineTransform.scale(2.0, 2.0)
    _assert_point(translate.concatenating(scale).apply_to_point(0.0, 0.0), (2.0, 0.0))
    _assert_point(scale.concatenating(translate).apply_to_point(0.0, 0.0), (1.0, 0.0))


def test_builder_methods_prepend():
    # Scale first, then translate
    t = AffineTransform.translation(0.1, 0.2).scaled_by(0.5, 0.5)
    _assert_point(t.apply_to_point(1.0, 1.0), (0.6, 0.7))


def test_quarter_turn_rotation_is_exact():
    assert AffineTransform.rotation(math.pi / 2).coefficients == (0.0, 1.0, -1.0, 0.0, 0.0, 0.0)
    assert AffineTransform.rotation(math.pi).coefficients == (-1.0, 0.0, 0.0, -1.0, 0.0, 0.0)


def test_inverse_round_trip():
    t = AffineTransform.translation(2.0, 3.0).scaled_by(4.0, 0.5)
    assert t.concatenating(t.inverted()).is_close(AffineTransform.identity())


def test_singular_transform_cannot_be_inverted():
    with pytest.raises(ValueError):
        AffineTransform.scale(0.0, 1.0).inverted()


def test_matrix_round_trip():
    t = AffineTransform(1.0, 2.0, 3.0, 4.0, 5.0, 6.0)
    assert AffineTransform.from_matrix(t.matrix) == t
    np.testing.assert_array_equal(t.matrix[2], [0.0, 0.0, 1.0])


def test_vertical_flip():
    _assert_point(VERTICAL_FLIP.apply_to_point(0.2, 0.3), (0.2, 0.7))


@pytest.mark.parametrize("orientation, expected", [
    (Orientation.PORTRAIT, (0.2, 0.9)),
    (Orientation.PORTRAIT_UPSIDE_DOWN, (0.8, 0.1)),
    (Orientation.LANDSCAPE_LEFT, (0.9, 0.8)),
    (Orientation.LANDSCAPE_RIGHT, (0.1, 0.2)),
])
def test_orientation_transforms(orientation, expected):
    _assert_point(orientation_transform(orientation).apply_to_point(0.1, 0.2), expected)


@pytest.mark.parametrize("orientation", list(Orientation))
def test_orientation_maps_unit_square_onto_itself(orientation):
    unit = NormalizedRect.unit()
    assert ORIENTATION_TRANSFORMS[orientation].apply_to_rect(unit).is_close(unit, TOL)


def test_identity_composition_for_full_roi():
    t = compose_roi_to_render_transform(
        NormalizedRect.unit(CoordinateOrigin.BOTTOM_LEFT),
        AffineTransform.identity(),
        AffineTransform.identity()
    )
    assert t.is_identity


def test_composition_order_with_asymmetric_roi():
    roi = NormalizedRect(0.1, 0.2, 0.3, 0.4, CoordinateOrigin.BOTTOM_LEFT)

    flipped_only = compose_roi_to_render_transform(roi, VERTICAL_FLIP, AffineTransform.identity())
    _assert_point(flipped_only.apply_to_point(0.0, 0.0), (0.1, 0.8))
    _assert_point(flipped_only.apply_to_point(1.0, 1.0), (0.4, 0.4))

    portrait = compose_roi_to_render_transform(
        roi, VERTICAL_FLIP, orientation_transform(Orientation.PORTRAIT)
    )
    _assert_point(portrait.apply_to_point(0.0, 0.0), (0.8, 0.9))
    _assert_point(portrait.apply_to_point(1.0, 1.0), (0.4, 0.6))

    box = portrait.apply_to_rect(NormalizedRect.unit(CoordinateOrigin.BOTTOM_LEFT), CoordinateOrigin.TOP_LEFT)
    assert box.is_close(NormalizedRect(0.4, 0.6, 0.4, 0.3), TOL)


def test_composition_differs_when_flip_is_applied_first():
    roi = NormalizedRect(0.1, 0.2, 0.3, 0.4, CoordinateOrigin.BOTTOM_LEFT)
    expected = compose_roi_to_render_transform(roi, VERTICAL_FLIP, AffineTransform.identity())
    roi_to_global = AffineTransform.translation(roi.x, roi.y).scaled_by(roi.width, roi.height)
    swapped = VERTICAL_FLIP.concatenating(roi_to_global)
    assert not swapped.is_close(expected)


def test_end_to_end_centered_roi_in_portrait():
    normalized = to_normalized(Rect(250.0, 250.0, 500.0, 500.0), Size(1000.0, 1000.0))
    assert normalized.is_close(NormalizedRect(0.25, 0.25, 0.5, 0.5), TOL)

    t = compose_roi_to_render_transform(
        normalized.flipped_vertically(),
        VERTICAL_FLIP,
        orientation_transform(Orientation.PORTRAIT)
    )
    box = t.apply_to_rect(NormalizedRect.unit(CoordinateOrigin.BOTTOM_LEFT), CoordinateOrigin.TOP_LEFT)
    assert box.is_close(NormalizedRect(0.25, 0.25, 0.5, 0.5), TOL)


def test_to_normalized_is_per_axis():
    normalized = to_normalized(Rect(39.0, 84.4, 78.0, 168.8), Size(390.0, 844.0))
    assert normalized.as_tuple() == pytest.approx((0.1, 0.1, 0.2, 0.2), abs=TOL)


@pytest.mark.parametrize("size", [Size(0.0, 100.0), Size(100.0, 0.0), Size(-1.0, 100.0)])
def test_to_normalized_rejects_non_positive_reference(size):
    with pytest.raises(ValueError):
        to_normalized(Rect(0.0, 0.0, 10.0, 10.0), size)


def test_layer_rect_from_normalized():
    rect = layer_rect_from_normalized(NormalizedRect(0.1, 0.2, 0.3, 0.4), Size(200.0, 100.0))
    assert rect.as_tuple() == pytest.approx((20.0, 20.0, 60.0, 40.0))

    bottom_left = NormalizedRect(0.1, 0.2, 0.3, 0.4, CoordinateOrigin.BOTTOM_LEFT)
    rect = layer_rect_from_normalized(bottom_left, Size(200.0, 100.0))
    assert rect.as_tuple() == pytest.approx((20.0, 40.0, 60.0, 40.0))


def test_apply_to_points_matches_apply_to_point():
    t = orientation_transform(Orientation.PORTRAIT_UPSIDE_DOWN)
    points = np.array([[0.1, 0.2], [0.5, 0.9]])
    mapped = t.apply_to_points(points)
    for (x, y), row in zip(points, mapped):
        _assert_point(tuple(row), t.apply_to_point(x, y))
