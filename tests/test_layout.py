"""Tests for base face layout."""

from mochi.eyes.layout import Layout


def test_default_layout_is_centered():
    layout = Layout()
    assert layout.left_eye_x == (128 - (36 + 10 + 36)) // 2
    assert layout.right_eye_x == layout.left_eye_x + 36 + 10
    assert layout.eye_y == (64 - 36) // 2
    assert (layout.center_x, layout.center_y) == (64, 32)


def test_recompute_updates_all_derived_fields():
    layout = Layout()
    layout.eye_width = 20
    layout.spacing = 4
    layout.screen_height = 32
    layout.recompute()
    assert layout.left_eye_x == (128 - 44) // 2
    assert layout.right_eye_x == layout.left_eye_x + 24
    assert layout.eye_y == (32 - 36) // 2
    assert layout.center_y == 16


def test_sizes_are_floored():
    layout = Layout(eye_width=0, eye_height=-5, spacing=-3, border_radius=-1,
                    mouth_width=0, mouth_height=0)
    assert layout.eye_width == 1
    assert layout.eye_height == 1
    assert layout.spacing == 0
    assert layout.border_radius == 0
    assert layout.mouth_width == 1
    assert layout.mouth_height == 1
