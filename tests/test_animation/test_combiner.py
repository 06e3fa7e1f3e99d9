"""Tests for combining an element's concurrent animations."""

import pytest

from tests.conftest import SQUARE
from viewtight.animation.combiner import combine, shared_timeline
from viewtight.animation.model import AttributeAnimation, MotionAnimation, TransformAnimation
from viewtight.animation.sampler import SamplingInput, sample_animation
from viewtight.engine.config import EngineConfig
from viewtight.utils.affine import AffineTransform, extents_of_poses
from viewtight.utils.geometry import Box


def _sample(*anims, config=None):
    inp = SamplingInput("el", SQUARE, config=config or EngineConfig())
    return [sample_animation(a, i, inp, []) for i, a in enumerate(anims)]


def _bounds(combined):
    return extents_of_poses(combined.matrices, combined.geometry_box).to_box()


def test_static_element_has_one_pose():
    combined = combine(AffineTransform.translate(5, 5), SQUARE, [])
    assert combined.pose_count == 1
    assert _bounds(combined).as_tuple() == (5, 5, 10, 10)


def test_opposite_additive_motions_cancel():
    right = TransformAnimation("translate", ((0.0, 0.0), (10.0, 0.0)), additive=True)
    left = TransformAnimation("translate", ((0.0, 0.0), (-10.0, 0.0)), additive=True)
    combined = combine(AffineTransform(), SQUARE, _sample(right, left))
    # Sampled at matching instants the two always sum to zero
    assert _bounds(combined).as_tuple() == pytest.approx((0, 0, 10, 10))


def test_replace_animations_are_alternatives():
    a = TransformAnimation("translate", ((20.0, 0.0),))
    b = TransformAnimation("translate", ((0.0, 20.0),))
    combined = combine(AffineTransform(), SQUARE, _sample(a, b))
    box = _bounds(combined)
    # Never composed with each other, so (20, 20) is not reached
    assert box.as_tuple() == pytest.approx((0, 0, 30, 30))
    corners = {tuple(m[:2, 2]) for m in combined.matrices}
    assert (20.0, 20.0) not in corners


def test_motion_applies_on_top_of_own_transform():
    motion = MotionAnimation(path_data="M0 0 L100 0")
    combined = combine(AffineTransform.scale(2), SQUARE, _sample(motion))
    assert _bounds(combined).as_tuple() == pytest.approx((0, 0, 120, 20))


def test_event_additives_respect_cap():
    right = TransformAnimation("translate", ((10.0, 0.0),), additive=True, timing="click")
    down = TransformAnimation("translate", ((0.0, 10.0),), additive=True, timing="click")
    poses = _sample(right, down)

    uncapped = combine(AffineTransform(), SQUARE, poses, EngineConfig(max_event_alternatives=2))
    capped = combine(AffineTransform(), SQUARE, poses, EngineConfig(max_event_alternatives=1))
    assert uncapped.pose_count == 5
    assert capped.pose_count == 4
    assert _bounds(capped).as_tuple() == pytest.approx((0, 0, 20, 20))
    # Past the cap the second animation is an alternative, not composed with the first
    assert (10.0, 10.0) not in {tuple(m[:2, 2]) for m in capped.matrices}
    assert (10.0, 10.0) in {tuple(m[:2, 2]) for m in uncapped.matrices}


def test_attribute_boxes_widen_geometry():
    anim = TransformAnimation("translate", ((0.0, 0.0),))
    poses = _sample(anim)
    wide = SamplingInput("el", SQUARE)
    poses.append(sample_animation(AttributeAnimation("width", ((40.0,),)), 1, wide, []))
    combined = combine(AffineTransform(), SQUARE, poses)
    assert combined.geometry_box == Box(0, 0, 40, 10)


def test_shared_timeline_is_union():
    a, b = _sample(
        TransformAnimation("translate", ((0.0,), (1.0,))),
        TransformAnimation("scale", ((1.0,), (2.0,))),
        config=EngineConfig(samples_per_segment=1),
    )
    assert shared_timeline([a, b]) == [0.0, 0.5, 1.0]


def test_delayed_additive_keeps_the_plain_slide():
    slide = TransformAnimation("translate", ((0.0, 0.0), (100.0, 0.0)))
    shrink = TransformAnimation("scale", ((0.1,),), additive=True, timing="1s")
    box = _bounds(combine(AffineTransform(), SQUARE, _sample(slide, shrink)))
    # Before the scale begins the full-size square reaches the end of the slide
    assert box.max_x >= 110


def test_additives_with_different_begins_toggle_separately():
    right = TransformAnimation("translate", ((10.0, 0.0),), additive=True)
    down = TransformAnimation("translate", ((0.0, 10.0),), additive=True, timing="2s")
    combined = combine(AffineTransform(), SQUARE, _sample(right, down))
    corners = {tuple(m[:2, 2]) for m in combined.matrices}
    assert {(0.0, 0.0), (10.0, 0.0), (0.0, 10.0), (10.0, 10.0)} <= corners


def test_composed_slide_and_spin_is_no_larger_than_independent_sum():
    slide = TransformAnimation("translate", ((0.0, 0.0), (50.0, 0.0)), additive=True)
    spin = TransformAnimation("rotate", ((0.0,), (360.0,)), additive=True)
    composed = _bounds(combine(AffineTransform(), SQUARE, _sample(slide, spin)))
    slid = _bounds(combine(AffineTransform(), SQUARE, _sample(slide)))
    spun = _bounds(combine(AffineTransform(), SQUARE, _sample(spin)))
    naive = Box(
        slid.x + spun.x,
        slid.y + spun.y,
        slid.width + spun.width - SQUARE.width,
        slid.height + spun.height - SQUARE.height,
    )
    assert spun.width == pytest.approx(20 * 2 ** 0.5, rel=1e-3)
    assert composed.area <= naive.area
