import pytest

from prospector.services.confidence import (
    average_feedback_score,
    clamp_score,
    feedback_points,
    fuse_confidence,
    user_weight,
)


@pytest.mark.unit
def test_no_feedback_keeps_ai_score():
    assert fuse_confidence(73, None, 0) == 73
    assert fuse_confidence(72.5, None, 0) == 73


@pytest.mark.unit
def test_weighted_blend_with_three_ratings():
    # weight 0.6: 70 * 0.4 + 90 * 0.6 = 82
    assert fuse_confidence(70, 90, 3) == 82


@pytest.mark.unit
def test_user_weight_is_capped():
    assert user_weight(10) == 0.8
    assert fuse_confidence(100, 0, 10) == 20


@pytest.mark.unit
def test_missing_scores_count_as_zero():
    assert fuse_confidence(None, None, 0) == 0
    assert fuse_confidence(None, 100, 1) == 20


@pytest.mark.unit
def test_clamp_score_bounds():
    assert clamp_score(-5) == 0
    assert clamp_score(140) == 100
    assert clamp_score(None) == 0


@pytest.mark.unit
def test_feedback_points_and_average():
    assert feedback_points("excellent") == 100
    assert feedback_points("ok") == 50
    assert feedback_points("terrible") == 0
    assert average_feedback_score(["excellent", "terrible"]) == 50
    assert average_feedback_score([]) is None


@pytest.mark.unit
def test_unknown_feedback_type_rejected():
    with pytest.raises(ValueError):
        feedback_points("great")
