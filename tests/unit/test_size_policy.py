import pytest

from src.domain.entities.media import ResizeStrategy, SizeRule, Tier
from src.domain.services.size_policy import DEFAULT_RULES, SizePolicy


def test_default_rules():
    policy = SizePolicy()
    large, medium, thumb = policy.rules()
    assert (large.tier, large.strategy, large.max_width, large.max_height, large.quality) == (
        Tier.LARGE, ResizeStrategy.BOUNDING_BOX, 1920, 1920, 85,
    )
    assert (medium.strategy, medium.short_side, medium.quality) == (ResizeStrategy.SHORT_SIDE_SCALE, 500, 85)
    assert (thumb.max_width, thumb.max_height, thumb.quality) == (150, 150, 80)


def test_bounding_box_downscale_keeps_aspect():
    assert SizePolicy.bounding_box_dimensions(2000, 1000, 1920, 1920) == (1920, 960)
    assert SizePolicy.bounding_box_dimensions(2000, 1000, 150, 150) == (150, 75)
    assert SizePolicy.bounding_box_dimensions(1000, 3000, 150, 150) == (50, 150)


@pytest.mark.parametrize("w,h", [(100, 100), (150, 150), (1920, 1080), (1920, 1920)])
def test_bounding_box_never_enlarges(w, h):
    assert SizePolicy.bounding_box_dimensions(w, h, 1920, 1920) is None


def test_bounding_box_fits_box_for_odd_sizes():
    for w, h in [(1921, 7), (4000, 3999), (151, 149), (3, 5000)]:
        out = SizePolicy.bounding_box_dimensions(w, h, 150, 150)
        assert out is not None
        assert out[0] <= 150 and out[1] <= 150
        assert min(out) >= 1


def test_short_side_scale():
    assert SizePolicy.short_side_dimensions(2000, 1000, 500) == (1000, 500)
    assert SizePolicy.short_side_dimensions(800, 1200, 500) == (500, 750)


def test_short_side_never_upscales():
    assert SizePolicy.short_side_dimensions(100, 100, 500) == (100, 100)
    assert SizePolicy.short_side_dimensions(4000, 500, 500) == (4000, 500)


def test_zero_dimensions_rejected():
    with pytest.raises(ValueError):
        SizePolicy.bounding_box_dimensions(0, 10, 150, 150)
    with pytest.raises(ValueError):
        SizePolicy.short_side_dimensions(10, 0, 500)


def test_custom_rule_overrides_default():
    policy = SizePolicy({Tier.THUMB: SizeRule.bounding_box(Tier.THUMB, 300, 300, quality=70)})
    assert policy.rule_for(Tier.THUMB).max_width == 300
    assert policy.rule_for(Tier.LARGE) == DEFAULT_RULES[Tier.LARGE]


def test_invalid_rules_rejected():
    with pytest.raises(ValueError):
        SizePolicy({Tier.THUMB: SizeRule.bounding_box(Tier.LARGE, 300, 300, quality=70)})
    with pytest.raises(ValueError):
        SizePolicy({Tier.MEDIUM: SizeRule.short_side_scale(Tier.MEDIUM, 500, quality=101)})


def test_every_tier_resolves_to_a_rule():
    policy = SizePolicy()
    for tier in Tier:
        assert policy.rule_for(tier).tier is tier
    assert [rule.tier for rule in policy.rules()] == [Tier.LARGE, Tier.MEDIUM, Tier.THUMB]


def test_original_rule_keeps_source_size():
    rule = SizePolicy().rule_for(Tier.ORIGINAL)
    assert rule.strategy is ResizeStrategy.ORIGINAL
    assert SizePolicy.target_dimensions(rule, 4000, 3000) == (4000, 3000)


def test_original_strategy_only_for_original_tier():
    with pytest.raises(ValueError):
        SizePolicy({Tier.ORIGINAL: SizeRule.bounding_box(Tier.ORIGINAL, 100, 100, quality=80)})
    with pytest.raises(ValueError):
        SizePolicy({Tier.LARGE: SizeRule(Tier.LARGE, ResizeStrategy.ORIGINAL, quality=85)})
