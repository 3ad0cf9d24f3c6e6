from __future__ import annotations

from collections.abc import Mapping

from src.domain.entities.media import DERIVATIVE_TIERS, ResizeStrategy, SizeRule, Tier

DEFAULT_RULES: dict[Tier, SizeRule] = {
    Tier.ORIGINAL: SizeRule.original(),
    Tier.LARGE: SizeRule.bounding_box(Tier.LARGE, 1920, 1920, quality=85),
    Tier.MEDIUM: SizeRule.short_side_scale(Tier.MEDIUM, 500, quality=85),
    Tier.THUMB: SizeRule.bounding_box(Tier.THUMB, 150, 150, quality=80),
}


class SizePolicy:
    """Derivative tier table.

    Every tier resolves to a rule; a policy built with missing tiers falls back
    to the default rule for them. The original tier keeps its identity rule.
    """

    def __init__(self, rules: Mapping[Tier, SizeRule] | None = None) -> None:
        merged = dict(DEFAULT_RULES)
        if rules:
            merged.update(rules)
        for tier, rule in merged.items():
            if rule.tier is not tier:
                raise ValueError(f"Rule for {tier.value} is declared for {rule.tier.value}")
            if (tier is Tier.ORIGINAL) != (rule.strategy is ResizeStrategy.ORIGINAL):
                raise ValueError(f"Strategy {rule.strategy.value} does not apply to {tier.value}")
            if not 0 <= rule.quality <= 100:
                raise ValueError(f"Quality for {tier.value} must be within 0-100")
        self._rules = merged

    def rule_for(self, tier: Tier) -> SizeRule:
        return self._rules[tier]

    def rules(self) -> list[SizeRule]:
        return [self._rules[t] for t in DERIVATIVE_TIERS]

    # Bounding box: ratio = min(maxW / w, maxH / h); None when ratio >= 1 (never enlarge)
    @staticmethod
    def bounding_box_dimensions(
        width: int, height: int, max_width: int, max_height: int
    ) -> tuple[int, int] | None:
        if width <= 0 or height <= 0:
            raise ValueError("width and height must be > 0")
        ratio = min(max_width / width, max_height / height)
        if ratio >= 1.0:
            return None
        return max(1, round(width * ratio)), max(1, round(height * ratio))

    # Short side: ratio = target / min(w, h); keep original size when min(w, h) <= target
    @staticmethod
    def short_side_dimensions(width: int, height: int, target: int) -> tuple[int, int]:
        if width <= 0 or height <= 0:
            raise ValueError("width and height must be > 0")
        short = min(width, height)
        if short <= target:
            return width, height
        ratio = target / short
        return max(1, round(width * ratio)), max(1, round(height * ratio))

    @classmethod
    def target_dimensions(cls, rule: SizeRule, width: int, height: int) -> tuple[int, int] | None:
        """Return the output size for ``rule``, or None when the tier is omitted."""
        if rule.strategy is ResizeStrategy.ORIGINAL:
            return width, height
        if rule.strategy is ResizeStrategy.BOUNDING_BOX:
            return cls.bounding_box_dimensions(width, height, rule.max_width, rule.max_height)
        return cls.short_side_dimensions(width, height, rule.short_side)
