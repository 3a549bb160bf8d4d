"""
Confidence Scorer - Aggregate Pair Evidence Into a 0-100 Score
==============================================================

Each retained pair contributes a fixed weight by its evidence category;
the sum is clamped to [0, 100]. Input is the deduplicated pair set, so
one pair contributes exactly once however many transactions support it.
"""

from collections import Counter
from typing import Dict, Iterable, List, Optional

from .models import LinkCategory, PairEvidence

CATEGORY_WEIGHTS = {
    LinkCategory.DIRECT: 40,
    LinkCategory.MIDDLEMAN: 30,
    LinkCategory.TIME_PROXIMATE: 20,
    LinkCategory.SHARED_COUNTERPARTY: 10,
}
OTHER_CATEGORY_WEIGHT = 5

MIN_SCORE = 0
MAX_SCORE = 100


class ConfidenceScorer:
    """Weighted sum of pair evidence categories."""

    def __init__(
        self,
        weights: Optional[Dict[LinkCategory, int]] = None,
        other_weight: int = OTHER_CATEGORY_WEIGHT,
    ):
        self.weights = dict(weights or CATEGORY_WEIGHTS)
        self.other_weight = other_weight

    def weight_for(self, category: LinkCategory) -> int:
        return self.weights.get(category, self.other_weight)

    def score(self, pairs: Iterable[PairEvidence]) -> int:
        total = sum(self.weight_for(p.category) for p in pairs)
        return int(max(MIN_SCORE, min(MAX_SCORE, round(total))))

    def breakdown(self, pairs: List[PairEvidence]) -> Dict[str, int]:
        """Contribution per category before clamping."""
        counts = Counter(p.category for p in pairs)
        return {
            category.value: count * self.weight_for(category)
            for category, count in counts.items()
        }
