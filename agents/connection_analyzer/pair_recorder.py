"""Pair Evidence Recorder - keeps the strongest evidence per wallet pair."""

from typing import Dict, List, Optional, Tuple

import structlog

from .models import LinkCategory, PairEvidence

logger = structlog.get_logger(__name__)


class PairEvidenceRecorder:
    """
    Holds one PairEvidence per unordered pair of monitored wallets.

    A new observation replaces the stored one only when its score is
    strictly greater; equal scores keep the first record.
    """

    def __init__(self):
        self._pairs: Dict[Tuple[str, str], PairEvidence] = {}

    def record(
        self,
        a: str,
        b: str,
        reason: str,
        score: float,
        category: LinkCategory,
    ) -> PairEvidence:
        entity_a, entity_b = sorted((a, b))
        key = (entity_a, entity_b)

        current = self._pairs.get(key)
        if current is not None and score <= current.score:
            return current

        evidence = PairEvidence(
            entity_a=entity_a,
            entity_b=entity_b,
            reason=reason,
            score=score,
            category=category,
        )
        # Existing keys keep their original insertion position
        self._pairs[key] = evidence

        logger.debug(
            "pair_evidence_recorded",
            pair=f"{entity_a[:8]}/{entity_b[:8]}",
            category=category.value,
            score=score,
            replaced=current is not None,
        )
        return evidence

    def get(self, a: str, b: str) -> Optional[PairEvidence]:
        return self._pairs.get(tuple(sorted((a, b))))

    def __len__(self) -> int:
        return len(self._pairs)

    def ranked(self) -> List[PairEvidence]:
        """Evidence sorted by score, highest first; ties keep recording order."""
        return sorted(self._pairs.values(), key=lambda p: p.score, reverse=True)
