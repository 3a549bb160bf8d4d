"""
Heuristic Detectors - Relationship Signals Between Monitored Wallets
====================================================================

Four heuristics feed the registry and the pair evidence recorder:

1. Direct transfer   - one monitored wallet appears as a recipient of
                       another's transaction (applied while indexing)
2. Shared program    - monitored wallets invoke the same program
                       (applied while indexing, graph only)
3. Time-proximate    - two monitored wallets touch the same external
                       entity within the configured window
4. Hub / middleman   - an external entity touched by many monitored
                       wallets, or touched very often

Scores written to the recorder:

    DIRECT               50
    TIME_PROXIMATE       30
    MIDDLEMAN            20
    SHARED_COUNTERPARTY  10

Hub evidence is recorded for the first two distinct wallets only, in
first-encounter order, even when more wallets share the hub. Graph links
are still drawn for every wallet.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List

import structlog

from .models import LinkCategory, NodeCategory
from .pair_recorder import PairEvidenceRecorder
from .registry import NodeLinkRegistry, short_label

if TYPE_CHECKING:
    from .interaction_indexer import InteractionLog

logger = structlog.get_logger(__name__)

# Link weight contributions
DIRECT_LINK_WEIGHT = 5.0
SHARED_COUNTERPARTY_LINK_WEIGHT = 0.5
SHARED_PROGRAM_LINK_WEIGHT = 0.5
TIME_PROXIMATE_LINK_WEIGHT = 2.0
MIDDLEMAN_LINK_WEIGHT = 3.0

# Pair evidence scores
DIRECT_SCORE = 50
TIME_PROXIMATE_SCORE = 30
MIDDLEMAN_SCORE = 20
SHARED_COUNTERPARTY_SCORE = 10

# Hub thresholds (strictly greater than)
HUB_DISTINCT_THRESHOLD = 2
HUB_INTERACTION_THRESHOLD = 5


def record_direct_transfer(
    registry: NodeLinkRegistry,
    recorder: PairEvidenceRecorder,
    sender: str,
    recipient: str,
    signature: str,
):
    """Monitored wallet `sender` paid monitored wallet `recipient`."""
    registry.upsert_link(
        sender,
        recipient,
        LinkCategory.DIRECT,
        DIRECT_LINK_WEIGHT,
        "Direct Transfer",
    )
    recorder.record(
        sender,
        recipient,
        f"Direct transfer in tx {signature[:8]}...",
        DIRECT_SCORE,
        LinkCategory.DIRECT,
    )


def record_shared_program(registry: NodeLinkRegistry, entity: str, program_id: str):
    registry.upsert_node(program_id, NodeCategory.PROGRAM)
    registry.upsert_link(
        entity,
        program_id,
        LinkCategory.SHARED_PROGRAM,
        SHARED_PROGRAM_LINK_WEIGHT,
    )


@dataclass
class HubFinding:
    """An external entity shared by two or more monitored wallets."""
    entity: str
    interactors: List[str] = field(default_factory=list)
    interaction_count: int = 0
    is_middleman: bool = False


class TimeProximityDetector:
    """
    Flags monitored wallets that touched the same external entity within
    `time_window_seconds` of each other.

    Every pair of interactions is compared (quadratic in the entity's
    interaction count, bounded by the fetch limit). A missing block time
    is 0, so two unknown timestamps always match.
    """

    def __init__(self, time_window_seconds: int):
        self.time_window_seconds = time_window_seconds

    def detect(
        self,
        interaction_log: "InteractionLog",
        registry: NodeLinkRegistry,
        recorder: PairEvidenceRecorder,
    ) -> int:
        matches = 0

        for entity, entries in interaction_log.shared_entities():
            ordered = sorted(entries, key=lambda e: e.timestamp)

            for i in range(len(ordered)):
                for j in range(i + 1, len(ordered)):
                    first, second = ordered[i], ordered[j]
                    if first.monitored_entity == second.monitored_entity:
                        continue

                    delta = abs(first.timestamp - second.timestamp)
                    if delta > self.time_window_seconds:
                        continue

                    registry.upsert_link(
                        first.monitored_entity,
                        entity,
                        LinkCategory.TIME_PROXIMATE,
                        TIME_PROXIMATE_LINK_WEIGHT,
                    )
                    registry.upsert_link(
                        second.monitored_entity,
                        entity,
                        LinkCategory.TIME_PROXIMATE,
                        TIME_PROXIMATE_LINK_WEIGHT,
                    )
                    recorder.record(
                        first.monitored_entity,
                        second.monitored_entity,
                        f"Interacted with same entity ({entity[:4]}..) within {delta}s",
                        TIME_PROXIMATE_SCORE,
                        LinkCategory.TIME_PROXIMATE,
                    )
                    matches += 1

        logger.debug(
            "time_proximity_detected",
            matches=matches,
            window_seconds=self.time_window_seconds,
        )
        return matches


class HubDetector:
    """Classifies shared external entities as middlemen or plain shared counterparties."""

    def detect(
        self,
        interaction_log: "InteractionLog",
        registry: NodeLinkRegistry,
        recorder: PairEvidenceRecorder,
    ) -> List[HubFinding]:
        findings = []

        for entity, entries in interaction_log.shared_entities():
            interactors = interaction_log.distinct_interactors(entity)
            finding = HubFinding(
                entity=entity,
                interactors=interactors,
                interaction_count=len(entries),
            )
            finding.is_middleman = (
                len(interactors) > HUB_DISTINCT_THRESHOLD
                or len(entries) > HUB_INTERACTION_THRESHOLD
            )
            first, second = interactors[0], interactors[1]

            if finding.is_middleman:
                registry.upsert_node(entity, NodeCategory.MIDDLEMAN)
                for monitored in interactors:
                    registry.upsert_link(
                        monitored,
                        entity,
                        LinkCategory.MIDDLEMAN,
                        MIDDLEMAN_LINK_WEIGHT,
                    )
                recorder.record(
                    first,
                    second,
                    f"Connected via high-traffic hub {entity[:4]}...",
                    MIDDLEMAN_SCORE,
                    LinkCategory.MIDDLEMAN,
                )
            else:
                recorder.record(
                    first,
                    second,
                    f"Shared counterparty: {entity[:4]}...",
                    SHARED_COUNTERPARTY_SCORE,
                    LinkCategory.SHARED_COUNTERPARTY,
                )

            findings.append(finding)

        middlemen = [f for f in findings if f.is_middleman]
        if middlemen:
            logger.debug(
                "hubs_detected",
                shared=len(findings),
                middlemen=[short_label(f.entity) for f in middlemen],
            )
        return findings
