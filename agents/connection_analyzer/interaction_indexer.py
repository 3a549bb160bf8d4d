"""
Interaction Indexer - First Pass Over Monitored Wallet History
==============================================================

Walks every transaction of every monitored wallet once, in the order the
wallets were supplied, and:

- applies direct transfers between monitored wallets
- registers external recipients as COUNTERPARTY nodes with a weak
  SHARED_COUNTERPARTY link and logs the interaction for later heuristics
- registers touched programs (optional, minus the ignore-list)

The resulting InteractionLog is the input of the time-proximity and hub
detectors and of the graph pruner.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Sequence, Tuple

import structlog

from config.analysis_config import AnalysisConfig

from .detectors import (
    SHARED_COUNTERPARTY_LINK_WEIGHT,
    record_direct_transfer,
    record_shared_program,
)
from .models import (
    InteractionEntry,
    LinkCategory,
    NodeCategory,
    TransactionRecord,
)
from .pair_recorder import PairEvidenceRecorder
from .registry import NodeLinkRegistry

logger = structlog.get_logger(__name__)


class InteractionLog:
    """Per external entity, every interaction by a monitored wallet."""

    def __init__(self):
        self._entries: Dict[str, List[InteractionEntry]] = {}

    def record(self, entity: str, entry: InteractionEntry):
        self._entries.setdefault(entity, []).append(entry)

    def interactions(self, entity: str) -> List[InteractionEntry]:
        return list(self._entries.get(entity, ()))

    def distinct_interactors(self, entity: str) -> List[str]:
        """Monitored wallets that touched entity, in first-encounter order."""
        return list(dict.fromkeys(
            e.monitored_entity for e in self._entries.get(entity, ())
        ))

    def shared_entities(self) -> Iterator[Tuple[str, List[InteractionEntry]]]:
        """Entities touched by at least two distinct monitored wallets."""
        for entity, entries in self._entries.items():
            if len({e.monitored_entity for e in entries}) >= 2:
                yield entity, entries


@dataclass
class IndexResult:
    """What the indexing pass produced besides registry writes."""
    interaction_log: InteractionLog
    total_transactions_scanned: int = 0
    skipped_records: int = 0
    counterparties: Dict[str, None] = field(default_factory=dict)

    @property
    def unique_counterparty_count(self) -> int:
        return len(self.counterparties)


class InteractionIndexer:
    """Classifies recipients and programs touched by monitored wallets."""

    def __init__(
        self,
        monitored_entities: Sequence[str],
        registry: NodeLinkRegistry,
        recorder: PairEvidenceRecorder,
        config: AnalysisConfig,
    ):
        self.monitored_entities = list(monitored_entities)
        self._monitored = set(self.monitored_entities)
        self.registry = registry
        self.recorder = recorder
        self.config = config

    def index(self, inputs: Mapping[str, Sequence[Any]]) -> IndexResult:
        result = IndexResult(interaction_log=InteractionLog())

        for entity in self.monitored_entities:
            records = inputs.get(entity) or []
            result.total_transactions_scanned += len(records)

            for raw in records:
                record = TransactionRecord.coerce(raw) if raw else None
                if record is None or record.is_malformed:
                    result.skipped_records += 1
                    continue
                self._index_record(entity, record, result)

        if result.skipped_records:
            logger.debug("malformed_records_skipped", count=result.skipped_records)

        return result

    def _index_record(self, entity: str, record: TransactionRecord, result: IndexResult):
        for recipient in record.recipients:
            # Self-payments relate nothing: no self pair, link or counterparty
            if recipient == entity:
                continue

            if recipient in self._monitored:
                record_direct_transfer(
                    self.registry, self.recorder, entity, recipient, record.signature
                )
                continue

            result.counterparties[recipient] = None
            self.registry.upsert_node(recipient, NodeCategory.COUNTERPARTY)
            self.registry.upsert_link(
                entity,
                recipient,
                LinkCategory.SHARED_COUNTERPARTY,
                SHARED_COUNTERPARTY_LINK_WEIGHT,
            )
            result.interaction_log.record(
                recipient,
                InteractionEntry(
                    monitored_entity=entity,
                    timestamp=record.block_time,
                    tx_signature=record.signature,
                ),
            )

        if not self.config.include_programs:
            return

        for program in record.program_ids:
            if program in self.config.ignored_programs:
                continue
            record_shared_program(self.registry, entity, program)
