"""
Connection Analysis Data Model
==============================

Records, graph elements and evidence types shared by every stage of the
connection analysis pipeline.

Categories carry an explicit precedence rank. Merging two observations
of the same node or link keeps the higher-ranked category, so categories
only ever move up.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

import networkx as nx


class NodeCategory(Enum):
    """Role of a node in the connection graph."""
    INPUT = "input"                 # Monitored wallet
    COUNTERPARTY = "counterparty"   # External recipient
    PROGRAM = "program"             # On-chain program
    MIDDLEMAN = "middleman"         # Hub linking several monitored wallets

    @property
    def rank(self) -> int:
        return _NODE_RANK[self]


_NODE_RANK = {
    NodeCategory.COUNTERPARTY: 0,
    NodeCategory.PROGRAM: 0,
    NodeCategory.MIDDLEMAN: 1,
    NodeCategory.INPUT: 2,
}


class LinkCategory(Enum):
    """Kind of relationship a link represents."""
    DIRECT = "DIRECT"
    SHARED_COUNTERPARTY = "SHARED_COUNTERPARTY"
    SHARED_PROGRAM = "SHARED_PROGRAM"
    MIDDLEMAN = "MIDDLEMAN"
    TIME_PROXIMATE = "TIME_PROXIMATE"

    @property
    def rank(self) -> int:
        return _LINK_RANK[self]

    @property
    def is_strong(self) -> bool:
        return self.rank > 0


# Only DIRECT and MIDDLEMAN may overwrite a stored link category
_LINK_RANK = {
    LinkCategory.SHARED_COUNTERPARTY: 0,
    LinkCategory.SHARED_PROGRAM: 0,
    LinkCategory.TIME_PROXIMATE: 0,
    LinkCategory.MIDDLEMAN: 1,
    LinkCategory.DIRECT: 2,
}


def promote(existing, incoming):
    """Return the higher-precedence category; ties keep the existing one."""
    return incoming if incoming.rank > existing.rank else existing


def _unique(values) -> List[str]:
    return list(dict.fromkeys(v for v in values if v))


@dataclass(frozen=True)
class TransactionRecord:
    """A parsed transaction as supplied by the chain data provider."""
    signature: str
    block_time: int = 0
    sender: Optional[str] = None
    recipients: Tuple[str, ...] = ()
    program_ids: Tuple[str, ...] = ()

    @property
    def is_malformed(self) -> bool:
        return not self.sender

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TransactionRecord":
        """
        Build a record from a provider mapping.

        Accepts camelCase (RPC style) or snake_case keys. A missing block
        time becomes 0, duplicates are collapsed and the sender is removed
        from the recipients.
        """
        sender = data.get("sender")
        block_time = data.get("blockTime", data.get("block_time")) or 0
        recipients = data.get("recipients") or ()
        programs = data.get("programIds", data.get("program_ids")) or ()

        return cls(
            signature=data.get("signature") or "",
            block_time=int(block_time),
            sender=sender,
            recipients=tuple(r for r in _unique(recipients) if r != sender),
            program_ids=tuple(_unique(programs)),
        )

    @classmethod
    def coerce(cls, record: Any) -> "TransactionRecord":
        if isinstance(record, cls):
            return record
        return cls.from_dict(record)


@dataclass
class GraphNode:
    """A node in the connection graph."""
    id: str
    category: NodeCategory
    label: str
    weight: float = 5.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "group": self.category.value,
            "label": self.label,
            "val": self.weight,
        }


@dataclass
class GraphLink:
    """An undirected, weighted relationship between two nodes."""
    id: str
    source: str
    target: str
    category: LinkCategory
    weight: float = 1.0
    detail: Optional[str] = None

    @property
    def endpoints(self) -> Tuple[str, str]:
        return (self.source, self.target)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "type": self.category.value,
            "value": self.weight,
            "details": self.detail,
        }


@dataclass
class InteractionEntry:
    """One monitored wallet touching one external entity."""
    monitored_entity: str
    timestamp: int
    tx_signature: str


@dataclass
class PairEvidence:
    """Strongest evidence linking two monitored wallets (sorted pair)."""
    entity_a: str
    entity_b: str
    reason: str
    score: float
    category: LinkCategory

    @property
    def key(self) -> Tuple[str, str]:
        return (self.entity_a, self.entity_b)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "addressA": self.entity_a,
            "addressB": self.entity_b,
            "reason": self.reason,
            "score": self.score,
            "type": self.category.value,
        }


@dataclass
class ConnectionGraph:
    """Pruned graph handed to the renderer."""
    nodes: List[GraphNode] = field(default_factory=list)
    links: List[GraphLink] = field(default_factory=list)

    @property
    def node_ids(self) -> List[str]:
        return [n.id for n in self.nodes]

    @property
    def link_ids(self) -> List[str]:
        return [l.id for l in self.links]

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_link(self, link_id: str) -> Optional[GraphLink]:
        for link in self.links:
            if link.id == link_id:
                return link
        return None

    def to_networkx(self) -> nx.Graph:
        """Undirected NetworkX view of the graph."""
        graph = nx.Graph()
        for node in self.nodes:
            graph.add_node(
                node.id,
                category=node.category.value,
                label=node.label,
                weight=node.weight,
            )
        for link in self.links:
            graph.add_edge(
                link.source,
                link.target,
                category=link.category.value,
                weight=link.weight,
                detail=link.detail,
            )
        return graph

    def clusters(self) -> List[List[str]]:
        """Connected components with two or more nodes, largest first."""
        graph = self.to_networkx()
        components = [
            sorted(c) for c in nx.connected_components(graph) if len(c) >= 2
        ]
        return sorted(components, key=lambda c: (-len(c), c))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "links": [l.to_dict() for l in self.links],
        }


@dataclass
class AnalysisSummary:
    """Ranked pair evidence plus run totals."""
    pairs: List[PairEvidence] = field(default_factory=list)
    total_transactions_scanned: int = 0
    unique_counterparty_count: int = 0
    confidence_score: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "connectedPairs": [p.to_dict() for p in self.pairs],
            "totalTransactionsScanned": self.total_transactions_scanned,
            "uniqueCounterparties": self.unique_counterparty_count,
            "confidenceScore": self.confidence_score,
        }


@dataclass
class AnalysisResult:
    """Output of one analysis run."""
    graph: ConnectionGraph
    summary: AnalysisSummary
    monitored_entities: List[str] = field(default_factory=list)
    analyzed_at: float = field(default_factory=time.time)
    analysis_time_ms: float = 0.0
