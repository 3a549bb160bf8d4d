"""
Node/Link Registry - Deduplicated Connection Graph Storage
=========================================================

Owns every node and link observed during one analysis run. Repeated
observations are merged, never duplicated:

- Nodes gain +1 weight per repeat observation and may only be promoted
  (COUNTERPARTY/PROGRAM -> MIDDLEMAN).
- Links are keyed by the canonical (sorted) pair key, accumulate weight
  and only take on a stronger category (DIRECT, MIDDLEMAN).

upsert_node/upsert_link are the only mutation surface.
"""

from typing import Dict, Iterator, List, Optional

import structlog

from .models import (
    GraphLink,
    GraphNode,
    LinkCategory,
    NodeCategory,
    promote,
)

logger = structlog.get_logger(__name__)

INPUT_NODE_WEIGHT = 25.0
MIDDLEMAN_NODE_WEIGHT = 15.0
DEFAULT_NODE_WEIGHT = 5.0


def canonical_pair_key(a: str, b: str) -> str:
    """Order-independent key for an undirected pair."""
    first, second = sorted((a, b))
    return f"{first}-{second}"


def short_label(identifier: str) -> str:
    """Display truncation: first 4 and last 4 characters."""
    return f"{identifier[:4]}...{identifier[-4:]}"


def _base_weight(category: NodeCategory) -> float:
    if category == NodeCategory.INPUT:
        return INPUT_NODE_WEIGHT
    if category == NodeCategory.MIDDLEMAN:
        return MIDDLEMAN_NODE_WEIGHT
    return DEFAULT_NODE_WEIGHT


class NodeLinkRegistry:
    """Deduplicating store of graph nodes and links for one run."""

    def __init__(self):
        self._nodes: Dict[str, GraphNode] = {}
        self._links: Dict[str, GraphLink] = {}

    def add_input_node(self, entity: str) -> GraphNode:
        """Register a monitored wallet as an INPUT node."""
        if entity not in self._nodes:
            self._nodes[entity] = GraphNode(
                id=entity,
                category=NodeCategory.INPUT,
                label=short_label(entity),
                weight=INPUT_NODE_WEIGHT,
            )
        return self._nodes[entity]

    def upsert_node(self, node_id: str, category: NodeCategory) -> GraphNode:
        """Create a node at its base weight, or bump and maybe promote it."""
        node = self._nodes.get(node_id)

        if node is None:
            node = GraphNode(
                id=node_id,
                category=category,
                label=short_label(node_id),
                weight=_base_weight(category),
            )
            self._nodes[node_id] = node
        else:
            node.weight += 1
            upgraded = promote(node.category, category)
            if upgraded != node.category:
                logger.debug(
                    "node_promoted",
                    node=node.label,
                    previous=node.category.value,
                    category=upgraded.value,
                )
                node.category = upgraded

        return node

    def upsert_link(
        self,
        a: str,
        b: str,
        category: LinkCategory,
        weight: float = 1.0,
        detail: Optional[str] = None,
    ) -> Optional[GraphLink]:
        """Create or accumulate the undirected link a-b. Self-links are ignored."""
        if a == b:
            return None

        key = canonical_pair_key(a, b)
        link = self._links.get(key)

        if link is None:
            link = GraphLink(
                id=key,
                source=a,
                target=b,
                category=category,
                weight=weight,
                detail=detail,
            )
            self._links[key] = link
        else:
            link.weight += weight
            link.category = promote(link.category, category)

        return link

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        return self._nodes.get(node_id)

    def get_link(self, a: str, b: str) -> Optional[GraphLink]:
        return self._links.get(canonical_pair_key(a, b))

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._nodes

    def iter_nodes(self) -> Iterator[GraphNode]:
        return iter(self._nodes.values())

    def iter_links(self) -> Iterator[GraphLink]:
        return iter(self._links.values())

    @property
    def nodes(self) -> List[GraphNode]:
        return list(self._nodes.values())

    @property
    def links(self) -> List[GraphLink]:
        return list(self._links.values())
