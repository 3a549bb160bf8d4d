"""
Graph Pruner - Reduce the Registry to What Is Worth Drawing
===========================================================

Keeps:
- every monitored wallet (always, even with zero links)
- every link between two monitored wallets
- links to program nodes
- links to external entities touched by two or more distinct monitored
  wallets, per the interaction log

Everything else (single-touch counterparties) is dropped together with
any node no kept link references.

The hub check reads the interaction log, not the node category. Program
nodes have no log entry and are matched by category instead.
"""

from typing import Sequence

import structlog

from .interaction_indexer import InteractionLog
from .models import ConnectionGraph, GraphLink, NodeCategory
from .registry import NodeLinkRegistry

logger = structlog.get_logger(__name__)

MIN_SHARED_INTERACTORS = 2


class GraphPruner:
    """Builds the renderable ConnectionGraph from a populated registry."""

    def __init__(self, monitored_entities: Sequence[str]):
        self.monitored_entities = list(monitored_entities)
        self._monitored = set(self.monitored_entities)

    def prune(
        self,
        registry: NodeLinkRegistry,
        interaction_log: InteractionLog,
    ) -> ConnectionGraph:
        relevant = set(self.monitored_entities)
        kept_links = []

        for link in registry.iter_links():
            if self._keep(link, registry, interaction_log):
                relevant.update(link.endpoints)
                kept_links.append(link)

        nodes = [n for n in registry.iter_nodes() if n.id in relevant]

        logger.debug(
            "graph_pruned",
            nodes_before=len(registry.nodes),
            nodes_after=len(nodes),
            links_before=len(registry.links),
            links_after=len(kept_links),
        )
        return ConnectionGraph(nodes=nodes, links=kept_links)

    def _keep(
        self,
        link: GraphLink,
        registry: NodeLinkRegistry,
        interaction_log: InteractionLog,
    ) -> bool:
        source, target = link.endpoints
        if source in self._monitored and target in self._monitored:
            return True

        other = target if source in self._monitored else source

        node = registry.get_node(other)
        if node is not None and node.category == NodeCategory.PROGRAM:
            return True

        return len(interaction_log.distinct_interactors(other)) >= MIN_SHARED_INTERACTORS
