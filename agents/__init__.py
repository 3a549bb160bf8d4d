"""Agent modules for NEXUS.

This package contains the wallet connection analysis components:
- connection_analyzer: Heuristic relationship inference between monitored wallets
- insight_generator: Narrative assessment of an analysis summary
"""

from . import connection_analyzer, insight_generator

__all__ = [
    'connection_analyzer',
    'insight_generator',
]
