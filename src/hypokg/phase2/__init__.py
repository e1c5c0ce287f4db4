"""
Phase 2: Graph Engine

Co-occurrence graph construction and the community/centrality annotations
the reasoning phase consumes.
"""

from .graph_construction import (
    ConceptEdge,
    GraphMetadata,
    KnowledgeGraph,
    CooccurrenceGraphBuilder,
    graph_density,
)

from .community_analysis import (
    GraphAnalyzer,
    GraphNotAnalyzedError,
    CommunityDetector,
    LouvainCommunityDetector,
    GreedyModularityCommunityDetector,
    CentralityScorer,
    BetweennessCentralityScorer,
)

__all__ = [
    "ConceptEdge",
    "GraphMetadata",
    "KnowledgeGraph",
    "CooccurrenceGraphBuilder",
    "graph_density",
    "GraphAnalyzer",
    "GraphNotAnalyzedError",
    "CommunityDetector",
    "LouvainCommunityDetector",
    "GreedyModularityCommunityDetector",
    "CentralityScorer",
    "BetweennessCentralityScorer",
]
