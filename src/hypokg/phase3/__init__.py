"""
Phase 3: Graph Reasoning

Community-biased path sampling, novelty scoring, and the GraphReasoner
facade handed to the hypothesis-generation workflow.
"""

from .path_sampling import GraphPath, PathSampler
from .novelty_scoring import NoveltyScorer, NoveltyComponents, rank_paths
from .graph_reasoner import GraphReasoner, GraphNotBuiltError

__all__ = [
    "GraphPath",
    "PathSampler",
    "NoveltyScorer",
    "NoveltyComponents",
    "rank_paths",
    "GraphReasoner",
    "GraphNotBuiltError",
]
