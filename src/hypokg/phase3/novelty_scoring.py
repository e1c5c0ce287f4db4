"""
Novelty scoring for sampled graph paths.

A path scores as more novel when it crosses communities, rides on weak
(rare) associations, is longer, and avoids hub concepts.
"""

from dataclasses import dataclass, asdict
from typing import Dict, List, Mapping, Optional

import numpy as np

from ..utils.config import NoveltyConfig
from ..utils.logging import LoggerMixin
from .path_sampling import GraphPath


@dataclass
class NoveltyComponents:
    """Per-factor breakdown of a novelty score, each factor in [0, 1]."""
    cross_community: float
    edge_weakness: float
    length: float
    bridge_avoidance: float
    overall: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


class NoveltyScorer(LoggerMixin):
    """
    Scores paths from the analyzer's community and centrality maps.
    
    Without community data every path gets the neutral score. Without
    centrality data the mean centrality is taken as 0.5.
    """
    
    def __init__(
        self,
        communities: Optional[Mapping[str, int]] = None,
        centrality: Optional[Mapping[str, float]] = None,
        config: Optional[NoveltyConfig] = None
    ):
        self.communities = communities
        self.centrality = centrality
        self.config = config or NoveltyConfig()
    
    def components(self, path: GraphPath) -> Optional[NoveltyComponents]:
        """Factor breakdown, or None when the path cannot be scored."""
        if not self.communities or len(path.nodes) < 2 or not path.edges:
            return None
        
        node_ids = path.node_ids
        changes = sum(
            1 for a, b in zip(node_ids, node_ids[1:])
            if self.communities.get(a) != self.communities.get(b)
        )
        cross_community = changes / (len(node_ids) - 1)
        
        edge_weakness = 1.0 - min(path.total_weight / len(path.edges), 1.0)
        
        length = min(path.length / self.config.length_cap, 1.0)
        
        if self.centrality is None:
            mean_centrality = 0.5
        else:
            mean_centrality = float(np.mean([self.centrality.get(n, 0.0) for n in node_ids]))
        bridge_avoidance = 1.0 - min(mean_centrality * self.config.centrality_scale, 1.0)
        
        weights = self.config.weights
        overall = (
            cross_community * weights.cross_community
            + edge_weakness * weights.edge_weakness
            + length * weights.length
            + bridge_avoidance * weights.bridge_avoidance
        )
        
        return NoveltyComponents(
            cross_community=cross_community,
            edge_weakness=edge_weakness,
            length=length,
            bridge_avoidance=bridge_avoidance,
            overall=float(np.clip(overall, 0.0, 1.0)),
        )
    
    def score(self, path: GraphPath) -> float:
        """Novelty of a path in [0, 1]."""
        components = self.components(path)
        if components is None:
            return self.config.neutral_score
        return components.overall
    
    def score_paths(self, paths: List[GraphPath]) -> List[GraphPath]:
        """Set the novelty of each path in place."""
        for path in paths:
            path.novelty = self.score(path)
        if paths:
            scores = [path.novelty for path in paths]
            self.logger.debug(
                f"Scored {len(paths)} paths: mean novelty {np.mean(scores):.3f}, max {max(scores):.3f}"
            )
        return paths


def rank_paths(paths: List[GraphPath], max_results: Optional[int] = None) -> List[GraphPath]:
    """Sort by descending novelty, ties in input order, truncated to ``max_results``."""
    ranked = sorted(paths, key=lambda path: -path.novelty)
    if max_results is not None:
        ranked = ranked[:max_results]
    return ranked
