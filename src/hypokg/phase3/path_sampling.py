"""
Path sampling over the concept graph.

Two strategies share one output type:
- targeted: a single bidirectional shortest path between two concepts
- diverse: community-biased random walks from one concept, deduplicated by
  node sequence under a bounded attempt budget
"""

import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import networkx as nx

from ..phase1.concept_extraction import ConceptNode
from ..phase2.graph_construction import ConceptEdge, KnowledgeGraph
from ..phase2.community_analysis import GraphAnalyzer
from ..utils.config import SamplingConfig
from ..utils.logging import LoggerMixin


@dataclass
class GraphPath:
    """An ordered walk through the concept graph."""
    nodes: List[ConceptNode]
    edges: List[ConceptEdge]
    total_weight: float
    novelty: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def length(self) -> int:
        """Number of concepts on the path."""
        return len(self.nodes)

    @property
    def node_ids(self) -> List[str]:
        return [node.id for node in self.nodes]

    @property
    def mean_edge_weight(self) -> float:
        return self.total_weight / len(self.edges) if self.edges else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
            "length": self.length,
            "total_weight": self.total_weight,
            "novelty": self.novelty,
        }


class PathSampler(LoggerMixin):
    """
    Samples paths from an analyzed knowledge graph.
    
    The random source is injectable so that a seeded sampler reproduces the
    same walks for the same inputs.
    """
    
    def __init__(
        self,
        knowledge_graph: KnowledgeGraph,
        analyzer: GraphAnalyzer,
        config: Optional[SamplingConfig] = None,
        rng: Optional[random.Random] = None
    ):
        self.knowledge_graph = knowledge_graph
        self.analyzer = analyzer
        self.config = config or SamplingConfig()
        self.rng = rng or random.Random(self.config.seed)
    
    def build_path(self, node_ids: Sequence[str]) -> GraphPath:
        """Resolve a node id sequence into nodes, connecting edges and total weight."""
        nodes = [self.knowledge_graph.node(node_id) for node_id in node_ids]
        edges = [
            self.knowledge_graph.edge(source, target)
            for source, target in zip(node_ids, node_ids[1:])
        ]
        return GraphPath(
            nodes=nodes,
            edges=edges,
            total_weight=sum(edge.weight for edge in edges),
        )
    
    def shortest_path(self, source_id: str, target_id: str) -> List[GraphPath]:
        """
        Shortest path between two concepts.
        
        Returns:
            A one-element list, or an empty list when the concepts are not
            connected or unknown.
        """
        try:
            node_ids = nx.bidirectional_shortest_path(
                self.knowledge_graph.graph, source_id, target_id
            )
        except (nx.NetworkXNoPath, nx.NodeNotFound) as e:
            self.logger.info(f"No connection from {source_id} to {target_id}: {e}")
            return []
        
        if len(node_ids) < 2:
            return []
        return [self.build_path(node_ids)]
    
    def select_next_node(self, current_id: str, candidates: List[str]) -> str:
        """Weighted draw favouring strong edges that leave the current community."""
        communities = self.analyzer.communities
        current_community = communities.get(current_id)
        
        scores = []
        for candidate in candidates:
            edge = self.knowledge_graph.edge(current_id, candidate)
            bonus = (
                self.config.cross_community_bonus
                if communities.get(candidate) != current_community else 1.0
            )
            scores.append(edge.weight * bonus)
        
        total = sum(scores)
        if total <= 0:
            return self.rng.choice(candidates)
        
        threshold = self.rng.random() * total
        for candidate, score in zip(candidates, scores):
            threshold -= score
            if threshold <= 0:
                return candidate
        return candidates[-1]
    
    def random_walk(self, start_id: str, max_length: int) -> List[str]:
        """Walk of at most ``max_length`` nodes that never revisits a node."""
        path = [start_id]
        visited = {start_id}
        current = start_id
        
        while len(path) < max_length:
            candidates = [
                neighbor for neighbor in self.knowledge_graph.successors(current)
                if neighbor not in visited
            ]
            if not candidates:
                break
            
            current = self.select_next_node(current, candidates)
            path.append(current)
            visited.add(current)
        
        return path
    
    def sample_diverse_paths(
        self,
        source_id: str,
        max_length: int,
        max_paths: int
    ) -> List[GraphPath]:
        """
        Unique random walks from a source concept.
        
        Stops after ``max_paths`` unique walks or ``attempt_multiplier *
        max_paths`` attempts, whichever comes first; fewer paths than
        requested is a normal outcome. Paths keep discovery order.
        """
        if not self.knowledge_graph.has_node(source_id):
            self.logger.warning(f"Unknown source concept: {source_id}")
            return []
        
        paths: List[GraphPath] = []
        seen = set()
        max_attempts = max_paths * self.config.attempt_multiplier
        attempts = 0
        
        while len(paths) < max_paths and attempts < max_attempts:
            attempts += 1
            walk = self.random_walk(source_id, max_length)
            if len(walk) < 2:
                continue
            
            key = tuple(walk)
            if key in seen:
                continue
            seen.add(key)
            paths.append(self.build_path(walk))
        
        self.logger.debug(
            f"Sampled {len(paths)} unique paths from {source_id} in {attempts} attempts"
        )
        return paths
