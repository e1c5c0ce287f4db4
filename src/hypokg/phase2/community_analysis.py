"""
Community and centrality analysis of the concept graph.

Both computations run once over the whole graph. Detection and scoring sit
behind small interfaces so the Louvain and betweenness defaults can be
swapped without touching the consumers, which only read the resulting
concept id -> community and concept id -> centrality maps.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Set

import networkx as nx

from ..phase1.concept_extraction import ConceptNode
from ..utils.config import AnalysisConfig
from ..utils.logging import LoggerMixin
from .graph_construction import KnowledgeGraph


class GraphNotAnalyzedError(RuntimeError):
    """Raised when community or centrality data is read before analyze()."""


def _label_communities(communities: Iterable[Set[str]]) -> Dict[str, int]:
    # Largest community first, ties by smallest member id
    ordered = sorted(
        (sorted(community) for community in communities if community),
        key=lambda members: (-len(members), members[0])
    )
    mapping = {}
    for index, members in enumerate(ordered):
        for node in members:
            mapping[node] = index
    return mapping


class CommunityDetector(ABC):
    """Partitions an undirected graph into communities."""

    @abstractmethod
    def detect(self, graph: nx.Graph) -> Dict[str, int]:
        """Return a mapping of node id -> community index."""


class LouvainCommunityDetector(CommunityDetector):
    """Louvain multilevel modularity optimization."""

    def __init__(self, resolution: float = 1.0, seed: Optional[int] = None):
        self.resolution = resolution
        self.seed = seed

    def detect(self, graph: nx.Graph) -> Dict[str, int]:
        if graph.number_of_nodes() == 0:
            return {}
        if graph.number_of_edges() == 0:
            return _label_communities({node} for node in graph.nodes)
        communities = nx.community.louvain_communities(
            graph, weight="weight", resolution=self.resolution, seed=self.seed
        )
        return _label_communities(communities)


class GreedyModularityCommunityDetector(CommunityDetector):
    """Clauset-Newman-Moore greedy modularity maximization."""

    def __init__(self, resolution: float = 1.0):
        self.resolution = resolution

    def detect(self, graph: nx.Graph) -> Dict[str, int]:
        if graph.number_of_nodes() == 0:
            return {}
        if graph.number_of_edges() == 0:
            return _label_communities({node} for node in graph.nodes)
        communities = nx.community.greedy_modularity_communities(
            graph, weight="weight", resolution=self.resolution
        )
        return _label_communities(communities)


class CentralityScorer(ABC):
    """Scores every node of an undirected graph."""

    @abstractmethod
    def score(self, graph: nx.Graph) -> Dict[str, float]:
        """Return a mapping of node id -> centrality."""


class BetweennessCentralityScorer(CentralityScorer):
    """Shortest-path betweenness over unweighted hops."""

    def __init__(self, normalized: bool = True):
        self.normalized = normalized

    def score(self, graph: nx.Graph) -> Dict[str, float]:
        if graph.number_of_nodes() == 0:
            return {}
        return nx.betweenness_centrality(graph, normalized=self.normalized)


class GraphAnalyzer(LoggerMixin):
    """
    Annotates a knowledge graph with communities and centrality.
    
    ``analyze()`` must run before any lookup; lookups made earlier raise
    GraphNotAnalyzedError. The maps are owned here and shared read-only
    with the path sampler and novelty scorer.
    """
    
    def __init__(
        self,
        knowledge_graph: KnowledgeGraph,
        community_detector: Optional[CommunityDetector] = None,
        centrality_scorer: Optional[CentralityScorer] = None,
        config: Optional[AnalysisConfig] = None
    ):
        self.knowledge_graph = knowledge_graph
        self.config = config or AnalysisConfig()
        self.community_detector = community_detector or LouvainCommunityDetector(
            resolution=self.config.resolution, seed=self.config.seed
        )
        self.centrality_scorer = centrality_scorer or BetweennessCentralityScorer(
            normalized=self.config.normalized_centrality
        )
        self._communities: Optional[Dict[str, int]] = None
        self._centrality: Optional[Dict[str, float]] = None
    
    @property
    def is_analyzed(self) -> bool:
        return self._communities is not None and self._centrality is not None
    
    def analyze(self) -> "GraphAnalyzer":
        """Detect communities and compute centrality for the whole graph."""
        self.logger.info("Analyzing graph structure...")
        undirected = self.knowledge_graph.to_undirected()
        
        self._communities = self.community_detector.detect(undirected)
        self._centrality = self.centrality_scorer.score(undirected)
        self.logger.info(f"Detected {len(set(self._communities.values()))} communities")
        
        top = self.top_central(self.config.top_bridges_logged)
        if top:
            self.logger.info("Top bridge concepts:")
            for node in top:
                self.logger.info(f"  - {node.label} (centrality: {self._centrality[node.id]:.4f})")
        return self
    
    def _require_analysis(self) -> None:
        if not self.is_analyzed:
            raise GraphNotAnalyzedError(
                "Graph has not been analyzed. Call analyze() before querying communities or centrality."
            )
    
    @property
    def communities(self) -> Dict[str, int]:
        self._require_analysis()
        return self._communities
    
    @property
    def centrality(self) -> Dict[str, float]:
        self._require_analysis()
        return self._centrality
    
    @property
    def num_communities(self) -> int:
        return len(set(self.communities.values()))
    
    def get_community(self, concept_id: str) -> Optional[int]:
        """Community id of a concept, None for an unknown concept."""
        return self.communities.get(concept_id)
    
    def top_central(self, k: int) -> List[ConceptNode]:
        """
        Top-k concepts by centrality.

        Ties go to the higher frequency, then to the smaller id.
        """
        centrality = self.centrality
        nodes = self.knowledge_graph.nodes
        ranked = sorted(
            (concept_id for concept_id in centrality if concept_id in nodes),
            key=lambda concept_id: (
                -centrality[concept_id], -nodes[concept_id].frequency, concept_id
            )
        )
        return [nodes[concept_id] for concept_id in ranked[:max(k, 0)]]
    
    def community_members(self, community_id: int, limit: int = 20) -> List[ConceptNode]:
        """Concepts of one community in graph order, capped at ``limit``."""
        communities = self.communities
        members = [
            node for node_id, node in self.knowledge_graph.nodes.items()
            if communities.get(node_id) == community_id
        ]
        return members[:max(limit, 0)]
