"""
Co-occurrence graph construction.

Concepts that share a paper are linked by an edge whose weight normalizes the
number of shared papers by the rarer concept's frequency, so tightly
co-occurring rare pairs stand out even next to globally popular concepts.
The resulting nodes and edges are assembled into a networkx DiGraph keyed by
concept id.
"""

from collections import defaultdict
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

import networkx as nx

from ..phase1.concept_extraction import ConceptNode, ConceptExtractor
from ..phase1.paper_store import Paper
from ..utils.config import GraphConfig, ExtractionConfig
from ..utils.logging import LoggerMixin


@dataclass
class ConceptEdge:
    """Weighted co-occurrence relationship between two concepts."""
    source: str
    target: str
    type: str = "relates_to"
    weight: float = 0.0
    confidence: float = 0.0
    evidence: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)


@dataclass
class GraphMetadata:
    """Metadata for a constructed knowledge graph."""
    paper_count: int
    concept_count: int
    edge_count: int
    density: float
    created_at: datetime = field(default_factory=datetime.now)
    last_updated: datetime = field(default_factory=datetime.now)


@dataclass
class KnowledgeGraph:
    """
    Concept nodes, co-occurrence edges and the DiGraph that indexes them.

    Nodes and edges are addressed by concept id; the DiGraph stores each
    ConceptNode under the ``concept`` node attribute and each ConceptEdge
    under the ``edge`` edge attribute. Read-only once built.
    """
    nodes: Dict[str, ConceptNode]
    edges: List[ConceptEdge]
    metadata: GraphMetadata
    graph: nx.DiGraph

    def has_node(self, concept_id: str) -> bool:
        return concept_id in self.nodes

    def node(self, concept_id: str) -> ConceptNode:
        return self.nodes[concept_id]

    def edge(self, source: str, target: str) -> ConceptEdge:
        return self.graph.edges[source, target]["edge"]

    def successors(self, concept_id: str) -> List[str]:
        return list(self.graph.successors(concept_id))

    def to_undirected(self) -> nx.Graph:
        """Undirected view used for community detection and centrality."""
        undirected = nx.Graph()
        undirected.add_nodes_from(self.graph.nodes)
        for source, target, data in self.graph.edges(data=True):
            if not undirected.has_edge(source, target):
                undirected.add_edge(source, target, weight=data["weight"])
        return undirected

    def get_statistics(self) -> Dict[str, Any]:
        type_counts: Dict[str, int] = defaultdict(int)
        for node in self.nodes.values():
            type_counts[node.type.value] += 1
        return {
            "num_papers": self.metadata.paper_count,
            "num_concepts": self.metadata.concept_count,
            "num_edges": self.metadata.edge_count,
            "density": self.metadata.density,
            "concept_types": dict(type_counts),
        }


def graph_density(num_nodes: int, num_edges: int) -> float:
    if num_nodes < 2:
        return 0.0
    return num_edges / (num_nodes * (num_nodes - 1))


class CooccurrenceGraphBuilder(LoggerMixin):
    """
    Builds the knowledge graph from papers and aggregated concepts.
    
    For each pair of concepts sharing ``c`` papers:
    weight = c / min(freq), confidence = c / max(freq), and the edge is kept
    only when the weight exceeds the inclusion threshold.
    """
    
    def __init__(
        self,
        config: Optional[GraphConfig] = None,
        extractor: Optional[ConceptExtractor] = None,
        extraction_config: Optional[ExtractionConfig] = None
    ):
        self.config = config or GraphConfig()
        self.extractor = extractor or ConceptExtractor(extraction_config)
    
    def count_cooccurrences(
        self,
        papers: Iterable[Paper],
        concepts: Dict[str, ConceptNode]
    ) -> Dict[Tuple[str, str], List[str]]:
        """
        Shared papers per concept pair.

        Pairs are keyed in concept order and papers are listed in corpus
        order, so the count of a pair is the length of its list.
        """
        paper_concepts: Dict[str, List[str]] = defaultdict(list)
        for concept_id, concept in concepts.items():
            for paper_id in dict.fromkeys(concept.papers):
                paper_concepts[paper_id].append(concept_id)
        
        shared: Dict[Tuple[str, str], List[str]] = defaultdict(list)
        for paper in papers:
            present = paper_concepts.get(paper.id, [])
            for i, source in enumerate(present):
                for target in present[i + 1:]:
                    shared[(source, target)].append(paper.id)
        return shared
    
    def build_relationships(
        self,
        papers: Iterable[Paper],
        concepts: Dict[str, ConceptNode]
    ) -> List[ConceptEdge]:
        """Weighted co-occurrence edges for every significant concept pair."""
        edges = []
        for (source, target), evidence in self.count_cooccurrences(papers, concepts).items():
            source_freq = concepts[source].frequency
            target_freq = concepts[target].frequency
            if min(source_freq, target_freq) <= 0:
                self.logger.debug(f"Skipping pair {source}/{target} with zero frequency")
                continue
            
            count = len(evidence)
            weight = count / min(source_freq, target_freq)
            confidence = count / max(source_freq, target_freq)
            if weight <= self.config.min_edge_weight:
                continue
            
            edges.append(ConceptEdge(
                source=source,
                target=target,
                type=self.config.default_relation,
                weight=weight,
                confidence=confidence,
                evidence=list(evidence),
            ))
            if self.config.bidirectional_edges:
                edges.append(ConceptEdge(
                    source=target,
                    target=source,
                    type=self.config.default_relation,
                    weight=weight,
                    confidence=confidence,
                    evidence=list(evidence),
                ))
        
        self.logger.info(f"Built {len(edges)} relationships between concepts")
        return edges
    
    def assemble(
        self,
        concepts: Dict[str, ConceptNode],
        edges: List[ConceptEdge]
    ) -> nx.DiGraph:
        """Add every concept as a node and every edge as a directed edge."""
        graph = nx.DiGraph()
        for concept in concepts.values():
            graph.add_node(concept.id, concept=concept)
        
        for edge in edges:
            if edge.source not in graph or edge.target not in graph:
                self.logger.warning(f"Edge {edge.source}->{edge.target} references an unknown concept")
                continue
            # First write wins
            if graph.has_edge(edge.source, edge.target):
                continue
            graph.add_edge(edge.source, edge.target, edge=edge, weight=edge.weight)
        
        return graph
    
    def build_graph(
        self,
        papers: Iterable[Paper],
        concepts: Optional[Dict[str, ConceptNode]] = None
    ) -> KnowledgeGraph:
        """
        Build the complete knowledge graph.
        
        Args:
            papers: The paper corpus
            concepts: Pre-aggregated concepts; extracted from the papers when omitted
            
        Returns:
            The assembled knowledge graph
        """
        papers = list(papers)
        self.logger.info(f"Building knowledge graph from {len(papers)} papers")
        
        if concepts is None:
            concepts = self.extractor.extract_concepts(papers)
        edges = self.build_relationships(papers, concepts)
        graph = self.assemble(concepts, edges)
        
        now = datetime.now()
        metadata = GraphMetadata(
            paper_count=len(papers),
            concept_count=len(concepts),
            edge_count=len(edges),
            density=graph_density(len(concepts), len(edges)),
            created_at=now,
            last_updated=now,
        )
        
        self.logger.info(
            f"Knowledge graph built: {metadata.concept_count} concepts, "
            f"{metadata.edge_count} relationships, density {metadata.density:.6f}"
        )
        return KnowledgeGraph(nodes=concepts, edges=edges, metadata=metadata, graph=graph)
