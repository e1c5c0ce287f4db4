"""
Test configuration and fixtures for HypoKG test suite.

Provides the shared paper corpus, graph factories, and an analyzed reasoner.
"""

import random
from typing import Dict, List, Optional, Tuple

import pytest

from hypokg.phase1.concept_extraction import ConceptNode
from hypokg.phase1.paper_store import Paper
from hypokg.phase2.community_analysis import CommunityDetector, CentralityScorer
from hypokg.phase2.graph_construction import (
    ConceptEdge,
    CooccurrenceGraphBuilder,
    GraphMetadata,
    KnowledgeGraph,
    graph_density,
)
from hypokg.phase3.graph_reasoner import GraphReasoner


@pytest.fixture
def paper_a():
    """Repeats 'neural network' and 'protein folding' twice each."""
    return Paper(
        id="A",
        title="Structure prediction",
        abstract=(
            "neural network predicts protein folding. "
            "neural network explains protein folding."
        ),
        authors=["Smith J"],
        year=2023,
    )


@pytest.fixture
def paper_b():
    """Repeats 'neural network' and 'deep learning' twice each."""
    return Paper(
        id="B",
        title="Image analysis",
        abstract=(
            "neural network enables deep learning. "
            "neural network improves deep learning."
        ),
        authors=["Doe A"],
        year=2024,
    )


@pytest.fixture
def paper_c():
    """Contributes a single concept that co-occurs with nothing."""
    return Paper(
        id="C",
        title="",
        abstract="quantum dots emit light. quantum dots absorb light.",
        year=2022,
    )


@pytest.fixture
def scenario_papers(paper_a, paper_b):
    return [paper_a, paper_b]


@pytest.fixture
def corpus_papers(paper_a, paper_b, paper_c):
    return [paper_a, paper_b, paper_c]


@pytest.fixture
def scenario_reasoner(corpus_papers):
    """Analyzed reasoner over the three-paper corpus with a seeded random source."""
    reasoner = GraphReasoner(rng=random.Random(1234))
    reasoner.build_graph(corpus_papers)
    reasoner.analyze()
    return reasoner


class FixedCommunityDetector(CommunityDetector):
    """Returns a preset partition."""

    def __init__(self, mapping: Dict[str, int]):
        self.mapping = mapping

    def detect(self, graph):
        return {node: self.mapping.get(node, 0) for node in graph.nodes}


class FixedCentralityScorer(CentralityScorer):
    """Returns preset scores."""

    def __init__(self, scores: Dict[str, float]):
        self.scores = scores

    def score(self, graph):
        return {node: self.scores.get(node, 0.0) for node in graph.nodes}


@pytest.fixture
def graph_factory():
    """
    Build a KnowledgeGraph from undirected (a, b) pairs.

    Every pair becomes two directed edges of the given weight.
    """
    def make(
        pairs: List[Tuple[str, str]],
        frequencies: Optional[Dict[str, int]] = None,
        weights: Optional[Dict[Tuple[str, str], float]] = None,
        isolated: Optional[List[str]] = None,
    ) -> KnowledgeGraph:
        frequencies = frequencies or {}
        weights = weights or {}
        concepts: Dict[str, ConceptNode] = {}
        for node_id in [n for pair in pairs for n in pair] + (isolated or []):
            if node_id not in concepts:
                concepts[node_id] = ConceptNode(
                    id=node_id,
                    label=node_id.replace("_", " "),
                    papers=["p1"],
                    frequency=frequencies.get(node_id, 2),
                )
        
        edges = []
        for a, b in pairs:
            weight = weights.get((a, b), 0.5)
            edges.append(ConceptEdge(a, b, weight=weight, confidence=weight, evidence=["p1"]))
            edges.append(ConceptEdge(b, a, weight=weight, confidence=weight, evidence=["p1"]))
        
        graph = CooccurrenceGraphBuilder().assemble(concepts, edges)
        metadata = GraphMetadata(
            paper_count=1,
            concept_count=len(concepts),
            edge_count=len(edges),
            density=graph_density(len(concepts), len(edges)),
        )
        return KnowledgeGraph(nodes=concepts, edges=edges, metadata=metadata, graph=graph)
    
    return make


@pytest.fixture
def two_cluster_pairs():
    """Two triangles joined by the node_c -- node_d bridge."""
    return [
        ("node_a", "node_b"), ("node_b", "node_c"), ("node_a", "node_c"),
        ("node_c", "node_d"),
        ("node_d", "node_e"), ("node_e", "node_f"), ("node_d", "node_f"),
    ]


@pytest.fixture
def sample_csv(tmp_path):
    """CSV dataset mixing canonical and legacy column names."""
    csv_path = tmp_path / "papers.csv"
    csv_path.write_text(
        "pmid,ArticleTitle,abstract,authors,PubDate,journal,keywords\n"
        "111,Structure prediction,neural network predicts protein folding. "
        "neural network explains protein folding.,Smith J; Lee K,2023 Mar,Nature,structure; folding\n"
        ",Image analysis,neural network enables deep learning. "
        "neural network improves deep learning.,Doe A,unknown,,\n"
    )
    return csv_path
