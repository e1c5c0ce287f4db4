"""
Graph reasoning engine for hypothesis seeding.

GraphReasoner is the entry point the hypothesis-generation workflow talks
to: it builds the knowledge graph from papers, runs the community and
centrality analysis, and serves concept search, bridge concepts and ranked
novel paths.
"""

import json
import random
from pathlib import Path
from typing import Iterable, List, Optional, Union

from ..phase1.concept_extraction import ConceptExtractor, ConceptNode
from ..phase1.paper_store import Paper, PaperStore, load_papers_from_csv
from ..phase2.community_analysis import (
    CentralityScorer,
    CommunityDetector,
    GraphAnalyzer,
    GraphNotAnalyzedError,
)
from ..phase2.graph_construction import CooccurrenceGraphBuilder, KnowledgeGraph
from ..utils.config import HypoKGConfig
from ..utils.logging import LoggerMixin
from .novelty_scoring import NoveltyScorer, rank_paths
from .path_sampling import GraphPath, PathSampler


class GraphNotBuiltError(RuntimeError):
    """Raised when the reasoner is queried before a graph exists."""


class GraphReasoner(LoggerMixin):
    """
    Builds, analyzes and queries one knowledge graph.
    
    Typical use::
    
        reasoner = GraphReasoner(config)
        reasoner.build_graph(papers)
        reasoner.analyze()
        paths = reasoner.find_paths("neural_network", path_length=4, max_results=5)
    """
    
    def __init__(
        self,
        config: Optional[HypoKGConfig] = None,
        knowledge_graph: Optional[KnowledgeGraph] = None,
        community_detector: Optional[CommunityDetector] = None,
        centrality_scorer: Optional[CentralityScorer] = None,
        rng: Optional[random.Random] = None
    ):
        self.config = config or HypoKGConfig()
        self.papers = PaperStore()
        self.builder = CooccurrenceGraphBuilder(
            config=self.config.graph,
            extractor=ConceptExtractor(self.config.extraction),
        )
        self.community_detector = community_detector
        self.centrality_scorer = centrality_scorer
        self.rng = rng or random.Random(self.config.sampling.seed)
        
        self.knowledge_graph: Optional[KnowledgeGraph] = None
        self.analyzer: Optional[GraphAnalyzer] = None
        self.sampler: Optional[PathSampler] = None
        if knowledge_graph is not None:
            self._attach(knowledge_graph)
    
    def _attach(self, knowledge_graph: KnowledgeGraph) -> None:
        self.knowledge_graph = knowledge_graph
        self.analyzer = GraphAnalyzer(
            knowledge_graph,
            community_detector=self.community_detector,
            centrality_scorer=self.centrality_scorer,
            config=self.config.analysis,
        )
        self.sampler = PathSampler(
            knowledge_graph, self.analyzer, config=self.config.sampling, rng=self.rng
        )
    
    # ------------------------------------------------------------------ build
    
    def build_graph(self, papers: Iterable[Paper]) -> KnowledgeGraph:
        """Build the knowledge graph from a paper corpus, replacing any previous one."""
        self.papers = PaperStore(papers)
        knowledge_graph = self.builder.build_graph(list(self.papers))
        self._attach(knowledge_graph)
        return knowledge_graph
    
    def build_graph_from_csv(self, csv_path: Union[str, Path]) -> KnowledgeGraph:
        papers = load_papers_from_csv(
            csv_path, show_progress=self.config.extraction.show_progress
        )
        return self.build_graph(papers)
    
    def _require_graph(self) -> KnowledgeGraph:
        if self.knowledge_graph is None:
            raise GraphNotBuiltError("No knowledge graph. Call build_graph() first.")
        return self.knowledge_graph
    
    def _require_analyzer(self) -> GraphAnalyzer:
        self._require_graph()
        if not self.analyzer.is_analyzed:
            raise GraphNotAnalyzedError(
                "Graph has not been analyzed. Call analyze() before sampling or community queries."
            )
        return self.analyzer
    
    # ---------------------------------------------------------------- analyze
    
    def analyze(self) -> GraphAnalyzer:
        """Compute communities and centrality; required before path queries."""
        self._require_graph()
        return self.analyzer.analyze()
    
    @property
    def is_analyzed(self) -> bool:
        return self.analyzer is not None and self.analyzer.is_analyzed
    
    # ---------------------------------------------------------------- queries
    
    def search_concepts(self, keywords: Iterable[str]) -> List[ConceptNode]:
        """
        Concepts whose label contains any keyword, case-insensitively.
        
        Sorted by descending frequency; equal frequencies keep graph order.
        """
        knowledge_graph = self._require_graph()
        keywords_lower = [k.lower() for k in keywords if k and k.strip()]
        if not keywords_lower:
            return []
        
        results = [
            node for node in knowledge_graph.nodes.values()
            if any(k in node.label.lower() for k in keywords_lower)
        ]
        results.sort(key=lambda node: -node.frequency)
        
        if not results:
            self.logger.info(f"No concepts match {keywords_lower}")
        return results
    
    def find_paths(
        self,
        source_id: str,
        target_id: Optional[str] = None,
        path_length: Optional[int] = None,
        max_results: Optional[int] = None,
        min_novelty: Optional[float] = None
    ) -> List[GraphPath]:
        """
        Find paths from a concept, ranked by novelty.
        
        Args:
            source_id: Starting concept id
            target_id: If given, return the shortest path to this concept
            path_length: Maximum number of concepts per sampled walk
            max_results: Maximum number of paths returned
            min_novelty: Drop paths scoring below this value
            
        Returns:
            Paths sorted by descending novelty; empty when nothing connects
        """
        analyzer = self._require_analyzer()
        max_length = path_length if path_length is not None else self.config.sampling.path_length
        if max_results is None:
            max_results = self.config.sampling.max_results
        if max_length < 2:
            raise ValueError(f"path_length must be at least 2, got {max_length}")
        if max_results < 1:
            raise ValueError(f"max_results must be at least 1, got {max_results}")
        
        if target_id:
            paths = self.sampler.shortest_path(source_id, target_id)
        else:
            paths = self.sampler.sample_diverse_paths(source_id, max_length, max_results)
        
        scorer = NoveltyScorer(
            communities=analyzer.communities,
            centrality=analyzer.centrality,
            config=self.config.novelty,
        )
        scorer.score_paths(paths)
        
        if min_novelty is not None:
            paths = [path for path in paths if path.novelty >= min_novelty]
        
        ranked = rank_paths(paths, max_results)
        if not ranked:
            self.logger.info(f"No sufficiently novel path found from {source_id}")
        return ranked
    
    def find_bridge_concepts(self, top_n: int = 20) -> List[ConceptNode]:
        """Most central concepts, the likely bridges between research areas."""
        return self._require_analyzer().top_central(top_n)
    
    def get_community(self, concept_id: str) -> Optional[int]:
        return self._require_analyzer().get_community(concept_id)
    
    def get_community_concepts(self, community_id: int, limit: int = 20) -> List[ConceptNode]:
        return self._require_analyzer().community_members(community_id, limit)
    
    # ----------------------------------------------------------------- output
    
    def summarize_path(self, path: GraphPath) -> str:
        """Readable description of a path, used as hypothesis context."""
        communities = self._require_analyzer().communities
        
        lines = [f"Path through {path.length} concepts:"]
        for i, node in enumerate(path.nodes):
            line = f"  {i + 1}. {node.label} [community {communities.get(node.id)}]"
            if i < len(path.edges):
                edge = path.edges[i]
                line += f" --[{edge.type}, weight: {edge.weight:.3f}]--> "
            lines.append(line)
        
        lines.append("")
        lines.append(f"Novelty score: {path.novelty:.3f}")
        lines.append(f"Average edge weight: {path.mean_edge_weight:.3f}")
        return "\n".join(lines)
    
    def export_paths(self, paths: List[GraphPath], output_file: Union[str, Path]) -> Path:
        """Save ranked paths as JSON."""
        output_path = Path(output_file)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        
        communities = self._require_analyzer().communities
        serializable = []
        for rank, path in enumerate(paths, start=1):
            data = path.to_dict()
            data["rank"] = rank
            data["communities"] = [communities.get(node_id) for node_id in path.node_ids]
            serializable.append(data)
        
        with open(output_path, 'w') as f:
            json.dump(serializable, f, indent=2)
        
        self.logger.info(f"Saved {len(paths)} paths to {output_path}")
        return output_path
