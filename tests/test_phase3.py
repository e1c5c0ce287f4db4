"""
Tests for Phase 3 components (path sampling, novelty scoring, graph reasoner).
"""

import json
import logging
import random

import pytest
from unittest.mock import Mock

from hypokg.phase1.concept_extraction import ConceptNode
from hypokg.phase2.community_analysis import GraphAnalyzer, GraphNotAnalyzedError
from hypokg.phase2.graph_construction import ConceptEdge
from hypokg.phase3.graph_reasoner import GraphReasoner, GraphNotBuiltError
from hypokg.phase3.novelty_scoring import NoveltyScorer, rank_paths
from hypokg.phase3.path_sampling import GraphPath, PathSampler
from hypokg.utils.config import HypoKGConfig, NoveltyConfig

from conftest import FixedCentralityScorer, FixedCommunityDetector


def _path(node_ids, weights, novelty=0.0):
    nodes = [ConceptNode(id=node_id, label=node_id.replace("_", " ")) for node_id in node_ids]
    edges = [
        ConceptEdge(source, target, weight=weight, confidence=weight)
        for (source, target), weight in zip(zip(node_ids, node_ids[1:]), weights)
    ]
    return GraphPath(nodes=nodes, edges=edges, total_weight=sum(weights), novelty=novelty)


def _assert_well_formed(path):
    assert path.length == len(path.nodes) == len(path.edges) + 1
    assert path.length >= 2
    assert 0.0 <= path.novelty <= 1.0
    for edge, (source, target) in zip(path.edges, zip(path.node_ids, path.node_ids[1:])):
        assert (edge.source, edge.target) == (source, target)
    assert path.total_weight == pytest.approx(sum(edge.weight for edge in path.edges))


class TestGraphPath:
    """Test the path container."""
    
    def test_derived_fields(self):
        path = _path(["a_node", "b_node", "c_node"], [0.2, 0.4])
        
        assert path.length == 3
        assert path.node_ids == ["a_node", "b_node", "c_node"]
        assert path.mean_edge_weight == pytest.approx(0.3)
    
    def test_to_dict(self):
        data = _path(["a_node", "b_node"], [0.5], novelty=0.7).to_dict()
        
        assert data["length"] == 2
        assert data["novelty"] == 0.7
        assert data["nodes"][0]["id"] == "a_node"
        assert data["edges"][0]["weight"] == 0.5


class TestNoveltyScorer:
    """Test the four-factor novelty score."""
    
    def test_weighted_combination(self):
        scorer = NoveltyScorer(
            communities={"a_node": 0, "b_node": 1, "c_node": 1},
            centrality={"a_node": 0.0, "b_node": 0.03, "c_node": 0.0},
        )
        path = _path(["a_node", "b_node", "c_node"], [0.2, 0.4])
        components = scorer.components(path)
        
        assert components.cross_community == pytest.approx(0.5)
        assert components.edge_weakness == pytest.approx(0.7)
        assert components.length == pytest.approx(0.5)
        assert components.bridge_avoidance == pytest.approx(0.9)
        assert scorer.score(path) == pytest.approx(0.2 + 0.21 + 0.1 + 0.09)
    
    def test_score_paths_logs_summary(self, caplog):
        scorer = NoveltyScorer(communities={"a_node": 0, "b_node": 1})
        paths = [_path(["a_node", "b_node"], [0.5]), _path(["b_node", "a_node"], [0.5])]
        
        with caplog.at_level(logging.DEBUG, logger="hypokg"):
            scorer.score_paths(paths)
        
        assert all(path.novelty > 0 for path in paths)
        assert "Scored 2 paths" in caplog.text
    
    def test_neutral_without_communities(self):
        path = _path(["a_node", "b_node"], [0.5])
        
        assert NoveltyScorer().score(path) == 0.5
        assert NoveltyScorer(communities={}).score(path) == 0.5
    
    def test_missing_centrality_counts_as_half(self):
        scorer = NoveltyScorer(communities={"a_node": 0, "b_node": 0})
        components = scorer.components(_path(["a_node", "b_node"], [0.5]))
        
        assert components.bridge_avoidance == pytest.approx(0.0)
    
    def test_length_capped(self):
        node_ids = [f"n{i}_node" for i in range(8)]
        scorer = NoveltyScorer(communities={node_id: 0 for node_id in node_ids}, centrality={})
        
        assert scorer.components(_path(node_ids, [0.5] * 7)).length == 1.0
    
    def test_heavy_edges_and_hubs_score_low(self):
        scorer = NoveltyScorer(
            communities={"a_node": 0, "b_node": 0},
            centrality={"a_node": 0.9, "b_node": 0.9},
        )
        components = scorer.components(_path(["a_node", "b_node"], [3.0]))
        
        assert components.edge_weakness == 0.0
        assert components.bridge_avoidance == 0.0
        assert scorer.score(_path(["a_node", "b_node"], [3.0])) == pytest.approx(0.2 * 2 / 6)
    
    @pytest.mark.parametrize("weights", [[0.11], [1.0], [0.5, 0.5, 0.5], [0.2] * 6])
    def test_score_in_unit_interval(self, weights):
        node_ids = [f"n{i}_node" for i in range(len(weights) + 1)]
        scorer = NoveltyScorer(
            communities={node_id: i for i, node_id in enumerate(node_ids)},
            centrality={node_id: 0.0 for node_id in node_ids},
        )
        
        assert 0.0 <= scorer.score(_path(node_ids, weights)) <= 1.0
    
    def test_custom_weights(self):
        config = NoveltyConfig(weights={"cross_community": 1.0, "edge_weakness": 0.0,
                                        "length": 0.0, "bridge_avoidance": 0.0})
        scorer = NoveltyScorer(communities={"a_node": 0, "b_node": 1}, centrality={}, config=config)
        
        assert scorer.score(_path(["a_node", "b_node"], [0.5])) == pytest.approx(1.0)
    
    def test_score_paths_sets_novelty(self):
        scorer = NoveltyScorer(communities={"a_node": 0, "b_node": 1}, centrality={})
        paths = scorer.score_paths([_path(["a_node", "b_node"], [0.5])])
        
        assert paths[0].novelty > 0.0
    
    def test_rank_paths_is_stable(self):
        first = _path(["a_node", "b_node"], [0.5], novelty=0.4)
        second = _path(["a_node", "c_node"], [0.5], novelty=0.9)
        third = _path(["a_node", "d_node"], [0.5], novelty=0.4)
        
        assert rank_paths([first, second, third]) == [second, first, third]
        assert rank_paths([first, second, third], max_results=2) == [second, first]


class TestPathSampler:
    """Test targeted and diverse path sampling."""
    
    def _sampler(self, kg, communities=None, rng=None):
        detector = FixedCommunityDetector(communities or {})
        analyzer = GraphAnalyzer(kg, community_detector=detector).analyze()
        return PathSampler(kg, analyzer, rng=rng or random.Random(0))
    
    def test_shortest_path(self, graph_factory, two_cluster_pairs):
        sampler = self._sampler(graph_factory(two_cluster_pairs))
        paths = sampler.shortest_path("node_a", "node_f")
        
        assert len(paths) == 1
        assert paths[0].node_ids == ["node_a", "node_c", "node_d", "node_f"]
        assert paths[0].total_weight == pytest.approx(1.5)
    
    def test_shortest_path_without_connection(self, graph_factory):
        kg = graph_factory([("node_a", "node_b")], isolated=["node_z"])
        sampler = self._sampler(kg)
        
        assert sampler.shortest_path("node_a", "node_z") == []
        assert sampler.shortest_path("node_a", "unknown") == []
        assert sampler.shortest_path("node_a", "node_a") == []
    
    def test_walks_respect_length_and_never_revisit(self, graph_factory, two_cluster_pairs):
        sampler = self._sampler(graph_factory(two_cluster_pairs))
        
        for _ in range(50):
            walk = sampler.random_walk("node_c", 3)
            assert 1 <= len(walk) <= 3
            assert len(set(walk)) == len(walk)
            assert walk[0] == "node_c"
    
    def test_walk_stops_at_dead_end(self, graph_factory):
        sampler = self._sampler(graph_factory([("node_a", "node_b")]))
        
        assert sampler.random_walk("node_a", 5) == ["node_a", "node_b"]
    
    def test_isolated_source_yields_nothing(self, graph_factory):
        sampler = self._sampler(graph_factory([("node_a", "node_b")], isolated=["node_z"]))
        
        assert sampler.sample_diverse_paths("node_z", 4, 5) == []
        assert sampler.sample_diverse_paths("unknown", 4, 5) == []
    
    def test_diverse_paths_unique(self, graph_factory, two_cluster_pairs):
        sampler = self._sampler(graph_factory(two_cluster_pairs))
        paths = sampler.sample_diverse_paths("node_c", 4, 10)
        
        keys = [tuple(path.node_ids) for path in paths]
        assert len(keys) == len(set(keys))
        assert 0 < len(paths) <= 10
        for path in paths:
            assert path.node_ids[0] == "node_c"
            assert path.length == len(path.edges) + 1
    
    def test_attempt_budget_bounds_sampling(self, graph_factory):
        sampler = self._sampler(graph_factory([("node_a", "node_b")]))
        sampler.random_walk = Mock(wraps=sampler.random_walk)
        paths = sampler.sample_diverse_paths("node_a", 4, 3)
        
        assert len(paths) == 1
        assert sampler.random_walk.call_count == 30
    
    def test_cross_community_bonus(self, graph_factory):
        kg = graph_factory([("src_node", "same_node"), ("src_node", "other_node")])
        rng = Mock()
        rng.random.return_value = 0.5
        
        # scores 0.5 (same community) and 1.0 (bonus): draw 0.75 lands on the second
        sampler = self._sampler(kg, {"src_node": 0, "same_node": 0, "other_node": 1}, rng=rng)
        assert sampler.select_next_node("src_node", ["same_node", "other_node"]) == "other_node"
        
        # equal scores: draw 0.5 exhausts the first candidate
        sampler = self._sampler(kg, {"src_node": 0, "same_node": 0, "other_node": 0}, rng=rng)
        assert sampler.select_next_node("src_node", ["same_node", "other_node"]) == "same_node"
    
    def test_sampling_requires_analysis(self, graph_factory):
        kg = graph_factory([("node_a", "node_b")])
        sampler = PathSampler(kg, GraphAnalyzer(kg), rng=random.Random(0))
        
        with pytest.raises(GraphNotAnalyzedError):
            sampler.sample_diverse_paths("node_a", 3, 2)


class TestGraphReasoner:
    """Test the reasoning facade."""
    
    def test_queries_before_build_raise(self):
        reasoner = GraphReasoner()
        
        with pytest.raises(GraphNotBuiltError):
            reasoner.search_concepts(["neural"])
        with pytest.raises(GraphNotBuiltError):
            reasoner.analyze()
    
    def test_two_paper_scenario_analyzes(self, scenario_papers):
        reasoner = GraphReasoner(rng=random.Random(7))
        reasoner.build_graph(scenario_papers)
        reasoner.analyze()
        
        assert reasoner.is_analyzed
        assert reasoner.get_community("neural_network") is not None
        assert reasoner.find_bridge_concepts(1)[0].id == "neural_network"
        assert reasoner.find_paths("neural_network")
    
    def test_queries_before_analyze_raise(self, corpus_papers):
        reasoner = GraphReasoner()
        reasoner.build_graph(corpus_papers)
        
        assert reasoner.is_analyzed is False
        with pytest.raises(GraphNotAnalyzedError):
            reasoner.get_community("neural_network")
        with pytest.raises(GraphNotAnalyzedError):
            reasoner.find_bridge_concepts(3)
        with pytest.raises(GraphNotAnalyzedError):
            reasoner.find_paths("neural_network")
        with pytest.raises(GraphNotAnalyzedError):
            reasoner.get_community_concepts(0)
    
    def test_search_concepts(self, scenario_reasoner):
        results = scenario_reasoner.search_concepts(["NEURAL", "learning"])
        
        assert [node.id for node in results] == ["neural_network", "deep_learning"]
        assert results[0].frequency == 4
    
    def test_search_is_idempotent(self, scenario_reasoner):
        first = scenario_reasoner.search_concepts(["o"])
        second = scenario_reasoner.search_concepts(["o"])
        
        assert [node.id for node in first] == [node.id for node in second]
        assert first[0].id == "neural_network"
    
    def test_search_without_matches(self, scenario_reasoner):
        assert scenario_reasoner.search_concepts(["graphene"]) == []
        assert scenario_reasoner.search_concepts([]) == []
        assert scenario_reasoner.search_concepts(["", "  "]) == []
    
    def test_find_paths_returns_only_distinct_walks(self, scenario_reasoner):
        paths = scenario_reasoner.find_paths("neural_network", path_length=4, max_results=5)
        
        assert len(paths) == 2
        assert {tuple(path.node_ids) for path in paths} == {
            ("neural_network", "protein_folding"),
            ("neural_network", "deep_learning"),
        }
        for path in paths:
            _assert_well_formed(path)
    
    def test_find_paths_sorted_by_novelty(self, graph_factory, two_cluster_pairs):
        reasoner = GraphReasoner(knowledge_graph=graph_factory(two_cluster_pairs), rng=random.Random(3))
        reasoner.analyze()
        paths = reasoner.find_paths("node_a", path_length=5, max_results=10)
        
        assert paths
        novelties = [path.novelty for path in paths]
        assert novelties == sorted(novelties, reverse=True)
        for path in paths:
            _assert_well_formed(path)
    
    def test_find_paths_is_reproducible(self, graph_factory, two_cluster_pairs):
        def run():
            reasoner = GraphReasoner(
                knowledge_graph=graph_factory(two_cluster_pairs), rng=random.Random(99)
            )
            reasoner.analyze()
            return [path.node_ids for path in reasoner.find_paths("node_b", path_length=4, max_results=6)]
        
        assert run() == run()
    
    def test_seed_from_config(self, corpus_papers):
        def run():
            config = HypoKGConfig()
            config.sampling.seed = 5
            reasoner = GraphReasoner(config)
            reasoner.build_graph(corpus_papers)
            reasoner.analyze()
            return [path.node_ids for path in reasoner.find_paths("neural_network", max_results=5)]
        
        assert run() == run()
    
    def test_targeted_path(self, scenario_reasoner):
        paths = scenario_reasoner.find_paths("protein_folding", target_id="deep_learning")
        
        assert len(paths) == 1
        assert paths[0].node_ids == ["protein_folding", "neural_network", "deep_learning"]
        assert paths[0].total_weight == pytest.approx(1.0)
        _assert_well_formed(paths[0])
    
    def test_targeted_path_without_connection(self, scenario_reasoner):
        assert scenario_reasoner.find_paths("neural_network", target_id="quantum_dots") == []
    
    def test_unknown_source(self, scenario_reasoner):
        assert scenario_reasoner.find_paths("does_not_exist") == []
    
    def test_invalid_parameters(self, scenario_reasoner):
        with pytest.raises(ValueError):
            scenario_reasoner.find_paths("neural_network", path_length=1)
        with pytest.raises(ValueError):
            scenario_reasoner.find_paths("neural_network", max_results=-1)
        with pytest.raises(ValueError):
            scenario_reasoner.find_paths("neural_network", path_length=0)
        with pytest.raises(ValueError):
            scenario_reasoner.find_paths("neural_network", max_results=0)
    
    def test_min_novelty_filter(self, scenario_reasoner):
        assert scenario_reasoner.find_paths("neural_network", min_novelty=1.01) == []
        assert len(scenario_reasoner.find_paths("neural_network", min_novelty=0.0)) == 2
    
    def test_bridge_concepts(self, scenario_reasoner):
        bridges = scenario_reasoner.find_bridge_concepts(2)
        
        assert len(bridges) == 2
        assert bridges[0].id == "neural_network"
    
    def test_community_lookup(self, scenario_reasoner):
        community = scenario_reasoner.get_community("neural_network")
        
        assert isinstance(community, int)
        assert scenario_reasoner.get_community("missing") is None
        members = scenario_reasoner.get_community_concepts(community)
        assert "neural_network" in [node.id for node in members]
        assert len(scenario_reasoner.get_community_concepts(community, limit=1)) == 1
    
    def test_pluggable_analysis(self, corpus_papers):
        reasoner = GraphReasoner(
            community_detector=FixedCommunityDetector({"deep_learning": 1}),
            centrality_scorer=FixedCentralityScorer({"quantum_dots": 1.0}),
        )
        reasoner.build_graph(corpus_papers)
        reasoner.analyze()
        
        assert reasoner.get_community("deep_learning") == 1
        assert reasoner.get_community("neural_network") == 0
        assert reasoner.find_bridge_concepts(1)[0].id == "quantum_dots"
    
    def test_rebuild_replaces_graph(self, scenario_reasoner, paper_c):
        scenario_reasoner.build_graph([paper_c])
        
        assert list(scenario_reasoner.knowledge_graph.nodes) == ["quantum_dots"]
        assert len(scenario_reasoner.papers) == 1
        assert scenario_reasoner.is_analyzed is False
    
    def test_summarize_path(self, scenario_reasoner):
        path = scenario_reasoner.find_paths("protein_folding", target_id="deep_learning")[0]
        summary = scenario_reasoner.summarize_path(path)
        
        assert summary.startswith("Path through 3 concepts:")
        assert "1. protein folding [community" in summary
        assert "--[relates_to, weight: 0.500]-->" in summary
        assert "Novelty score:" in summary
        assert "Average edge weight: 0.500" in summary
    
    def test_export_paths(self, scenario_reasoner, tmp_path):
        paths = scenario_reasoner.find_paths("neural_network", max_results=5)
        output = scenario_reasoner.export_paths(paths, tmp_path / "out" / "paths.json")
        
        data = json.loads(output.read_text())
        assert [entry["rank"] for entry in data] == [1, 2]
        assert data[0]["nodes"][0]["id"] == "neural_network"
        assert len(data[0]["communities"]) == data[0]["length"]
