#!/usr/bin/env python3
"""
Example script demonstrating concept graph reasoning.

This script shows how to:
1. Build a concept graph from a small in-memory corpus
2. Analyze communities and bridge concepts
3. Sample novel paths and summarize them for hypothesis generation
"""

import random
import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from hypokg.phase1.paper_store import Paper
from hypokg.phase3.graph_reasoner import GraphReasoner
from hypokg.utils.config import load_config
from hypokg.utils.logging import setup_logging


SAMPLE_PAPERS = [
    Paper(
        id="p1",
        title="Graph neural network models of protein folding",
        abstract=(
            "A graph neural network predicts protein folding pathways. "
            "The graph neural network learns protein folding energy landscapes."
        ),
        keywords=["graph neural network", "protein folding"],
        year=2023,
    ),
    Paper(
        id="p2",
        title="Protein folding and molecular dynamics",
        abstract=(
            "Molecular dynamics simulations reveal protein folding intermediates. "
            "Enhanced molecular dynamics sampling accelerates protein folding studies."
        ),
        year=2022,
    ),
    Paper(
        id="p3",
        title="Molecular dynamics of battery electrolytes",
        abstract=(
            "Molecular dynamics describes ion transport in solid electrolytes. "
            "Solid electrolytes with fast ion transport enable safer batteries."
        ),
        year=2024,
    ),
]


def main():
    """Main example function."""
    logger = setup_logging(level="INFO")
    
    try:
        config = load_config()
    except FileNotFoundError:
        logger.error("Configuration file not found. Please check config/config.yaml")
        return
    
    reasoner = GraphReasoner(config, rng=random.Random(7))
    reasoner.build_graph(SAMPLE_PAPERS)
    reasoner.analyze()
    
    logger.info("Concepts matching 'protein':")
    for concept in reasoner.search_concepts(["protein"]):
        logger.info(f"  {concept.label} (frequency: {concept.frequency}, papers: {concept.papers})")
    
    logger.info("Bridge concepts:")
    for concept in reasoner.find_bridge_concepts(5):
        logger.info(f"  {concept.label} [community {reasoner.get_community(concept.id)}]")
    
    paths = reasoner.find_paths("graph_neural_network", path_length=4, max_results=3)
    for path in paths:
        print(reasoner.summarize_path(path))
        print()
    
    connection = reasoner.find_paths("protein_folding", target_id="solid_electrolytes")
    if connection:
        print(reasoner.summarize_path(connection[0]))
    else:
        logger.info("No connection between protein folding and solid electrolytes")


if __name__ == "__main__":
    main()
