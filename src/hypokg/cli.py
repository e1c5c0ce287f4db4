#!/usr/bin/env python3
"""
Command-line interface for HypoKG.

This module provides a unified CLI for building the concept graph from a
CSV dataset and querying it.
"""

import argparse
import random
import sys
from typing import Optional

from .utils.logging import configure_logging
from .utils.config import HypoKGConfig, load_config


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="hypokg",
        description="HypoKG: Literature concept graphs for hypothesis seeding",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  hypokg build --data papers.csv                              # Build and summarize the graph
  hypokg search --data papers.csv --keywords neural protein   # Find concepts by keyword
  hypokg bridges --data papers.csv --top 10                   # List bridge concepts
  hypokg paths --data papers.csv --source neural_network      # Sample novel paths
        """
    )
    
    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration file (default: config/config.yaml)"
    )
    
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )
    
    parser.add_argument(
        "--log-file",
        type=str,
        help="Log file path"
    )
    
    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    
    def add_data_argument(subparser: argparse.ArgumentParser) -> None:
        subparser.add_argument(
            "--data",
            required=True,
            help="CSV dataset of papers"
        )
    
    build_parser = subparsers.add_parser("build", help="Build the concept graph and print statistics")
    add_data_argument(build_parser)
    
    search_parser = subparsers.add_parser("search", help="Search concepts by keyword")
    add_data_argument(search_parser)
    search_parser.add_argument(
        "--keywords",
        nargs="+",
        required=True,
        help="Keywords matched against concept labels"
    )
    search_parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Maximum number of concepts to print"
    )
    
    bridges_parser = subparsers.add_parser("bridges", help="List the most central concepts")
    add_data_argument(bridges_parser)
    bridges_parser.add_argument(
        "--top",
        type=int,
        default=20,
        help="Number of bridge concepts"
    )
    
    paths_parser = subparsers.add_parser("paths", help="Sample novel paths from a concept")
    add_data_argument(paths_parser)
    paths_parser.add_argument(
        "--source",
        required=True,
        help="Source concept id"
    )
    paths_parser.add_argument(
        "--target",
        help="Target concept id (shortest path mode)"
    )
    paths_parser.add_argument(
        "--length",
        type=int,
        help="Maximum concepts per path"
    )
    paths_parser.add_argument(
        "--max-results",
        type=int,
        help="Maximum number of paths"
    )
    paths_parser.add_argument(
        "--min-novelty",
        type=float,
        help="Drop paths below this novelty score"
    )
    paths_parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for reproducible sampling"
    )
    paths_parser.add_argument(
        "--output",
        type=str,
        help="Write ranked paths to this JSON file"
    )
    
    return parser


def _build_reasoner(args, config: HypoKGConfig, analyze: bool = True):
    from .phase3.graph_reasoner import GraphReasoner
    
    seed = getattr(args, "seed", None)
    rng = random.Random(seed) if seed is not None else None
    reasoner = GraphReasoner(config, rng=rng)
    reasoner.build_graph_from_csv(args.data)
    if analyze:
        reasoner.analyze()
    return reasoner


def cmd_build(args, config: HypoKGConfig) -> int:
    """Handle build command."""
    try:
        reasoner = _build_reasoner(args, config)
        stats = reasoner.knowledge_graph.get_statistics()
        
        print(f"Papers: {stats['num_papers']}")
        print(f"Concepts: {stats['num_concepts']}")
        print(f"Relationships: {stats['num_edges']}")
        print(f"Graph density: {stats['density']:.6f}")
        print(f"Communities: {reasoner.analyzer.num_communities}")
        for concept_type, count in sorted(stats["concept_types"].items()):
            print(f"  {concept_type}: {count}")
        return 0
        
    except Exception as e:
        print(f"Error building graph: {e}", file=sys.stderr)
        return 1


def cmd_search(args, config: HypoKGConfig) -> int:
    """Handle search command."""
    try:
        reasoner = _build_reasoner(args, config, analyze=False)
        concepts = reasoner.search_concepts(args.keywords)
        
        if not concepts:
            print("No matching concepts found")
            return 0
        
        for concept in concepts[:args.limit]:
            print(f"{concept.id}\t{concept.label}\t{concept.type.value}\tfrequency={concept.frequency}")
        return 0
        
    except Exception as e:
        print(f"Error searching concepts: {e}", file=sys.stderr)
        return 1


def cmd_bridges(args, config: HypoKGConfig) -> int:
    """Handle bridges command."""
    try:
        reasoner = _build_reasoner(args, config)
        centrality = reasoner.analyzer.centrality
        
        for concept in reasoner.find_bridge_concepts(args.top):
            print(
                f"{concept.id}\t{concept.label}\t"
                f"community={reasoner.get_community(concept.id)}\t"
                f"centrality={centrality[concept.id]:.4f}"
            )
        return 0
        
    except Exception as e:
        print(f"Error finding bridge concepts: {e}", file=sys.stderr)
        return 1


def cmd_paths(args, config: HypoKGConfig) -> int:
    """Handle paths command."""
    try:
        reasoner = _build_reasoner(args, config)
        paths = reasoner.find_paths(
            args.source,
            target_id=args.target,
            path_length=args.length,
            max_results=args.max_results,
            min_novelty=args.min_novelty,
        )
        
        if not paths:
            print("No sufficiently novel path found")
            return 0
        
        for path in paths:
            print(reasoner.summarize_path(path))
            print()
        
        if args.output:
            reasoner.export_paths(paths, args.output)
            print(f"Results saved to {args.output}")
        return 0
        
    except Exception as e:
        print(f"Error sampling paths: {e}", file=sys.stderr)
        return 1


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    
    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        print(str(e), file=sys.stderr)
        return 1
    
    configure_logging(config.general, verbose=args.verbose, log_file=args.log_file)
    
    if args.command == "build":
        return cmd_build(args, config)
    elif args.command == "search":
        return cmd_search(args, config)
    elif args.command == "bridges":
        return cmd_bridges(args, config)
    elif args.command == "paths":
        return cmd_paths(args, config)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
