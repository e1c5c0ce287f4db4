"""
HypoKG: Literature Concept Graphs for Hypothesis Seeding

Turns a corpus of scientific papers into a weighted concept co-occurrence
graph and samples structurally novel paths through it to seed downstream
hypothesis generation.
"""

__version__ = "0.1.0"
__author__ = "HypoKG Team"
