"""Phase 1: Literature side - paper records, ingestion, and concept extraction."""

from .paper_store import Paper, PaperStore, load_papers_from_csv
from .concept_extraction import (
    ConceptType,
    ConceptNode,
    ConceptExtractor,
    ConceptAggregator,
    normalize_concept_id,
)

__all__ = [
    "Paper",
    "PaperStore",
    "load_papers_from_csv",
    "ConceptType",
    "ConceptNode",
    "ConceptExtractor",
    "ConceptAggregator",
    "normalize_concept_id",
]
