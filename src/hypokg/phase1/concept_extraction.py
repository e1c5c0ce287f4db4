"""
Phrase-based concept extraction from paper text.

Concepts are recurring 2- and 3-word phrases of a single paper, typed by an
ordered table of keyword families and keyed by a normalized slug. The
ConceptAggregator merges per-paper candidates into corpus-level nodes.
"""

import re
from collections import Counter
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from tqdm import tqdm

from .paper_store import Paper
from ..utils.config import ExtractionConfig
from ..utils.logging import LoggerMixin


class ConceptType(Enum):
    """Types of scientific concepts."""
    CONCEPT = "concept"
    METHOD = "method"
    MATERIAL = "material"
    THEORY = "theory"
    PHENOMENON = "phenomenon"


# Tested in order; the first family that matches decides the type
CONCEPT_TYPE_PATTERNS: List[Tuple["re.Pattern[str]", ConceptType]] = [
    (re.compile(r"\b(method|technique|approach|algorithm|procedure|protocol|assay)\b"),
     ConceptType.METHOD),
    (re.compile(r"\b(material|compound|protein|molecule|cell|tissue|polymer|composite)\b"),
     ConceptType.MATERIAL),
    (re.compile(r"\b(theory|model|hypothesis|framework|paradigm|principle)\b"),
     ConceptType.THEORY),
    (re.compile(r"\b(effect|phenomenon|process|mechanism|pathway|interaction)\b"),
     ConceptType.PHENOMENON),
]

TOKEN_PATTERN = re.compile(r"\b[a-z]+(?:-[a-z]+)*\b")


@dataclass
class ConceptNode:
    """A normalized scientific phrase represented as a graph node."""
    id: str
    label: str
    type: ConceptType = ConceptType.CONCEPT
    properties: Dict[str, Any] = field(default_factory=dict)
    papers: List[str] = field(default_factory=list)
    frequency: int = 0
    embedding: Optional[List[float]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = asdict(self)
        data["type"] = self.type.value
        return data


def normalize_concept_id(phrase: str) -> str:
    """Stable slug for a phrase: lowercase, whitespace to underscores, [a-z0-9_] only."""
    slug = re.sub(r"\s+", "_", phrase.strip().lower())
    return re.sub(r"[^a-z0-9_]", "", slug)


def classify_concept_type(phrase: str) -> ConceptType:
    for pattern, concept_type in CONCEPT_TYPE_PATTERNS:
        if pattern.search(phrase):
            return concept_type
    return ConceptType.CONCEPT


def tokenize(text: str) -> List[str]:
    """Lowercase alphabetic tokens; hyphens are kept inside a token."""
    return TOKEN_PATTERN.findall(text.lower())


class ConceptExtractor(LoggerMixin):
    """
    Extracts concept candidates from a single paper.
    
    Extraction is a pure function of the paper text: every contiguous
    n-word window is counted, and phrases that recur within the paper and
    are long enough become candidates carrying their in-paper count.
    """
    
    def __init__(self, config: Optional[ExtractionConfig] = None):
        self.config = config or ExtractionConfig()
    
    def extract_phrases(self, text: str) -> Counter:
        """Count every n-word window of the text."""
        words = tokenize(text)
        phrase_counts: Counter = Counter()
        for size in self.config.ngram_sizes:
            for i in range(len(words) - size + 1):
                phrase_counts[" ".join(words[i:i + size])] += 1
        return phrase_counts
    
    def extract_from_text(self, text: str, paper_id: str) -> List[ConceptNode]:
        if not text or not text.strip():
            return []
        
        candidates = []
        for phrase, count in self.extract_phrases(text).items():
            if count < self.config.min_phrase_frequency:
                continue
            if len(phrase) <= self.config.min_phrase_length:
                continue
            candidates.append(ConceptNode(
                id=normalize_concept_id(phrase),
                label=phrase,
                type=classify_concept_type(phrase),
                papers=[paper_id],
                frequency=count,
            ))
        return candidates
    
    def extract(self, paper: Paper) -> List[ConceptNode]:
        """Concept candidates for one paper, each with its in-paper count."""
        return self.extract_from_text(paper.text, paper.id)
    
    def extract_concepts(self, papers: Iterable[Paper]) -> Dict[str, ConceptNode]:
        """Extract and aggregate concepts over a corpus."""
        papers = list(papers)
        aggregator = ConceptAggregator()
        for paper in tqdm(papers, desc="Extracting concepts", disable=not self.config.show_progress):
            aggregator.add_all(self.extract(paper))
        
        concepts = aggregator.concepts
        self.logger.info(f"Extracted {len(concepts)} unique concepts from {len(papers)} papers")
        return concepts


class ConceptAggregator(LoggerMixin):
    """
    Merges per-paper candidates into corpus-level concept nodes.
    
    One occurrence count is kept per (concept, paper). ``papers`` lists the
    contributing paper ids in first-seen order and ``frequency`` is always
    the sum of their counts. Adding a paper that was already recorded for a
    concept replaces its count.
    """
    
    def __init__(self):
        self._nodes: Dict[str, ConceptNode] = {}
        self._occurrences: Dict[str, Dict[str, int]] = {}
    
    def add(self, candidate: ConceptNode) -> ConceptNode:
        node = self._nodes.get(candidate.id)
        if node is None:
            node = ConceptNode(
                id=candidate.id,
                label=candidate.label,
                type=candidate.type,
                properties=dict(candidate.properties),
                embedding=candidate.embedding,
            )
            self._nodes[candidate.id] = node
            self._occurrences[candidate.id] = {}
        
        occurrences = self._occurrences[candidate.id]
        for paper_id in candidate.papers:
            if paper_id in occurrences:
                self.logger.debug(f"Re-recording {candidate.id!r} for paper {paper_id!r}")
            occurrences[paper_id] = candidate.frequency
        
        node.papers = list(occurrences)
        node.frequency = sum(occurrences.values())
        return node
    
    def add_all(self, candidates: Iterable[ConceptNode]) -> None:
        for candidate in candidates:
            self.add(candidate)
    
    def occurrences(self, concept_id: str) -> Dict[str, int]:
        """Per-paper occurrence counts recorded for a concept."""
        return dict(self._occurrences.get(concept_id, {}))
    
    @property
    def concepts(self) -> Dict[str, ConceptNode]:
        return dict(self._nodes)
    
    def __len__(self) -> int:
        return len(self._nodes)
