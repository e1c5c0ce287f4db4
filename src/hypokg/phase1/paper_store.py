"""
Paper records and the in-memory paper store.

This module handles:
1. The immutable Paper record produced by ingestion
2. An insertion-ordered index of papers keyed by identifier
3. CSV ingestion accepting canonical and legacy column names per field
"""

import re
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union
from dataclasses import dataclass, field, asdict
from pathlib import Path

import pandas as pd
from tqdm import tqdm

from ..utils.logging import LoggerMixin, get_logger


logger = get_logger("phase1.paper_store")


@dataclass(frozen=True)
class Paper:
    """A parsed scientific paper. Never mutated after ingestion."""
    id: str
    title: str
    abstract: str
    authors: List[str] = field(default_factory=list)
    year: int = 0
    journal: Optional[str] = None
    doi: Optional[str] = None
    pmid: Optional[str] = None
    keywords: List[str] = field(default_factory=list)
    citations: int = 0

    @property
    def text(self) -> str:
        """Title, abstract and keywords joined into one searchable text."""
        return f"{self.title} {self.abstract} {' '.join(self.keywords)}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)


class PaperStore(LoggerMixin):
    """In-memory index of papers keyed by identifier."""

    def __init__(self, papers: Optional[Iterable[Paper]] = None):
        self._papers: Dict[str, Paper] = {}
        if papers:
            self.add_all(papers)

    def add(self, paper: Paper) -> bool:
        """
        Add a paper to the store.

        Returns:
            False if a paper with the same id was already stored (the stored
            record is kept), True otherwise.
        """
        if paper.id in self._papers:
            self.logger.warning(f"Duplicate paper id {paper.id!r}, keeping first record")
            return False
        self._papers[paper.id] = paper
        return True

    def add_all(self, papers: Iterable[Paper]) -> int:
        added = sum(1 for paper in papers if self.add(paper))
        self.logger.debug(f"Stored {added} papers ({len(self._papers)} total)")
        return added

    def get(self, paper_id: str) -> Optional[Paper]:
        return self._papers.get(paper_id)

    def ids(self) -> List[str]:
        return list(self._papers)

    def __contains__(self, paper_id: object) -> bool:
        return paper_id in self._papers

    def __iter__(self) -> Iterator[Paper]:
        return iter(self._papers.values())

    def __len__(self) -> int:
        return len(self._papers)


# Canonical column first, legacy/alternate column second
COLUMN_ALIASES = {
    "pmid": ("pmid", "PMID"),
    "doi": ("doi", "DOI"),
    "title": ("title", "ArticleTitle"),
    "abstract": ("abstract", "Abstract"),
    "authors": ("authors", "AuthorList"),
    "year": ("year", "PubDate"),
    "journal": ("journal", "Journal"),
    "keywords": ("keywords", "MeshHeadingList"),
    "citations": ("citations",),
}


def _split_list(value: str) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in re.split(r"[;,]", value) if item.strip()]


def _parse_int(value: str) -> int:
    """Leading integer of the value, 0 when there is none."""
    match = re.match(r"\s*(\d+)", value or "")
    return int(match.group(1)) if match else 0


def _field(row: Dict[str, Any], name: str) -> str:
    for column in COLUMN_ALIASES[name]:
        value = row.get(column)
        if value is None:
            continue
        value = str(value).strip()
        if value and value.lower() != "nan":
            return value
    return ""


def parse_paper_record(row: Dict[str, Any], index: int) -> Paper:
    """
    Build a Paper from one dataset row.

    Missing or unparseable fields degrade to defaults instead of failing.
    """
    pmid = _field(row, "pmid")
    doi = _field(row, "doi")
    return Paper(
        id=pmid or doi or f"paper_{index}",
        title=_field(row, "title"),
        abstract=_field(row, "abstract"),
        authors=_split_list(_field(row, "authors")),
        year=_parse_int(_field(row, "year")),
        journal=_field(row, "journal") or None,
        doi=doi or None,
        pmid=pmid or None,
        keywords=_split_list(_field(row, "keywords")),
        citations=_parse_int(_field(row, "citations")),
    )


def load_papers_from_csv(
    file_path: Union[str, Path],
    store: Optional[PaperStore] = None,
    show_progress: bool = False
) -> List[Paper]:
    """
    Load papers from a CSV dataset.
    
    Args:
        file_path: Path to the CSV file
        store: Optional store the loaded papers are added to
        show_progress: Show a progress bar while parsing rows
        
    Returns:
        List of parsed papers in file order
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Dataset not found: {file_path}")
    
    df = pd.read_csv(file_path, dtype=str, keep_default_na=False, skip_blank_lines=True)
    
    papers = []
    rows = df.to_dict(orient="records")
    for index, row in enumerate(tqdm(rows, desc="Loading papers", disable=not show_progress)):
        try:
            paper = parse_paper_record(row, index)
        except (TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed row {index}: {e}")
            continue
        if not paper.title and not paper.abstract:
            logger.warning(f"Row {index} ({paper.id}) has no title or abstract")
        papers.append(paper)
    
    if store is not None:
        store.add_all(papers)
    
    logger.info(f"Loaded {len(papers)} papers from {file_path}")
    return papers
