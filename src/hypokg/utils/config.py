"""Configuration management utilities."""

import os
import yaml
from pathlib import Path
from typing import Dict, Optional
from pydantic import BaseModel, Field


class ExtractionConfig(BaseModel):
    """Configuration for phrase-based concept extraction."""
    min_phrase_frequency: int = 2
    min_phrase_length: int = 5
    ngram_sizes: list[int] = Field(default_factory=lambda: [2, 3])
    show_progress: bool = False


class GraphConfig(BaseModel):
    """Configuration for co-occurrence graph construction."""
    min_edge_weight: float = 0.1
    default_relation: str = "relates_to"
    bidirectional_edges: bool = True


class AnalysisConfig(BaseModel):
    """Configuration for community detection and centrality."""
    resolution: float = 1.0
    seed: Optional[int] = 42
    normalized_centrality: bool = True
    top_bridges_logged: int = 5


class SamplingConfig(BaseModel):
    """Configuration for path sampling."""
    path_length: int = 4
    max_results: int = 10
    attempt_multiplier: int = 10
    cross_community_bonus: float = 2.0
    seed: Optional[int] = None


class NoveltyWeights(BaseModel):
    """Weights of the novelty factors."""
    cross_community: float = 0.4
    edge_weakness: float = 0.3
    length: float = 0.2
    bridge_avoidance: float = 0.1


class NoveltyConfig(BaseModel):
    """Configuration for novelty scoring."""
    weights: NoveltyWeights = Field(default_factory=NoveltyWeights)
    length_cap: int = 6
    centrality_scale: float = 10.0
    neutral_score: float = 0.5


class GeneralConfig(BaseModel):
    """General configuration."""
    logging: Dict[str, Optional[str]] = Field(default_factory=lambda: {
        "level": "INFO",
        "file": None,
    })


class HypoKGConfig(BaseModel):
    """Main configuration class."""
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    graph: GraphConfig = Field(default_factory=GraphConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    sampling: SamplingConfig = Field(default_factory=SamplingConfig)
    novelty: NoveltyConfig = Field(default_factory=NoveltyConfig)
    general: GeneralConfig = Field(default_factory=GeneralConfig)


def get_project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent.parent.parent


def load_config(config_path: Optional[str] = None) -> HypoKGConfig:
    """
    Load configuration from YAML file.
    
    Args:
        config_path: Path to configuration file. If None, uses
            config/config.yaml when present and built-in defaults otherwise.
        
    Returns:
        Loaded configuration object.
    """
    if config_path is None:
        config_path = get_project_root() / "config" / "config.yaml"
        if not config_path.exists():
            config_data = {}
            config_path = None
    
    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        
        with open(config_path, 'r') as f:
            config_data = yaml.safe_load(f) or {}
    
    if 'HYPOKG_LOG_LEVEL' in os.environ:
        config_data.setdefault('general', {}).setdefault('logging', {})
        config_data['general']['logging']['level'] = os.environ['HYPOKG_LOG_LEVEL']
    
    return HypoKGConfig(**config_data)


def get_logs_dir() -> Path:
    """Get the logs directory path."""
    logs_dir = get_project_root() / "logs"
    logs_dir.mkdir(exist_ok=True)
    return logs_dir
