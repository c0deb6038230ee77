"""
Agents package: the model-driven phases of the dossier pipeline.
"""

from .discovery import DiscoveryAgent
from .news import NewsAgent
from .page_analyzer import PageAnalyzer
from .prioritizer import LinkPrioritizationAgent
from .gp_discovery import GPDiscoveryService
from .gp_enrichment import GPEnrichmentAgent
from .synthesis import SynthesisAgent, GPBackgroundEnhancer

__all__ = [
    'DiscoveryAgent',           # URL discovery
    'NewsAgent',                # Deal and fund news
    'PageAnalyzer',             # Per-page fact extraction
    'LinkPrioritizationAgent',  # LinkedIn URL scoring
    'GPDiscoveryService',       # GP name candidates
    'GPEnrichmentAgent',        # GP LinkedIn lookups
    'SynthesisAgent',           # Final report
    'GPBackgroundEnhancer',     # GP background rewrite
]
