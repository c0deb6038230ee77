"""
VC Dossier Builder

Builds intelligence dossiers on venture-capital firms listed in the SEBI
AIF registry. Each firm goes through a fixed multi-phase pipeline whose
intermediate artefacts are persisted under data/firms/<slug>/.

Core Components:
- services: OpenAI, SERP API, headless browser, HTML cleaning, LinkedIn providers, SEBI registry
- agents: discovery, news, page analysis, link prioritization, GP discovery/enrichment, synthesis
- pipeline: per-firm orchestration, batch and resume modes, CSV export
- utils: configuration, logging, file storage and URL helpers
- main: command-line entry point
"""

# Version
__version__ = "1.0.0"

__all__ = [
    "services",
    "agents",
    "pipeline",
    "utils",
]
