"""
HLTV content acquisition.

Cache-first, multi-strategy retrieval of news, upcoming matches, team
rankings and the current tournament on top of the anti-detection client.
"""

from .pipeline import MATCHES, NEWS, TEAMS, TOURNAMENT, ContentPipeline, Dataset, PipelineResult
from .service import ContentService, get_content_service
from .strategies import ContentStrategy, StaticFallback

__all__ = [
    "ContentPipeline",
    "ContentService",
    "ContentStrategy",
    "Dataset",
    "PipelineResult",
    "StaticFallback",
    "get_content_service",
    "MATCHES",
    "NEWS",
    "TEAMS",
    "TOURNAMENT",
]
