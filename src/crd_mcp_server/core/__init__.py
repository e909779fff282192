"""Query core: similarity scoring, resource index, resolver and ranker."""

from .similarity import levenshtein_distance, similarity
from .index import ResourceIndex
from .resolver import MatchType, Resolution, Resolver
from .ranker import GuidanceQuery, RankedGuidance, Ranker, score_document

__all__ = [
    "levenshtein_distance",
    "similarity",
    "ResourceIndex",
    "MatchType",
    "Resolution",
    "Resolver",
    "GuidanceQuery",
    "RankedGuidance",
    "Ranker",
    "score_document",
]
