from .engine import HtsSearchEngine, SearchFailedError
from .expander import expand_query
from .ranker import RankingWeights, score_item

__all__ = [
    "HtsSearchEngine",
    "RankingWeights",
    "SearchFailedError",
    "expand_query",
    "score_item",
]
