from .refine import calculate_confidence, find_refine_candidates, validate_hs6
from .service import EstimateService

__all__ = [
    "EstimateService",
    "calculate_confidence",
    "find_refine_candidates",
    "validate_hs6",
]
