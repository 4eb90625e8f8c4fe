from .calculator import compute_duty
from .rate_parser import parse_rate

__all__ = ["compute_duty", "parse_rate"]
