from .pipeline import TariffItemNormalizer, normalize_item, unwrap_records

__all__ = ["TariffItemNormalizer", "normalize_item", "unwrap_records"]
