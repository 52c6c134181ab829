"""
Data Transformation Module
"""
from .normalizer import NormalizedRecord, assign_price_bucket, normalize_record, parse_timestamp
from .catalog import PRODUCT_FIELDS, PUBLIC_FIELD_DEFINITIONS, build_product_page

__all__ = [
    "NormalizedRecord",
    "assign_price_bucket",
    "normalize_record",
    "parse_timestamp",
    "PRODUCT_FIELDS",
    "PUBLIC_FIELD_DEFINITIONS",
    "build_product_page",
]
