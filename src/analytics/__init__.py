"""
Analytics Module
"""
from .aggregator import AccumulatorBundle, Aggregator
from .assembler import assemble_response, run_aggregation

__all__ = [
    "AccumulatorBundle",
    "Aggregator",
    "assemble_response",
    "run_aggregation",
]
