"""Credit bureau clients and aggregation."""

from .aggregator import BureauAggregator
from .client import BureauClient

__all__ = ["BureauAggregator", "BureauClient"]
