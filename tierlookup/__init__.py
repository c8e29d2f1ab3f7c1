"""tierlookup: cached, rate-limited player lookups against the MCTiers API."""

__version__ = "0.3.0"
