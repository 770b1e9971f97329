"""Resource capacity and effort-cost calculation engine."""

__version__ = "1.0.0"
