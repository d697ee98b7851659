"""Route group exports."""

from . import health, pricing_rules, quotes

__all__ = ["quotes", "pricing_rules", "health"]
