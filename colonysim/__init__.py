"""Colony simulation — tick-driven space strategy empire engine."""

__version__ = "0.1.0"
