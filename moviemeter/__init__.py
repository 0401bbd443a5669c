"""MovieMeter API: accounts, identity tokens and movie reviews."""

__version__ = "1.0.0"
