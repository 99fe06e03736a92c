"""Nova Defense: frame-driven missile defense simulation."""

__version__ = "0.1.0"
