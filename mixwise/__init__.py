"""Recipe matching against a home-bar inventory."""

__version__ = "0.1.0"
