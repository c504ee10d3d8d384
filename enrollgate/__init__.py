"""enrollgate: token-authenticated enrollment API with role and ownership policies."""

__version__ = "0.1.0"
