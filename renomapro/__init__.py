"""RenomaPro: backend del marketplace de fachowcy (auth, directorio, leads, billing)."""

__version__ = "0.1.0"
