"""ViewTight: content envelope engine for animated vector graphics."""

__version__ = "0.1.0"
