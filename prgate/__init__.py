"""prgate: scheduled quality gate for incoming pull requests."""

__version__ = "0.1.0"
