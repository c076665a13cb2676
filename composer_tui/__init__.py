"""Chat-message composer for Textual applications."""

__version__ = "0.1.0"
