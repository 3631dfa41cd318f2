"""Terminal dashboard for Linear issues and projects."""

__version__ = "0.1.0"
