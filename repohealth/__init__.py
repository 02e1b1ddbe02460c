"""Repository health checks and line-based code complexity analysis."""

__version__ = "0.1.0"