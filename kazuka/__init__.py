"""Event-driven engine wiring event sources, strategies and executors."""

__version__ = "0.1.0"

__all__ = ["__version__"]