"""Application entrypoints for the connected components demo."""

from .demo import DemoCoordinator, main, parse_args, run

__all__ = ["DemoCoordinator", "main", "parse_args", "run"]
