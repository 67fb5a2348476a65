"""Command-line interface for SolMind."""

from solmind.interfaces.cli.main import app

__all__ = ["app"]
