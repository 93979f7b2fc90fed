"""CLI Package"""

from gitdraft.cli.main import main

__all__ = ["main"]
