from .cli import main
from .logging_setup import configure_logging

__all__ = ["configure_logging", "main"]
