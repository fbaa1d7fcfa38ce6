"""fluids CLI - Main entry point."""

from fluidfetch.cli.main import app, main

__all__ = ["app", "main"]
