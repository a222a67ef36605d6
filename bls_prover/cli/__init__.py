"""Command-line interface (``bls-prover``)."""

from .main import app, main

__all__ = ["app", "main"]
