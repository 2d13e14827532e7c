"""Flask front end for the thesaurus engine."""
from .web import app, main

__all__ = ["app", "main"]
