"""Preloaded prompt responses."""

from .loader import ResponseLoader, load_responses
from .models import PreloadedResponse, ResponseFile

__all__ = ["PreloadedResponse", "ResponseFile", "ResponseLoader", "load_responses"]
