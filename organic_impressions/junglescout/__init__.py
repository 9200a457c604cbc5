"""Jungle Scout API integration."""

from .models import APIResponse, KeywordAttributes
from .client import JungleScoutClient

__all__ = ["APIResponse", "KeywordAttributes", "JungleScoutClient"]
