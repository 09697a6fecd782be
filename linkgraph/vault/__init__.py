"""Vault loading and parsing utilities."""

from .loader import load_documents
from .parser import extract_links, extract_tags, normalize_tags

__all__ = [
    "load_documents",
    "extract_links",
    "extract_tags",
    "normalize_tags",
]
