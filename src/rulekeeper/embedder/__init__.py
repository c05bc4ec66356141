"""Embedding functionality for Rulekeeper."""

from rulekeeper.embedder.base import Embedder
from rulekeeper.embedder.client import ClientEmbedder

__all__ = ["Embedder", "ClientEmbedder"]
