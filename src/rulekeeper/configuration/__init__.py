"""Configuration objects for Rulekeeper.

Instead of factory methods, you pass configuration objects that know how to
build their components.

Provider configurations (build model-backed components):
- LiteLLMProvider: Uses LiteLLM for embedding and LLM calls

Storage configurations (build data stores):
- LocalStorage: SQLite (+ optional Chroma index) in a local directory

Example:
    from rulekeeper import LiteLLMProvider, LocalStorage, Rulekeeper

    keeper = Rulekeeper(provider=LiteLLMProvider(), storage=LocalStorage("./data"))
"""

from rulekeeper.configuration.base import ProviderConfig, StorageConfig
from rulekeeper.configuration.providers import LiteLLMProvider
from rulekeeper.configuration.storage import LocalStorage

__all__ = [
    "ProviderConfig",
    "StorageConfig",
    "LiteLLMProvider",
    "LocalStorage",
]
