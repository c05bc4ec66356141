"""Storage configurations for Rulekeeper."""

from rulekeeper.configuration.storage.local import LocalStorage

__all__ = ["LocalStorage"]
