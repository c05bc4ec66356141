"""Provider configurations for Rulekeeper."""

from rulekeeper.configuration.providers.litellm import LiteLLMProvider

__all__ = ["LiteLLMProvider"]
