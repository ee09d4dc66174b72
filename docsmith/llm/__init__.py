"""Text generation backends."""

from .runner import LLMRequest, LLMRunner, classify_generation_error

__all__ = ["LLMRequest", "LLMRunner", "classify_generation_error"]
