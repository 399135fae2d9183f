"""Runtime module - language model access."""

from devtask.runtime.llm_client import LLMClient

__all__ = [
    "LLMClient",
]
