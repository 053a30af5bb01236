"""Remote assistant backend providers."""

from .openai import (
    OpenAIClient,
    OpenAIProviderError,
    is_valid_thread_id,
)

__all__ = [
    "OpenAIClient",
    "OpenAIProviderError",
    "is_valid_thread_id",
]
