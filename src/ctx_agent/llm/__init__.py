"""Language-model completion client."""

from ctx_agent.llm.client import (
    AnthropicMessagesClient,
    CompletionClient,
    CompletionError,
    CompletionResponse,
    ContentBlock,
    Usage,
    is_retryable_completion_error,
)
from ctx_agent.llm.retry import call_with_retry

__all__ = [
    "AnthropicMessagesClient",
    "CompletionClient",
    "CompletionError",
    "CompletionResponse",
    "ContentBlock",
    "Usage",
    "call_with_retry",
    "is_retryable_completion_error",
]
