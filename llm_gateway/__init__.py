from __future__ import annotations  # Re-export llm_gateway public API

from .llm_gateway import (
    HttpClient,
    HttpResponse,
    LlmGatewayError,
    LlmRateLimitError,
    call,
    chat,
    is_rate_limited,
)

__all__ = [
    "HttpClient",
    "HttpResponse",
    "LlmGatewayError",
    "LlmRateLimitError",
    "call",
    "chat",
    "is_rate_limited",
]
