"""OpenAI Responses API provider.

Example:
    from steadycall.providers.openai import OpenAIClient

    with OpenAIClient.from_env() as client:
        print(client.create_response({"model": "gpt-4o", "input": "Hello"}).output_text)
"""

from steadycall.providers.openai.client import CREATE_RESPONSE_OPERATION, OpenAIClient
from steadycall.providers.openai.models import (
    Annotation,
    ContentPart,
    CreateResponseRequest,
    Message,
    OutputItem,
    ReasoningConfig,
    Response,
    TextFormat,
    TokenUsage,
)

__all__ = [
    "CREATE_RESPONSE_OPERATION",
    "Annotation",
    "ContentPart",
    "CreateResponseRequest",
    "Message",
    "OpenAIClient",
    "OutputItem",
    "ReasoningConfig",
    "Response",
    "TextFormat",
    "TokenUsage",
]
