"""Wire models for the OpenAI Responses API (``POST /responses``)."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

from steadycall.contracts.rate_limit import RateLimitSnapshot


class Message(BaseModel):
    """One turn of a multi-turn input."""

    model_config = {"frozen": True}

    role: Literal["system", "developer", "user", "assistant"]
    content: str


class TextFormat(BaseModel):
    """Structured output format.

    Structured outputs (type "json_schema") are only accepted in strict mode.
    """

    model_config = {"frozen": True}

    type: str = "json_schema"
    name: str | None = None
    json_schema: dict[str, Any] | None = None
    strict: bool = False

    @model_validator(mode="after")
    def validate_strict_for_schema(self) -> TextFormat:
        if self.type == "json_schema" and not self.strict:
            raise ValueError("Structured outputs require strict: true")
        return self


class ReasoningConfig(BaseModel):
    """Reasoning depth for o-series models."""

    model_config = {"frozen": True}

    effort: Literal["low", "medium", "high"]


class CreateResponseRequest(BaseModel):
    """Request body for ``POST /responses``.

    Example:
        CreateResponseRequest(model="gpt-4o", input="Write a one-sentence bedtime story.")
    """

    model_config = {"frozen": True}

    model: str = Field(min_length=1, description="Model id, e.g. 'gpt-4o'")
    input: str | list[Message] = Field(description="Prompt text or message list")
    instructions: str | None = None
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, gt=0)
    text: TextFormat | None = None
    previous_response_id: str | None = None
    reasoning: ReasoningConfig | None = None

    @model_validator(mode="after")
    def validate_input_present(self) -> CreateResponseRequest:
        if isinstance(self.input, str) and not self.input:
            raise ValueError("input is required (string or list of messages)")
        if isinstance(self.input, list) and not self.input:
            raise ValueError("input is required (string or list of messages)")
        return self

    def to_payload(self) -> dict[str, Any]:
        """JSON body with unset optional fields omitted."""
        return self.model_dump(mode="json", exclude_none=True)


class Annotation(BaseModel):
    model_config = {"frozen": True, "extra": "ignore"}

    type: str = ""
    text: str = ""
    start_index: int = 0
    end_index: int = 0


class ContentPart(BaseModel):
    """Fragment of an output item ("output_text", "refusal", ...)."""

    model_config = {"frozen": True, "extra": "ignore"}

    type: str = ""
    text: str = ""
    annotations: list[Annotation] = Field(default_factory=list)
    refusal: str = ""


class OutputItem(BaseModel):
    model_config = {"frozen": True, "extra": "ignore"}

    id: str = ""
    type: str = ""
    role: str = ""
    content: list[ContentPart] = Field(default_factory=list)


class TokenUsage(BaseModel):
    model_config = {"frozen": True, "extra": "ignore"}

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class Response(BaseModel):
    """Decoded ``POST /responses`` result.

    ``rate_limit`` is not part of the body; it is taken from the response
    headers and excluded from serialisation.
    """

    model_config = {"frozen": True, "extra": "ignore", "arbitrary_types_allowed": True}

    id: str
    object: str = "response"
    output: list[OutputItem] = Field(default_factory=list)
    usage: TokenUsage = Field(default_factory=TokenUsage)
    model: str = ""
    created: int = 0
    rate_limit: RateLimitSnapshot | None = Field(default=None, exclude=True)

    @property
    def output_text(self) -> str:
        """All ``output_text`` fragments concatenated in order."""
        return "".join(part.text for item in self.output for part in item.content if part.type == "output_text")
