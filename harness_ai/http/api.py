"""FastAPI HTTP endpoints for harness-ai.

``POST /chat`` runs stream_text() and streams the run back as a UI message
stream. The model factory is a dependency so applications (and tests) can
supply their own credentials or transport.
"""

import os
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from ..config.constants import HARNESS_AI_MODEL_ENV_VAR
from ..models.conversation_types import ModelMessage
from ..orchestration.stream_text import stream_text
from ..providers.anthropic.provider import AnthropicModelFactory, create_anthropic


router = APIRouter()


class ChatRequest(BaseModel):
    """Body of a chat request; exactly one of prompt and messages is required."""
    prompt: Optional[str] = Field(None, description="Flat user prompt")
    messages: Optional[List[ModelMessage]] = Field(None, description="Message transcript")
    system: Optional[str] = Field(None, description="System instruction")
    model: Optional[str] = Field(None, description=f"Model id; defaults to ${HARNESS_AI_MODEL_ENV_VAR}")
    temperature: Optional[float] = Field(None, ge=0.0, description="Sampling temperature")
    max_output_tokens: Optional[int] = Field(None, ge=1, description="Maximum tokens per step")


def get_model_factory() -> AnthropicModelFactory:
    """Default factory built from the environment."""
    try:
        return create_anthropic()
    except ValueError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.post("/chat")
async def chat(
    request: ChatRequest,
    model_factory: AnthropicModelFactory = Depends(get_model_factory),
) -> StreamingResponse:
    """Stream a chat run as a UI message stream."""
    model_id = request.model or os.getenv(HARNESS_AI_MODEL_ENV_VAR)
    if not model_id:
        raise HTTPException(status_code=400, detail="model is required")

    options = {}
    if request.temperature is not None:
        options["temperature"] = request.temperature
    if request.max_output_tokens is not None:
        options["max_output_tokens"] = request.max_output_tokens

    try:
        result = stream_text(
            model_factory(model_id),
            prompt=request.prompt,
            messages=request.messages,
            system=request.system,
            **options,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return result.to_ui_message_stream_response()
