"""
Configuration for report-generation inference.

The model name falls back to the provider base model until a fine-tuned
model id has been published to FINE_TUNED_MODEL_NAME.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from feedback_loop.core.config import Config


class LLMConfig(BaseModel):
    """
    Configuration for the chat model that writes report sections.

    Notes:
    - temperature is 0.0 to reduce variability between identical requests.
    - max_tokens bounds a single section.
    """

    model_name: str = Field(..., min_length=1, description="Provider model identifier")
    temperature: float = Field(0.0, ge=0.0, le=2.0)
    max_tokens: int = Field(1000, ge=1, le=16384)

    @classmethod
    def from_config(cls, config: Config) -> "LLMConfig":
        return cls(
            model_name=config.fine_tuned_model_name or config.report.default_model,
            temperature=config.report.temperature,
            max_tokens=config.report.max_tokens,
        )
