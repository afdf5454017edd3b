"""
Chat-completion wrapper used to write report sections.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Optional

from openai import OpenAI, OpenAIError

from feedback_loop.core.exceptions import ReportGenerationError

from .config import LLMConfig

logger = logging.getLogger("llm")


@dataclass
class OpenAIChatModel:
    """
    Single-turn chat model.

    The prompt is sent as the only (system) message; the first choice's
    content is returned, or "" when the provider returns none.
    """

    config: LLMConfig
    api_key: Optional[str] = None
    client: Optional[Any] = None

    def __post_init__(self) -> None:
        if self.client is None:
            self.client = OpenAI(api_key=self.api_key)

    def generate(self, prompt: str) -> str:
        try:
            completion = self.client.chat.completions.create(
                model=self.config.model_name,
                messages=[{"role": "system", "content": prompt}],
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
            )
        except OpenAIError as exc:
            logger.error("Chat completion with %s failed: %s", self.config.model_name, exc)
            raise ReportGenerationError(str(exc)) from exc

        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""
