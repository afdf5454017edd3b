"""
Backend service layer for report generation and feedback capture.

Turns a ReportRequest into generated section text using the currently
configured model, and stores user ratings of that text.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Dict, List, Optional

from feedback_loop.core.config import Config
from feedback_loop.feedback.schema import FeedbackSubmission
from feedback_loop.feedback.store import SupabaseFeedbackStore
from llm.config import LLMConfig
from llm.openai_chat import OpenAIChatModel
from llm.prompt import build_report_prompt
from llm.schema import ReportRequest

from .weather import WeatherClient

logger = logging.getLogger("backend.report")


@dataclass
class ReportService:
    """
    Report section generator.

    - Looks up weather only when both address and date of loss are present.
    - Builds the prompt from the known facts.
    - Calls the chat model; ReportGenerationError propagates to the handler.
    """

    model: Any
    weather: Optional[WeatherClient] = None

    def generate(self, request: ReportRequest) -> Dict[str, Any]:
        weather_result: Dict[str, Any] = {"success": True, "data": {}}
        context = request.context
        if self.weather is not None and context.address and context.date_of_loss:
            weather_result = self.weather.lookup(context.address, context.date_of_loss)

        weather_data = weather_result.get("data", {})
        prompt = build_report_prompt(
            request.section,
            context,
            weather_data,
            request.custom_instructions,
        )
        text = self.model.generate(prompt)
        logger.info("Generated section %r (%d chars)", request.section, len(text))
        return {"section": text, "weatherData": weather_data}


@dataclass
class FeedbackService:
    """
    Stores ratings submitted from the report UI.
    """

    store: SupabaseFeedbackStore

    def submit(self, submission: FeedbackSubmission) -> List[Dict[str, Any]]:
        return self.store.insert_feedback(submission)


def create_report_service(config: Config) -> ReportService:
    """
    Factory for the report service with the configured chat model.
    """

    config.require("openai_api_key")
    llm_config = LLMConfig.from_config(config)
    logger.info("Report model: %s", llm_config.model_name)
    model = OpenAIChatModel(config=llm_config, api_key=config.openai_api_key)
    weather = WeatherClient(api_key=config.weather_api_key) if config.weather_api_key else None
    return ReportService(model=model, weather=weather)


def create_feedback_service(config: Config) -> FeedbackService:
    config.require("supabase_url", "supabase_service_role_key")
    store = SupabaseFeedbackStore(
        config.supabase_url,
        config.supabase_service_role_key,
        table=config.feedback_table,
    )
    return FeedbackService(store=store)
