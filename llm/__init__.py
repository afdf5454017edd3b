"""
LLM utilities for report generation.

Prompt building, request schema, and the chat model wrapper.
"""

from .config import LLMConfig
from .openai_chat import OpenAIChatModel
from .prompt import build_report_prompt
from .schema import ReportContext, ReportRequest, WeatherSummary

__all__ = [
    "LLMConfig",
    "OpenAIChatModel",
    "build_report_prompt",
    "ReportContext",
    "ReportRequest",
    "WeatherSummary",
]
