"""
Prompt construction for report sections.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from .schema import ReportContext


def build_report_prompt(
    section: str,
    context: ReportContext,
    weather: Optional[Mapping[str, Any]] = None,
    custom_instructions: Optional[str] = None,
) -> str:
    """
    Build the system prompt for one report section.

    Only facts that are present are included; the weather line appears only
    when a condition was looked up.
    """

    prompt = f"You are a forensic engineering assistant. The user wants a section: {section}.\n"
    if context.address:
        prompt += f"Address: {context.address}\n"
    if context.date_of_loss:
        prompt += f"Date of Loss: {context.date_of_loss}\n"
    if weather and weather.get("condition"):
        prompt += f"Weather condition: {weather['condition']}\n"
    if custom_instructions and custom_instructions.strip():
        prompt += f"Additional instructions: {custom_instructions.strip()}\n"
    prompt += "Write a concise, professional report section.\n"
    return prompt
