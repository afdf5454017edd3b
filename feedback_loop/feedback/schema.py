"""
Schema for stored user feedback.

FeedbackRecord mirrors a row of the feedback table exactly (snake_case column
names). FeedbackSubmission is the camelCase payload the browser posts when a
user rates a generated report section.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FeedbackRecord(BaseModel):
    """
    A single stored rating of generated report text.

    Fields:
    - section_id: report section the text was generated for
    - rating: user score, 1 (worst) to 7 (best)
    - feedback: free-text comment from the user
    - generated_text: the text the model produced; required for training
    - timestamp: ISO-8601 time the rating was given
    """

    model_config = ConfigDict(extra="ignore", frozen=True, coerce_numbers_to_str=True)

    section_id: str = ""
    rating: Optional[int] = Field(default=None, ge=1, le=7)
    feedback: str = ""
    generated_text: Optional[str] = None
    timestamp: Optional[str] = None

    @field_validator("section_id", "feedback", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class FeedbackSubmission(BaseModel):
    """
    Incoming rating payload from the report UI.

    Rating arrives as a number or a numeric string; it is coerced to int and
    must lie in 1..7 when present.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)

    section_id: Optional[str] = Field(default=None, alias="sectionId")
    rating: Optional[int] = Field(default=None, ge=1, le=7)
    feedback: Optional[str] = None
    generated_text: Optional[str] = Field(default=None, alias="generatedText")
    timestamp: Optional[str] = None

    @field_validator("rating", mode="before")
    @classmethod
    def _parse_rating(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        if isinstance(value, str):
            return int(value.strip(), 10)
        return value

    def to_row(self) -> Dict[str, Any]:
        """Column mapping for the feedback table."""
        return {
            "timestamp": self.timestamp,
            "section_id": self.section_id,
            "rating": self.rating,
            "feedback": self.feedback or "",
            "generated_text": self.generated_text or "",
        }
