"""
Schema for report-generation requests.

Field aliases follow the camelCase JSON the report UI sends.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ReportContext(BaseModel):
    """
    Facts about the inspected property.

    Fields:
    - address: property address, also used as the weather lookup location
    - date_of_loss: date of the damage event (any parseable date string)
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    address: Optional[str] = None
    date_of_loss: Optional[str] = Field(default=None, alias="dateOfLoss")


class ReportRequest(BaseModel):
    """
    A request for one report section.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    section: str = Field(min_length=1)
    context: ReportContext
    custom_instructions: Optional[str] = Field(default=None, alias="customInstructions")


class WeatherSummary(BaseModel):
    """
    Daily weather for the date of loss.
    """

    max_temp: Optional[str] = Field(default=None, alias="maxTemp")
    min_temp: Optional[str] = Field(default=None, alias="minTemp")
    condition: Optional[str] = None
    note: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)
