"""
Historical weather lookup for the date of loss.

Weather is optional enrichment: every failure is reported in the result
instead of raised, so report generation never fails because of it.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Optional

import requests

from llm.schema import WeatherSummary

logger = logging.getLogger("backend.weather")

WEATHER_HISTORY_URL = "http://api.weatherapi.com/v1/history.json"

_DATE_FORMATS = ("%m/%d/%Y", "%m-%d-%Y", "%d %B %Y", "%B %d, %Y", "%b %d, %Y")


def safe_parse_date(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 or common US-style date; None when unparseable.

    Naive values are taken as UTC.
    """

    if not value or not value.strip():
        return None
    text = value.strip()
    parsed: Optional[datetime] = None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        for fmt in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class WeatherClient:
    """
    Client for the weatherapi.com history endpoint.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
        timeout: float = 15.0,
    ) -> None:
        self.api_key = api_key
        self.session = session or requests.Session()
        self.now = now
        self.timeout = timeout

    def lookup(self, location: Optional[str], date_string: Optional[str]) -> Dict[str, Any]:
        """
        Return {"success": bool, "data": {...}} or {"success": False, "error": msg}.

        Future dates produce a note and no HTTP call.
        """

        if not location or not date_string:
            return {"success": True, "data": {}}
        when = safe_parse_date(date_string)
        if when is None:
            return {"success": True, "data": {}}
        if when > self.now():
            return {"success": True, "data": {"note": f"Future date: {date_string}"}}

        try:
            day = self._history(location, when.date())
            summary = WeatherSummary(
                max_temp=f"{day['maxtemp_f']}°F",
                min_temp=f"{day['mintemp_f']}°F",
                condition=day["condition"]["text"],
            )
        except (requests.RequestException, KeyError, IndexError, TypeError, ValueError) as exc:
            logger.error("Weather error: %s", exc)
            return {"success": False, "error": str(exc)}

        return {"success": True, "data": summary.model_dump(by_alias=True, exclude_none=True)}

    def _history(self, location: str, day: date) -> Dict[str, Any]:
        response = self.session.get(
            WEATHER_HISTORY_URL,
            params={"key": self.api_key, "q": location, "dt": day.isoformat()},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()["forecast"]["forecastday"][0]["day"]
