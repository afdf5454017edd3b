"""
Feedback storage backed by the managed Postgres REST endpoint.

Reads and writes go through the PostgREST interface exposed under
<SUPABASE_URL>/rest/v1 and authenticate with the service-role key.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from feedback_loop.core.exceptions import DataAccessError

from .schema import FeedbackRecord, FeedbackSubmission

logger = logging.getLogger(__name__)


class SupabaseFeedbackStore:
    """
    Rating records stored in a single table.

    An empty result from fetch_high_rated_feedback is a normal outcome, not an
    error. Any transport failure, non-2xx status, or row that does not fit the
    FeedbackRecord schema raises DataAccessError.
    """

    def __init__(
        self,
        url: str,
        service_key: str,
        table: str = "feedback",
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = url.rstrip("/") + "/rest/v1"
        self.table = table
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "apikey": service_key,
                "Authorization": f"Bearer {service_key}",
                "Content-Type": "application/json",
            }
        )

    @property
    def table_url(self) -> str:
        return f"{self.base_url}/{self.table}"

    def fetch_high_rated_feedback(self, min_rating: int = 6) -> List[FeedbackRecord]:
        """
        Return every row with rating >= min_rating, in table order.
        """

        params = {"select": "*", "rating": f"gte.{min_rating}"}
        rows = self._request("GET", params=params)
        try:
            records = [FeedbackRecord(**row) for row in rows]
        except (TypeError, ValidationError) as exc:
            raise DataAccessError(f"Unexpected row shape in {self.table}: {exc}") from exc

        logger.info("Fetched %d feedback rows with rating >= %d", len(records), min_rating)
        return records

    def insert_feedback(self, submission: FeedbackSubmission) -> List[Dict[str, Any]]:
        """
        Insert one rating and return the stored row(s).
        """

        rows = self._request(
            "POST",
            json=[submission.to_row()],
            headers={"Prefer": "return=representation"},
        )
        logger.info("Stored feedback for section %s (rating=%s)", submission.section_id, submission.rating)
        return rows

    def _request(self, method: str, **kwargs: Any) -> List[Dict[str, Any]]:
        try:
            response = self.session.request(method, self.table_url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise DataAccessError(f"{method} {self.table} failed: {exc}") from exc

        if not response.content:
            return []
        try:
            payload = response.json()
        except ValueError as exc:
            raise DataAccessError(f"{method} {self.table} returned invalid JSON") from exc

        if payload is None:
            return []
        if not isinstance(payload, list):
            raise DataAccessError(f"{method} {self.table} returned {type(payload).__name__}, expected list")
        return payload
