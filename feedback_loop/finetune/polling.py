"""
Polling policy for remote fine-tune jobs.

The provider offers no completion callback, so the client re-reads the job on
an interval. The policy bounds that wait: a fixed interval by default, optional
geometric backoff, and an overall deadline.
"""

from __future__ import annotations

from typing import Iterator, Optional

from pydantic import BaseModel, Field


class PollingPolicy(BaseModel):
    """
    Wait policy between job status reads.

    Notes:
    - backoff_multiplier of 1.0 keeps a fixed interval.
    - max_interval_seconds caps the delay once backoff grows it.
    - timeout_seconds of None waits without a deadline.
    """

    interval_seconds: float = Field(30.0, gt=0.0)
    backoff_multiplier: float = Field(1.0, ge=1.0, le=10.0)
    max_interval_seconds: float = Field(300.0, gt=0.0)
    timeout_seconds: Optional[float] = Field(43200.0, gt=0.0)

    def delays(self) -> Iterator[float]:
        """Yield successive delays between status reads, forever."""
        delay = min(self.interval_seconds, self.max_interval_seconds)
        while True:
            yield delay
            delay = min(delay * self.backoff_multiplier, self.max_interval_seconds)

    def deadline(self, started_at: float) -> Optional[float]:
        if self.timeout_seconds is None:
            return None
        return started_at + self.timeout_seconds
