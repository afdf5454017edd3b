"""
Pytest configuration and shared fixtures.

Provides a test configuration, sample feedback rows, and in-memory stand-ins
for the three remote services (database REST API, model provider, hosting
API). No test touches the network.
"""

import json
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
import requests

from feedback_loop.core.config import Config
from feedback_loop.feedback.schema import FeedbackRecord
from feedback_loop.finetune.polling import PollingPolicy


ENV_NAMES = [
    "SUPABASE_URL",
    "SUPABASE_SERVICE_ROLE_KEY",
    "OPENAI_API_KEY",
    "NETLIFY_AUTH_TOKEN",
    "NETLIFY_SITE_ID",
    "WEATHER_API_KEY",
    "FINE_TUNED_MODEL_NAME",
    "BASE_MODEL",
    "MIN_RATING",
    "DATASET_PATH",
    "LOGS_DIR",
    "LOG_LEVEL",
]


class FakeResponse:
    """Minimal requests.Response stand-in."""

    def __init__(self, status_code: int = 200, payload: Any = None):
        self.status_code = status_code
        self.content = b"" if payload is None else json.dumps(payload).encode("utf-8")

    def json(self) -> Any:
        return json.loads(self.content.decode("utf-8"))

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error", response=self)


class FakeSession:
    """
    Replays queued responses (or raises queued exceptions) in order and
    records every call as (method, url, kwargs).
    """

    def __init__(self, responses: Optional[List[Any]] = None):
        self.headers: Dict[str, str] = {}
        self.calls: List[tuple] = []
        self._responses = list(responses or [])

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append((method, url, kwargs))
        if not self._responses:
            raise AssertionError(f"Unexpected {method} {url}")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self.request("GET", url, **kwargs)


class FakeFiles:
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.uploads: List[Dict[str, Any]] = []

    def create(self, file, purpose):
        if self.error is not None:
            raise self.error
        self.uploads.append({"content": file.read(), "purpose": purpose})
        return SimpleNamespace(id="file-abc123")


class FakeJobs:
    """
    Fine-tune job endpoint: create returns the initial status, each retrieve
    pops the next status from the script (the last one repeats).
    """

    def __init__(
        self,
        statuses: Optional[List[str]] = None,
        initial_status: str = "validating_files",
        model_id: Optional[str] = "ft:gpt-4o-mini-2024-07-18:acme::abc123",
        create_error: Optional[Exception] = None,
        retrieve_error: Optional[Exception] = None,
    ):
        self.statuses = list(statuses or ["succeeded"])
        self.initial_status = initial_status
        self.model_id = model_id
        self.create_error = create_error
        self.retrieve_error = retrieve_error
        self.created: List[Dict[str, Any]] = []
        self.retrieved: List[str] = []

    def _job(self, status: str, model: str = "gpt-4o-mini-2024-07-18"):
        return SimpleNamespace(
            id="ftjob-1",
            status=status,
            model=model,
            training_file="file-abc123",
            fine_tuned_model=self.model_id if status == "succeeded" else None,
            error=SimpleNamespace(message="training diverged") if status == "failed" else None,
        )

    def create(self, **params):
        if self.create_error is not None:
            raise self.create_error
        self.created.append(params)
        return self._job(self.initial_status, params["model"])

    def retrieve(self, job_id):
        if self.retrieve_error is not None:
            raise self.retrieve_error
        self.retrieved.append(job_id)
        status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        return self._job(status)


class FakeChatCompletions:
    def __init__(self, content: Optional[str] = "Generated section text.", error: Optional[Exception] = None):
        self.content = content
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def create(self, **params):
        self.calls.append(params)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    def __init__(self, files=None, jobs=None, completions=None):
        self.files = files or FakeFiles()
        self.fine_tuning = SimpleNamespace(jobs=jobs or FakeJobs())
        self.chat = SimpleNamespace(completions=completions or FakeChatCompletions())


@pytest.fixture
def fakes() -> SimpleNamespace:
    """Namespace of the fake service classes defined above."""
    return SimpleNamespace(
        Response=FakeResponse,
        Session=FakeSession,
        Files=FakeFiles,
        Jobs=FakeJobs,
        ChatCompletions=FakeChatCompletions,
        OpenAI=FakeOpenAI,
    )


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """
    Isolate every test from the developer's environment and .env file.
    """
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def test_config(tmp_path) -> Config:
    """
    Configuration with every credential set and an instant polling policy.
    """
    return Config(
        supabase_url="https://db.example.test",
        supabase_service_role_key="service-key",
        openai_api_key="sk-test",
        netlify_auth_token="netlify-token",
        netlify_site_id="site-123",
        dataset_path=tmp_path / "training-data.jsonl",
        logs_dir=tmp_path / "logs",
        log_level="WARNING",
        polling=PollingPolicy(interval_seconds=0.01, timeout_seconds=None),
    )


@pytest.fixture
def feedback_rows() -> List[Dict[str, Any]]:
    """Rows as returned by the feedback table."""
    return [
        {
            "id": 1,
            "section_id": "roof",
            "rating": 7,
            "feedback": "Great detail on shingles",
            "generated_text": "  The roof shows hail impact marks.  ",
            "timestamp": "2025-03-01T12:00:00Z",
        },
        {
            "id": 2,
            "section_id": "siding",
            "rating": 6,
            "feedback": "",
            "generated_text": "Siding is intact.\n",
            "timestamp": "2025-03-02T08:30:00Z",
        },
    ]


@pytest.fixture
def feedback_records(feedback_rows) -> List[FeedbackRecord]:
    return [FeedbackRecord(**row) for row in feedback_rows]


def pytest_configure(config):
    """
    Pytest hook for custom configuration.

    Registers custom markers used throughout tests.
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running (deferred CI)"
    )
