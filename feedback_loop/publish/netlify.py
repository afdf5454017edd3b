"""
Publishes the fine-tuned model id into the hosting platform's site
environment and triggers a rebuild so the serving functions pick it up.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests
from pydantic import BaseModel

from feedback_loop.core.exceptions import ConfigPublishError

logger = logging.getLogger(__name__)

MODEL_ENV_KEY = "FINE_TUNED_MODEL_NAME"
PRODUCTION_CONTEXT = "production"
NETLIFY_API_BASE = "https://api.netlify.com/api/v1"


class PublishResult(BaseModel):
    """
    Outcome of a successful publish.

    Fields:
    - action: "created" or "updated"
    - entry_id: identity of the environment entry, when the API reports one
    - build_id: id of the triggered build, when the API reports one
    """

    model_id: str
    action: str
    entry_id: Optional[str] = None
    build_id: Optional[str] = None


class NetlifyEnvPublisher:
    """
    Upsert of a single site environment variable followed by a build trigger.

    Concurrent publishers are not coordinated: the last write wins.
    """

    def __init__(
        self,
        auth_token: str,
        site_id: str,
        session: Optional[requests.Session] = None,
        api_base: str = NETLIFY_API_BASE,
        key: str = MODEL_ENV_KEY,
        timeout: float = 30.0,
    ) -> None:
        self.site_url = f"{api_base.rstrip('/')}/sites/{site_id}"
        self.key = key
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {auth_token}"})

    def list_env(self) -> List[Dict[str, Any]]:
        entries = self._call("GET", "/env") or []
        if not isinstance(entries, list) or not all(isinstance(entry, dict) for entry in entries):
            raise ConfigPublishError(f"GET /env returned unexpected payload: {entries!r}")
        return entries

    def find_entry(self, key: Optional[str] = None) -> Optional[Dict[str, Any]]:
        key = key or self.key
        return next((entry for entry in self.list_env() if entry.get("key") == key), None)

    def create_entry(self, value: str) -> Dict[str, Any]:
        payload = {"key": self.key, "values": {PRODUCTION_CONTEXT: value}}
        created = self._call("POST", "/env", json=payload) or {}
        # the create endpoint replies with the list of entries it wrote
        if isinstance(created, list) and len(created) == 1:
            created = created[0]
        return _expect_object(created, "POST /env")

    def update_entry(self, entry_id: str, value: str) -> Dict[str, Any]:
        payload = {"values": {PRODUCTION_CONTEXT: value}}
        return _expect_object(self._call("PATCH", f"/env/{entry_id}", json=payload) or {}, "PATCH /env")

    def trigger_build(self) -> Dict[str, Any]:
        return _expect_object(self._call("POST", "/builds", json={}) or {}, "POST /builds")

    def publish_model(self, model_id: str) -> PublishResult:
        """
        Create or update the model entry, then trigger a redeploy.

        An existing entry is patched in place so its id is preserved.
        """

        existing = self.find_entry()
        if existing is None:
            logger.info("Creating new site env var %s", self.key)
            created = self.create_entry(model_id)
            action, entry_id = "created", created.get("id")
        else:
            entry_id = existing.get("id")
            if not entry_id:
                raise ConfigPublishError(f"Existing env var {self.key} has no id; cannot update")
            logger.info("Updating existing site env var %s (previous: %s)", self.key, existing.get("values"))
            self.update_entry(entry_id, model_id)
            action = "updated"

        logger.info("Triggering site redeploy...")
        build = self.trigger_build()
        logger.info("Redeploy triggered. %s=%s", self.key, model_id)
        return PublishResult(
            model_id=model_id,
            action=action,
            entry_id=str(entry_id) if entry_id is not None else None,
            build_id=str(build["id"]) if build.get("id") is not None else None,
        )

    def _call(self, method: str, path: str, **kwargs: Any) -> Any:
        url = self.site_url + path
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise ConfigPublishError(f"{method} {path} failed: {exc}") from exc

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ConfigPublishError(f"{method} {path} returned invalid JSON") from exc


def _expect_object(payload: Any, call: str) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise ConfigPublishError(f"{call} returned unexpected payload: {payload!r}")
    return payload
