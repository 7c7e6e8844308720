from __future__ import annotations

from pathlib import Path
from typing import Any

import requests

from babblebear.dashboard.models import Assessment, Child, Recording


class BabbleApiClient:
    """Thin client for the BabbleBear backend REST API.

    HTTP failures are raised as ``requests.HTTPError`` by ``raise_for_status``.
    """

    def __init__(self, base_url: str, access_token: str, timeout_seconds: float = 15.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._session = requests.Session()
        self._session.headers.update(
            {
                "accept": "application/json",
                "Authorization": f"Bearer {access_token}",
            }
        )

    def _get(self, path: str) -> Any:
        response = self._session.get(f"{self.base_url}{path}", timeout=self.timeout_seconds)
        response.raise_for_status()
        return response.json()

    def _post(self, path: str, json: dict[str, Any] | None = None, files: Any = None) -> Any:
        response = self._session.post(
            f"{self.base_url}{path}",
            json=json,
            files=files,
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    def _put(self, path: str, json: dict[str, Any]) -> Any:
        response = self._session.put(f"{self.base_url}{path}", json=json, timeout=self.timeout_seconds)
        response.raise_for_status()
        return response.json()

    def list_children(self) -> list[Child]:
        return [Child.from_payload(item) for item in self._get("/children")]

    def create_child(self, data: dict[str, Any]) -> Child:
        return Child.from_payload(self._post("/children", json=data))

    def update_child(self, child_id: str, data: dict[str, Any]) -> Child:
        return Child.from_payload(self._put(f"/children/{child_id}", json=data))

    def list_recordings(self) -> list[Recording]:
        return [Recording.from_payload(item) for item in self._get("/recordings")]

    def list_child_recordings(self, child_id: str) -> list[Recording]:
        return [Recording.from_payload(item) for item in self._get(f"/children/{child_id}/recordings")]

    def list_child_assessments(self, child_id: str) -> list[Assessment]:
        return [Assessment.from_payload(item) for item in self._get(f"/children/{child_id}/autism-assessments")]

    def create_recording(self, child_id: str, session_name: str, notes: str = "") -> Recording:
        payload = {"child_id": child_id, "session_name": session_name, "notes": notes}
        return Recording.from_payload(self._post("/recordings", json=payload))

    def upload_recording(self, recording_id: str, clip_path: str | Path) -> dict[str, Any]:
        path = Path(clip_path)
        if not path.exists():
            raise FileNotFoundError(f"Clip not found: {path}")

        with path.open("rb") as fh:
            return self._post(
                f"/recordings/{recording_id}/upload",
                files={"file": (path.name, fh, "audio/wav")},
            )

    def analyze_recording(self, recording_id: str) -> dict[str, Any]:
        return self._post(f"/recordings/{recording_id}/analyze")

    def request_assessment(self, child_id: str) -> Assessment:
        return Assessment.from_payload(self._post(f"/children/{child_id}/autism-assessment"))
