from __future__ import annotations

import requests

from babblebear.dashboard.models import Assessment, Child, Recording


class FakeClient:
    """In-memory stand-in for BabbleApiClient."""

    def __init__(self, children=None, recordings=None, assessments=None, failing=()):
        self.children = children or []
        self.recordings = recordings or []
        self.assessments = assessments or {}
        self.failing = set(failing)
        self.calls = []

    def _check(self, name):
        self.calls.append(name)
        if name in self.failing:
            raise requests.HTTPError(f"{name} failed")

    def list_children(self):
        self._check("list_children")
        return list(self.children)

    def create_child(self, data):
        self._check("create_child")
        return Child.from_payload({"id": "new", **data})

    def update_child(self, child_id, data):
        self._check("update_child")
        return Child.from_payload({"id": child_id, **data})

    def list_recordings(self):
        self._check("list_recordings")
        return list(self.recordings)

    def list_child_recordings(self, child_id):
        self._check("list_child_recordings")
        return [item for item in self.recordings if item.child_id == child_id]

    def list_child_assessments(self, child_id):
        self._check(f"assessments:{child_id}")
        return list(self.assessments.get(child_id, []))

    def create_recording(self, child_id, session_name, notes=""):
        self._check("create_recording")
        return Recording(id="r-new", child_id=child_id, session_name=session_name, notes=notes)

    def upload_recording(self, recording_id, clip_path):
        self._check("upload_recording")
        return {"status": "uploaded"}

    def analyze_recording(self, recording_id):
        self._check("analyze_recording")
        return {"status": "queued"}

    def request_assessment(self, child_id):
        self._check("request_assessment")
        return Assessment(
            child_id=child_id,
            autism_probability=20.0,
            confidence_level=0.8,
            total_recordings_analyzed=4,
            dominant_sound_categories='{"unknown": 10}',
        )
