from fastapi.testclient import TestClient

from babblebear.dashboard import audio
from babblebear.dashboard.api import create_app
from babblebear.dashboard.config import DashboardConfig
from babblebear.dashboard.models import Assessment, Child
from fakes import FakeClient


def _app(tmp_path, client):
    config = DashboardConfig(access_token="t", upload_dir=str(tmp_path / "uploads"))
    return TestClient(create_app(config=config, client=client))


def test_health(tmp_path):
    response = _app(tmp_path, FakeClient()).get("/health")
    assert response.json() == {"status": "ok"}


def test_dashboard_returns_scores(tmp_path):
    client = FakeClient(children=[Child(id="c1", name="Emma", date_of_birth="2023-06-14")])
    response = _app(tmp_path, client).get("/dashboard")

    assert response.status_code == 200
    payload = response.json()
    assert payload["overall_score"] == 75
    assert payload["children"][0]["child"]["name"] == "Emma"


def test_backend_failure_maps_to_502(tmp_path):
    response = _app(tmp_path, FakeClient(failing={"list_children"})).get("/children")

    assert response.status_code == 502
    assert response.json()["reason"] == "backend_unavailable"


def test_create_child_validates_required_fields(tmp_path):
    app = _app(tmp_path, FakeClient())

    rejected = app.post("/children", json={"name": "Emma"})
    created = app.post("/children", json={"name": "Emma", "date_of_birth": "2023-06-14"})

    assert rejected.status_code == 422
    assert created.status_code == 201
    assert created.json()["id"] == "new"


def test_score_endpoint(tmp_path):
    app = _app(tmp_path, FakeClient())

    good = app.post(
        "/score",
        json={
            "child_id": "c1",
            "autism_probability": 100,
            "confidence_level": 0,
            "total_recordings_analyzed": 0,
            "dominant_sound_categories": '{"unknown": 80}',
        },
    )
    malformed = app.post("/score", json={"child_id": "c1", "dominant_sound_categories": "oops"})
    invalid = app.post("/score", json={"child_id": "c1", "autism_probability": "high"})

    assert good.json() == {"score": 0, "label": "Needs Attention"}
    assert malformed.json()["score"] == 65
    assert invalid.status_code == 422


def test_generate_assessment(tmp_path):
    response = _app(tmp_path, FakeClient()).post("/children/c1/assessment")

    assert response.status_code == 200
    assert response.json()["score"] == 100
    assert response.json()["risk_level"] == "low"


def test_record_upload_runs_workflow(tmp_path, monkeypatch):
    monkeypatch.setattr(audio, "clip_duration_seconds", lambda _: 9.0)
    client = FakeClient()

    response = _app(tmp_path, client).post(
        "/children/c1/recordings",
        files={"file": ("recording.wav", b"RIFF", "audio/wav")},
    )

    assert response.status_code == 200
    assert response.json()["analysis_triggered"] is True
    assert response.json()["duration_seconds"] == 9.0
    assert "upload_recording" in client.calls
    assert not list((tmp_path / "uploads").iterdir())


def test_record_upload_failure(tmp_path, monkeypatch):
    monkeypatch.setattr(audio, "clip_duration_seconds", lambda _: 9.0)

    response = _app(tmp_path, FakeClient(failing={"create_recording"})).post(
        "/children/c1/recordings",
        files={"file": ("recording.wav", b"RIFF", "audio/wav")},
    )

    assert response.status_code == 502
    assert response.json()["step"] == "create"


class _StagingClient(FakeClient):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.uploaded_paths = []

    def upload_recording(self, recording_id, clip_path):
        self.uploaded_paths.append(str(clip_path))
        return super().upload_recording(recording_id, clip_path)


class _MalformedAssessmentClient(FakeClient):
    def list_child_assessments(self, child_id):
        self._check(f"assessments:{child_id}")
        return [Assessment.from_payload({"child_id": child_id, "autism_probability": "n/a"})]


def test_undecodable_upload_is_rejected(tmp_path):
    client = FakeClient()

    response = _app(tmp_path, client).post(
        "/children/c1/recordings",
        files={"file": ("recording.wav", b"RIFF", "audio/wav")},
    )

    assert response.status_code == 422
    assert response.json()["step"] == "duration"
    assert "create_recording" not in client.calls
    assert not list((tmp_path / "uploads").iterdir())


def test_each_upload_is_staged_under_its_own_name(tmp_path, monkeypatch):
    monkeypatch.setattr(audio, "clip_duration_seconds", lambda _: 9.0)
    client = _StagingClient()
    app = _app(tmp_path, client)

    for _ in range(2):
        response = app.post(
            "/children/c1/recordings",
            files={"file": ("recording.wav", b"RIFF", "audio/wav")},
        )
        assert response.status_code == 200

    assert len(set(client.uploaded_paths)) == 2


def test_dashboard_tolerates_unparseable_assessment(tmp_path):
    client = _MalformedAssessmentClient(children=[Child(id="c1", name="Emma", date_of_birth="2023-06-14")])

    response = _app(tmp_path, client).get("/dashboard")

    assert response.status_code == 200
    assert response.json()["children"][0]["score"] == 75


def test_analytics_with_unparseable_assessment_maps_to_502(tmp_path):
    response = _app(tmp_path, _MalformedAssessmentClient()).get("/children/c1/analytics")

    assert response.status_code == 502
    assert response.json()["reason"] == "backend_malformed"
