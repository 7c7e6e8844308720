from __future__ import annotations

import logging
import uuid
from dataclasses import asdict
from pathlib import Path

import requests
from fastapi import FastAPI, File, UploadFile
from fastapi.responses import JSONResponse

from babblebear.dashboard.client import BabbleApiClient
from babblebear.dashboard.config import DashboardConfig
from babblebear.dashboard.models import Assessment
from babblebear.dashboard.scoring import risk_level, score_label
from babblebear.dashboard.service import DashboardService, RecordingError


BACKEND_ERRORS = (requests.RequestException, ValueError, TypeError)


def _backend_error(exc: Exception) -> JSONResponse:
    status = getattr(getattr(exc, "response", None), "status_code", None)
    reason = "backend_unavailable" if isinstance(exc, requests.RequestException) else "backend_malformed"
    logging.error("Backend request failed: %s", exc)
    return JSONResponse(
        {"status": "error", "reason": reason, "backend_status": status, "detail": str(exc)},
        status_code=502,
    )


def create_app(config: DashboardConfig | None = None, client: BabbleApiClient | None = None) -> FastAPI:
    app = FastAPI(title="BabbleBear Dashboard", version="0.3.0")

    config = config or DashboardConfig.from_env()
    client = client or BabbleApiClient(
        base_url=config.api_base_url,
        access_token=config.access_token,
        timeout_seconds=config.request_timeout_seconds,
    )
    service = DashboardService(config=config, client=client)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/dashboard")
    def dashboard():
        try:
            view = service.load_dashboard()
        except BACKEND_ERRORS as exc:
            return _backend_error(exc)
        return JSONResponse(asdict(view))

    @app.get("/children")
    def list_children():
        try:
            children = client.list_children()
        except BACKEND_ERRORS as exc:
            return _backend_error(exc)
        return JSONResponse([asdict(child) for child in children])

    @app.post("/children")
    def create_child(data: dict):
        if not str(data.get("name", "")).strip() or not str(data.get("date_of_birth", "")).strip():
            return JSONResponse({"status": "rejected", "reason": "name and date_of_birth are required"}, status_code=422)
        try:
            child = client.create_child(data)
        except BACKEND_ERRORS as exc:
            return _backend_error(exc)
        return JSONResponse(asdict(child), status_code=201)

    @app.put("/children/{child_id}")
    def update_child(child_id: str, data: dict):
        try:
            child = client.update_child(child_id, data)
        except BACKEND_ERRORS as exc:
            return _backend_error(exc)
        return JSONResponse(asdict(child))

    @app.get("/children/{child_id}/analytics")
    def child_analytics(child_id: str):
        try:
            analytics = service.load_child_analytics(child_id)
        except BACKEND_ERRORS as exc:
            return _backend_error(exc)
        return JSONResponse(asdict(analytics))

    @app.post("/children/{child_id}/assessment")
    def generate_assessment(child_id: str):
        try:
            assessment, score = service.generate_assessment(child_id)
        except BACKEND_ERRORS as exc:
            return _backend_error(exc)
        return JSONResponse(
            {
                "assessment": asdict(assessment),
                "score": score,
                "label": score_label(score),
                "risk_level": risk_level(assessment.autism_probability),
            }
        )

    @app.post("/children/{child_id}/recordings")
    async def record(child_id: str, file: UploadFile = File(...)):
        suffix = Path(file.filename or "recording.wav").suffix or ".wav"
        upload_dir = Path(config.upload_dir)
        upload_dir.mkdir(parents=True, exist_ok=True)
        clip_path = upload_dir / f"{child_id}_{uuid.uuid4().hex}{suffix}"
        clip_path.write_bytes(await file.read())

        try:
            outcome = service.record_session(child_id=child_id, clip_path=clip_path)
        except RecordingError as exc:
            logging.error("Recording workflow failed: %s", exc)
            status_code = 422 if exc.step == "duration" else 502
            return JSONResponse({"status": "error", "step": exc.step, "detail": str(exc)}, status_code=status_code)
        finally:
            clip_path.unlink(missing_ok=True)
        return JSONResponse({"status": "ok", **asdict(outcome)})

    @app.post("/score")
    def score(data: dict):
        try:
            assessment = Assessment.from_payload(data)
        except (TypeError, ValueError) as exc:
            return JSONResponse({"status": "rejected", "reason": str(exc)}, status_code=422)
        value = service.aggregator.compute_score(assessment)
        return JSONResponse({"score": value, "label": score_label(value)})

    return app


def main() -> int:
    import uvicorn

    config = DashboardConfig.from_env()
    logging.basicConfig(level=getattr(logging, config.log_level, logging.INFO))
    uvicorn.run("babblebear.dashboard.api:create_app", factory=True, host=config.api_host, port=config.api_port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
