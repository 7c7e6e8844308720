from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path

import requests

from babblebear.dashboard.client import BabbleApiClient
from babblebear.dashboard.config import DashboardConfig
from babblebear.dashboard.models import Assessment, Child, Recording
from babblebear.dashboard.scoring import (
    ScoreAggregator,
    risk_level,
    score_label,
)


class RecordingError(RuntimeError):
    def __init__(self, step: str, message: str) -> None:
        super().__init__(f"{step}: {message}")
        self.step = step


@dataclass(frozen=True)
class ChildScore:
    child: Child
    score: int
    label: str
    age: str
    assessment: Assessment | None = None


@dataclass(frozen=True)
class DashboardView:
    children: list[ChildScore]
    overall_score: int
    overall_label: str
    recent_sessions: list[Recording]
    todays_sessions: list[Recording]


@dataclass(frozen=True)
class ChildAnalytics:
    child_id: str
    recordings: list[Recording]
    assessments: list[Assessment]
    latest_assessment: Assessment | None
    score: int
    label: str
    risk_level: str | None
    analyzed_recordings: int
    total_duration: str


@dataclass(frozen=True)
class RecordingOutcome:
    recording: Recording
    duration_seconds: float
    analysis_triggered: bool
    assessment: Assessment | None = None
    score: int | None = None
    message: str = ""


def _parse_date(value: str | date) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def age_in_months(date_of_birth: str | date, today: date | None = None) -> int:
    born = _parse_date(date_of_birth)
    current = today or date.today()
    months = (current.year - born.year) * 12 + (current.month - born.month)
    if current.day < born.day:
        months -= 1
    return max(0, months)


def format_age(date_of_birth: str | date, today: date | None = None) -> str:
    try:
        months = age_in_months(date_of_birth, today=today)
    except ValueError:
        return "unknown"
    if months < 12:
        return f"{months} month{'s' if months != 1 else ''}"
    years, rest = divmod(months, 12)
    text = f"{years} year{'s' if years != 1 else ''}"
    if rest:
        text = f"{text} {rest} month{'s' if rest != 1 else ''}"
    return text


def format_duration(seconds: float) -> str:
    minutes = int(seconds // 60)
    remaining = int(round(seconds % 60))
    if remaining == 60:
        minutes, remaining = minutes + 1, 0
    return f"{minutes}:{remaining:02d}"


class DashboardService:
    def __init__(
        self,
        config: DashboardConfig,
        client: BabbleApiClient,
        aggregator: ScoreAggregator | None = None,
    ) -> None:
        self.config = config
        self.client = client
        self.aggregator = aggregator or ScoreAggregator()

    def _latest_assessment(self, child_id: str) -> Assessment | None:
        try:
            assessments = self.client.list_child_assessments(child_id)
        except (requests.RequestException, ValueError, TypeError) as exc:
            logging.error("Failed to load assessments for child %s: %s", child_id, exc)
            return None
        return assessments[0] if assessments else None

    def score_children(self, children: list[Child], today: date | None = None) -> list[ChildScore]:
        if not children:
            return []

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
            futures = [pool.submit(self._latest_assessment, child.id) for child in children]
            latest = [future.result() for future in futures]

        results = []
        for child, assessment in zip(children, latest):
            score = self.aggregator.compute_score(assessment)
            results.append(
                ChildScore(
                    child=child,
                    score=score,
                    label=score_label(score),
                    age=format_age(child.date_of_birth, today=today),
                    assessment=assessment,
                )
            )
        return results

    def load_dashboard(self, today: date | None = None) -> DashboardView:
        current = today or date.today()
        children = self.client.list_children()
        recordings = self.client.list_recordings()

        prefix = current.isoformat()
        todays = [item for item in recordings if item.recorded_at.startswith(prefix)]
        child_scores = self.score_children(children, today=current)
        overall = self.aggregator.compute_average([item.score for item in child_scores])

        logging.info(
            "Dashboard loaded (children=%d recordings=%d today=%d overall=%d)",
            len(children),
            len(recordings),
            len(todays),
            overall,
        )
        return DashboardView(
            children=child_scores,
            overall_score=overall,
            overall_label=score_label(overall),
            recent_sessions=recordings[: self.config.recent_sessions_limit],
            todays_sessions=todays,
        )

    def load_child_analytics(self, child_id: str) -> ChildAnalytics:
        recordings = self.client.list_child_recordings(child_id)
        assessments = self.client.list_child_assessments(child_id)
        latest = assessments[0] if assessments else None
        score = self.aggregator.compute_score(latest)
        return ChildAnalytics(
            child_id=child_id,
            recordings=recordings,
            assessments=assessments,
            latest_assessment=latest,
            score=score,
            label=score_label(score),
            risk_level=risk_level(latest.autism_probability) if latest is not None else None,
            analyzed_recordings=sum(1 for item in recordings if item.is_analyzed),
            total_duration=format_duration(sum(item.duration for item in recordings)),
        )

    def generate_assessment(self, child_id: str) -> tuple[Assessment, int]:
        assessment = self.client.request_assessment(child_id)
        return assessment, self.aggregator.compute_score(assessment)

    def record_session(
        self,
        child_id: str,
        clip_path: str | Path,
        duration_seconds: float | None = None,
        auto_assessment: bool | None = None,
    ) -> RecordingOutcome:
        if duration_seconds is None:
            from babblebear.dashboard.audio import clip_duration_seconds

            try:
                duration_seconds = clip_duration_seconds(clip_path)
            except Exception as exc:
                raise RecordingError("duration", f"could not decode audio clip: {exc}") from exc
        if auto_assessment is None:
            auto_assessment = self.config.auto_assessment

        session_name = f"Session {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}"
        try:
            recording = self.client.create_recording(
                child_id=child_id,
                session_name=session_name,
                notes=f"Recording duration: {int(round(duration_seconds))} seconds",
            )
        except requests.RequestException as exc:
            raise RecordingError("create", str(exc)) from exc

        try:
            self.client.upload_recording(recording.id, clip_path)
        except (requests.RequestException, FileNotFoundError) as exc:
            raise RecordingError("upload", str(exc)) from exc

        try:
            self.client.analyze_recording(recording.id)
            analysis_triggered = True
        except requests.RequestException as exc:
            logging.error("Failed to trigger analysis for recording %s: %s", recording.id, exc)
            analysis_triggered = False

        assessment = None
        if auto_assessment:
            try:
                assessment = self.client.request_assessment(child_id)
            except requests.RequestException as exc:
                logging.error("Failed to generate assessment for child %s: %s", child_id, exc)

        if analysis_triggered:
            message = "Recording uploaded and analysis started successfully!"
        else:
            message = "Recording uploaded successfully! Analysis will be available shortly."
        logging.info("Recording %s uploaded for child %s (analysis=%s)", recording.id, child_id, analysis_triggered)

        return RecordingOutcome(
            recording=recording,
            duration_seconds=float(duration_seconds),
            analysis_triggered=analysis_triggered,
            assessment=assessment,
            score=self.aggregator.compute_score(assessment) if assessment is not None else None,
            message=message,
        )
