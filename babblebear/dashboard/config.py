from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


DEFAULT_ACCESS_TOKEN_FILE = "/run/secrets/babblebear_access_token"


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    return int(value)


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    return float(value)


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _read_secret(path: str) -> str:
    secret = Path(path)
    if not secret.is_file():
        return ""
    return secret.read_text(encoding="utf-8").strip()


@dataclass(frozen=True)
class DashboardConfig:
    access_token: str
    api_base_url: str = "http://localhost:8080"
    request_timeout_seconds: float = 15.0
    recent_sessions_limit: int = 10
    max_workers: int = 4
    auto_assessment: bool = True
    upload_dir: str = "/app/artifacts/uploads"
    sample_rate: int = 16000
    audio_device: str = ""
    log_level: str = "INFO"
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @classmethod
    def from_env(cls) -> "DashboardConfig":
        token = os.getenv("ACCESS_TOKEN", "").strip()
        if not token:
            token = _read_secret(os.getenv("ACCESS_TOKEN_FILE", DEFAULT_ACCESS_TOKEN_FILE).strip())
        if not token:
            raise ValueError("ACCESS_TOKEN or ACCESS_TOKEN_FILE is required")

        base_url = os.getenv("API_BASE_URL", "http://localhost:8080").strip().rstrip("/")
        if not base_url.startswith(("http://", "https://")):
            raise ValueError("API_BASE_URL must start with http:// or https://")

        recent_limit = _int_env("RECENT_SESSIONS_LIMIT", 10)
        if recent_limit < 1:
            raise ValueError("RECENT_SESSIONS_LIMIT must be at least 1")

        return cls(
            access_token=token,
            api_base_url=base_url,
            request_timeout_seconds=_float_env("REQUEST_TIMEOUT_SECONDS", 15.0),
            recent_sessions_limit=recent_limit,
            max_workers=max(1, _int_env("MAX_WORKERS", 4)),
            auto_assessment=_bool_env("AUTO_ASSESSMENT", True),
            upload_dir=os.getenv("UPLOAD_DIR", "/app/artifacts/uploads").strip(),
            sample_rate=_int_env("SAMPLE_RATE", 16000),
            audio_device=os.getenv("AUDIO_DEVICE", "").strip(),
            log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
            api_host=os.getenv("API_HOST", "0.0.0.0").strip(),
            api_port=_int_env("API_PORT", 8000),
        )
