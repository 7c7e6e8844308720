from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict
from pathlib import Path

from babblebear.dashboard.client import BabbleApiClient
from babblebear.dashboard.config import DashboardConfig
from babblebear.dashboard.service import DashboardService, RecordingError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="BabbleBear parent dashboard")
    parser.add_argument(
        "command",
        choices=["status", "dashboard", "analytics", "assess", "record", "serve"],
        help="Dashboard command",
    )
    parser.add_argument("--child-id", default="", help="Child used by analytics, assess and record")
    parser.add_argument("--clip-path", default="", help="Existing audio clip to upload when recording")
    parser.add_argument("--seconds", type=float, default=30.0, help="Microphone capture length for record")
    parser.add_argument("--no-assessment", action="store_true", help="Skip the assessment request after recording")
    return parser


def _print_json(payload) -> None:
    print(json.dumps(payload, indent=2, default=str))


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    if args.command == "status":
        print("dashboard_ready")
        return 0

    config = DashboardConfig.from_env()
    logging.basicConfig(level=getattr(logging, config.log_level, logging.INFO))

    if args.command == "serve":
        from babblebear.dashboard.api import main as serve_main

        return serve_main()

    if args.command in {"analytics", "assess", "record"} and not args.child_id:
        logging.error("--child-id is required for %s", args.command)
        return 2

    client = BabbleApiClient(
        base_url=config.api_base_url,
        access_token=config.access_token,
        timeout_seconds=config.request_timeout_seconds,
    )
    service = DashboardService(config=config, client=client)

    if args.command == "dashboard":
        _print_json(asdict(service.load_dashboard()))
        return 0

    if args.command == "analytics":
        _print_json(asdict(service.load_child_analytics(args.child_id)))
        return 0

    if args.command == "assess":
        assessment, score = service.generate_assessment(args.child_id)
        _print_json({"assessment": asdict(assessment), "score": score})
        return 0

    if args.clip_path:
        clip_path = Path(args.clip_path)
        if not clip_path.exists():
            logging.error("Clip not found: %s", clip_path)
            return 2
        duration = None
    else:
        from babblebear.dashboard.audio import capture_audio_clip

        logging.info("Recording %.1fs from microphone", args.seconds)
        clip_path = capture_audio_clip(
            seconds=args.seconds,
            sample_rate=config.sample_rate,
            output_dir=config.upload_dir,
            device=config.audio_device,
        )
        duration = args.seconds

    try:
        outcome = service.record_session(
            child_id=args.child_id,
            clip_path=clip_path,
            duration_seconds=duration,
            auto_assessment=False if args.no_assessment else None,
        )
    except RecordingError as exc:
        logging.error("Recording workflow failed: %s", exc)
        return 1
    _print_json(asdict(outcome))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
