from __future__ import annotations

from datetime import datetime
from pathlib import Path

import numpy as np


def capture_audio_sample(seconds: float, sample_rate: int, device: str = "") -> np.ndarray:
    import sounddevice as sd

    if device:
        selected_device = device
    else:
        input_device = sd.default.device[0] if isinstance(sd.default.device, (list, tuple)) else -1
        if input_device is None or int(input_device) < 0:
            raise RuntimeError("No input microphone device is available")
        selected_device = input_device

    frames = max(1, int(seconds * sample_rate))
    data = sd.rec(
        frames,
        samplerate=sample_rate,
        channels=1,
        dtype="float32",
        device=selected_device,
    )
    sd.wait()
    return np.clip(data[:, 0].copy(), -1.0, 1.0).astype(np.float32, copy=False)


def save_session_clip(samples: np.ndarray, sample_rate: int, output_dir: str | Path) -> Path:
    import soundfile as sf

    output = Path(output_dir)
    output.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    clip_path = output / f"session_{stamp}.wav"
    sf.write(clip_path, samples, sample_rate)
    return clip_path


def capture_audio_clip(seconds: float, sample_rate: int, output_dir: str | Path, device: str = "") -> Path:
    samples = capture_audio_sample(seconds=seconds, sample_rate=sample_rate, device=device)
    return save_session_clip(samples=samples, sample_rate=sample_rate, output_dir=output_dir)


def clip_duration_seconds(clip_path: str | Path) -> float:
    import librosa

    return float(librosa.get_duration(path=str(clip_path)))
