import pytest

from babblebear.dashboard.models import Assessment


def _payload(**overrides):
    payload = {"child_id": "c1", "autism_probability": 10, "confidence_level": 0.5}
    payload.update(overrides)
    return payload


def test_recording_count_accepts_whole_numbers():
    assert Assessment.from_payload(_payload(total_recordings_analyzed="3.0")).total_recordings_analyzed == 3
    assert Assessment.from_payload(_payload(total_recordings_analyzed=4)).total_recordings_analyzed == 4
    assert Assessment.from_payload(_payload()).total_recordings_analyzed == 0


@pytest.mark.parametrize("value", [2.7, -1, "many", float("inf")])
def test_recording_count_rejects_invalid_values(value):
    with pytest.raises(ValueError):
        Assessment.from_payload(_payload(total_recordings_analyzed=value))
