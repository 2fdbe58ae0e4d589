import os
import json

from transform import get_london_time, records_to_frame


def _ensure_parent(file_path):
    parent = os.path.dirname(os.path.abspath(file_path))
    os.makedirs(parent, exist_ok=True)


def write_records(records, file_path):
    """
    LOAD LAYER:
    Writes constituent records as a pretty-printed JSON array.
    """
    _ensure_parent(file_path)
    df = records_to_frame(records)
    df.to_json(file_path, orient='records', indent=2, force_ascii=False)
    print(f"   -> [{get_london_time()}] {len(df)} rows written to file: {file_path}")
    return file_path


def write_observation(observation, file_path):
    """Writes a single price observation, or null when there is none."""
    _ensure_parent(file_path)
    payload = observation.to_dict() if observation is not None else None
    with open(file_path, 'w', encoding='utf-8') as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
    print(f"   -> [{get_london_time()}] Observation written to file: {file_path}")
    return file_path
