"""Serialize segmentation results and export them with a stats manifest."""

import os
from dataclasses import asdict
from datetime import datetime, timezone

import numpy as np

from episode_segmenter.artifacts import write_artifact
from episode_segmenter.constants import (
    COST_PER_SEGMENT,
    MODEL_MAX_CLIP_SECONDS,
    SEGMENTS_FILENAME,
    VERSION,
)
from episode_segmenter.models import Segment, SegmentationOptions, SegmentationResult

# Optional fields are left out entirely when unset, never written as ""
_OPTIONAL_FIELDS = (
    "narrative_transition",
    "visual_continuity_notes",
    "preceding_segment_id",
    "following_segment_id",
)


def segment_to_dict(segment: Segment) -> dict:
    data = {
        "segment_id": segment.segment_id,
        "segment_number": segment.segment_number,
        "scene_ids": list(segment.scene_ids),
        "start_timestamp": segment.start_timestamp,
        "end_timestamp": segment.end_timestamp,
        "estimated_duration": segment.estimated_duration,
        "narrative_beat": segment.narrative_beat,
        "dialogue_lines": [asdict(d) for d in segment.dialogue_lines],
        "action_beats": list(segment.action_beats),
        "characters_in_segment": list(segment.characters_in_segment),
        "settings_in_segment": list(segment.settings_in_segment),
    }
    for name in _OPTIONAL_FIELDS:
        value = getattr(segment, name)
        if value is not None:
            data[name] = value
    return data


def result_to_dict(result: SegmentationResult) -> dict:
    return {
        "episode_id": result.episode_id,
        "segment_count": result.segment_count,
        "total_duration": result.total_duration,
        "segments": [segment_to_dict(s) for s in result.segments],
    }


def summarize(result: SegmentationResult, options: SegmentationOptions | None = None) -> dict:
    """Duration statistics for a segmentation result.

    Counts segments over the video model's clip ceiling, inside the
    [min, max] window and under min, and how many segments each scene
    ended up in.
    """
    if options is None:
        options = SegmentationOptions()

    durations = np.array([s.estimated_duration for s in result.segments], dtype=float)
    per_scene = {}
    for segment in result.segments:
        for scene_id in segment.scene_ids:
            per_scene[scene_id] = per_scene.get(scene_id, 0) + 1

    if durations.size == 0:
        average = minimum = maximum = 0.0
    else:
        average = float(durations.mean())
        minimum = float(durations.min())
        maximum = float(durations.max())

    in_window = (durations >= options.min_duration) & (durations <= options.max_duration)
    return {
        "segments": result.segment_count,
        "total_duration": round(result.total_duration, 2),
        "average_duration": round(average, 2),
        "min_duration": round(minimum, 2),
        "max_duration": round(maximum, 2),
        "over_model_limit": int((durations > MODEL_MAX_CLIP_SECONDS).sum()),
        "within_bounds": int(in_window.sum()),
        "under_min": int((durations < options.min_duration).sum()),
        "segments_per_scene": per_scene,
        "estimated_cost": round(result.segment_count * COST_PER_SEGMENT, 2),
    }


def export(
    result: SegmentationResult,
    project_dir: str,
    slug: str,
    options: SegmentationOptions,
    source: str = "",
) -> str:
    """Write the result and its manifest to project_dir/final/segments.json.

    Returns path to the written file.
    """
    final_dir = os.path.join(project_dir, "final")
    os.makedirs(final_dir, exist_ok=True)

    manifest = {
        "project": slug,
        "source": source,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "segmenter_version": VERSION,
        "settings": asdict(options),
        "stats": summarize(result, options),
        "result": result_to_dict(result),
    }

    return write_artifact(final_dir, SEGMENTS_FILENAME, manifest)
