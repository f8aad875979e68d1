"""Tests for result serialization and export."""

import json
import os

import pytest

from episode_segmenter.exporter import export, result_to_dict, segment_to_dict, summarize
from episode_segmenter.models import (
    DialogueLine,
    Segment,
    SegmentationOptions,
    SegmentationResult,
)
from episode_segmenter.parser import parse_episode
from episode_segmenter.segmenter import segment_episode


def _segment(number, duration, scene_ids, start=0.0):
    return Segment(
        segment_number=number,
        scene_ids=scene_ids,
        start_timestamp=start,
        end_timestamp=start + duration,
        estimated_duration=duration,
        segment_id=f"ep-segment-{number:03d}",
    )


def _result(durations, scene_ids):
    segments = []
    clock = 0.0
    for i, (duration, ids) in enumerate(zip(durations, scene_ids), start=1):
        segments.append(_segment(i, duration, ids, clock))
        clock += duration
    return SegmentationResult(
        episode_id="ep",
        segment_count=len(segments),
        total_duration=clock,
        segments=segments,
    )


def test_segment_to_dict_omits_unset_fields():
    segment = _segment(1, 5, ["s1"])
    segment.dialogue_lines = [DialogueLine("ANA", ["Hi."])]
    segment.following_segment_id = "ep-segment-002"

    data = segment_to_dict(segment)
    assert data["segment_id"] == "ep-segment-001"
    assert data["dialogue_lines"] == [{"character": "ANA", "lines": ["Hi."]}]
    assert data["following_segment_id"] == "ep-segment-002"
    assert "preceding_segment_id" not in data
    assert "narrative_transition" not in data
    assert "visual_continuity_notes" not in data
    assert "chunks" not in data


def test_result_to_dict_is_json_ready(episode_data):
    result = segment_episode(parse_episode(episode_data))
    data = json.loads(json.dumps(result_to_dict(result)))
    assert data["episode_id"] == "episode-1"
    assert data["segment_count"] == 4
    assert [s["segment_number"] for s in data["segments"]] == [1, 2, 3, 4]
    assert data["segments"][3]["narrative_transition"] == "Continuation of scene 3 (part 2 of 2)"


def test_summarize():
    result = _result([9, 4, 16, 11], [["s1"], ["s2"], ["s3"], ["s3", "s4"]])
    stats = summarize(result, SegmentationOptions())
    assert stats["segments"] == 4
    assert stats["total_duration"] == 40
    assert stats["average_duration"] == 10
    assert stats["min_duration"] == 4
    assert stats["max_duration"] == 16
    assert stats["over_model_limit"] == 1
    assert stats["within_bounds"] == 2
    assert stats["under_min"] == 1
    assert stats["segments_per_scene"] == {"s1": 1, "s2": 1, "s3": 2, "s4": 1}
    assert stats["estimated_cost"] == pytest.approx(0.8)


def test_summarize_empty_result():
    stats = summarize(SegmentationResult(episode_id="ep", segment_count=0, total_duration=0, segments=[]))
    assert stats["average_duration"] == 0
    assert stats["within_bounds"] == 0
    assert stats["estimated_cost"] == 0


def test_export_writes_manifest(tmp_path, episode_data):
    result = segment_episode(parse_episode(episode_data))
    options = SegmentationOptions()
    path = export(result, str(tmp_path), "night_crew", options, source="night_crew.json")

    assert path == os.path.join(str(tmp_path), "final", "segments.json")
    with open(path) as f:
        manifest = json.load(f)
    assert manifest["project"] == "night_crew"
    assert manifest["source"] == "night_crew.json"
    assert manifest["segmenter_version"] == "0.1.0"
    assert manifest["settings"]["target_duration"] == 10
    assert manifest["stats"]["segments"] == 4
    assert manifest["stats"]["segments_per_scene"] == {"scene_1": 1, "scene_2": 1, "scene_3": 2}
    assert manifest["result"]["segment_count"] == 4
    assert "generated_at" in manifest


def test_export_goes_through_artifact_writer(tmp_path, monkeypatch, episode_data):
    from episode_segmenter import exporter
    from episode_segmenter.artifacts import load_segments, write_artifact

    calls = []

    def recording_write(project_dir, filename, data):
        calls.append((project_dir, filename))
        return write_artifact(project_dir, filename, data)

    monkeypatch.setattr(exporter, "write_artifact", recording_write)
    result = segment_episode(parse_episode(episode_data))
    path = export(result, str(tmp_path), "night_crew", SegmentationOptions())

    assert calls == [(os.path.join(str(tmp_path), "final"), "segments.json")]
    assert path == os.path.join(str(tmp_path), "final", "segments.json")
    assert load_segments(str(tmp_path))["project"] == "night_crew"
