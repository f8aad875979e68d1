"""Estimate how long a scene (or part of one) runs on screen."""

import math

from episode_segmenter.constants import (
    WORDS_PER_SECOND,
    ACTION_BEAT_SECONDS,
    MIN_SCENE_SECONDS,
)
from episode_segmenter.models import DialogueLine, Scene


def count_words(line) -> int:
    """Word count of one spoken line. Anything that isn't text counts as zero."""
    if not isinstance(line, str):
        return 0
    return len(line.split())


def dialogue_seconds(entry: DialogueLine) -> float:
    """Spoken time for one dialogue turn at WORDS_PER_SECOND."""
    lines = getattr(entry, "lines", None)
    if not isinstance(lines, (list, tuple)):
        return 0.0
    words = sum(count_words(line) for line in lines)
    return words / WORDS_PER_SECOND


def action_seconds(beat) -> float:
    """Blocking time for one action beat. Non-text beats add nothing."""
    return ACTION_BEAT_SECONDS if isinstance(beat, str) else 0.0


def content_duration(scene: Scene) -> float:
    """Duration derived from dialogue and action only, without any floor."""
    dialogue = scene.dialogue or []
    action = scene.action or []
    return sum(dialogue_seconds(d) for d in dialogue) + sum(action_seconds(a) for a in action)


def _explicit_estimate(scene: Scene) -> float | None:
    value = scene.duration_estimate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return float(value)


def estimate_duration(scene: Scene) -> float:
    """Estimate a scene's duration in seconds.

    A positive, finite duration_estimate is authoritative. Otherwise (absent,
    zero, negative or non-finite) the duration is derived from content.
    Either way the result is floored at MIN_SCENE_SECONDS, so an empty scene
    still takes up time on the timeline.
    """
    explicit = _explicit_estimate(scene)
    duration = explicit if explicit is not None else content_duration(scene)
    return max(duration, MIN_SCENE_SECONDS)
