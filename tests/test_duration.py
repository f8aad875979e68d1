"""Tests for the duration estimator."""

import math

import pytest

from episode_segmenter.constants import MIN_SCENE_SECONDS, WORDS_PER_SECOND, ACTION_BEAT_SECONDS
from episode_segmenter.duration import (
    content_duration,
    count_words,
    dialogue_seconds,
    estimate_duration,
)
from episode_segmenter.models import DialogueLine, Scene


def _scene(**overrides):
    return Scene(scene_id=overrides.pop("scene_id", "s1"), **overrides)


def test_count_words():
    assert count_words("Hello there,   friend") == 3
    assert count_words("") == 0
    assert count_words(None) == 0
    assert count_words(42) == 0


def test_dialogue_seconds_uses_speaking_pace():
    """5 words at 2.5 words/s is 2 seconds."""
    line = DialogueLine(character="MAYA", lines=["One two three", "four five"])
    assert dialogue_seconds(line) == pytest.approx(5 / WORDS_PER_SECOND)


def test_dialogue_only_scene():
    scene = _scene(dialogue=[DialogueLine("MAYA", ["They moved the shipment up to tonight."])])
    assert estimate_duration(scene) == pytest.approx(7 / WORDS_PER_SECOND)


def test_action_only_scene():
    """Each action beat takes a fixed amount of time."""
    scene = _scene(action=["She runs.", "He follows.", "Door slams."])
    assert estimate_duration(scene) == pytest.approx(3 * ACTION_BEAT_SECONDS)


def test_dialogue_and_action_add_up():
    scene = _scene(
        dialogue=[DialogueLine("MAYA", ["one two three four five"])],
        action=["She runs.", "He follows."],
    )
    assert estimate_duration(scene) == pytest.approx(2.0 + 4.0)


def test_explicit_estimate_is_authoritative():
    """An author-supplied estimate wins over content."""
    scene = _scene(action=["She runs."], duration_estimate=30)
    assert estimate_duration(scene) == 30
    assert content_duration(scene) == pytest.approx(ACTION_BEAT_SECONDS)


def test_empty_scene_gets_floor():
    assert estimate_duration(_scene()) == MIN_SCENE_SECONDS


@pytest.mark.parametrize("estimate", [0, -5, 0.0])
def test_degenerate_estimate_gets_floor(estimate):
    """Zero or negative estimates on an empty scene never produce a zero-length scene."""
    assert estimate_duration(_scene(duration_estimate=estimate)) == MIN_SCENE_SECONDS


@pytest.mark.parametrize("estimate", [0, -5])
def test_non_positive_estimate_falls_back_to_content(estimate):
    """Six 2s beats with a zero or negative estimate still run 12s."""
    scene = _scene(action=[f"beat {i}" for i in range(6)], duration_estimate=estimate)
    assert estimate_duration(scene) == pytest.approx(6 * ACTION_BEAT_SECONDS)


def test_tiny_content_gets_floor():
    scene = _scene(dialogue=[DialogueLine("THEO", ["Run."])])
    assert estimate_duration(scene) == MIN_SCENE_SECONDS


def test_non_finite_estimate_falls_back_to_content():
    scene = _scene(action=["She runs."], duration_estimate=math.nan)
    assert estimate_duration(scene) == pytest.approx(ACTION_BEAT_SECONDS)
    scene = _scene(action=["She runs."], duration_estimate=math.inf)
    assert estimate_duration(scene) == pytest.approx(ACTION_BEAT_SECONDS)


def test_boolean_estimate_ignored():
    scene = _scene(action=["She runs."], duration_estimate=True)
    assert estimate_duration(scene) == pytest.approx(ACTION_BEAT_SECONDS)


def test_malformed_content_never_raises():
    """Malformed lines contribute zero time instead of raising."""
    scene = _scene(
        dialogue=[
            DialogueLine("MAYA", [None, 7, "two words"]),
            DialogueLine("THEO", None),
        ],
        action=[None, "She runs.", {"beat": "x"}],
    )
    assert estimate_duration(scene) == pytest.approx(2 / WORDS_PER_SECOND + ACTION_BEAT_SECONDS)


def test_missing_arrays_treated_as_empty():
    scene = _scene()
    scene.dialogue = None
    scene.action = None
    assert content_duration(scene) == 0
    assert estimate_duration(scene) == MIN_SCENE_SECONDS
