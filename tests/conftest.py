"""Shared fixtures for episode segmenter tests."""

import copy

import pytest

# Scene durations at 2.5 words/s and 2s per action beat:
#   scene_1: 14 words + 2 beats = 9.6s
#   scene_2: explicit estimate   = 4.0s
#   scene_3: 20 words + 6 beats = 20.0s (longer than the 12s default max)
EPISODE_DATA = {
    "id": "episode-1",
    "series_id": "series-1",
    "title": "The Night Crew",
    "structured_screenplay": {
        "title": "The Night Crew",
        "logline": "Two thieves move their heist up by a day.",
        "acts": [],
        "beats": [],
        "scenes": [
            {
                "scene_id": "scene_1",
                "scene_number": 1,
                "location": "OFFICE",
                "time_of_day": "INT",
                "time_period": "DAY",
                "description": "A cramped security office lit by monitors.",
                "characters": ["MAYA", "THEO"],
                "dialogue": [
                    {"character": "MAYA", "lines": ["They moved the shipment up to tonight."]},
                    {"character": "THEO", "lines": ["Then we don't have a plan anymore."]},
                ],
                "action": [
                    "Maya bursts through the door, soaked from the rain.",
                    "Theo looks up from a wall of monitors.",
                ],
            },
            {
                "scene_id": "scene_2",
                "scene_number": 2,
                "location": "ROOFTOP",
                "time_of_day": "EXT",
                "time_period": "NIGHT",
                "description": "Wind and neon over the city.",
                "characters": ["MAYA"],
                "dialogue": [],
                "action": ["Maya crosses the rooftop."],
                "duration_estimate": 4,
            },
            {
                "scene_id": "scene_3",
                "scene_number": 3,
                "location": "WAREHOUSE",
                "time_of_day": "INT",
                "time_period": "NIGHT",
                "description": "Rows of crates under a single flickering bulb.",
                "characters": ["MAYA", "THEO", "GUARD"],
                "dialogue": [
                    {"character": "GUARD", "lines": ["Nobody is supposed to be here after midnight."]},
                    {"character": "MAYA", "lines": ["We're with the night crew."]},
                    {"character": "GUARD", "lines": ["Funny, I am the night crew."]},
                    {"character": "THEO", "lines": ["Run."]},
                ],
                "action": [
                    "Maya and Theo slip between the crates.",
                    "A flashlight sweeps the aisle.",
                    "The guard steps out of the shadows.",
                    "Theo glances at the exit.",
                    "Maya drops the bag.",
                    "They sprint for the loading dock.",
                ],
            },
        ],
    },
}


@pytest.fixture
def episode_data():
    """A stored episode record: three scenes, the last one too long for one clip."""
    return copy.deepcopy(EPISODE_DATA)
