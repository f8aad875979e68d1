"""Output directory management and JSON artifacts for the command line."""

import json
import os
import re

from episode_segmenter.constants import OUTPUT_DIR, SEGMENTS_FILENAME


def slug_from_path(episode_path: str) -> str:
    """Convert an episode filename to an output directory slug.

    "Pilot Episode.json" → "pilot_episode"
    "/path/to/S01E02 - The Heist.json" → "s01e02_the_heist"
    """
    basename = os.path.splitext(os.path.basename(episode_path))[0]
    slug = re.sub(r"[^a-zA-Z0-9]+", "_", basename).strip("_").lower()
    return slug


def init_output_dir(episode_path: str, output_base: str = OUTPUT_DIR) -> str:
    """Create output/<slug>/final/. Returns the project directory path."""
    project_dir = os.path.join(output_base, slug_from_path(episode_path))
    os.makedirs(os.path.join(project_dir, "final"), exist_ok=True)
    return project_dir


def write_artifact(project_dir: str, filename: str, data: dict) -> str:
    """Write JSON artifact to project_dir/filename.

    Returns path to the written file.
    """
    path = os.path.join(project_dir, filename)
    with open(path, "w") as f:
        json.dump(data, f, indent=2)
    return path


def load_artifact(project_dir: str, filename: str) -> dict | None:
    """Read JSON artifact. Returns None if file doesn't exist."""
    path = os.path.join(project_dir, filename)
    if not os.path.exists(path):
        return None
    with open(path) as f:
        return json.load(f)


def load_segments(project_dir: str) -> dict | None:
    """Read the exported segments manifest, if the project has one."""
    return load_artifact(os.path.join(project_dir, "final"), SEGMENTS_FILENAME)


def list_projects(output_base: str = OUTPUT_DIR) -> list[str]:
    """Sorted slugs of projects under output_base that have exported segments."""
    if not os.path.exists(output_base):
        return []
    projects = []
    for name in os.listdir(output_base):
        path = os.path.join(output_base, name, "final", SEGMENTS_FILENAME)
        if os.path.exists(path):
            projects.append(name)
    return sorted(projects)
