"""Split scenes that run longer than one clip into ordered chunks."""

import logging
import math
from dataclasses import dataclass

import numpy as np

from episode_segmenter.constants import MIN_UNIT_SECONDS, DURATION_EPSILON
from episode_segmenter.duration import action_seconds, dialogue_seconds, estimate_duration
from episode_segmenter.errors import SegmentationInvariantError
from episode_segmenter.models import DialogueLine, Scene, SceneChunk

logger = logging.getLogger(__name__)


@dataclass
class ContentUnit:
    kind: str                       # "dialogue" or "action"
    content: DialogueLine | str
    duration: float


def content_units(scene: Scene) -> list[ContentUnit]:
    """Break a scene into atomic units: one per dialogue turn or action beat.

    The scene record keeps dialogue and action in separate arrays, so units
    are interleaved alternately, action first. Each unit is weighted by its
    own content seconds (floored at MIN_UNIT_SECONDS) and the weights are
    rescaled to sum to the scene's estimated duration, which keeps an
    author-supplied estimate authoritative after splitting.
    """
    dialogue = list(scene.dialogue or [])
    action = list(scene.action or [])

    units = []
    for i in range(max(len(dialogue), len(action))):
        if i < len(action):
            weight = max(action_seconds(action[i]), MIN_UNIT_SECONDS)
            units.append(ContentUnit(kind="action", content=action[i], duration=weight))
        if i < len(dialogue):
            weight = max(dialogue_seconds(dialogue[i]), MIN_UNIT_SECONDS)
            units.append(ContentUnit(kind="dialogue", content=dialogue[i], duration=weight))

    if not units:
        return units

    weights = np.array([u.duration for u in units], dtype=float)
    scaled = weights * (estimate_duration(scene) / weights.sum())
    for unit, duration in zip(units, scaled):
        unit.duration = float(duration)
    return units


def _slot_count(remaining: float, target: float, cap: float) -> int:
    """How many chunks the remaining time should be spread over."""
    if remaining <= cap + DURATION_EPSILON:
        return 1
    return max(2, math.ceil(remaining / target))


def _take(units: list[ContentUnit], start: int, aim: float, cap: float) -> int:
    """Return the end index of the group that begins at ``start``.

    The first unit is always taken, even when it alone is over ``cap``.
    Later units are appended while the group stays within ``cap`` and ends
    at least as close to ``aim`` as stopping short would.
    """
    current = units[start].duration
    end = start + 1
    while end < len(units):
        candidate = current + units[end].duration
        if candidate > cap + DURATION_EPSILON:
            break
        if candidate > aim and (candidate - aim) > (aim - current):
            break
        current = candidate
        end += 1
    return end


def _partition(
    units: list[ContentUnit],
    target: float,
    cap: float,
    lead_aim: float = 0.0,
    lead_cap: float = 0.0,
) -> list[tuple[int, int]]:
    """Group units into contiguous (start, end) index ranges."""
    bounds = []
    start = 0

    if lead_cap > 0 and units and units[0].duration <= lead_cap + DURATION_EPSILON:
        end = _take(units, 0, lead_aim, lead_cap)
        bounds.append((0, end))
        start = end

    remaining = sum(u.duration for u in units[start:])

    while start < len(units):
        if remaining <= cap + DURATION_EPSILON:
            end = len(units)
        else:
            # slot count is recomputed from what is left on every pass
            aim = min(remaining / _slot_count(remaining, target, cap), target)
            end = _take(units, start, aim, cap)

        consumed = sum(u.duration for u in units[start:end])
        if end <= start or consumed <= 0:
            raise SegmentationInvariantError(
                f"splitter made no progress at unit {start} of {len(units)} "
                f"({remaining:.3f}s remaining)"
            )

        bounds.append((start, end))
        remaining -= consumed
        start = end

    return bounds


def _slice_durations(
    total: float,
    target: float,
    cap: float,
    lead_aim: float = 0.0,
    lead_cap: float = 0.0,
) -> list[float]:
    """Equal time slices for a scene with no dialogue or action to cut on."""
    slices = []
    remaining = total
    if lead_cap > 0 and lead_aim > 0 and remaining > lead_cap + DURATION_EPSILON:
        slices.append(lead_aim)
        remaining -= lead_aim

    count = _slot_count(remaining, target, cap)
    body = np.full(count, remaining / count)
    body[-1] = remaining - body[:-1].sum()
    slices.extend(float(d) for d in body)
    return slices


def _staging_note(scene: Scene) -> str:
    """Staging that must carry across a forced cut inside one scene."""
    notes = [f"Location: {scene.heading or scene.location or 'unspecified'}"]
    time = " ".join(p for p in (scene.time_of_day, scene.time_period) if p)
    if time:
        notes.append(f"Time: {time}")
    if scene.characters:
        notes.append(f"Characters: {', '.join(scene.characters)}")
    return " | ".join(notes)


def _mark_parts(chunks: list[SceneChunk], scene: Scene) -> list[SceneChunk]:
    count = len(chunks)
    note = _staging_note(scene) if count > 1 else None
    for i, chunk in enumerate(chunks, start=1):
        chunk.part = i
        chunk.part_count = count
        chunk.heading = scene.heading if i == 1 else None
        chunk.staging_note = note
    return chunks


def whole_scene(scene: Scene) -> SceneChunk:
    """Wrap an unsplit scene as a single chunk."""
    return SceneChunk(
        scene=scene,
        dialogue=list(scene.dialogue or []),
        action=list(scene.action or []),
        duration=estimate_duration(scene),
        heading=scene.heading,
    )


def split_scene(
    scene: Scene,
    max_duration: float,
    target_duration: float,
    lead_aim: float = 0.0,
    lead_cap: float = 0.0,
) -> list[SceneChunk]:
    """Split a scene into ordered chunks no longer than max_duration.

    Dialogue turns and action beats are never divided. A single unit that is
    longer than max_duration gets a chunk to itself and is allowed to
    overflow. Chunk durations sum to the scene's estimated duration.

    When lead_cap is positive, the first chunk is cut to fit within it
    (aiming at lead_aim) so that it can top up a segment that is already
    open. If the scene's first unit does not fit, no lead chunk is produced.
    """
    total = estimate_duration(scene)
    units = content_units(scene)

    if not units:
        durations = _slice_durations(total, target_duration, max_duration, lead_aim, lead_cap)
        chunks = [SceneChunk(scene=scene, dialogue=[], action=[], duration=d) for d in durations]
        logger.debug("Scene %s has no content units, sliced into %d parts", scene.scene_id, len(chunks))
        return _mark_parts(chunks, scene)

    bounds = _partition(units, target_duration, max_duration, lead_aim, lead_cap)
    cumulative = np.cumsum([u.duration for u in units])
    cumulative[-1] = total

    chunks = []
    for start, end in bounds:
        before = cumulative[start - 1] if start else 0.0
        group = units[start:end]
        duration = float(cumulative[end - 1] - before)
        if len(group) == 1 and duration > max_duration + DURATION_EPSILON:
            logger.warning(
                "Scene %s: single %s runs %.1fs, over the %.1fs maximum",
                scene.scene_id, group[0].kind, duration, max_duration,
            )
        chunks.append(SceneChunk(
            scene=scene,
            dialogue=[u.content for u in group if u.kind == "dialogue"],
            action=[u.content for u in group if u.kind == "action"],
            duration=duration,
        ))

    logger.debug("Scene %s (%.1fs) split into %d chunks", scene.scene_id, total, len(chunks))
    return _mark_parts(chunks, scene)
