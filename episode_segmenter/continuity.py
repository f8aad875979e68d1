"""Narrative beats, cast/setting unions and continuity notes for segments."""

from episode_segmenter.constants import NARRATIVE_BEAT_CHARS, DIALOGUE_PREVIEW_CHARS
from episode_segmenter.models import SceneChunk, Segment


def _truncate(text: str, limit: int) -> str:
    text = " ".join(text.split())
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + "..."


def _first_text(items) -> str:
    for item in items:
        if isinstance(item, str) and item.strip():
            return item.strip()
    return ""


def _unique(values) -> list[str]:
    """De-duplicate, keeping first-appearance order. Blank values are dropped."""
    seen = set()
    result = []
    for value in values:
        if not isinstance(value, str):
            continue
        value = value.strip()
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


def chunk_beat(chunk: SceneChunk) -> str:
    """One-line summary of a chunk: its place, then what happens first.

    Prefers the first action beat, then (for parts of a split scene) the
    first spoken line, then the scene description.
    """
    scene = chunk.scene
    place = scene.location or scene.heading or f"Scene {scene.label}"
    if chunk.is_continuation:
        place = f"{place} (CONT'D)"

    action = _first_text(chunk.action)
    if action:
        return f"{place}: {_truncate(action, NARRATIVE_BEAT_CHARS)}"

    if chunk.is_split:
        for entry in chunk.dialogue:
            line = _first_text(entry.lines or [])
            if line:
                preview = _truncate(line, DIALOGUE_PREVIEW_CHARS)
                return f'{place}: {entry.character} - "{preview}"'

    description = _first_text([scene.description])
    if description:
        return f"{place}: {_truncate(description, NARRATIVE_BEAT_CHARS)}"

    return f"{place}: Scene continues"


def narrative_beat(chunks: list[SceneChunk]) -> str:
    return " / ".join(chunk_beat(c) for c in chunks)


def characters_in(chunks: list[SceneChunk]) -> list[str]:
    names = []
    for chunk in chunks:
        names.extend(chunk.scene.characters or [])
        names.extend(getattr(d, "character", None) for d in chunk.dialogue)
    return _unique(names)


def settings_in(chunks: list[SceneChunk]) -> list[str]:
    return _unique(c.scene.location for c in chunks)


def narrative_transition(chunks: list[SceneChunk]) -> str | None:
    """Marker for a clip that opens part-way through a split scene."""
    first = chunks[0]
    if not first.is_continuation:
        return None
    return f"Continuation of scene {first.scene.label} (part {first.part} of {first.part_count})"


def continuity_notes(chunks: list[SceneChunk]) -> str | None:
    """Staging to preserve across forced cuts, for every split scene touched."""
    notes = []
    for chunk in chunks:
        if not chunk.is_split:
            continue
        note = f"Scene {chunk.scene.label} part {chunk.part}/{chunk.part_count}"
        if chunk.staging_note:
            note = f"{note}: {chunk.staging_note}"
        if chunk.is_continuation:
            note += " | Continues from previous segment"
        if chunk.part < chunk.part_count:
            note += " | Continues in next segment"
        notes.append(note)
    return "; ".join(notes) if notes else None


def annotate(segment: Segment, chunks: list[SceneChunk] | None = None) -> Segment:
    """Fill in a segment's descriptive fields from its constituent chunks, in place."""
    if chunks is None:
        chunks = segment.chunks
    if not chunks:
        return segment

    segment.narrative_beat = narrative_beat(chunks)
    segment.characters_in_segment = characters_in(chunks)
    segment.settings_in_segment = settings_in(chunks)
    segment.narrative_transition = narrative_transition(chunks)
    segment.visual_continuity_notes = continuity_notes(chunks)
    return segment
