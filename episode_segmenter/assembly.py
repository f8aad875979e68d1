"""Pack scenes into bounded-duration segments and link them into a chain."""

import logging

from episode_segmenter.constants import DURATION_EPSILON
from episode_segmenter.duration import estimate_duration
from episode_segmenter.models import Scene, SceneChunk, Segment, SegmentationOptions
from episode_segmenter.splitter import split_scene, whole_scene

logger = logging.getLogger(__name__)


def _build_segment(chunks: list[SceneChunk], start_timestamp: float) -> Segment:
    """Create an unnumbered segment covering ``chunks`` in order."""
    duration = sum(c.duration for c in chunks)
    scene_ids = []
    dialogue = []
    action = []
    for chunk in chunks:
        if not scene_ids or scene_ids[-1] != chunk.scene.scene_id:
            scene_ids.append(chunk.scene.scene_id)
        dialogue.extend(chunk.dialogue)
        action.extend(chunk.action)

    return Segment(
        segment_number=0,
        scene_ids=scene_ids,
        start_timestamp=start_timestamp,
        end_timestamp=start_timestamp + duration,
        estimated_duration=duration,
        dialogue_lines=dialogue,
        action_beats=action,
        chunks=list(chunks),
    )


class _Packer:
    """Running accumulator for the single forward pass over scenes."""

    def __init__(self) -> None:
        self.segments: list[Segment] = []
        self.pending: list[SceneChunk] = []
        self.clock = 0.0

    @property
    def pending_duration(self) -> float:
        return sum(c.duration for c in self.pending)

    def add(self, chunk: SceneChunk) -> None:
        self.pending.append(chunk)

    def flush(self) -> None:
        if not self.pending:
            return
        segment = _build_segment(self.pending, self.clock)
        logger.debug(
            "Segment %d: scenes %s, %.2fs",
            len(self.segments) + 1, segment.scene_ids, segment.estimated_duration,
        )
        self.segments.append(segment)
        self.clock = segment.end_timestamp
        self.pending = []

    def emit(self, chunk: SceneChunk) -> None:
        """Close the open segment and give ``chunk`` a segment of its own."""
        self.flush()
        self.add(chunk)
        self.flush()


def _fill_split(packer: _Packer, scene: Scene, options: SegmentationOptions) -> None:
    """Top up the open segment with the head of ``scene`` and keep packing the rest."""
    open_duration = packer.pending_duration
    chunks = split_scene(
        scene,
        options.max_duration,
        options.target_duration,
        lead_aim=options.target_duration - open_duration,
        lead_cap=options.max_duration - open_duration,
    )
    if chunks[0].duration <= options.max_duration - open_duration + DURATION_EPSILON:
        packer.add(chunks.pop(0))
    packer.flush()

    # Remaining chunks are the tail of the scene; the last one stays open.
    for chunk in chunks[:-1]:
        packer.emit(chunk)
    if chunks:
        packer.add(chunks[-1])


def assemble(scenes: list[Scene], options: SegmentationOptions) -> list[Segment]:
    """Greedily pack scenes, in order, into segments no longer than max_duration.

    Whole scenes are appended to the open segment while it stays within
    max_duration. A scene that alone exceeds max_duration is split and each
    of its chunks becomes a segment of its own. With prefer_scene_boundaries
    off, a scene that would overflow an under-target segment is split so its
    head tops that segment up, and its tail keeps packing with later scenes.

    The last segment may be shorter than min_duration. Segments come back
    with contiguous timestamps but without numbers, links or continuity
    metadata; see link_segments() and continuity.annotate().
    """
    packer = _Packer()
    max_duration = options.max_duration

    for scene in scenes:
        duration = estimate_duration(scene)
        open_duration = packer.pending_duration
        fits = open_duration + duration <= max_duration + DURATION_EPSILON
        logger.debug("Scene %s: %.2fs (open segment %.2fs)", scene.scene_id, duration, open_duration)

        if fits:
            packer.add(whole_scene(scene))
            continue

        can_fill = (
            not options.prefer_scene_boundaries
            and packer.pending
            and open_duration < options.target_duration
        )
        if can_fill:
            _fill_split(packer, scene, options)
            continue

        packer.flush()
        if duration <= max_duration + DURATION_EPSILON:
            packer.add(whole_scene(scene))
            continue

        chunks = split_scene(scene, max_duration, options.target_duration)
        if options.prefer_scene_boundaries:
            for chunk in chunks:
                packer.emit(chunk)
        else:
            for chunk in chunks[:-1]:
                packer.emit(chunk)
            packer.add(chunks[-1])

    packer.flush()
    return packer.segments


def segment_id_for(episode_id: str, segment_number: int) -> str:
    return f"{episode_id}-segment-{segment_number:03d}"


def link_segments(segments: list[Segment], episode_id: str) -> list[Segment]:
    """Number segments from 1 and link each to its neighbours, in place."""
    for number, segment in enumerate(segments, start=1):
        segment.segment_number = number
        segment.segment_id = segment_id_for(episode_id, number)

    for i, segment in enumerate(segments):
        segment.preceding_segment_id = segments[i - 1].segment_id if i > 0 else None
        segment.following_segment_id = segments[i + 1].segment_id if i + 1 < len(segments) else None

    return segments
