"""Segment an episode's screenplay into clip-sized, linked segments.

Pipeline: estimate durations -> pack/split (assembly) -> annotate
(continuity) -> SegmentationResult. Pure and synchronous: no I/O, no shared
state, safe to call concurrently for different episodes.
"""

import logging
import math

from episode_segmenter.assembly import assemble, link_segments
from episode_segmenter.constants import (
    DEFAULT_TARGET_DURATION,
    DEFAULT_PREFER_SCENE_BOUNDARIES,
    DERIVED_BOUND_SPREAD,
    DERIVED_MIN_FLOOR,
    MODEL_MAX_CLIP_SECONDS,
)
from episode_segmenter.continuity import annotate
from episode_segmenter.errors import (
    InvalidOptionsError,
    InvalidScreenplayError,
    MissingScreenplayError,
    SegmentationInvariantError,
)
from episode_segmenter.models import Episode, SegmentationOptions, SegmentationResult

logger = logging.getLogger(__name__)


def resolve_options(
    target_duration: float | None = None,
    min_duration: float | None = None,
    max_duration: float | None = None,
    prefer_scene_boundaries: bool | None = None,
) -> SegmentationOptions:
    """Fill in unspecified options, scaling the bounds around the target.

    A missing min is target - 2 (at least 3s), a missing max is target + 2
    (at most the model's 15s clip ceiling). Derived bounds never cross the
    target. The result is validated.
    """
    target = DEFAULT_TARGET_DURATION if target_duration is None else target_duration
    if min_duration is None:
        min_duration = min(max(target - DERIVED_BOUND_SPREAD, DERIVED_MIN_FLOOR), target)
    if max_duration is None:
        max_duration = max(min(target + DERIVED_BOUND_SPREAD, MODEL_MAX_CLIP_SECONDS), target)
    if prefer_scene_boundaries is None:
        prefer_scene_boundaries = DEFAULT_PREFER_SCENE_BOUNDARIES

    options = SegmentationOptions(
        target_duration=target,
        min_duration=min_duration,
        max_duration=max_duration,
        prefer_scene_boundaries=prefer_scene_boundaries,
    )
    validate_options(options)
    return options


def validate_options(options: SegmentationOptions) -> None:
    """Raise InvalidOptionsError unless 0 < min <= target <= max, all finite."""
    values = {
        "target_duration": options.target_duration,
        "min_duration": options.min_duration,
        "max_duration": options.max_duration,
    }
    for name, value in values.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidOptionsError(f"{name} must be a number, got {value!r}")
        if not math.isfinite(value) or value <= 0:
            raise InvalidOptionsError(f"{name} must be a positive number, got {value!r}")

    if not options.min_duration <= options.target_duration <= options.max_duration:
        raise InvalidOptionsError(
            "expected min_duration <= target_duration <= max_duration, got "
            f"{options.min_duration} / {options.target_duration} / {options.max_duration}"
        )


def segment_episode(
    episode: Episode,
    options: SegmentationOptions | None = None,
) -> SegmentationResult:
    """Segment an episode into ordered, linked, annotated segments.

    Raises MissingScreenplayError when the episode has no structured
    screenplay or no scenes, InvalidScreenplayError when two scenes share a
    scene_id, InvalidOptionsError for unusable options and
    SegmentationInvariantError if the splitter ever stops making progress.
    """
    if options is None:
        options = SegmentationOptions()
    validate_options(options)

    screenplay = episode.structured_screenplay
    if screenplay is None:
        raise MissingScreenplayError(
            f"Episode {episode.id} must have structured_screenplay data to segment"
        )
    scenes = screenplay.scenes
    if not scenes:
        raise MissingScreenplayError(
            f"Episode {episode.id} must have at least one scene to segment"
        )

    seen = set()
    for scene in scenes:
        if scene.scene_id in seen:
            raise InvalidScreenplayError(
                f'Episode {episode.id} has duplicate scene_id "{scene.scene_id}"',
                [f'scene_id - Duplicate scene_id "{scene.scene_id}"'],
            )
        seen.add(scene.scene_id)

    logger.debug("Segmenting episode %s: %d scenes, options %s", episode.id, len(scenes), options)

    try:
        segments = assemble(scenes, options)
    except SegmentationInvariantError:
        logger.critical(
            "Segmentation of episode %s stopped making progress; this is a regression "
            "of the segmentation infinite-loop defect",
            episode.id,
            exc_info=True,
        )
        raise

    link_segments(segments, episode.id)
    for segment in segments:
        annotate(segment)

    total = sum(s.estimated_duration for s in segments)
    logger.info(
        "Episode %s: %d segments, %.1fs total", episode.id, len(segments), total,
    )
    return SegmentationResult(
        episode_id=episode.id,
        segment_count=len(segments),
        total_duration=total,
        segments=segments,
    )
