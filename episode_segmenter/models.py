"""Data models for episode segmentation."""

from dataclasses import dataclass, field

from episode_segmenter.constants import (
    DEFAULT_TARGET_DURATION,
    DEFAULT_MIN_DURATION,
    DEFAULT_MAX_DURATION,
    DEFAULT_PREFER_SCENE_BOUNDARIES,
)


@dataclass
class DialogueLine:
    character: str
    lines: list[str] = field(default_factory=list)


@dataclass
class Scene:
    scene_id: str
    scene_number: int = 0
    location: str = ""
    time_of_day: str = ""       # "INT", "EXT" or "INT/EXT"
    time_period: str = ""       # "DAY", "NIGHT", "DAWN", "DUSK", "CONTINUOUS"
    description: str = ""
    characters: list[str] = field(default_factory=list)
    dialogue: list[DialogueLine] = field(default_factory=list)
    action: list[str] = field(default_factory=list)
    duration_estimate: float | None = None

    @property
    def heading(self) -> str:
        """Slugline, e.g. "INT. OFFICE - DAY"."""
        parts = []
        if self.time_of_day:
            parts.append(f"{self.time_of_day}.")
        if self.location:
            parts.append(self.location)
        heading = " ".join(parts)
        if self.time_period:
            heading = f"{heading} - {self.time_period}" if heading else self.time_period
        return heading

    @property
    def label(self) -> str:
        """How the scene is referred to in notes: its number, else its id."""
        return str(self.scene_number) if self.scene_number else self.scene_id


@dataclass
class Screenplay:
    scenes: list[Scene] = field(default_factory=list)
    title: str = ""
    logline: str = ""


@dataclass
class Episode:
    id: str
    series_id: str = ""
    title: str = ""
    structured_screenplay: Screenplay | None = None


@dataclass
class SegmentationOptions:
    target_duration: float = DEFAULT_TARGET_DURATION
    min_duration: float = DEFAULT_MIN_DURATION
    max_duration: float = DEFAULT_MAX_DURATION
    prefer_scene_boundaries: bool = DEFAULT_PREFER_SCENE_BOUNDARIES


@dataclass
class SceneChunk:
    """A whole scene, or one ordered part of a split scene."""

    scene: Scene
    dialogue: list[DialogueLine]
    action: list[str]
    duration: float
    part: int = 1
    part_count: int = 1
    heading: str | None = None      # only part 1 keeps the slugline
    staging_note: str | None = None  # set by the splitter on split scenes

    @property
    def is_split(self) -> bool:
        return self.part_count > 1

    @property
    def is_continuation(self) -> bool:
        return self.part > 1


@dataclass
class Segment:
    segment_number: int
    scene_ids: list[str]
    start_timestamp: float
    end_timestamp: float
    estimated_duration: float
    narrative_beat: str = ""
    narrative_transition: str | None = None
    dialogue_lines: list[DialogueLine] = field(default_factory=list)
    action_beats: list[str] = field(default_factory=list)
    characters_in_segment: list[str] = field(default_factory=list)
    settings_in_segment: list[str] = field(default_factory=list)
    visual_continuity_notes: str | None = None
    segment_id: str = ""
    preceding_segment_id: str | None = None
    following_segment_id: str | None = None
    chunks: list[SceneChunk] = field(default_factory=list, repr=False, compare=False)


@dataclass
class SegmentationResult:
    episode_id: str
    segment_count: int
    total_duration: float
    segments: list[Segment] = field(default_factory=list)
