"""Parse stored episode/screenplay data into typed records, and validate it."""

import json
import math
import re
from dataclasses import dataclass, field

from episode_segmenter.errors import InvalidScreenplayError
from episode_segmenter.models import DialogueLine, Episode, Scene, Screenplay

VALID_TIME_OF_DAY = ("INT", "EXT", "INT/EXT")
VALID_TIME_PERIOD = ("DAY", "NIGHT", "DAWN", "DUSK", "CONTINUOUS")
VALID_BEAT_TYPES = ("plot", "character", "theme", "turning-point")

# Assistant chatter that sometimes lands in a scene description
_CONVERSATIONAL_RES = [
    re.compile(r"^(great|perfect|excellent|wonderful)!", re.IGNORECASE),
    re.compile(r"let's (develop|create|build|work)", re.IGNORECASE),
    re.compile(r"tell me (more|about)", re.IGNORECASE),
    re.compile(r"i'm ready to help", re.IGNORECASE),
    re.compile(r"what (do you|would you like)", re.IGNORECASE),
]


def _text(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def _text_list(value) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _number(value) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def parse_dialogue(data) -> DialogueLine | None:
    """Parse one dialogue turn. Returns None for entries that aren't objects."""
    if not isinstance(data, dict):
        return None
    lines = data.get("lines")
    if isinstance(lines, str):
        lines = [lines]
    return DialogueLine(character=_text(data.get("character")), lines=_text_list(lines))


def parse_scene(data, index: int = 0) -> Scene:
    """Parse one scene dict.

    Identity is strict (scene_id is required); content is permissive:
    missing or malformed dialogue/action arrays become empty lists and a
    non-numeric duration_estimate is treated as absent.
    """
    if not isinstance(data, dict):
        raise InvalidScreenplayError(
            f"Scene {index + 1} is not an object",
            [f"Scene {index + 1}: scene - must be an object"],
        )
    scene_id = _text(data.get("scene_id"))
    if not scene_id:
        raise InvalidScreenplayError(
            f"Scene {index + 1} has no scene_id",
            [f"Scene {index + 1}: scene_id - Scene must have a scene_id"],
        )

    dialogue = []
    raw_dialogue = data.get("dialogue")
    if isinstance(raw_dialogue, list):
        for entry in raw_dialogue:
            line = parse_dialogue(entry)
            if line is not None:
                dialogue.append(line)

    scene_number = data.get("scene_number")
    if isinstance(scene_number, bool) or not isinstance(scene_number, int):
        scene_number = index + 1

    return Scene(
        scene_id=scene_id,
        scene_number=scene_number,
        location=_text(data.get("location")),
        time_of_day=_text(data.get("time_of_day")),
        time_period=_text(data.get("time_period")),
        description=_text(data.get("description")),
        characters=_text_list(data.get("characters")),
        dialogue=dialogue,
        action=_text_list(data.get("action")),
        duration_estimate=_number(data.get("duration_estimate")),
    )


def _load_screenplay_data(raw):
    """Stored screenplays arrive either as objects or as JSON text."""
    if isinstance(raw, str):
        if not raw.strip():
            return None
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InvalidScreenplayError(f"structured_screenplay is not valid JSON: {e}") from e
    return raw


def parse_screenplay(raw) -> Screenplay | None:
    """Parse a structured screenplay. Returns None when there is none."""
    data = _load_screenplay_data(raw)
    if data is None:
        return None
    if not isinstance(data, dict):
        raise InvalidScreenplayError("structured_screenplay must be an object")

    raw_scenes = data.get("scenes")
    if raw_scenes is None:
        raw_scenes = []
    if not isinstance(raw_scenes, list):
        raise InvalidScreenplayError(
            "structured_screenplay.scenes must be a list",
            ["scenes - Screenplay must have a scenes array"],
        )

    scenes = [parse_scene(s, i) for i, s in enumerate(raw_scenes)]

    seen = set()
    for i, scene in enumerate(scenes):
        if scene.scene_id in seen:
            raise InvalidScreenplayError(
                f'Duplicate scene_id "{scene.scene_id}"',
                [f'Scene {i + 1}: scene_id - Duplicate scene_id "{scene.scene_id}"'],
            )
        seen.add(scene.scene_id)

    return Screenplay(
        scenes=scenes,
        title=_text(data.get("title")),
        logline=_text(data.get("logline")),
    )


def parse_episode(data: dict) -> Episode:
    """Parse a stored episode record into an Episode."""
    if not isinstance(data, dict):
        raise InvalidScreenplayError("Episode data must be an object")
    episode_id = data.get("id")
    if episode_id is None or not str(episode_id).strip():
        raise InvalidScreenplayError("Episode must have an id")

    return Episode(
        id=str(episode_id),
        series_id=_text(data.get("series_id")),
        title=_text(data.get("title")),
        structured_screenplay=parse_screenplay(data.get("structured_screenplay")),
    )


# --- Strict validation (authoring checks before segmentation) ---

@dataclass
class ValidationError:
    field: str
    message: str
    scene_number: int | None = None


@dataclass
class ValidationResult:
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


def _validate_scene(scene, scene_number: int) -> list[ValidationError]:
    errors = []

    def err(name, message):
        errors.append(ValidationError(field=name, message=message, scene_number=scene_number))

    if not isinstance(scene, dict):
        err("scene", "Scene must be an object")
        return errors

    if not _text(scene.get("scene_id")):
        err("scene_id", "Scene must have a scene_id")

    if not _text(scene.get("location")):
        err("location", "Scene must have a location")

    time_of_day = scene.get("time_of_day")
    if time_of_day not in VALID_TIME_OF_DAY:
        err("time_of_day", f'Scene time_of_day must be "INT", "EXT", or "INT/EXT", got "{time_of_day}"')

    time_period = scene.get("time_period")
    if time_period not in VALID_TIME_PERIOD:
        err(
            "time_period",
            'Scene time_period must be "DAY", "NIGHT", "DAWN", "DUSK", or "CONTINUOUS", '
            f'got "{time_period}"',
        )

    description = _text(scene.get("description"))
    if not description:
        err("description", "Scene must have a non-empty description")
    elif any(pattern.search(description) for pattern in _CONVERSATIONAL_RES):
        err("description", "Scene description contains conversational AI text instead of scene description")

    characters = scene.get("characters")
    if not isinstance(characters, list) or not characters:
        err("characters", "Scene must have at least one character in the characters array")

    action = scene.get("action")
    if not isinstance(action, list) or not action:
        err("action", "Scene must have at least one action beat in the action array")

    dialogue = scene.get("dialogue")
    if isinstance(dialogue, list):
        for i, line in enumerate(dialogue):
            if not isinstance(line, dict) or not _text(line.get("character")):
                err(f"dialogue[{i}].character", "Dialogue line must have a character name")
            lines = line.get("lines") if isinstance(line, dict) else None
            if not isinstance(lines, list) or not lines:
                err(f"dialogue[{i}].lines", "Dialogue line must have at least one line in the lines array")

    return errors


def validate_screenplay(raw) -> ValidationResult:
    """Check a structured screenplay the way the authoring flow requires.

    Stricter than parse_screenplay(): every scene needs a heading, a
    description, characters and action before it is worth segmenting.
    """
    result = ValidationResult()
    try:
        data = _load_screenplay_data(raw)
    except InvalidScreenplayError as e:
        result.errors.append(ValidationError(field="structured_screenplay", message=str(e)))
        return result

    if not isinstance(data, dict):
        result.errors.append(ValidationError(
            field="structured_screenplay", message="Episode must have a structured screenplay",
        ))
        return result

    if not isinstance(data.get("acts"), list):
        result.errors.append(ValidationError(field="acts", message="Screenplay must have an acts array"))

    scenes = data.get("scenes")
    if not isinstance(scenes, list):
        result.errors.append(ValidationError(field="scenes", message="Screenplay must have a scenes array"))
        scenes = []
    elif not scenes:
        result.errors.append(ValidationError(field="scenes", message="Screenplay must have at least one scene"))
    else:
        seen = set()
        for i, scene in enumerate(scenes):
            result.errors.extend(_validate_scene(scene, i + 1))
            scene_id = _text(scene.get("scene_id")) if isinstance(scene, dict) else ""
            if scene_id and scene_id in seen:
                result.errors.append(ValidationError(
                    field="scene_id", message=f'Duplicate scene_id "{scene_id}"', scene_number=i + 1,
                ))
            if scene_id:
                seen.add(scene_id)

    beats = data.get("beats")
    if beats is not None and not isinstance(beats, list):
        result.errors.append(ValidationError(field="beats", message="Beats must be an array if provided"))
    elif beats:
        beat_ids = set()
        for i, beat in enumerate(beats):
            beat = beat if isinstance(beat, dict) else {}
            beat_id = beat.get("beat_id")
            if not beat_id or not isinstance(beat_id, str):
                result.errors.append(ValidationError(
                    field=f"beats[{i}].beat_id", message="Beat must have a valid beat_id string",
                ))
            elif beat_id in beat_ids:
                result.errors.append(ValidationError(
                    field=f"beats[{i}].beat_id", message=f'Duplicate beat_id "{beat_id}"',
                ))
            else:
                beat_ids.add(beat_id)
            if beat.get("beat_type") not in VALID_BEAT_TYPES:
                result.errors.append(ValidationError(
                    field=f"beats[{i}].beat_type",
                    message='Beat type must be "plot", "character", "theme", or "turning-point", '
                            f'got "{beat.get("beat_type")}"',
                ))

    if scenes:
        with_dialogue = [s for s in scenes if isinstance(s, dict) and s.get("dialogue")]
        if not with_dialogue:
            result.warnings.append("No scenes have dialogue. Consider adding dialogue for more engaging content.")
        if not beats:
            result.warnings.append("No narrative beats defined. Consider adding beats for better story structure.")
        if not data.get("acts"):
            result.warnings.append("No acts defined. Consider organizing scenes into acts for better structure.")

    return result


def format_validation_errors(errors: list[ValidationError]) -> str:
    """Render validation errors one per line, e.g. "Scene 2: location - ..."."""
    if not errors:
        return "No errors"
    lines = []
    for error in errors:
        prefix = f"Scene {error.scene_number}: " if error.scene_number else ""
        lines.append(f"{prefix}{error.field} - {error.message}")
    return "\n".join(lines)
