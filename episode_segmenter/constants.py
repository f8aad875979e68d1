"""All magic numbers and configuration constants."""

WORDS_PER_SECOND = 2.5              # spoken pace for dialogue
ACTION_BEAT_SECONDS = 2.0           # camera/blocking time per action beat
MIN_SCENE_SECONDS = 0.5             # floor for any scene estimate (never zero or negative)
MIN_UNIT_SECONDS = 0.1              # floor weight for one dialogue turn or action beat
DURATION_EPSILON = 1e-9             # float slack when comparing against bounds
DEFAULT_TARGET_DURATION = 10.0      # seconds, desired clip length
DEFAULT_MIN_DURATION = 8.0          # seconds
DEFAULT_MAX_DURATION = 12.0         # seconds
DEFAULT_PREFER_SCENE_BOUNDARIES = True
DERIVED_BOUND_SPREAD = 2.0          # min/max derived as target -/+ this
DERIVED_MIN_FLOOR = 3.0             # derived min never drops below this
MODEL_MAX_CLIP_SECONDS = 15.0       # hosted video model's longest clip
NARRATIVE_BEAT_CHARS = 100          # action/description preview length
DIALOGUE_PREVIEW_CHARS = 60         # dialogue preview length in beats
COST_PER_SEGMENT = 0.20             # USD, estimated generation cost per clip
OUTPUT_DIR = "output"
SEGMENTS_FILENAME = "segments.json"
VERSION = "0.1.0"
