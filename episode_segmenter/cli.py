"""CLI interface: segment episode files, validate screenplays, inspect exports."""

import argparse
import json
import logging
import os
import sys

from episode_segmenter.artifacts import (
    init_output_dir,
    list_projects,
    load_segments,
    slug_from_path,
)
from episode_segmenter.constants import OUTPUT_DIR, VERSION
from episode_segmenter.errors import SegmentationError
from episode_segmenter.exporter import export, summarize
from episode_segmenter.parser import (
    format_validation_errors,
    parse_episode,
    validate_screenplay,
)
from episode_segmenter.segmenter import resolve_options, segment_episode


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )


def _read_episode_file(file_path: str) -> dict:
    """Load an episode record from JSON, exiting with a message on failure.

    A bare screenplay (an object with "scenes" but no "id") is wrapped as an
    episode whose id is the file's slug.
    """
    if not os.path.exists(file_path):
        print(f"Error: File not found: {file_path}", file=sys.stderr)
        raise SystemExit(1)

    with open(file_path) as f:
        text = f.read()
    if not text.strip():
        print(f"Error: File is empty: {file_path}", file=sys.stderr)
        raise SystemExit(1)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        print(f"Error: {file_path} is not valid JSON: {e}", file=sys.stderr)
        raise SystemExit(1)

    if not isinstance(data, dict):
        print(f"Error: {file_path} must contain a JSON object", file=sys.stderr)
        raise SystemExit(1)

    if "id" not in data and "scenes" in data:
        data = {"id": slug_from_path(file_path), "structured_screenplay": data}
    return data


def cmd_segment(args):
    """Segment an episode file and export the result."""
    _configure_logging(args.verbose)
    data = _read_episode_file(args.file)

    try:
        options = resolve_options(
            target_duration=args.target,
            min_duration=args.min,
            max_duration=args.max,
            prefer_scene_boundaries=False if args.no_scene_boundaries else None,
        )
        episode = parse_episode(data)
        result = segment_episode(episode, options)
    except SegmentationError as e:
        print(f"Error: {e}", file=sys.stderr)
        for detail in getattr(e, "errors", []):
            print(f"  {detail}", file=sys.stderr)
        raise SystemExit(1)

    slug = slug_from_path(args.file)
    project_dir = init_output_dir(args.file, output_base=args.output_dir)
    output_path = export(result, project_dir, slug, options, source=os.path.abspath(args.file))

    stats = summarize(result, options)
    print(f"Segmented episode: {result.episode_id}")
    print(f"Created {result.segment_count} segments, {result.total_duration:.1f}s total")
    print(f"Average {stats['average_duration']:.1f}s (min {stats['min_duration']:.1f}s, "
          f"max {stats['max_duration']:.1f}s)")
    print(f"Estimated cost: ${stats['estimated_cost']:.2f}")
    print(f"Written to {output_path}")


def cmd_validate(args):
    """Validate an episode's structured screenplay."""
    data = _read_episode_file(args.file)
    result = validate_screenplay(data.get("structured_screenplay"))

    for warning in result.warnings:
        print(f"Warning: {warning}")

    if not result.valid:
        print("Structured screenplay is invalid and cannot be segmented:", file=sys.stderr)
        print(format_validation_errors(result.errors), file=sys.stderr)
        raise SystemExit(1)

    print("Structured screenplay is valid.")


def _print_segment(segment: dict) -> None:
    print(f"\nSegment #{segment['segment_number']}:")
    print(f"  Scene IDs: {', '.join(segment['scene_ids'])}")
    print(f"  Duration: {segment['estimated_duration']:.1f}s")
    print(f"  Timespan: {segment['start_timestamp']:.1f}s - {segment['end_timestamp']:.1f}s")
    print(f"  Narrative: {segment['narrative_beat'][:80]}")
    if "narrative_transition" in segment:
        print(f"  Transition: {segment['narrative_transition']}")
    print(f"  Dialogue lines: {len(segment['dialogue_lines'])}")
    print(f"  Action beats: {len(segment['action_beats'])}")
    print(f"  Characters: {', '.join(segment['characters_in_segment'])}")


def cmd_show(args):
    """Print an exported segmentation, segment by segment."""
    project_dir = os.path.join(args.output_dir, args.slug)
    manifest = load_segments(project_dir)
    if manifest is None:
        print(f"Error: Project '{args.slug}' has no exported segments.", file=sys.stderr)
        print("Run 'episode-segmenter segment <file>' first.", file=sys.stderr)
        raise SystemExit(1)

    result = manifest["result"]
    stats = manifest.get("stats", {})
    print(f"Episode: {result['episode_id']}")
    print(f"Total Segments: {result['segment_count']}")
    print("=" * 80)
    for segment in result["segments"]:
        _print_segment(segment)
    print("\n" + "=" * 80)

    print("Analysis:")
    print(f"  Average segment duration: {stats.get('average_duration', 0):.1f}s")
    print(f"  Min segment duration: {stats.get('min_duration', 0):.1f}s")
    print(f"  Max segment duration: {stats.get('max_duration', 0):.1f}s")
    print(f"  Segments over model limit: {stats.get('over_model_limit', 0)}")
    print(f"  Segments within bounds: {stats.get('within_bounds', 0)}")
    print(f"  Segments under minimum: {stats.get('under_min', 0)}")
    print("Segments per scene:")
    for scene_id, count in stats.get("segments_per_scene", {}).items():
        print(f"  {scene_id:<20} {count}")


def cmd_list(args):
    """List projects with exported segments."""
    projects = list_projects(output_base=args.output_dir)
    if not projects:
        print("No projects found.")
        return
    print("Projects:")
    for name in projects:
        print(f"  {name}")


def main(argv=None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="episode-segmenter",
        description="Episode Segmenter: break screenplays into clip-sized video segments",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("--output-dir", default=OUTPUT_DIR, help="Base directory for projects")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # segment
    segment_parser = subparsers.add_parser("segment", help="Segment an episode JSON file")
    segment_parser.add_argument("file", help="Path to the episode (or bare screenplay) JSON file")
    segment_parser.add_argument("--target", type=float, help="Target segment duration in seconds")
    segment_parser.add_argument("--min", type=float, help="Minimum segment duration in seconds")
    segment_parser.add_argument("--max", type=float, help="Maximum segment duration in seconds")
    segment_parser.add_argument(
        "--no-scene-boundaries", action="store_true",
        help="Allow splitting scenes to fill segments toward the target",
    )
    segment_parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    segment_parser.set_defaults(func=cmd_segment)

    # validate
    validate_parser = subparsers.add_parser("validate", help="Validate an episode's screenplay")
    validate_parser.add_argument("file", help="Path to the episode JSON file")
    validate_parser.set_defaults(func=cmd_validate)

    # show
    show_parser = subparsers.add_parser("show", help="Show exported segments")
    show_parser.add_argument("slug", help="Project slug (from filename)")
    show_parser.set_defaults(func=cmd_show)

    # list
    list_parser = subparsers.add_parser("list", help="List projects")
    list_parser.set_defaults(func=cmd_list)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    args.func(args)
