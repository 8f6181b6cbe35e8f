"""Lumbar Motor Control Analyzer - CLI entry point.

Replays a recorded landmark sequence through an assessment session and
prints the final stability analysis. The input is a JSON list of frames:

    [{"timestamp_ms": 0, "landmarks": [[x, y, z, visibility], ... 33 rows]},
     {"timestamp_ms": 33.3, "landmarks": null},
     ...]
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .config.landmarks import TEST_LABELS, TEST_STANDING_HIP_FLEX, TEST_TYPES
from .core.session import AssessmentSession, FrameResult


def load_frames(input_path: str) -> List[Dict[str, Any]]:
    """Load a recorded landmark sequence."""
    path = Path(input_path)
    if not path.exists():
        raise FileNotFoundError(f"Landmark file not found: {input_path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("frames")
    if not isinstance(data, list):
        raise ValueError("Landmark file must contain a list of frames")
    return data


def iter_frames(frames: List[Dict[str, Any]], fps: float) -> Iterator[Tuple[float, Optional[list]]]:
    """Yield (timestamp_ms, landmarks) pairs; frames without timestamps are spaced by *fps*."""
    step_ms = 1000.0 / max(fps, 1e-6)
    for idx, frame in enumerate(frames):
        if not isinstance(frame, dict):
            raise ValueError(f"Frame {idx} is not an object")
        ts = frame.get("timestamp_ms")
        if ts is None:
            yield idx * step_ms, frame.get("landmarks")
            continue
        try:
            ts = float(ts)
        except (TypeError, ValueError):
            raise ValueError(f"Frame {idx} has an invalid timestamp: {ts!r}") from None
        yield ts, frame.get("landmarks")


def analyze_recording(
    input_path: str,
    test_type: str = TEST_STANDING_HIP_FLEX,
    fps: float = 30.0,
) -> Tuple[AssessmentSession, Optional[FrameResult]]:
    """Run every frame of a recording through a fresh session."""
    frames = load_frames(input_path)
    session = AssessmentSession(test_type)

    last: Optional[FrameResult] = None
    started = False
    for ts, landmarks in iter_frames(frames, fps):
        if not started:
            session.start_recording(ts)
            started = True
        last = session.process_frame(landmarks, ts)
    session.stop_recording()
    return session, last


def print_summary(session: AssessmentSession, last: Optional[FrameResult]):
    print(f"Test: {TEST_LABELS[session.test_type]}")

    if last is None:
        print("  No frames in recording")
        return

    if last.stability is not None:
        s = last.stability
        print(f"\nStability ({len(session.stability)} samples in window)")
        print(f"  Grade:              {s.stability_grade.value}")
        print(f"  Stability score:    {s.lumbar_stability_score:.1f}")
        print(f"  Excessive movement: {s.lumbar_excessive_movement:.1f}°")
        print(f"  Hip/lumbar ratio:   {s.hip_lumbar_ratio:.2f}")
        print(f"  Movement phases:    {len(s.hip_movement_phases)}")
        for p in s.hip_movement_phases:
            print(f"    frames {p.start_index}-{p.end_index}: hip {p.hip_range:.1f}°, lumbar {p.lumbar_range:.1f}°")

    print("\nMetrics (last frame)")
    for metric in last.metrics:
        print(f"  {metric.label}: {metric.value:.1f}{metric.unit} [{metric.status.value}] {metric.description}")

    stats = session.recorder.statistics()
    print(f"\nExcessive movement over {session.recorder.duration_s:.1f}s")
    print(f"  mean {stats.mean:.1f}°  max {stats.max:.1f}°  min {stats.min:.1f}°  range {stats.range:.1f}°")
    print(
        f"  normal {stats.normal_percentage:.1f}%  caution {stats.caution_percentage:.1f}%"
        f"  abnormal {stats.abnormal_percentage:.1f}%"
    )


def main(argv: Optional[List[str]] = None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Lumbar Motor Control Analyzer - Score lumbar stability from recorded pose landmarks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  lumbar-analyzer session.json
  lumbar-analyzer session.json --test rockBack
  lumbar-analyzer session.json --test seatedKneeExt --fps 60 -v
        """
    )

    parser.add_argument("input", help="Recorded landmark sequence (JSON)")
    parser.add_argument("-t", "--test", default=TEST_STANDING_HIP_FLEX, choices=list(TEST_TYPES))
    parser.add_argument("--fps", type=float, default=30.0, help="Frame rate used when timestamps are missing")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log per-frame angles")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(asctime)s] [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )

    if args.fps <= 0:
        print("Error: FPS must be positive", file=sys.stderr)
        sys.exit(1)

    try:
        session, last = analyze_recording(args.input, args.test, args.fps)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(1)
    except (OSError, ValueError) as e:
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(1)

    print_summary(session, last)


if __name__ == "__main__":
    main()
