"""
Pose Trace Generator

Writes a synthetic observer trace for replay through the comfort
pipeline. Use this to test without a running renderer.

The trace stands still, walks forward, sprints, turns in place, then
stands still again so intensity can be seen rising and decaying.

Usage:
    python tools/trace_generator.py --output walk.bin
    python tools/trace_generator.py --output walk.bin --fps 90 --turn-rate 3.0
"""

import argparse
import math

from motion_comfort.recording import PoseFrame, save_recording
from motion_comfort.shared.types import Pose, Quaternion, Vector3

UP = Vector3(0.0, 1.0, 0.0)
EYE_HEIGHT = 1.6

# (duration s, forward speed u/s, turn rate rad/s)
SEGMENTS = [
    (1.0, 0.0, 0.0),    # idle
    (2.0, 5.0, 0.0),    # walk
    (2.0, 15.0, 0.0),   # sprint
    (1.5, 0.0, None),   # turn in place (rate from args)
    (2.0, 0.0, 0.0),    # settle
]


def generate(fps: float = 60.0, turn_rate: float = 2.0) -> list:
    """Build the frame list for the default segment plan."""
    frames = []
    dt = 1.0 / fps
    t = 0.0
    x = z = 0.0
    heading = 0.0

    for duration, speed, rate in SEGMENTS:
        rate = turn_rate if rate is None else rate
        for _ in range(int(round(duration * fps))):
            frames.append(PoseFrame(
                timestamp=t,
                pose=Pose(
                    Vector3(x, EYE_HEIGHT, z),
                    Quaternion.from_axis_angle(UP, heading)
                )
            ))
            t += dt
            # forward is -z at heading 0
            x -= math.sin(heading) * speed * dt
            z -= math.cos(heading) * speed * dt
            heading += rate * dt

    return frames


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Generate a synthetic pose trace")
    parser.add_argument("--output", "-o", default="pose_trace.bin", help="Output file")
    parser.add_argument("--fps", "-f", type=float, default=60.0, help="Frame rate")
    parser.add_argument("--turn-rate", "-r", type=float, default=2.0, help="Turn rate (rad/s)")
    args = parser.parse_args()

    frames = generate(args.fps, args.turn_rate)
    save_recording(args.output, frames)
    print(f"Saved {len(frames)} frames ({frames[-1].timestamp:.1f}s) to {args.output}")
