"""
Pose Recordings

Stores a sequence of observer poses so a session can be replayed through
the comfort pipeline without a live renderer.

File format (little endian):
    <I          number of frames
    per frame:
    <f          timestamp in seconds since recording start
    <7f         px, py, pz, qx, qy, qz, qw
"""

import struct
import logging
from dataclasses import dataclass
from typing import Iterable, List

from motion_comfort.shared.types import Pose, Vector3, Quaternion

logger = logging.getLogger(__name__)

HEADER_FORMAT = '<I'
FRAME_FORMAT = '<f7f'
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)  # 4
FRAME_SIZE = struct.calcsize(FRAME_FORMAT)    # 32


@dataclass(frozen=True)
class PoseFrame:
    """One recorded frame."""

    timestamp: float
    pose: Pose


class RecordingError(ValueError):
    """Raised when a recording file is truncated or malformed."""


def save_recording(output_file: str, frames: Iterable[PoseFrame]) -> int:
    """
    Write frames to a recording file.

    Returns:
        Number of frames written
    """
    frames = list(frames)

    with open(output_file, 'wb') as f:
        f.write(struct.pack(HEADER_FORMAT, len(frames)))
        for frame in frames:
            p = frame.pose.position
            q = frame.pose.orientation
            f.write(struct.pack(FRAME_FORMAT, frame.timestamp,
                                p.x, p.y, p.z, q.x, q.y, q.z, q.w))

    logger.info(f"Saved {len(frames)} frames to {output_file}")
    return len(frames)


def load_recording(input_file: str) -> List[PoseFrame]:
    """
    Load recorded frames from file.

    Raises:
        RecordingError: If the file is shorter than its header claims
    """
    frames = []

    with open(input_file, 'rb') as f:
        header = f.read(HEADER_SIZE)
        if len(header) < HEADER_SIZE:
            raise RecordingError(f"{input_file}: missing header")
        count = struct.unpack(HEADER_FORMAT, header)[0]

        for i in range(count):
            data = f.read(FRAME_SIZE)
            if len(data) < FRAME_SIZE:
                raise RecordingError(
                    f"{input_file}: truncated at frame {i} of {count}"
                )
            timestamp, px, py, pz, qx, qy, qz, qw = struct.unpack(FRAME_FORMAT, data)
            frames.append(PoseFrame(
                timestamp=timestamp,
                pose=Pose(Vector3(px, py, pz), Quaternion(qx, qy, qz, qw))
            ))

    logger.info(f"Loaded {len(frames)} frames from {input_file}")
    return frames
