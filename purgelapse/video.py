"""
Time-lapse assembly.

Frames come out of a render run as ``0000.png``, ``0001.png``, ... in a state
directory; this module stitches them into a video file with OpenCV.
"""

import logging
from pathlib import Path
from typing import List, Union

import cv2

from purgelapse.errors import RenderError

logger = logging.getLogger(__name__)


def list_frames(frame_folder: Union[str, Path]) -> List[Path]:
    """
    Numbered PNG frames in ``frame_folder``, in sequence order.

    Frame names are zero padded, so lexicographic order is temporal order
    (and stays so past 9999, where names simply grow a digit).
    """
    folder = Path(frame_folder)
    if not folder.is_dir():
        raise RenderError(f"Frame folder does not exist: {frame_folder}")
    frames = [p for p in folder.glob("*.png") if p.stem.isdigit()]
    return sorted(frames, key=lambda p: int(p.stem))


def convert_frames_to_video(
    frame_folder: Union[str, Path],
    output_video: Union[str, Path],
    fps: int = 12,
    codec: str = "mp4v",
) -> int:
    """
    Convert a folder of numbered frames to a video file.

    Args:
        frame_folder: State directory written by a render run
        output_video: Path to output video file
        fps: Frames per second
        codec: FourCC video codec (e.g., 'mp4v', 'avc1')

    Returns:
        Number of frames written
    """
    frame_paths = list_frames(frame_folder)
    if not frame_paths:
        raise RenderError(f"No frames found in {frame_folder}")

    first = cv2.imread(str(frame_paths[0]))
    if first is None:
        raise RenderError(f"Could not read first frame: {frame_paths[0]}")
    height, width = first.shape[:2]

    output_video = Path(output_video)
    output_video.parent.mkdir(parents=True, exist_ok=True)
    fourcc = cv2.VideoWriter_fourcc(*codec)
    out = cv2.VideoWriter(str(output_video), fourcc, fps, (width, height))
    if not out.isOpened():
        raise RenderError(f"Failed to create video writer for {output_video}")

    logger.info(f"Converting {len(frame_paths)} frames to video...")
    written = 0
    try:
        for path in frame_paths:
            frame = cv2.imread(str(path))
            if frame is None:
                raise RenderError(f"Failed to read frame {path}")
            if frame.shape[:2] != (height, width):
                raise RenderError(
                    f"Frame {path} is {frame.shape[1]}x{frame.shape[0]}, expected {width}x{height}"
                )
            out.write(frame)
            written += 1
    finally:
        out.release()

    logger.info(f"Saved video to {output_video}")
    return written
