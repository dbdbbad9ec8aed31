"""
MP4 export for offline renders.

Raw RGB frames are piped straight into ffmpeg and muxed with the source
audio; nothing is written to disk in between.
"""

import subprocess
from pathlib import Path
from typing import Iterable


# Quality presets: (preset, crf, pix_fmt)
QUALITY_PRESETS = {
    "high": ("slow", "18", "yuv444p"),
    "medium": ("medium", "23", "yuv420p"),
    "fast": ("ultrafast", "28", "yuv420p"),
}


def build_ffmpeg_command(
    audio_path: Path,
    output_path: Path,
    width: int,
    height: int,
    fps: int,
    quality: str = "medium",
    duration: float | None = None,
) -> list[str]:
    """ffmpeg arguments for rawvideo-on-stdin plus an audio track."""
    preset, crf, pix_fmt = QUALITY_PRESETS.get(quality, QUALITY_PRESETS["medium"])

    cmd = [
        "ffmpeg", "-y",
        "-loglevel", "error",
        "-f", "rawvideo",
        "-pix_fmt", "rgb24",
        "-s", f"{width}x{height}",
        "-r", str(fps),
        "-i", "pipe:0",
        "-i", str(audio_path),
        "-map", "0:v:0",
        "-map", "1:a:0",
        "-c:v", "libx264",
        "-preset", preset,
        "-crf", crf,
        "-pix_fmt", pix_fmt,
        "-c:a", "aac",
        "-b:a", "192k",
        "-shortest",
    ]
    if duration is not None:
        cmd += ["-t", f"{duration:.3f}"]
    cmd.append(str(output_path))
    return cmd


def encode_frames(
    frames: Iterable,
    audio_path: Path,
    output_path: Path,
    width: int,
    height: int,
    fps: int = 60,
    quality: str = "medium",
    duration: float | None = None,
    total_frames: int | None = None,
    progress_callback: callable = None,
) -> Path:
    """
    Encode rendered frames to MP4 with audio.

    Args:
        frames: Yields (H, W, 3) uint8 numpy arrays.
        audio_path: Audio file to mux in.
        output_path: Output MP4 path.
        width: Frame width.
        height: Frame height.
        fps: Frames per second.
        quality: "high", "medium", or "fast".
        duration: Optional output length limit in seconds.
        total_frames: Total frame count for progress reporting.
        progress_callback: Optional callback(current_frame, total_frames).

    Returns:
        Path to the output file.

    Raises:
        RuntimeError: If ffmpeg exits with an error.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    cmd = build_ffmpeg_command(audio_path, output_path, width, height, fps, quality, duration)
    proc = subprocess.Popen(
        cmd,
        stdin=subprocess.PIPE,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.PIPE,
    )

    written = 0
    try:
        for frame in frames:
            proc.stdin.write(frame.tobytes())
            written += 1
            if progress_callback and total_frames:
                progress_callback(written, total_frames)
    except BrokenPipeError:
        # ffmpeg stopped reading; its exit code tells us why
        pass
    finally:
        if proc.stdin:
            proc.stdin.close()

    stderr = proc.stderr.read().decode("utf-8", errors="replace")
    proc.wait()

    if proc.returncode != 0:
        error_lines = [
            line for line in stderr.split("\n")
            if "error" in line.lower() or "invalid" in line.lower()
        ]
        error_msg = "\n".join(error_lines[-5:]) if error_lines else stderr[-500:]
        raise RuntimeError(f"ffmpeg exited with code {proc.returncode}: {error_msg}")

    return output_path
