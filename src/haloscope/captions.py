"""
Caption timeline: subtitle parsing and the forward-only caption cursor.

Accepts SubRip / WebVTT style text, one caption per block:

    1
    00:00:01,000 --> 00:00:02,500
    First line
    second line

Blocks are separated by a blank line. Timecodes use either ``,`` or ``.``
as the fractional separator.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Union


class InvalidTimecodeError(ValueError):
    """Raised when a timecode component cannot be read as a number."""


@dataclass(frozen=True)
class CaptionRecord:
    """A single timed caption."""

    start: float
    end: float
    text: str


def parse_timecode(value: str) -> float:
    """
    Convert ``HH:MM:SS.mmm`` (or ``MM:SS.mmm``) to seconds.

    Args:
        value: Timecode text. ``,`` and ``.`` are both accepted before the
            milliseconds.

    Returns:
        Total seconds as a float.

    Raises:
        InvalidTimecodeError: If a component is not numeric.
    """
    parts = value.strip().replace(",", ".").split(":")
    if len(parts) == 2:
        parts.insert(0, "0")
    if len(parts) != 3:
        raise InvalidTimecodeError(f"Invalid timecode: {value!r}")
    try:
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = float(parts[2])
    except ValueError as e:
        raise InvalidTimecodeError(f"Invalid timecode: {value!r}") from e
    return hours * 3600 + minutes * 60 + seconds


def _parse_block(block: str) -> CaptionRecord | None:
    lines = block.strip("\n").split("\n")
    if len(lines) < 3:
        return None
    times = lines[1].split(" --> ")
    if len(times) != 2:
        return None
    # WebVTT cue settings may follow the end timecode
    end_text = times[1].split()[0] if times[1].strip() else times[1]
    return CaptionRecord(
        start=parse_timecode(times[0]),
        end=parse_timecode(end_text),
        text="\n".join(lines[2:]),
    )


def parse_subtitles(text: str, strict: bool = False) -> list[CaptionRecord]:
    """
    Parse subtitle text into caption records, in source order.

    Records are neither sorted nor deduplicated; the cursor expects blocks
    in non-decreasing time order.

    Args:
        text: Full subtitle source.
        strict: Re-raise InvalidTimecodeError instead of dropping the record.

    Returns:
        List of CaptionRecord.
    """
    text = text.replace("\r\n", "\n").lstrip("\ufeff")
    records = []
    for block in text.split("\n\n"):
        try:
            record = _parse_block(block)
        except InvalidTimecodeError:
            if strict:
                raise
            continue
        if record is not None:
            records.append(record)
    return records


def load_subtitles(path: Union[str, Path], strict: bool = False) -> list[CaptionRecord]:
    """Read and parse a local subtitle file (.srt / .vtt)."""
    content = Path(path).read_text(encoding="utf-8-sig")
    return parse_subtitles(content, strict=strict)


class CaptionCursor:
    """
    Maps playback time to the active caption.

    Keeps an index to the earliest record not yet confirmed past. The index
    only moves forward during ``active_text``; use ``reset`` or ``seek`` after
    the playback position jumps backwards.
    """

    def __init__(self, records: list[CaptionRecord] | None = None):
        self.records = list(records or [])
        self._index = 0

    @property
    def index(self) -> int:
        return self._index

    def current(self) -> CaptionRecord | None:
        """Record at the cursor, or None once every record has passed."""
        if self._index < len(self.records):
            return self.records[self._index]
        return None

    def active_text(self, current_time: float) -> str:
        """
        Return the caption text active at ``current_time``, or "".

        A query after the current record's end advances the cursor by one.
        """
        if not self.records:
            return ""

        cap = self.current()
        if cap is None:
            return ""
        if cap.start <= current_time <= cap.end:
            return cap.text
        if current_time > cap.end:
            self._index += 1
        return ""

    def reset(self):
        """Move the cursor back to the first record."""
        self._index = 0

    def seek(self, current_time: float):
        """Place the cursor on the first record that has not ended by ``current_time``."""
        for i, record in enumerate(self.records):
            if record.end >= current_time:
                self._index = i
                return
        self._index = len(self.records)
