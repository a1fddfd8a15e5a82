from __future__ import annotations

import datetime as dt
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import webvtt
from webvtt.errors import MalformedCaptionError, MalformedFileError

from .errors import ParseError, WriteError
from .types import Cue, Direction

logger = logging.getLogger(__name__)

RLM = "\u200f"

_TIMESTAMP_RE = re.compile(r"^(?:(?P<hours>\d{2,}):)?(?P<minutes>[0-5]\d):(?P<seconds>[0-5]\d)\.(?P<millis>\d{3})$")
_TIMING_RE = re.compile(r"^(?P<start>\S+)[ \t]+-->[ \t]+(?P<end>\S+)(?:[ \t]+.*)?$")


def parse_timestamp(value: str) -> dt.timedelta:
    match = _TIMESTAMP_RE.match(value.strip())
    if not match:
        raise ValueError(f"Invalid WebVTT timestamp: {value!r}")
    return dt.timedelta(
        hours=int(match.group("hours") or 0),
        minutes=int(match.group("minutes")),
        seconds=int(match.group("seconds")),
        milliseconds=int(match.group("millis")),
    )


def format_timestamp(value: dt.timedelta) -> str:
    total_ms = max(0, round(value.total_seconds() * 1000))
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    seconds, millis = divmod(rest, 1000)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}.{millis:03d}"


def parse_vtt(text: str) -> List[Cue]:
    """Parse WebVTT text into an ordered list of cues.

    Raises ``ParseError`` for a missing header, a malformed timing line or
    a cue whose start is not before its end.
    """

    text = text.lstrip("\ufeff")
    if not text.startswith("WEBVTT"):
        raise ParseError("File does not start with a WEBVTT header")
    _check_timing_lines(text)
    try:
        captions = webvtt.from_string(text)
    except (MalformedFileError, MalformedCaptionError) as exc:
        raise ParseError(f"Invalid WebVTT: {exc}") from exc

    cues: List[Cue] = []
    for caption in captions:
        try:
            start, end = parse_timestamp(caption.start), parse_timestamp(caption.end)
        except ValueError as exc:
            raise ParseError(str(exc)) from exc
        if start >= end:
            raise ParseError(f"Cue start {caption.start} is not before end {caption.end}")
        if cues and start < cues[-1].start:
            logger.warning("Cue at %s starts before the previous cue; keeping file order", caption.start)
        cues.append(
            Cue(
                start=start,
                end=end,
                text_lines=[line.strip() for line in caption.lines],
                identifier=caption.identifier or None,
            )
        )
    logger.debug("Parsed %s cues", len(cues))
    return cues


def read_vtt(path: Path) -> List[Cue]:
    try:
        text = Path(path).read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise ParseError(f"Failed to read VTT file {path}: {exc}") from exc
    try:
        return parse_vtt(text)
    except ParseError as exc:
        raise ParseError(f"{path}: {exc}") from exc


def compose_vtt(cues: Iterable[Cue], direction: Direction = Direction.LTR) -> str:
    captions = []
    for cue in cues:
        # A blank line would terminate the cue
        lines = [line.strip() for line in cue.text_lines if line.strip()]
        if direction == Direction.RTL:
            lines = [_mark_rtl(line) for line in lines]
        caption = webvtt.Caption(start=format_timestamp(cue.start), end=format_timestamp(cue.end), text=lines)
        caption.identifier = cue.identifier
        captions.append(caption)
    return webvtt.WebVTT(captions=captions).content


def write_vtt(
    cues: Sequence[Cue],
    output_path: Path,
    direction: Direction = Direction.LTR,
    overwrite: bool = True,
) -> Path:
    """Write cues to ``output_path`` atomically, never leaving a partial file."""

    output_path = Path(output_path)
    if output_path.exists() and not overwrite:
        raise WriteError(f"{output_path} already exists and overwrite=False")

    payload = compose_vtt(cues, direction)
    tmp_name: Optional[str] = None
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=output_path.parent,
            prefix=f".{output_path.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            tmp_name = handle.name
            handle.write(payload)
        os.replace(tmp_name, output_path)
        tmp_name = None
    except OSError as exc:
        raise WriteError(f"Failed to write VTT file {output_path}: {exc}") from exc
    finally:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
    return output_path


def _check_timing_lines(text: str) -> None:
    # webvtt skips blocks it cannot read; a bad timing line must fail the run
    for lineno, line in enumerate(text.splitlines(), start=1):
        if "-->" not in line:
            continue
        match = _TIMING_RE.match(line.strip())
        try:
            if not match:
                raise ValueError(f"malformed timing line {line!r}")
            parse_timestamp(match.group("start"))
            parse_timestamp(match.group("end"))
        except ValueError as exc:
            raise ParseError(f"Line {lineno}: {exc}") from exc


def _mark_rtl(line: str) -> str:
    # Latin text at either edge of a right-to-left line needs an explicit mark
    if line[0].isascii():
        line = RLM + line
    if line[-1].isascii():
        line = line + RLM
    return line
