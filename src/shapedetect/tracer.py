"""
Runtime tracing for shape detection.

Every pipeline stage opens a span, and spans nest. Span and event metadata
is rendered through summarize(), so grids, contours and shape records show
up as one short token each. A detection pass reads as an indented log with
timings.
"""

import functools
import json
import sys
import time
from contextlib import contextmanager
from datetime import datetime
from enum import Enum

import numpy as np
from pydantic import BaseModel

from shapedetect.geometry.point import Point

LEVELS = {"ERROR": 0, "WARN": 1, "INFO": 2, "DEBUG": 3}


class TraceSink:
    """Output settings: stderr always, optionally mirrored to a file."""

    def __init__(self):
        self.enabled = False
        self.level = "INFO"
        self.file_path = None
        self.json_output = False
        self._file = None

    def configure(self, enabled=False, level="INFO", file_path=None, json_output=False):
        """Apply settings, reopening the mirror file if one is given."""
        self.close()
        self.enabled = enabled
        self.level = level.upper()
        self.file_path = file_path
        self.json_output = json_output

        if enabled and file_path:
            self._file = open(file_path, "w", encoding="utf-8")

    def close(self):
        """Close the mirror file if open."""
        if self._file:
            self._file.close()
            self._file = None

    def accepts(self, level):
        if not self.enabled:
            return False
        return LEVELS.get(level, LEVELS["INFO"]) <= LEVELS.get(self.level, LEVELS["INFO"])

    def emit(self, line):
        print(line, file=sys.stderr)
        if self._file:
            self._file.write(line + "\n")
            self._file.flush()


class Tracer:
    """
    Nested span and event logger.

    Indentation follows the number of open spans, so a span that fails
    still leaves the depth where it found it.
    """

    def __init__(self):
        self.sink = TraceSink()
        self._open_spans = []

    @property
    def enabled(self):
        return self.sink.enabled

    def _record(self, level, module, name, message, meta=None):
        if not self.sink.accepts(level):
            return

        stamp = _timestamp()
        location = f"{module}:{name}" if name else module
        summaries = {key: summarize(value) for key, value in (meta or {}).items()}
        fields = " ".join(f"{key}={text}" for key, text in summaries.items())
        text = f"{message} {fields}".strip()
        indent = "  " * len(self._open_spans)

        self.sink.emit(f"{stamp} {level:<5} {indent}{location}  {text}")

        if self.sink.json_output:
            self.sink.emit(json.dumps({
                "timestamp": stamp,
                "level": level,
                "depth": len(self._open_spans),
                "module": module,
                "function": name,
                "message": message,
                "meta": summaries,
            }))

    @contextmanager
    def span(self, name, module="", **meta):
        """
        Trace a block as a span with start and end lines.

        The start line carries the summarized meta. A failure is logged at
        ERROR with the elapsed time and re-raised.
        """
        if not self.enabled:
            yield
            return

        self._record("INFO", module, name, "start", meta)
        started = time.perf_counter()
        self._open_spans.append((module, name))

        try:
            yield
        except Exception as e:
            self._open_spans.pop()
            self._record(
                "ERROR", module, name,
                f"failed dt={_elapsed_ms(started):.0f}ms error={type(e).__name__}: {str(e)[:100]}",
            )
            raise

        self._open_spans.pop()
        self._record("INFO", module, name, f"end ok dt={_elapsed_ms(started):.0f}ms")

    def event(self, message, level="INFO", **meta):
        """Log a message inside the innermost open span."""
        module, name = self._open_spans[-1] if self._open_spans else ("", "")
        self._record(level, module, name, message, meta)


def _timestamp():
    now = datetime.now()
    return now.strftime("%H:%M:%S.") + f"{now.microsecond // 1000:03d}"


def _elapsed_ms(started):
    return (time.perf_counter() - started) * 1000


def summarize(obj, max_len=200):
    """
    Render a value as one compact token for a trace line.

    Grids report dtype, size and how many pixels are set; contours report
    their length and start point; pydantic records report their leading
    fields. The result never exceeds max_len characters.
    """
    text = _describe(obj)
    if len(text) > max_len:
        return text[:max_len - 3] + "..."
    return text


def _describe(obj):
    if obj is None:
        return "None"
    if isinstance(obj, np.ndarray):
        return _describe_grid(obj)
    if isinstance(obj, BaseModel):
        return _describe_record(obj)
    if isinstance(obj, Enum):
        return str(obj.value)
    if isinstance(obj, Point):
        return f"Point({obj.x},{obj.y})"
    if isinstance(obj, (bytes, bytearray)):
        return f"buffer(len={len(obj)})"
    if isinstance(obj, str):
        return repr(obj) if len(obj) <= 50 else f"str(len={len(obj)})"
    if isinstance(obj, dict):
        keys = ",".join(str(k) for k in list(obj)[:5])
        return f"dict(len={len(obj)},keys=[{keys}])"
    if isinstance(obj, (list, tuple)):
        return _describe_sequence(obj)
    if isinstance(obj, float):
        return f"{obj:.4g}"
    if isinstance(obj, int):
        return str(obj)
    return f"<{type(obj).__name__}>"


def _describe_grid(grid):
    shape = "x".join(str(s) for s in grid.shape)
    if grid.size == 0:
        return f"ndarray({grid.dtype},{shape})"
    return f"ndarray({grid.dtype},{shape},set={int(np.count_nonzero(grid))})"


def _describe_record(record):
    names = list(type(record).model_fields)[:3]
    fields = ",".join(f"{name}={_describe(getattr(record, name))}" for name in names)
    return f"{type(record).__name__}({fields})"


def _describe_sequence(seq):
    kind = type(seq).__name__
    if len(seq) == 0:
        return f"{kind}(len=0)"

    first = seq[0]
    if isinstance(first, Point):
        return f"contour(len={len(seq)},start={_describe(first)})"
    if isinstance(first, list) and first and isinstance(first[0], Point):
        points = sum(len(c) for c in seq)
        return f"contours(n={len(seq)},points={points},first={_describe(first[0])})"
    return f"{kind}(len={len(seq)},first={type(first).__name__})"


def trace(label=None):
    """Run the decorated function inside a span named label."""
    def decorator(func):
        module = func.__module__.rsplit(".", 1)[-1] if func.__module__ else ""
        name = label or func.__name__

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            if not _tracer.enabled:
                return func(*args, **kwargs)
            with _tracer.span(name, module=module):
                return func(*args, **kwargs)

        return wrapper
    return decorator


_tracer = Tracer()


def get_tracer():
    """Get the global tracer instance."""
    return _tracer


def configure_tracer(enabled=False, level="INFO", file_path=None, json_output=False):
    """Configure the global tracer."""
    _tracer.sink.configure(
        enabled=enabled,
        level=level,
        file_path=file_path,
        json_output=json_output,
    )
