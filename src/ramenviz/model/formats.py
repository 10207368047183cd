"""
Point Cloud Formats
===================
Decoders for the text based point cloud encodings.

Why is this file needed?
------------------------
User files are loosely specified: PLY headers written by hand, XYZ dumps with
trailing columns, JSON exported by ad-hoc scripts. These decoders validate
the input and turn it into a flat float32 vertex buffer, or raise a typed
ParseError. A failed decode never returns a partial buffer.

Functions:
    parse_ply: ASCII PLY, vertex element only.
    parse_xyz: Whitespace-delimited x y z rows.
    parse_json: {"vertices": [...]} or {"points": [[x, y, z], ...]}.
"""
from __future__ import annotations

import json
import logging
from numbers import Real
from typing import Any, List, Optional, Tuple, TYPE_CHECKING

import numpy as np

from ramenviz.model.assets import as_vertex_buffer
from ramenviz.model.errors import (
    InvalidHeader, InvalidVertexCount, MissingHeaderTerminator, TruncatedData,
    InvalidVertexData, MalformedVertexArray, InvalidJSONShape
)

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

PLY = "PLY"
XYZ = "XYZ"
JSON = "JSON"


def _decode_text(data: bytes) -> str:
    """UTF-8 decode, tolerating a byte order mark. Raises UnicodeDecodeError."""
    return data.decode("utf-8-sig")


def _numbered_lines(text: str) -> List[Tuple[int, str]]:
    """Stripped lines with their 1-based numbers. Only '\\n' ends a line."""
    return [(number, raw.strip()) for number, raw in enumerate(text.split("\n"), start=1)]


def _to_finite_float32(values: Any) -> Optional[npt.NDArray[np.float32]]:
    """float32 array of `values`, or None if any value is not finite as float32."""
    try:
        with np.errstate(over="ignore", invalid="ignore"):
            array = np.asarray(values, dtype=np.float32)
    except OverflowError:
        # Python ints beyond the float range
        return None
    return array if np.isfinite(array).all() else None


# ------------------------------------------------------------------------------
# PLY
# ------------------------------------------------------------------------------

def parse_ply(data: bytes) -> npt.NDArray[np.float32]:
    try:
        text = _decode_text(data)
    except UnicodeDecodeError as e:
        raise InvalidHeader(PLY, f"file is not ASCII text ({e.reason})") from e

    # Keep the 1-based line number of every non-empty line for error messages
    lines = [(number, line) for number, line in _numbered_lines(text) if line]

    if not lines or lines[0][1] != "ply":
        raise InvalidHeader(PLY, "first line must be 'ply'")

    # --- 1. HEADER ---
    count_token: str | None = None
    data_start: int | None = None

    for index, (_, line) in enumerate(lines):
        tokens = line.split()
        if tokens[:1] == ["format"] and len(tokens) >= 2 and tokens[1] != "ascii":
            raise InvalidHeader(PLY, f"only ASCII PLY is supported, got '{tokens[1]}'")
        if tokens[:2] == ["element", "vertex"]:
            count_token = tokens[2] if len(tokens) > 2 else ""
        if line == "end_header":
            data_start = index + 1
            break

    if data_start is None:
        raise MissingHeaderTerminator(PLY)

    vertex_count = _parse_vertex_count(count_token)

    # --- 2. DATA ROWS ---
    rows = lines[data_start:data_start + vertex_count]
    if len(rows) < vertex_count:
        raise TruncatedData(PLY, expected=vertex_count, found=len(rows))

    vertices = np.empty(vertex_count * 3, dtype=np.float32)
    for i, (number, row) in enumerate(rows):
        fields = row.split()
        if len(fields) < 3:
            raise InvalidVertexData(PLY, number, "expected at least 3 values")
        try:
            xyz = _to_finite_float32([float(v) for v in fields[:3]])
        except ValueError as e:
            raise InvalidVertexData(PLY, number, str(e)) from e
        if xyz is None:
            raise InvalidVertexData(PLY, number, "coordinates must be finite")
        vertices[i * 3:i * 3 + 3] = xyz

    logger.debug(f"Decoded {vertex_count} PLY vertices.")
    return vertices


def _parse_vertex_count(token: str | None) -> int:
    if token is None:
        raise InvalidVertexCount(PLY, "header does not declare 'element vertex <N>'")
    try:
        count = int(token)
    except ValueError:
        raise InvalidVertexCount(PLY, f"vertex count '{token}' is not an integer") from None
    if count <= 0:
        raise InvalidVertexCount(PLY, f"vertex count must be positive, got {count}")
    return count


def format_ply(vertices: Any) -> bytes:
    """Serialize a vertex buffer as a minimal ASCII PLY file."""
    points = as_vertex_buffer(vertices).reshape(-1, 3)
    header = [
        "ply",
        "format ascii 1.0",
        f"element vertex {len(points)}",
        "property float x",
        "property float y",
        "property float z",
        "end_header",
    ]
    # repr() of a python float round-trips exactly through float32
    rows = [" ".join(repr(float(v)) for v in p) for p in points]
    return ("\n".join(header + rows) + "\n").encode("ascii")


# ------------------------------------------------------------------------------
# XYZ
# ------------------------------------------------------------------------------

def parse_xyz(data: bytes) -> npt.NDArray[np.float32]:
    try:
        text = _decode_text(data)
    except UnicodeDecodeError as e:
        raise InvalidVertexData(XYZ, 1, f"file is not text ({e.reason})") from e

    rows: List[npt.NDArray[np.float32]] = []
    for number, line in _numbered_lines(text):
        if not line:
            continue
        fields = line.split()
        if len(fields) < 3:
            raise InvalidVertexData(XYZ, number, "expected 3 values")
        try:
            xyz = _to_finite_float32([float(v) for v in fields[:3]])
        except ValueError as e:
            raise InvalidVertexData(XYZ, number, str(e)) from e
        if xyz is None:
            raise InvalidVertexData(XYZ, number, "coordinates must be finite")
        rows.append(xyz)

    if not rows:
        raise InvalidVertexData(XYZ, 1, "file contains no points")
    return as_vertex_buffer(np.concatenate(rows))


# ------------------------------------------------------------------------------
# JSON
# ------------------------------------------------------------------------------

def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def parse_json(data: bytes) -> npt.NDArray[np.float32]:
    try:
        document = json.loads(_decode_text(data))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise InvalidJSONShape(JSON, f"not a valid JSON document ({e})") from e

    if not isinstance(document, dict):
        raise InvalidJSONShape(JSON, "top-level value must be an object")

    vertices = document.get("vertices")
    if isinstance(vertices, list):
        if not all(_is_number(v) for v in vertices):
            raise MalformedVertexArray(JSON, "'vertices' must contain only numbers")
        if len(vertices) % 3 != 0:
            raise MalformedVertexArray(
                JSON, f"'vertices' length {len(vertices)} is not a multiple of 3"
            )
        buffer = _to_finite_float32(vertices)
        if buffer is None:
            raise MalformedVertexArray(JSON, "'vertices' contains non-finite values")
        return as_vertex_buffer(buffer)

    points = document.get("points")
    if isinstance(points, list):
        flat: List[float] = []
        for i, point in enumerate(points):
            if not (isinstance(point, list) and len(point) == 3 and all(_is_number(v) for v in point)):
                raise MalformedVertexArray(JSON, f"point {i} is not an [x, y, z] triple of numbers")
            if _to_finite_float32(point) is None:
                raise MalformedVertexArray(JSON, f"point {i} has non-finite coordinates")
            flat.extend(point)
        return as_vertex_buffer(flat)

    raise InvalidJSONShape(JSON, "expected a 'vertices' or 'points' array")
