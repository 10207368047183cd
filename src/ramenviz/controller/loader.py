"""
Asset Loader
============
Single entry point turning raw file bytes into a ParsedAsset.

Why is this file needed?
------------------------
1. Dispatch: It picks the decoder from the file name extension.
2. Delegation: Binary scenes (glb/gltf) are read by VTK through PyVista,
   which only reads from disk, so the bytes are spooled to a temporary file
   that is removed as soon as the reader is done.
"""
from __future__ import annotations

import logging
import os
import tempfile
import uuid
from typing import Callable, Dict, TYPE_CHECKING

import pyvista as pv

from ramenviz import config
from ramenviz.model.assets import ParsedAsset, PointCloud, SceneModel
from ramenviz.model.errors import AssetLoadFailed, UnsupportedFormat
from ramenviz.model.formats import parse_json, parse_ply, parse_xyz

if TYPE_CHECKING:
    import numpy as np
    import numpy.typing as npt

logger = logging.getLogger(__name__)

SCENE = "GLTF"

POINT_CLOUD_DECODERS: Dict[str, Callable[[bytes], "npt.NDArray[np.float32]"]] = {
    "ply": parse_ply,
    "xyz": parse_xyz,
    "json": parse_json,
}


def file_extension(filename: str) -> str:
    """Lower-case extension without the dot ('' when there is none)."""
    return os.path.splitext(os.path.basename(filename))[1].lstrip(".").lower()


def parse(data: bytes, filename: str) -> ParsedAsset:
    """
    Decode a dropped or opened file.

    Args:
        data: Raw file contents.
        filename: Original file name, only used for its extension.

    Returns:
        PointCloud for ply/xyz/json, SceneModel for glb/gltf.

    Raises:
        ParseError: A subclass describing why the file was rejected.
    """
    extension = file_extension(filename)
    logger.info(f"Parsing '{filename}' ({len(data)} bytes).")

    decoder = POINT_CLOUD_DECODERS.get(extension)
    if decoder is not None:
        vertices = decoder(data)
        cloud = PointCloud(vertices, source_name=filename)
        logger.info(f"Loaded point cloud '{filename}' with {cloud.vertex_count} points.")
        return cloud

    if extension in config.SCENE_EXTENSIONS:
        return load_scene(data, filename)

    logger.warning(f"Rejected '{filename}': unsupported extension.")
    raise UnsupportedFormat(extension)


def load_scene(data: bytes, filename: str) -> SceneModel:
    """Read a glTF scene with PyVista and wrap it as a SceneModel."""
    suffix = f".{file_extension(filename)}"
    temp_path = os.path.join(tempfile.gettempdir(), f"ramenviz_{uuid.uuid4().hex}{suffix}")

    try:
        with open(temp_path, "wb") as f:
            f.write(data)
        logger.debug(f"Spooled scene bytes to temp file: {temp_path}")

        dataset = pv.read(temp_path)
    except Exception as e:
        logger.error(f"Scene reader failed for '{filename}': {e}")
        raise AssetLoadFailed(SCENE, str(e) or e.__class__.__name__) from e
    finally:
        try:
            if os.path.exists(temp_path):
                os.remove(temp_path)
        except OSError as e:
            logger.warning(f"Could not delete temp file '{temp_path}': {e}")

    if dataset is None or _point_count(dataset) == 0:
        raise AssetLoadFailed(SCENE, "scene contains no geometry")

    logger.info(f"Loaded scene '{filename}'.")
    return SceneModel(dataset, source_name=filename)


def _point_count(dataset: pv.DataObject) -> int:
    if isinstance(dataset, pv.MultiBlock):
        return sum(_point_count(block) for block in dataset if block is not None)
    return int(getattr(dataset, "n_points", 0))
