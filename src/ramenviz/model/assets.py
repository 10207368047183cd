"""
Parsed Assets
=============
The two results a successful load can produce.

Classes:
    PointCloud: A flat float32 vertex buffer (x0, y0, z0, x1, ...).
    SceneModel: An opaque hierarchical scene handle from the binary loader.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt


def as_vertex_buffer(values: Any) -> npt.NDArray[np.float32]:
    """Convert a flat sequence of coordinates to a contiguous float32 buffer."""
    buffer = np.ascontiguousarray(values, dtype=np.float32).reshape(-1)
    if buffer.size % 3 != 0:
        raise ValueError(f"Vertex buffer length must be a multiple of 3, got {buffer.size}.")
    return buffer


@dataclass(frozen=True)
class PointCloud:
    vertices: npt.NDArray[np.float32]
    source_name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "vertices", as_vertex_buffer(self.vertices))

    @property
    def vertex_count(self) -> int:
        return self.vertices.size // 3

    @property
    def points(self) -> npt.NDArray[np.float32]:
        """(N, 3) view of the vertex buffer."""
        return self.vertices.reshape(-1, 3)

    def __len__(self) -> int:
        return self.vertex_count


@dataclass(frozen=True)
class SceneModel:
    """
    Wraps whatever the binary scene loader returned (a pyvista MultiBlock or
    DataSet). The model layer never looks inside it.
    """
    dataset: Any
    source_name: str = ""


ParsedAsset = Union[PointCloud, SceneModel]
