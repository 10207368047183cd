"""3D Ramen Visualizer: point clouds, glTF scenes and an animated steam layer."""

__version__ = "0.1.0"
