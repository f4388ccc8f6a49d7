"""Video sources."""

from .camera import BaseCameraInterface, OpenCVCamera

__all__ = ["BaseCameraInterface", "OpenCVCamera"]
