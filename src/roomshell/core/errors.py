"""Exception taxonomy for the roomshell pipeline."""

from __future__ import annotations


class RoomShellError(Exception):
    """Base class for all pipeline errors."""


class DegenerateGeometryError(RoomShellError):
    """Zero-length edge or normal, or a singular 2x2 line system."""


class InsufficientDataError(RoomShellError):
    """Too few points (or planes) to compute the requested quantity."""


class CollaboratorError(RoomShellError):
    """An external collaborator (I/O, segmentation, RANSAC) failed."""


class ConfigurationError(RoomShellError):
    """Configuration file missing, unparsable, or holding invalid values."""
