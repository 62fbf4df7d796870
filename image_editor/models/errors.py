"""
Failure kinds reported by the editor.

Repositories and services raise these; the ImageEditor boundary catches
them and hands them to the caller instead of letting them escape.
"""


class EditorError(Exception):
    kind = "editor_error"

    @property
    def message(self) -> str:
        return str(self)


class DecodeError(EditorError):
    """Missing, unreadable, corrupt or unsupported image on load."""
    kind = "decode_error"


class EncodeError(EditorError):
    """Image could not be written (bad path, permissions, format)."""
    kind = "encode_error"


class NoImageLoaded(EditorError):
    kind = "no_image_loaded"


class EmptyHistory(EditorError):
    kind = "empty_history"


class InvalidImage(EditorError):
    """Image is empty or not 3-channel where a color image is required."""
    kind = "invalid_image"


class InvalidParameter(EditorError, ValueError):
    kind = "invalid_parameter"
