from __future__ import annotations


class PosterError(Exception):
    """Base class for failures that abort a poster render."""


class PhotoDecodeError(PosterError):
    """The uploaded photo could not be decoded into pixels."""


class EncodeError(PosterError):
    """The composed poster could not be encoded into the requested format."""


class ExifToolUnavailableError(PosterError):
    """ExifTool was required (``use_exiftool=on``) but could not be started."""
