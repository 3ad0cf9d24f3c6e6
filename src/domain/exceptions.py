from __future__ import annotations


class MediaError(Exception):
    """Base class for all media pipeline failures."""


class InputRejectedError(MediaError, ValueError):
    """The input can never be processed; retrying will not help."""

    check = "input"


class UnsupportedMediaTypeError(InputRejectedError):
    check = "type"

    def __init__(self, mime_type: str, allowed: tuple[str, ...]) -> None:
        super().__init__(
            f"Invalid file type {mime_type!r}. Allowed types: {', '.join(allowed)}"
        )
        self.mime_type = mime_type
        self.allowed = allowed


class ContentTypeMismatchError(UnsupportedMediaTypeError):
    """The declared type is allowed but the bytes decode as something else."""

    def __init__(self, declared: str, detected: str, allowed: tuple[str, ...]) -> None:
        super().__init__(detected, allowed)
        self.args = (f"File declared as {declared!r} but its content is {detected!r}",)
        self.declared = declared


class FileTooLargeError(InputRejectedError):
    check = "size"

    def __init__(self, size: int, max_size: int) -> None:
        super().__init__(
            f"File too large ({size} bytes). Maximum size: {max_size / 1024 / 1024:g}MB"
        )
        self.size = size
        self.max_size = max_size


class ImageDecodeError(InputRejectedError):
    check = "decode"


class DerivativeBuildError(MediaError):
    """A tier failed, so the whole derivative set was abandoned."""

    def __init__(self, tier: str, cause: Exception) -> None:
        super().__init__(f"Failed to build {tier} derivative: {cause}")
        self.tier = tier
        self.cause = cause


class StorageError(MediaError, RuntimeError):
    """Storage backend operation failed (network, permissions, ...)."""
