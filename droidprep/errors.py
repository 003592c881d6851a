"""Exception types raised while preparing or cleaning an Android project."""

from __future__ import annotations


class PrepareError(RuntimeError):
    """Base class for failures that abort a prepare/clean invocation."""


class IconValidationError(PrepareError):
    """Icon declarations are inconsistent; nothing has been written."""

    def __init__(self, missing_pair: list[str], legacy_needed: list[str]) -> None:
        self.missing_pair = list(missing_pair)
        self.legacy_needed = list(legacy_needed)
        parts: list[str] = []
        if self.missing_pair:
            parts.append(
                "One of the following attributes are set but missing the other for the density type: "
                + ", ".join(self.missing_pair)
                + ". Please ensure that all require attributes are defined."
            )
        if self.legacy_needed:
            parts.append(
                "For the following icons with the density of: "
                + ", ".join(self.legacy_needed)
                + ", adaptive foreground with a defined color or vector can not be used as a standard "
                "fallback icon for older Android devices. To support older Android environments, "
                "please provide a value for the src attribute."
            )
        super().__init__(" ".join(parts))


class ResourceNotFoundError(PrepareError):
    """A required project file could not be located."""


class FileSyncError(PrepareError):
    """A source path handed to the file synchronizer does not exist."""
