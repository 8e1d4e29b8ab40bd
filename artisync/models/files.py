"""File descriptor model for files being hashed and synced."""

from __future__ import annotations

from pydantic import Field

from .base import BaseModel


class FileDescriptor(BaseModel):
    """A local file known by its absolute and project-relative paths.

    ``hash`` is the empty string until a digest has been computed, and stays
    empty when the file could not be hashed.
    """

    real_path: str = Field(..., description="Absolute path on disk")
    relative_path: str = Field(..., description="Path relative to the artifact root")
    hash: str = Field("", description="Lowercase hex digest, empty if unknown")

    def with_hash(self, digest: str) -> FileDescriptor:
        """Return a copy carrying ``digest``; this instance is left untouched."""
        return self.model_copy(update={"hash": digest})
