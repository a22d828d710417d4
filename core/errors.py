# Path: core/errors.py
# Purpose: Define the error taxonomy shared by search and learning services.
# Layer: core.
# Details: Separates malformed input, collaborator failures, and recoverable data integrity issues.

from __future__ import annotations


class ArtFlowError(Exception):
    """Base class for all errors raised by the intelligence layer."""


class InputError(ArtFlowError, ValueError):
    """Malformed query, filter, or image supplied by a caller."""


class CollaboratorError(ArtFlowError):
    """Repository or image decoder failure.

    Read paths degrade to partial or empty results when this is raised;
    write paths (interaction recording, profile upserts) propagate it.
    """

    def __init__(self, message: str, collaborator: str = "repository") -> None:
        super().__init__(message)
        self.collaborator = collaborator


class DataIntegrityWarning(UserWarning):
    """Stored data was incomplete and documented defaults were filled in."""


__all__ = ["ArtFlowError", "CollaboratorError", "DataIntegrityWarning", "InputError"]
