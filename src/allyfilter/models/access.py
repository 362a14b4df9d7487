"""Viewer identity and per-element rewrite decisions."""

from enum import Enum

from pydantic import BaseModel, Field


class Viewer(BaseModel):
    """The user the page is being rendered for."""

    id: int
    is_admin: bool = False
    capabilities: dict[int, frozenset[str]] = Field(default_factory=dict)  # context id -> capabilities

    def has_capability(self, capability: str, lineage: tuple[int, ...]) -> bool:
        """Check a capability granted in any context of the given lineage."""
        if self.is_admin:
            return True
        return any(capability in self.capabilities.get(context_id, ()) for context_id in lineage)


class Access(str, Enum):
    """What the viewer may see for one resolved file."""

    NONE = "none"
    VIEW = "view"
    FEEDBACK = "feedback"


class ImageDecision(str, Enum):
    SUPPRESS = "suppress"
    COVER_ONLY = "cover_only"
    COVER_AND_FEEDBACK = "cover_and_feedback"


class AnchorDecision(str, Enum):
    SUPPRESS = "suppress"
    DOWNLOAD_ONLY = "download_only"
    DOWNLOAD_AND_FEEDBACK = "download_and_feedback"


class SkipReason(str, Enum):
    """Why a candidate URL was left untouched."""

    URL_NOT_RECOGNIZED = "url_not_recognized"
    FILE_NOT_FOUND = "file_not_found"
    POLICY_SUPPRESSED = "policy_suppressed"
