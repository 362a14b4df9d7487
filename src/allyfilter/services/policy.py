"""Decides which resolved files get accessibility markup for a viewer."""

from allyfilter.config import Settings, get_settings
from allyfilter.models.access import Access, AnchorDecision, ImageDecision, Viewer
from allyfilter.models.files import CanonicalFileRef, StoredFile
from allyfilter.services.host import ContentHost


def uploader_is_author(stored: StoredFile, host: ContentHost, settings: Settings | None = None) -> bool:
    """
    Check that a file was added by someone allowed to author course content.

    Files without an uploader were created by the system and count as authored.
    Anything uploaded by an ordinary enrolled user is student content.
    """
    if stored.uploader_user_id is None:
        return True
    settings = settings or get_settings()
    return host.user_has_capability(stored.uploader_user_id, settings.author_capability, stored.context_id)


def evaluate_access(
    ref: CanonicalFileRef,
    viewer: Viewer,
    uploader_is_author: bool,
    settings: Settings | None = None,
) -> Access:
    """
    Decide what a viewer may see for one resolved file.

    Args:
        ref: The file resolved against its context
        viewer: User the page is rendered for
        uploader_is_author: Whether the uploader may author course content
        settings: Filter settings (blacklist and capability names)

    Returns:
        Access.NONE, Access.VIEW, or Access.FEEDBACK
    """
    settings = settings or get_settings()

    if ref.context_level.value in settings.blacklisted_contexts_list:
        return Access.NONE

    if not uploader_is_author:
        return Access.NONE

    lineage = ref.context_lineage or (ref.context_id,)
    if not ref.course_visible and not viewer.has_capability(settings.view_hidden_courses_capability, lineage):
        return Access.NONE

    if viewer.has_capability(settings.feedback_capability, lineage):
        return Access.FEEDBACK
    return Access.VIEW


def image_decision(access: Access) -> ImageDecision:
    """Map an access level to the markup emitted around an image."""
    return {
        Access.NONE: ImageDecision.SUPPRESS,
        Access.VIEW: ImageDecision.COVER_ONLY,
        Access.FEEDBACK: ImageDecision.COVER_AND_FEEDBACK,
    }[access]


def anchor_decision(access: Access) -> AnchorDecision:
    """Map an access level to the markup emitted around an anchor."""
    return {
        Access.NONE: AnchorDecision.SUPPRESS,
        Access.VIEW: AnchorDecision.DOWNLOAD_ONLY,
        Access.FEEDBACK: AnchorDecision.DOWNLOAD_AND_FEEDBACK,
    }[access]
