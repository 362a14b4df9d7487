"""Page descriptors: which kind of page the filtered content is rendered on."""

from collections.abc import Mapping
from typing import Annotated, Literal
from urllib.parse import urlsplit

from pydantic import BaseModel, Field


class CourseOverview(BaseModel):
    kind: Literal["course_overview"] = "course_overview"
    course_id: int


class AssignmentIntro(BaseModel):
    kind: Literal["assignment_intro"] = "assignment_intro"
    module_id: int


class Folder(BaseModel):
    kind: Literal["folder"] = "folder"
    module_id: int


class ResourceListing(BaseModel):
    kind: Literal["resource_listing"] = "resource_listing"
    course_id: int


class ForumDiscussion(BaseModel):
    kind: Literal["forum_discussion"] = "forum_discussion"
    forum_id: int  # Course module id of the forum


class OtherPage(BaseModel):
    kind: Literal["other"] = "other"


PageContext = Annotated[
    CourseOverview | AssignmentIntro | Folder | ResourceListing | ForumDiscussion | OtherPage,
    Field(discriminator="kind"),
]


def is_course_page(url: str) -> bool:
    """Check if the URL is a course's main view page."""
    return urlsplit(url).path.endswith("/course/view.php")


def _int_param(params: Mapping[str, str], name: str) -> int | None:
    value = params.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def resolve_page_context(
    page_type: str,
    url: str,
    params: Mapping[str, str] | None = None,
    course_id: int | None = None,
) -> PageContext:
    """
    Derive the page variant from the host's page descriptor.

    Args:
        page_type: Host page type, e.g. "mod-assign-view" or "course-view-topics"
        url: Full URL of the page being rendered
        params: Query parameters of the page request
        course_id: Id of the course the page belongs to, if any

    Returns:
        The matching PageContext variant, OtherPage when none applies
    """
    params = params or {}
    module_id = _int_param(params, "id")

    if is_course_page(url):
        return CourseOverview(course_id=course_id) if course_id else OtherPage()

    if page_type == "mod-assign-view" and module_id is not None:
        return AssignmentIntro(module_id=module_id)
    if page_type == "mod-folder-view" and module_id is not None:
        return Folder(module_id=module_id)
    if page_type == "mod-resource-index" and course_id:
        return ResourceListing(course_id=course_id)
    if page_type.startswith("mod-forum") and module_id is not None:
        return ForumDiscussion(forum_id=module_id)

    return OtherPage()
