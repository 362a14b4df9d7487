"""Tests for page descriptor resolution."""

import pytest
from pydantic import TypeAdapter

from allyfilter.models.page import (
    AssignmentIntro,
    CourseOverview,
    Folder,
    ForumDiscussion,
    OtherPage,
    PageContext,
    ResourceListing,
    is_course_page,
    resolve_page_context,
)

WWWROOT = "https://www.example.com/moodle"


def test_is_course_page():
    """Only the course view script is a course page."""
    assert is_course_page(f"{WWWROOT}/course/view.php") is True
    assert is_course_page(f"{WWWROOT}/course/view.php?id=4") is True
    assert is_course_page(f"{WWWROOT}/user/view.php") is False


class TestResolvePageContext:
    """Tests for resolve_page_context."""

    def test_course_page(self):
        page = resolve_page_context("course-view-topics", f"{WWWROOT}/course/view.php", {"id": "4"}, course_id=4)
        assert page == CourseOverview(course_id=4)

    def test_course_page_type_on_other_url(self):
        """A course page type rendered on another script is not a course page."""
        page = resolve_page_context("course-view-topics", f"{WWWROOT}/user/view.php", {}, course_id=4)
        assert page == OtherPage()

    @pytest.mark.parametrize(
        ("page_type", "expected"),
        [
            ("mod-assign-view", AssignmentIntro(module_id=12)),
            ("mod-folder-view", Folder(module_id=12)),
            ("mod-forum-discuss", ForumDiscussion(forum_id=12)),
            ("mod-forum", ForumDiscussion(forum_id=12)),
        ],
    )
    def test_module_pages(self, page_type, expected):
        page = resolve_page_context(page_type, f"{WWWROOT}/mod/x/view.php", {"id": "12"}, course_id=4)
        assert page == expected

    def test_resource_index(self):
        page = resolve_page_context("mod-resource-index", f"{WWWROOT}/mod/resource/index.php", {"id": "4"}, 4)
        assert page == ResourceListing(course_id=4)

    @pytest.mark.parametrize("params", [{}, {"id": "abc"}])
    def test_missing_module_id(self, params):
        """Module pages without a usable id parameter are unsupported."""
        page = resolve_page_context("mod-assign-view", f"{WWWROOT}/mod/assign/view.php", params, course_id=4)
        assert page == OtherPage()

    def test_unknown_page_type(self):
        page = resolve_page_context("user-profile", f"{WWWROOT}/user/profile.php", {"id": "3"})
        assert page == OtherPage()


def test_page_context_discriminator():
    """Page descriptors deserialize to the right variant."""
    adapter = TypeAdapter(PageContext)
    assert adapter.validate_python({"kind": "folder", "module_id": 3}) == Folder(module_id=3)
    assert adapter.validate_python({"kind": "other"}) == OtherPage()
