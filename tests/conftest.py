"""Shared fixtures: an in-memory host, file store and filter settings."""

from pathlib import Path

import pytest

from allyfilter.config import Settings
from allyfilter.models.page import CourseOverview, OtherPage
from allyfilter.services.file_store import InMemoryFileStore
from allyfilter.services.host import InMemoryHost
from allyfilter.services.rewriter import AllyFilter, RequestContext
from allyfilter.services.templates import WrapperRenderer

WWWROOT = "https://www.example.com/moodle"


@pytest.fixture
def settings() -> Settings:
    """Settings for path-style file URLs."""
    return Settings(wwwroot=WWWROOT, _env_file=None)


@pytest.fixture
def query_settings() -> Settings:
    """Settings for ?file= style file URLs."""
    return Settings(wwwroot=WWWROOT, slash_arguments=False, _env_file=None)


@pytest.fixture
def renderer(settings: Settings) -> WrapperRenderer:
    return WrapperRenderer(Path(settings.resolved_templates_path))


@pytest.fixture
def host() -> InMemoryHost:
    return InMemoryHost()


@pytest.fixture
def store() -> InMemoryFileStore:
    return InMemoryFileStore()


@pytest.fixture
def course(host: InMemoryHost):
    return host.create_course(name="Test course")


@pytest.fixture
def student(host: InMemoryHost, course) -> int:
    user_id = host.create_user()
    host.enrol_user(user_id, course.id, "student")
    return user_id


@pytest.fixture
def teacher(host: InMemoryHost, course) -> int:
    user_id = host.create_user()
    host.enrol_user(user_id, course.id, "editingteacher")
    return user_id


@pytest.fixture
def make_filter(host: InMemoryHost, store: InMemoryFileStore, renderer: WrapperRenderer, settings: Settings):
    """Build a filter for a user on a page."""

    def _make(user_id: int, page=None, filter_settings: Settings | None = None) -> AllyFilter:
        request = RequestContext(
            viewer=host.viewer(user_id),
            page=page or OtherPage(),
            store=store,
            host=host,
        )
        return AllyFilter(request, settings=filter_settings or settings, renderer=renderer)

    return _make


@pytest.fixture
def course_page(course) -> CourseOverview:
    return CourseOverview(course_id=course.id)
