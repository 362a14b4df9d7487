"""Host page/context/capability interface and an in-memory implementation."""

from itertools import count
from typing import Protocol

from allyfilter.errors import HostError
from allyfilter.models.access import Viewer
from allyfilter.models.files import ContextInfo, ContextLevel, Course, CourseModule

# Capabilities granted by the standard course roles
ROLE_CAPABILITIES: dict[str, frozenset[str]] = {
    "student": frozenset(),
    "teacher": frozenset(
        {
            "ally:viewfeedback",
            "course:viewhiddenactivities",
            "course:viewhiddencourses",
        }
    ),
    "editingteacher": frozenset(
        {
            "ally:viewfeedback",
            "course:viewhiddenactivities",
            "course:viewhiddencourses",
            "course:manageactivities",
            "course:update",
        }
    ),
}


class ContentHost(Protocol):
    """What the filter needs to know about the host's courses and permissions."""

    def get_context(self, context_id: int) -> ContextInfo | None: ...

    def get_course(self, course_id: int) -> Course | None: ...

    def get_course_module(self, module_id: int) -> CourseModule | None: ...

    def list_course_modules(self, course_id: int, modname: str | None = None) -> list[CourseModule]: ...

    def list_forum_post_ids(self, module_id: int) -> list[int]:
        """Return the ids of every post in every discussion of a forum."""
        ...

    def user_has_capability(self, user_id: int, capability: str, context_id: int) -> bool:
        """Check a capability of an arbitrary user, inherited down the context tree."""
        ...


class InMemoryHost:
    """Host keeping contexts, courses and role assignments in memory."""

    SYSTEM_CONTEXT_ID = 1

    def __init__(self) -> None:
        self._ids = count(2)
        self._contexts: dict[int, ContextInfo] = {
            self.SYSTEM_CONTEXT_ID: ContextInfo(
                id=self.SYSTEM_CONTEXT_ID,
                level=ContextLevel.SYSTEM,
                path=(self.SYSTEM_CONTEXT_ID,),
            )
        }
        self._courses: dict[int, Course] = {}
        self._modules: dict[int, CourseModule] = {}
        self._forum_posts: dict[int, list[int]] = {}
        self._user_contexts: dict[int, int] = {}
        self._admins: set[int] = set()
        self._grants: dict[int, dict[int, set[str]]] = {}  # user id -> context id -> capabilities
        self.available = True

    def _new_context(
        self, level: ContextLevel, parent: ContextInfo, instance_id: int, course_id: int | None = None
    ) -> ContextInfo:
        context_id = next(self._ids)
        context = ContextInfo(
            id=context_id,
            level=level,
            instance_id=instance_id,
            path=(*parent.lineage, context_id),
            course_id=course_id,
        )
        self._contexts[context_id] = context
        return context

    def _check_available(self) -> None:
        if not self.available:
            raise HostError("Host context subsystem is unavailable")

    @property
    def system_context(self) -> ContextInfo:
        return self._contexts[self.SYSTEM_CONTEXT_ID]

    def create_category(self) -> ContextInfo:
        """Create a course category and return its context."""
        return self._new_context(ContextLevel.COURSECAT, self.system_context, instance_id=next(self._ids))

    def create_course(self, category: ContextInfo | None = None, visible: bool = True, name: str = "") -> Course:
        """Create a course, under a category when given."""
        course_id = next(self._ids)
        context = self._new_context(ContextLevel.COURSE, category or self.system_context, course_id, course_id)
        course = Course(id=course_id, context_id=context.id, visible=visible, name=name)
        self._courses[course_id] = course
        return course

    def create_module(
        self,
        course_id: int,
        modname: str,
        visible: bool = True,
        revision: int = 1,
        name: str = "",
    ) -> CourseModule:
        """Add an activity or resource to a course."""
        course = self._courses[course_id]
        module_id = next(self._ids)
        context = self._new_context(
            ContextLevel.MODULE, self._contexts[course.context_id], module_id, course_id
        )
        module = CourseModule(
            id=module_id,
            course_id=course_id,
            modname=modname,
            instance=next(self._ids),
            context_id=context.id,
            visible=visible,
            revision=revision,
            name=name,
        )
        self._modules[module_id] = module
        if modname == "forum":
            self._forum_posts[module_id] = []
        return module

    def add_forum_post(self, module_id: int) -> int:
        """Add a post to a forum and return its id."""
        post_id = next(self._ids)
        self._forum_posts[module_id].append(post_id)
        return post_id

    def create_user(self, is_admin: bool = False) -> int:
        """Create a user with a personal context and return the user id."""
        user_id = next(self._ids)
        context = self._new_context(ContextLevel.USER, self.system_context, user_id)
        self._user_contexts[user_id] = context.id
        if is_admin:
            self._admins.add(user_id)
        return user_id

    def user_context(self, user_id: int) -> ContextInfo:
        return self._contexts[self._user_contexts[user_id]]

    def enrol_user(self, user_id: int, course_id: int, role: str = "student") -> None:
        """Enrol a user in a course with one of the standard roles."""
        course = self._courses[course_id]
        self.grant(user_id, course.context_id, *ROLE_CAPABILITIES[role])

    def grant(self, user_id: int, context_id: int, *capabilities: str) -> None:
        """Grant capabilities to a user in a context."""
        self._grants.setdefault(user_id, {}).setdefault(context_id, set()).update(capabilities)

    def viewer(self, user_id: int) -> Viewer:
        """Build the viewer descriptor of a user."""
        grants = self._grants.get(user_id, {})
        return Viewer(
            id=user_id,
            is_admin=user_id in self._admins,
            capabilities={context_id: frozenset(caps) for context_id, caps in grants.items()},
        )

    def get_context(self, context_id: int) -> ContextInfo | None:
        self._check_available()
        return self._contexts.get(context_id)

    def get_course(self, course_id: int) -> Course | None:
        self._check_available()
        return self._courses.get(course_id)

    def get_course_module(self, module_id: int) -> CourseModule | None:
        self._check_available()
        return self._modules.get(module_id)

    def list_course_modules(self, course_id: int, modname: str | None = None) -> list[CourseModule]:
        self._check_available()
        return [
            m
            for m in self._modules.values()
            if m.course_id == course_id and (modname is None or m.modname == modname)
        ]

    def list_forum_post_ids(self, module_id: int) -> list[int]:
        self._check_available()
        return list(self._forum_posts.get(module_id, []))

    def user_has_capability(self, user_id: int, capability: str, context_id: int) -> bool:
        self._check_available()
        if user_id in self._admins:
            return True
        context = self._contexts.get(context_id)
        if context is None:
            return False
        grants = self._grants.get(user_id, {})
        return any(capability in grants.get(ancestor, ()) for ancestor in context.lineage)
