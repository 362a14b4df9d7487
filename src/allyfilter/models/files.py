"""Pydantic models for stored files, contexts and course structure."""

from enum import Enum

from pydantic import BaseModel


class ContextLevel(str, Enum):
    """Scopes of the host's context hierarchy."""

    SYSTEM = "system"
    USER = "user"
    COURSECAT = "coursecat"
    COURSE = "course"
    MODULE = "module"
    BLOCK = "block"


class ContextInfo(BaseModel):
    """A node of the host's context tree."""

    id: int
    level: ContextLevel
    instance_id: int = 0
    path: tuple[int, ...] = ()  # Ancestor context ids, root first, ending with id
    course_id: int | None = None  # Enclosing course, if any

    model_config = {"frozen": True}

    @property
    def lineage(self) -> tuple[int, ...]:
        """Return the context ids to check for inherited capabilities."""
        return self.path or (self.id,)


class FileIdentity(BaseModel):
    """Logical address of one stored file, as parsed from a file URL."""

    context_id: int
    component: str
    file_area: str
    item_id: int = 0
    file_path: str = "/"
    file_name: str

    model_config = {"frozen": True}

    def as_tuple(self) -> tuple[int, str, str, int, str]:
        """Return (context_id, component, file_area, item_id, file_name)."""
        return (self.context_id, self.component, self.file_area, self.item_id, self.file_name)


class StoredFile(BaseModel):
    """A file record owned by the host's file store."""

    storage_key: str
    context_id: int
    component: str
    file_area: str
    item_id: int = 0
    file_path: str = "/"
    file_name: str
    mimetype: str | None = None
    uploader_user_id: int | None = None
    sort_order: int = 0

    @property
    def is_directory(self) -> bool:
        """Directory records carry "." as their file name."""
        return self.file_name == "."

    @property
    def identity(self) -> FileIdentity:
        """Return the logical address of this file."""
        return FileIdentity(
            context_id=self.context_id,
            component=self.component,
            file_area=self.file_area,
            item_id=self.item_id,
            file_path=self.file_path,
            file_name=self.file_name,
        )


class CanonicalFileRef(BaseModel):
    """A stored file resolved against its context, ready for policy checks."""

    storage_key: str
    context_id: int
    context_level: ContextLevel
    component: str
    file_area: str
    uploader_user_id: int | None = None
    course_visible: bool = True
    context_lineage: tuple[int, ...] = ()


class Course(BaseModel):
    """A course as seen by the filter."""

    id: int
    context_id: int
    visible: bool = True
    name: str = ""


class CourseModule(BaseModel):
    """An activity or resource instance placed on a course page."""

    id: int  # Course module id, the "id" page parameter
    course_id: int
    modname: str
    instance: int = 0
    context_id: int
    visible: bool = True
    revision: int = 1  # Appears in resource and folder file URLs in place of the item id
    name: str = ""
