"""Maps files listed on content pages to their canonical storage keys.

Some pages reference files by a path that does not carry the file's real
identity (resource and folder URLs carry a revision where the item id should
be, forum attachments carry the post id). For those pages the relevant files
are enumerated up front and indexed by the relative path their URLs use.
"""

import logging
from collections.abc import Iterable
from typing import assert_never

from allyfilter.config import Settings, get_settings
from allyfilter.errors import FileStoreError, HostError
from allyfilter.models.access import Viewer
from allyfilter.models.files import CourseModule, StoredFile
from allyfilter.models.page import (
    AssignmentIntro,
    CourseOverview,
    Folder,
    ForumDiscussion,
    OtherPage,
    PageContext,
    ResourceListing,
)
from allyfilter.services.file_store import FileStore
from allyfilter.services.host import ContentHost
from allyfilter.services.policy import uploader_is_author

logger = logging.getLogger("allyfilter.path_mapper")

# Relative file path (as it appears after the serving script) -> storage key
PathHashMap = dict[str, str]


def map_key(stored: StoredFile, url_item_id: int | None = None) -> str:
    """Return the relative path under which a file's URL addresses it."""
    item_id = stored.item_id if url_item_id is None else url_item_id
    return f"{stored.context_id}/{stored.component}/{stored.file_area}/{item_id}{stored.file_path}{stored.file_name}"


class PathMapper:
    """Builds the path -> storage key map for one page render."""

    def __init__(self, store: FileStore, host: ContentHost, viewer: Viewer, settings: Settings | None = None) -> None:
        self.store = store
        self.host = host
        self.viewer = viewer
        self.settings = settings or get_settings()

    def build(self, page: PageContext) -> PathHashMap:
        """Build the map for a page, empty when the page lists no files."""
        try:
            match page:
                case AssignmentIntro(module_id=module_id):
                    return self.map_assignment_files(module_id)
                case Folder(module_id=module_id):
                    return self.map_folder_files(module_id)
                case CourseOverview(course_id=course_id) | ResourceListing(course_id=course_id):
                    return self.map_resource_files(course_id)
                case ForumDiscussion(forum_id=forum_id):
                    return self.map_forum_attachment_files(forum_id)
                case OtherPage():
                    logger.debug("No file map for page kind %s", page.kind)
                    return {}
                case _:
                    assert_never(page)
        except (FileStoreError, HostError) as e:
            logger.warning(f"Failed to map files for {page.kind} page: {e}")
            return {}

    def _add_files(
        self,
        path_map: PathHashMap,
        files: Iterable[StoredFile],
        url_item_id: int | None = None,
        images_only: bool = False,
    ) -> None:
        for stored in files:
            if stored.is_directory:
                continue
            if images_only and not (stored.mimetype or "").startswith(self.settings.image_mimetype_prefix):
                continue
            # Student uploads never get decorated, so keep them out of the map
            if not uploader_is_author(stored, self.host, self.settings):
                continue
            path_map[map_key(stored, url_item_id)] = stored.storage_key

    def _module(self, module_id: int, modname: str) -> CourseModule | None:
        module = self.host.get_course_module(module_id)
        if module is None or module.modname != modname:
            logger.debug("No %s module with id %s", modname, module_id)
            return None
        return module

    def map_assignment_files(self, module_id: int) -> PathHashMap:
        """Map the intro attachments of an assignment."""
        module = self._module(module_id, "assign")
        if module is None:
            return {}
        path_map: PathHashMap = {}
        files = self.store.list_area_files(module.context_id, "mod_assign", "introattachment", 0)
        self._add_files(path_map, files)
        return path_map

    def map_folder_files(self, module_id: int) -> PathHashMap:
        """Map the content files of a folder, addressed by folder revision."""
        module = self._module(module_id, "folder")
        if module is None:
            return {}
        path_map: PathHashMap = {}
        files = self.store.list_area_files(module.context_id, "mod_folder", "content", 0)
        self._add_files(path_map, files, url_item_id=module.revision)
        return path_map

    def map_resource_files(self, course_id: int) -> PathHashMap:
        """Map the main file of every resource in a course the viewer can see."""
        # Hidden resources are skipped one by one, visible ones stay mapped for students
        modules = []
        for module in self.host.list_course_modules(course_id, "resource"):
            if not module.visible:
                context = self.host.get_context(module.context_id)
                lineage = context.lineage if context else (module.context_id,)
                if not self.viewer.has_capability(self.settings.view_hidden_activities_capability, lineage):
                    continue
            modules.append(module)

        if not modules:
            return {}

        path_map: PathHashMap = {}
        for module in modules:
            files = [
                f
                for f in self.store.list_area_files(module.context_id, "mod_resource", "content", 0)
                if not f.is_directory
            ]
            if not files:
                continue
            # The main file is the one with the highest sort order
            main_file = sorted(files, key=lambda f: -f.sort_order)[0]
            self._add_files(path_map, [main_file], url_item_id=module.revision)
        return path_map

    def map_forum_attachment_files(self, module_id: int) -> PathHashMap:
        """Map image attachments of every post in a forum."""
        module = self._module(module_id, "forum")
        if module is None:
            return {}
        path_map: PathHashMap = {}
        for post_id in self.host.list_forum_post_ids(module_id):
            files = self.store.list_area_files(module.context_id, "mod_forum", "attachment", post_id)
            self._add_files(path_map, files, images_only=True)
        return path_map


def build_path_map(
    page: PageContext,
    viewer: Viewer,
    store: FileStore,
    host: ContentHost,
    settings: Settings | None = None,
) -> PathHashMap:
    """Build the path -> storage key map for the current page."""
    return PathMapper(store, host, viewer, settings).build(page)
