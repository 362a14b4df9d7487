"""Decorates img and a elements that reference hosted files."""

import logging
from dataclasses import dataclass

from allyfilter.config import Settings, get_settings
from allyfilter.errors import FileStoreError, HostError
from allyfilter.models.access import Access, SkipReason, Viewer
from allyfilter.models.files import CanonicalFileRef, ContextLevel, StoredFile
from allyfilter.models.page import PageContext
from allyfilter.services.file_store import FileStore
from allyfilter.services.host import ContentHost
from allyfilter.services.path_mapper import PathHashMap, build_path_map
from allyfilter.services.policy import anchor_decision, evaluate_access, image_decision, uploader_is_author
from allyfilter.services.tag_scanner import replace_tag_occurrence, scan_tags
from allyfilter.services.templates import WrapperRenderer, get_wrapper_renderer
from allyfilter.services.url_decomposer import decompose_url, is_local_file_url, relative_file_path

logger = logging.getLogger("allyfilter.rewriter")


@dataclass
class RequestContext:
    """Everything the filter reads about the request being rendered."""

    viewer: Viewer
    page: PageContext
    store: FileStore
    host: ContentHost


class AllyFilter:
    """Filter adding accessibility wrappers to file images and links."""

    def __init__(
        self,
        request: RequestContext,
        settings: Settings | None = None,
        renderer: WrapperRenderer | None = None,
    ) -> None:
        self.request = request
        self.settings = settings or get_settings()
        self.renderer = renderer or get_wrapper_renderer()
        self.processed_files: dict[str, str] = {}  # storage key -> URL

    def rewrite(self, html: str) -> str:
        """
        Wrap every img and a element that references an eligible hosted file.

        Args:
            html: HTML fragment to filter

        Returns:
            The fragment with qualifying elements wrapped, everything else untouched
        """
        self.processed_files = {}
        lowered = html.lower()
        if "<img" not in lowered and "<a" not in lowered:
            return html  # Fast path: nothing to decorate

        candidates = scan_tags(html)
        images = [url for url in candidates.images if is_local_file_url(url, self.settings)]
        anchors = [url for url in candidates.anchors if is_local_file_url(url, self.settings)]
        if not images and not anchors:
            return html

        path_map = build_path_map(
            self.request.page,
            self.request.viewer,
            self.request.store,
            self.request.host,
            self.settings,
        )

        for url in images:
            html = self._rewrite_candidate(html, url, "img", path_map)
        for url in anchors:
            html = self._rewrite_candidate(html, url, "a", path_map)

        return html

    def _rewrite_candidate(self, html: str, url: str, tag: str, path_map: PathHashMap) -> str:
        try:
            resolved = self.resolve(url, path_map)
            if resolved is None:
                self._skip(url, SkipReason.FILE_NOT_FOUND)
                return html
            stored, ref = resolved
            access = evaluate_access(
                ref,
                self.request.viewer,
                uploader_is_author(stored, self.request.host, self.settings),
                self.settings,
            )
        except (FileStoreError, HostError) as e:
            logger.warning(f"Failed to resolve {url}: {e}")
            return html

        if access == Access.NONE:
            self._skip(url, SkipReason.POLICY_SUPPRESSED)
            return html

        if tag == "img":
            decision = image_decision(access)
            html, count = replace_tag_occurrence(
                html,
                "img",
                "src",
                url,
                lambda element: self.renderer.render_image(element, ref.storage_key, url, decision),
            )
        else:
            anchor = anchor_decision(access)
            html, count = replace_tag_occurrence(
                html,
                "a",
                "href",
                url,
                lambda element: self.renderer.render_anchor(element, ref.storage_key, url, anchor),
            )

        if count:
            self.processed_files[ref.storage_key] = url
            logger.debug("Wrapped %d <%s> occurrence(s) of %s", count, tag, url)
        return html

    def _skip(self, url: str, reason: SkipReason) -> None:
        logger.debug("Leaving %s unchanged: %s", url, reason.value)

    def resolve(self, url: str, path_map: PathHashMap) -> tuple[StoredFile, CanonicalFileRef] | None:
        """
        Resolve a candidate URL to its stored file.

        The file identity parsed from the URL is looked up first; when that
        misses, the page's path map is consulted with the URL's relative path.
        """
        store = self.request.store
        slash_arguments = self.settings.slash_arguments

        stored: StoredFile | None = None
        identity = decompose_url(url, slash_arguments, self.settings)
        if identity is not None:
            stored = store.get_file(identity)
        else:
            self._skip(url, SkipReason.URL_NOT_RECOGNIZED)

        if stored is None:
            path = relative_file_path(url, slash_arguments, self.settings)
            storage_key = path_map.get(path) if path else None
            if storage_key is not None:
                stored = store.get_file_by_key(storage_key)

        if stored is None or stored.is_directory:
            return None

        ref = self.canonical_ref(stored)
        if ref is None:
            return None
        return stored, ref

    def canonical_ref(self, stored: StoredFile) -> CanonicalFileRef | None:
        """Resolve a stored file against its context and course."""
        host = self.request.host
        context = host.get_context(stored.context_id)
        if context is None:
            return None

        course_visible = True
        if context.level in (ContextLevel.COURSE, ContextLevel.MODULE, ContextLevel.BLOCK) and context.course_id:
            course = host.get_course(context.course_id)
            course_visible = course.visible if course else True

        return CanonicalFileRef(
            storage_key=stored.storage_key,
            context_id=stored.context_id,
            context_level=context.level,
            component=stored.component,
            file_area=stored.file_area,
            uploader_user_id=stored.uploader_user_id,
            course_visible=course_visible,
            context_lineage=context.lineage,
        )

    def footer_html(self) -> str:
        """Render the client configuration for the files decorated by the last rewrite."""
        return self.renderer.render_footer(
            self.processed_files,
            {
                "wwwroot": self.settings.wwwroot,
                "feedback": self._viewer_sees_feedback(),
            },
        )

    def _viewer_sees_feedback(self) -> bool:
        viewer = self.request.viewer
        if viewer.is_admin:
            return True
        return any(self.settings.feedback_capability in caps for caps in viewer.capabilities.values())


def rewrite(html: str, request: RequestContext, settings: Settings | None = None) -> str:
    """Filter an HTML fragment for one request."""
    return AllyFilter(request, settings).rewrite(html)
