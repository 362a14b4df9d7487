"""Parsing of host file-serving URLs into file identities."""

from urllib.parse import quote, unquote

from allyfilter.config import Settings, get_settings
from allyfilter.models.files import FileIdentity

PATH_MARKER = "/"
QUERY_MARKER = "?file="

# Database ids fit in a signed 64-bit integer
_MAX_ID_DIGITS = 18


def _markers(slash_arguments: bool) -> tuple[str, str]:
    """Return the serving markers, active dialect first."""
    if slash_arguments:
        return PATH_MARKER, QUERY_MARKER
    return QUERY_MARKER, PATH_MARKER


def _is_id(segment: str) -> bool:
    return segment.isascii() and segment.isdecimal() and len(segment) <= _MAX_ID_DIGITS


def _strip_tail(rest: str, marker: str) -> str:
    """Drop whatever follows the file path in the URL."""
    if marker == QUERY_MARKER:
        for stop in ("&", "#"):
            rest = rest.split(stop, 1)[0]
        if "/" not in rest and "%2F" in rest.upper():
            rest = unquote(rest)
        return rest
    for stop in ("?", "#"):
        rest = rest.split(stop, 1)[0]
    return rest


def _file_path_after_script(url: str, slash_arguments: bool, settings: Settings) -> str | None:
    """Return the raw (still encoded) path following the serving script."""
    script = settings.file_script
    for marker in _markers(slash_arguments):
        needle = f"{script}{marker}"
        index = url.find(needle)
        if index == -1:
            continue
        # The script name must be a whole path segment
        if index > 0 and url[index - 1] != "/":
            continue
        rest = _strip_tail(url[index + len(needle) :], marker)
        if marker == QUERY_MARKER:
            if not rest.startswith("/"):
                return None
            rest = rest[1:]
        return rest or None
    return None


def relative_file_path(url: str, slash_arguments: bool, settings: Settings | None = None) -> str | None:
    """
    Return the decoded file path of a file URL, relative to the serving script.

    The result ("{context}/{component}/{area}/{item}{path}{name}") is the key
    under which page-level file maps index their files.
    """
    settings = settings or get_settings()
    rest = _file_path_after_script(url, slash_arguments, settings)
    if rest is None:
        return None
    return "/".join(unquote(segment) for segment in rest.split("/"))


def decompose_url(url: str, slash_arguments: bool, settings: Settings | None = None) -> FileIdentity | None:
    """
    Parse a file URL into its file identity.

    Args:
        url: Candidate URL taken from a src or href attribute
        slash_arguments: True when the host serves files with path-style URLs,
            False for the ?file= query-parameter style
        settings: Filter settings (component positional rules)

    Returns:
        FileIdentity if the URL is a file URL, None otherwise
    """
    settings = settings or get_settings()
    rest = _file_path_after_script(url, slash_arguments, settings)
    if rest is None:
        return None

    segments = rest.split("/")
    if len(segments) < 4:
        return None

    context_id, component, file_area = segments[0], unquote(segments[1]), unquote(segments[2])
    if not _is_id(context_id) or not component or not file_area:
        return None

    remaining = segments[3:]
    item_id = "0"
    if component in settings.double_id_components_list:
        if len(remaining) < 4:
            return None
        item_id = remaining[2]
        remaining = remaining[3:]
    elif component in settings.item_id_components_list:
        if len(remaining) < 2:
            return None
        item_id = remaining[0]
        remaining = remaining[1:]

    if not _is_id(item_id):
        return None

    file_name = unquote(remaining[-1])
    if not file_name:
        return None

    directories = [unquote(segment) for segment in remaining[:-1] if segment]
    file_path = "/" + "/".join(directories) + "/" if directories else "/"

    return FileIdentity(
        context_id=int(context_id),
        component=component,
        file_area=file_area,
        item_id=int(item_id),
        file_path=file_path,
        file_name=file_name,
    )


def build_file_url(
    identity: FileIdentity,
    slash_arguments: bool,
    settings: Settings | None = None,
    include_item_id: bool = False,
    url_item_id: int | None = None,
) -> str:
    """
    Build the serving URL of a file under either dialect.

    Args:
        identity: File to address
        slash_arguments: Path-style (True) or query-parameter style (False)
        settings: Filter settings (wwwroot and serving script)
        include_item_id: Emit the item id segment after the file area
        url_item_id: Value to emit in place of the item id (e.g. a revision)
    """
    settings = settings or get_settings()
    segments = [str(identity.context_id), identity.component, identity.file_area]
    if include_item_id or url_item_id is not None:
        segments.append(str(identity.item_id if url_item_id is None else url_item_id))
    segments.extend(part for part in identity.file_path.split("/") if part)
    segments.append(identity.file_name)

    encoded = "/".join(quote(segment, safe="()~:!*'@,;") for segment in segments)
    marker = PATH_MARKER if slash_arguments else f"{QUERY_MARKER}/"
    return f"{settings.file_base_url}{marker}{encoded}"


def is_local_file_url(url: str, settings: Settings | None = None) -> bool:
    """Check if a URL points at the host's own file-serving script."""
    settings = settings or get_settings()
    return url.startswith(settings.file_base_url)
