"""File store interface and an in-memory implementation."""

import hashlib
import mimetypes
from typing import Protocol

from allyfilter.errors import FileStoreError
from allyfilter.models.files import FileIdentity, StoredFile


def pathname_hash(identity: FileIdentity) -> str:
    """Return the canonical storage key of a logical file path."""
    pathname = (
        f"/{identity.context_id}/{identity.component}/{identity.file_area}"
        f"/{identity.item_id}{identity.file_path}{identity.file_name}"
    )
    return hashlib.sha1(pathname.encode("utf-8")).hexdigest()


class FileStore(Protocol):
    """Read-only view of the host's file store used by the filter."""

    def get_file(self, identity: FileIdentity) -> StoredFile | None:
        """Return the file stored at a logical address, None if absent."""
        ...

    def get_file_by_key(self, storage_key: str) -> StoredFile | None:
        """Return the file stored under a canonical key, None if absent."""
        ...

    def list_area_files(
        self,
        context_id: int,
        component: str,
        file_area: str,
        item_id: int | None = None,
    ) -> list[StoredFile]:
        """List files of an area, all item ids when item_id is None."""
        ...


class InMemoryFileStore:
    """File store keeping records in a dict, for tests and embedding."""

    def __init__(self) -> None:
        self._files: dict[str, StoredFile] = {}
        self.available = True

    def _check_available(self) -> None:
        if not self.available:
            raise FileStoreError("File store is unavailable")

    def create_file(
        self,
        context_id: int,
        component: str,
        file_area: str,
        file_name: str,
        item_id: int = 0,
        file_path: str = "/",
        uploader_user_id: int | None = None,
        mimetype: str | None = None,
        sort_order: int = 0,
    ) -> StoredFile:
        """Add a file record and return it."""
        identity = FileIdentity(
            context_id=context_id,
            component=component,
            file_area=file_area,
            item_id=item_id,
            file_path=file_path,
            file_name=file_name,
        )
        if mimetype is None:
            mimetype, _ = mimetypes.guess_type(file_name)
        stored = StoredFile(
            storage_key=pathname_hash(identity),
            context_id=context_id,
            component=component,
            file_area=file_area,
            item_id=item_id,
            file_path=file_path,
            file_name=file_name,
            mimetype=mimetype,
            uploader_user_id=uploader_user_id,
            sort_order=sort_order,
        )
        self._files[stored.storage_key] = stored
        return stored

    def delete_file(self, storage_key: str) -> bool:
        """Delete a file record. Returns True if it existed."""
        return self._files.pop(storage_key, None) is not None

    def get_file(self, identity: FileIdentity) -> StoredFile | None:
        self._check_available()
        return self._files.get(pathname_hash(identity))

    def get_file_by_key(self, storage_key: str) -> StoredFile | None:
        self._check_available()
        return self._files.get(storage_key)

    def list_area_files(
        self,
        context_id: int,
        component: str,
        file_area: str,
        item_id: int | None = None,
    ) -> list[StoredFile]:
        self._check_available()
        files = [
            f
            for f in self._files.values()
            if f.context_id == context_id
            and f.component == component
            and f.file_area == file_area
            and (item_id is None or f.item_id == item_id)
        ]
        files.sort(key=lambda f: (f.item_id, f.file_path, f.file_name))
        return files

    @property
    def size(self) -> int:
        """Return the number of stored records."""
        return len(self._files)
