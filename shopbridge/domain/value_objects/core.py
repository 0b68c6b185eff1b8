"""Domain value objects for shopbridge.

Value objects are immutable types with no identity. StoredFile is the
binary handed to and returned from storage backends; the staged upload
types exist only inside a single PlatformFileStorage.put call.
"""

from dataclasses import dataclass, field
from typing import Any

from shopbridge.shared.enums import FileStatus

DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class StoredFile:
    """File content plus the metadata storage backends keep with it.

    ``last_modified`` is epoch milliseconds. ``url`` is the locator URL
    when the backend produced one (platform uploads).
    """

    content: bytes
    name: str
    type: str = DEFAULT_MIME_TYPE
    last_modified: int | None = None
    url: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class FileEntry:
    """One entry of a listing. Only ``key`` is set unless metadata was requested."""

    key: str
    name: str | None = None
    size: int | None = None
    type: str | None = None
    last_modified: int | None = None


@dataclass(frozen=True)
class ListOptions:
    """Listing filter and pagination.

    Attributes:
        prefix: Only keys starting with this value.
        cursor: Opaque cursor from a previous ListPage, passed back verbatim.
        limit: Page size; backend default when None.
        include_metadata: Populate name, size, type and last_modified.
    """

    prefix: str | None = None
    cursor: str | None = None
    limit: int | None = None
    include_metadata: bool = False


@dataclass(frozen=True)
class ListPage:
    """A page of entries. ``cursor`` is None when there are no further pages."""

    files: list[FileEntry] = field(default_factory=list)
    cursor: str | None = None


@dataclass(frozen=True)
class StagedUploadTarget:
    """One-time upload target returned by stagedUploadsCreate.

    ``parameters`` are (name, value) pairs that must be sent verbatim as
    form fields; ``resource_url`` links the transfer to fileCreate.
    """

    url: str
    resource_url: str
    parameters: tuple[tuple[str, str], ...] = ()

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> "StagedUploadTarget":
        return cls(
            url=node["url"],
            resource_url=node["resourceUrl"],
            parameters=tuple(
                (p["name"], p["value"]) for p in node.get("parameters") or []
            ),
        )


@dataclass(frozen=True)
class RemoteFileHandle:
    """Processing state of a linked remote file."""

    id: str
    status: FileStatus | None = None
    url: str | None = None
    errors: tuple[Any, ...] = ()

    @property
    def is_ready(self) -> bool:
        """READY and resolvable; READY without a URL keeps polling."""
        return self.status is FileStatus.READY and bool(self.url)

    @property
    def is_failed(self) -> bool:
        return self.status is FileStatus.FAILED


@dataclass(frozen=True)
class RemoteFile:
    """A key resolved to a platform file by the filename lookup."""

    id: str
    url: str | None
    mime_type: str | None = None
    status: FileStatus | None = None

    @property
    def is_ready(self) -> bool:
        return self.status is FileStatus.READY and bool(self.url)
