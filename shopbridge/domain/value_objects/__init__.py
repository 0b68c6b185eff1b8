"""Domain value objects and shared value types."""

from shopbridge.domain.value_objects.core import (
    FileEntry,
    ListOptions,
    ListPage,
    RemoteFile,
    RemoteFileHandle,
    StagedUploadTarget,
    StoredFile,
)

__all__ = [
    "StoredFile",
    "FileEntry",
    "ListOptions",
    "ListPage",
    "StagedUploadTarget",
    "RemoteFileHandle",
    "RemoteFile",
]
