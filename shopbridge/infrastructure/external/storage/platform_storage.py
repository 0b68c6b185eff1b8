"""File storage on the platform Files API (GraphQL).

put() runs the staged upload pipeline:

    STAGING       stagedUploadsCreate -> one-time target (url, parameters, resourceUrl)
    TRANSFERRING  multipart POST of the bytes to the target url
    LINKING       fileCreate(originalSource=resourceUrl, duplicateResolutionMode=REPLACE)
    POLLING       node(id) every poll_interval seconds until READY with a url, or FAILED

Each step raises as soon as it sees a failure: UserError for userErrors /
fileErrors, ServerError for GraphQL envelope or HTTP failures,
RequestError for a rejected or unreachable transfer, ProcessingError
for FAILED.

Polling has no attempt limit or timeout of its own. Wrap calls in
asyncio.timeout() (or cancel the task) to bound them; a cancelled upload
is left in whatever processing state the platform reached.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any
from urllib.parse import urlsplit

import httpx

from shopbridge.domain.exceptions import (
    FileNotFoundException,
    ProcessingError,
    RequestError,
    ServerError,
    UserError,
)
from shopbridge.domain.value_objects import (
    FileEntry,
    ListOptions,
    ListPage,
    RemoteFile,
    RemoteFileHandle,
    StagedUploadTarget,
    StoredFile,
)
from shopbridge.domain.value_objects.core import DEFAULT_MIME_TYPE
from shopbridge.infrastructure.http.fetcher import RequestOptions, ResilientClient
from shopbridge.infrastructure.platform.client import GraphQLResponse, PlatformClient
from shopbridge.shared.enums import FileStatus
from shopbridge.shared.logging import get_logger
from shopbridge.shared.utils.datetime import parse_iso_ms

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 10

_FILE_ERRORS = "fileErrors { code details message }"

LIST_QUERY = """
query FileStorageList($after: String, $first: Int, $query: String) {
  files(after: $after, first: $first, query: $query) {
    nodes {
      ... on GenericFile { fileStatus id mimeType originalFileSize updatedAt url }
      ... on MediaImage { fileStatus id mimeType originalSource { fileSize url } updatedAt }
    }
    pageInfo { endCursor hasNextPage }
  }
}
"""

LOOKUP_QUERY = """
query FileStorageLookup($query: String!) {
  files(first: 1, query: $query) {
    nodes {
      ... on GenericFile { fileStatus id mimeType url }
      ... on MediaImage { fileStatus id mimeType originalSource { url } }
    }
  }
}
"""

STAGE_MUTATION = """
mutation FileStorageStage($input: [StagedUploadInput!]!) {
  stagedUploadsCreate(input: $input) {
    stagedTargets { parameters { name value } resourceUrl url }
    userErrors { field message }
  }
}
"""

LINK_MUTATION = f"""
mutation FileStorageLink($files: [FileCreateInput!]!) {{
  fileCreate(files: $files) {{
    files {{
      {_FILE_ERRORS}
      ... on GenericFile {{ id }}
      ... on MediaImage {{ id }}
    }}
    userErrors {{ code field message }}
  }}
}}
"""

STATUS_QUERY = f"""
query FileStorageStatus($id: ID!) {{
  node(id: $id) {{
    ... on GenericFile {{ {_FILE_ERRORS} fileStatus url }}
    ... on MediaImage {{ {_FILE_ERRORS} fileStatus originalSource {{ url }} }}
  }}
}}
"""

DELETE_MUTATION = """
mutation FileStorageRemove($fileIds: [ID!]!) {
  fileDelete(fileIds: $fileIds) {
    deletedFileIds
    userErrors { code field message }
  }
}
"""


def content_category(mime_type: str) -> str:
    """Map a MIME type to the platform resource / content type enum."""
    if mime_type.startswith("image/"):
        return "IMAGE"
    if mime_type.startswith("video/"):
        return "VIDEO"
    return "FILE"


def _node_url(node: dict[str, Any]) -> str | None:
    return (node.get("originalSource") or {}).get("url") or node.get("url")


def _file_status(node: dict[str, Any]) -> FileStatus | None:
    raw = node.get("fileStatus")
    return FileStatus(raw) if raw in FileStatus.values() else None


def _basename(url: str) -> str:
    return urlsplit(url).path.rsplit("/", 1)[-1]


def _raise_for_envelope(response: GraphQLResponse, step: str) -> None:
    if response.errors:
        raise ServerError(
            f"{step} server error",
            status=response.status if response.status >= 400 else None,
            errors=response.errors,
        )


class PlatformFileStorage:
    """StorageProtocol over the platform Files API.

    Keys are platform filenames. get/has/remove resolve a key with one
    ``files(first: 1, query: "filename:<key>")`` lookup; list returns the
    locator URL of each file as its key. A file becomes visible only once
    its fileStatus is READY with a URL; until then get/has/remove treat it
    as absent and list skips it.
    """

    def __init__(
        self,
        client: PlatformClient,
        *,
        uploader: ResilientClient | None = None,
        poll_interval: float = 0.75,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize the adapter.

        Args:
            client: GraphQL client for the shop.
            uploader: Client for staged transfers and downloads; defaults to
                the GraphQL client's own ResilientClient.
            poll_interval: Seconds between processing status polls.
            sleep: Awaitable sleep, injectable for tests.
        """
        self._client = client
        self._uploader = uploader if uploader is not None else client.fetcher
        self._poll_interval = poll_interval
        self._sleep = sleep

    async def get(self, key: str) -> StoredFile | None:
        remote = await self._lookup(key)
        if remote is None:
            return None

        try:
            response = await self._uploader.send(remote.url)
        except httpx.TransportError as e:
            raise RequestError(
                f"File download failed: {e}", details={"key": key}
            ) from e
        if not response.is_success:
            raise RequestError(
                response.reason_phrase or "File download failed",
                status=response.status_code,
                details={"key": key},
            )
        return StoredFile(
            content=response.content,
            name=_basename(remote.url),
            type=remote.mime_type
            or response.headers.get("content-type")
            or DEFAULT_MIME_TYPE,
            url=remote.url,
        )

    async def has(self, key: str) -> bool:
        return await self._lookup(key) is not None

    async def list(self, options: ListOptions | None = None) -> ListPage:
        options = options or ListOptions()
        response = await self._client.request(
            LIST_QUERY,
            {
                "after": options.cursor,
                "first": options.limit or DEFAULT_PAGE_SIZE,
                "query": f"filename:{options.prefix}*" if options.prefix else None,
            },
            "FileStorageList",
        )
        _raise_for_envelope(response, "File list")

        files_data = (response.data or {}).get("files") or {}
        page_info = files_data.get("pageInfo") or {}
        cursor = page_info.get("endCursor") if page_info.get("hasNextPage") else None

        entries: list[FileEntry] = []
        for node in files_data.get("nodes") or []:
            url = _node_url(node)
            if not url or _file_status(node) is not FileStatus.READY:
                continue
            if not options.include_metadata:
                entries.append(FileEntry(key=url))
                continue
            source = node.get("originalSource") or {}
            size = source.get("fileSize") or node.get("originalFileSize")
            entries.append(
                FileEntry(
                    key=url,
                    name=_basename(url),
                    size=int(size) if size is not None else None,
                    type=node.get("mimeType"),
                    last_modified=parse_iso_ms(node.get("updatedAt")),
                )
            )
        return ListPage(files=entries, cursor=cursor)

    async def put(self, key: str, file: StoredFile) -> StoredFile:
        """Upload ``file`` as ``key`` and return it with the locator URL set."""
        url = await self.upload(key, file)
        return StoredFile(
            content=file.content,
            name=file.name,
            type=file.type,
            last_modified=file.last_modified,
            url=url,
        )

    async def set(self, key: str, file: StoredFile) -> None:
        await self.put(key, file)

    async def remove(self, key: str) -> None:
        remote = await self._lookup(key)
        if remote is None:
            raise FileNotFoundException(key)

        response = await self._client.request(
            DELETE_MUTATION, {"fileIds": [remote.id]}, "FileStorageRemove"
        )
        _raise_for_envelope(response, "File delete")
        user_errors = ((response.data or {}).get("fileDelete") or {}).get("userErrors")
        if user_errors:
            raise UserError("File delete user error", errors=user_errors)

    async def upload(self, key: str, file: StoredFile) -> str:
        """Run the staged upload pipeline and return the locator URL."""
        target = await self._stage(key, file)
        logger.debug("Staged %s at %s", key, target.url)
        await self._transfer(key, file, target)
        logger.debug("Transferred %s (%d bytes)", key, file.size)
        handle = await self._link(key, file, target)
        logger.debug("Linked %s as %s", key, handle.id)
        return await self._poll(handle)

    async def _stage(self, key: str, file: StoredFile) -> StagedUploadTarget:
        response = await self._client.request(
            STAGE_MUTATION,
            {
                "input": [
                    {
                        "filename": key,
                        "fileSize": str(file.size),
                        "httpMethod": "POST",
                        "mimeType": file.type,
                        "resource": content_category(file.type),
                    }
                ]
            },
            "FileStorageStage",
        )
        _raise_for_envelope(response, "File upload")
        payload = (response.data or {}).get("stagedUploadsCreate") or {}
        if payload.get("userErrors"):
            raise UserError("File upload user error", errors=payload["userErrors"])
        targets = payload.get("stagedTargets") or []
        if not targets:
            raise ServerError("File upload server error: no staged target returned")
        return StagedUploadTarget.from_node(targets[0])

    async def _transfer(self, key: str, file: StoredFile, target: StagedUploadTarget) -> None:
        try:
            response = await self._uploader.send(
                target.url,
                RequestOptions(
                    method="POST",
                    data=dict(target.parameters),
                    files={"file": (key, file.content, file.type)},
                ),
            )
        except httpx.TransportError as e:
            raise RequestError(
                f"File transfer failed: {e}", details={"key": key}
            ) from e
        if not response.is_success:
            raise RequestError(
                response.reason_phrase or "File transfer failed",
                status=response.status_code,
                details={"key": key},
            )

    async def _link(self, key: str, file: StoredFile, target: StagedUploadTarget) -> RemoteFileHandle:
        response = await self._client.request(
            LINK_MUTATION,
            {
                "files": [
                    {
                        "contentType": content_category(file.type),
                        "duplicateResolutionMode": "REPLACE",
                        "filename": key,
                        "originalSource": target.resource_url,
                    }
                ]
            },
            "FileStorageLink",
        )
        _raise_for_envelope(response, "File linking")
        payload = (response.data or {}).get("fileCreate") or {}
        if payload.get("userErrors"):
            raise UserError("File linking user error", errors=payload["userErrors"])
        created = (payload.get("files") or [{}])[0] or {}
        if created.get("fileErrors"):
            raise UserError("File linking file error", errors=created["fileErrors"])
        if not created.get("id"):
            raise ServerError("File linking server error: no file id returned")
        return RemoteFileHandle(id=created["id"])

    async def _poll(self, handle: RemoteFileHandle) -> str:
        while True:
            handle = await self._status(handle.id)
            if handle.is_failed:
                raise ProcessingError("File upload failed", errors=list(handle.errors))
            if handle.errors:
                raise UserError("File processing user error", errors=list(handle.errors))
            if handle.is_ready:
                return handle.url  # type: ignore[return-value]
            logger.debug("File %s is %s; polling again", handle.id, handle.status)
            await self._sleep(self._poll_interval)

    async def _status(self, file_id: str) -> RemoteFileHandle:
        response = await self._client.request(STATUS_QUERY, {"id": file_id}, "FileStorageStatus")
        _raise_for_envelope(response, "File processing")
        node = (response.data or {}).get("node") or {}
        return RemoteFileHandle(
            id=file_id,
            status=_file_status(node),
            url=_node_url(node),
            errors=tuple(node.get("fileErrors") or ()),
        )

    async def _lookup(self, key: str) -> RemoteFile | None:
        """Resolve ``key`` to a READY file with a locator URL, else None."""
        response = await self._client.request(
            LOOKUP_QUERY, {"query": f"filename:{key}"}, "FileStorageLookup"
        )
        _raise_for_envelope(response, "File lookup")
        nodes = ((response.data or {}).get("files") or {}).get("nodes") or []
        if not nodes or not nodes[0].get("id"):
            return None
        node = nodes[0]
        remote = RemoteFile(
            id=node["id"],
            url=_node_url(node),
            mime_type=node.get("mimeType"),
            status=_file_status(node),
        )
        # uploads still processing are not visible yet
        return remote if remote.is_ready else None
