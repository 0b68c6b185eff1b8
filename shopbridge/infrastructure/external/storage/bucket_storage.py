"""S3-compatible bucket storage (Cloudflare R2, AWS S3, MinIO) with sidecar metadata."""

from __future__ import annotations

import asyncio
from typing import Any
from urllib.parse import quote, unquote

import boto3
from botocore.exceptions import ClientError

from shopbridge.domain.value_objects import FileEntry, ListOptions, ListPage, StoredFile
from shopbridge.domain.value_objects.core import DEFAULT_MIME_TYPE
from shopbridge.shared.utils.datetime import to_timestamp_ms

_MISSING_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


def _is_missing(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") in _MISSING_CODES


def _sidecar(file: StoredFile) -> dict[str, str]:
    # user metadata travels as x-amz-meta-* headers, which must be ASCII
    return {"name": quote(file.name), "type": quote(file.type)}


def _read_sidecar(metadata: dict[str, str] | None) -> dict[str, str]:
    return {k: unquote(v) for k, v in (metadata or {}).items()}


class BucketFileStorage:
    """StorageProtocol over a key/value bucket.

    put stores the content with ContentType and user metadata
    ``{"name", "type"}`` (percent-encoded); get prefers the bucket's
    ContentType over the sidecar type. remove is unconditional: deleting a
    missing key succeeds.

    Uses boto3 (sync) via asyncio.to_thread for the async API.
    """

    def __init__(
        self,
        bucket: str,
        *,
        prefix: str = "",
        region: str = "auto",
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        client: Any = None,
    ) -> None:
        """Initialize the bucket client.

        Args:
            bucket: Bucket name.
            prefix: Optional namespace prepended to every key (e.g. "files/").
            region: Region; R2 uses "auto".
            endpoint_url: Custom endpoint (R2 account endpoint, MinIO).
            access_key: Optional; uses env/IAM if not set.
            secret_key: Optional.
            client: Pre-built boto3 S3 client (tests, shared sessions).
        """
        self.bucket = bucket
        prefix = (prefix or "").lstrip("/")
        if prefix and not prefix.endswith("/"):
            prefix += "/"
        self.prefix = prefix
        if client is None:
            extra = {} if endpoint_url is None else {"endpoint_url": endpoint_url}
            client = boto3.client(
                "s3",
                region_name=region,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                **extra,
            )
        self._client = client

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def _strip(self, object_key: str) -> str:
        return object_key[len(self.prefix):] if object_key.startswith(self.prefix) else object_key

    async def get(self, key: str) -> StoredFile | None:
        def _get() -> StoredFile | None:
            try:
                resp = self._client.get_object(Bucket=self.bucket, Key=self._key(key))
            except ClientError as e:
                if _is_missing(e):
                    return None
                raise
            meta = _read_sidecar(resp.get("Metadata"))
            return StoredFile(
                content=resp["Body"].read(),
                name=meta.get("name") or key,
                type=resp.get("ContentType") or meta.get("type") or DEFAULT_MIME_TYPE,
                last_modified=to_timestamp_ms(resp.get("LastModified")),
            )

        return await asyncio.to_thread(_get)

    async def has(self, key: str) -> bool:
        def _exists() -> bool:
            try:
                self._client.head_object(Bucket=self.bucket, Key=self._key(key))
                return True
            except ClientError as e:
                if _is_missing(e):
                    return False
                raise

        return await asyncio.to_thread(_exists)

    async def list(self, options: ListOptions | None = None) -> ListPage:
        options = options or ListOptions()

        def _list() -> ListPage:
            kwargs: dict[str, Any] = {
                "Bucket": self.bucket,
                "Prefix": self._key(options.prefix or ""),
            }
            if options.cursor:
                kwargs["ContinuationToken"] = options.cursor
            if options.limit:
                kwargs["MaxKeys"] = options.limit
            resp = self._client.list_objects_v2(**kwargs)

            files = []
            for obj in resp.get("Contents") or []:
                key = self._strip(obj["Key"])
                if not options.include_metadata:
                    files.append(FileEntry(key=key))
                    continue
                head = self._client.head_object(Bucket=self.bucket, Key=obj["Key"])
                meta = _read_sidecar(head.get("Metadata"))
                files.append(
                    FileEntry(
                        key=key,
                        name=meta.get("name") or key,
                        size=obj.get("Size"),
                        type=head.get("ContentType") or meta.get("type"),
                        last_modified=to_timestamp_ms(obj.get("LastModified")),
                    )
                )
            cursor = resp.get("NextContinuationToken") if resp.get("IsTruncated") else None
            return ListPage(files=files, cursor=cursor)

        return await asyncio.to_thread(_list)

    async def put(self, key: str, file: StoredFile) -> StoredFile:
        def _put() -> None:
            self._client.put_object(
                Bucket=self.bucket,
                Key=self._key(key),
                Body=file.content,
                ContentType=file.type,
                Metadata=_sidecar(file),
            )

        await asyncio.to_thread(_put)
        return file

    async def set(self, key: str, file: StoredFile) -> None:
        await self.put(key, file)

    async def remove(self, key: str) -> None:
        await asyncio.to_thread(
            self._client.delete_object, Bucket=self.bucket, Key=self._key(key)
        )
