from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

import boto3

from .errors import EmptyCatalog

logger = logging.getLogger(__name__)

ROOT_PREFIX = ""
LIST_PAGE_SIZE = 1000


@dataclass(frozen=True)
class ListingResult:
    entries: tuple[str, ...]
    files: frozenset[str] = field(default_factory=frozenset)
    folders: frozenset[str] = field(default_factory=frozenset)

    def is_file(self, value: str) -> bool:
        return value in self.files

    def is_folder(self, value: str) -> bool:
        return value in self.folders


def listing_prefix(prefix: Optional[str]) -> str:
    if not prefix:
        return ROOT_PREFIX
    base = prefix.lstrip("/")
    if base and not base.endswith("/"):
        base = f"{base}/"
    return base


class S3Service:
    """Lists buckets, and the files and folders one level below a prefix."""

    def __init__(
        self, profile: Optional[str] = None, region: Optional[str] = None
    ) -> None:
        self.profile = None if profile == "default" else profile
        self._region = region
        self._clients: dict[str, object] = {}

    def _profile_key(self, profile: Optional[str]) -> str:
        return profile or "__default__"

    def _client(self, profile: Optional[str]):
        key = self._profile_key(profile)
        if key in self._clients:
            return self._clients[key]
        if profile is None:
            session = boto3.session.Session()
        else:
            session = boto3.session.Session(profile_name=profile)
        if self._region:
            client = session.client("s3", region_name=self._region)
        else:
            client = session.client("s3")
        self._clients[key] = client
        return client

    async def fetch_listing(
        self, bucket: Optional[str] = None, prefix: Optional[str] = None
    ) -> ListingResult:
        if not bucket:
            names = await asyncio.to_thread(self._list_buckets, self.profile)
            if not names:
                raise EmptyCatalog(
                    "There are no buckets available in the current account."
                )
            logger.debug("Listed %d buckets", len(names))
            return ListingResult(entries=tuple(sorted(names)))
        folders, files = await asyncio.to_thread(
            self._list_folders_and_files, self.profile, bucket, listing_prefix(prefix)
        )
        logger.debug(
            "Listed s3://%s/%s: %d folders, %d files",
            bucket,
            listing_prefix(prefix),
            len(folders),
            len(files),
        )
        return ListingResult(
            entries=tuple(files + folders),
            files=frozenset(files),
            folders=frozenset(folders),
        )

    def _list_buckets(self, profile: Optional[str]) -> list[str]:
        client = self._client(profile)
        response = client.list_buckets()
        return [bucket["Name"] for bucket in response.get("Buckets", [])]

    def _list_folders_and_files(
        self, profile: Optional[str], bucket: str, prefix: str
    ) -> tuple[list[str], list[str]]:
        client = self._client(profile)
        folders: list[str] = []
        files: list[str] = []
        continuation: Optional[str] = None
        while True:
            kwargs = {
                "Bucket": bucket,
                "Delimiter": "/",
                "Prefix": prefix,
                "MaxKeys": LIST_PAGE_SIZE,
            }
            if continuation:
                kwargs["ContinuationToken"] = continuation
            response = client.list_objects_v2(**kwargs)
            for entry in response.get("CommonPrefixes", []):
                value = entry.get("Prefix")
                if value:
                    folders.append(value)
            for entry in response.get("Contents", []):
                key = entry.get("Key")
                if not key:
                    continue
                if key.endswith("/"):
                    continue
                if prefix and key == prefix:
                    continue
                files.append(key)
            continuation = response.get("NextContinuationToken")
            if not response.get("IsTruncated") or not continuation:
                break
        return folders, files
