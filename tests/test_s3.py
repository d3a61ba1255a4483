import asyncio
import unittest

from s3prompt.errors import EmptyCatalog
from s3prompt.s3 import ListingResult, S3Service, listing_prefix


class _PagedClient:
    def __init__(self, pages) -> None:
        self.pages = list(pages)
        self.calls: list[dict] = []

    def list_objects_v2(self, **kwargs):
        self.calls.append(kwargs)
        return self.pages[len(self.calls) - 1]


class _BucketsClient:
    def __init__(self, names) -> None:
        self.names = names

    def list_buckets(self):
        return {"Buckets": [{"Name": name} for name in self.names]}


def _service_with(client, profile=None) -> S3Service:
    service = S3Service(profile=profile)
    service._clients[service._profile_key(service.profile)] = client
    return service


class TestListingPrefix(unittest.TestCase):
    def test_listing_prefix(self) -> None:
        self.assertEqual(listing_prefix(None), "")
        self.assertEqual(listing_prefix(""), "")
        self.assertEqual(listing_prefix("a"), "a/")
        self.assertEqual(listing_prefix("a/b/"), "a/b/")
        self.assertEqual(listing_prefix("/a/"), "a/")


class TestS3Service(unittest.TestCase):
    def test_default_profile_is_normalized(self) -> None:
        self.assertIsNone(S3Service(profile="default").profile)
        self.assertEqual(S3Service(profile="dev").profile, "dev")

    def test_buckets_sorted(self) -> None:
        service = _service_with(_BucketsClient(["zeta", "alpha", "mid"]))
        listing = asyncio.run(service.fetch_listing())
        self.assertEqual(listing, ListingResult(entries=("alpha", "mid", "zeta")))
        self.assertEqual(listing.files, frozenset())
        self.assertEqual(listing.folders, frozenset())

    def test_no_buckets_raises_empty_catalog(self) -> None:
        service = _service_with(_BucketsClient([]))
        with self.assertRaises(EmptyCatalog) as ctx:
            asyncio.run(service.fetch_listing())
        self.assertIn("no buckets", str(ctx.exception))

    def test_root_listing_uses_empty_prefix(self) -> None:
        client = _PagedClient(
            [
                {
                    "CommonPrefixes": [{"Prefix": "a/"}],
                    "Contents": [{"Key": "top.txt"}],
                    "IsTruncated": False,
                }
            ]
        )
        listing = asyncio.run(_service_with(client).fetch_listing("b"))
        self.assertEqual(client.calls[0]["Prefix"], "")
        self.assertEqual(client.calls[0]["Delimiter"], "/")
        self.assertEqual(client.calls[0]["Bucket"], "b")
        self.assertEqual(listing.entries, ("top.txt", "a/"))
        self.assertEqual(listing.files, frozenset({"top.txt"}))
        self.assertEqual(listing.folders, frozenset({"a/"}))

    def test_follows_continuation_tokens(self) -> None:
        client = _PagedClient(
            [
                {
                    "CommonPrefixes": [{"Prefix": "a/x/"}],
                    "Contents": [{"Key": "a/1.txt"}],
                    "IsTruncated": True,
                    "NextContinuationToken": "tok",
                },
                {
                    "CommonPrefixes": [{"Prefix": "a/y/"}],
                    "Contents": [{"Key": "a/2.txt"}],
                    "IsTruncated": False,
                },
            ]
        )
        listing = asyncio.run(_service_with(client).fetch_listing("b", "a"))
        self.assertEqual(len(client.calls), 2)
        self.assertEqual(client.calls[0]["Prefix"], "a/")
        self.assertNotIn("ContinuationToken", client.calls[0])
        self.assertEqual(client.calls[1]["ContinuationToken"], "tok")
        self.assertEqual(listing.entries, ("a/1.txt", "a/2.txt", "a/x/", "a/y/"))

    def test_skips_directory_markers(self) -> None:
        client = _PagedClient(
            [
                {
                    "Contents": [
                        {"Key": "a/"},
                        {"Key": "a/nested/"},
                        {"Key": "a/f.txt"},
                        {"Key": ""},
                    ],
                }
            ]
        )
        listing = asyncio.run(_service_with(client).fetch_listing("b", "a/"))
        self.assertEqual(listing.entries, ("a/f.txt",))

    def test_truncated_without_token_stops(self) -> None:
        client = _PagedClient([{"Contents": [{"Key": "f"}], "IsTruncated": True}])
        listing = asyncio.run(_service_with(client).fetch_listing("b"))
        self.assertEqual(listing.entries, ("f",))
        self.assertEqual(len(client.calls), 1)

    def test_client_errors_propagate_unchanged(self) -> None:
        class _DeniedClient:
            def list_objects_v2(self, **_kwargs):
                raise PermissionError("AccessDenied: forbidden")

        with self.assertRaises(PermissionError):
            asyncio.run(_service_with(_DeniedClient()).fetch_listing("b"))

    def test_client_is_cached_per_profile(self) -> None:
        client = _BucketsClient(["a"])
        service = _service_with(client, profile="dev")
        self.assertIs(service._client("dev"), client)


if __name__ == "__main__":
    unittest.main()
