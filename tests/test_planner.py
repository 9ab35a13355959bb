"""Tests for the sync planner: manifest diffing, idempotence, fail-closed listing."""

from __future__ import annotations

import pytest
from botocore.exceptions import ReadTimeoutError

from cdnsync.exceptions import ListingError
from cdnsync.models.asset import Asset, RemoteObject
from cdnsync.services.aws.executor import SyncExecutor
from cdnsync.services.aws.operations import S3Operations
from cdnsync.services.aws.planner import SyncPlanner, compute_manifest
from cdnsync.services.aws.retry import RetryPolicy

from conftest import client_error, md5_hex, write_file


def _asset(key: str, hash: str, size: int = 1) -> Asset:
    return Asset(key=key, path=f"/build/{key}", hash=hash, size=size)


class TestComputeManifest:
    def test_new_asset_is_planned(self):
        local = [_asset("a.html", "hashx"), _asset("b.css", "hashy")]
        remote = {"a.html": RemoteObject("a.html", '"hashx"')}

        manifest = compute_manifest(local, remote)

        assert manifest.keys == ["b.css"]
        assert manifest.new_keys == {"b.css"}
        assert manifest.skipped == 1

    def test_changed_hash_is_planned(self):
        local = [_asset("a.html", "hashx")]
        remote = {"a.html": RemoteObject("a.html", '"hashz"')}

        manifest = compute_manifest(local, remote)

        assert manifest.keys == ["a.html"]
        assert manifest.changed_keys == ["a.html"]

    def test_remote_only_keys_never_planned(self):
        local = [_asset("a.html", "hashx")]
        remote = {
            "a.html": RemoteObject("a.html", "hashx"),
            "old-post.png": RemoteObject("old-post.png", "hashp"),
        }

        manifest = compute_manifest(local, remote)

        assert manifest.is_empty()
        assert "old-post.png" not in manifest

    def test_multipart_etag_forces_reupload(self):
        local = [_asset("big.zip", "d41d8cd98f00b204e9800998ecf8427e")]
        remote = {"big.zip": RemoteObject("big.zip", '"d41d8cd98f00b204e9800998ecf8427e-3"')}

        manifest = compute_manifest(local, remote)

        assert manifest.keys == ["big.zip"]

    def test_hash_comparison_is_case_insensitive(self):
        local = [_asset("a.html", "ABCDEF")]
        remote = {"a.html": RemoteObject("a.html", '"abcdef"')}

        assert compute_manifest(local, remote).is_empty()

    def test_empty_local_set(self):
        remote = {"a.html": RemoteObject("a.html", "x")}
        manifest = compute_manifest([], remote)
        assert manifest.is_empty()
        assert manifest.scanned == 0

    def test_manifest_is_ordered_by_key(self):
        local = [_asset("z.js", "1"), _asset("a.js", "2"), _asset("m.js", "3")]
        assert compute_manifest(local, {}).keys == ["a.js", "m.js", "z.js"]


class TestSyncPlanner:
    def test_plan_scopes_listing_to_prefix(self, fake_s3, target, build_dir):
        fake_s3.seed("tst/index.html", b"<html>home</html>")
        # Same key under another environment's prefix must not count
        fake_s3.seed("stg/css/site.css", b"body { color: black; }")

        planner = SyncPlanner(S3Operations(fake_s3, target))
        manifest = planner.plan(build_dir)

        assert manifest.keys == ["css/site.css"]

    def test_scenario_new_file(self, fake_s3, target, tmp_path):
        out = tmp_path / "out"
        write_file(out, "a.html", b"X")
        write_file(out, "b.css", b"Y")
        fake_s3.seed("tst/a.html", b"X")

        planner = SyncPlanner(S3Operations(fake_s3, target))
        manifest = planner.plan(out)
        assert manifest.keys == ["b.css"]

        result = SyncExecutor(fake_s3, sleep=lambda _: None).execute(manifest, target)
        assert result.success
        assert fake_s3.objects["tst/a.html"]["etag"] == md5_hex(b"X")
        assert fake_s3.objects["tst/b.css"]["etag"] == md5_hex(b"Y")

    def test_scenario_changed_file(self, fake_s3, target, tmp_path):
        out = tmp_path / "out"
        write_file(out, "a.html", b"X")
        fake_s3.seed("tst/a.html", b"Z")

        planner = SyncPlanner(S3Operations(fake_s3, target))
        manifest = planner.plan(out)
        assert manifest.keys == ["a.html"]

        SyncExecutor(fake_s3, sleep=lambda _: None).execute(manifest, target)
        assert fake_s3.objects["tst/a.html"]["etag"] == md5_hex(b"X")

    def test_scenario_orphan_survives(self, fake_s3, target, tmp_path):
        out = tmp_path / "out"
        write_file(out, "a.html", b"X")
        fake_s3.seed("tst/old-post.png", b"PNG")
        before = set(fake_s3.objects)

        planner = SyncPlanner(S3Operations(fake_s3, target))
        manifest = planner.plan(out)
        SyncExecutor(fake_s3, sleep=lambda _: None).execute(manifest, target)

        assert "tst/old-post.png" in fake_s3.objects
        assert before <= set(fake_s3.objects)

    def test_second_plan_is_empty(self, fake_s3, target, build_dir):
        planner = SyncPlanner(S3Operations(fake_s3, target))
        first = planner.plan(build_dir)
        assert len(first) == 2

        SyncExecutor(fake_s3, sleep=lambda _: None).execute(first, target)

        second = planner.plan(build_dir)
        assert second.is_empty()
        assert second.skipped == 2

    def test_listing_failure_fails_closed(self, fake_s3, target, build_dir):
        fake_s3.list_error = client_error("AccessDenied", 403, "ListObjectsV2")
        planner = SyncPlanner(S3Operations(fake_s3, target), sleep=lambda _: None)

        with pytest.raises(ListingError, match="AccessDenied"):
            planner.plan(build_dir)
        assert fake_s3.put_calls == []
        assert fake_s3.list_calls == 1

    def test_exclude_patterns(self, fake_s3, target, build_dir):
        write_file(build_dir, ".git/HEAD", b"ref: refs/heads/main")
        write_file(build_dir, "img/.DS_Store", b"junk")

        planner = SyncPlanner(S3Operations(fake_s3, target), exclude=[".git/*", "*/.DS_Store"])
        manifest = planner.plan(build_dir)

        assert manifest.keys == ["css/site.css", "index.html"]

    def test_missing_output_dir(self, fake_s3, target, tmp_path):
        planner = SyncPlanner(S3Operations(fake_s3, target))
        with pytest.raises(FileNotFoundError):
            planner.plan(tmp_path / "nope")

    def test_listing_timeout_retried_then_succeeds(self, fake_s3, target, build_dir):
        fake_s3.list_failures = [ReadTimeoutError(endpoint_url="https://s3.example.test")]
        delays = []

        planner = SyncPlanner(S3Operations(fake_s3, target), sleep=delays.append)
        manifest = planner.plan(build_dir)

        assert manifest.keys == ["css/site.css", "index.html"]
        assert fake_s3.list_calls == 2
        assert delays == [0.5]

    def test_listing_retry_budget_exhausted(self, fake_s3, target, build_dir):
        fake_s3.list_error = client_error("SlowDown", 503, "ListObjectsV2")
        planner = SyncPlanner(S3Operations(fake_s3, target), retry_policy=RetryPolicy(max_attempts=3),
                              sleep=lambda _: None)

        with pytest.raises(ListingError) as excinfo:
            planner.plan(build_dir)

        assert excinfo.value.transient is True
        assert fake_s3.list_calls == 3


class TestStoredHash:
    MULTIPART_ETAG = "0123456789abcdef0123456789abcdef-2"

    def test_md5_metadata_skips_non_md5_etag(self, fake_s3, target, build_dir):
        body = (build_dir / "index.html").read_bytes()
        fake_s3.seed("tst/index.html", body, etag=self.MULTIPART_ETAG,
                     metadata={"md5": md5_hex(body)})

        manifest = SyncPlanner(S3Operations(fake_s3, target)).plan(build_dir)

        assert manifest.keys == ["css/site.css"]
        assert fake_s3.head_calls == ["tst/index.html"]

    def test_missing_metadata_reuploads(self, fake_s3, target, build_dir):
        fake_s3.seed("tst/index.html", b"", etag=self.MULTIPART_ETAG)

        manifest = SyncPlanner(S3Operations(fake_s3, target)).plan(build_dir)

        assert "index.html" in manifest.changed_keys

    def test_stale_metadata_reuploads(self, fake_s3, target, build_dir):
        fake_s3.seed("tst/index.html", b"", etag=self.MULTIPART_ETAG,
                     metadata={"md5": md5_hex(b"older build")})

        manifest = SyncPlanner(S3Operations(fake_s3, target)).plan(build_dir)

        assert "index.html" in manifest.keys

    def test_plain_md5_mismatch_needs_no_head(self, fake_s3, target, build_dir):
        fake_s3.seed("tst/index.html", b"older build")

        manifest = SyncPlanner(S3Operations(fake_s3, target)).plan(build_dir)

        assert "index.html" in manifest.keys
        assert fake_s3.head_calls == []

    def test_upload_then_plan_is_idempotent_for_multipart(self, fake_s3, target, build_dir):
        fake_s3.seed("tst/index.html", b"", etag=self.MULTIPART_ETAG)
        planner = SyncPlanner(S3Operations(fake_s3, target))

        SyncExecutor(fake_s3, sleep=lambda _: None).execute(planner.plan(build_dir), target)

        assert planner.plan(build_dir).is_empty()
