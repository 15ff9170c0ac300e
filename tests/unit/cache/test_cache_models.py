# tests/unit/cache/test_cache_models.py — v1
"""Tests for cache/models.py — cache entries and on-disk documents."""

from __future__ import annotations

import json

from incrlint.cache.models import CacheDocument, CacheEntry, ProjectCache


class TestCacheEntry:
    def test_diagnostics_absent_by_default(self):
        entry = CacheEntry(modified=10)
        assert entry.diagnostics is None

    def test_append_creates_list(self):
        entry = CacheEntry(modified=10)
        entry.append_diagnostic("/a.swift:1:1: warning: x")
        entry.append_diagnostic("/a.swift:2:1: error: y")
        assert entry.diagnostics == [
            "/a.swift:1:1: warning: x",
            "/a.swift:2:1: error: y",
        ]


class TestCacheDocument:
    def test_json_shape(self):
        doc = CacheDocument({
            "/src/a.swift": CacheEntry(modified=1, diagnostics=["/src/a.swift:1: warn"]),
            "/src/b.swift": CacheEntry(modified=2),
        })
        data = json.loads(doc.model_dump_json())
        assert data == {
            "/src/a.swift": {"modified": 1, "diagnostics": ["/src/a.swift:1: warn"]},
            "/src/b.swift": {"modified": 2, "diagnostics": None},
        }

    def test_parse(self):
        raw = '{"/x.swift": {"modified": 5}}'
        doc = CacheDocument.model_validate_json(raw)
        assert doc.root["/x.swift"].modified == 5
        assert doc.root["/x.swift"].diagnostics is None


class TestProjectCache:
    def test_create(self):
        pc = ProjectCache(project_modified=42, git_root_folders=["/repo"])
        assert pc.git_root_folders == ["/repo"]
