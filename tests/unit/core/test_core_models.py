# tests/unit/core/test_core_models.py — v1
"""Tests for core/models.py — source files and the target union."""

from __future__ import annotations

import os

import pytest
from pydantic import TypeAdapter

from incrlint.core.models import (
    BuildFile,
    FileType,
    RealTarget,
    SourceFile,
    SyntheticTarget,
    Target,
    TargetKind,
)


class TestSourceFile:
    def test_from_path_reads_mtime_ns(self, tmp_path):
        f = tmp_path / "a.swift"
        f.write_text("x")
        sf = SourceFile.from_path(f)
        assert sf.path == str(f)
        assert sf.modified == os.stat(f).st_mtime_ns

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            SourceFile.from_path(tmp_path / "gone.swift")


class TestTargetKind:
    @pytest.mark.parametrize("product_type,expected", [
        ("com.apple.product-type.bundle.unit-test", TargetKind.TEST),
        ("com.apple.product-type.bundle.ui-testing", TargetKind.TEST),
        ("com.apple.product-type.application", TargetKind.MAIN),
    ])
    def test_from_product_type(self, product_type, expected):
        assert TargetKind.from_product_type(product_type) == expected


class TestTargets:
    def test_source_files_filters_type_and_suffix(self):
        target = RealTarget(
            display_name="App",
            input_files=[
                BuildFile(path="/p/a.swift"),
                BuildFile(path="/p/b.m"),
                BuildFile(path="/p/c.swift", type=FileType.RESOURCE),
            ],
        )
        assert target.source_files(".swift") == ["/p/a.swift"]

    def test_synthetic_from_paths_dedups(self):
        target = SyntheticTarget.from_paths("Target", ["/b.swift", "/a.swift", "/b.swift"])
        assert [f.path for f in target.input_files] == ["/a.swift", "/b.swift"]
        assert target.kind == TargetKind.MAIN

    def test_discriminated_union(self):
        adapter = TypeAdapter(Target)
        real = adapter.validate_python({"origin": "real", "display_name": "App"})
        synthetic = adapter.validate_python({"origin": "synthetic", "display_name": "T"})
        assert isinstance(real, RealTarget)
        assert isinstance(synthetic, SyntheticTarget)
