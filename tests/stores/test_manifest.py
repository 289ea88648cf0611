from __future__ import annotations

import json
from pathlib import Path

from luaudoc.stores import ManifestStore
from luaudoc.stores.manifest import hash_content, prune_empty_dirs


def _reconcile(manifest_path: Path, out_dir: Path, outputs: dict[str, str], **kwargs):
    store = ManifestStore(manifest_path)
    return store.reconcile(
        out_dir,
        "luau",
        outputs,
        input_path=Path("reference.json"),
        input_raw=kwargs.pop("input_raw", "{}"),
        generator_version="0.1.0",
        **kwargs,
    )


def test_reconcile_replaces_stale_outputs(tmp_path: Path) -> None:
    manifest_path = tmp_path / ".luaudoc" / "manifest.json"
    out_dir = tmp_path / "docs"
    _reconcile(manifest_path, out_dir, {"A.md": "a", "nested/B.md": "b", "C.md": "c"})

    result = _reconcile(manifest_path, out_dir, {"A.md": "a", "C.md": "c2", "D.md": "d"})

    assert result.deleted == ["nested/B.md"]
    assert result.written == ["C.md", "D.md"]
    assert result.unchanged == ["A.md"]
    assert not (out_dir / "nested").exists()
    assert sorted(path.name for path in out_dir.iterdir()) == ["A.md", "C.md", "D.md"]
    assert ManifestStore(manifest_path).outputs_for("luau") == ["A.md", "C.md", "D.md"]


def test_unchanged_rerun_leaves_manifest_untouched(tmp_path: Path) -> None:
    manifest_path = tmp_path / "manifest.json"
    out_dir = tmp_path / "docs"
    _reconcile(manifest_path, out_dir, {"A.md": "a"})
    before = manifest_path.read_text(encoding="utf-8")

    result = _reconcile(manifest_path, out_dir, {"A.md": "a"})

    assert result.written == []
    assert result.unchanged == ["A.md"]
    assert manifest_path.read_text(encoding="utf-8") == before


def test_manifest_records_input_hash(tmp_path: Path) -> None:
    manifest_path = tmp_path / "manifest.json"
    _reconcile(manifest_path, tmp_path / "docs", {"A.md": "a"}, input_raw='{"x": 1}')

    payload = json.loads(manifest_path.read_text(encoding="utf-8"))

    record = payload["inputs"]["luau"]
    assert payload["outputs"] == {"luau": ["A.md"]}
    assert record["hash"] == hash_content('{"x": 1}')
    assert record["generatorVersion"] == "0.1.0"
    assert record["path"] == "reference.json"
    assert record["generatedAt"].endswith("Z")


def test_languages_are_tracked_independently(tmp_path: Path) -> None:
    manifest_path = tmp_path / "manifest.json"
    _reconcile(manifest_path, tmp_path / "luau", {"A.md": "a"})
    store = ManifestStore(manifest_path)
    store.reconcile(tmp_path / "ts", "ts", {"B.md": "b"})

    reloaded = ManifestStore(manifest_path)

    assert reloaded.outputs_for("luau") == ["A.md"]
    assert reloaded.outputs_for("ts") == ["B.md"]
    assert (tmp_path / "luau" / "A.md").exists()


def test_corrupt_manifest_is_treated_as_empty(tmp_path: Path) -> None:
    manifest_path = tmp_path / "manifest.json"
    manifest_path.write_text("{not json", encoding="utf-8")
    out_dir = tmp_path / "docs"
    out_dir.mkdir()
    (out_dir / "Old.md").write_text("old", encoding="utf-8")

    result = _reconcile(manifest_path, out_dir, {"A.md": "a"})

    assert result.deleted == []
    assert (out_dir / "Old.md").exists()
    assert json.loads(manifest_path.read_text(encoding="utf-8"))["outputs"] == {"luau": ["A.md"]}


def test_clean_disabled_keeps_stale_files(tmp_path: Path) -> None:
    manifest_path = tmp_path / "manifest.json"
    out_dir = tmp_path / "docs"
    _reconcile(manifest_path, out_dir, {"A.md": "a", "B.md": "b"})

    result = _reconcile(manifest_path, out_dir, {"A.md": "a"}, clean=False)

    assert result.deleted == []
    assert (out_dir / "B.md").exists()
    assert ManifestStore(manifest_path).outputs_for("luau") == ["A.md"]


def test_failed_stale_delete_is_a_warning(tmp_path: Path) -> None:
    manifest_path = tmp_path / "manifest.json"
    out_dir = tmp_path / "docs"
    _reconcile(manifest_path, out_dir, {"A.md": "a", "B.md": "b"})
    (out_dir / "B.md").unlink()
    (out_dir / "B.md").mkdir()
    (out_dir / "B.md" / "keep.txt").write_text("x", encoding="utf-8")

    result = _reconcile(manifest_path, out_dir, {"A.md": "a"})

    assert result.deleted == []
    assert [diagnostic.level for diagnostic in result.diagnostics] == ["warning"]
    assert "Failed to delete stale file" in result.diagnostics[0].message


def test_unwritable_page_is_an_error_and_others_continue(tmp_path: Path) -> None:
    out_dir = tmp_path / "docs"
    (out_dir / "A.md").mkdir(parents=True)
    (out_dir / "A.md" / "blocker.txt").write_text("x", encoding="utf-8")

    result = _reconcile(tmp_path / "manifest.json", out_dir, {"A.md": "a", "B.md": "b"})

    assert result.written == ["B.md"]
    assert [diagnostic.level for diagnostic in result.diagnostics] == ["error"]
    assert (out_dir / "B.md").read_text(encoding="utf-8") == "b"


def test_store_without_path_does_not_persist(tmp_path: Path) -> None:
    store = ManifestStore(None)

    result = store.reconcile(tmp_path / "docs", "luau", {"A.md": "a"})

    assert result.outputs == ["A.md"]
    assert store.outputs_for("luau") == ["A.md"]
    assert list(tmp_path.glob("*.json")) == []


def test_prune_empty_dirs_removes_nested_directories(tmp_path: Path) -> None:
    root = tmp_path / "out"
    (root / "a" / "b").mkdir(parents=True)
    (root / "keep").mkdir()
    (root / "keep" / "file.md").write_text("x", encoding="utf-8")

    assert prune_empty_dirs(root) is False
    assert not (root / "a").exists()
    assert (root / "keep" / "file.md").exists()
    assert prune_empty_dirs(tmp_path / "missing") is False
