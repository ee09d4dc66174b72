"""Tests for docsmith.scanner."""

from __future__ import annotations

import asyncio
import time
from pathlib import Path

import pytest

from docsmith import scanner as scanner_module
from docsmith.config import ScannerConfig
from docsmith.errors import ScanError
from docsmith.scanner import ProjectScanner, render_project_tree, render_tree


def test_scan_indexes_every_file_and_matches_tree(repo_builder) -> None:
    repo_builder.write(
        {
            "package.json": '{"name": "x"}\n',
            "src/index.js": "console.log('hi');\n",
            "src/lib/util.js": "module.exports = {};\n",
            "docs/guide.md": "# Guide\n",
        }
    )

    result = repo_builder.scan()

    assert set(result.contents) == set(result.leaf_paths())
    assert set(result.contents) == {
        "package.json",
        "src/index.js",
        "src/lib/util.js",
        "docs/guide.md",
    }
    assert result.contents["src/lib/util.js"] == "module.exports = {};\n"
    assert result.tree["src"]["lib"] == {"util.js": None}


def test_scan_prunes_excluded_directories_and_files(repo_builder) -> None:
    repo_builder.write(
        {
            "src/app.py": "print('ok')\n",
            "node_modules/left-pad/index.js": "module.exports = 1;\n",
            "build/out.txt": "artifact\n",
            "coverage/lcov.info": "TN:\n",
            "yarn.lock": "# lock\n",
            "debug.log": "noise\n",
            ".env.local": "SECRET=1\n",
            ".git/config": "[core]\n",
        }
    )

    result = repo_builder.scan()

    assert list(result.contents) == ["src/app.py"]
    assert set(result.tree) == {"src"}


def test_exclusion_matches_base_name_not_full_path(repo_builder) -> None:
    repo_builder.write(
        {
            "src/build_utils.py": "x = 1\n",
            "src/dist/keep.txt": "pruned\n",
        }
    )

    result = repo_builder.scan()

    # "^dist$" prunes the nested dist directory, "^build$" leaves build_utils.py alone
    assert "src/build_utils.py" in result.contents
    assert "src/dist/keep.txt" not in result.contents
    assert "dist" not in result.tree["src"]


def test_custom_exclude_patterns(tmp_path: Path) -> None:
    root = tmp_path / "project"
    (root / "data").mkdir(parents=True)
    (root / "data" / "big.csv").write_text("a,b\n", encoding="utf-8")
    (root / "main.py").write_text("print(1)\n", encoding="utf-8")

    scanner = ProjectScanner(ScannerConfig(exclude_patterns=(r"^data$",)))
    result = scanner.scan_sync(root)

    assert list(result.contents) == ["main.py"]


def test_empty_directories_are_left_out_of_the_tree(repo_builder) -> None:
    repo_builder.write({"main.py": "print(1)\n"})
    (repo_builder.path() / "empty").mkdir()

    result = repo_builder.scan()

    assert "empty" not in result.tree


def test_scan_is_deterministic(repo_builder) -> None:
    repo_builder.write(
        {
            "a/one.txt": "1\n",
            "b/two.txt": "2\n",
            "c/d/three.txt": "3\n",
            "root.txt": "r\n",
        }
    )

    first = repo_builder.scan()
    second = repo_builder.scan()

    assert first == second
    assert list(first.contents) == list(second.contents)
    assert render_tree(first.tree) == render_tree(second.tree)


def test_merge_follows_listing_order_not_completion_order(tmp_path: Path, monkeypatch) -> None:
    root = tmp_path / "project"
    for name in ("slow", "fast"):
        (root / name).mkdir(parents=True)
        (root / name / "file.txt").write_text(name, encoding="utf-8")

    def fake_list(directory: Path):
        if directory.name == "project":
            return [("slow", True), ("fast", True)]
        return [("file.txt", False)]

    real_read = scanner_module._read_text

    def slow_read(path: Path) -> str:
        if path.parent.name == "slow":
            time.sleep(0.05)
        return real_read(path)

    monkeypatch.setattr(scanner_module, "_list_directory", fake_list)
    monkeypatch.setattr(scanner_module, "_read_text", slow_read)

    result = asyncio.run(ProjectScanner().scan(root))

    assert list(result.tree) == ["slow", "fast"]
    assert list(result.contents) == ["slow/file.txt", "fast/file.txt"]


def test_unreadable_file_aborts_scan(repo_builder) -> None:
    repo_builder.write({"main.py": "print(1)\n"})
    (repo_builder.path() / "image.bin").write_bytes(b"\xff\xfe\x00\x81")

    with pytest.raises(ScanError) as excinfo:
        repo_builder.scan()

    assert "image.bin" in str(excinfo.value)


def test_scan_rejects_missing_directory(tmp_path: Path) -> None:
    missing = tmp_path / "missing"
    with pytest.raises(FileNotFoundError) as excinfo:
        ProjectScanner().scan_sync(missing)
    assert str(missing) in str(excinfo.value)


def test_render_tree_uses_box_drawing_connectors() -> None:
    tree = {
        "src": {"index.js": None, "lib": {"util.js": None}},
        "package.json": None,
    }

    rendered = render_project_tree("demo", tree)

    assert rendered == (
        "demo/\n"
        "├── src\n"
        "│   ├── index.js\n"
        "│   └── lib\n"
        "│       └── util.js\n"
        "└── package.json\n"
    )


def test_render_tree_empty() -> None:
    assert render_tree({}) == ""


def test_scan_result_renders_tree_under_root_name(repo_builder) -> None:
    repo_builder.write({"src/main.py": "print('hi')\n", "README.md": "# hi\n"})

    result = repo_builder.scan()

    assert result.render_tree() == render_project_tree("repo", result.tree)
    assert result.render_tree().startswith("repo/\n")
