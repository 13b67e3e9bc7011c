"""空目录清理测试"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from railpkg.core.exceptions import PruneError
from railpkg.core.pkg.pruner import DirectoryPruner, PruneAction, PruneOutcome, format_report


def _removed(outcomes: list[PruneOutcome]) -> list[Path]:
    return [o.path for o in outcomes if o.action is PruneAction.REMOVED]


class TestDirectoryPruner:
    def test_missing_root(self, tmp_path: Path) -> None:
        pruner = DirectoryPruner()
        assert pruner.prune(tmp_path / "nonexist") == []
        assert pruner.report(tmp_path / "nonexist") == ""

    def test_empty_tree_removed_bottom_up(self, tmp_path: Path) -> None:
        root = tmp_path / "Railway"
        deepest = root / "Route" / "Line"
        deepest.mkdir(parents=True)

        outcomes = DirectoryPruner().prune(root)
        assert _removed(outcomes) == [deepest, root / "Route", root]
        assert not root.exists()

        report = format_report(outcomes)
        lines = report.splitlines()
        assert len(lines) == 3
        assert lines[0].startswith(str(deepest))

    def test_keep_root(self, tmp_path: Path) -> None:
        root = tmp_path / "content"
        (root / "a" / "b").mkdir(parents=True)

        outcomes = DirectoryPruner().prune(root, keep_root=True)
        assert _removed(outcomes) == [root / "a" / "b", root / "a"]
        assert root.is_dir()
        assert outcomes[-1].action is PruneAction.SKIPPED

    def test_non_empty_directories_kept(self, tmp_path: Path) -> None:
        root = tmp_path / "Train"
        (root / "EMU").mkdir(parents=True)
        (root / "EMU" / "train.dat").write_text("x")
        (root / "Old" / "Empty").mkdir(parents=True)

        outcomes = DirectoryPruner().prune(root)
        assert _removed(outcomes) == [root / "Old" / "Empty", root / "Old"]
        assert (root / "EMU" / "train.dat").exists()
        skipped = [o.path for o in outcomes if o.action is PruneAction.SKIPPED]
        assert skipped == [root / "EMU", root]

    @pytest.mark.parametrize("name", ["thumbs.db", "Thumbs.db"])
    def test_debris_file_removed(self, tmp_path: Path, name: str) -> None:
        root = tmp_path / "Object"
        pics = root / "pics"
        pics.mkdir(parents=True)
        (pics / name).write_bytes(b"\0")
        (root / "keep.b3d").write_text("x")

        outcomes = DirectoryPruner().prune(root)
        assert _removed(outcomes) == [pics]
        assert not pics.exists()
        assert len(format_report(outcomes).splitlines()) == 1

    def test_debris_with_other_files_kept(self, tmp_path: Path) -> None:
        root = tmp_path / "Object"
        root.mkdir()
        (root / "thumbs.db").write_bytes(b"\0")
        (root / "tree.png").write_bytes(b"\0")

        outcomes = DirectoryPruner().prune(root)
        assert _removed(outcomes) == []
        assert (root / "thumbs.db").exists()

    def test_debris_directory_is_not_debris(self, tmp_path: Path) -> None:
        """名为 thumbs.db 的非空目录不能当作残留文件删除"""
        root = tmp_path / "root"
        (root / "thumbs.db").mkdir(parents=True)
        (root / "thumbs.db" / "data").write_text("x")

        DirectoryPruner().prune(root)
        assert (root / "thumbs.db" / "data").exists()

    def test_custom_debris_names(self, tmp_path: Path) -> None:
        root = tmp_path / "root"
        (root / "a").mkdir(parents=True)
        (root / "a" / ".DS_Store").write_bytes(b"\0")
        (root / "b").mkdir()
        (root / "b" / "thumbs.db").write_bytes(b"\0")
        (root / "c.txt").write_text("x")

        outcomes = DirectoryPruner(debris_files=[".ds_store"]).prune(root)
        assert _removed(outcomes) == [root / "a"]
        assert (root / "b" / "thumbs.db").exists()

    def test_symlinked_directory_not_followed(self, tmp_path: Path) -> None:
        outside = tmp_path / "outside" / "empty"
        outside.mkdir(parents=True)
        root = tmp_path / "root"
        root.mkdir()
        (root / "link").symlink_to(tmp_path / "outside", target_is_directory=True)

        DirectoryPruner().prune(root)
        assert outside.is_dir()

    def test_delete_failure_raises_with_partial_outcomes(self, tmp_path: Path) -> None:
        root = tmp_path / "root"
        (root / "a").mkdir(parents=True)
        (root / "b").mkdir()
        target = root / "b"

        real_rmdir = Path.rmdir

        def _rmdir(self: Path) -> None:
            if self == target:
                raise PermissionError(13, "Permission denied", str(self))
            real_rmdir(self)

        with patch.object(Path, "rmdir", _rmdir), pytest.raises(PruneError) as exc_info:
            DirectoryPruner().prune(root)

        err = exc_info.value
        assert err.code == "PRUNE_ERROR"
        assert err.path == target
        assert [(o.path, o.action) for o in err.outcomes] == [
            (root / "a", PruneAction.REMOVED),
            (target, PruneAction.FAULTED),
        ]
        assert isinstance(err.__cause__, PermissionError)

        report = format_report(err.outcomes)
        assert "删除失败" in report.splitlines()[-1]
        assert target.exists()


class TestFormatReport:
    def test_only_removed_and_faulted(self) -> None:
        outcomes = [
            PruneOutcome(Path("/x/a"), PruneAction.REMOVED),
            PruneOutcome(Path("/x"), PruneAction.SKIPPED, "剩余 2 项"),
            PruneOutcome(Path("/y"), PruneAction.FAULTED, "Permission denied"),
        ]
        assert format_report(outcomes) == (
            f"{Path('/x/a')} 已删除\n{Path('/y')} 删除失败: Permission denied\n"
        )

    def test_empty(self) -> None:
        assert format_report([]) == ""
