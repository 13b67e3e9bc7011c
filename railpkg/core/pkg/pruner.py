"""空目录清理

卸载内容包后，按深度优先（先子目录后父目录）删除留下的空目录。
目录中只剩 thumbs.db 这类系统自动生成的文件时，先删除该文件再删除目录。
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from railpkg.core.exceptions import PruneError

logger = logging.getLogger(__name__)

# Windows 在含图片的目录中自动生成的缩略图缓存
DEFAULT_DEBRIS_FILES = ("thumbs.db",)


class PruneAction(str, Enum):
    REMOVED = "removed"
    SKIPPED = "skipped"
    FAULTED = "faulted"


@dataclass
class PruneOutcome:
    """单个目录的处理结果"""

    path: Path
    action: PruneAction
    detail: str = ""

    def describe(self) -> str:
        if self.action is PruneAction.REMOVED:
            return f"{self.path} 已删除"
        if self.action is PruneAction.FAULTED:
            return f"{self.path} 删除失败: {self.detail}"
        return f"{self.path} 已跳过: {self.detail}"


def format_report(outcomes: Iterable[PruneOutcome]) -> str:
    """拼接人类可读的报告，只包含已删除和失败的目录"""
    lines = [
        o.describe() for o in outcomes
        if o.action in (PruneAction.REMOVED, PruneAction.FAULTED)
    ]
    return "".join(f"{line}\n" for line in lines)


class DirectoryPruner:
    """空目录清理器"""

    def __init__(self, debris_files: Iterable[str] | None = None) -> None:
        names = DEFAULT_DEBRIS_FILES if debris_files is None else debris_files
        self.debris_files = frozenset(n.lower() for n in names)

    def prune(self, root: str | Path, keep_root: bool = False) -> list[PruneOutcome]:
        """清理 root 下的空目录，返回按处理顺序排列的结果（最深的目录在前）。

        root 不存在时返回空列表。删除失败时抛出 PruneError，
        异常中携带出错前的全部处理记录。
        """
        root = Path(root)
        outcomes: list[PruneOutcome] = []
        try:
            for outcome in self._walk(root, root, keep_root):
                outcomes.append(outcome)
        except OSError as exc:
            failed = Path(exc.filename) if exc.filename else root
            outcomes.append(PruneOutcome(failed, PruneAction.FAULTED, exc.strerror or str(exc)))
            logger.error("删除失败: %s (%s)", failed, exc)
            raise PruneError(f"清理目录失败: {failed}: {exc}", path=failed, outcomes=outcomes) from exc

        removed = sum(1 for o in outcomes if o.action is PruneAction.REMOVED)
        logger.info("清理完成: %s, 删除 %d 个空目录", root, removed)
        return outcomes

    def report(self, root: str | Path, keep_root: bool = False) -> str:
        return format_report(self.prune(root, keep_root=keep_root))

    def _walk(self, directory: Path, root: Path, keep_root: bool) -> Iterator[PruneOutcome]:
        if not directory.is_dir():
            return
        # 不跟随符号链接，避免清理到安装目录之外
        for child in sorted(directory.iterdir()):
            if child.is_dir() and not child.is_symlink():
                yield from self._walk(child, root, keep_root)

        if keep_root and directory == root:
            yield PruneOutcome(directory, PruneAction.SKIPPED, "保留根目录")
            return

        entries = list(directory.iterdir())
        if not entries:
            directory.rmdir()
            logger.debug("已删除空目录: %s", directory)
            yield PruneOutcome(directory, PruneAction.REMOVED)
            return

        if len(entries) == 1 and self._is_debris(entries[0]):
            entries[0].unlink()
            directory.rmdir()
            logger.debug("已删除目录及残留文件 %s: %s", entries[0].name, directory)
            yield PruneOutcome(directory, PruneAction.REMOVED, entries[0].name)
            return

        yield PruneOutcome(directory, PruneAction.SKIPPED, f"剩余 {len(entries)} 项")

    def _is_debris(self, entry: Path) -> bool:
        return entry.name.lower() in self.debris_files and entry.is_file()
