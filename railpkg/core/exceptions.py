"""统一异常体系

所有业务异常继承 RailPkgError，CLI 层据此输出友好提示并返回非零退出码。
未满足的依赖、无法判断的路径分类都是正常结果，不走异常。
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from railpkg.core.pkg.pruner import PruneOutcome


class RailPkgError(Exception):
    """基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(RailPkgError):
    """配置文件内容无效"""

    code = "CONFIG_ERROR"


class DatabaseError(RailPkgError):
    """包数据库或包清单内容无效"""

    code = "DATABASE_ERROR"


class PruneError(RailPkgError):
    """清理空目录时删除失败

    outcomes 保存出错前已完成的处理记录（最后一条为失败记录），
    便于调用方展示部分进度后决定中止还是继续。
    """

    code = "PRUNE_ERROR"

    def __init__(
        self,
        message: str,
        path: Path,
        outcomes: list[PruneOutcome] | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.outcomes = outcomes or []
