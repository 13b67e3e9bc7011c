"""内容包元数据管理

- models.py: 数据模型（类别、版本范围、包记录、文件记录）
- store.py: 已安装包库
- database.py: 包数据库 / 包清单的 YAML 读写
- resolver.py: 依赖检查与卸载影响检查
- classifier.py: 压缩包路径分类
- pruner.py: 卸载后的空目录清理
"""

from railpkg.core.pkg.classifier import ClassificationResult, PathClassifier, RootFolder
from railpkg.core.pkg.models import (
    Category,
    DependencyRequirement,
    PackageFileRecord,
    PackageRecord,
    VersionRange,
    parse_version,
)
from railpkg.core.pkg.pruner import DirectoryPruner, PruneAction, PruneOutcome, format_report
from railpkg.core.pkg.resolver import DependencyResolver, InstallCheck
from railpkg.core.pkg.store import InstalledPackageStore

__all__ = [
    "Category",
    "ClassificationResult",
    "DependencyRequirement",
    "DependencyResolver",
    "DirectoryPruner",
    "InstallCheck",
    "InstalledPackageStore",
    "PackageFileRecord",
    "PackageRecord",
    "PathClassifier",
    "PruneAction",
    "PruneOutcome",
    "RootFolder",
    "VersionRange",
    "format_report",
    "parse_version",
]
