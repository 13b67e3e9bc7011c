"""内容包服务 — 安装 / 卸载流程

安装: 路径分类（决定文件解压位置）→ 依赖检查 → 登记到已安装库
卸载: 卸载影响检查 → 从已安装库移除 → 清理留下的空目录

压缩包解压、文件复制和数据库保存由调用方完成，这里只负责决策和登记。
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from railpkg.core.pkg.classifier import ClassificationResult, PathClassifier, RootFolder
from railpkg.core.pkg.models import PackageFileRecord, PackageRecord
from railpkg.core.pkg.pruner import DirectoryPruner, format_report
from railpkg.core.pkg.resolver import DependencyResolver, InstallCheck
from railpkg.core.pkg.store import InstalledPackageStore

logger = logging.getLogger(__name__)


@dataclass
class InstallPlan:
    """安装前的决策结果"""

    package: PackageRecord
    classification: ClassificationResult
    check: InstallCheck

    @property
    def files(self) -> list[PackageFileRecord]:
        return self.classification.files

    @property
    def root_folder(self) -> RootFolder | None:
        """文件的安装根目录，无法判断时为 None"""
        return self.classification.folder

    @property
    def installable(self) -> bool:
        return self.check.installable


class PackageService:
    """安装 / 卸载流程编排

    store 由调用方创建并持有，服务只在 commit_* 中修改它。
    """

    def __init__(
        self,
        store: InstalledPackageStore,
        classifier: PathClassifier | None = None,
        pruner: DirectoryPruner | None = None,
    ) -> None:
        if classifier is None or pruner is None:
            from railpkg.core.config import get_config
            cfg = get_config()
            classifier = classifier or PathClassifier(sep=cfg.path_separator)
            pruner = pruner or DirectoryPruner(debris_files=cfg.debris_files)
        self.store = store
        self.classifier = classifier
        self.pruner = pruner
        self.resolver = DependencyResolver(store)

    # ---- 安装 ----

    def prepare_install(
        self, package: PackageRecord, files: list[PackageFileRecord],
    ) -> InstallPlan:
        """分类文件路径并检查依赖，不修改已安装库"""
        classification = self.classifier.classify_detailed(files)
        check = self.resolver.check_package(package)
        if not classification.conclusive:
            logger.warning("%s: 无法判断安装根目录，需要调用方指定", package.guid)
        if not check.installable:
            logger.warning(
                "%s: 缺少 %d 个依赖，不能安装", package.guid, len(check.unmet_dependencies),
            )
        return InstallPlan(package=package, classification=classification, check=check)

    def commit_install(self, package: PackageRecord) -> None:
        """将包登记为已安装（同类别同 guid 的旧记录会被替换）"""
        self.store.add(package)

    # ---- 卸载 ----

    def prepare_uninstall(self, packages: Iterable[PackageRecord]) -> list[PackageRecord]:
        """返回卸载后依赖会失效的已安装包"""
        return self.resolver.check_removal_impact(packages)

    def commit_uninstall(
        self,
        packages: Iterable[PackageRecord],
        cleanup_root: str | Path | None = None,
    ) -> str:
        """从已安装库移除包，给定 cleanup_root 时清理空目录并返回报告。

        清理失败时 PruneError 直接抛给调用方，此时库中的记录已经移除。
        """
        for pkg in packages:
            if self.store.remove(pkg.guid, pkg.category) is None:
                logger.warning("未安装，跳过: %s", pkg.describe())
        if cleanup_root is None:
            return ""
        return format_report(self.pruner.prune(cleanup_root, keep_root=True))
