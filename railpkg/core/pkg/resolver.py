"""依赖解析器

职责:
- 检查一组依赖 / 推荐声明是否已被已安装的包满足
- 检查卸载一批包会导致哪些已安装包的依赖失效

单次线性扫描，不做回溯求解；只区分“已安装 / 未安装”两种状态。
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from railpkg.core.pkg.models import DependencyRequirement, PackageRecord
from railpkg.core.pkg.store import InstalledPackageStore

logger = logging.getLogger(__name__)


@dataclass
class InstallCheck:
    """单个包的安装前检查结果"""

    package: PackageRecord
    unmet_dependencies: list[DependencyRequirement] = field(default_factory=list)
    unmet_recommendations: list[DependencyRequirement] = field(default_factory=list)

    @property
    def installable(self) -> bool:
        """推荐项缺失只提示，不阻止安装"""
        return not self.unmet_dependencies


class DependencyResolver:
    """依赖解析器 - 只读访问传入的已安装库"""

    def __init__(self, store: InstalledPackageStore) -> None:
        self.store = store

    def requirement_met(self, requirement: DependencyRequirement) -> bool:
        """对应类别分区中存在 guid 相同且版本在范围内的包即视为满足"""
        for pkg in self.store.partition(requirement.category):
            if pkg.guid == requirement.guid and requirement.version_range.contains(pkg.version):
                return True
        return False

    def check_requirements(
        self, requirements: Iterable[DependencyRequirement],
    ) -> list[DependencyRequirement]:
        """返回未满足的声明（保持原有相对顺序），全部满足时返回空列表。

        不修改传入的列表。
        """
        unmet = [r for r in requirements if not self.requirement_met(r)]
        if unmet:
            logger.info(
                "未满足的依赖: %s", ", ".join(r.describe() for r in unmet),
            )
        return unmet

    def check_package(self, package: PackageRecord) -> InstallCheck:
        """同时检查包的依赖和推荐项"""
        check = InstallCheck(
            package=package,
            unmet_dependencies=self.check_requirements(package.dependencies),
            unmet_recommendations=self.check_requirements(package.recommendations),
        )
        logger.debug(
            "安装检查 %s: 缺少依赖 %d 个, 缺少推荐 %d 个",
            package.guid,
            len(check.unmet_dependencies),
            len(check.unmet_recommendations),
        )
        return check

    def check_removal_impact(
        self, packages_to_remove: Iterable[PackageRecord],
    ) -> list[PackageRecord]:
        """返回卸载后依赖会失效的已安装包。

        遍历全部三个分区；同一个包即使有多条依赖指向被卸载的包也只报告一次。
        """
        removed = {pkg.guid for pkg in packages_to_remove}
        if not removed:
            return []

        broken: list[PackageRecord] = []
        seen: set[tuple[str, str]] = set()
        for pkg in self.store.all_packages():
            key = (pkg.category.value, pkg.guid)
            if key in seen:
                continue
            if any(dep.guid in removed for dep in pkg.dependencies):
                seen.add(key)
                broken.append(pkg)

        if broken:
            logger.warning(
                "卸载将破坏 %d 个已安装包的依赖: %s",
                len(broken), ", ".join(p.describe() for p in broken),
            )
        return broken
