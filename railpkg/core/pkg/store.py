"""已安装内容包库

按类别分为三个分区（线路 / 车辆 / 其他）。库对象由调用方创建并显式传入
解析器和服务层，不存在进程级的“当前数据库”。
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from railpkg.core.pkg.models import Category, PackageRecord

logger = logging.getLogger(__name__)


class InstalledPackageStore:
    """已安装内容包库，每个类别一个分区

    同一分区内 guid 应唯一，这由调用方保证，这里不做防御。
    """

    def __init__(
        self,
        routes: Iterable[PackageRecord] | None = None,
        trains: Iterable[PackageRecord] | None = None,
        other: Iterable[PackageRecord] | None = None,
    ) -> None:
        self._partitions: dict[Category, list[PackageRecord]] = {
            Category.ROUTE: list(routes or []),
            Category.TRAIN: list(trains or []),
            Category.OTHER: list(other or []),
        }

    @property
    def routes(self) -> list[PackageRecord]:
        return self._partitions[Category.ROUTE]

    @property
    def trains(self) -> list[PackageRecord]:
        return self._partitions[Category.TRAIN]

    @property
    def other(self) -> list[PackageRecord]:
        return self._partitions[Category.OTHER]

    def partition(self, category: Category) -> list[PackageRecord]:
        """返回指定类别的分区，分区不存在时返回空列表"""
        return self._partitions.get(category, [])

    def all_packages(self) -> Iterator[PackageRecord]:
        """按 线路 → 车辆 → 其他 的顺序遍历全部已安装包"""
        for category in Category:
            yield from self.partition(category)

    def find(self, guid: str, category: Category | None = None) -> PackageRecord | None:
        categories = [category] if category is not None else list(Category)
        for cat in categories:
            for pkg in self.partition(cat):
                if pkg.guid == guid:
                    return pkg
        return None

    def add(self, package: PackageRecord) -> None:
        """加入库；同类别中已有相同 guid 的记录会被替换（升级 / 重装）"""
        bucket = self._partitions.setdefault(package.category, [])
        for i, existing in enumerate(bucket):
            if existing.guid == package.guid:
                logger.info(
                    "替换已安装包: %s %s -> %s",
                    package.guid, existing.version, package.version,
                )
                bucket[i] = package
                return
        bucket.append(package)
        logger.info("已登记安装: %s", package.describe())

    def remove(self, guid: str, category: Category | None = None) -> PackageRecord | None:
        """从库中移除包，返回被移除的记录；不存在时返回 None"""
        categories = [category] if category is not None else list(Category)
        for cat in categories:
            bucket = self.partition(cat)
            for i, pkg in enumerate(bucket):
                if pkg.guid == guid:
                    del bucket[i]
                    logger.info("已登记卸载: %s", pkg.describe())
                    return pkg
        return None

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._partitions.values())
