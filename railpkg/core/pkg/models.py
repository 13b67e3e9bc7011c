"""内容包数据模型

数据类:
- Category: 包类别（线路 / 车辆 / 其他），同时也是已安装库的分区键
- VersionRange: 闭区间版本范围，上下界均可缺省
- DependencyRequirement: 依赖/推荐声明
- PackageRecord: 单个内容包的元信息
- PackageFileRecord: 压缩包内单个文件的相对路径 / 绝对路径对
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from packaging.version import InvalidVersion, Version

logger = logging.getLogger(__name__)


class Category(str, Enum):
    """内容包类别"""

    ROUTE = "route"
    TRAIN = "train"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str | Category) -> Category:
        """大小写不敏感地解析类别名，未知类别抛出 ValueError"""
        if isinstance(value, Category):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"未知的包类别: {value!r}，可用: {[c.value for c in cls]}"
            ) from None


def parse_version(value: Any) -> Version | None:
    """解析版本号，无法解析时返回 None 而不是抛出异常。

    YAML 会把 1.0 之类的版本读成浮点数，这里统一先转成字符串。
    """
    if value is None or value == "":
        return None
    if isinstance(value, Version):
        return value
    try:
        return Version(str(value).strip())
    except InvalidVersion:
        logger.debug("无法解析的版本号: %r", value)
        return None


@dataclass(frozen=True)
class VersionRange:
    """闭区间版本范围 [minimum, maximum]，缺省的一端视为无界"""

    minimum: Version | None = None
    maximum: Version | None = None

    @classmethod
    def exact(cls, version: Version) -> VersionRange:
        return cls(minimum=version, maximum=version)

    @property
    def unbounded(self) -> bool:
        return self.minimum is None and self.maximum is None

    def contains(self, version: Version | None) -> bool:
        """判断版本是否落在范围内（两端均包含）。

        版本缺失或无法解析时，只有无界范围才视为满足。
        """
        if self.unbounded:
            return True
        if version is None:
            return False
        if self.minimum is not None and self.minimum > version:
            return False
        if self.maximum is not None and self.maximum < version:
            return False
        return True

    def __str__(self) -> str:
        if self.unbounded:
            return "*"
        if self.minimum is not None and self.minimum == self.maximum:
            return f"=={self.minimum}"
        parts = []
        if self.minimum is not None:
            parts.append(f">={self.minimum}")
        if self.maximum is not None:
            parts.append(f"<={self.maximum}")
        return ",".join(parts)


@dataclass(frozen=True)
class DependencyRequirement:
    """依赖声明: 类别为 category 的包 guid 必须已安装且版本在 version_range 内"""

    guid: str
    category: Category
    version_range: VersionRange = field(default_factory=VersionRange)
    name: str = ""  # 仅用于展示

    def describe(self) -> str:
        label = self.name or self.guid
        return f"{label} [{self.category.value}] {self.version_range}"


@dataclass
class PackageRecord:
    """单个内容包的元信息

    guid 是唯一的身份标识，匹配时只比较 guid，名称等字段仅用于展示。
    """

    guid: str
    version: Version | None
    category: Category
    name: str = ""
    author: str = ""
    description: str = ""
    dependencies: list[DependencyRequirement] = field(default_factory=list)
    recommendations: list[DependencyRequirement] = field(default_factory=list)

    def describe(self) -> str:
        label = self.name or self.guid
        return f"{label} {self.version or '?'} [{self.category.value}]"


@dataclass
class PackageFileRecord:
    """压缩包中的单个文件

    relative_path 会被路径分类器原地改写，absolute_path 保持不变。
    """

    relative_path: str
    absolute_path: str
