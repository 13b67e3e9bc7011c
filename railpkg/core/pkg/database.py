"""包数据库 YAML 读写

数据库文件格式:

    routes:
      - guid: 5c1a...
        name: Foo Line
        version: 1.2.0
        dependencies:
          - guid: 9e0b...
            type: train
            minimum: 1.0
            maximum: 2.0
        recommendations: []
    trains: []
    other: []

单个包清单格式与数据库中的条目相同，另加 type 字段指明类别。
YAML 会把 1.10 读成浮点数 1.1，版本号应加引号。
数据库读取失败时返回空库而不是抛异常，与首次运行时没有数据库文件的行为一致。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from railpkg.core.exceptions import DatabaseError
from railpkg.core.pkg.models import (
    Category,
    DependencyRequirement,
    PackageRecord,
    VersionRange,
    parse_version,
)
from railpkg.core.pkg.store import InstalledPackageStore
from railpkg.utils.yaml_io import load_yaml, save_yaml

logger = logging.getLogger(__name__)

SECTIONS: dict[Category, str] = {
    Category.ROUTE: "routes",
    Category.TRAIN: "trains",
    Category.OTHER: "other",
}


# =========================================================================
# 解析
# =========================================================================


def _parse_category(value: Any, where: str) -> Category:
    try:
        return Category.parse(value)
    except ValueError as e:
        raise DatabaseError(f"{where}: {e}") from e


def parse_requirement(data: dict[str, Any], where: str = "") -> DependencyRequirement:
    """解析单条依赖 / 推荐声明，缺少 guid 或 type 时抛出 DatabaseError"""
    if not isinstance(data, dict):
        raise DatabaseError(f"{where}: 依赖声明必须是映射")
    guid = str(data.get("guid") or "").strip()
    if not guid:
        raise DatabaseError(f"{where}: 依赖声明缺少 guid")
    if "type" not in data:
        raise DatabaseError(f"{where}: 依赖 {guid} 缺少 type")
    return DependencyRequirement(
        guid=guid,
        category=_parse_category(data["type"], where),
        version_range=VersionRange(
            minimum=parse_version(data.get("minimum")),
            maximum=parse_version(data.get("maximum")),
        ),
        name=str(data.get("name") or ""),
    )


def _list_field(data: dict[str, Any], key: str, where: str) -> list[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise DatabaseError(f"{where}: {key} 必须是列表")
    return value


def parse_package(
    data: dict[str, Any],
    category: Category | None = None,
    where: str = "",
) -> PackageRecord:
    """解析单个包条目；category 为 None 时从 type 字段读取"""
    if not isinstance(data, dict):
        raise DatabaseError(f"{where}: 包条目必须是映射")
    guid = str(data.get("guid") or "").strip()
    if not guid:
        raise DatabaseError(f"{where}: 包条目缺少 guid")
    if category is None:
        if "type" not in data:
            raise DatabaseError(f"{where}: 包 {guid} 缺少 type")
        category = _parse_category(data["type"], where)

    where = f"{where} {guid}".strip()
    return PackageRecord(
        guid=guid,
        version=parse_version(data.get("version")),
        category=category,
        name=str(data.get("name") or ""),
        author=str(data.get("author") or ""),
        description=str(data.get("description") or ""),
        dependencies=[
            parse_requirement(d, where) for d in _list_field(data, "dependencies", where)
        ],
        recommendations=[
            parse_requirement(d, where) for d in _list_field(data, "recommendations", where)
        ],
    )


def _requirement_to_dict(req: DependencyRequirement) -> dict[str, Any]:
    entry: dict[str, Any] = {"guid": req.guid, "type": req.category.value}
    if req.name:
        entry["name"] = req.name
    if req.version_range.minimum is not None:
        entry["minimum"] = str(req.version_range.minimum)
    if req.version_range.maximum is not None:
        entry["maximum"] = str(req.version_range.maximum)
    return entry


def package_to_dict(pkg: PackageRecord) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "guid": pkg.guid,
        "name": pkg.name,
        "version": str(pkg.version) if pkg.version is not None else "",
    }
    if pkg.author:
        entry["author"] = pkg.author
    if pkg.description:
        entry["description"] = pkg.description
    entry["dependencies"] = [_requirement_to_dict(d) for d in pkg.dependencies]
    entry["recommendations"] = [_requirement_to_dict(r) for r in pkg.recommendations]
    return entry


# =========================================================================
# 读写
# =========================================================================


def load_database(path: str | Path) -> tuple[InstalledPackageStore, bool]:
    """加载包数据库，返回 (库, 是否成功读取)。

    文件不存在或内容损坏时返回空库和 False。
    """
    p = Path(path)
    if not p.exists():
        logger.info("包数据库不存在，使用空库: %s", p)
        return InstalledPackageStore(), False

    try:
        data = load_yaml(p)
        sections = {
            category: [
                parse_package(entry, category, where=f"{p}:{key}")
                for entry in _list_field(data, key, str(p))
            ]
            for category, key in SECTIONS.items()
        }
    except (yaml.YAMLError, OSError, ValueError, DatabaseError) as e:
        logger.warning("包数据库读取失败，使用空库: %s (%s)", p, e)
        return InstalledPackageStore(), False

    store = InstalledPackageStore(
        routes=sections[Category.ROUTE],
        trains=sections[Category.TRAIN],
        other=sections[Category.OTHER],
    )
    logger.info("已加载包数据库: %s (%d 个包)", p, len(store))
    return store, True


def save_database(store: InstalledPackageStore, path: str | Path) -> bool:
    """保存包数据库，写入失败时返回 False"""
    data = {
        key: [package_to_dict(pkg) for pkg in store.partition(category)]
        for category, key in SECTIONS.items()
    }
    try:
        save_yaml(path, data)
    except (yaml.YAMLError, OSError):
        logger.exception("包数据库保存失败: %s", path)
        return False
    return True


def load_package_manifest(path: str | Path) -> PackageRecord:
    """读取单个包的清单文件"""
    p = Path(path)
    if not p.exists():
        raise DatabaseError(f"包清单不存在: {p}")
    try:
        data = load_yaml(p)
    except (yaml.YAMLError, ValueError) as e:
        raise DatabaseError(f"包清单格式错误: {p}: {e}") from e
    if not data:
        raise DatabaseError(f"包清单为空: {p}")
    return parse_package(data, where=str(p))
