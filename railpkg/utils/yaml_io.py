"""YAML 读写工具

包数据库、包清单、配置文件统一经由这里读写:
读取时对缺失文件和空文件返回空字典，写入时先写临时文件再替换，
避免写到一半崩溃导致数据库损坏。
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# 包数据库通常只有几百条记录，超过该大小视为异常文件
MAX_YAML_SIZE = 10 * 1024 * 1024


def atomic_write(path: Path, content: str) -> None:
    """在目标文件同目录写临时文件，再用 os.replace 替换目标文件"""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp, str(path))
    except Exception:
        Path(tmp).unlink(missing_ok=True)
        raise


def load_yaml(path: str | Path) -> dict[str, Any]:
    """读取 YAML 映射。

    文件不存在、为空或顶层不是映射时返回空字典；
    格式错误、读取失败、文件过大时抛出异常，由调用方决定如何处理。
    """
    p = Path(path)
    if not p.exists():
        return {}

    size = p.stat().st_size
    if size > MAX_YAML_SIZE:
        raise ValueError(f"YAML 文件过大: {p} ({size} 字节，上限 {MAX_YAML_SIZE})")

    with open(p, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("%s 顶层不是映射 (%s)，按空内容处理", p, type(data).__name__)
        return {}
    return data


def save_yaml(path: str | Path, data: Any) -> None:
    """原子写入 YAML，保持键顺序"""
    content = yaml.safe_dump(
        data, default_flow_style=False, allow_unicode=True, sort_keys=False,
    )
    atomic_write(Path(path), content)
    logger.debug("已写入: %s", path)
