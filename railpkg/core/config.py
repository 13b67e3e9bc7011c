"""集中配置管理

从 YAML 文件加载，未知键放入 extra。配置只保存路径和行为参数，
已安装包库始终由调用方显式创建并传递，不放在全局配置中。
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path

from railpkg.core.exceptions import ConfigError
from railpkg.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """全局配置"""

    # 目录
    database_file: str = "data/packages.yml"
    # 内容安装根目录，prune 命令默认清理这里
    install_root: str = "content"

    # 路径分类器补全目录时使用的分隔符，与压缩包记录的约定一致
    path_separator: str = "\\"

    # 清理空目录时视为残留的文件名（不区分大小写）
    debris_files: list[str] = field(default_factory=lambda: ["thumbs.db"])

    # 环境变量 RAILPKG_LOG_LEVEL 优先
    log_level: str = "WARNING"

    extra: dict = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str | Path = "configs/railpkg.yml") -> Config:
        """从 YAML 文件加载配置，文件不存在则返回默认值"""
        data = load_yaml(path)
        if not data:
            return cls()
        known = {f for f in cls.__dataclass_fields__ if f != "extra"}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}

        if "debris_files" in matched and not isinstance(matched["debris_files"], list):
            raise ConfigError(f"{path}: debris_files 必须是列表")
        if matched.get("path_separator", "\\") not in ("\\", "/"):
            raise ConfigError(f"{path}: path_separator 只能是 '\\\\' 或 '/'")
        level = matched.get("log_level", "WARNING")
        if not isinstance(level, str) or level.upper() not in _LOG_LEVELS:
            raise ConfigError(f"{path}: log_level 无效: {level!r}")

        cfg = cls(**matched)
        cfg.extra = extra
        return cfg

    def to_dict(self) -> dict:
        return asdict(self)


# 首次 import 时不读文件，由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str | Path = "configs/railpkg.yml") -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current
