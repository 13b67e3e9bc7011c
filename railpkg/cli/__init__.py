"""railpkg 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

import os

import click
import yaml

from railpkg import __version__
from railpkg.core.config import init_config
from railpkg.core.exceptions import ConfigError
from railpkg.utils.logger import setup_logging


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config", "-c", "config_path", default="configs/railpkg.yml",
    help="配置文件路径（不存在时使用默认配置）",
)
def main(config_path: str) -> None:
    """railpkg - 轨道模拟内容包管理"""
    try:
        cfg = init_config(config_path)
    except (ConfigError, yaml.YAMLError) as e:
        raise click.ClickException(f"配置文件无效: {e}") from e
    setup_logging(
        level=os.getenv("RAILPKG_LOG_LEVEL") or cfg.log_level,
        json_output=os.getenv("RAILPKG_LOG_JSON", "") == "1",
    )


# 注册各领域子命令
from railpkg.cli.cmd_pkg import register as _reg_pkg  # noqa: E402

_reg_pkg(main)
