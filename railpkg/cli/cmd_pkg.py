"""CLI — 内容包命令: 依赖检查、卸载影响、路径分类、空目录清理"""

from __future__ import annotations

from pathlib import Path

import click

from railpkg.core.config import get_config
from railpkg.core.exceptions import PruneError, RailPkgError
from railpkg.core.pkg.classifier import PathClassifier
from railpkg.core.pkg.database import load_database, load_package_manifest
from railpkg.core.pkg.models import Category, PackageFileRecord
from railpkg.core.pkg.pruner import DirectoryPruner, format_report
from railpkg.core.pkg.resolver import DependencyResolver
from railpkg.core.pkg.store import InstalledPackageStore


def register(group: click.Group) -> None:
    group.add_command(check_deps)
    group.add_command(check_removal)
    group.add_command(list_packages)
    group.add_command(classify)
    group.add_command(prune)


def _load_store(database: str | None) -> InstalledPackageStore:
    path = database or get_config().database_file
    store, loaded = load_database(path)
    if not loaded:
        click.echo(f"包数据库不存在或无法读取，按空库处理: {path}", err=True)
    return store


def _collect_files(directory: Path, sep: str) -> list[PackageFileRecord]:
    """把解压目录中的文件转换为 (相对路径, 绝对路径) 记录"""
    records = []
    for path in sorted(p for p in directory.rglob("*") if p.is_file()):
        rel = path.relative_to(directory)
        records.append(PackageFileRecord(
            relative_path=sep + sep.join(rel.parts),
            absolute_path=str(path.resolve()),
        ))
    return records


@click.command(name="check-deps")
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False))
@click.option("--database", default=None, help="包数据库路径（默认取配置）")
def check_deps(manifest: str, database: str | None) -> None:
    """检查包清单声明的依赖和推荐项是否已安装"""
    try:
        package = load_package_manifest(manifest)
    except RailPkgError as e:
        raise click.ClickException(str(e)) from e

    check = DependencyResolver(_load_store(database)).check_package(package)
    for req in check.unmet_dependencies:
        click.echo(f"  缺少依赖: {req.describe()}")
    for req in check.unmet_recommendations:
        click.echo(f"  缺少推荐: {req.describe()}")

    if not check.installable:
        click.echo(f"{package.describe()}: 依赖未满足，不能安装")
        click.get_current_context().exit(1)
    click.echo(f"{package.describe()}: 依赖已满足")


@click.command(name="check-removal")
@click.argument("guids", nargs=-1, required=True)
@click.option("--database", default=None, help="包数据库路径（默认取配置）")
def check_removal(guids: tuple[str, ...], database: str | None) -> None:
    """检查卸载指定包会破坏哪些已安装包的依赖"""
    store = _load_store(database)
    targets = []
    for guid in guids:
        pkg = store.find(guid)
        if pkg is None:
            click.echo(f"  未安装，忽略: {guid}", err=True)
            continue
        targets.append(pkg)

    broken = DependencyResolver(store).check_removal_impact(targets)
    if not broken:
        click.echo("卸载不会影响其他已安装包。")
        return
    click.echo(f"卸载将破坏 {len(broken)} 个包的依赖:")
    for pkg in broken:
        click.echo(f"  {pkg.describe()}")


@click.command(name="list")
@click.option("--database", default=None, help="包数据库路径（默认取配置）")
def list_packages(database: str | None) -> None:
    """按类别列出已安装的包"""
    store = _load_store(database)
    if not len(store):
        click.echo("没有已安装的包。")
        return
    for category in Category:
        bucket = store.partition(category)
        if not bucket:
            continue
        click.echo(f"[{category.value}]")
        for pkg in bucket:
            click.echo(f"  {pkg.guid:38s} {str(pkg.version or '?'):12s} {pkg.name}")


@click.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.option("--separator", default=None, type=click.Choice(["\\", "/"]),
              help="相对路径分隔符（默认取配置）")
def classify(directory: str, separator: str | None) -> None:
    """判断解压目录的安装根目录，输出改写后的相对路径"""
    sep = separator or get_config().path_separator
    files = _collect_files(Path(directory), sep)
    result = PathClassifier(sep=sep).classify_detailed(files)

    if result.conclusive:
        click.echo(
            f"根目录: {result.folder.value} "
            f"(阶段 {result.phase}, {result.rewrite.value})"
        )
    else:
        click.echo("无法判断根目录，保持原路径")
    for record in result.files:
        click.echo(f"  {record.relative_path}")


@click.command()
@click.argument("root", required=False, type=click.Path(file_okay=False))
@click.option("--keep-root", is_flag=True, help="保留根目录本身")
def prune(root: str | None, keep_root: bool) -> None:
    """删除卸载后留下的空目录"""
    cfg = get_config()
    pruner = DirectoryPruner(debris_files=cfg.debris_files)
    try:
        outcomes = pruner.prune(root or cfg.install_root, keep_root=keep_root)
    except PruneError as e:
        click.echo(format_report(e.outcomes), nl=False)
        raise click.ClickException(str(e)) from e

    report = format_report(outcomes)
    click.echo(report or "没有需要删除的空目录。", nl=not report)
