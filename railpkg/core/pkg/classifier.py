"""压缩包路径分类器

根据压缩包内的文件列表判断内容应解压到哪个根目录，并原地改写每个文件的
相对路径。分三个阶段，每个阶段遇到第一个明确信号即停止:

  1. 显式目录标记: 相对路径以 Railway / Train / Route / Object / Sound 开头
  2. 绝对路径推断: 解压根目录（绝对路径去掉相对路径后缀）以上述目录名结尾
  3. 内容特征: 按扩展名 / 文件名统计声音、图片、物体、线路、车辆文件数量

三个阶段都无法判断时原样返回，由调用方决定默认位置或提示用户。
目录名和扩展名均不区分大小写，"\\" 与 "/" 视为同一种分隔符。
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from railpkg.core.pkg.models import PackageFileRecord

logger = logging.getLogger(__name__)

DEFAULT_SEPARATOR = "\\"
_SEPARATORS = ("\\", "/")


class RootFolder(str, Enum):
    """规范的安装根目录名"""

    RAILWAY = "Railway"
    TRAIN = "Train"
    ROUTE = "Route"
    OBJECT = "Object"
    SOUND = "Sound"


class Rewrite(str, Enum):
    """对相对路径的改写方式"""

    NONE = "none"      # 保持不变
    STRIP = "strip"    # 去掉开头的标记目录
    PREFIX = "prefix"  # 在开头补上标记目录


@dataclass(frozen=True)
class MarkerRule:
    """目录标记规则

    explicit: 相对路径以该目录开头时（阶段 1）的改写方式
    inferred: 解压根目录以该目录结尾时（阶段 2）的改写方式
    """

    folder: RootFolder
    explicit: Rewrite
    inferred: Rewrite


# Railway / Train 是解压根目录本身；Route / Object / Sound 位于 Railway 之下
MARKER_RULES: tuple[MarkerRule, ...] = (
    MarkerRule(RootFolder.RAILWAY, explicit=Rewrite.STRIP, inferred=Rewrite.NONE),
    MarkerRule(RootFolder.TRAIN, explicit=Rewrite.STRIP, inferred=Rewrite.NONE),
    MarkerRule(RootFolder.ROUTE, explicit=Rewrite.NONE, inferred=Rewrite.PREFIX),
    MarkerRule(RootFolder.OBJECT, explicit=Rewrite.NONE, inferred=Rewrite.PREFIX),
    MarkerRule(RootFolder.SOUND, explicit=Rewrite.NONE, inferred=Rewrite.PREFIX),
)

# ---- 内容特征 ----

SOUND_EXTENSIONS = frozenset({".wav"})
IMAGE_EXTENSIONS = frozenset({".png", ".bmp", ".tiff", ".ace"})
OBJECT_EXTENSIONS = frozenset({".b3d", ".animated"})
# .csv 既可能是线路也可能是物体，统一按线路计数；.txt 常用于 include，同样按线路计数
ROUTE_EXTENSIONS = frozenset({".csv", ".rw", ".txt"})
TRAIN_FILES = frozenset({
    "train.dat", "panel.cfg", "panel2.cfg", "extensions.cfg", "ats.cfg", "train.txt",
})

# 经验阈值，调整前需要有真实压缩包样本支撑
ROUTE_MAX_IMAGES = 20
OBJECT_MIN_IMAGES = 20
OBJECT_FORCE_IMAGES = 200
OBJECT_MAX_TRAIN_FILES = 2
# 车辆目录要求车辆文件、图片、声音都多于该数量
TRAIN_MIN_COUNT = 2


@dataclass
class Signature:
    """阶段 3 的各类文件计数"""

    sounds: int = 0
    images: int = 0
    objects: int = 0
    routes: int = 0
    trains: int = 0


def _is_sound(s: Signature) -> bool:
    return s.sounds > 0 and s.objects == 0 and s.images == 0


def _is_route(s: Signature) -> bool:
    # 线路子目录中不应出现 b3d 物体，图片也应少于 20 张
    return s.routes > 0 and s.images < ROUTE_MAX_IMAGES and s.objects == 0


def _is_object(s: Signature) -> bool:
    # 图片超过 200 张时即使混有车辆文件，也按放错位置的线路物体目录处理
    return (
        (s.objects > 0 or s.routes > 0)
        and s.images > OBJECT_MIN_IMAGES
        and (s.trains < OBJECT_MAX_TRAIN_FILES or s.images > OBJECT_FORCE_IMAGES)
    )


def _is_train(s: Signature) -> bool:
    return (
        s.trains > TRAIN_MIN_COUNT
        and s.images > TRAIN_MIN_COUNT
        and s.sounds > TRAIN_MIN_COUNT
    )


SIGNATURE_RULES: tuple[tuple[Callable[[Signature], bool], RootFolder], ...] = (
    (_is_sound, RootFolder.SOUND),
    (_is_route, RootFolder.ROUTE),
    (_is_object, RootFolder.OBJECT),
    (_is_train, RootFolder.TRAIN),
)


@dataclass
class ClassificationResult:
    """分类结果

    phase 为做出判断的阶段 (1 / 2 / 3)，无法判断时为 None。
    """

    files: list[PackageFileRecord]
    phase: int | None = None
    folder: RootFolder | None = None
    rewrite: Rewrite = Rewrite.NONE

    @property
    def conclusive(self) -> bool:
        return self.phase is not None


# =========================================================================
# 路径工具
# =========================================================================


def _normalize(path: str) -> str:
    return path.replace("\\", "/")


def _segments(path: str) -> list[str]:
    return [p for p in _normalize(path).split("/") if p]


def _first_segment(path: str) -> str:
    parts = _segments(path)
    return parts[0] if parts else ""


def _last_segment(path: str) -> str:
    parts = _segments(path)
    return parts[-1] if parts else ""


def extraction_root(record: PackageFileRecord) -> str:
    """绝对路径去掉相对路径后缀后剩下的部分，即压缩包的解压根目录"""
    absolute = _normalize(record.absolute_path)
    relative = _normalize(record.relative_path)
    if relative and absolute.lower().endswith(relative.lower()):
        absolute = absolute[: len(absolute) - len(relative)]
    return absolute.rstrip("/")


def strip_marker(path: str, folder: RootFolder) -> str:
    """去掉开头的标记目录，保留其后的分隔符: \\Railway\\x -> \\x"""
    if _first_segment(path).lower() != folder.value.lower():
        return path
    lead = len(path) - len(path.lstrip("\\/"))
    return path[lead + len(folder.value):]


def prefix_marker(path: str, folder: RootFolder, sep: str = DEFAULT_SEPARATOR) -> str:
    """在开头补上标记目录: \\x -> \\Route\\x，连接处统一使用 sep"""
    return f"{sep}{folder.value}{sep}{path.lstrip(''.join(_SEPARATORS))}"


# =========================================================================
# 分类器
# =========================================================================


class PathClassifier:
    """压缩包路径分类器

    sep 为补全目录时使用的分隔符，与压缩包记录的路径约定保持一致。
    """

    def __init__(self, sep: str = DEFAULT_SEPARATOR) -> None:
        if sep not in _SEPARATORS:
            raise ValueError(f"不支持的路径分隔符: {sep!r}")
        self.sep = sep

    def classify(self, files: list[PackageFileRecord]) -> list[PackageFileRecord]:
        """原地改写 files 中的相对路径并返回同一个列表"""
        return self.classify_detailed(files).files

    def classify_detailed(self, files: list[PackageFileRecord]) -> ClassificationResult:
        for phase in (self._explicit_markers, self._inferred_root, self._content_signature):
            result = phase(files)
            if result is not None:
                logger.info(
                    "路径分类: 阶段 %d -> %s (%s, %d 个文件)",
                    result.phase, result.folder.value if result.folder else "-",
                    result.rewrite.value, len(files),
                )
                return result
        logger.info("路径分类: 无法判断根目录，保持原路径 (%d 个文件)", len(files))
        return ClassificationResult(files=files)

    def signature(self, files: list[PackageFileRecord]) -> Signature:
        """统计各类文件数量；每个文件只计入一类"""
        sig = Signature()
        for record in files:
            name = _last_segment(record.relative_path).lower()
            ext = name[name.rfind("."):] if "." in name else ""
            if ext in SOUND_EXTENSIONS:
                sig.sounds += 1
            elif ext in IMAGE_EXTENSIONS:
                sig.images += 1
            elif ext in OBJECT_EXTENSIONS:
                sig.objects += 1
            elif name in TRAIN_FILES:
                sig.trains += 1
            elif ext in ROUTE_EXTENSIONS:
                sig.routes += 1
        return sig

    # ---- 阶段 1 ----

    def _explicit_markers(self, files: list[PackageFileRecord]) -> ClassificationResult | None:
        for record in files:
            head = _first_segment(record.relative_path).lower()
            for rule in MARKER_RULES:
                if head != rule.folder.value.lower():
                    continue
                # 只看第一个带标记的文件，后续文件的冲突标记忽略
                self._apply(files, rule.folder, rule.explicit)
                return ClassificationResult(
                    files=files, phase=1, folder=rule.folder, rewrite=rule.explicit,
                )
        return None

    # ---- 阶段 2 ----

    def _inferred_root(self, files: list[PackageFileRecord]) -> ClassificationResult | None:
        for record in files:
            # 按后缀匹配: .../MyRoute 同样视为 Route
            remainder = extraction_root(record).lower()
            for rule in MARKER_RULES:
                if not remainder.endswith(rule.folder.value.lower()):
                    continue
                self._apply(files, rule.folder, rule.inferred)
                return ClassificationResult(
                    files=files, phase=2, folder=rule.folder, rewrite=rule.inferred,
                )
        return None

    # ---- 阶段 3 ----

    def _content_signature(self, files: list[PackageFileRecord]) -> ClassificationResult | None:
        sig = self.signature(files)
        logger.debug("内容特征: %s", sig)
        for matches, folder in SIGNATURE_RULES:
            if matches(sig):
                self._apply(files, folder, Rewrite.PREFIX)
                return ClassificationResult(
                    files=files, phase=3, folder=folder, rewrite=Rewrite.PREFIX,
                )
        return None

    def _apply(self, files: list[PackageFileRecord], folder: RootFolder, rewrite: Rewrite) -> None:
        if rewrite is Rewrite.STRIP:
            for record in files:
                record.relative_path = strip_marker(record.relative_path, folder)
        elif rewrite is Rewrite.PREFIX:
            for record in files:
                record.relative_path = prefix_marker(record.relative_path, folder, self.sep)
