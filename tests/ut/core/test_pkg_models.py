"""内容包数据模型与已安装包库测试"""

from __future__ import annotations

import pytest
from packaging.version import Version

from railpkg.core.pkg.models import (
    Category,
    DependencyRequirement,
    PackageRecord,
    VersionRange,
    parse_version,
)
from railpkg.core.pkg.store import InstalledPackageStore


def _pkg(guid: str, version: str, category: Category = Category.ROUTE) -> PackageRecord:
    return PackageRecord(guid=guid, version=Version(version), category=category)


class TestParseVersion:
    @pytest.mark.parametrize(("raw", "expected"), [
        ("1.2.3", Version("1.2.3")),
        (" 2.0 ", Version("2.0")),
        (1.5, Version("1.5")),
        (3, Version("3")),
        (Version("4.1"), Version("4.1")),
    ])
    def test_valid(self, raw: object, expected: Version) -> None:
        assert parse_version(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "not a version", "1..2"])
    def test_invalid_returns_none(self, raw: object) -> None:
        assert parse_version(raw) is None


class TestCategory:
    @pytest.mark.parametrize("raw", ["route", "Route", " ROUTE "])
    def test_parse_case_insensitive(self, raw: str) -> None:
        assert Category.parse(raw) is Category.ROUTE

    def test_parse_unknown_raises(self) -> None:
        with pytest.raises(ValueError, match="未知的包类别"):
            Category.parse("tram")


class TestVersionRange:
    def test_unbounded_accepts_anything(self) -> None:
        r = VersionRange()
        assert r.contains(Version("0.1"))
        assert r.contains(None)
        assert str(r) == "*"

    @pytest.mark.parametrize(("version", "expected"), [
        ("0.9", False), ("1.0", True), ("1.5", True), ("2.0", True), ("2.0.1", False),
    ])
    def test_inclusive_bounds(self, version: str, expected: bool) -> None:
        r = VersionRange(minimum=Version("1.0"), maximum=Version("2.0"))
        assert r.contains(Version(version)) is expected

    def test_only_minimum(self) -> None:
        r = VersionRange(minimum=Version("1.0"))
        assert r.contains(Version("99"))
        assert not r.contains(Version("0.5"))
        assert str(r) == ">=1.0"

    def test_only_maximum(self) -> None:
        r = VersionRange(maximum=Version("1.0"))
        assert r.contains(Version("0.1"))
        assert not r.contains(Version("1.0.1"))

    def test_exact(self) -> None:
        r = VersionRange.exact(Version("1.2"))
        assert r.contains(Version("1.2"))
        assert r.contains(Version("1.2.0"))
        assert not r.contains(Version("1.2.1"))
        assert not r.contains(Version("1.1.9"))
        assert str(r) == "==1.2"

    def test_bounded_rejects_missing_version(self) -> None:
        assert not VersionRange(minimum=Version("1.0")).contains(None)


class TestDescribe:
    def test_requirement_prefers_name(self) -> None:
        req = DependencyRequirement("g1", Category.TRAIN, VersionRange(minimum=Version("1")), name="EMU")
        assert req.describe() == "EMU [train] >=1"

    def test_package_without_version(self) -> None:
        pkg = PackageRecord(guid="g1", version=None, category=Category.OTHER)
        assert pkg.describe() == "g1 ? [other]"


class TestInstalledPackageStore:
    def test_partitions(self) -> None:
        store = InstalledPackageStore(
            routes=[_pkg("r1", "1.0")],
            trains=[_pkg("t1", "1.0", Category.TRAIN)],
        )
        assert [p.guid for p in store.routes] == ["r1"]
        assert [p.guid for p in store.trains] == ["t1"]
        assert store.other == []
        assert len(store) == 2

    def test_all_packages_order(self) -> None:
        store = InstalledPackageStore(
            routes=[_pkg("r1", "1.0")],
            trains=[_pkg("t1", "1.0", Category.TRAIN)],
            other=[_pkg("o1", "1.0", Category.OTHER)],
        )
        assert [p.guid for p in store.all_packages()] == ["r1", "t1", "o1"]

    def test_add_replaces_same_guid(self) -> None:
        store = InstalledPackageStore(routes=[_pkg("r1", "1.0")])
        store.add(_pkg("r1", "2.0"))
        assert len(store) == 1
        assert store.find("r1").version == Version("2.0")

    def test_add_same_guid_other_category_is_separate(self) -> None:
        store = InstalledPackageStore(routes=[_pkg("g", "1.0")])
        store.add(_pkg("g", "1.0", Category.OTHER))
        assert len(store) == 2

    def test_find_and_remove(self) -> None:
        store = InstalledPackageStore(trains=[_pkg("t1", "1.0", Category.TRAIN)])
        assert store.find("t1", Category.ROUTE) is None
        assert store.find("t1", Category.TRAIN) is not None

        removed = store.remove("t1")
        assert removed is not None and removed.guid == "t1"
        assert store.remove("t1") is None
        assert len(store) == 0

    def test_store_copies_caller_lists(self) -> None:
        routes = [_pkg("r1", "1.0")]
        store = InstalledPackageStore(routes=routes)
        store.remove("r1")
        assert len(routes) == 1
