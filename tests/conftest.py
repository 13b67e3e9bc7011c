"""公共测试夹具"""

from __future__ import annotations

import pytest

import railpkg.core.config as cfgmod


@pytest.fixture(autouse=True)
def _reset_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """每个测试使用独立的默认配置，避免全局单例串扰"""
    monkeypatch.setattr(cfgmod, "_current", None)
