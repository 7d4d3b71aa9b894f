"""pytest 插件：提供 `http_mocks` 夹具。

夹具产出进程级注册表，测试结束后无论成功与否都会清空，
避免模拟状态泄漏到后续测试。若设置了环境变量 `REQMOCK_MANIFEST`，
则在产出前加载该清单。
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator

import pytest

from .config_loader import load_into
from .registry import MockRegistry, default_registry

MANIFEST_ENV = "REQMOCK_MANIFEST"


@pytest.fixture
def http_mocks() -> Iterator[MockRegistry]:
    """产出进程级注册表并在拆卸时清空。

    返回值:
        MockRegistry: `reqmock.default_registry`。

    副作用:
        可能读取 `REQMOCK_MANIFEST` 指向的清单；拆卸时调用 `clear()`。
    """

    manifest = os.environ.get(MANIFEST_ENV)
    try:
        if manifest:
            load_into(Path(manifest), default_registry)
        yield default_registry
    finally:
        default_registry.clear()
