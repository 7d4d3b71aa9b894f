"""测试全局配置。

将 `src` 目录加入 `sys.path`，以便在未打包安装时可直接导入包；
同时加载 `reqmock.pytest_plugin` 提供的 `http_mocks` 夹具。
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from reqmock.registry import MockRegistry  # noqa: E402

pytest_plugins = ["reqmock.pytest_plugin", "pytester"]


@pytest.fixture
def registry() -> MockRegistry:
    """返回独立于进程级注册表的新实例。"""

    return MockRegistry()
