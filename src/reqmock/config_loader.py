"""夹具清单 Schema 与加载器（严格校验）。

清单为 YAML 文件，顶层 `mocks` 列表中每项描述一个 (verb, url) 的模拟响应，
响应体来源 `body`/`json`/`file`/`error` 必须且只能给出一个。
`file` 相对路径以清单所在目录为基准解析。
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from . import generators
from .generators import MockedResponseGenerator
from .registry import MockRegistry, default_registry

SOURCES = ("body", "json", "file", "error")


def _read_yaml(path: Path) -> Any:
    """读取 YAML 文件。

    参数:
        path: YAML 文件路径。

    返回值:
        Any: 解析后的顶层对象（空文件返回空字典），类型由 Schema 校验。

    副作用:
        文件 IO；错误由调用方处理。
    """

    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    return data if data is not None else {}


class MockEntry(BaseModel):
    """单条模拟响应（禁止未知键）。

    参数:
        verb: HTTP 方法，按原样参与注册键（区分大小写）。
        url: 完整 URL 字符串。
        status_code: 状态码，默认 200；`error` 条目固定为 500。
        body: 文本响应体。
        json: 任意 JSON 响应体。
        file: 响应体文件路径。
        error: 为真时模拟请求失败。
    """

    model_config = ConfigDict(extra="forbid")

    verb: str
    url: str
    status_code: int = 200
    body: Optional[str] = None
    # `json` 与 BaseModel 方法同名，字段以别名读取
    json_body: Any = Field(default=None, alias="json")
    file: Optional[str] = None
    error: bool = False

    @model_validator(mode="after")
    def _exactly_one_source(self) -> "MockEntry":
        given = [name for name in SOURCES if self._has(name)]
        if len(given) != 1:
            raise ValueError(
                f"{self.verb} {self.url}: exactly one of {', '.join(SOURCES)} "
                f"is required, got {given or 'none'}"
            )
        return self

    def _has(self, name: str) -> bool:
        if name == "body":
            return self.body is not None
        if name == "json":
            return self.json_body is not None
        if name == "file":
            return self.file is not None
        return self.error

    @property
    def source(self) -> str:
        """响应体来源名：body/json/file/error。"""

        return next(name for name in SOURCES if self._has(name))

    def to_generator(self, base_dir: Path) -> MockedResponseGenerator:
        """按来源构造生成器。

        参数:
            base_dir: 解析相对 `file` 路径的基准目录。

        返回值:
            MockedResponseGenerator: 对应的生成器。
        """

        src = self.source
        if src == "body":
            return generators.from_string(self.status_code, self.body or "")
        if src == "json":
            return generators.from_json(self.status_code, self.json_body)
        if src == "file":
            path = Path(self.file or "")
            if not path.is_absolute():
                path = base_dir / path
            return generators.from_file(self.status_code, path)
        return generators.error()


class ManifestSchema(BaseModel):
    """清单文件 Schema。"""

    model_config = ConfigDict(extra="forbid")

    mocks: List[MockEntry]


def load_manifest(path: Path) -> ManifestSchema:
    """严格加载并校验清单。

    参数:
        path: 清单文件路径。

    返回值:
        ManifestSchema: 通过校验的清单。

    副作用:
        文件 IO；校验失败抛出 `pydantic.ValidationError`，读取失败抛出 `OSError`。
    """

    return ManifestSchema.model_validate(_read_yaml(path))


def manifest_generators(
    manifest: ManifestSchema, base_dir: Path
) -> List[Tuple[str, str, MockedResponseGenerator]]:
    """将清单展开为 `(verb, url, generator)` 列表。"""

    return [(m.verb, m.url, m.to_generator(base_dir)) for m in manifest.mocks]


def apply_manifest(
    manifest: ManifestSchema, registry: MockRegistry, base_dir: Path
) -> int:
    """在一次加锁内将清单全部注册到 `registry`，返回注册条数。"""

    return registry.register_many(manifest_generators(manifest, base_dir))


def load_into(path: Path, registry: Optional[MockRegistry] = None) -> int:
    """加载清单并注册到指定（缺省为进程级）注册表。

    参数:
        path: 清单文件路径。
        registry: 目标注册表。

    返回值:
        int: 注册的条目数。
    """

    manifest = load_manifest(path)
    target = registry if registry is not None else default_registry
    return apply_manifest(manifest, target, path.resolve().parent)
