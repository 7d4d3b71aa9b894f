"""模拟响应注册表。

`MockRegistry` 以 (verb, url) 为键保存响应生成器，并维护 mock 模式开关。
请求路径在发起真实网络请求前调用 `lookup`：
- 未启用 mock：返回未命中，调用方照常发起请求；
- 已启用且命中：调用生成器并返回其结果；
- 已启用但未注册：抛出 `UnmockedRequestError`。

所有状态由同一把锁保护。带 `_unsafe` 后缀的方法假设调用方已持有锁
（参见 `locked`），用于在一次加锁内批量注册。

模块级函数委托给进程级的 `default_registry`。
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, NamedTuple, Optional, Tuple, Union

from . import generators
from .exceptions import UnmockedRequestError
from .generators import MockedResponse, MockedResponseGenerator

logger = logging.getLogger(__name__)

UrlLike = Any


@dataclass(frozen=True)
class ResponseMeta:
    """模拟响应的元数据。"""

    status_code: int
    content_length: int


class LookupResult(NamedTuple):
    """`lookup` 的返回值，可按四元组解包。"""

    matched: bool
    meta: Optional[ResponseMeta]
    body: Optional[bytes]
    error: Optional[BaseException]


NOT_MATCHED = LookupResult(False, None, None, None)


def registry_key(verb: str, url: UrlLike) -> str:
    """由 verb 与 URL 的原样字符串拼出注册键（区分大小写，不做归一化）。"""

    return f"{verb}_{url}"


class MockRegistry:
    """线程安全的 (verb, url) → 生成器 映射。"""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._active = False
        self._entries: Dict[str, MockedResponseGenerator] = {}

    @contextmanager
    def locked(self) -> Iterator["MockRegistry"]:
        """持有注册表锁，供批量调用 `_unsafe` 方法。

        返回值:
            上下文内产出注册表自身。

        副作用:
            阻塞其他线程对该注册表的所有访问，直到退出上下文。
        """

        with self._lock:
            yield self

    # -- 注册 --------------------------------------------------------------

    def register(
        self, verb: str, url: UrlLike, gen: MockedResponseGenerator
    ) -> None:
        """注册（或覆盖）某个 (verb, url) 的生成器，并启用 mock 模式。"""

        with self._lock:
            self.register_unsafe(verb, url, gen)

    def register_unsafe(
        self, verb: str, url: UrlLike, gen: MockedResponseGenerator
    ) -> None:
        """同 `register`，但不加锁；调用方须已持有锁。"""

        self._active = True
        self._entries[registry_key(verb, url)] = gen
        logger.debug("mocked %s %s", verb, url)

    def register_many(
        self, entries: Iterable[Tuple[str, UrlLike, MockedResponseGenerator]]
    ) -> int:
        """在一次加锁内注册多条记录。

        参数:
            entries: `(verb, url, generator)` 序列。

        返回值:
            int: 注册的条目数。
        """

        count = 0
        with self._lock:
            for verb, url, gen in entries:
                self.register_unsafe(verb, url, gen)
                count += 1
        return count

    def register_from_bytes(
        self, verb: str, url: UrlLike, status_code: int, body: bytes
    ) -> None:
        self.register(verb, url, generators.from_bytes(status_code, body))

    def register_from_bytes_unsafe(
        self, verb: str, url: UrlLike, status_code: int, body: bytes
    ) -> None:
        self.register_unsafe(verb, url, generators.from_bytes(status_code, body))

    def register_from_string(
        self, verb: str, url: UrlLike, status_code: int, body_text: str
    ) -> None:
        self.register(verb, url, generators.from_string(status_code, body_text))

    def register_from_string_unsafe(
        self, verb: str, url: UrlLike, status_code: int, body_text: str
    ) -> None:
        self.register_unsafe(verb, url, generators.from_string(status_code, body_text))

    def register_from_json(
        self, verb: str, url: UrlLike, status_code: int, payload: Any
    ) -> None:
        self.register(verb, url, generators.from_json(status_code, payload))

    def register_from_json_unsafe(
        self, verb: str, url: UrlLike, status_code: int, payload: Any
    ) -> None:
        self.register_unsafe(verb, url, generators.from_json(status_code, payload))

    def register_from_file(
        self, verb: str, url: UrlLike, status_code: int, file_path: Union[str, Path]
    ) -> None:
        """注册每次调用都重新读取 `file_path` 的生成器。

        读取失败不会在注册时暴露，而是在 `lookup` 时作为 `error` 返回。
        """

        self.register(verb, url, generators.from_file(status_code, file_path))

    def register_from_file_unsafe(
        self, verb: str, url: UrlLike, status_code: int, file_path: Union[str, Path]
    ) -> None:
        self.register_unsafe(verb, url, generators.from_file(status_code, file_path))

    def register_error(self, verb: str, url: UrlLike) -> None:
        """注册固定返回 500 与 `MockError` 的生成器。"""

        self.register(verb, url, generators.error())

    def register_error_unsafe(self, verb: str, url: UrlLike) -> None:
        self.register_unsafe(verb, url, generators.error())

    # -- 查询与清理 --------------------------------------------------------

    def lookup(self, verb: str, url: UrlLike) -> LookupResult:
        """在真实请求前查询模拟响应。

        参数:
            verb: HTTP 方法。
            url: 请求 URL（字符串或可 `str()` 的对象）。

        返回值:
            LookupResult: 未启用时为 `(False, None, None, None)`；
            命中时为 `(True, meta, body, error)`，其中 `error` 为生成器给出的值。

        副作用:
            命中时在锁外同步调用生成器（可能读取文件）。
            已启用但未注册时抛出 `UnmockedRequestError`。
        """

        with self._lock:
            if not self._active:
                return NOT_MATCHED
            gen = self._entries.get(registry_key(verb, url))

        if gen is None:
            logger.warning("unmocked request while mocking is active: %s %s", verb, url)
            raise UnmockedRequestError(verb, str(url))

        mocked: MockedResponse = gen()
        body = mocked.response_body
        meta = ResponseMeta(status_code=mocked.status_code, content_length=len(body))
        logger.debug("mock hit %s %s -> %d", verb, url, mocked.status_code)
        return LookupResult(True, meta, body, mocked.error)

    def clear(self) -> None:
        """关闭 mock 模式并清空所有注册；可重复调用。"""

        with self._lock:
            self.clear_unsafe()

    def clear_unsafe(self) -> None:
        self._active = False
        self._entries = {}
        logger.debug("cleared mocked responses")

    # -- 只读查看 ----------------------------------------------------------

    @property
    def is_active(self) -> bool:
        with self._lock:
            return self._active

    def registered_keys(self) -> List[str]:
        """返回当前已注册键的有序列表。"""

        with self._lock:
            return sorted(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


default_registry = MockRegistry()


def mock_response(verb: str, url: UrlLike, gen: MockedResponseGenerator) -> None:
    default_registry.register(verb, url, gen)


def mock_response_unsafe(verb: str, url: UrlLike, gen: MockedResponseGenerator) -> None:
    default_registry.register_unsafe(verb, url, gen)


def mock_response_from_bytes(verb: str, url: UrlLike, status_code: int, body: bytes) -> None:
    default_registry.register_from_bytes(verb, url, status_code, body)


def mock_response_from_bytes_unsafe(
    verb: str, url: UrlLike, status_code: int, body: bytes
) -> None:
    default_registry.register_from_bytes_unsafe(verb, url, status_code, body)


def mock_response_from_string(
    verb: str, url: UrlLike, status_code: int, body_text: str
) -> None:
    default_registry.register_from_string(verb, url, status_code, body_text)


def mock_response_from_string_unsafe(
    verb: str, url: UrlLike, status_code: int, body_text: str
) -> None:
    default_registry.register_from_string_unsafe(verb, url, status_code, body_text)


def mock_response_from_json(verb: str, url: UrlLike, status_code: int, payload: Any) -> None:
    default_registry.register_from_json(verb, url, status_code, payload)


def mock_response_from_json_unsafe(
    verb: str, url: UrlLike, status_code: int, payload: Any
) -> None:
    default_registry.register_from_json_unsafe(verb, url, status_code, payload)


def mock_response_from_file(
    verb: str, url: UrlLike, status_code: int, file_path: Union[str, Path]
) -> None:
    default_registry.register_from_file(verb, url, status_code, file_path)


def mock_response_from_file_unsafe(
    verb: str, url: UrlLike, status_code: int, file_path: Union[str, Path]
) -> None:
    default_registry.register_from_file_unsafe(verb, url, status_code, file_path)


def mock_error(verb: str, url: UrlLike) -> None:
    default_registry.register_error(verb, url)


def mock_error_unsafe(verb: str, url: UrlLike) -> None:
    default_registry.register_error_unsafe(verb, url)


def mocked_response_injector(verb: str, url: UrlLike) -> LookupResult:
    """请求路径使用的查询入口，等价于 `default_registry.lookup`。"""

    return default_registry.lookup(verb, url)


def clear_mocked_responses() -> None:
    """清空进程级注册表；应在每个测试结束后调用。"""

    default_registry.clear()
