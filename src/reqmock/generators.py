"""模拟响应的数据模型与生成器工厂。

生成器为零参数可调用对象，调用时才计算响应体与错误，
因此每次调用都可以返回新的数据（例如重新读取文件）。
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Union

from .exceptions import MockError

logger = logging.getLogger(__name__)

INTERNAL_SERVER_ERROR = 500


@dataclass(frozen=True)
class MockedResponse:
    """一次模拟调用的结果。

    属性:
        response_body: 响应体字节串。
        status_code: HTTP 状态码。
        error: 可选错误；非 None 时表示请求以该错误结束。
    """

    response_body: bytes = b""
    status_code: int = 200
    error: Optional[BaseException] = None


MockedResponseGenerator = Callable[[], MockedResponse]


def from_bytes(status_code: int, body: bytes) -> MockedResponseGenerator:
    """返回始终产出固定字节响应体的生成器。"""

    payload = bytes(body)

    def _gen() -> MockedResponse:
        return MockedResponse(response_body=payload, status_code=status_code)

    return _gen


def from_string(status_code: int, body_text: str) -> MockedResponseGenerator:
    """以 UTF-8 编码文本后委托给 `from_bytes`。"""

    return from_bytes(status_code, body_text.encode("utf-8"))


def from_json(status_code: int, payload: Any) -> MockedResponseGenerator:
    """将任意可 JSON 序列化对象作为响应体。

    参数:
        status_code: HTTP 状态码。
        payload: 需序列化的对象；注册时即序列化，不可序列化会立即抛出 TypeError。

    返回值:
        MockedResponseGenerator: 固定 JSON 响应体的生成器。
    """

    return from_string(status_code, json.dumps(payload, ensure_ascii=False))


def from_file(
    status_code: int, file_path: Union[str, Path]
) -> MockedResponseGenerator:
    """返回每次调用时重新读取文件的生成器。

    参数:
        status_code: 成功与失败时均使用的状态码。
        file_path: 响应体文件路径。

    返回值:
        MockedResponseGenerator: 读取成功时返回文件全部内容；
        打开或读取失败时返回空响应体并将 `OSError` 放入 `error`。

    副作用:
        每次调用都会打开并关闭文件，文件的外部修改在下次调用时可见。
    """

    path = Path(file_path)

    def _gen() -> MockedResponse:
        try:
            with path.open("rb") as f:
                contents = f.read()
        except OSError as err:
            logger.debug("mock fixture unreadable: %s (%s)", path, err)
            return MockedResponse(status_code=status_code, error=err)
        return MockedResponse(response_body=contents, status_code=status_code)

    return _gen


def error() -> MockedResponseGenerator:
    """返回模拟服务端失败的生成器（500 + `MockError`）。"""

    def _gen() -> MockedResponse:
        return MockedResponse(status_code=INTERNAL_SERVER_ERROR, error=MockError())

    return _gen
