"""reqmock / 出站 HTTP 请求的测试替身层。

该包提供线程安全的模拟响应注册表、`requests` 传输适配器、
YAML 夹具清单加载、pytest 夹具与命令行检查工具。
"""

from .exceptions import MockError, UnmockedRequestError
from .generators import MockedResponse, MockedResponseGenerator
from .registry import (
    LookupResult,
    MockRegistry,
    ResponseMeta,
    clear_mocked_responses,
    default_registry,
    mock_error,
    mock_error_unsafe,
    mock_response,
    mock_response_from_bytes,
    mock_response_from_bytes_unsafe,
    mock_response_from_file,
    mock_response_from_file_unsafe,
    mock_response_from_json,
    mock_response_from_json_unsafe,
    mock_response_from_string,
    mock_response_from_string_unsafe,
    mock_response_unsafe,
    mocked_response_injector,
)

__all__ = [
    "__version__",
    "get_version",
    "LookupResult",
    "MockError",
    "MockRegistry",
    "MockedResponse",
    "MockedResponseGenerator",
    "ResponseMeta",
    "UnmockedRequestError",
    "clear_mocked_responses",
    "default_registry",
    "mock_error",
    "mock_error_unsafe",
    "mock_response",
    "mock_response_from_bytes",
    "mock_response_from_bytes_unsafe",
    "mock_response_from_file",
    "mock_response_from_file_unsafe",
    "mock_response_from_json",
    "mock_response_from_json_unsafe",
    "mock_response_from_string",
    "mock_response_from_string_unsafe",
    "mock_response_unsafe",
    "mocked_response_injector",
]

__version__ = "0.1.0"


def get_version() -> str:
    """返回当前包版本号。

    返回值:
        str: 版本号字符串，例如 "0.1.0"。
    副作用:
        无副作用，仅读取内置常量。
    """

    return __version__
