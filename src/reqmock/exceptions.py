"""异常定义。

区分两类错误：
- `UnmockedRequestError`：mock 模式已启用但请求未注册，属于测试编写错误，
  派生自 `BaseException`，不会被被测代码中的 `except Exception` 吞掉；
- `MockError`：`mock_error` 系列注册的固定错误，作为正常返回值透传。
"""

from __future__ import annotations

MOCK_ERROR_MESSAGE = (
    "Error! This is from reqmock.mock_error. If you don't want an error don't mock it."
)


class MockError(Exception):
    """模拟请求失败时返回的固定错误。"""

    def __init__(self, message: str = MOCK_ERROR_MESSAGE) -> None:
        super().__init__(message)


class UnmockedRequestError(BaseException):
    """mock 模式下请求了未注册的 (verb, url)。

    参数:
        verb: HTTP 方法。
        url: 请求的完整 URL（原样字符串）。

    副作用:
        无；调用方应任其向上传播并终止当前测试。
    """

    def __init__(self, verb: str, url: str) -> None:
        self.verb = verb
        self.url = url
        super().__init__(
            f"attempted to make service request w/o mocking endpoint: {verb} {url}"
        )
