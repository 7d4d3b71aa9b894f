"""`requests` 传输适配器与 HTTP 工具。

`MockTransportAdapter` 挂载到 `requests.Session` 后，每次发送前先查询注册表：
命中则直接构造响应、跳过网络；mock 未启用时交给真实 `HTTPAdapter`。
"""

from __future__ import annotations

import io
import json
import logging
from http import HTTPStatus
from typing import Any, Dict, Optional, Tuple, cast

import requests
from requests.adapters import BaseAdapter, HTTPAdapter
from requests.structures import CaseInsensitiveDict

from ..registry import MockRegistry, ResponseMeta, default_registry

logger = logging.getLogger(__name__)


def _reason(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return ""


def build_response(
    request: requests.PreparedRequest, meta: ResponseMeta, body: bytes
) -> requests.Response:
    """由模拟结果构造 `requests.Response`。

    参数:
        request: 原始预处理请求，挂到响应上以便调用方追溯。
        meta: 状态码与内容长度。
        body: 响应体。

    返回值:
        requests.Response: 与真实响应接口一致的对象。
    """

    resp = requests.Response()
    resp.status_code = meta.status_code
    resp.reason = _reason(meta.status_code)
    resp.headers = CaseInsensitiveDict({"Content-Length": str(meta.content_length)})
    resp.raw = io.BytesIO(body)
    resp._content = body
    resp.encoding = "utf-8"
    resp.url = request.url or ""
    resp.request = request
    return resp


class MockTransportAdapter(BaseAdapter):
    """先查注册表、未启用 mock 时才走真实网络的传输适配器。

    参数:
        registry: 使用的注册表，缺省为进程级 `default_registry`。
        fallback: mock 未启用时使用的真实适配器，缺省创建 `HTTPAdapter`。
    """

    def __init__(
        self,
        registry: Optional[MockRegistry] = None,
        fallback: Optional[BaseAdapter] = None,
    ) -> None:
        super().__init__()
        self.registry = registry if registry is not None else default_registry
        self.fallback: BaseAdapter = fallback if fallback is not None else HTTPAdapter()

    def send(
        self, request: requests.PreparedRequest, **kwargs: Any
    ) -> requests.Response:
        """发送请求；命中 mock 时不产生任何网络 IO。

        副作用:
            生成器返回错误时抛出 `requests.ConnectionError`（`response` 携带状态码）；
            已启用但未注册时 `UnmockedRequestError` 原样传播。
        """

        verb = request.method or "GET"
        url = request.url or ""
        matched, meta, body, error = self.registry.lookup(verb, url)
        if not matched:
            logger.debug("mocking inactive, sending %s %s for real", verb, url)
            return self.fallback.send(request, **kwargs)

        resp = build_response(request, cast(ResponseMeta, meta), cast(bytes, body))
        if error is not None:
            raise requests.ConnectionError(
                str(error), request=request, response=resp
            ) from error
        return resp

    def close(self) -> None:
        self.fallback.close()


def mocked_session(registry: Optional[MockRegistry] = None) -> requests.Session:
    """返回 http/https 均挂载 `MockTransportAdapter` 的会话。

    注意: 适配器以 `requests` 预处理后的 URL 查询注册表，
    例如 `http://svc` 会变为 `http://svc/`，注册时需使用该形式。
    """

    session = requests.Session()
    adapter = MockTransportAdapter(registry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def http_get(
    url: str,
    timeout: float = 5.0,
    headers: Optional[Dict[str, str]] = None,
    expect_json: bool = False,
    registry: Optional[MockRegistry] = None,
) -> Tuple[int, Any]:
    """经由注册表发送 GET 请求。

    参数:
        url: 目标 URL；注册表按预处理后的形式匹配（如补全结尾的 `/`）。
        timeout: 超时时间（秒），仅对真实请求生效。
        headers: 额外请求头。
        expect_json: 是否期望 JSON 响应，若为真则解析 JSON。
        registry: 使用的注册表，缺省为进程级注册表。

    返回值:
        (status_code, body): 若 `expect_json=True` 且可解析则 body 为对象，否则为字符串。

    副作用:
        mock 未启用时发起网络请求；可能抛出 `requests.RequestException`。
    """

    with mocked_session(registry) as session:
        resp = session.get(url, timeout=timeout, headers=headers)
    if expect_json:
        try:
            return resp.status_code, resp.json()
        except json.JSONDecodeError:
            return resp.status_code, resp.text
    return resp.status_code, resp.text
