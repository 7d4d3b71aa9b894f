"""requests 传输适配器与 HTTP 工具测试。"""

from __future__ import annotations

from typing import Any, List

import pytest
import requests
from requests.adapters import BaseAdapter, HTTPAdapter

from reqmock import MockError, UnmockedRequestError
from reqmock.clients.http import MockTransportAdapter, http_get, mocked_session
from reqmock.registry import MockRegistry


class RecordingAdapter(BaseAdapter):
    """记录请求的假“真实”适配器。"""

    def __init__(self) -> None:
        super().__init__()
        self.sent: List[requests.PreparedRequest] = []
        self.closed = False

    def send(self, request: requests.PreparedRequest, **kwargs: Any) -> requests.Response:
        self.sent.append(request)
        resp = requests.Response()
        resp.status_code = 299
        resp._content = b"real"
        resp.request = request
        return resp

    def close(self) -> None:
        self.closed = True


def _session(registry: MockRegistry, fallback: BaseAdapter) -> requests.Session:
    s = requests.Session()
    s.mount("http://", MockTransportAdapter(registry, fallback=fallback))
    return s


def test_matched_request_returns_mocked_response(registry: MockRegistry):
    """命中时构造响应且不调用真实适配器。"""

    fallback = RecordingAdapter()
    registry.register_from_string("POST", "http://svc/items", 201, "created")

    resp = _session(registry, fallback).post("http://svc/items", json={"a": 1})
    assert resp.status_code == 201 and resp.reason == "Created"
    assert resp.content == b"created"
    assert resp.headers["Content-Length"] == "7"
    assert resp.url == "http://svc/items"
    assert resp.request.method == "POST"
    assert fallback.sent == []


def test_inactive_registry_delegates_to_fallback(registry: MockRegistry):
    """未启用 mock 时交给真实适配器。"""

    fallback = RecordingAdapter()
    resp = _session(registry, fallback).get("http://svc/real")
    assert resp.status_code == 299
    assert [r.url for r in fallback.sent] == ["http://svc/real"]


def test_generator_error_raises_connection_error(registry: MockRegistry):
    """生成器返回错误时抛出 ConnectionError，响应仍携带状态码。"""

    registry.register_error("GET", "http://svc/down")
    with pytest.raises(requests.ConnectionError) as exc:
        _session(registry, RecordingAdapter()).get("http://svc/down")
    assert exc.value.response.status_code == 500
    assert isinstance(exc.value.__cause__, MockError)


def test_unmocked_request_propagates(registry: MockRegistry):
    """已启用但未注册：UnmockedRequestError 穿透 requests。"""

    fallback = RecordingAdapter()
    registry.register_from_string("GET", "http://svc/known", 200, "ok")
    with pytest.raises(UnmockedRequestError) as exc:
        _session(registry, fallback).get("http://svc/unknown")
    assert "GET http://svc/unknown" in str(exc.value)
    assert fallback.sent == []


def test_adapter_close_closes_fallback(registry: MockRegistry):
    """关闭适配器时关闭已创建的真实适配器。"""

    fallback = RecordingAdapter()
    MockTransportAdapter(registry, fallback=fallback).close()
    assert fallback.closed is True


def test_mocked_session_mounts_both_schemes(registry: MockRegistry):
    """http 与 https 均挂载模拟适配器。"""

    s = mocked_session(registry)
    assert isinstance(s.get_adapter("http://a/b"), MockTransportAdapter)
    assert isinstance(s.get_adapter("https://a/b"), MockTransportAdapter)


def test_http_get_json_ok(registry: MockRegistry):
    """返回 200 且 JSON 可解析时，返回解析后的对象。"""

    url = "http://example.com/ok"
    registry.register_from_json("GET", url, 200, {"hello": "world"})
    code, body = http_get(url, expect_json=True, registry=registry)
    assert code == 200 and body["hello"] == "world"


def test_http_get_json_fallback_to_text(registry: MockRegistry):
    """响应体不是 JSON 时返回原始文本。"""

    url = "https://example.com/plain"
    registry.register_from_string("GET", url, 503, "not json")
    code, body = http_get(url, expect_json=True, registry=registry)
    assert code == 503 and body == "not json"


def test_http_get_uses_default_registry(http_mocks):
    """缺省使用进程级注册表。"""

    http_mocks.register_from_string("GET", "http://example.com/default", 200, "hi")
    assert http_get("http://example.com/default") == (200, "hi")


def test_streamed_mocked_response_iter_lines(registry: MockRegistry):
    """stream=True 时可按行迭代模拟响应体。"""

    url = "http://svc/sse"
    registry.register_from_string("GET", url, 200, "data: a\ndata: b\n")
    resp = mocked_session(registry).get(url, stream=True)
    assert list(resp.iter_lines()) == [b"data: a", b"data: b"]


def test_streamed_mocked_response_iter_content(registry: MockRegistry):
    """stream=True 时 iter_content 按块返回完整响应体。"""

    url = "http://svc/blob"
    registry.register_from_bytes("GET", url, 200, b"0123456789")
    resp = mocked_session(registry).get(url, stream=True)
    assert b"".join(resp.iter_content(chunk_size=3)) == b"0123456789"


def test_default_fallback_created_once_and_closed(registry: MockRegistry, monkeypatch):
    """缺省真实适配器在构造时创建一次，关闭时一并关闭。"""

    adapter = MockTransportAdapter(registry)
    assert isinstance(adapter.fallback, HTTPAdapter)
    assert adapter.fallback is adapter.fallback

    closed: List[bool] = []
    monkeypatch.setattr(adapter.fallback, "close", lambda: closed.append(True))
    adapter.close()
    assert closed == [True]


def test_registration_must_use_prepared_url_form(registry: MockRegistry):
    """注册键按 requests 预处理后的 URL 匹配：裸主机会补全结尾斜杠。"""

    registry.register_from_string("GET", "http://svc/", 200, "root")
    resp = mocked_session(registry).get("http://svc")
    assert resp.text == "root"
    assert resp.url == "http://svc/"
