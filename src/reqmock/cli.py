"""命令行入口（清单检查与单次解析）。

示例:
    reqmock check tests/fixtures/manifest.yaml
    reqmock resolve tests/fixtures/manifest.yaml --verb GET --url http://svc/status
"""

from __future__ import annotations

import json as _json
import logging
from pathlib import Path

import typer
import yaml
from pydantic import ValidationError

from .config_loader import ManifestSchema, apply_manifest, load_manifest
from .exceptions import UnmockedRequestError
from .registry import MockRegistry

app = typer.Typer(help="reqmock / HTTP 模拟清单工具")


@app.callback()
def _root(
    log_level: str = typer.Option("WARNING", "--log-level", help="日志级别"),
) -> None:
    """配置日志后分派到子命令。"""

    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_or_exit(manifest: Path) -> ManifestSchema:
    try:
        return load_manifest(manifest)
    except (ValidationError, yaml.YAMLError, OSError) as err:
        typer.echo(f"invalid manifest {manifest}: {err}", err=True)
        raise typer.Exit(code=1)


@app.command()
def check(manifest: Path = typer.Argument(..., help="清单文件路径")) -> None:
    """校验清单并以 JSON 列出其中的模拟端点。

    参数:
        manifest: 清单文件路径。

    返回值:
        无返回；校验失败时以退出码 1 结束。

    副作用:
        读取文件系统。
    """

    parsed = _load_or_exit(manifest)
    typer.echo(
        _json.dumps(
            {
                "manifest": str(manifest),
                "mocks": [
                    {"verb": m.verb, "url": m.url, "source": m.source}
                    for m in parsed.mocks
                ],
            },
            ensure_ascii=False,
        )
    )


@app.command()
def resolve(
    manifest: Path = typer.Argument(..., help="清单文件路径"),
    verb: str = typer.Option("GET", "--verb", help="HTTP 方法"),
    url: str = typer.Option(..., "--url", help="请求 URL"),
) -> None:
    """将清单载入新注册表并解析一次请求，打印模拟结果。

    参数:
        manifest: 清单文件路径。
        verb: HTTP 方法（区分大小写）。
        url: 请求 URL（需与清单中的写法完全一致）。

    返回值:
        无返回；清单无效退出码 1，请求未被模拟退出码 2。

    副作用:
        读取清单及其引用的文件。
    """

    parsed = _load_or_exit(manifest)
    registry = MockRegistry()
    apply_manifest(parsed, registry, manifest.resolve().parent)
    try:
        matched, meta, body, error = registry.lookup(verb, url)
    except UnmockedRequestError as err:
        typer.echo(str(err), err=True)
        raise typer.Exit(code=2)

    typer.echo(
        _json.dumps(
            {
                "matched": matched,
                "status_code": meta.status_code if meta else None,
                "content_length": meta.content_length if meta else None,
                "body": body.decode("utf-8", errors="replace") if body is not None else None,
                "error": str(error) if error is not None else None,
            },
            ensure_ascii=False,
        )
    )


def main() -> None:
    """CLI 入口包装。"""

    app()
