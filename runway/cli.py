#!/usr/bin/env python3
"""
Runway CLI - フライトログ共有の管理・操作ツール
FastAPI of CLIsであるTyperを使用
"""

import asyncio
import json
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from runway.core.config import DEFAULT_TTL_SECONDS
from runway.core.encryption import generate_key
from runway.core.exceptions import (
    DecryptionError,
    RunwayException,
    ShareNotFoundError,
)
from runway.domain.models.airfield import Airfield, FlightPath

app = typer.Typer(
    name="runway",
    help="Runway - フライトログのゼロナレッジ共有CLI",
    add_completion=False,
    rich_markup_mode="rich",
)
share_app = typer.Typer(help="共有リンクの作成・閲覧")
app.add_typer(share_app, name="share")

console = Console()


def _client(api_url: Optional[str], base_url: Optional[str] = None):
    from runway.client.share_client import ShareClient

    return ShareClient(api_url=api_url, base_url=base_url)


def _fail(message: str) -> NoReturn:
    console.print(f"[red]エラー: {message}[/red]")
    raise typer.Exit(1)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="サーバーのホストアドレス"),
    port: Optional[int] = typer.Option(None, help="サーバーのポート番号"),
    reload: bool = typer.Option(False, help="開発モードでの自動リロード"),
):
    """
    共有APIサーバーを起動します
    """
    import uvicorn

    from runway.core.config import get_settings

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port

    console.print(Panel(
        f"[bold blue]Runway Share API[/bold blue]\n"
        f"起動中: http://{host}:{port}\n"
        f"ヘルスチェック: http://{host}:{port}/health",
        title="サーバー起動",
    ))

    uvicorn.run(
        "runway.api.main:app",
        host=host,
        port=port,
        reload=reload,
        access_log=False,
    )


@app.command()
def keygen():
    """
    共有用の暗号化キーを生成します
    """
    console.print(generate_key())


@app.command()
def health(
    api_url: Optional[str] = typer.Option(None, help="共有APIのURL"),
):
    """
    共有APIサーバーのヘルスチェックを実行
    """
    async def _run():
        async with _client(api_url) as client:
            return await client.health()

    try:
        data = asyncio.run(_run())
    except RunwayException as e:
        console.print(Panel(
            f"[red]APIサーバーに接続できません[/red]\n"
            f"エラー: {e.message}\n"
            f"'runway serve' でサーバーを起動してください",
            title="接続エラー",
            border_style="red",
        ))
        raise typer.Exit(1)

    console.print(Panel(
        f"[bold green]APIサーバーは正常に動作中[/bold green]\n"
        f"ステータス: {data.get('status')}\n"
        f"共有数: {data.get('shares')}\n"
        f"バージョン: {data.get('version', 'N/A')}",
        title="ヘルスチェック結果",
    ))


@share_app.command("create")
def share_create(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="飛行場・フライトのJSONファイル"),
    title: Optional[str] = typer.Option(None, help="共有のタイトル"),
    expires_in: int = typer.Option(DEFAULT_TTL_SECONDS, help="有効期限(秒)"),
    api_url: Optional[str] = typer.Option(None, help="共有APIのURL"),
    base_url: Optional[str] = typer.Option(None, help="共有リンクのベースURL"),
):
    """
    JSONファイル（airfields / flightPaths）を暗号化して共有リンクを作成
    """
    try:
        data = json.loads(file.read_text(encoding="utf-8"))
        airfields = [Airfield.from_dict(a) for a in data.get("airfields", [])]
        flight_paths = [FlightPath.from_dict(f) for f in data.get("flightPaths", [])]
    except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
        _fail(f"入力ファイルを読み込めません: {e}")

    async def _run():
        async with _client(api_url, base_url) as client:
            return await client.create_share(airfields, flight_paths, title=title, expires_in=expires_in)

    try:
        link = asyncio.run(_run())
    except RunwayException as e:
        _fail(f"共有の作成に失敗しました: {e.message}")

    console.print(Panel(
        f"[bold green]共有リンクを作成しました[/bold green]\n"
        f"飛行場: {len(airfields)} / フライト: {len(flight_paths)}\n"
        f"有効期限: {link.expires_at.isoformat() if link.expires_at else 'N/A'}\n\n"
        f"{link.url}",
        title="共有",
    ))


@share_app.command("open")
def share_open(
    url: str = typer.Argument(..., help="共有URL（#以降に鍵を含む）"),
    output: Optional[Path] = typer.Option(None, help="復号したJSONの保存先"),
    api_url: Optional[str] = typer.Option(None, help="共有APIのURL"),
):
    """
    共有リンクを開いて復号
    """
    async def _run():
        async with _client(api_url) as client:
            return await client.open_share(url)

    try:
        shared = asyncio.run(_run())
    except ShareNotFoundError:
        _fail("共有が見つからないか、有効期限が切れています")
    except DecryptionError:
        _fail("鍵が間違っているか、データが破損しています")
    except RunwayException as e:
        _fail(e.message)

    if output:
        output.write_text(json.dumps(shared.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
        console.print(f"[green]保存しました: {output}[/green]")
        return

    console.print(f"[bold]{shared.metadata.title or '共有されたフライトログ'}[/bold]")

    table = Table(show_header=True, header_style="bold magenta", title="飛行場")
    table.add_column("ICAO", style="cyan")
    table.add_column("名前", style="white")
    table.add_column("訪問済み", justify="center")
    for airfield in shared.airfields:
        table.add_row(airfield.icao or "-", airfield.name, "✓" if airfield.visited else "")
    console.print(table)

    table = Table(show_header=True, header_style="bold magenta", title="フライト")
    table.add_column("日付", style="cyan")
    table.add_column("名前", style="white")
    table.add_column("点数", justify="right", style="yellow")
    for flight in shared.flight_paths:
        table.add_row(flight.date, flight.name, str(len(flight.coordinates)))
    console.print(table)


def main():
    app()


if __name__ == "__main__":
    main()
