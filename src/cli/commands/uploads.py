"""Upload cache commands."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from schemas.uploads import UploadRequest
from uploads.service import BatchPolicy, UploadService
from utils.formatting import format_bytes
from .shared import emit_json, run_with_service


app = typer.Typer(
    help="作业图片缓存管理",
    context_settings={"help_option_names": ["-h", "--help"]},
    add_completion=False,
    no_args_is_help=True,
    options_metavar="[选项]",
    subcommand_metavar="命令 [参数]",
)


@app.command("add", help="缓存本地文件、file:// 或 http(s):// 图片")
def add_uploads(
    sources: list[str] = typer.Argument(..., metavar="来源"),
    name: str | None = typer.Option(
        None,
        "--name",
        help="建议文件名（仅在单个来源时使用）",
    ),
    mime: str | None = typer.Option(None, "--mime", help="显式指定 MIME 类型"),
    partial: bool = typer.Option(
        False,
        "--partial",
        help="部分成功时保留成功项并逐项报告失败",
    ),
) -> None:
    if name and len(sources) > 1:
        raise typer.BadParameter("--name 只能与单个来源一起使用")
    requests = [
        UploadRequest(uri=source, file_name=name, mime_type=mime) for source in sources
    ]
    policy = BatchPolicy.PARTIAL if partial else BatchPolicy.ALL_OR_NOTHING

    async def action(service: UploadService):
        return await service.cache_uploads(requests, policy=policy)

    outcome = run_with_service(action)
    emit_json(outcome.model_dump(mode="json"))
    if outcome.failures:
        raise typer.Exit(code=1)


@app.command("add-data-url", help="缓存 data URL（传入 - 从标准输入读取）")
def add_data_url(
    data_url: str = typer.Argument(..., metavar="DATA_URL"),
    name: str | None = typer.Option(None, "--name", help="建议文件名"),
) -> None:
    if data_url == "-":
        data_url = sys.stdin.read().strip()

    async def action(service: UploadService):
        return await service.ingest_data_url(data_url, name)

    record = run_with_service(action)
    emit_json(record.model_dump(mode="json"))


@app.command("list", help="列出已缓存的图片")
def list_uploads(
    json_out: bool = typer.Option(False, "--json", help="输出 JSON"),
) -> None:
    async def action(service: UploadService):
        return service.list_uploads(), service.total_size()

    records, total = run_with_service(action)
    if json_out:
        emit_json(
            {
                "uploads": [record.model_dump(mode="json") for record in records],
                "total_bytes": total,
            }
        )
        return

    table = Table(title=f"共 {len(records)} 张 · {format_bytes(total)}")
    table.add_column("ID", no_wrap=True)
    table.add_column("文件名")
    table.add_column("大小", justify="right")
    table.add_column("MIME")
    table.add_column("状态")
    for record in records:
        status = record.status
        if record.error_message:
            status = f"{status}: {record.error_message}"
        table.add_row(
            record.id,
            record.file_name,
            format_bytes(record.size_bytes),
            record.mime_type,
            status,
        )
    Console().print(table)


@app.command("show", help="查看单条缓存记录")
def show_upload(upload_id: str = typer.Argument(..., metavar="ID")) -> None:
    async def action(service: UploadService):
        return service.get(upload_id)

    record = run_with_service(action)
    if record is None:
        typer.secho(f"Error: Upload {upload_id} not found", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    emit_json(record.model_dump(mode="json"))


@app.command("encode", help="将缓存图片编码为 data URL 请求载荷")
def encode_uploads(
    ids: list[str] | None = typer.Argument(None, metavar="[ID...]"),
    output: Path | None = typer.Option(
        None,
        "--output",
        help="写入 JSON 文件（默认输出到 stdout）",
    ),
) -> None:
    async def action(service: UploadService):
        return await service.encode_selection(ids or None)

    payloads = run_with_service(action)
    data = [payload.model_dump() for payload in payloads]
    if output is None:
        emit_json(data)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    typer.echo(f"已写入: {output}")


@app.command("remove", help="删除单张缓存图片")
def remove_upload(upload_id: str = typer.Argument(..., metavar="ID")) -> None:
    async def action(service: UploadService):
        await service.remove(upload_id)

    run_with_service(action)
    emit_json({"removed": upload_id})


@app.command("clear", help="清空缓存目录")
def clear_uploads(
    yes: bool = typer.Option(False, "--yes", "-y", help="跳过确认"),
) -> None:
    if not yes:
        typer.confirm("确认删除全部缓存图片?", abort=True)

    async def action(service: UploadService):
        count = len(service.list_uploads())
        await service.clear_all()
        return count

    count = run_with_service(action)
    emit_json({"cleared": count})


@app.command("mark-error", help="将图片标记为失败")
def mark_error(
    upload_id: str = typer.Argument(..., metavar="ID"),
    message: str = typer.Argument(..., metavar="MESSAGE"),
) -> None:
    async def action(service: UploadService):
        await service.report_error(upload_id, message)
        return service.get(upload_id)

    record = run_with_service(action)
    if record is None:
        typer.secho(f"Error: Upload {upload_id} not found", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    emit_json(record.model_dump(mode="json"))


__all__ = ["app"]
