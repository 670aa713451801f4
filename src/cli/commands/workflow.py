"""Workflow submission commands."""

from __future__ import annotations

import typer

from core.config import get_settings
from services.submission import submit_uploads
from uploads.service import UploadService
from workflow.client import WorkflowClient
from .shared import emit_json, parse_key_values, run_with_service


app = typer.Typer(
    help="提交批改工作流",
    context_settings={"help_option_names": ["-h", "--help"]},
    add_completion=False,
    no_args_is_help=True,
    options_metavar="[选项]",
    subcommand_metavar="命令 [参数]",
)


@app.command("run", help="将已缓存图片提交给批改工作流")
def run_workflow(
    student_id: str = typer.Option(..., "--student-id", help="学生 ID / 学籍号"),
    subject: str = typer.Option("数学", "--subject", help="学科"),
    ids: list[str] | None = typer.Option(
        None,
        "--id",
        help="只提交指定 ID，可重复传入（默认全部）",
    ),
    meta: list[str] | None = typer.Option(
        None,
        "--meta",
        help="附加元数据 key=value，可重复传入",
    ),
    raw: bool = typer.Option(False, "--raw", help="输出中包含原始响应"),
) -> None:
    metadata = parse_key_values(meta, option="--meta")
    client = WorkflowClient(get_settings())

    async def action(service: UploadService):
        return await submit_uploads(
            service,
            client,
            student_id=student_id,
            subject=subject,
            ids=ids or None,
            metadata=metadata,
        )

    result = run_with_service(action)
    emit_json(result.model_dump(exclude=None if raw else {"raw"}))


__all__ = ["app"]
