"""Typer CLI entrypoint for the homework upload cache."""

from __future__ import annotations

import os
import shlex
import sys
from importlib import import_module

import typer

from core.config import get_settings
from core.logging import configure_logging
from studymark import __version__

_SUBCOMMAND_SPECS: list[tuple[str, str, str]] = [
    ("uploads", "cli.commands.uploads", "作业图片缓存管理"),
    ("workflow", "cli.commands.workflow", "提交批改工作流"),
    ("config", "cli.commands.config", "配置查看"),
]
_SUBCOMMAND_NAMES = {name for name, _, _ in _SUBCOMMAND_SPECS}
_SUBCOMMANDS_REGISTERED = False

app = typer.Typer(
    help="学习批改助手命令行工具\n\n缓存作业图片、生成 data URL 载荷并提交批改工作流\n",
    context_settings={"help_option_names": ["-h", "--help"]},
    invoke_without_command=True,
    add_completion=True,
    options_metavar="[选项]",
    subcommand_metavar="命令 [参数]",
)


@app.callback()
def root(
    ctx: typer.Context,
    version_flag: bool = typer.Option(
        False,
        "-V",
        "--version",
        help="输出版本信息",
    ),
    verbose: bool = typer.Option(
        False,
        "-v",
        "--verbose",
        help="输出调试日志",
    ),
) -> None:
    if version_flag:
        typer.echo(__version__)
        raise typer.Exit()
    configure_logging("debug" if verbose else get_settings().log_level)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _parse_invoked_subcommand() -> str | None:
    completion_args = os.getenv("_TYPER_COMPLETE_ARGS")
    tokens: list[str]
    if completion_args:
        try:
            tokens = shlex.split(completion_args)
        except ValueError:
            tokens = completion_args.split()
        if tokens:
            tokens = tokens[1:]
    else:
        tokens = sys.argv[1:]

    for token in tokens:
        if token in _SUBCOMMAND_NAMES:
            return token
        if token.startswith("-"):
            continue
        break
    return None


def _register_subcommands(*, eager: bool = False) -> None:
    """Attach sub-apps; only the invoked one is imported unless ``eager``."""
    global _SUBCOMMANDS_REGISTERED
    if _SUBCOMMANDS_REGISTERED:
        return

    selected = None if eager else _parse_invoked_subcommand()
    for name, module_path, help_text in _SUBCOMMAND_SPECS:
        if eager or selected == name:
            module = import_module(module_path)
            app.add_typer(module.app, name=name)
            continue
        app.add_typer(
            typer.Typer(
                help=help_text,
                add_completion=False,
                no_args_is_help=True,
                options_metavar="[选项]",
                subcommand_metavar="命令 [参数]",
            ),
            name=name,
        )

    _SUBCOMMANDS_REGISTERED = True


def build_app() -> typer.Typer:
    """Return the app with every sub-app imported (used by tests and docs)."""
    _register_subcommands(eager=True)
    return app


def main() -> None:
    _register_subcommands()
    app()


__all__ = ["app", "build_app", "main"]
