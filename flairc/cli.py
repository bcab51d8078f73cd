# flairc/cli.py
from pathlib import Path
from typing import List, Optional

import typer
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from flairc.errors import ConfigurationError, FlairError
from flairc.logger import get_current_log_file, get_logger
from flairc.ui import console, err_console

app = typer.Typer(help="flairc: build-time compiler for themed CSS-in-JS styles")
logger = get_logger(__name__)


def _fail(message: str, code: int) -> None:
    err_console.print(f"[error]✗ {escape(message)}[/error]")
    err_console.print(f"[info]log: {get_current_log_file()}[/info]")
    raise typer.Exit(code=code)


@app.command("compile")
def compile_command(
    files: List[Path] = typer.Argument(..., help="JS/TS modules to compile"),
    theme: Optional[str] = typer.Option(None, "--theme", "-t", help="Theme source path"),
    out_dir: Optional[Path] = typer.Option(
        None, "--out-dir", "-o", help="Write results here instead of stdout"
    ),
    mapping: bool = typer.Option(False, "--mapping", help="Show token → expression table"),
):
    """Compile style definitions; dynamic values become var() references."""
    from flairc.transform import Compiler, load_settings

    try:
        compiler = Compiler(load_settings(theme))
        results = compiler.compile_many(files)
    except ConfigurationError as e:
        logger.error(f"configuration error: {e}")
        _fail(str(e), code=2)

    failed = 0
    for path, result in results:
        if isinstance(result, FlairError):
            err_console.print(f"[error]✗ {path}: {escape(str(result))}[/error]")
            failed += 1
            continue

        for diag in result.diagnostics:
            err_console.print(f"[warning]{escape(str(diag))}[/warning]")

        if out_dir is not None:
            out_dir.mkdir(parents=True, exist_ok=True)
            target = out_dir / path.name
            target.write_text(result.code, encoding="utf-8")
            err_console.print(f"[success]✓[/success] {path.name} → {target}")
        else:
            typer.echo(result.code)

        if mapping and result.mapping:
            table = Table(title=path.name)
            table.add_column("variable", style="token")
            table.add_column("expression")
            for token, source in result.mapping.items():
                table.add_row(token, source)
            err_console.print(table)

    if failed:
        raise typer.Exit(code=1)


@app.command("extract")
def extract_command(
    resource: str = typer.Argument(..., help="Resource identifier carrying ?css=<base64>"),
):
    """Decode an extraction request and write the CSS bytes to stdout."""
    from flairc.loader import load

    typer.echo(load(resource), nl=False)


@app.command("theme")
def theme_command(
    theme: Optional[str] = typer.Option(None, "--theme", "-t", help="Theme source path"),
):
    """Show the accessor paths the classifier treats as build-time static."""
    from flairc.theme import theme_loader
    from flairc.transform import load_settings

    try:
        environment = theme_loader.load(load_settings(theme).theme_path)
    except ConfigurationError as e:
        _fail(str(e), code=2)

    tree = Tree(f"🎨 [primary]{environment.path}[/primary]")

    def add_subtree(branch, node):
        for key, val in node.items():
            if isinstance(val, dict):
                add_subtree(branch.add(f"[bold]{escape(str(key))}[/bold]"), val)
            else:
                branch.add(f"{escape(str(key))} [info]= {escape(str(val))}[/info]")

    add_subtree(tree, environment.data)
    console.print(tree)
