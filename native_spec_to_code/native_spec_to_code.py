import json
import logging
from pathlib import Path

import click

from .pipeline import AtomicWriter, CompileResult, CompilerConfig, SpecCompileError, SpecCompiler
from .pipeline.backends import BACKENDS


def _load_config(path: str | None) -> CompilerConfig:
    if path is None:
        return CompilerConfig()
    with open(path) as f:
        return CompilerConfig.from_dict(json.load(f))


def _compile_or_exit(ctx: click.Context, path: str) -> CompileResult:
    compiler: SpecCompiler = ctx.obj
    result = compiler.compile_file(path)
    if not result.ok:
        for diagnostic in result.diagnostics:
            click.echo(diagnostic.format(), err=True)
        click.echo(f"Found {len(result.diagnostics)} error(s) in {path}", err=True)
        ctx.exit(1)
    return result


@click.group()
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True), help="JSON config file")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
@click.pass_context
def cli(ctx, config, verbose):
    """Compile native module specifications into schemas and bridging code."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = SpecCompiler(_load_config(config))


@cli.command("compile")
@click.option("--output", "-o", default=None, type=click.Path(resolve_path=True), help="Write the schemas to this file")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.pass_context
def compile_command(ctx, output, path):
    """Compile a specification and print its schemas as JSON."""
    result = _compile_or_exit(ctx, path)
    out = json.dumps(result.to_dict(), indent=2, sort_keys=True, ensure_ascii=False) + "\n"
    if output is None:
        click.echo(out, nl=False)
    else:
        AtomicWriter().write(Path(output), out)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.pass_context
def show(ctx, path):
    """Print a summary of every module of a specification."""
    result = _compile_or_exit(ctx, path)
    compiler: SpecCompiler = ctx.obj
    click.echo("\n\n".join(compiler.summary(schema) for schema in result.schemas))


@cli.command()
@click.option(
    "--target",
    "-t",
    "targets",
    multiple=True,
    type=click.Choice(sorted(BACKENDS)),
    help="Generate only these targets (default: all)",
)
@click.argument("path", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.argument("output_dir", type=click.Path(file_okay=False, resolve_path=True))
@click.pass_context
def generate(ctx, targets, path, output_dir):
    """Generate bridging code for a specification."""
    result = _compile_or_exit(ctx, path)
    compiler: SpecCompiler = ctx.obj
    try:
        files = compiler.generate(result.schemas, output_dir, targets or tuple(BACKENDS))
    except SpecCompileError as e:
        click.echo(f"error: {e}", err=True)
        ctx.exit(1)

    writer = AtomicWriter()
    for generated in files:
        status = "wrote" if writer.write_result(generated) else "unchanged"
        click.echo(f"{status}: {generated.path}")
