import click
import json
import os

from imagemeta.formats import Bmp, ImageMetaError, Png
from imagemeta.inspector import describe, open_image
from imagemeta.logger import error


def output_result(result, json_output: bool):
    if json_output:
        if not isinstance(result, (dict, list)):
            result = {"result": result}
        click.echo(json.dumps(result, ensure_ascii=False))
    else:
        if isinstance(result, (dict, list)):
            click.echo(json.dumps(result, ensure_ascii=False, indent=2))
        else:
            click.echo(result)


def format_line(image) -> str:
    return f"This is a .{image.format_name} image."


def resolution_line(width, height) -> str:
    return f"Resolution: {width}x{height} pixels."


def chunk_line(record) -> str:
    return f"Chunk {record.index}. Type: {record.chunk_type}; length: {record.length}; size: {record.size}"


def print_report(path: str, walk: bool = True):
    """Print the report for one file, chunk lines as they are read."""
    with open_image(path) as image:
        click.echo(format_line(image))
        if isinstance(image.verdict, Bmp) or not walk:
            resolution = image.read_resolution()
            if resolution:
                click.echo(resolution_line(*resolution))
        elif isinstance(image.verdict, Png):
            for record in image.chunks():
                if record.index == 1 and record.width is not None:
                    click.echo(resolution_line(record.width, record.height))
                click.echo(chunk_line(record))


def sniff_summary(path: str):
    with open_image(path) as image:
        result = {"path": path, "format": image.format_name}
        resolution = image.read_resolution()
        if resolution:
            result["width"], result["height"] = resolution
        return result


def run_paths(paths, json_output: bool, walk: bool) -> int:
    failed = 0
    for path in paths:
        if len(paths) > 1 and not json_output:
            click.echo(f"{path}:")
        try:
            if json_output:
                output_result(describe(path) if walk else sniff_summary(path), True)
            else:
                print_report(path, walk=walk)
        except ImageMetaError as e:
            failed += 1
            error(f"{path}: {e}", echo=False)
            if json_output:
                output_result({"path": path, "error": str(e)}, True)
            else:
                click.echo(str(e))
    return 1 if failed else 0


@click.group()
@click.option("--json", "json_output", is_flag=True, help="Return output in JSON format")
@click.pass_context
def cli(ctx, json_output):
    """PNG/BMP image metadata CLI."""
    json_env = os.environ.get("IMAGEMETA_JSON", "0").lower() in ("1", "true")
    ctx.obj = {"json": json_output or json_env}


@cli.command()
@click.argument("paths", nargs=-1)
@click.pass_context
def identify(ctx, paths):
    """Identify images and list PNG chunks."""
    if not paths:
        paths = (click.prompt("Enter the file's path"),)
    ctx.exit(run_paths(paths, ctx.obj["json"], walk=True))


@cli.command()
@click.argument("paths", nargs=-1, required=True)
@click.pass_context
def sniff(ctx, paths):
    """Report format and resolution without walking past the first chunk."""
    ctx.exit(run_paths(paths, ctx.obj["json"], walk=False))


if __name__ == "__main__":
    cli()
