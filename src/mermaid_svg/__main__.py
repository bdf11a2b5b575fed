"""CLI entry point for mermaid-svg."""

import json
import logging
import sys

import click

from mermaid_svg.api import MermaidAPI
from mermaid_svg.surface import Document


@click.command()
@click.argument("input", required=False, type=click.Path(exists=True))
@click.option("--output", "-o", "output", type=str, default=None, help="Write the svg to this file instead of stdout")
@click.option("--id", "svg_id", type=str, default="mermaid-svg", help="Id of the generated svg element")
@click.option("--config", "-c", "config", type=str, default=None, help="JSON object merged into the configuration")
@click.option("--css", "css_files", type=click.Path(exists=True), multiple=True, help="Stylesheet whose matching rules are embedded")
@click.option("--no-css", "no_css", is_flag=True, help="Do not embed css rules")
@click.option("--verbose", "-v", "verbose", is_flag=True, help="Log debug output to stderr")
def main(
    input: str | None,
    output: str | None,
    svg_id: str,
    config: str | None,
    css_files: tuple[str, ...],
    no_css: bool,
    verbose: bool,
) -> None:
    """Mermaid diagram definition to svg."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    if input:
        try:
            with open(input) as f:
                text = f.read()
        except OSError as e:
            click.echo(f"error: cannot read '{input}': {e}", err=True)
            sys.exit(1)
    else:
        text = sys.stdin.read()

    stylesheets: list[str] = []
    for path in css_files:
        with open(path) as f:
            stylesheets.append(f.read())

    errors: list[Exception] = []
    api = MermaidAPI(document=Document(stylesheets=stylesheets), parse_error_handler=lambda err, ctx: errors.append(err))
    if config:
        try:
            overrides = json.loads(config)
        except json.JSONDecodeError as e:
            click.echo(f"error: --config is not valid JSON: {e}", err=True)
            sys.exit(1)
        if not isinstance(overrides, dict):
            click.echo("error: --config must be a JSON object", err=True)
            sys.exit(1)
        api.initialize(overrides)
    if no_css:
        api.initialize({"cloneCssStyles": False})

    if api.detect_type(text) is None:
        click.echo("error: unrecognized diagram type", err=True)
        sys.exit(1)

    results: list[str] = []
    api.render(svg_id, text, lambda svg, bind: results.append(svg))

    if errors or not results:
        message = errors[0] if errors else "nothing rendered"
        click.echo(f"parse error:\n{message}", err=True)
        sys.exit(1)

    rendered = results[0]
    if output:
        try:
            with open(output, "w") as f:
                f.write(rendered)
        except OSError as e:
            click.echo(f"error: cannot write '{output}': {e}", err=True)
            sys.exit(1)
    else:
        click.echo(rendered)


if __name__ == "__main__":
    main()
