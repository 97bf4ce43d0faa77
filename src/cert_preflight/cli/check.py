"""CLI commands for running certification checks."""

from pathlib import Path
from typing import Optional, Sequence

import typer

from cert_preflight.checks.base import Check
from cert_preflight.cli.utils import EXIT_NOT_PASSED, EXIT_PASSED, err_console, fail, get_config
from cert_preflight.models.check import Results

app = typer.Typer(help="Run certification checks against an image.", no_args_is_help=True)

RESULTS_FILENAME = "results.json"


def _run(
    ctx: typer.Context,
    image: str,
    checks: Sequence[Check],
    is_bundle: bool,
    format: Optional[str],
    output: Optional[Path],
    artifacts_dir: Optional[Path],
) -> None:
    from cert_preflight.artifacts.writer import FilesystemArtifactWriter
    from cert_preflight.core.engine import Engine
    from cert_preflight.renderers import JSONRenderer, OutputFormat, RenderContext, get_renderer
    from cert_preflight.sources.base import ImageSourceError, RegistryAuth
    from cert_preflight.sources.docker import DockerImageSource
    from cert_preflight.utils.errors import PreflightError, validate_image_reference

    config = get_config(ctx)

    try:
        validate_image_reference(image)
        output_format = OutputFormat(format or config.output.format)
    except PreflightError as e:
        fail(str(e.to_audit_error()))
    except ValueError:
        fail(f"Unknown output format: {format or config.output.format}")

    writer = FilesystemArtifactWriter(artifacts_dir or Path(config.artifacts.directory))
    engine = Engine(
        DockerImageSource(auth=RegistryAuth.from_env()),
        checks,
        artifacts=writer,
        is_bundle=is_bundle,
    )

    try:
        with err_console.status(f"Running {len(checks)} checks against {image}..."):
            results: Results = engine.execute(image)
    except PreflightError as e:
        fail(str(e.to_audit_error()))
    except ImageSourceError as e:
        fail(str(e))

    json_context = RenderContext(format=OutputFormat.JSON)
    writer.write_file(RESULTS_FILENAME, JSONRenderer().render(results, json_context).encode())

    context = RenderContext(
        format=output_format,
        output_path=output,
        verbose=bool((ctx.obj or {}).get("verbose")),
        color=config.output.color,
    )
    renderer = get_renderer(output_format)
    if output:
        renderer.render_to_file(results, context)
        err_console.print(f"Report written to {output}")
    elif output_format == OutputFormat.JSON:
        typer.echo(renderer.render(results, context))
    else:
        renderer.render(results, context)

    raise typer.Exit(EXIT_PASSED if results.passed_overall else EXIT_NOT_PASSED)


@app.command("container")
def container_cmd(
    ctx: typer.Context,
    image: str = typer.Argument(..., help="Container image reference"),
    format: Optional[str] = typer.Option(
        None,
        "--format",
        "-f",
        help="Output format (terminal, json)",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file path",
    ),
    artifacts: Optional[Path] = typer.Option(
        None,
        "--artifacts",
        "-a",
        help="Directory for run artifacts",
    ),
) -> None:
    """
    Run the container checks against an image.

    Example:
        cert-preflight check container quay.io/example/app:1.0
    """
    from cert_preflight.checks.registry import get_default_registry

    checks = get_default_registry().checks
    if not checks:
        err_console.print(
            "[yellow]Warning:[/yellow] no container checks are registered; the run will pass trivially"
        )

    _run(ctx, image, checks, False, format, output, artifacts)


@app.command("operator")
def operator_cmd(
    ctx: typer.Context,
    bundle: str = typer.Argument(..., help="Operator bundle image reference"),
    index_image: Optional[str] = typer.Option(
        None,
        "--index-image",
        help="Catalog image containing the bundle (PFLT_INDEXIMAGE)",
    ),
    channel: Optional[str] = typer.Option(
        None,
        "--channel",
        help="Channel to subscribe to instead of the bundle default (PFLT_CHANNEL)",
    ),
    kubeconfig: Optional[Path] = typer.Option(
        None,
        "--kubeconfig",
        "-k",
        help="Path to kubeconfig file",
    ),
    format: Optional[str] = typer.Option(
        None,
        "--format",
        "-f",
        help="Output format (terminal, json)",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file path",
    ),
    artifacts: Optional[Path] = typer.Option(
        None,
        "--artifacts",
        "-a",
        help="Directory for run artifacts",
    ),
) -> None:
    """
    Deploy an operator bundle through OLM and check that it installs.

    Example:
        cert-preflight check operator quay.io/example/bundle:v1 --index-image quay.io/example/index:v1
    """
    from cert_preflight.artifacts.writer import FilesystemArtifactWriter
    from cert_preflight.cluster.kubectl import KubectlClusterClient
    from cert_preflight.core.olm import DeployableByOlmCheck

    config = get_config(ctx)
    updates = {
        key: value
        for key, value in (
            ("index_image", index_image),
            ("channel", channel),
            ("kubeconfig", str(kubeconfig) if kubeconfig else None),
        )
        if value is not None
    }
    operator_config = config.operator.model_copy(update=updates)

    if not operator_config.index_image:
        err_console.print(
            "[yellow]Warning:[/yellow] no index image configured; the OLM deployment check will error"
        )

    client = KubectlClusterClient(kubeconfig=operator_config.kubeconfig, context=operator_config.context)
    writer = FilesystemArtifactWriter(artifacts or Path(config.artifacts.directory))
    check = DeployableByOlmCheck.from_config(operator_config, client, writer)

    _run(ctx, bundle, [check], True, format, output, artifacts)
