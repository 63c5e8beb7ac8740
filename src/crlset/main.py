"""
Application entry point: wires dependencies and dispatches CLI commands.

Composition root: loads settings, configures structlog, creates the concrete
HTTP adapters and hands explicit configs and sinks to crlset.commands.

    crlset fetch > crl-set
    crlset dump crl-set [issuer.pem]
    crlset dumpSPKIs crl-set

Data goes to stdout, logs and diagnostics to stderr. Exit status is 0 on
success and 1 on any reported failure.
"""

from __future__ import annotations

import logging
import sys
from functools import partial
from pathlib import Path

import click
import structlog
from pydantic import ValidationError

from crlset import __version__
from crlset.adapters.http_client import HttpContainerDownloader, HttpUpdateChecker
from crlset.commands import CommandConfig, Operation, OutputSinks, run_command
from crlset.config import AppSettings, LogSettings
from crlset.pipeline import fetch_crlset
from crlset.railway import Result


def configure_structlog(log_level: str = "INFO") -> None:
    """
    Configure structlog for human-readable logs on stderr.

    stdout is reserved for command output, so logs never go there. Loggers
    are not cached: the stream is looked up again on each configure call.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def _create_adapters(settings: AppSettings) -> tuple[HttpUpdateChecker, HttpContainerDownloader]:
    checker = HttpUpdateChecker(
        service_url=settings.update.url,
        app_id=settings.update.app_id,
        timeout=settings.http_timeout_seconds,
    )
    downloader = HttpContainerDownloader(timeout=settings.http_timeout_seconds)
    return checker, downloader


def _fetcher(settings: AppSettings) -> partial[Result[bytes]]:
    checker, downloader = _create_adapters(settings)
    return partial(fetch_crlset, checker=checker, downloader=downloader)


def _std_sinks() -> OutputSinks:
    return OutputSinks(
        data=click.get_binary_stream("stdout"),
        diagnostics=sys.stderr,
    )


def _finish(ctx: click.Context, result: Result[int]) -> None:
    ctx.exit(0 if result.is_success() else 1)


def _load_settings(ctx: click.Context) -> AppSettings:
    try:
        return AppSettings()
    except ValidationError as e:
        click.echo(f"FATAL: Configuration error: {e}", err=True)
        ctx.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="crlset")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Download and inspect CRLSets."""
    configure_structlog(LogSettings().log_level)


@cli.command(name="fetch")
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the CRLSet to this file instead of stdout.",
)
@click.pass_context
def fetch_command(ctx: click.Context, output: Path | None) -> None:
    """Download the current CRLSet and write it to stdout."""
    settings = _load_settings(ctx)
    result = run_command(
        CommandConfig(operation=Operation.FETCH, output_path=output),
        _std_sinks(),
        fetch_fn=_fetcher(settings),
    )
    _finish(ctx, result)


@cli.command(name="dump")
@click.argument("crlset_file", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("certificate_file", required=False, type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def dump_command(ctx: click.Context, crlset_file: Path, certificate_file: Path | None) -> None:
    """
    List revoked serials.

    Without CERTIFICATE_FILE, prints every SPKI hash / serial pair. With it,
    prints only the serials revoked under that certificate's public key.
    """
    result = run_command(
        CommandConfig(
            operation=Operation.DUMP,
            crlset_path=crlset_file,
            certificate_path=certificate_file,
        ),
        _std_sinks(),
    )
    _finish(ctx, result)


@cli.command(name="dumpSPKIs")
@click.argument("crlset_file", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def dump_spkis_command(ctx: click.Context, crlset_file: Path) -> None:
    """Print the blocked and interception SPKI hashes from the header."""
    result = run_command(
        CommandConfig(operation=Operation.DUMP_SPKIS, crlset_path=crlset_file),
        _std_sinks(),
    )
    _finish(ctx, result)


cli.add_command(dump_spkis_command, name="dump-spkis")


def main() -> None:
    cli(prog_name="crlset")


if __name__ == "__main__":
    main()
