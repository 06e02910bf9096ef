"""``depositgate validate MANIFEST`` — validate a deposit from local files.

Parts are given explicitly with ``--file ID=PATH`` and/or located through
the manifest's own file locations relative to ``--package-dir``.  The
manifest file itself is always submitted as the ``manifest`` part.
"""

from __future__ import annotations

import json
import logging
from contextlib import ExitStack
from pathlib import Path

import typer
from rich.console import Console

from depositgate.api.dispatch import exit_code_for, outcome_body
from depositgate.cli.renderer import OutcomeRenderer
from depositgate.config import settings
from depositgate.core.manifest_parser import DefaultManifestParser, ManifestParseError
from depositgate.core.validator import DepositValidator
from depositgate.models.deposit import UploadBundle
from depositgate.models.manifest import MANIFEST_PART

logger = logging.getLogger(__name__)

console = Console()


def parse_file_option(value: str) -> tuple[str, Path]:
    """Split an ``ID=PATH`` option value."""
    part_id, sep, raw_path = value.partition("=")
    if not sep or not part_id or not raw_path:
        raise typer.BadParameter(
            f"expected ID=PATH, got {value!r}", param_hint="--file"
        )
    path = Path(raw_path)
    if not path.is_file():
        raise typer.BadParameter(f"no such file: {raw_path}", param_hint="--file")
    return part_id, path


def locate_package_files(manifest_bytes: bytes, package_dir: Path) -> list[tuple[str, Path]]:
    """Resolve manifest file locations (``file://./...`` or relative paths) on disk.

    Records without a location, or whose file does not exist, are left out;
    the completeness phase reports them.  Locations that point outside
    *package_dir* are ignored.
    """
    try:
        records = DefaultManifestParser().parse(manifest_bytes)
    except ManifestParseError:
        # The validator reports the parse error itself.
        return []

    root = package_dir.resolve()
    located: list[tuple[str, Path]] = []
    for record in records:
        if not record.location:
            continue
        candidate = (root / record.location.removeprefix("file://")).resolve()
        if not candidate.is_relative_to(root):
            logger.warning(
                "Ignoring %s: location %s is outside %s", record.id, record.location, root
            )
            continue
        if candidate.is_file():
            located.append((record.id, candidate))
    return located


def validate_cmd(
    manifest: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Path to the manifest document (XML or JSON).",
    ),
    files: list[str] = typer.Option(
        [],
        "--file",
        "-f",
        help="Uploaded part as ID=PATH. Repeat for more parts.",
    ),
    package_dir: Path = typer.Option(
        None,
        "--package-dir",
        "-d",
        exists=True,
        file_okay=False,
        help="Locate parts through the manifest's file locations, relative to this directory.",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the response body as JSON instead of tables.",
    ),
) -> None:
    """Validate a deposit package against its manifest.

    Exits 0 when the deposit is accepted and 1 when it is rejected.
    """
    parts = [parse_file_option(value) for value in files]
    if package_dir is not None:
        parts = locate_package_files(manifest.read_bytes(), package_dir) + parts

    validator = DepositValidator(settings=settings)

    with ExitStack() as stack:
        bundle = UploadBundle()
        bundle.add(MANIFEST_PART, stack.enter_context(manifest.open("rb")))
        for part_id, path in parts:
            bundle.add(part_id, stack.enter_context(path.open("rb")))
        outcome = validator.submit(bundle)

    if as_json:
        typer.echo(json.dumps(outcome_body(outcome), indent=2))
    else:
        OutcomeRenderer(console=console).print_outcome(outcome)

    raise typer.Exit(code=exit_code_for(outcome))
