"""Rich terminal renderer for validation outcomes.

Color scheme
------------
- green : phase PASSED
- red   : phase FAILED
- dim   : phase SKIPPED
"""

from __future__ import annotations

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from depositgate.models.outcome import PhaseStatus, ValidationOutcome, ValidationPhase

_STATUS_ICONS: dict[PhaseStatus, str] = {
    PhaseStatus.PASSED: "[green]PASSED[/green]",
    PhaseStatus.FAILED: "[bold red]FAILED[/bold red]",
    PhaseStatus.SKIPPED: "[dim]SKIPPED[/dim]",
}

_PHASE_NAMES: dict[ValidationPhase, str] = {
    ValidationPhase.PARSING_MANIFEST: "Manifest",
    ValidationPhase.CHECKING_COMPLETENESS: "Completeness",
    ValidationPhase.CHECKING_MEMBERSHIP: "Membership",
    ValidationPhase.VERIFYING_INTEGRITY: "Integrity",
}


class OutcomeRenderer:
    """Renders a ``ValidationOutcome`` as Rich terminal output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render_outcome(self, outcome: ValidationOutcome) -> Panel:
        """Render the phase table and, if any, the violation table."""
        parts: list = [self._build_phase_table(outcome)]
        if outcome.violations:
            parts.extend([Text(""), self._build_violation_table(outcome)])

        if outcome.succeeded:
            verdict = "[bold green]ACCEPTED[/bold green]"
            border = "green"
        else:
            verdict = "[bold red]REJECTED[/bold red]"
            border = "red"

        parts.extend([
            Text(""),
            Text.from_markup(
                f"[bold]Run:[/bold] {outcome.run_id}  |  "
                f"[bold]Violations:[/bold] {len(outcome.violations)}  |  {verdict}"
            ),
        ])

        return Panel(
            Group(*parts),
            title="[bold]Deposit Validation[/bold]",
            border_style=border,
            padding=(1, 2),
        )

    def _build_phase_table(self, outcome: ValidationOutcome) -> Table:
        table = Table(show_header=True, header_style="bold cyan", expand=True)
        table.add_column("#", style="dim", width=3, justify="right")
        table.add_column("Phase", min_width=14)
        table.add_column("Status", min_width=10, justify="center")
        table.add_column("Violations", justify="right", width=10)

        for i, report in enumerate(outcome.phase_reports):
            count = str(report.violation_count) if report.violation_count else "[dim]0[/dim]"
            table.add_row(
                str(i),
                _PHASE_NAMES.get(report.phase, report.phase.value),
                _STATUS_ICONS[report.status],
                count,
            )
        return table

    @staticmethod
    def _build_violation_table(outcome: ValidationOutcome) -> Table:
        table = Table(show_header=True, header_style="bold red", expand=True)
        table.add_column("Kind", style="yellow", no_wrap=True)
        table.add_column("File", style="cyan", no_wrap=True)
        table.add_column("Message")

        for violation in outcome.violations:
            table.add_row(
                violation.kind.value,
                Text(violation.file_id) if violation.file_id else "[dim]-[/dim]",
                Text(violation.message),
            )
        return table

    def print_outcome(self, outcome: ValidationOutcome) -> None:
        self.console.print(self.render_outcome(outcome))
