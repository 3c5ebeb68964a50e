"""CLI bootstrap for the giros engine."""

import typer

from giros.core.logging import configure_logging
from giros.db.session import SessionFactory
from giros.repositories.ledger_repository import LedgerRepository
from giros.services.ledger_recorder import LedgerRecorder
from giros.services.minorista_ledger_service import MinoristaLedgerService

app = typer.Typer(help="CLI for giro settlement and minorista ledgers.")
APPLY_OPTION = typer.Option(
    False,
    "--apply",
    help="Write the ledger balances onto drifted accounts.",
)


@app.command("healthcheck")
def healthcheck() -> None:
    """Verify that the CLI entrypoint is available."""
    typer.echo("giros is ready")


@app.command("rebuild-balances")
def rebuild_balances(apply: bool = APPLY_OPTION) -> None:
    """Compare live minorista balances with their ledger snapshots."""
    configure_logging()
    with SessionFactory() as session:
        ledger_repository = LedgerRepository(session)
        service = MinoristaLedgerService(
            ledger_repository=ledger_repository,
            recorder=LedgerRecorder(ledger_repository=ledger_repository),
            session=session,
        )
        reports = service.rebuild_balances(apply=apply)

    drifted = [report for report in reports if report.has_drift]
    for report in drifted:
        status = "repaired" if report.repaired else "drift"
        typer.echo(
            f"{report.minorista_id} {status}: "
            f"available {report.live.available_credit} -> "
            f"{report.projected.available_credit}, "
            f"balance in favor {report.live.credit_balance} -> "
            f"{report.projected.credit_balance}, "
            f"external debt {report.live.external_debt} -> "
            f"{report.projected.external_debt}"
        )
    for report in reports:
        if report.snapshot_breaks:
            breaks = ", ".join(str(sequence) for sequence in report.snapshot_breaks)
            typer.echo(f"{report.minorista_id} snapshot breaks at: {breaks}")
    typer.echo(f"Checked: {len(reports)} | Drifted: {len(drifted)}")
    if drifted and not apply:
        raise typer.Exit(code=1)


def main() -> None:
    """Run the giros CLI application."""
    app()


if __name__ == "__main__":
    main()
