"""CLI: kyc-deposit run|status|reset"""

from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from kyc_deposit.charges import HttpChargeService, SandboxChargeService
from kyc_deposit.errors import GenerationError
from kyc_deposit.models.charge import format_brl
from kyc_deposit.models.session import Outcome, Step
from kyc_deposit.orchestrator import DepositOrchestrator
from kyc_deposit.policy import always_succeed, decline_first_attempt
from kyc_deposit.tracking import PixelTracker
from kyc_deposit.transport.http import HttpClient

console = Console()

STEP_MESSAGES = {
    Step.GENERATING: "[cyan]Generating PIX...[/cyan]",
    Step.PROCESSING: "[blue]Processing verification...[/blue]",
    Step.DECLINED: "[red]Verification failed: divergent information detected. Please redo the KYC deposit.[/red]",
    Step.SUCCESS: "[green]Verification complete! Withdrawals are unlocked.[/green]",
}


def _load_config() -> dict:
    from kyc_deposit.cli.main import _load_config
    return _load_config()


def _save_config(cfg: dict) -> None:
    from kyc_deposit.cli.main import _save_config
    _save_config(cfg)


def _run(coro):
    from kyc_deposit.cli.main import _run
    return _run(coro)


@click.command("run")
@click.option("--attempt", type=int, default=None, help="Attempt number (default: stored attempts + 1)")
@click.option("--base-url", default=None, help="Charge backend URL (default: sandbox)")
@click.option("--paid-after", default=2, type=int, show_default=True, help="Sandbox: status checks until paid")
@click.option("--fast", is_flag=True, help="Shrink every delay for a quick demo")
@click.option("--always-succeed", "succeed", is_flag=True, help="Skip the first-attempt decline")
def run_cmd(attempt: Optional[int], base_url: Optional[str], paid_after: int, fast: bool, succeed: bool):
    """Run one verification-deposit session."""
    from kyc_deposit.cli.main import FAST_TIMINGS, _deposit_config, _load_kyc

    cfg = _load_config()
    kyc = _load_kyc(cfg)
    if kyc.deposit_verified:
        console.print("[green]Deposit already verified.[/green]")
        return
    attempt_number = attempt if attempt is not None else kyc.next_attempt_number()
    config = _deposit_config(cfg, FAST_TIMINGS if fast else None)
    url = base_url or cfg.get("base_url")

    async def _session():
        http = HttpClient(base_url=url) if url else None
        service = HttpChargeService(http) if http else SandboxChargeService(paid_after_checks=paid_after)
        orchestrator: Optional[DepositOrchestrator] = None

        def on_step(step: Step) -> None:
            if step == Step.AWAITING_PAYMENT and orchestrator is not None:
                charge = orchestrator.state.charge
                if charge is not None:
                    console.print(f"[bold]PIX generated:[/bold] {format_brl(charge.amount)}")
                    console.print(f"Copy and paste code: [bold]{charge.payment_code}[/bold]")
                console.print("[green]Waiting for payment...[/green]")
            elif step in STEP_MESSAGES:
                console.print(STEP_MESSAGES[step])

        def on_countdown(seconds_left: int) -> None:
            console.print(f"[dim]Returning in {seconds_left}...[/dim]")

        orchestrator = DepositOrchestrator(
            service,
            tracker=PixelTracker(currency=config.currency),
            config=config,
            policy=always_succeed if succeed else decline_first_attempt,
            on_step=on_step,
            on_countdown=on_countdown,
        )
        console.print(f"[bold]KYC verification deposit[/bold] of {format_brl(config.amount)} (attempt {attempt_number})")
        try:
            return await orchestrator.run(attempt_number)
        finally:
            orchestrator.close()
            if http is not None:
                await http.close()

    try:
        outcome = _run(_session())
    except GenerationError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)
    except ValueError as e:
        console.print(f"[red]Invalid attempt: {e}[/red]")
        raise SystemExit(1)

    if outcome is Outcome.SUCCESS:
        kyc.record_success()
    elif outcome is Outcome.DECLINED:
        kyc.record_failure()
    else:
        return
    _save_config({**_load_config(), "kyc": kyc.model_dump()})
    console.print(f"[dim]Progress: {kyc.progress}%, attempts: {kyc.deposit_attempts}[/dim]")


@click.command("status")
def status_cmd():
    """Show the stored KYC status."""
    from kyc_deposit.cli.main import _load_kyc

    kyc = _load_kyc(_load_config())
    table = Table(title=f"KYC verification ({kyc.progress}%)")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Identity verified", "yes" if kyc.identity_verified else "no")
    table.add_row("Deposit verified", "yes" if kyc.deposit_verified else "no")
    table.add_row("Deposit attempts", str(kyc.deposit_attempts))
    table.add_row("Next attempt", str(kyc.next_attempt_number()))
    if kyc.full_name:
        table.add_row("Name", kyc.full_name)
    console.print(table)


@click.command("reset")
def reset_cmd():
    """Forget stored deposit attempts and verification."""
    cfg = _load_config()
    cfg.pop("kyc", None)
    _save_config(cfg)
    console.print("[green]KYC status cleared.[/green]")
