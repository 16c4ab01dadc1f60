"""CLI: kyc-deposit charge create|status"""

import json
from decimal import Decimal, InvalidOperation
from typing import Optional

import click
from rich.console import Console

from kyc_deposit.charges import HttpChargeService
from kyc_deposit.config import DEFAULT_DEPOSIT_AMOUNT
from kyc_deposit.errors import ChargeServiceError
from kyc_deposit.models.charge import format_brl
from kyc_deposit.transport.http import HttpClient

console = Console()


def _load_config() -> dict:
    from kyc_deposit.cli.main import _load_config
    return _load_config()


def _run(coro):
    from kyc_deposit.cli.main import _run
    return _run(coro)


def _service(base_url: Optional[str]) -> HttpChargeService:
    url = base_url or _load_config().get("base_url")
    if not url:
        console.print("[red]No charge backend configured. Pass --base-url.[/red]")
        raise SystemExit(1)
    return HttpChargeService(HttpClient(base_url=url))


@click.group()
def charge():
    """Charge backend commands."""


@charge.command("create")
@click.option("--amount", default=str(DEFAULT_DEPOSIT_AMOUNT), show_default=True)
@click.option("--base-url", default=None)
@click.option("--json-output", "--json", is_flag=True)
def charge_create(amount: str, base_url: Optional[str], json_output: bool):
    """Create a PIX charge."""
    try:
        value = Decimal(amount)
    except InvalidOperation:
        raise click.BadParameter(f"not a decimal: {amount}", param_hint="--amount")

    service = _service(base_url)

    async def _create():
        try:
            with console.status("Generating PIX..."):
                created = await service.create_pix(value)
        finally:
            await service.close()
        if json_output:
            click.echo(created.model_dump_json(indent=2))
            return
        console.print(f"[green]PIX generated: {created.transaction_id}[/green] ({format_brl(created.amount)})")
        console.print(created.payment_code)

    try:
        _run(_create())
    except ChargeServiceError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)


@charge.command("status")
@click.argument("transaction_id")
@click.option("--base-url", default=None)
@click.option("--json-output", "--json", is_flag=True)
def charge_status(transaction_id: str, base_url: Optional[str], json_output: bool):
    """Check a charge's payment status."""

    service = _service(base_url)

    async def _status():
        try:
            result = await service.check_status(transaction_id)
        finally:
            await service.close()
        if json_output:
            click.echo(json.dumps({"status": result.status.value, "value": str(result.value)}))
            return
        color = "green" if result.is_paid else "yellow"
        console.print(f"[{color}]{result.status.value}[/{color}] {format_brl(result.value)}")

    try:
        _run(_status())
    except ChargeServiceError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)
