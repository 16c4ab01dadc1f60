"""
kyc-deposit CLI — `kyc-deposit` command.

Commands:
  kyc-deposit run               Run one verification-deposit session
  kyc-deposit status            Show the stored KYC status
  kyc-deposit reset             Forget stored attempts and verification
  kyc-deposit charge <cmd>      Direct charge backend calls
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional

try:
    import click
    from rich.console import Console
    from rich.logging import RichHandler
except ImportError:
    raise SystemExit("CLI requires extras: pip install kyc-deposit[cli]")

from kyc_deposit.config import DepositConfig
from kyc_deposit.errors import ConfigError
from kyc_deposit.models.kyc import KYCStatus

console = Console()
CONFIG_FILE = Path.home() / ".kyc-deposit" / "config.json"

FAST_TIMINGS = {
    "poll_interval": 0.2,
    "settle_delay": 0.2,
    "decline_display": 0.6,
    "close_delay": 0.2,
    "countdown_interval": 0.2,
}


def _load_config() -> dict:
    try:
        return json.loads(CONFIG_FILE.read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def _save_config(cfg: dict) -> None:
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_FILE.write_text(json.dumps(cfg, indent=2))


def _load_kyc(cfg: dict) -> KYCStatus:
    return KYCStatus.model_validate(cfg.get("kyc") or {})


def _deposit_config(cfg: dict, overrides: Optional[dict[str, Any]] = None) -> DepositConfig:
    data = {**(cfg.get("deposit") or {}), **(overrides or {})}
    try:
        return DepositConfig.from_mapping(data)
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)


def _run(coro):
    return asyncio.run(coro)


@click.group()
@click.version_option("0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Log flow transitions")
def main(verbose: bool):
    """KYC verification deposit via PIX."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


# Register subcommands from separate modules
from kyc_deposit.cli.deposit import run_cmd, status_cmd, reset_cmd
from kyc_deposit.cli.charge import charge

main.add_command(run_cmd)
main.add_command(status_cmd)
main.add_command(reset_cmd)
main.add_command(charge)


if __name__ == "__main__":
    main()
