"""CLI for the order pipeline.

Runs a single order through the pipeline with the simulated collaborators
and prints what the caller saw and what the stores hold afterwards.
"""

import asyncio
import json
from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from order_pipeline.config import Settings, get_settings
from order_pipeline.core import OrderPipeline, PaymentFailedError
from order_pipeline.core.config_loader import load_order_config, resolve_config_path
from order_pipeline.integrations import (
    InMemoryWorkQueue,
    SimulatedNotificationSender,
    SimulatedPaymentGateway,
)
from order_pipeline.monitoring import setup_logging

app = typer.Typer(
    name="order-pipeline",
    help="Order pipeline - process orders with audit trail and delayed finalization",
    add_completion=False,
)

console = Console()


def _overrides(
    amount: Optional[float],
    template: Optional[str],
    flag: Optional[str],
    email: Optional[str],
    config_path: Optional[str],
    started_by: Optional[str],
) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {
        "amount": amount,
        "template": template,
        "flag": flag,
        "email": email,
        "config_path": config_path,
    }
    if started_by:
        overrides["meta"] = {"started_by": started_by}
    return {key: value for key, value in overrides.items() if value is not None}


def _print_state(pipeline: OrderPipeline, order_id: str, queue: InMemoryWorkQueue) -> None:
    table = Table(title="Pipeline State")
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    snapshot = pipeline.orders.get(order_id)
    table.add_row("last_order_id", str(pipeline.runtime.last_order_id))
    table.add_row("outage_mode", str(pipeline.runtime.outage_mode))
    table.add_row("retry_count", str(pipeline.runtime.retry_count))
    table.add_row(
        "order_cache",
        json.dumps(snapshot.model_dump(mode="json")) if snapshot else "-",
    )
    table.add_row("queued_jobs", ", ".join(job.type for job in queue.jobs) or "-")
    table.add_row("pending_finalizations", str(pipeline.pending_finalizations))

    console.print(table)


async def _run_order(
    order_id: str,
    overrides: Dict[str, Any],
    settings: Settings,
    outage: bool,
    fail_payment: bool,
    wait: bool,
) -> int:
    queue = InMemoryWorkQueue()
    pipeline = OrderPipeline(
        payment_gateway=SimulatedPaymentGateway(
            fail_with="Card declined" if fail_payment else None
        ),
        notification_sender=SimulatedNotificationSender(),
        work_queue=queue,
        settings=settings,
    )
    pipeline.runtime.set_outage_mode(outage)

    exit_code = 0
    try:
        result = await pipeline.process(order_id, overrides)
        console.print(
            Panel(
                json.dumps(result.model_dump(mode="json"), indent=2),
                title="[bold green]Callback Result[/bold green]",
                border_style="green",
            )
        )
    except PaymentFailedError as e:
        console.print(f"[red]Error:[/red] {e}")
        exit_code = 1

    if wait:
        await pipeline.drain()
    else:
        await pipeline.shutdown()

    _print_state(pipeline, order_id, queue)
    return exit_code


@app.command()
def run(
    order_id: str = typer.Argument(..., help="Order identifier"),
    amount: Optional[float] = typer.Option(None, "--amount", "-a", help="Amount to charge"),
    template: Optional[str] = typer.Option(None, "--template", "-t", help="Notification template"),
    flag: Optional[str] = typer.Option(None, "--flag", help="Order classification flag"),
    email: Optional[str] = typer.Option(None, "--email", "-e", help="Customer email"),
    config_path: Optional[str] = typer.Option(
        None, "--config-path", "-c", help="Order config JSON file"
    ),
    started_by: Optional[str] = typer.Option(None, "--started-by", help="Actor to record"),
    outage: bool = typer.Option(False, "--outage", help="Simulate an outage (queue the order)"),
    fail_payment: bool = typer.Option(False, "--fail-payment", help="Decline the charge"),
    wait: bool = typer.Option(
        True, "--wait/--no-wait", help="Wait for delayed finalization before exiting"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
) -> None:
    """Process one order and show the callback result and final state."""
    settings = get_settings()
    if verbose:
        settings = settings.model_copy(update={"log_level": "DEBUG"})
    setup_logging(settings)

    exit_code = asyncio.run(
        _run_order(
            order_id,
            _overrides(amount, template, flag, email, config_path, started_by),
            settings,
            outage=outage,
            fail_payment=fail_payment,
            wait=wait,
        )
    )
    raise typer.Exit(code=exit_code)


@app.command()
def config(
    config_path: Optional[str] = typer.Option(
        None, "--config-path", "-c", help="Order config JSON file"
    ),
) -> None:
    """Show the order configuration that would be used."""
    settings = get_settings()
    path = resolve_config_path(config_path, settings)
    order_config = load_order_config(config_path, settings)

    table = Table(title=f"Order Config ({path})")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in order_config.model_dump(by_alias=True).items():
        table.add_row(key, str(value))
    console.print(table)


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
