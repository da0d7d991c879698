from __future__ import annotations

import click
from rich.markup import escape
from rich.table import Table

from .common import Settings, console
from .convert import convert_reference_csv
from .draft import SchoolDraft
from .errors import InsightEdError, SchoolNotFound, TransportError
from .hierarchy import load_hierarchy
from .lookup import autofill, load_reference_records
from .outbox import OutboxStore
from .sync import ItemStatus, OutboxSynchronizer
from .transport import HttpTransport

STATUS_STYLE = {
    ItemStatus.UNATTEMPTED: "[dim]waiting[/dim]",
    ItemStatus.IN_FLIGHT: "[blue]syncing[/blue]",
    ItemStatus.DELIVERED: "[green]✓ delivered[/green]",
    ItemStatus.FAILED: "[red]✗ failed[/red]",
}


@click.group()
@click.pass_context
def cli(ctx: click.Context):
    """Capture school profiles, with an outbox for offline submissions."""
    ctx.obj = Settings.from_env()


def _fail(exc: Exception):
    console.print(f"[red]{escape(str(exc))}[/red]")
    raise SystemExit(1) from exc


def _draft_table(draft: SchoolDraft) -> Table:
    table = Table(title=f"School {draft.school_id}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for name, value in vars(draft).items():
        table.add_row(name, value)
    return table


def _autofill(settings: Settings, draft: SchoolDraft):
    records = load_reference_records(settings.reference_file)
    hierarchy = load_hierarchy(settings.locations_file)
    return autofill(draft, records, hierarchy)


@cli.command("lookup")
@click.argument("school_id")
@click.pass_obj
def lookup(settings: Settings, school_id: str):
    """Auto-fill a profile from the reference dataset."""
    try:
        draft, match = _autofill(settings, SchoolDraft(school_id=school_id))
    except InsightEdError as exc:
        _fail(exc)
    console.print(_draft_table(draft))
    console.print(
        f"Options: {len(match.province_options)} provinces, "
        f"{len(match.municipality_options)} municipalities, "
        f"{len(match.barangay_options)} barangays"
    )


@cli.command("options")
@click.option("--region", default=None)
@click.option("--province", default=None)
@click.option("--municipality", default=None)
@click.pass_obj
def options(
    settings: Settings,
    region: str | None,
    province: str | None,
    municipality: str | None,
):
    """List the choices for the next location level."""
    hierarchy = load_hierarchy(settings.locations_file)
    if region is None:
        label, values = "Regions", hierarchy.regions()
    elif province is None:
        label, values = "Provinces", hierarchy.provinces(region)
    elif municipality is None:
        label, values = "Municipalities", hierarchy.municipalities(region, province)
    else:
        label, values = "Barangays", hierarchy.barangays(region, province, municipality)
    console.print(f"[bold]{label}[/bold] ({len(values)})")
    for value in values:
        console.print(f"  {value}")


@cli.command("submit")
@click.option("--school-id", required=True)
@click.option("--school-name", default=None)
@click.option("--region", default=None)
@click.option("--province", default=None)
@click.option("--municipality", default=None)
@click.option("--barangay", default=None)
@click.option("--division", default=None)
@click.option("--district", default=None)
@click.option("--leg-district", default=None)
@click.option("--mother-school-id", default=None)
@click.option("--latitude", default=None)
@click.option("--longitude", default=None)
@click.option("--curricular-offering", default=None)
@click.option("--submitted-by", default=None, help="Defaults to SUBMITTED_BY.")
@click.option("--autofill/--no-autofill", "use_autofill", default=True)
@click.option(
    "--stage/--no-stage",
    default=True,
    help="Keep the profile in the outbox if it cannot be sent.",
)
@click.pass_obj
def submit(
    settings: Settings,
    school_id: str,
    submitted_by: str | None,
    use_autofill: bool,
    stage: bool,
    **fields: str | None,
):
    """Send one school profile to the save-school endpoint."""
    draft = SchoolDraft(school_id=school_id)
    try:
        if use_autofill:
            try:
                draft, _ = _autofill(settings, draft)
            except SchoolNotFound as exc:
                console.log(f"[yellow]{exc}[/yellow] Using the values given.")
        draft = draft.update(**fields)
        payload = draft.to_payload(submitted_by or settings.submitted_by)
    except InsightEdError as exc:
        _fail(exc)

    with HttpTransport(settings.connectivity_url, settings.http_timeout) as transport:
        try:
            message = transport.submit(settings.save_school_url, payload)
        except TransportError as exc:
            if not stage:
                _fail(exc)
            store = OutboxStore.open(settings.outbox_db_file)
            try:
                store.append(settings.save_school_url, payload, label=draft.label)
            finally:
                store.close()
            console.print(f"[yellow]{exc}[/yellow] Saved to outbox for a later sync.")
            return
    console.print(f"[green]Success:[/green] {message or 'Data saved.'}")


@cli.command("outbox")
@click.pass_obj
def outbox(settings: Settings):
    """List submissions waiting to be synced, newest first."""
    store = OutboxStore.open(settings.outbox_db_file)
    try:
        items = store.list_items()
    finally:
        store.close()
    if not items:
        console.print("All clear! No pending uploads.")
        return
    table = Table(title=f"Outbox ({len(items)})")
    table.add_column("ID", justify="right")
    table.add_column("School ID")
    table.add_column("School")
    table.add_column("Staged at")
    for item in reversed(items):
        draft = SchoolDraft.from_payload(item.payload)
        table.add_row(
            str(item.id),
            draft.school_id,
            draft.school_name or item.label,
            item.created_at,
        )
    console.print(table)


@cli.command("sync")
@click.pass_obj
def sync(settings: Settings):
    """Try to deliver every item in the outbox."""
    store = OutboxStore.open(settings.outbox_db_file)
    try:
        with HttpTransport(settings.connectivity_url, settings.http_timeout) as transport:
            synchronizer = OutboxSynchronizer(
                store, deliver=transport.deliver, is_online=transport.is_online
            )
            with console.status("[bold green]Syncing...[/bold green]", spinner="dots"):
                report = synchronizer.sync_all()
    except InsightEdError as exc:
        _fail(exc)
    finally:
        store.close()

    table = Table(title="Sync")
    table.add_column("Label")
    table.add_column("Status")
    table.add_column("Message", style="dim")
    for result in report.results:
        table.add_row(result.item.label, STATUS_STYLE[result.status], result.message)
    console.print(table)
    console.print(
        f"[green]{report.delivered} delivered[/green], "
        f"[red]{report.failed} failed[/red] of {report.total}"
    )


@cli.command("convert")
@click.pass_obj
def convert(settings: Settings):
    """Build the auto-fill JSON document from the reference CSV."""
    convert_reference_csv(settings.reference_file, settings.schools_db_file)


if __name__ == "__main__":
    cli()
