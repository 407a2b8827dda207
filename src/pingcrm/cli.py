"""Command line client: list, inspect and change contacts and organizations over the CRM API."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import replace
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from pingcrm.application import (
    AlreadyPending,
    DetailController,
    Invalid,
    ListController,
    ListView,
    MutationFailed,
    MutationResult,
    MutationService,
    MutationSucceeded,
    Rejected,
)
from pingcrm.client import CrmClient, connect
from pingcrm.config import load_settings
from pingcrm.domain import (
    Company,
    CompanyDraft,
    ContactDraft,
    StatusFilter,
    available_actions,
)
from pingcrm.errors import CrmError
from pingcrm.infrastructure import get_token, init_session

app = typer.Typer(help="PingCRM client: contacts and organizations")
contacts_app = typer.Typer(help="Browse and manage contacts")
companies_app = typer.Typer(help="Browse and manage organizations")
app.add_typer(contacts_app, name="contacts")
app.add_typer(companies_app, name="companies")
console = Console()


def make_client() -> CrmClient:
    settings = load_settings()
    if settings.token and get_token() is None:
        init_session(settings.token)
    return connect(settings)


def _run(work: Callable[[CrmClient], Awaitable[Any]]) -> Any:
    async def main():
        async with make_client() as client:
            return await work(client)

    try:
        return asyncio.run(main())
    except CrmError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from None


@app.callback()
def main(
    token: str | None = typer.Option(None, envvar="PINGCRM_TOKEN", help="Bearer token for the API"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log HTTP errors and discarded results"),
) -> None:
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if verbose else logging.ERROR,
    )
    if token:
        init_session(token)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Host to bind to"),
    port: int = typer.Option(8000, help="Port to bind to"),
    reload: bool = typer.Option(False, help="Enable auto-reload"),
) -> None:
    """Start the in-memory reference API."""
    import uvicorn

    uvicorn.run("api.main:app", host=host, port=port, reload=reload)


# --- Rendering ---


def _deleted_marker(record) -> str:
    return "[red]deleted[/red]" if record.is_deleted else ""


def _contact_table(contacts) -> Table:
    table = Table(title="Contacts")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Email")
    table.add_column("Phone")
    table.add_column("Company")
    table.add_column("")
    for c in contacts:
        table.add_row(
            str(c.id), c.name, c.email, c.phone or "", c.organization or "", _deleted_marker(c)
        )
    return table


def _company_table(companies) -> Table:
    table = Table(title="Organizations")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Email")
    table.add_column("City")
    table.add_column("Phone")
    table.add_column("")
    for c in companies:
        table.add_row(
            str(c.id), c.name, c.email, c.city or "", c.phone or "", _deleted_marker(c)
        )
    return table


def _table_for(records) -> Table:
    if records and isinstance(records[0], Company):
        return _company_table(records)
    return _contact_table(records)


def _pager(view: ListView) -> str:
    current = view.page.page
    buttons = [f"[bold][{n}][/bold]" if n == current else str(n) for n in view.page_numbers]
    return f"Page {current} of {view.page.pages} ({view.page.total} total)  " + " ".join(buttons)


def render_list(controller: ListController, label: str) -> None:
    view = controller.view
    query = controller.query
    console.print(
        f"[dim]search={query.search_text!r} status={query.status_filter.value} "
        f"page={query.page_number}[/dim]"
    )
    if view.error is not None:
        console.print(f"[red]Failed to load {label}. Please try again.[/red] ({view.error})")
        return
    if view.page is None or view.page.is_empty:
        console.print(f"[yellow]No {label} found.[/yellow]")
        return
    console.print(_table_for(list(view.page.items)))
    if view.page.pages > 1:
        console.print(_pager(view))


def render_record(record, related=()) -> None:
    table = Table(show_header=False, title=f"#{record.id}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    skip = {"id"}
    for name, value in vars(record).items():
        if name in skip:
            continue
        table.add_row(name, "" if value is None else str(value))
    console.print(table)
    if record.is_deleted:
        console.print("[red]This record is deleted.[/red]")
    actions = ", ".join(a.value for a in available_actions(record))
    console.print(f"[dim]Available actions: {actions}[/dim]")
    if related:
        console.print(_contact_table(list(related)))


def report(result: MutationResult, label: str) -> None:
    if isinstance(result, MutationSucceeded):
        console.print(f"[green]{label.title()} {result.action.replace('_', ' ')} ok[/green] (#{result.record_id})")
        return
    if isinstance(result, Invalid):
        console.print(f"[red]{result.reason}[/red]")
    elif isinstance(result, Rejected):
        console.print(f"[red]{result.reason}[/red]")
    elif isinstance(result, MutationFailed):
        console.print(f"[red]{result.message}[/red] ({result.error})")
    elif isinstance(result, AlreadyPending):
        console.print(f"[yellow]{result.action} already in progress[/yellow]")
    raise typer.Exit(1)


# --- Shared commands ---


def _gateway(client: CrmClient, collection: str):
    return client.contacts if collection == "contacts" else client.companies


def _list_controller(client: CrmClient, collection: str, company_id: int | None = None) -> ListController:
    if collection == "contacts":
        return client.contact_list(company_id=company_id)
    return client.company_list()


async def _load_list(
    controller: ListController, search: str, status: StatusFilter, page: int
) -> bool:
    if status is not StatusFilter.ACTIVE:
        await controller.set_status_filter(status)
    if search:
        await controller.set_search(search)
    if controller.page is None and controller.error is None:
        await controller.refresh()
    if page != 1 and not await controller.go_to_page(page):
        return False
    return True


def _list(collection: str, label: str, search: str, status: str, page: int, company_id: int | None = None) -> None:
    try:
        status_filter = StatusFilter.parse(status)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--status") from None

    async def work(client: CrmClient) -> None:
        controller = _list_controller(client, collection, company_id)
        if not await _load_list(controller, search, status_filter, page):
            console.print(f"[red]Page {page} is out of range (1-{controller.known_pages}).[/red]")
            raise typer.Exit(1)
        render_list(controller, label)
        if controller.error is not None:
            raise typer.Exit(1)

    _run(work)


def _show(collection: str, record_id: int) -> None:
    async def work(client: CrmClient) -> None:
        if collection == "companies":
            detail = client.company_detail(record_id)
        else:
            detail = client.contact_detail(record_id)
        await detail.load()
        if detail.record is None:
            console.print(f"[red]{detail.view.error}[/red]")
            raise typer.Exit(1)
        render_record(detail.record, detail.view.related)
        if detail.view.related_error is not None:
            console.print(
                "[yellow]Failed to load contacts. Please try again.[/yellow] "
                f"({detail.view.related_error})"
            )

    _run(work)


def _lifecycle(collection: str, label: str, record_id: int, action: str) -> None:
    async def work(client: CrmClient) -> MutationResult:
        detail = DetailController(_gateway(client, collection), record_id)
        await detail.load()
        if detail.record is None:
            console.print(f"[red]{detail.view.error}[/red]")
            raise typer.Exit(1)
        mutations = MutationService(_gateway(client, collection), view=detail)
        return await getattr(mutations, action)(detail.record)

    report(_run(work), label)


def _create(collection: str, label: str, draft) -> None:
    async def work(client: CrmClient) -> MutationResult:
        return await MutationService(_gateway(client, collection)).create(draft)

    report(_run(work), label)


def _edit(
    collection: str,
    label: str,
    record_id: int,
    changes: dict[str, Any],
    cleared: tuple[str, ...] = (),
) -> None:
    """Apply the non-None `changes`, and set each field named in `cleared` to None."""

    async def work(client: CrmClient) -> MutationResult:
        detail = DetailController(_gateway(client, collection), record_id)
        await detail.load()
        if detail.record is None:
            console.print(f"[red]{detail.view.error}[/red]")
            raise typer.Exit(1)
        draft = replace(
            detail.record.to_draft(), **{k: v for k, v in changes.items() if v is not None}
        )
        draft = replace(draft, **dict.fromkeys(cleared))
        return await MutationService(_gateway(client, collection), view=detail).update(
            detail.record, draft
        )

    report(_run(work), label)


def _browse(collection: str, label: str) -> None:
    """Interactive pager: n/p, a page number, s <text>, f <status>, r, q."""

    async def work(client: CrmClient) -> None:
        controller = _list_controller(client, collection)
        await controller.refresh()
        while True:
            render_list(controller, label)
            line = typer.prompt("[n]ext [p]rev <page> [s]earch <text> [f]ilter <status> [r]eset [q]uit", default="q")
            command, _, arg = line.strip().partition(" ")
            if command == "q":
                return
            if command == "n":
                if not await controller.next_page():
                    console.print("[yellow]Already on the last page.[/yellow]")
            elif command == "p":
                if not await controller.previous_page():
                    console.print("[yellow]Already on the first page.[/yellow]")
            elif command.isdigit():
                if not await controller.go_to_page(int(command)):
                    console.print(f"[yellow]No page {command}.[/yellow]")
            elif command == "s":
                await controller.set_search(arg)
            elif command == "f":
                try:
                    await controller.set_status_filter(arg)
                except ValueError as e:
                    console.print(f"[red]{e}[/red]")
            elif command == "r":
                await controller.reset()
            else:
                console.print(f"[yellow]Unknown command {command!r}[/yellow]")

    _run(work)


# --- contacts ---


@contacts_app.command("list")
def contacts_list(
    search: str = typer.Option("", "--search", "-s", help="Search text"),
    status: str = typer.Option("active", help="active, trashed or all"),
    page: int = typer.Option(1, help="Page number"),
    company_id: int | None = typer.Option(None, help="Only contacts of this company"),
) -> None:
    """List contacts."""
    _list("contacts", "contacts", search, status, page, company_id)


@contacts_app.command("show")
def contacts_show(contact_id: int) -> None:
    """Show one contact (deleted ones included)."""
    _show("contacts", contact_id)


@contacts_app.command("create")
def contacts_create(
    first_name: str = typer.Option("", help="First name"),
    last_name: str = typer.Option("", help="Last name"),
    email: str = typer.Option("", help="Email"),
    phone: str | None = typer.Option(None),
    address: str | None = typer.Option(None),
    city: str | None = typer.Option(None),
    region: str | None = typer.Option(None),
    country: str | None = typer.Option(None),
    postal_code: str | None = typer.Option(None),
    company_id: int | None = typer.Option(None, help="Owning company id"),
) -> None:
    """Create a contact."""
    draft = ContactDraft(
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone=phone,
        address=address,
        city=city,
        region=region,
        country=country,
        postal_code=postal_code,
        company_id=company_id,
    )
    _create("contacts", "contact", draft)


@contacts_app.command("edit")
def contacts_edit(
    contact_id: int,
    first_name: str | None = typer.Option(None),
    last_name: str | None = typer.Option(None),
    email: str | None = typer.Option(None),
    phone: str | None = typer.Option(None),
    address: str | None = typer.Option(None),
    city: str | None = typer.Option(None),
    region: str | None = typer.Option(None),
    country: str | None = typer.Option(None),
    postal_code: str | None = typer.Option(None),
    company_id: int | None = typer.Option(None),
    no_company: bool = typer.Option(False, "--no-company", help="Detach the contact from its company"),
) -> None:
    """Edit an active contact. Only the given fields change."""
    if no_company and company_id is not None:
        raise typer.BadParameter("Use either --company-id or --no-company", param_hint="--no-company")
    changes = dict(
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone=phone,
        address=address,
        city=city,
        region=region,
        country=country,
        postal_code=postal_code,
        company_id=company_id,
    )
    _edit("contacts", "contact", contact_id, changes, ("company_id",) if no_company else ())


@contacts_app.command("delete")
def contacts_delete(
    contact_id: int,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Soft-delete a contact (restorable)."""
    if not yes:
        typer.confirm("Are you sure you want to delete this contact?", abort=True)
    _lifecycle("contacts", "contact", contact_id, "soft_delete")


@contacts_app.command("restore")
def contacts_restore(contact_id: int) -> None:
    """Restore a deleted contact."""
    _lifecycle("contacts", "contact", contact_id, "restore")


@contacts_app.command("purge")
def contacts_purge(
    contact_id: int,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Permanently delete a contact that is already deleted."""
    if not yes:
        typer.confirm(
            "Are you sure you want to PERMANENTLY delete this contact? This cannot be undone.",
            abort=True,
        )
    _lifecycle("contacts", "contact", contact_id, "purge")


@contacts_app.command("browse")
def contacts_browse() -> None:
    """Page through contacts interactively."""
    _browse("contacts", "contacts")


@contacts_app.command("companies")
def contacts_company_options() -> None:
    """List organizations a contact can belong to."""

    async def work(client: CrmClient) -> list[Company]:
        return await client.company_options()

    options = _run(work)
    if not options:
        console.print("[yellow]No organizations found.[/yellow]")
        return
    console.print(_company_table(options))


# --- companies ---


@companies_app.command("list")
def companies_list(
    search: str = typer.Option("", "--search", "-s", help="Search text"),
    status: str = typer.Option("active", help="active, trashed or all"),
    page: int = typer.Option(1, help="Page number"),
) -> None:
    """List organizations."""
    _list("companies", "organizations", search, status, page)


@companies_app.command("show")
def companies_show(company_id: int) -> None:
    """Show one organization and its contacts."""
    _show("companies", company_id)


@companies_app.command("create")
def companies_create(
    name: str = typer.Option("", help="Name"),
    email: str = typer.Option("", help="Email"),
    phone: str | None = typer.Option(None),
    address: str | None = typer.Option(None),
    city: str | None = typer.Option(None),
    region: str | None = typer.Option(None),
    country: str | None = typer.Option(None),
    postal_code: str | None = typer.Option(None),
) -> None:
    """Create an organization."""
    draft = CompanyDraft(
        name=name,
        email=email,
        phone=phone,
        address=address,
        city=city,
        region=region,
        country=country,
        postal_code=postal_code,
    )
    _create("companies", "organization", draft)


@companies_app.command("edit")
def companies_edit(
    company_id: int,
    name: str | None = typer.Option(None),
    email: str | None = typer.Option(None),
    phone: str | None = typer.Option(None),
    address: str | None = typer.Option(None),
    city: str | None = typer.Option(None),
    region: str | None = typer.Option(None),
    country: str | None = typer.Option(None),
    postal_code: str | None = typer.Option(None),
) -> None:
    """Edit an active organization. Only the given fields change."""
    changes = dict(
        name=name,
        email=email,
        phone=phone,
        address=address,
        city=city,
        region=region,
        country=country,
        postal_code=postal_code,
    )
    _edit("companies", "organization", company_id, changes)


@companies_app.command("delete")
def companies_delete(
    company_id: int,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Soft-delete an organization (restorable)."""
    if not yes:
        typer.confirm("Are you sure you want to delete this organization?", abort=True)
    _lifecycle("companies", "organization", company_id, "soft_delete")


@companies_app.command("restore")
def companies_restore(company_id: int) -> None:
    """Restore a deleted organization."""
    _lifecycle("companies", "organization", company_id, "restore")


@companies_app.command("purge")
def companies_purge(
    company_id: int,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Permanently delete an organization that is already deleted."""
    if not yes:
        typer.confirm(
            "Are you sure you want to PERMANENTLY delete this organization? This cannot be undone.",
            abort=True,
        )
    _lifecycle("companies", "organization", company_id, "purge")


@companies_app.command("browse")
def companies_browse() -> None:
    """Page through organizations interactively."""
    _browse("companies", "organizations")
