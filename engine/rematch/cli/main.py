# Rematch CLI — main entry point
"""rematch CLI — manage buyers and the AI qualification prompt from the terminal."""

from __future__ import annotations

import click

from ..config import settings


def _open_session():
    """Create tables if needed and return a new session, or exit when unconfigured."""
    from .. import db as database
    from ..common import die

    if not database.is_configured():
        die("Database is not configured. Set REMATCH_DATABASE_URL or enable REMATCH_LOCAL_DATABASE.")
    database.init_db()
    return database.SessionLocal()


def _show_buyer(buyer_id: str) -> None:
    """Print a buyer's detail view."""
    from ..common import console, print_detail, print_error
    from ..exceptions import NotFoundError
    from ..services.buyers import get_buyer

    db = _open_session()
    try:
        try:
            buyer = get_buyer(db, buyer_id)
        except NotFoundError:
            print_error(f"Buyer '{buyer_id}' not found")
            raise SystemExit(1)
        console.print(f"[bold]{buyer.name}[/bold]")
        print_detail(f"ID: {buyer.id}")
        print_detail(f"Slack channel: {buyer.slack_channel or '—'}")
        print_detail(f"Prompt: {'custom' if buyer.system_prompt else 'default'}")
        print_detail(f"Created: {buyer.created_at:%Y-%m-%d %H:%M}")
    finally:
        db.close()


@click.group()
@click.version_option(version=settings.app_version, prog_name="rematch")
def cli():
    """Rematch — buyer profiles and AI prompt settings."""
    from ..common import init_logging
    init_logging()


@cli.command()
def status():
    """Show engine status, buyer counts and the default prompt version."""
    from ..common import console
    from ..models.buyer import Buyer
    from ..services.prompt_settings import get_default_prompt

    console.print(f"[bold blue]Rematch Engine[/] v{settings.app_version}")
    console.print(f"Database: {settings.effective_database_url or 'not configured'}")
    console.print(f"Environment: {settings.environment}")

    db = _open_session()
    try:
        total = db.query(Buyer).count()
        custom = db.query(Buyer).filter(Buyer.system_prompt.is_not(None)).count()
        prompt = get_default_prompt(db)
        console.print(f"Buyers: {total} ({custom} with a custom prompt)")
        source = "built-in" if prompt.is_default else "stored"
        console.print(f"Default prompt: v{prompt.version} ({source})")
    finally:
        db.close()


@cli.command()
def serve():
    """Start the Rematch API server."""
    import uvicorn
    uvicorn.run(
        "rematch.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


# ---------------------------------------------------------------------------
# Buyer commands
# ---------------------------------------------------------------------------


@cli.group()
def buyers():
    """Manage buyers."""
    pass


@buyers.command("list")
def buyers_list():
    """List buyers, newest first."""
    from rich.table import Table

    from ..common import console
    from ..services.buyers import list_buyers

    db = _open_session()
    try:
        items = list_buyers(db)
        if not items:
            console.print("[dim]No buyers yet. Use 'rematch buyers add' to create one.[/dim]")
            return
        table = Table(title="Buyers")
        table.add_column("ID", style="cyan")
        table.add_column("Name")
        table.add_column("Slack")
        table.add_column("Prompt")
        for b in items:
            table.add_row(b.id, b.name, b.slack_channel or "", "custom" if b.system_prompt else "default")
        console.print(table)
    finally:
        db.close()


@buyers.command("show")
@click.argument("buyer_id")
def buyers_show(buyer_id: str):
    """Show one buyer."""
    _show_buyer(buyer_id)


@buyers.command("add")
@click.option("--name", default=None, help="Buyer name (prompted when omitted)")
@click.option("--slack-channel", default=None, help="Slack channel or user, e.g. #buyer-alerts")
def buyers_add(name: str | None, slack_channel: str | None):
    """Create a buyer, then show its detail view."""
    from .. import db as database
    from ..common import print_error, print_success, prompt_input
    from ..forms.buyer import NewBuyerForm

    if name is None:
        name = prompt_input("Buyer name")
    if slack_channel is None:
        slack_channel = prompt_input("Slack channel (optional)")

    database.init_db()

    def navigate(buyer_id: str) -> None:
        print_success(f"Buyer created ({buyer_id})")
        _show_buyer(buyer_id)

    form = NewBuyerForm(
        session_factory=database.get_session_factory(),
        navigate=navigate,
        alert=print_error,
        name=name,
        slack_channel=slack_channel,
    )
    if not form.can_submit:
        print_error("Buyer name is required")
        raise SystemExit(1)
    if form.submit() is None:
        raise SystemExit(1)


@buyers.command("delete")
@click.argument("buyer_id")
@click.option("--yes", is_flag=True, help="Skip confirmation")
def buyers_delete(buyer_id: str, yes: bool):
    """Delete a buyer."""
    from ..common import confirm, print_error, print_success
    from ..exceptions import NotFoundError
    from ..services.buyers import delete_buyer

    if not yes and not confirm(f"Delete buyer {buyer_id}?"):
        return
    db = _open_session()
    try:
        delete_buyer(db, buyer_id)
        print_success(f"Buyer '{buyer_id}' deleted")
    except NotFoundError:
        print_error(f"Buyer '{buyer_id}' not found")
        raise SystemExit(1)
    finally:
        db.close()


# ---------------------------------------------------------------------------
# Prompt commands
# ---------------------------------------------------------------------------


@cli.group()
def prompt():
    """Manage the default AI qualification prompt."""
    pass


@prompt.command("show")
@click.option("--placeholders", is_flag=True, help="Also list the available placeholders")
def prompt_show(placeholders: bool):
    """Print the current default prompt."""
    from rich.table import Table

    from ..common import console, print_header
    from ..services.prompt_settings import get_default_prompt

    db = _open_session()
    try:
        current = get_default_prompt(db)
    finally:
        db.close()

    source = "built-in" if current.is_default else "stored"
    print_header(f"Default prompt v{current.version} ({source})")
    console.print(current.template, markup=False, highlight=False)

    if placeholders:
        for group, entries in current.placeholders.items():
            table = Table(title=group.replace("_", " ").title())
            table.add_column("Placeholder", style="cyan")
            table.add_column("Description")
            for entry in entries:
                table.add_row(entry["name"], entry["description"])
            console.print(table)


@prompt.command("set")
@click.argument("template_file", type=click.File("r"))
def prompt_set(template_file):
    """Store a new default prompt read from TEMPLATE_FILE ('-' for stdin)."""
    from ..common import print_detail, print_error, print_success
    from ..exceptions import TemplateValidationError
    from ..services.prompt_settings import update_default_prompt

    template = template_file.read()
    if not template.strip():
        print_error("Template is empty")
        raise SystemExit(1)

    db = _open_session()
    try:
        version = update_default_prompt(db, template)
    except TemplateValidationError as e:
        print_error("Invalid template")
        for missing in e.missing_buyer + e.missing_listing:
            print_detail(f"missing: {missing}")
        raise SystemExit(1)
    finally:
        db.close()
    print_success(f"Default prompt updated to v{version}")


@prompt.command("reset-all")
@click.option("--yes", is_flag=True, help="Skip confirmation")
def prompt_reset_all(yes: bool):
    """Clear every buyer-specific prompt so all buyers use the default."""
    from ..common import confirm, print_success
    from ..services.prompt_settings import reset_buyer_prompts

    if not yes and not confirm("Reset all buyers to the default prompt?"):
        return
    db = _open_session()
    try:
        count = reset_buyer_prompts(db)
    finally:
        db.close()
    print_success(f"Reset {count} buyer(s) to use the default prompt")


if __name__ == "__main__":
    cli()
