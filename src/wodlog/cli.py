"""wodlog CLI - workout log calendar."""

import json
import logging
import sys
from datetime import date
from pathlib import Path

import click

from .config import load_config
from .context import AppContext, build_context
from .core.ai_import import ImportPayload
from .core.calendar import WEEKDAY_HEADERS, grid_rows
from .core.editor import EntryEditor
from .core.entries import WodEntry, format_entry_markdown
from .core.errors import (
    AuthenticationError,
    EditorStateError,
    ImportFailedError,
    MigrationError,
    NotAuthenticatedError,
)
from .core.messages import auth_error_message
from .migration import is_migration_complete
from .workflows import (
    delete_from_editor,
    generate_wod,
    import_into_editor,
    load_date_options,
    month_grid,
    open_editor,
    read_import_file,
    save_editor,
)

EDITOR_HELP = (
    "[t]itle  [c]hange date  [a]dd  [e]dit N  [r]emove N  "
    "[i]mport text  [f]ile import  [p]resent  [s]ave  [d]elete  [q]uit"
)

_NEXT_KEYS = {"n", "j", "l", " ", "\x1b[B", "\x1b[C"}
_PREV_KEYS = {"p", "k", "h", "\x1b[A", "\x1b[D"}


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _parse_date(value: str | None) -> str:
    if not value:
        return date.today().isoformat()
    try:
        return date.fromisoformat(value).isoformat()
    except ValueError:
        raise click.BadParameter(f"'{value}' is not a YYYY-MM-DD date")


def _entry_json(entry: WodEntry) -> dict:
    return entry.to_dict()


@click.group()
@click.version_option(package_name="wodlog")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, debug: bool):
    """wodlog - workout-of-the-day calendar."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )
    if ctx.obj is None:
        ctx.obj = build_context(load_config())


# ============== Account ==============


def _auth_failed(app: AppContext, e: AuthenticationError) -> None:
    _fail(auth_error_message(e.kind, e.operation, app.config.language))


def _report_sign_in(app: AppContext) -> None:
    user = app.current_user
    click.echo(f"Signed in as {user.email}")
    if app.last_migrated:
        click.echo(f"Migrated {app.last_migrated} local WOD(s) to your account.")


@main.command()
@click.option("--email", prompt=True)
@click.password_option(confirmation_prompt=False)
@click.pass_obj
def login(app: AppContext, email: str, password: str):
    """Sign in with email and password."""
    try:
        app.identity.sign_in(email, password)
    except AuthenticationError as e:
        _auth_failed(app, e)
    _report_sign_in(app)


@main.command()
@click.option("--email", prompt=True)
@click.password_option()
@click.pass_obj
def signup(app: AppContext, email: str, password: str):
    """Create an account."""
    try:
        app.identity.sign_up(email, password)
    except AuthenticationError as e:
        _auth_failed(app, e)
    _report_sign_in(app)


@main.command()
@click.pass_obj
def logout(app: AppContext):
    """Sign out."""
    try:
        app.identity.sign_out()
    except AuthenticationError as e:
        _auth_failed(app, e)
    click.echo("Signed out.")


@main.command()
@click.pass_obj
def whoami(app: AppContext):
    """Show the signed-in user."""
    user = app.current_user
    if user is None:
        click.echo("Not signed in.")
        return
    click.echo(f"{user.email} ({user.user_id})")


@main.command()
@click.pass_obj
def migrate(app: AppContext):
    """Copy locally stored WODs to your account (runs once)."""
    if not app.uses_remote_store:
        _fail("STORAGE_BACKEND is 'local'; there is nothing to migrate to.")
    if app.current_user is None:
        _fail("Not signed in. Run 'wodlog login' first.")
    if is_migration_complete(app.local_state):
        click.echo("Local WODs were already migrated.")
        return
    try:
        count = app.run_migration()
    except MigrationError as e:
        _fail(f"Migration failed, nothing was marked complete. Run 'wodlog migrate' to retry. ({e})")
    click.echo(f"Migrated {count} WOD(s).")


# ============== Calendar ==============


def _show_grid(app: AppContext, month: int, year: int) -> None:
    cells = month_grid(app.store, month, year)
    click.echo(click.style(date(year, month, 1).strftime("%B %Y").upper(), bold=True))
    click.echo("".join(f"{h:>6}" for h in WEEKDAY_HEADERS))
    for week in grid_rows(cells):
        line = ""
        for cell in week:
            dots = "*" * min(cell.wod_count, 3)
            text = f"[{cell.date.day}]" if cell.is_today else str(cell.date.day)
            text = f"{text}{dots}".rjust(6)
            if not cell.is_current_month:
                text = click.style(text, dim=True)
            elif cell.is_today:
                text = click.style(text, bold=True)
            line += text
        click.echo(line)


@main.command()
@click.option("--month", "-m", type=click.IntRange(1, 12), default=None, help="Month (1-12)")
@click.option("--year", "-y", type=int, default=None, help="Year")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def calendar(app: AppContext, month: int | None, year: int | None, as_json: bool):
    """Show the month calendar with WOD counts."""
    today = date.today()
    month = month or today.month
    year = year or today.year

    if as_json:
        cells = month_grid(app.store, month, year)
        click.echo(
            json.dumps(
                [
                    {
                        "date": c.iso,
                        "is_current_month": c.is_current_month,
                        "is_today": c.is_today,
                        "wod_count": c.wod_count,
                    }
                    for c in cells
                ],
                indent=2,
            )
        )
        return

    _show_grid(app, month, year)


@main.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def list_entries(app: AppContext, as_json: bool):
    """List all WODs, newest first."""
    entries = app.store.list_all()

    if as_json:
        click.echo(json.dumps([_entry_json(e) for e in entries], indent=2))
        return

    if not entries:
        click.echo("No WODs yet.")
        return

    for e in entries:
        click.echo(f"{e.date}  {e.title}  ({len(e.sections)} sections)  {e.id}")


@main.command()
@click.argument("entry_id")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def show(app: AppContext, entry_id: str, as_json: bool):
    """Show one WOD."""
    entry = app.store.get_by_id(entry_id)
    if entry is None:
        _fail(f"No WOD with id {entry_id}")

    if as_json:
        click.echo(json.dumps(_entry_json(entry), indent=2))
    else:
        click.echo(format_entry_markdown(entry))


# ============== Date Options ==============


@main.command()
@click.argument("target_date", required=False)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def day(app: AppContext, target_date: str | None, as_json: bool):
    """Pick a WOD on a date to edit, or create a new one."""
    options = load_date_options(app.store, _parse_date(target_date))

    if as_json:
        click.echo(json.dumps([_entry_json(e) for e in options.entries], indent=2))
        return

    while True:
        selected = date.fromisoformat(options.date_iso)
        click.echo(f"\n{selected.strftime('%A, %B %d, %Y')}")
        for i, entry in enumerate(options.entries, start=1):
            click.echo(f"  {i}. {entry.title}")
        if not options.entries:
            click.echo("  No WODs on this date.")

        choice = click.prompt("Number to edit, [n]ew, [c]hange date, [q]uit", default="n").strip().lower()
        if choice == "q":
            return
        if choice == "c":
            new_date = click.prompt("Date (YYYY-MM-DD)", default=options.date_iso)
            options = options.change_date(app.store, _parse_date(new_date))
            continue
        if choice == "n":
            _run_editor(app, options.new_editor())
            return
        if choice.isdigit() and 1 <= int(choice) <= len(options.entries):
            editor = open_editor(app.store, options.entries[int(choice) - 1].id)
            if editor is None:
                click.echo("That WOD no longer exists.")
                options = options.change_date(app.store, options.date_iso)
                continue
            _run_editor(app, editor)
            return
        click.echo("Unknown choice.")


# ============== Editor ==============


@main.command()
@click.option("--date", "-d", "target_date", default=None, help="Date (YYYY-MM-DD), defaults to today")
@click.pass_obj
def new(app: AppContext, target_date: str | None):
    """Create a WOD."""
    _run_editor(app, EntryEditor.for_new(_parse_date(target_date)))


@main.command()
@click.argument("entry_id")
@click.pass_obj
def edit(app: AppContext, entry_id: str):
    """Edit a WOD."""
    editor = open_editor(app.store, entry_id)
    if editor is None:
        _fail(f"No WOD with id {entry_id}")
    _run_editor(app, editor)


@main.command()
@click.argument("entry_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def delete(app: AppContext, entry_id: str, yes: bool):
    """Delete a WOD."""
    if not yes and not click.confirm(f"Delete WOD {entry_id}?"):
        return
    try:
        app.store.delete(entry_id)
    except NotAuthenticatedError as e:
        _fail(str(e))
    except Exception as e:
        _fail(f"Could not delete: {e}")
    click.echo("Deleted.")


@main.command("import")
@click.argument("file", required=False, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--text", "raw_text", default=None, help="Workout text to analyze")
@click.option("--date", "-d", "target_date", default=None, help="Date (YYYY-MM-DD), defaults to today")
@click.option("--yes", is_flag=True, help="Save without opening the editor")
@click.pass_obj
def import_cmd(app: AppContext, file: Path | None, raw_text: str | None, target_date: str | None, yes: bool):
    """Create a WOD from pasted text, an image or a PDF using AI."""
    if file is None and not raw_text:
        raw_text = click.edit("") or ""
        if not raw_text.strip():
            _fail("Nothing to import.")

    editor = EntryEditor.for_new(_parse_date(target_date))
    payload = read_import_file(file) if file else ImportPayload.from_text(raw_text)

    click.echo("Analyzing...")
    try:
        outcome = import_into_editor(app, editor, payload, from_file=file is not None)
    except NotAuthenticatedError as e:
        _fail(str(e))
    if outcome.notice:
        _fail(outcome.notice)

    click.echo(format_entry_markdown(editor.build_entry()))
    if yes:
        _save(app, editor)
        return
    _run_editor(app, editor)


@main.command()
@click.argument("entry_id")
@click.option("--all/--focus", "show_all", default=True, help="Show all sections or focus one at a time")
@click.pass_obj
def present(app: AppContext, entry_id: str, show_all: bool):
    """Full-screen presentation of a WOD (for the gym screen)."""
    editor = open_editor(app.store, entry_id)
    if editor is None:
        _fail(f"No WOD with id {entry_id}")
    editor.show_all = show_all
    _run_presentation(editor)


@main.command()
@click.argument("prompt", required=False, default="")
@click.pass_obj
def generate(app: AppContext, prompt: str):
    """Generate a WOD with AI."""
    try:
        click.echo(generate_wod(app, prompt))
    except NotAuthenticatedError as e:
        _fail(str(e))
    except ImportFailedError as e:
        _fail(str(e))


def _print_editor(editor: EntryEditor) -> None:
    click.echo(f"\n{click.style(editor.title, bold=True)}  ({editor.date})")
    if not editor.sections:
        click.echo("  (no sections)")
    for i, section in enumerate(editor.sections, start=1):
        marker = ">" if section.id == editor.active_section_id else " "
        click.echo(f" {marker}{i}. {section.title or '(untitled)'}")
        for line in section.content.splitlines():
            click.echo(f"      {line}")


def _pick_section(editor: EntryEditor, arg: str):
    if not arg:
        arg = click.prompt("Section number", default="1")
    if not arg.isdigit() or not 1 <= int(arg) <= len(editor.sections):
        click.echo("No such section.")
        return None
    return editor.sections[int(arg) - 1]


def _save(app: AppContext, editor: EntryEditor) -> bool:
    try:
        saved = save_editor(editor, app.store)
    except (NotAuthenticatedError, EditorStateError) as e:
        click.echo(f"Error: {e}", err=True)
        return False
    except Exception as e:
        click.echo(f"Error: could not save ({e}). Your changes are still here.", err=True)
        return False
    click.echo(f"Saved {saved.title} ({saved.id}).")
    return True


def _run_editor(app: AppContext, editor: EntryEditor) -> None:
    """Interactive editing loop."""
    while not editor.closed:
        _print_editor(editor)
        command, _, arg = click.prompt(EDITOR_HELP, default="s").strip().partition(" ")
        command = command.lower()
        arg = arg.strip()

        if command == "t":
            editor.set_title(click.prompt("Title", default=editor.title))
        elif command == "c":
            editor.change_date(_parse_date(click.prompt("Date (YYYY-MM-DD)", default=editor.date)))
        elif command == "a":
            section = editor.add_section()
            title = click.prompt("Section title", default="", show_default=False)
            content = click.edit("") or ""
            editor.update_section(section.id, title=title, content=content.rstrip("\n"))
        elif command == "e":
            section = _pick_section(editor, arg)
            if section:
                title = click.prompt("Section title", default=section.title)
                content = click.edit(section.content)
                editor.update_section(
                    section.id,
                    title=title,
                    content=content.rstrip("\n") if content is not None else None,
                )
        elif command == "r":
            section = _pick_section(editor, arg)
            if section:
                editor.remove_section(section.id)
        elif command in ("i", "f"):
            from_file = command == "f"
            if from_file:
                path = click.prompt("File", type=click.Path(exists=True, dir_okay=False, path_type=Path))
                payload = read_import_file(path)
            else:
                text = click.edit("") or ""
                if not text.strip():
                    continue
                payload = ImportPayload.from_text(text)
            click.echo("Analyzing...")
            try:
                outcome = import_into_editor(app, editor, payload, from_file=from_file)
            except NotAuthenticatedError as e:
                click.echo(f"Error: {e}", err=True)
                continue
            if outcome.notice:
                click.echo(outcome.notice, err=True)
        elif command == "p":
            _run_presentation(editor)
        elif command == "s":
            _save(app, editor)
        elif command == "d":
            if editor.is_new:
                click.echo("This WOD has not been saved yet.")
            elif click.confirm("Delete this WOD?"):
                try:
                    delete_from_editor(editor, app.store)
                except Exception as e:
                    click.echo(f"Error: could not delete ({e})", err=True)
                    continue
                click.echo("Deleted.")
        elif command == "q":
            if click.confirm("Discard changes?", default=True):
                editor.close()
        else:
            click.echo("Unknown command.")


def _run_presentation(editor: EntryEditor) -> None:
    """Full-screen section display with keyboard navigation."""
    editor.enter_presentation()
    try:
        while True:
            click.clear()
            click.echo(click.style(editor.title.upper(), bold=True))
            click.echo(editor.date)
            click.echo()
            for i, (section, dimmed) in enumerate(editor.presentation()):
                focused = i == editor.focused_index and not editor.show_all
                click.echo(click.style(f"## {section.title}", bold=not dimmed, dim=dimmed, underline=focused))
                click.echo(click.style(section.content, dim=dimmed))
                click.echo()
            mode = "all" if editor.show_all else "focus"
            click.echo(click.style(f"[n]ext [p]rev [a]ll/focus ({mode}) [q]uit", dim=True))

            key = click.getchar()
            if key in _NEXT_KEYS:
                editor.next_section()
            elif key in _PREV_KEYS:
                editor.previous_section()
            elif key == "a":
                editor.toggle_show_all()
            elif key in ("q", "\x1b"):
                break
    finally:
        editor.exit_presentation()


@main.command()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_obj
def bot(app: AppContext, debug: bool):
    """Run the Telegram bot."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )

    try:
        from .telegram_bot import run_bot
        click.echo("Starting wodlog Telegram bot...")
        click.echo("Press Ctrl+C to stop")
        run_bot(app)
    except ImportError as e:
        click.echo("Error: Missing dependencies. Run 'pip install python-telegram-bot telegramify-markdown'", err=True)
        click.echo(f"Details: {e}", err=True)
        sys.exit(1)
    except ValueError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nBot stopped.")


if __name__ == "__main__":
    main()
