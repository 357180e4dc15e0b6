"""Command line interface for the outfit picker."""

from __future__ import annotations

import difflib
from pathlib import Path
from typing import Any, NoReturn, Optional

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from outfitpicker.catalog.models import Category, CategoryState, Item
from outfitpicker.cli_support import (
    build_picker,
    category_info_payload,
    item_payload,
    progress_payload,
)
from outfitpicker.config import ConfigError, ConfigManager, flatten_for_env, strip_timestamp
from outfitpicker.errors import OutfitPickerError, WearOutcome
from outfitpicker.rotation import OutfitPicker, OutfitSession

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)

_STATE_LABELS = {
    CategoryState.HAS_OUTFITS: "[green]ready[/green]",
    CategoryState.EMPTY: "[yellow]empty[/yellow]",
    CategoryState.NO_AVATAR_FILES: "[yellow]no outfit files[/yellow]",
    CategoryState.USER_EXCLUDED: "[dim]excluded[/dim]",
}


def _handle_cli_error(
    exc: Exception,
    *,
    json_output: bool = False,
) -> NoReturn:
    """Emit a standardized error and terminate the command.

    Args:
        exc: Exception raised by the engine or configuration layer.
        json_output: Indicates whether JSON mode is active.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        console.print_json(data={"error": {"code": type(exc).__name__, "message": str(exc)}})
        raise SystemExit(1)
    raise click.ClickException(str(exc)) from exc


def _emit_wear_outcome(item: Item, outcome: WearOutcome) -> None:
    """Print the message that matches a wear outcome."""

    label = escape(str(item))
    if outcome is WearOutcome.ROTATION_COMPLETED:
        console.print(
            f"[bold green]Rotation complete![/bold green] Every outfit in "
            f"{escape(item.category.name)} has been worn; the category starts over."
        )
    elif outcome is WearOutcome.ALREADY_WORN:
        console.print(f"[yellow]{label} was already marked as worn.[/yellow]")
    else:
        console.print(f"[green]Marked {label} as worn.[/green]")


def _picker() -> OutfitPicker:
    try:
        return build_picker()
    except OSError as exc:
        err_console.print(f"[yellow]Logging disabled: {escape(str(exc))}[/yellow]")
        return build_picker(with_logging=False)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="outfitpicker")
def cli() -> None:
    """Outfit picker draws outfits you have not worn yet, one rotation at a time.

    Returns:
        None: This function is invoked for its side effects.
    """


@cli.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option(
    "--exclude",
    "excluded",
    multiple=True,
    help="Category name to exclude from picks (repeatable).",
)
@click.option("--language", default="en", show_default=True, help="Preferred language code.")
def init(root: Path, excluded: tuple[str, ...], language: str) -> None:
    """Configure ROOT as the outfit directory.

    Args:
        root: Directory whose subdirectories are outfit categories.
        excluded: Category names to exclude.
        language: Preferred language code.
    """
    try:
        picker = OutfitPicker.create(root.resolve(), excluded=excluded, language=language)
        infos = picker.get_category_info()
    except OutfitPickerError as exc:
        _handle_cli_error(exc)

    ready = sum(1 for info in infos if info.has_outfits)
    console.print(
        f"[green]Configured {escape(str(root.resolve()))} with {ready} "
        f"categor{'y' if ready == 1 else 'ies'} ready to pick from.[/green]"
    )


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Emit category information as JSON.")
def categories(json_output: bool) -> None:
    """List categories under the configured root."""
    try:
        infos = _picker().get_category_info()
    except OutfitPickerError as exc:
        _handle_cli_error(exc, json_output=json_output)

    if json_output:
        console.print_json(data={"categories": category_info_payload(infos)})
        return

    if not infos:
        console.print("[yellow]No categories found.[/yellow]")
        return

    table = Table(title="Categories")
    table.add_column("Category")
    table.add_column("Outfits", justify="right")
    table.add_column("State")
    for info in infos:
        table.add_row(escape(info.category.name), str(info.outfit_count), _STATE_LABELS[info.state])
    console.print(table)


@cli.command()
@click.argument("category", required=False)
@click.option("--wear", is_flag=True, help="Mark the picked outfit as worn immediately.")
@click.option("--json", "json_output", is_flag=True, help="Emit the pick as JSON.")
def pick(category: Optional[str], wear: bool, json_output: bool) -> None:
    """Pick an unworn outfit, from CATEGORY or from any category."""
    picker = _picker()
    outcome: WearOutcome | None = None
    try:
        item = picker.pick_from_category(category) if category else picker.pick_across_categories()
        if item is not None and wear:
            outcome = picker.mark_worn(item)
    except OutfitPickerError as exc:
        _handle_cli_error(exc, json_output=json_output)

    if json_output:
        payload: dict[str, Any] = {"outfit": item_payload(item) if item else None}
        if outcome is not None:
            payload["wear"] = outcome.value
        console.print_json(data=payload)
        return

    if item is None:
        console.print("[yellow]No outfits available.[/yellow]")
        return

    console.print(f"[cyan]{escape(str(item))}[/cyan]")
    if outcome is not None:
        _emit_wear_outcome(item, outcome)


@cli.command()
@click.argument("category", required=False)
@click.option("-n", "--count", type=click.IntRange(min=1), default=3, show_default=True)
@click.option("--json", "json_output", is_flag=True, help="Emit the picks as JSON.")
def shuffle(category: Optional[str], count: int, json_output: bool) -> None:
    """Show COUNT suggestions without repeating any until the pool runs out."""
    session = OutfitSession(_picker())
    picks: list[Item] = []
    try:
        for _ in range(count):
            item = session.next_unique(category)
            if item is None:
                break
            picks.append(item)
    except OutfitPickerError as exc:
        _handle_cli_error(exc, json_output=json_output)

    if json_output:
        console.print_json(data={"outfits": [item_payload(item) for item in picks]})
        return

    if not picks:
        console.print("[yellow]No outfits available.[/yellow]")
        return
    for index, item in enumerate(picks, start=1):
        console.print(f"{index}. {escape(str(item))}")


@cli.command()
@click.argument("category")
@click.argument("file_name")
def wear(category: str, file_name: str) -> None:
    """Mark FILE_NAME in CATEGORY as worn."""
    picker = _picker()
    try:
        config = picker.configuration()
        root = picker.root_directory()
        item = Item(file_name=file_name, category=Category(name=category, path=str(root / category)))
        outcome = picker.mark_worn(item)
    except OutfitPickerError as exc:
        _handle_cli_error(exc)
    # Quiet mode still announces a completed rotation.
    if config.cli.quiet_default and not outcome.rotation_completed:
        return
    _emit_wear_outcome(item, outcome)


@cli.command()
@click.argument("category", required=False)
@click.option("--all", "reset_all", is_flag=True, help="Reset every category.")
def reset(category: Optional[str], reset_all: bool) -> None:
    """Reset the rotation of CATEGORY, or of every category with --all."""
    if bool(category) == reset_all:
        raise click.UsageError("Provide either CATEGORY or --all.")

    picker = _picker()
    try:
        if reset_all:
            picker.reset_all()
        else:
            picker.reset_category(category or "")
        quiet = picker.configuration().cli.quiet_default
    except OutfitPickerError as exc:
        _handle_cli_error(exc)

    if quiet:
        return
    target = "all categories" if reset_all else escape(category or "")
    console.print(f"[green]Reset rotation for {target}.[/green]")


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Emit worn outfits as JSON.")
def worn(json_output: bool) -> None:
    """List outfits worn in the current rotations."""
    try:
        worn_map = _picker().worn_by_category()
    except OutfitPickerError as exc:
        _handle_cli_error(exc, json_output=json_output)

    if json_output:
        console.print_json(data={"worn": worn_map})
        return

    if not worn_map:
        console.print("[yellow]No outfits worn yet.[/yellow]")
        return
    for name, files in worn_map.items():
        console.print(f"[bold]{escape(name)}[/bold]")
        for file_name in files:
            console.print(f"  - {escape(file_name)}")


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Emit rotation progress as JSON.")
def status(json_output: bool) -> None:
    """Show rotation progress for every category with outfits."""
    try:
        progress = _picker().all_progress()
    except OutfitPickerError as exc:
        _handle_cli_error(exc, json_output=json_output)

    if json_output:
        console.print_json(data={"progress": progress_payload(progress)})
        return

    if not progress:
        console.print("[yellow]No categories with outfits.[/yellow]")
        return

    table = Table(title="Rotation progress")
    table.add_column("Category")
    table.add_column("Worn", justify="right")
    table.add_column("Progress", justify="right")
    for name, entry in sorted(progress.items()):
        table.add_row(escape(name), entry.status_text, f"{entry.progress:.0%}")
    console.print(table)


@cli.command("factory-reset")
@click.confirmation_option(prompt="Delete configuration and rotation history?")
def factory_reset() -> None:
    """Delete the configuration and every recorded rotation."""
    try:
        _picker().factory_reset()
    except OutfitPickerError as exc:
        _handle_cli_error(exc)
    console.print("[green]Configuration and rotation history removed.[/green]")


@cli.group()
def config() -> None:
    """Manage outfit picker configuration files and overrides.

    Returns:
        None: This function is invoked for its side effects.
    """


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
@click.option(
    "--env",
    "as_env",
    is_flag=True,
    help="Print the configuration as OUTFITPICKER__ environment variable assignments.",
)
def config_view(no_env: bool, as_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Args:
        no_env: If True, ignore environment-derived overrides.
        as_env: If True, print `KEY=value` lines instead of YAML.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        loaded = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    if as_env:
        for env_key, rendered in flatten_for_env(loaded).items():
            click.echo(f"{env_key}={rendered}")
        return

    yaml_text = yaml.safe_dump(loaded.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Args:
        key: Dotted path describing the configuration field to update.
        value: YAML-literal value to write into the configuration file.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        before = strip_timestamp(manager.read_text().splitlines())
        manager.set_value(key, value)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    after = strip_timestamp(manager.read_text().splitlines())
    diff = "\n".join(
        difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
    )
    if not diff:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax(diff, "diff", word_wrap=False))
    console.print(f"[green]Updated {escape(key.strip())}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Open the configuration file in an interactive editor session.

    Raises:
        click.ClickException: If edited content is invalid or cannot be saved.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return

    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        manager.replace_text(edited)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point.

    Returns:
        None: This function is invoked for its side effects.
    """
    cli()


if __name__ == "__main__":
    main()
