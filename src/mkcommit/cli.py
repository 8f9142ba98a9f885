"""
Command line interface for mkcommit.

This module defines the ``main`` function which is used as the entry
point when executing the ``mkcommit`` command. Without options it runs
the generate-and-commit flow: collect the staged diff, ask the local
Ollama model for a conventional commit message, and let the user
accept, regenerate, edit or cancel it. The options manage the persisted
configuration (model, port, exclusion list, debug flag).

Exit code 0 is used for success and for graceful no-op paths (nothing
staged, only excluded files staged, cancelled); exit code 1 for any
unrecoverable error.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

import click

from mkcommit import __version__
from mkcommit.config.store import ConfigError, ConfigStore, InvalidPortError, Settings, validate_port
from mkcommit.diff.acquirer import DiffAcquirer, DiffPayload
from mkcommit.exclusions.patterns import DEFAULT_EXCLUDES, FIXED_EXCLUDE_PATTERNS
from mkcommit.llm.commit_message_generator import CommitMessageGenerator
from mkcommit.llm.ollama_client import LLMError, ModelNotFoundError, OllamaClient
from mkcommit.vcs.git_client import DiffTooLargeError, GitClient, GitError, NotAGitRepositoryError

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_ERROR = 1


# ---------------------------------------------------------------------------
# Progress and status display utilities
# ---------------------------------------------------------------------------

class ProgressIndicator:
    """Simple progress indicator for user feedback."""

    def __init__(self, message: str, show_spinner: bool = True):
        self.message = message
        self.show_spinner = show_spinner
        self.spinner_chars = ['⠋', '⠙', '⠹', '⠸', '⠼', '⠴', '⠦', '⠧', '⠇', '⠏']
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        if self.show_spinner:
            click.echo(f"{self.spinner_chars[0]} {self.message}...", nl=False)
        else:
            click.echo(f"→ {self.message}...")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.time() - self.start_time
        mark = "✗" if exc_type is not None else "✓"
        if self.show_spinner:
            click.echo(f"\r{mark} {self.message} (took {elapsed:.1f}s)")
        else:
            click.echo(f"  {mark} Done ({elapsed:.1f}s)")
        return False


def print_info(message: str, indent: int = 0):
    """Print an info message."""
    prefix = "  " * indent
    click.echo(f"{prefix}ℹ {message}", err=False)


def print_success(message: str, indent: int = 0):
    """Print a success message."""
    prefix = "  " * indent
    click.echo(click.style(f"{prefix}✓ {message}", fg="green"), err=False)


def print_warning(message: str, indent: int = 0):
    """Print a warning message."""
    prefix = "  " * indent
    click.echo(click.style(f"{prefix}⚠ {message}", fg="yellow"), err=False)


def print_error(message: str, indent: int = 0):
    """Print an error message."""
    prefix = "  " * indent
    click.echo(click.style(f"{prefix}✗ {message}", fg="red"), err=True)


def format_size(num_bytes: int) -> str:
    """Return a human readable size such as ``'1.50 GB'``."""
    size = float(num_bytes)
    units = ["B", "KB", "MB", "GB"]
    for unit in units:
        if size < 1024 or unit == units[-1]:
            break
        size /= 1024
    if unit == "B":
        return f"{int(size)} B"
    return f"{size:.2f} {unit}"


def configure_logging(debug: bool) -> None:
    # force=True so handlers are reconfigured on repeated invocations (tests).
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s: %(message)s",
        force=True,
    )


def build_client(settings: Settings) -> OllamaClient:
    return OllamaClient(model=settings.ollama_model, port=settings.ollama_port)


# ---------------------------------------------------------------------------
# Configuration commands
# ---------------------------------------------------------------------------

def display_config(settings: Settings) -> None:
    """Print the current configuration."""
    click.echo(click.style("\n📋 Current configuration:\n", fg="cyan"))
    click.echo(f"   Ollama Port: {click.style(str(settings.ollama_port), fg='yellow')}")
    click.echo(f"   Model:       {click.style(settings.ollama_model, fg='yellow')}")
    click.echo(f"   Debug:       {click.style('enabled' if settings.debug else 'disabled', fg='yellow')}")
    click.echo(f"   Excluded:    {click.style(', '.join(settings.exclude_files) or '(none)', dim=True)}")
    click.echo("")


def display_excludes(settings: Settings) -> None:
    """Print the configured exclusions followed by the fixed patterns."""
    click.echo(click.style("\n🚫 Files excluded from analysis:\n", fg="cyan"))
    if not settings.exclude_files:
        click.echo(click.style("   (none)", fg="yellow"))
    for index, pattern in enumerate(settings.exclude_files, start=1):
        tag = click.style(" (default)", dim=True) if pattern in DEFAULT_EXCLUDES else ""
        click.echo(f"   {index}. {click.style(pattern, fg='yellow')}{tag}")

    click.echo(click.style("\n📁 Fixed patterns (always excluded):\n", fg="cyan"))
    for pattern in FIXED_EXCLUDE_PATTERNS:
        click.echo(click.style(f"   • {pattern}", dim=True))
    click.echo("")


def display_models(settings: Settings) -> None:
    """Print the models installed on the Ollama server.

    Connection problems are reported but do not change the exit code.
    """
    try:
        with ProgressIndicator("Getting model list"):
            models = build_client(settings).list_models()
    except LLMError as exc:
        print_error(f"Error connecting to Ollama: {exc}")
        print_info("Make sure Ollama is running.", indent=1)
        return

    if not models:
        print_warning("No models installed in Ollama.")
        print_info("Run: ollama pull <model> to download one.", indent=1)
        return

    click.echo(click.style("\n📦 Available models in Ollama:\n", fg="cyan"))
    for index, model in enumerate(models, start=1):
        size = format_size(model.size) if model.size else "N/A"
        current = click.style(" ← current", fg="green") if model.name == settings.ollama_model else ""
        click.echo(f"   {index}. {click.style(model.name, fg='yellow')} {click.style(f'({size})', dim=True)}{current}")
    click.echo("")


def apply_model(store: ConfigStore, settings: Settings, name: str) -> None:
    """Verify ``name`` against the server and persist it.

    Raises
    ------
    click.exceptions.Exit
        With EXIT_ERROR if the model is unknown or the server unreachable.
    """
    try:
        with ProgressIndicator("Verifying model"):
            resolved = build_client(settings).resolve_model(name)
    except ModelNotFoundError as exc:
        print_error(str(exc))
        click.echo(click.style("\n📦 Available models:", fg="cyan"))
        for available in exc.available:
            click.echo(f"   • {click.style(available, fg='yellow')}")
        click.echo("")
        raise click.exceptions.Exit(EXIT_ERROR)
    except LLMError as exc:
        print_error(f"Error verifying model: {exc}")
        raise click.exceptions.Exit(EXIT_ERROR)

    store.set_model(resolved)
    settings.ollama_model = resolved
    print_success(f"Model set to: {resolved}")


def choose_model(store: ConfigStore, settings: Settings) -> bool:
    """Let the user pick one of the installed models.

    Returns True if the model was changed.
    """
    try:
        with ProgressIndicator("Getting available models"):
            models = build_client(settings).list_models()
    except LLMError as exc:
        print_error(f"Error getting models: {exc}")
        print_info("Make sure Ollama is running.", indent=1)
        return False

    if not models:
        print_warning("No models installed in Ollama.")
        return False

    names = [model.name for model in models]
    click.echo(click.style("\n📦 Available models:\n", fg="cyan"))
    for index, model in enumerate(models, start=1):
        size = format_size(model.size) if model.size else ""
        current = click.style(" ← current", fg="green") if model.name == settings.ollama_model else ""
        click.echo(f"   {index}. {model.name} {click.style(size, dim=True)}{current}")

    default = names.index(settings.ollama_model) + 1 if settings.ollama_model in names else 1
    choice = click.prompt("   Select the model", type=click.IntRange(1, len(names)), default=default)
    selected = names[choice - 1]
    store.set_model(selected)
    settings.ollama_model = selected
    print_success(f"Model changed to: {selected}")
    return True


def _port_value(value: str) -> int:
    try:
        return validate_port(value)
    except InvalidPortError as exc:
        raise click.BadParameter(str(exc)) from exc


def _require_pattern(pattern: str) -> None:
    if not pattern.strip():
        print_error("Exclusion pattern must not be empty.")
        raise click.exceptions.Exit(EXIT_ERROR)


def prompt_for_port(store: ConfigStore, settings: Settings) -> int:
    """Ask for a new port until a valid one is entered, then persist it."""
    port = click.prompt("   Enter the new port", default=str(settings.ollama_port), value_proc=_port_value)
    store.set_port(port)
    settings.ollama_port = port
    print_success(f"Port changed to: {port}")
    return port


# ---------------------------------------------------------------------------
# Generate-and-commit flow
# ---------------------------------------------------------------------------

def display_files(payload: DiffPayload) -> None:
    """Print the analysed files with their status and the skipped ones."""
    click.echo(f"📁 Files to analyze ({len(payload.analyzed_files)}):")
    for item in payload.analyzed_files:
        colour = {"added": "green", "deleted": "red"}.get(item.status, "yellow")
        click.echo(f"   {click.style(f'[{item.status_code}]', fg=colour)} {item.path}")

    if payload.excluded_files:
        click.echo(click.style(f"\n🚫 Excluded from analysis ({len(payload.excluded_files)}):", dim=True))
        for path in payload.excluded_files:
            click.echo(click.style(f"   [skip] {path}", dim=True))
    click.echo("")


def display_commit_message(message: str) -> None:
    """Print a proposed commit message."""
    lines = message.splitlines() or [""]
    click.echo(click.style("\n💬 Proposed commit message:\n", fg="cyan"))
    click.echo(f"   {click.style(lines[0], fg='green', bold=True)}")
    body = [line for line in lines[1:] if line.strip()]
    if body:
        click.echo("")
        for line in body:
            click.echo(click.style(f"   {line}", dim=True))
    click.echo("")


def generate_message(settings: Settings, payload: DiffPayload) -> str:
    """Ask the model for a message; any model failure ends the invocation."""
    generator = CommitMessageGenerator(build_client(settings))
    try:
        with ProgressIndicator(f"Generating message with {settings.ollama_model}"):
            return generator.generate(payload)
    except LLMError as exc:
        print_error(f"Error generating message: {exc}")
        print_info("Verify that Ollama is running and the model is available.", indent=1)
        raise click.exceptions.Exit(EXIT_ERROR)


def edit_message(message: str) -> Optional[str]:
    """Open the user's editor on ``message``.

    Returns the edited text, or ``None`` if nothing usable came back.
    """
    try:
        edited = click.edit(message, extension=".txt")
    except click.ClickException as exc:
        print_error(f"Editor failed: {exc.format_message()}")
        return None
    if edited is None or not edited.strip():
        return None
    return edited.strip()


def commit_message(client: GitClient, message: str) -> None:
    """Commit the staged changes with ``message``."""
    try:
        with ProgressIndicator("Making commit"):
            output = client.commit_with_message(message)
    except GitError as exc:
        print_error(f"Error making commit: {exc}")
        raise click.exceptions.Exit(EXIT_ERROR)
    if output:
        click.echo(click.style(output, dim=True))
    print_success("Commit successful!")


def prompt_action() -> str:
    """Ask what to do with the proposed message."""
    click.echo("   A = Accept | R = Regenerate | E = Edit | M = Change model | P = Change port | C = Cancel")
    return click.prompt(
        "   What would you like to do?",
        type=click.Choice(["A", "R", "E", "M", "P", "C"], case_sensitive=False),
        default="A",
        show_choices=False,
    ).strip().lower()


def review_loop(client: GitClient, store: ConfigStore, settings: Settings, payload: DiffPayload) -> None:
    """Generate, show and act on commit messages until accepted or cancelled.

    The diff payload is reused; only the model call is repeated.
    """
    message: Optional[str] = None
    while True:
        if message is None:
            message = generate_message(settings, payload)
        display_commit_message(message)
        action = prompt_action()

        if action == "a":
            commit_message(client, message)
            return

        if action == "r":
            click.echo(click.style("\n🔄 Generating new message...\n", fg="cyan"))
            message = None
            continue

        if action == "e":
            edited = edit_message(message)
            if edited is None:
                print_warning("Empty or unchanged message, returning to menu...")
                continue
            display_commit_message(edited)
            if click.confirm("   Confirm this message?", default=True):
                commit_message(client, edited)
                return
            continue

        if action == "m":
            if choose_model(store, settings):
                click.echo(click.style("\n🔄 Regenerating message with new model...\n", fg="cyan"))
                message = None
            continue

        if action == "p":
            prompt_for_port(store, settings)
            click.echo(click.style("\n🔄 Regenerating message...\n", fg="cyan"))
            message = None
            continue

        print_warning("Operation cancelled.")
        return


def generate_commit(store: ConfigStore, settings: Settings) -> None:
    """Run the full generate-and-commit flow in the current directory."""
    click.echo(click.style("\n🔍 Analyzing staged changes...\n", fg="cyan"))
    client = GitClient(Path.cwd())
    acquirer = DiffAcquirer(client, settings.exclude_files)
    try:
        with ProgressIndicator("Reading staged changes"):
            payload = acquirer.acquire()
    except (NotAGitRepositoryError, DiffTooLargeError) as exc:
        print_error(str(exc))
        raise click.exceptions.Exit(EXIT_ERROR)
    except GitError as exc:
        print_error(f"Git error: {exc}")
        raise click.exceptions.Exit(EXIT_ERROR)

    if payload is None:
        if acquirer.skipped:
            print_warning("Only excluded files are staged:")
            for path in acquirer.skipped:
                click.echo(click.style(f"   🚫 {path}", dim=True))
            print_info("These files are excluded from analysis; commit them with git directly.", indent=1)
        else:
            print_warning("No changes in stage.")
            print_info("Use: git add <files> to add changes.", indent=1)
        raise click.exceptions.Exit(EXIT_SUCCESS)

    display_files(payload)
    review_loop(client, store, settings, payload)


@click.command()
@click.option("--show-config", is_flag=True, help="Show current configuration.")
@click.option("--list-models", is_flag=True, help="List available models in Ollama.")
@click.option(
    "--set-model",
    "set_model",
    is_flag=False,
    flag_value="",
    default=None,
    metavar="[MODEL]",
    help="Set the Ollama model to use (interactive if omitted).",
)
@click.option("--set-port", "set_port", metavar="PORT", help="Set the Ollama port.")
@click.option("--list-excludes", is_flag=True, help="List excluded files.")
@click.option("--add-exclude", metavar="PATTERN", help="Add a file or glob to the exclusion list.")
@click.option("--remove-exclude", metavar="PATTERN", help="Remove a file or glob from the exclusion list.")
@click.option("--reset-excludes", is_flag=True, help="Reset the exclusion list to defaults.")
@click.option("--debug/--no-debug", default=None, help="Enable or disable debug logging (persisted).")
@click.version_option(version=__version__, prog_name="mkcommit")
def main(
    show_config: bool,
    list_models: bool,
    set_model: Optional[str],
    set_port: Optional[str],
    list_excludes: bool,
    add_exclude: Optional[str],
    remove_exclude: Optional[str],
    reset_excludes: bool,
    debug: Optional[bool],
) -> None:
    """🚀 Generate commit messages for staged changes using a local Ollama model."""
    store = ConfigStore()
    try:
        settings = store.load()
        if debug is not None:
            store.set_debug(debug)
            settings.debug = debug
        configure_logging(settings.debug)
        if debug:
            click.echo(click.style("[DEBUG] Debug mode enabled", dim=True))

        if show_config:
            display_config(settings)
            return

        if list_models:
            display_models(settings)
            return

        if list_excludes:
            display_excludes(settings)
            return

        if add_exclude is not None:
            _require_pattern(add_exclude)
            if store.add_exclude(add_exclude):
                print_success(f"Added to exclusions: {add_exclude}")
            else:
                print_warning(f'"{add_exclude}" is already in the exclusion list.')
            return

        if remove_exclude is not None:
            _require_pattern(remove_exclude)
            if store.remove_exclude(remove_exclude):
                print_success(f"Removed from exclusions: {remove_exclude}")
            else:
                print_warning(f'"{remove_exclude}" is not in the exclusion list.')
                print_info("Use --list-excludes to see the current list.", indent=1)
            return

        if reset_excludes:
            store.reset_excludes()
            print_success("Exclusion list reset to defaults.")
            return

        if set_port is not None:
            try:
                port = store.set_port(set_port)
            except InvalidPortError as exc:
                print_error(str(exc))
                raise click.exceptions.Exit(EXIT_ERROR)
            settings.ollama_port = port
            print_success(f"Port set to: {port}")

        if set_model is not None:
            if set_model:
                apply_model(store, settings, set_model)
            else:
                choose_model(store, settings)

        if set_port is not None or set_model is not None:
            return

        generate_commit(store, settings)

    except (click.exceptions.Exit, click.exceptions.Abort, click.ClickException):
        # Click handles its own exceptions
        raise
    except ConfigError as exc:
        print_error(f"Configuration error: {exc}")
        raise click.exceptions.Exit(EXIT_ERROR)
    except Exception as exc:
        logging.exception("Unhandled error: %s", exc)
        print_error(f"Error: {exc}")
        raise click.exceptions.Exit(EXIT_ERROR)
