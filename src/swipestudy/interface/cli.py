"""SwipeStudy CLI: folders, imports and study sessions in the terminal."""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

from swipestudy.application.card_store import CardStore
from swipestudy.application.config import AppConfig, resolve_config
from swipestudy.application.import_service import ImportService
from swipestudy.application.sessions import LearnSession, SessionState, SwipeSession
from swipestudy.application.sessions.base import TERMINAL_STATES, SessionSummary
from swipestudy.application.stats import FolderStatsCalculator
from swipestudy.domain.errors import CardStoreError, GenerationError, GradingError
from swipestudy.domain.models import Folder, QuestionType, SpacedOutcome, StudyMode, now_ms
from swipestudy.infrastructure.adapters.exact_grader import ExactMatchGrader
from swipestudy.infrastructure.adapters.json_store import JsonFileStore
from swipestudy.infrastructure.adapters.notes_generator import NotesCardGenerator
from swipestudy.interface.prompt_grader import SelfAssessedGrader

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="swipestudy: Spaced-repetition study sessions from your notes.",
    no_args_is_help=True,
)

folder_app = typer.Typer(help="Manage folders.", no_args_is_help=True)
app.add_typer(folder_app, name="folder")

config_app = typer.Typer(help="Manage swipestudy configuration.", no_args_is_help=True)
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
    data_dir: Annotated[
        Path | None, typer.Option(help="Directory holding the card store.")
    ] = None,
):
    """Global settings for swipestudy."""
    ctx.ensure_object(dict)
    # Each -v raises the level one step above the default (warnings)
    ctx.obj["overrides"] = {"data_dir": data_dir, "verbose": 1 + verbose if verbose else None}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _config(ctx: typer.Context) -> AppConfig:
    obj = ctx.obj or {}
    config = resolve_config(obj.get("overrides"))
    logging.getLogger("swipestudy").setLevel(config.log_level)
    return config


def _open_store(config: AppConfig) -> CardStore:
    store = CardStore(JsonFileStore(config.store_path), threshold=config.mastery_threshold)
    try:
        store.load()
    except (OSError, ValueError) as e:
        typer.secho(f"Could not read {config.store_path}: {e}", fg="red")
        raise typer.Exit(1) from e
    return store


def _resolve_folder(store: CardStore, ref: str) -> Folder:
    """Find a folder by id, or by name (case-insensitive)."""
    folder = store.get_folder(ref)
    if folder:
        return folder
    matches = [f for f in store.folders() if f.name.lower() == ref.strip().lower()]
    if len(matches) == 1:
        return matches[0]
    if matches:
        typer.secho(f"Folder name '{ref}' is ambiguous; use its id.", fg="yellow")
    else:
        typer.secho(f"No folder '{ref}'. Run 'swipestudy folders' to list them.", fg="red")
    raise typer.Exit(1)


def _ask(prompt: str, choices: dict[str, str]) -> str:
    """Prompt until one of `choices` (key -> value) is entered."""
    while True:
        raw = typer.prompt(prompt, default="", show_default=False).strip().lower()
        if raw in choices:
            return choices[raw]
        typer.secho(f"Please enter one of: {', '.join(choices)}", fg="yellow")


def _print_summary(summary: SessionSummary) -> None:
    if summary.state == SessionState.ABANDONED:
        typer.secho("Session abandoned. Nothing was saved.", fg="yellow")
        return
    if summary.nothing_to_review:
        typer.secho("Nothing to review. All caught up!", fg="green")
        return
    typer.secho(
        f"Done: {summary.attempts} answers, {summary.correct} correct, "
        f"{len(summary.mastered_ids)} mastered, {summary.written_back} cards updated.",
        fg="green",
    )


# ---------------------------------------------------------------------------
# Folder commands
# ---------------------------------------------------------------------------


@app.command("folders")
def list_folders(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List folders with card, due and mastery counts."""
    config = _config(ctx)
    store = _open_store(config)
    calc = FolderStatsCalculator(config.mastery_threshold)
    now = now_ms()
    rows = [calc.for_folder(f, store.all(), now) for f in store.folders()]

    if json_output:
        typer.echo(
            json.dumps(
                [
                    {
                        "id": s.folder_id,
                        "name": s.name,
                        "cards": s.total,
                        "due": s.due,
                        "mastered": s.mastered,
                        "progress": s.progress_percent,
                    }
                    for s in rows
                ],
                indent=2,
            )
        )
        return

    for s in rows:
        typer.echo(
            f"{s.name}  [{s.folder_id}]  {s.total} cards • {s.due} due • {s.progress_percent}%"
        )


@folder_app.command("create")
def folder_create(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Folder name.")],
    color: Annotated[str, typer.Option(help="Display color.")] = "indigo",
):
    """Create a new folder."""
    store = _open_store(_config(ctx))
    try:
        folder = store.add_folder(name, color)
    except CardStoreError as e:
        typer.secho(str(e), fg="red")
        raise typer.Exit(1) from e
    typer.secho(f"Created folder '{folder.name}' ({folder.id})", fg="green")


@app.command("stats")
def stats(ctx: typer.Context):
    """Show overall mastery progress."""
    config = _config(ctx)
    store = _open_store(config)
    calc = FolderStatsCalculator(config.mastery_threshold)
    mastered, total, percent = calc.overall(store.all())
    typer.echo(f"{mastered} of {total} terms memorized ({percent}%)")


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------


@app.command("import")
def import_notes(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="Markdown or text file with notes.")],
    folder: Annotated[
        str, typer.Option("--folder", "-f", help="Target folder id or name.")
    ] = "f1",
):
    """Import cards from a notes file into a folder."""
    store = _open_store(_config(ctx))
    target = _resolve_folder(store, folder)

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        typer.secho(f"Could not read {path}: {e}", fg="red")
        raise typer.Exit(1) from e

    service = ImportService(store, NotesCardGenerator())
    try:
        cards = asyncio.run(service.import_text(text, target.id))
    except (GenerationError, CardStoreError) as e:
        typer.secho(f"Import failed: {e}", fg="red")
        raise typer.Exit(1) from e

    typer.secho(f"Imported {len(cards)} cards into '{target.name}'.", fg="green")


# ---------------------------------------------------------------------------
# Study sessions
# ---------------------------------------------------------------------------


@app.command("review")
def review(
    ctx: typer.Context,
    folder: Annotated[str, typer.Argument(help="Folder id or name.")],
    mode: Annotated[
        StudyMode | None,
        typer.Option(help="scheduled: as stored, random: shuffled, focused: due first."),
    ] = None,
):
    """Swipe through a folder once: [l]eft = mastered, [r]ight = needs review."""
    config = _config(ctx)
    store = _open_store(config)
    target = _resolve_folder(store, folder)

    session = SwipeSession.for_folder(
        store,
        target.id,
        mode or StudyMode(config.default_mode),
        threshold=config.mastery_threshold,
    )
    session.start()

    try:
        while session.state == SessionState.IN_ROUND:
            card = session.current
            index, total = session.position
            typer.echo(f"\n[{index}/{total}] {card.front}")
            if _ask("Enter to flip, q to quit", {"": "flip", "q": "quit"}) == "quit":
                session.abandon()
                break
            typer.echo(f"    {card.back}")
            choice = _ask(
                "[l] mastered  [r] needs review  [q] quit",
                {"l": "left", "r": "right", "q": "quit"},
            )
            if choice == "quit":
                session.abandon()
                break
            session.swipe(SpacedOutcome.from_swipe(choice))
    except typer.Abort:
        session.abandon()

    _print_summary(session.summary())


@app.command("learn")
def learn(
    ctx: typer.Context,
    folder: Annotated[str, typer.Argument(help="Folder id or name.")],
    count: Annotated[int | None, typer.Option("--count", "-n", help="Items per session.")] = None,
    types: Annotated[
        list[QuestionType] | None,
        typer.Option("--type", "-t", help="Allowed question types. Repeat for several."),
    ] = None,
    grader: Annotated[
        str, typer.Option(help="self: judge your own answers, exact: text must match.")
    ] = "self",
):
    """Answer in rounds until every item is mastered."""
    config = _config(ctx)
    store = _open_store(config)
    target = _resolve_folder(store, folder)

    item_count = count or config.default_item_count
    allowed = types or [QuestionType(t) for t in config.question_types]
    answer_grader = ExactMatchGrader() if grader == "exact" else SelfAssessedGrader()

    questions = None
    if allowed != [QuestionType.WRITTEN]:
        pending = [
            c
            for c in store.get_by_folder(target.id)
            if c.mastery_score < config.mastery_threshold
        ]
        service = ImportService(store, NotesCardGenerator())
        try:
            questions = asyncio.run(
                service.build_questions(pending[:item_count], allowed, item_count)
            )
        except GenerationError as e:
            typer.secho(f"Could not build questions: {e}", fg="red")
            raise typer.Exit(1) from e

    session = LearnSession.for_folder(
        store,
        target.id,
        answer_grader,
        item_count=item_count,
        questions=questions,
        threshold=config.mastery_threshold,
        grading_timeout=config.grading_timeout,
    )
    session.start()

    try:
        _run_learn_loop(session)
    except typer.Abort:
        if session.state not in TERMINAL_STATES:
            session.abandon()

    _print_summary(session.summary())


def _run_learn_loop(session: LearnSession) -> None:
    while session.state not in TERMINAL_STATES:
        if session.state == SessionState.ROUND_COMPLETE:
            typer.secho(
                f"\nRound {session.round} complete. {len(session.remaining)} items to go.",
                fg="cyan",
            )
            session.next_round()
            continue

        item = session.current_item
        card = session.current_card
        dots = "●" * card.mastery_score + "○" * max(session.threshold - card.mastery_score, 0)
        typer.echo(f"\nRound {session.round}  {dots}  ({session.queue_length} left)")
        typer.echo(item.prompt)
        for i, option in enumerate(item.question.options if item.question else [], start=1):
            typer.echo(f"  {i}. {option}")

        answer = typer.prompt("Your answer (:q to quit)", default="", show_default=False)
        if answer.strip() == ":q":
            session.abandon()
            return
        if not answer.strip():
            continue
        if item.question and item.question.options and answer.strip().isdigit():
            pick = int(answer.strip()) - 1
            if 0 <= pick < len(item.question.options):
                answer = item.question.options[pick]

        try:
            result = asyncio.run(session.submit(answer))
        except GradingError as e:
            typer.secho(f"Could not check that answer: {e}. Try again.", fg="red")
            continue

        color = "green" if result.is_correct else "red"
        typer.secho(result.feedback or ("Correct" if result.is_correct else "Not quite"), fg=color)
        session.advance()


# ---------------------------------------------------------------------------
# Maintenance
# ---------------------------------------------------------------------------


@app.command("migrate")
def migrate(
    ctx: typer.Context,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Report without saving.")
    ] = False,
):
    """Convert legacy known/review cards to mastery scores and save."""
    store = _open_store(_config(ctx))
    # Re-read through the migration to count legacy records
    migrated = store.load()
    if migrated and not dry_run:
        store.save()
    prefix = "[dry-run] " if dry_run else ""
    typer.echo(f"{prefix}Migrated {migrated} legacy cards in {store.backend.path}")


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _config(ctx)
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
