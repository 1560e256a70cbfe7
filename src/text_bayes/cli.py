"""Command-line interface for Text Bayes.

Keeps a model in a JSON file and provides commands to create it, train
and untrain categories, and score documents, with rich terminal output
using the ``click`` and ``rich`` libraries.

Usage::

    text-bayes --model spam.json init spam ham
    text-bayes --model spam.json train spam offer.txt promo.txt
    cat mail.txt | text-bayes --model spam.json classify
    text-bayes --model spam.json scores --method fisher mail.txt
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import IO, NoReturn

import click
import structlog
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .classifier import BayesClassifier
from .errors import ClassifierError
from .models import Ranking, ScoringMethod

console = Console()
logger = structlog.get_logger()

DEFAULT_MODEL = "text-bayes.json"


def _fail(message: str) -> NoReturn:
    console.print(f"[bold red]Error:[/] {escape(message)}")
    sys.exit(1)


def _load_model(path: Path) -> BayesClassifier:
    if not path.exists():
        _fail(f"Model file not found: {path}. Run 'text-bayes init' first.")
    try:
        return BayesClassifier.load(path)
    except ClassifierError as e:
        _fail(str(e))


def _read_texts(files: tuple[IO[str], ...]) -> list[str]:
    """Read every given file, or stdin when none are given."""
    if not files:
        return [sys.stdin.read()]
    return [f.read() for f in files]


@click.group()
@click.version_option(package_name="text-bayes")
@click.option("--model", "-m", "model_path", type=click.Path(path_type=Path),
              default=DEFAULT_MODEL, envvar="TEXT_BAYES_MODEL", show_default=True,
              help="Model file (env: TEXT_BAYES_MODEL).")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
@click.option("--quiet", "-q", is_flag=True, help="Only log warnings and errors.")
@click.pass_context
def main(ctx: click.Context, model_path: Path, verbose: bool, quiet: bool) -> None:
    """📊 Text Bayes — trainable naive Bayes and Fisher text classifier.

    Train categories from labeled text, then classify new documents.
    """
    from .log import configure_logging

    configure_logging(verbose=verbose, quiet=quiet)
    ctx.obj = {"model_path": model_path}


@main.command()
@click.argument("categories", nargs=-1, required=True)
@click.option("--vocabulary", "vocab_file", type=click.File("r", encoding="utf-8"),
              default=None, help="File with one allowed feature per line.")
@click.option("--symmetric-untrain", is_flag=True,
              help="Make untrain also decrement document counts.")
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing model file.")
@click.pass_obj
def init(obj: dict, categories: tuple[str, ...], vocab_file: IO[str] | None,
         symmetric_untrain: bool, force: bool) -> None:
    """Create a new model with the given categories.

    Example: text-bayes init spam ham
    """
    path: Path = obj["model_path"]
    if path.exists() and not force:
        _fail(f"{path} already exists. Use --force to overwrite.")

    vocabulary = None
    if vocab_file is not None:
        vocabulary = {line.strip() for line in vocab_file if line.strip()}

    try:
        bayes = BayesClassifier(
            *categories, vocabulary=vocabulary, symmetric_untrain=symmetric_untrain
        )
    except ClassifierError as e:
        _fail(str(e))
    bayes.save(path)
    logger.info("model_created", path=str(path), categories=bayes.categories())
    console.print(f"Created [bold]{path}[/] with categories: {', '.join(bayes.categories())}")


@main.command("add-category")
@click.argument("name")
@click.pass_obj
def add_category(obj: dict, name: str) -> None:
    """Add a category to the model.

    Re-adding an existing category erases what it has learned.
    """
    path: Path = obj["model_path"]
    bayes = _load_model(path)
    try:
        normalized = bayes.add_category(name)
    except ClassifierError as e:
        _fail(str(e))
    bayes.save(path)
    console.print(f"Added category [cyan]{normalized}[/]")


@main.command()
@click.argument("category")
@click.argument("files", nargs=-1, type=click.File("r", encoding="utf-8"))
@click.pass_obj
def train(obj: dict, category: str, files: tuple[IO[str], ...]) -> None:
    """Train CATEGORY with each FILE (or stdin) as one document.

    Example: text-bayes train spam offer.txt promo.txt
    """
    _apply(obj["model_path"], category, files, untrain=False)


@main.command()
@click.argument("category")
@click.argument("files", nargs=-1, type=click.File("r", encoding="utf-8"))
@click.pass_obj
def untrain(obj: dict, category: str, files: tuple[IO[str], ...]) -> None:
    """Remove each FILE (or stdin) from CATEGORY.

    Only untrain documents that were trained into the same category.
    """
    _apply(obj["model_path"], category, files, untrain=True)


def _apply(path: Path, category: str, files: tuple[IO[str], ...], untrain: bool) -> None:
    bayes = _load_model(path)
    texts = _read_texts(files)
    try:
        for text in texts:
            if untrain:
                bayes.untrain(category, text)
            else:
                bayes.train(category, text)
    except ClassifierError as e:
        _fail(str(e))
    bayes.save(path)
    verb = "Untrained" if untrain else "Trained"
    logger.info("model_updated", path=str(path), category=category, documents=len(texts))
    console.print(f"{verb} {len(texts)} document(s) for [cyan]{category}[/]")


@main.command()
@click.argument("file", type=click.File("r", encoding="utf-8"), default="-")
@click.pass_obj
def classify(obj: dict, file: IO[str]) -> None:
    """Print the best naive Bayes category for FILE (or stdin)."""
    bayes = _load_model(obj["model_path"])
    try:
        category = bayes.classify(file.read())
    except ClassifierError as e:
        _fail(str(e))
    click.echo(category)


@main.command()
@click.argument("file", type=click.File("r", encoding="utf-8"), default="-")
@click.option("--method", "-M", type=click.Choice([m.value for m in ScoringMethod]),
              default=ScoringMethod.NAIVE.value, help="Scoring method.")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@click.pass_obj
def scores(obj: dict, file: IO[str], method: str, output: str) -> None:
    """Score FILE (or stdin) against every category.

    Example: text-bayes scores --method fisher mail.txt
    """
    bayes = _load_model(obj["model_path"])
    try:
        ranking = bayes.rank(file.read(), method)
    except ClassifierError as e:
        _fail(str(e))

    if output == "json":
        click.echo(json.dumps(ranking.to_dict(), indent=2))
    else:
        _render_ranking(ranking)


@main.command()
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@click.pass_obj
def categories(obj: dict, output: str) -> None:
    """List categories with their document and word counts."""
    bayes = _load_model(obj["model_path"])
    rows = [
        (name, bayes.document_count(name), sum(bayes.category_counts(name).values()))
        for name in bayes.categories()
    ]

    if output == "json":
        click.echo(json.dumps(
            [{"category": n, "documents": d, "words": w} for n, d, w in rows], indent=2
        ))
        return

    table = Table(title=f"Categories — {obj['model_path']}")
    table.add_column("Category", style="cyan")
    table.add_column("Documents", justify="right")
    table.add_column("Words", justify="right")
    for name, docs, words in rows:
        table.add_row(name, str(docs), str(words))
    console.print(table)


# ------------------------------------------------------------------
# Rich rendering helpers
# ------------------------------------------------------------------

def _render_ranking(ranking: Ranking) -> None:
    """Render a Ranking as a rich table with the winner highlighted."""
    is_log = ranking.method is ScoringMethod.NAIVE
    table = Table(title=f"{ranking.method.value.title()} scores", show_lines=False)
    table.add_column("#", justify="right", width=4)
    table.add_column("Category", style="cyan")
    table.add_column("Log score" if is_log else "Probability", justify="right")

    for i, (name, score) in enumerate(ranking.ordered(), 1):
        value = f"{score:.4f}" if is_log else f"{score:.4g}"
        style = "bold green" if i == 1 else ""
        table.add_row(str(i), name, value, style=style)

    console.print()
    console.print(table)
    if ranking.best is not None:
        console.print(Panel(f"[bold]{ranking.best}[/]", title="Best match", border_style="green"))
    console.print()


if __name__ == "__main__":
    main()
