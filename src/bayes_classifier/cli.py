"""Command-line interface for Bayes Classifier.

Provides ``tokenize``, ``classify`` and ``probs`` commands with rich
terminal output using the ``click`` and ``rich`` libraries. The model is
kept in memory only, so ``classify`` and ``probs`` train from a corpus
file on every run.

Corpus files are either JSON Lines (``.jsonl``, one
``{"category": ..., "text": ...}`` object per line) or tab-separated
``category<TAB>text`` lines (any other suffix).

Usage::

    bayes-classifier tokenize "Кот и собака"
    bayes-classifier classify --corpus corpus.tsv "кот и акция"
    bayes-classifier probs --corpus corpus.jsonl --output json "кот и акция"
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .classifier import Classifier
from .config import ClassifierConfig
from .errors import ClassifierError
from .tokenizer import StreamTokenizer, collect_tokens, word_counts

logger = logging.getLogger(__name__)

console = Console()


def load_corpus(path: Path) -> list[tuple[str, str]]:
    """Read ``(category, text)`` training pairs from a corpus file.

    Blank lines and lines starting with ``#`` are skipped.

    Raises:
        click.BadParameter: If a line cannot be parsed.
    """
    pairs: list[tuple[str, str]] = []
    is_jsonl = path.suffix.lower() == ".jsonl"
    for lineno, raw_line in enumerate(path.read_text(encoding="utf-8").splitlines(), 1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if is_jsonl:
            try:
                record = json.loads(line)
                pairs.append((str(record["category"]), str(record["text"])))
            except (ValueError, KeyError, TypeError) as e:
                raise click.BadParameter(
                    f"{path.name}:{lineno}: expected a JSON object with "
                    f"'category' and 'text' ({e})",
                    param_hint="--corpus",
                ) from e
        else:
            category, sep, text = raw_line.partition("\t")
            if not sep:
                raise click.BadParameter(
                    f"{path.name}:{lineno}: expected 'category<TAB>text'",
                    param_hint="--corpus",
                )
            pairs.append((category.strip(), text.strip()))
    return pairs


def _build_classifier(ctx: click.Context, corpus: Path) -> Classifier:
    config: ClassifierConfig = ctx.obj["config"]
    classifier = Classifier(config=config)
    pairs = load_corpus(corpus)
    with console.status("[bold blue]Training...", spinner="dots"):
        for category, text in pairs:
            classifier.train(text, category)
    logger.info(
        "Trained %d documents into %d categories from %s",
        len(pairs),
        len(classifier.categories),
        corpus,
    )
    return classifier


@click.group()
@click.version_option(package_name="bayes-classifier")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.option("--env-file", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="Load settings from this .env file.")
@click.pass_context
def main(ctx: click.Context, verbose: bool, env_file: Path | None) -> None:
    """Bayes Classifier: naive-Bayes text categorization.

    Train on a labelled corpus and assign categories to short documents.
    """
    try:
        config = ClassifierConfig.from_env(env_file=env_file)
    except ValueError as e:
        raise click.UsageError(str(e)) from e

    logging.basicConfig(
        level=logging.DEBUG if verbose else config.logging_level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@main.command()
@click.argument("text")
@click.option("--counts", is_flag=True, help="Show token frequencies instead of the sequence.")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@click.pass_context
def tokenize(ctx: click.Context, text: str, counts: bool, output: str) -> None:
    """Show the normalized tokens of TEXT.

    Example: bayes-classifier tokenize "Кот и собака"
    """
    config: ClassifierConfig = ctx.obj["config"]
    tokenizer = StreamTokenizer.from_config(config.tokenizer)

    if counts:
        frequencies = word_counts(text, tokenizer)
        if output == "json":
            click.echo(json.dumps(dict(frequencies.most_common()), ensure_ascii=False, indent=2))
            return
        table = Table(title="Token Frequencies")
        table.add_column("Token", style="cyan")
        table.add_column("Count", justify="right")
        for token, count in frequencies.most_common():
            table.add_row(token, str(count))
        console.print(table)
        return

    tokens = collect_tokens(tokenizer, text)
    if output == "json":
        click.echo(json.dumps(tokens, ensure_ascii=False))
    else:
        console.print(" ".join(tokens) if tokens else "[dim](no tokens)[/]")


@main.command()
@click.argument("text")
@click.option("--corpus", "-c", required=True,
              type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="Training corpus (.jsonl or TSV).")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@click.pass_context
def classify(ctx: click.Context, text: str, corpus: Path, output: str) -> None:
    """Train on CORPUS and print the best category for TEXT.

    Example: bayes-classifier classify --corpus corpus.tsv "кот и акция"
    """
    classifier = _build_classifier(ctx, corpus)

    try:
        result = classifier.classify(text)
    except ClassifierError as e:
        if output == "json":
            click.echo(json.dumps({"error": e.code, "message": e.message}))
        else:
            console.print(f"[bold red]Error:[/] {e.message}")
        sys.exit(1)

    if output == "json":
        click.echo(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    else:
        console.print(Panel(
            f"[bold]{result.category or '(empty label)'}[/]\n"
            f"Confidence: {result.confidence:.6g}",
            title="Classification",
            border_style="blue",
        ))


@main.command()
@click.argument("text")
@click.option("--corpus", "-c", required=True,
              type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="Training corpus (.jsonl or TSV).")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@click.pass_context
def probs(ctx: click.Context, text: str, corpus: Path, output: str) -> None:
    """Train on CORPUS and print every category's score for TEXT.

    Example: bayes-classifier probs --corpus corpus.jsonl "кот и акция"
    """
    classifier = _build_classifier(ctx, corpus)
    scores, best = classifier.get_prob(text)

    if output == "json":
        click.echo(json.dumps({"best": best, "scores": scores}, ensure_ascii=False, indent=2))
        return

    if not scores:
        console.print("[yellow]No category matched.[/]")
        return

    table = Table(title="Category Scores")
    table.add_column("Category", style="cyan")
    table.add_column("Score", justify="right")
    for category, score in sorted(scores.items(), key=lambda x: x[1], reverse=True):
        style = "bold green" if category == best else ""
        table.add_row(category or "(empty label)", f"{score:.6g}", style=style)
    console.print(table)


if __name__ == "__main__":
    main()
