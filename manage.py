import asyncio
import json
import logging
import mimetypes
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from jobcook.app.core.config import configure_logging, get_settings
from jobcook.app.core.errors import KitchenError
from jobcook.app.llm.backend import Attachment, GeminiBackend, GenerationBackend
from jobcook.app.llm.orchestration import (
    analyze_and_research,
    extract_job_description,
    generate_cover_letter,
    parse_resume,
    refine_text,
)
from jobcook.app.llm.retry import RetryPolicy
from jobcook.app.models.ingredient import Ingredient, dump_ingredients, load_ingredients

log = logging.getLogger(__name__)


def _build_backend() -> GenerationBackend:
    return GeminiBackend(get_settings())


def _retry_policy() -> RetryPolicy:
    return RetryPolicy.from_settings(get_settings())


def _read_attachment(path: str) -> Attachment:
    mime_type, _ = mimetypes.guess_type(path)
    return Attachment(
        data=Path(path).read_bytes(),
        mime_type=mime_type or "application/octet-stream",
    )


def _read_ingredients(path: str) -> list[Ingredient]:
    try:
        return load_ingredients(Path(path).read_text(encoding="utf-8"))
    except ValidationError as e:
        raise click.BadParameter(f"'{path}' is not a saved ingredient list.") from e


def _fail(error: KitchenError) -> None:
    _error_msg = f"Error: {error.message}"
    click.echo(_error_msg, err=True)
    log.error(_error_msg)
    sys.exit(1)


@click.group()
def cli():
    """Command line access to the JobCook kitchen."""
    configure_logging(get_settings())


@cli.command("parse-resume")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def parse_resume_command(file: str):
    """
    Extract ingredients from a resume document and print them as JSON.

    Args:
        file (str): Path to the resume (PDF, text or image).

    Returns:
        None

    Notes:
        1. The MIME type is guessed from the file name.
        2. The output is the same JSON array the export endpoint produces.
        3. Network access: the generation backend is called once, plus retries.

    """
    _msg = "parse_resume_command starting"
    log.debug(_msg)
    try:
        ingredients = asyncio.run(
            parse_resume(
                _read_attachment(file),
                backend=_build_backend(),
                retry_policy=_retry_policy(),
            )
        )
    except KitchenError as e:
        _fail(e)
    click.echo(dump_ingredients(ingredients))
    _msg = "parse_resume_command returning"
    log.debug(_msg)


@cli.command("scan-job")
@click.argument("image", type=click.Path(exists=True, dir_okay=False))
def scan_job_command(image: str):
    """Read the text of a job posting from a photo or screenshot."""
    try:
        text = asyncio.run(
            extract_job_description(
                _read_attachment(image),
                backend=_build_backend(),
                retry_policy=_retry_policy(),
            )
        )
    except KitchenError as e:
        _fail(e)
    click.echo(text)


@cli.command("analyze")
@click.option(
    "--ingredients",
    "ingredients_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with a saved ingredient list.",
)
@click.option(
    "--job",
    "job_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Text file with the job description.",
)
def analyze_command(ingredients_path: str, job_path: str):
    """
    Analyze the fit between saved ingredients and a job description.

    Args:
        ingredients_path (str): JSON file produced by `parse-resume` or the export endpoint.
        job_path (str): Text file holding the job posting.

    Returns:
        None

    Notes:
        1. Prints the analysis, the company research when present, and the notifications as one JSON object.
        2. Network access: one analysis call and at most one research call, plus retries.

    """
    ingredients = _read_ingredients(ingredients_path)
    job_description = Path(job_path).read_text(encoding="utf-8")
    try:
        outcome = asyncio.run(
            analyze_and_research(
                ingredients,
                job_description,
                backend=_build_backend(),
                retry_policy=_retry_policy(),
            )
        )
    except KitchenError as e:
        _fail(e)

    payload = outcome.model_dump(mode="json")
    payload["verdict"] = outcome.analysis.verdict
    click.echo(json.dumps(payload, indent=2))


@cli.command("cover-letter")
@click.option(
    "--ingredients",
    "ingredients_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with a saved ingredient list.",
)
@click.option(
    "--job",
    "job_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Text file with the job description.",
)
def cover_letter_command(ingredients_path: str, job_path: str):
    """Write a cover letter for a job description."""
    ingredients = _read_ingredients(ingredients_path)
    job_description = Path(job_path).read_text(encoding="utf-8")
    try:
        letter = asyncio.run(
            generate_cover_letter(
                ingredients,
                job_description,
                backend=_build_backend(),
                retry_policy=_retry_policy(),
            )
        )
    except KitchenError as e:
        _fail(e)
    click.echo(letter)


@cli.command("refine")
@click.argument("text")
@click.option("--context", default=None, help="Where the text is used, e.g. 'cover letter opening'.")
def refine_command(text: str, context: str | None):
    """Print alternative phrasings of TEXT, one per line."""
    try:
        result = asyncio.run(
            refine_text(
                text,
                context,
                backend=_build_backend(),
                retry_policy=_retry_policy(),
            )
        )
    except KitchenError as e:
        _fail(e)
    for variation in result.variations:
        click.echo(variation)


def main():
    """Run the command line interface."""
    cli()


if __name__ == "__main__":
    main()
