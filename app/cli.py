#!/usr/bin/env python3
"""
Résumé polishing CLI

Runs the full pipeline (extract ➜ rewrite ➜ normalise ➜ render) on a local PDF
and writes the improved résumé next to it.

Examples:

    resume-polish resume.pdf                          # writes improved-resume.pdf next to it

    resume-polish resume.pdf -o out/cv.pdf            # explicit output path

    resume-polish resume.pdf --provider ollama --model llama3
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from config import LOG_LEVEL
from errors import ResumePipelineError
from llm_client import get_llm_client
from pipeline import ResumePipeline, Upload, error_response

app = typer.Typer(
    help="Rewrite a PDF résumé with an LLM and render a clean, ATS-friendly PDF",
    add_completion=False,
)


@app.command()
def polish(
    input_pdf: Annotated[Path, typer.Argument(help="Résumé PDF to improve", exists=True, dir_okay=False)],
    output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Where to write the result")] = None,
    provider: Annotated[Optional[str], typer.Option(help="LLM provider: openai or ollama")] = None,
    model: Annotated[Optional[str], typer.Option(help="Model name (defaults per provider)")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
):
    """Improve INPUT_PDF and write the rendered result."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        client = get_llm_client(provider)
    except ValueError as e:
        typer.secho(f"✗ {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)

    pipeline = ResumePipeline(client, model=model)
    upload = Upload(content=input_pdf.read_bytes(), media_type="application/pdf",
                    filename=input_pdf.name)
    try:
        result = pipeline.run(upload)
    except ResumePipelineError as e:
        status, body = error_response(e)
        typer.secho(f"✗ [{status}] {body['error']}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    output = output or input_pdf.with_name(result.filename)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(result.pdf_bytes)
    typer.secho(f"✓ Wrote {output}", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
