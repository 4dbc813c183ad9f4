"""Typer CLI entrypoint for the assessment pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional

import typer
from pydantic import ValidationError

from .config import ConfigManager
from .container import create_container
from .logging import configure_logging
from .pipeline import AuditLogger
from .schemas.config import load_config

app = typer.Typer(help="Adaptive assessment generation and scoring CLI.")


def _load_settings(config: Optional[Path], questions: Optional[Path] = None) -> dict[str, Any]:
    settings: dict[str, Any] = {}
    if config:
        try:
            loaded = ConfigManager(config.parent).read(config)
        except ValueError as exc:
            raise typer.BadParameter("Config file must be a YAML object", param_name="config") from exc
        try:
            settings = load_config(loaded).to_settings()
        except ValidationError as exc:
            raise typer.BadParameter(str(exc), param_name="config") from exc
    if questions:
        settings.setdefault("question_bank", {})["path"] = str(questions)
    return settings


@app.command()
def generate(
    case_id: str = typer.Option(..., help="Case identifier."),
    job_type: List[str] = typer.Option(..., "--job-type", help="Job type; repeat for several."),
    output: Path = typer.Option(..., dir_okay=False, resolve_path=True, help="Output JSON path."),
    questions: Optional[Path] = typer.Option(
        None, exists=True, readable=True, dir_okay=False, help="Question bank (JSON or JSONL)."
    ),
    domain: Optional[str] = typer.Option(None, help="Domain filter for technical questions."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
) -> None:
    """Generate the adaptive technical assessment for a case."""
    settings = _load_settings(config, questions)
    configure_logging(log_level)

    pipeline = create_container(settings=settings).pipeline()
    assessment = pipeline.generate(
        case_id=case_id,
        job_types=job_type,
        output_path=output,
        domain=domain,
    )
    typer.echo(
        f"Generated assessment for {len(assessment['job_type_groups'])} job types. "
        f"Saved to {output}."
    )


@app.command()
def initial(
    case_id: str = typer.Option(..., help="Case identifier (seeds the question order)."),
    job_type: Optional[List[str]] = typer.Option(None, "--job-type", help="Job type; repeat for several."),
    output: Path = typer.Option(..., dir_okay=False, resolve_path=True, help="Output JSON path."),
    questions: Optional[Path] = typer.Option(
        None, exists=True, readable=True, dir_okay=False, help="Question bank (JSON or JSONL)."
    ),
    domain: Optional[str] = typer.Option(None, help="Include questions for this domain."),
    count: Optional[int] = typer.Option(None, min=0, help="Number of questions."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
) -> None:
    """Generate the initial application questions for a case."""
    settings = _load_settings(config, questions)
    configure_logging(log_level)

    pipeline = create_container(settings=settings).pipeline()
    selected = pipeline.initial(
        case_id=case_id,
        job_types=job_type or [],
        output_path=output,
        domain=domain,
        count=count,
    )
    typer.echo(f"Selected {len(selected)} initial questions. Saved to {output}.")


@app.command()
def score(
    submissions: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Submissions JSONL path."),
    output: Path = typer.Option(..., dir_okay=False, resolve_path=True, help="Output JSON path."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
) -> None:
    """Score submissions and classify participants."""
    settings = _load_settings(config)
    configure_logging(log_level)

    pipeline = create_container(settings=settings).pipeline()
    audit_logger = AuditLogger(audit_log) if audit_log else None
    results = pipeline.score(
        submissions_path=submissions,
        output_path=output,
        audit_logger=audit_logger,
    )
    typer.echo(f"Scored {len(results)} submissions. Results saved to {output}.")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
