import functools
import json
import os
from pathlib import Path

import click
import yaml
from dotenv import load_dotenv

import config as cfg
from src.libs.billing import BillingError, BillingLedger, YamlBillingRepository
from src.libs.cv_history import (
    JsonFileStorage,
    VersionHistory,
    export_history,
    format_section_diffs,
    format_version_list,
    import_history,
)
from src.libs.job_tracker import JOB_STATUSES, JobTracker
from src.libs.latex_import import parse_latex_to_content, validate_latex_syntax
from src.logging import init_loguru_logger, logger
from src.resume_schemas.resume import ResumeContent
from src.utils.validator import ValidationError


def load_content_file(content_path: Path) -> dict:
    """Load CV content from a YAML (or JSON) file."""
    content_path = Path(content_path)
    if not content_path.exists():
        raise FileNotFoundError(f"File not found: {content_path}")
    with open(content_path, "r", encoding="utf-8") as stream:
        return ResumeContent.from_yaml(stream.read()).to_dict()


def handle_errors(func):
    """Report domain errors through the logger and exit with a non-zero status."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ValidationError as ve:
            logger.error(f"Validation error: {ve}")
            raise click.ClickException(str(ve))
        except BillingError as be:
            logger.error(f"Billing error: {be}")
            raise click.ClickException(str(be))
        except FileNotFoundError as fnf:
            logger.error(f"File not found: {fnf}")
            raise click.ClickException(str(fnf))
        except ValueError as e:
            logger.error(f"Invalid input: {e}")
            raise click.ClickException(str(e))
    return wrapper


@click.group()
@click.option("--data-folder", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Folder holding version history, job tracker and billing data.")
@click.pass_context
def cli(ctx: click.Context, data_folder: Path) -> None:
    """CV history, LaTeX import, billing and job tracking tools."""
    data_folder = Path(data_folder or os.getenv("CV_DATA_FOLDER") or cfg.DATA_FOLDER)
    ctx.obj = {
        "data_folder": data_folder,
        "storage": JsonFileStorage(data_folder / "storage"),
    }


# ---------------------------------------------------------------- history

@cli.group()
@click.pass_context
def history(ctx: click.Context) -> None:
    """Manage saved versions of a CV."""
    ctx.obj["history"] = VersionHistory(ctx.obj["storage"])


@history.command("list")
@click.argument("document_id")
@click.pass_obj
def history_list(obj: dict, document_id: str) -> None:
    click.echo(format_version_list(obj["history"].list_versions(document_id)))


@history.command("save")
@click.argument("document_id")
@click.argument("content_file", type=click.Path(path_type=Path))
@click.option("--label", required=True, help="Label shown in the version list.")
@click.option("--job-title", default=None)
@click.option("--company", default=None)
@click.option("--match-score", type=float, default=None)
@click.pass_obj
@handle_errors
def history_save(obj: dict, document_id: str, content_file: Path, label: str,
                 job_title: str, company: str, match_score: float) -> None:
    meta = {key: value for key, value in
            (("job_title", job_title), ("company", company), ("match_score", match_score))
            if value is not None}
    version = obj["history"].save_version(document_id, load_content_file(content_file), label, meta)
    click.echo(f"Saved version {version.id}")


@history.command("delete")
@click.argument("document_id")
@click.argument("version_id")
@click.pass_obj
def history_delete(obj: dict, document_id: str, version_id: str) -> None:
    obj["history"].delete_version(document_id, version_id)
    click.echo(f"Deleted version {version_id}")


@history.command("clear")
@click.argument("document_id")
@click.confirmation_option(prompt="Delete every saved version of this CV?")
@click.pass_obj
def history_clear(obj: dict, document_id: str) -> None:
    obj["history"].clear_versions(document_id)
    click.echo(f"Cleared version history of {document_id}")


@history.command("diff")
@click.argument("document_id")
@click.argument("old_version_id")
@click.argument("new_version_id", required=False)
@click.option("--current", "current_file", type=click.Path(path_type=Path), default=None,
              help="Compare against this CV content file instead of a second version.")
@click.option("--as-json", is_flag=True, help="Print the diff as JSON.")
@click.pass_obj
@handle_errors
def history_diff(obj: dict, document_id: str, old_version_id: str, new_version_id: str,
                 current_file: Path, as_json: bool) -> None:
    if current_file is not None:
        diffs = obj["history"].compare_with_current(document_id, old_version_id, load_content_file(current_file))
    elif new_version_id:
        diffs = obj["history"].compare_versions(document_id, old_version_id, new_version_id)
    else:
        raise click.UsageError("Give a second version id or --current.")

    if diffs is None:
        raise click.ClickException("Version not found.")
    if as_json:
        click.echo(json.dumps([d.to_dict() for d in diffs], indent=2, ensure_ascii=False))
    else:
        click.echo(format_section_diffs(diffs))


@history.command("restore")
@click.argument("document_id")
@click.argument("version_id")
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), required=True)
@click.pass_obj
def history_restore(obj: dict, document_id: str, version_id: str, output: Path) -> None:
    restored = obj["history"].restore_version(document_id, version_id)
    if restored is None:
        raise click.ClickException("Version not found.")
    content, label = restored
    with open(output, "w", encoding="utf-8") as f:
        yaml.safe_dump(content, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
    click.echo(f"Restored '{label}' to {output}")


@history.command("export")
@click.argument("document_id")
@click.argument("export_path", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_obj
def history_export(obj: dict, document_id: str, export_path: Path) -> None:
    if not export_history(obj["history"], document_id, export_path):
        raise click.ClickException("Failed to export versions.")
    click.echo(f"Exported versions to {export_path}")


@history.command("import")
@click.argument("document_id")
@click.argument("import_path", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_obj
@handle_errors
def history_import(obj: dict, document_id: str, import_path: Path) -> None:
    versions = import_history(obj["history"], document_id, import_path)
    click.echo(f"History of {document_id} now holds {len(versions)} version(s)")


# ------------------------------------------------------------------ latex

@cli.group()
def latex() -> None:
    """Import CV content from LaTeX sources."""


def _read_text(path: Path) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


@latex.command("parse")
@click.argument("latex_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), default=None)
def latex_parse(latex_file: Path, output: Path) -> None:
    content = parse_latex_to_content(_read_text(latex_file))
    if content is None:
        raise click.ClickException("Could not parse the LaTeX file.")
    dumped = yaml.safe_dump(content, default_flow_style=False, allow_unicode=True, sort_keys=False)
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(dumped)
        click.echo(f"Wrote CV content to {output}")
    else:
        click.echo(dumped)


@latex.command("validate")
@click.argument("latex_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def latex_validate(latex_file: Path) -> None:
    valid, errors = validate_latex_syntax(_read_text(latex_file))
    if valid:
        click.echo("LaTeX looks valid.")
        return
    for error in errors:
        click.echo(f"✗ {error}")
    raise click.ClickException(f"{len(errors)} problem(s) found.")


# ---------------------------------------------------------------- billing

@cli.group()
@click.pass_context
def billing(ctx: click.Context) -> None:
    """Inspect and update plan quotas."""
    repository = YamlBillingRepository(ctx.obj["data_folder"] / "billing.yaml")
    ctx.obj["ledger"] = BillingLedger(repository)


@billing.command("status")
@click.argument("user_id")
@click.pass_obj
def billing_status(obj: dict, user_id: str) -> None:
    status = obj["ledger"].get_billing_status(user_id)
    click.echo(yaml.safe_dump(status.to_dict(), default_flow_style=False, sort_keys=False))


@billing.command("consume")
@click.argument("user_id")
@click.argument("action")
@click.pass_obj
@handle_errors
def billing_consume(obj: dict, user_id: str, action: str) -> None:
    result = obj["ledger"].consume_usage(user_id, action)
    click.echo(result.message)
    if not result.allowed:
        raise click.ClickException("Quota exhausted.")


@billing.command("checkout")
@click.argument("user_id")
@click.argument("plan_id")
@click.pass_obj
@handle_errors
def billing_checkout(obj: dict, user_id: str, plan_id: str) -> None:
    subscription = obj["ledger"].mark_checkout_success(user_id, plan_id)
    click.echo(f"{subscription.plan_name} active until {subscription.expires_at.isoformat()}")


@billing.command("tokens")
@click.argument("user_id")
@click.argument("token_pack_id")
@click.pass_obj
@handle_errors
def billing_tokens(obj: dict, user_id: str, token_pack_id: str) -> None:
    balance = obj["ledger"].add_job_search_tokens(user_id, token_pack_id)
    click.echo(f"Job search token balance: {balance}")


# ------------------------------------------------------------------- jobs

@cli.group()
@click.pass_context
def jobs(ctx: click.Context) -> None:
    """Track applied and skipped jobs."""
    ctx.obj["tracker"] = JobTracker(ctx.obj["storage"])


@jobs.command("list")
@click.pass_obj
def jobs_list(obj: dict) -> None:
    tracked = obj["tracker"].get_tracked_jobs()
    if not tracked:
        click.echo("No tracked jobs.")
        return
    for job in tracked:
        click.echo(f"{job.job_id}  {job.status:<8} {job.title} @ {job.company}")


@jobs.command("track")
@click.argument("job_id")
@click.option("--title", required=True)
@click.option("--company", required=True)
@click.option("--status", type=click.Choice(JOB_STATUSES), default="applied")
@click.option("--location", default=None)
@click.option("--apply-url", default=None)
@click.pass_obj
def jobs_track(obj: dict, job_id: str, title: str, company: str, status: str,
               location: str, apply_url: str) -> None:
    job = {"id": job_id, "title": title, "company": company, "location": location, "apply_url": apply_url}
    obj["tracker"].track_job(job, status)
    click.echo(f"Tracked {job_id} as {status}")


@jobs.command("remove")
@click.argument("job_id")
@click.pass_obj
def jobs_remove(obj: dict, job_id: str) -> None:
    obj["tracker"].remove_tracked_job(job_id)
    click.echo(f"Removed {job_id}")


def main() -> None:
    """Main entry point for the CV tools command line."""
    load_dotenv()
    if os.getenv("LOG_LEVEL"):
        init_loguru_logger(os.getenv("LOG_LEVEL"))
    try:
        cli()
    except Exception as e:
        logger.exception(f"An unexpected error occurred: {e}")
        raise


if __name__ == "__main__":
    main()
