"""CLI utilities."""

from datetime import datetime
from zoneinfo import ZoneInfo

import click
from sqlalchemy.orm import Session

from paralello.config import settings
from paralello.core.dispatch import process_automation
from paralello.core.errors import ParalelloError
from paralello.core.scheduling import Cadence, compute_next_run
from paralello.core.suggestions import run_suggestion_batch
from paralello.core.templating import render
from paralello.database import SessionLocal
from paralello.logging_setup import configure_logging
from paralello.providers.webhook import AutomationWebhookRelay


@click.group()
@click.option("--log-level", default=None, help="Override LOG_LEVEL")
def cli(log_level):
    """Paralello automation CLI."""
    configure_logging(log_level)


@cli.command("generate-suggestions")
def generate_suggestions():
    """Run the suggestion batch now, in-process."""
    db: Session = SessionLocal()
    try:
        for line in run_suggestion_batch(db):
            click.echo(line)
    except ParalelloError as e:
        raise click.ClickException(str(e))
    finally:
        db.close()


@cli.command("process")
def process():
    """Send due dispatches, reports and approved suggestions now."""
    db: Session = SessionLocal()
    try:
        for line in process_automation(db, AutomationWebhookRelay()):
            click.echo(line)
    except ParalelloError as e:
        raise click.ClickException(str(e))
    finally:
        db.close()


@cli.command("next-run")
@click.option("--frequency", required=True, type=click.Choice(["daily", "weekly", "monthly"]))
@click.option("--time", "time_of_day", required=True, help="Time of day (HH:mm)")
@click.option("--weekday", type=int, default=None, help="0 = Sunday .. 6 = Saturday")
@click.option("--day-of-month", type=int, default=None)
def next_run(frequency: str, time_of_day: str, weekday: int, day_of_month: int):
    """Preview the next execution of a cadence."""
    zone = ZoneInfo(settings.timezone)
    try:
        cadence = Cadence(frequency, time_of_day, weekday=weekday, day_of_month=day_of_month)
    except ParalelloError as e:
        raise click.BadParameter(str(e))
    result = compute_next_run(cadence, datetime.now(zone))
    click.echo(f"{result.isoformat()} ({result.astimezone(zone).isoformat()} local)")


@cli.command("render")
@click.argument("template")
@click.option("--value", "values", multiple=True, help="name=value pair, repeatable")
def render_template(template: str, values):
    """Render a template with literal values."""
    pairs = {}
    for item in values:
        name, sep, value = item.partition("=")
        if not sep:
            raise click.BadParameter(f"Expected name=value, got {item!r}")
        pairs[name.strip()] = value
    click.echo(render(template, pairs))


@cli.command("seed-templates")
@click.argument("yaml_file", type=click.Path(exists=True))
def seed_templates_command(yaml_file: str):
    """Seed shared default templates from a YAML file."""
    from paralello.seed import seed_templates

    count = seed_templates(yaml_file)
    click.echo(f"Seeded {count} templates")


if __name__ == "__main__":
    cli()
