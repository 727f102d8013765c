# Copyright 2025 Gowtham Rao <rao@ohdsi.org>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Command line entry point for operators working against the backend."""

import asyncio
import json
import logging
from enum import Enum
from typing import Any, Dict

import typer
import yaml

from .client import ApiClient
from .config import Settings
from .editor import OptimisticFieldEditor, RecordView
from .exceptions import CampusConnectError, ParseError
from .store.http import institution_store, quality_store, scholarship_store
from .subscription import fetch_current_subscription, select_banner
from .trial import calculate_trial_status, format_trial_message

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = typer.Typer(help="CampusConnect admin tools.")


class RecordKind(str, Enum):
    INSTITUTION = "institution"
    SCHOLARSHIP = "scholarship"


_STORES = {
    RecordKind.INSTITUTION: institution_store,
    RecordKind.SCHOLARSHIP: scholarship_store,
}


def load_config(config_file: str | None) -> Dict[str, Any]:
    """Loads configuration from a YAML file."""
    if config_file:
        try:
            with open(config_file, "r") as f:
                return yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.warning("Config file not found: %s", config_file)
    return {}


def parse_value(raw: str) -> Any:
    """Decode a command line value as JSON, falling back to the plain string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, default=str))


@app.callback()
def configure(
    ctx: typer.Context,
    config_file: str = typer.Option(None, help="Path to YAML config file."),
    token: str = typer.Option(None, help="Access token for admin endpoints."),
):
    """Load settings before any command runs."""
    settings = Settings(**load_config(config_file))
    if token:
        settings.access_token = token
    ctx.obj = settings


@app.command("trial-status")
def trial_status(
    ctx: typer.Context,
    created_at: str = typer.Argument(..., help="Account creation timestamp."),
):
    """Show how much of the free trial is left."""
    try:
        status = calculate_trial_status(created_at, trial_days=ctx.obj.trial_days)
    except ParseError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=2)
    typer.echo(format_trial_message(status))
    typer.echo(f"Warning level: {status.warning_level.value}")


async def _show(settings: Settings, kind: RecordKind, record_id: int) -> RecordView:
    async with ApiClient(settings) as api:
        view = RecordView(_STORES[kind](api), load_error=f"Failed to load {kind.value} data")
        await view.load(record_id)
        return view


@app.command()
def show(
    ctx: typer.Context,
    kind: RecordKind = typer.Argument(..., case_sensitive=False),
    record_id: int = typer.Argument(..., min=1),
):
    """Print a record as JSON."""
    view = asyncio.run(_show(ctx.obj, kind, record_id))
    if view.error:
        typer.echo(view.error, err=True)
        raise typer.Exit(code=1)
    _echo_json(view.data.model_dump())


async def _set_field(
    settings: Settings, kind: RecordKind, record_id: int, field: str, value: Any
) -> OptimisticFieldEditor:
    async with ApiClient(settings) as api:
        editor = OptimisticFieldEditor(
            _STORES[kind](api), load_error=f"Failed to load {kind.value} data"
        )
        await editor.load(record_id)
        if editor.error is None:
            await editor.update_field(field, value)
        return editor


@app.command("set-field")
def set_field(
    ctx: typer.Context,
    kind: RecordKind = typer.Argument(..., case_sensitive=False),
    record_id: int = typer.Argument(..., min=1),
    field: str = typer.Argument(...),
    value: str = typer.Argument(..., help="New value; parsed as JSON when possible."),
):
    """Update one field of a record and print the saved record."""
    editor = asyncio.run(_set_field(ctx.obj, kind, record_id, field, parse_value(value)))
    if editor.data is not None:
        _echo_json(editor.data.model_dump())
    if editor.error:
        typer.echo(editor.error, err=True)
        raise typer.Exit(code=1)


async def _quality(settings: Settings, institution_id: int) -> RecordView:
    async with ApiClient(settings) as api:
        view = RecordView(quality_store(api), load_error="Failed to load quality metrics")
        await view.load(institution_id)
        return view


@app.command()
def quality(ctx: typer.Context, institution_id: int = typer.Argument(..., min=1)):
    """Print the data quality report for an institution."""
    view = asyncio.run(_quality(ctx.obj, institution_id))
    if view.error:
        typer.echo(view.error, err=True)
        raise typer.Exit(code=1)
    _echo_json(view.data.model_dump())


async def _banner(settings: Settings, entity_type: str):
    async with ApiClient(settings) as api:
        subscription = await fetch_current_subscription(api)
    return select_banner(subscription, entity_type=entity_type)


@app.command()
def banner(
    ctx: typer.Context,
    entity_type: RecordKind = typer.Option(RecordKind.INSTITUTION, case_sensitive=False),
):
    """Show the billing banner for the current account, if any."""
    try:
        selected = asyncio.run(_banner(ctx.obj, entity_type.value))
    except CampusConnectError as e:
        typer.echo(e.detail or str(e), err=True)
        raise typer.Exit(code=1)
    if selected is None:
        typer.echo("No banner")
        return
    typer.echo(selected.title)
    typer.echo(selected.message)


def main():
    app()


if __name__ == "__main__":
    main()
