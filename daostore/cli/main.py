#!/usr/bin/env python3
"""
Main CLI entry point for daostore.

Runs every DAO and proposal operation against a SQLite-backed store on behalf
of the principal given with ``--caller``:
- DAO listing, creation, update, membership and deletion
- Proposal creation, voting, editing, listing and deletion
"""

import asyncio
import sys
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import click
import orjson
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from daostore.config import DaoStoreSettings
from daostore.core.logging import configure_logging
from daostore.core.persistence.config import PersistenceMode
from daostore.datastructures.dao_types import (
    Dao,
    DaoPayload,
    EditProposalPayload,
    Proposal,
    ProposalPayload,
)
from daostore.governance.results import GovernanceResult
from daostore.governance.service import GovernanceService, open_governance

console = Console()
error_console = Console(stderr=True)

type Operation = Callable[[GovernanceService], Awaitable[GovernanceResult[Any]]]


def _format_timestamp(value: int | None) -> str:
    if value is None:
        return "-"
    return datetime.fromtimestamp(value / 1_000_000_000, tz=UTC).isoformat(
        timespec="seconds"
    )


def _execute(ctx: click.Context, operation: Operation) -> Any:
    """Run ``operation`` against a freshly opened store; exit 1 on failure."""
    settings: DaoStoreSettings = ctx.obj["settings"]

    async def _run() -> GovernanceResult[Any]:
        async with open_governance(settings) as service:
            return await operation(service)

    result = asyncio.run(_run())
    if result.error is not None:
        error_console.print(f"[red]❌ {escape(result.error.message)}[/red]")
        ctx.exit(1)
    return result.value


def _emit_json(payload: Any) -> None:
    click.echo(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode())


def display_daos(ctx: click.Context, daos: list[Dao], title: str = "DAOs") -> None:
    if ctx.obj["output"] == "json":
        _emit_json([dao.to_dict() for dao in daos])
        return
    if not daos:
        console.print("[yellow]⚠️ No DAOs found[/yellow]")
        return

    table = Table(title=title)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="magenta")
    table.add_column("Description")
    table.add_column("Owner", style="green")
    table.add_column("Members", justify="right")
    table.add_column("Created", style="blue")
    table.add_column("Updated", style="blue")

    for dao in daos:
        table.add_row(
            dao.id,
            escape(dao.name),
            escape(dao.short_desc),
            dao.owner,
            str(len(dao.members)),
            _format_timestamp(dao.created_at),
            _format_timestamp(dao.updated_at),
        )
    console.print(table)


def display_proposals(
    ctx: click.Context, proposals: list[Proposal], title: str = "Proposals"
) -> None:
    if ctx.obj["output"] == "json":
        _emit_json([proposal.to_dict() for proposal in proposals])
        return
    if not proposals:
        console.print("[yellow]⚠️ No proposals found[/yellow]")
        return

    table = Table(title=title)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title", style="magenta")
    table.add_column("Owner", style="green")
    table.add_column("Votes", justify="right")
    table.add_column("Created", style="blue")
    table.add_column("Updated", style="blue")

    for proposal in proposals:
        table.add_row(
            proposal.id,
            escape(proposal.title),
            proposal.owner,
            str(proposal.vote_count),
            _format_timestamp(proposal.created_at),
            _format_timestamp(proposal.updated_at),
        )
    console.print(table)


@click.group()
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Log at DEBUG instead of DAOSTORE_LOG_LEVEL",
)
@click.option(
    "--caller",
    "-c",
    envvar="DAOSTORE_CALLER",
    required=True,
    help="Principal the operation runs as",
)
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="DAOSTORE_DATA_DIR",
    default=None,
    help="Directory holding the SQLite store",
)
@click.option(
    "--output",
    "-o",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    caller: str,
    data_dir: Path | None,
    output: str,
) -> None:
    """
    daostore CLI.

    Manage DAOs and their proposals as the principal given by --caller.
    """
    settings = DaoStoreSettings.from_env()
    settings.persistence_config.mode = PersistenceMode.SQLITE
    if data_dir is not None:
        settings.persistence_config.data_dir = data_dir
    configure_logging(
        "DEBUG" if verbose else settings.log_level,
        debug_scopes=settings.debug_scopes,
        colorize=settings.log_colorize,
    )

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["caller"] = caller
    ctx.obj["output"] = output


@cli.group()
def daos() -> None:
    """Create, inspect and manage DAOs."""


@daos.command("list")
@click.pass_context
def list_daos(ctx: click.Context) -> None:
    """List the DAOs the caller is a member of."""
    caller = ctx.obj["caller"]
    found = _execute(ctx, lambda service: service.daos.list_daos_for_caller(caller))
    display_daos(ctx, found, title=f"DAOs for {caller}")


@daos.command("show")
@click.argument("dao_id")
@click.pass_context
def show_dao(ctx: click.Context, dao_id: str) -> None:
    """Show a single DAO."""
    caller = ctx.obj["caller"]
    dao = _execute(ctx, lambda service: service.daos.get_dao(caller, dao_id))
    display_daos(ctx, [dao], title=f"DAO {dao_id}")


@daos.command("create")
@click.argument("name")
@click.option("--short-desc", "-d", default="", help="Short description")
@click.option("--avatar", "-a", default="", help="Avatar image URL")
@click.pass_context
def create_dao(ctx: click.Context, name: str, short_desc: str, avatar: str) -> None:
    """Create a DAO owned by the caller."""
    caller = ctx.obj["caller"]
    payload = DaoPayload(name=name, short_desc=short_desc, avatar=avatar)
    dao = _execute(ctx, lambda service: service.daos.create_dao(caller, payload))
    display_daos(ctx, [dao], title="✅ DAO created")


@daos.command("update")
@click.argument("dao_id")
@click.argument("name")
@click.option("--short-desc", "-d", default="", help="Short description")
@click.option("--avatar", "-a", default="", help="Avatar image URL")
@click.pass_context
def update_dao(
    ctx: click.Context, dao_id: str, name: str, short_desc: str, avatar: str
) -> None:
    """Replace a DAO's name, description and avatar (owner only)."""
    caller = ctx.obj["caller"]
    payload = DaoPayload(name=name, short_desc=short_desc, avatar=avatar)
    dao = _execute(
        ctx, lambda service: service.daos.update_dao(caller, dao_id, payload)
    )
    display_daos(ctx, [dao], title="✅ DAO updated")


@daos.command("add-member")
@click.argument("dao_id")
@click.argument("member")
@click.pass_context
def add_member(ctx: click.Context, dao_id: str, member: str) -> None:
    """Append MEMBER to a DAO's member list (owner only)."""
    caller = ctx.obj["caller"]
    dao = _execute(
        ctx, lambda service: service.daos.add_member_to_dao(caller, dao_id, member)
    )
    display_daos(ctx, [dao], title=f"✅ {member} added")


@daos.command("delete")
@click.argument("dao_id")
@click.pass_context
def delete_dao(ctx: click.Context, dao_id: str) -> None:
    """Delete a DAO and all of its proposals (owner only)."""
    caller = ctx.obj["caller"]
    dao = _execute(ctx, lambda service: service.daos.delete_dao(caller, dao_id))
    display_daos(ctx, [dao], title="🗑️ DAO deleted")


@cli.group()
def proposals() -> None:
    """Create, vote on and manage proposals."""


@proposals.command("list")
@click.argument("dao_id")
@click.pass_context
def list_proposals(ctx: click.Context, dao_id: str) -> None:
    """List the proposals filed under a DAO (members only)."""
    caller = ctx.obj["caller"]
    found = _execute(
        ctx, lambda service: service.proposals.get_proposals_for_dao(caller, dao_id)
    )
    display_proposals(ctx, found, title=f"Proposals in {dao_id}")


@proposals.command("show")
@click.argument("dao_id")
@click.argument("proposal_id")
@click.pass_context
def show_proposal(ctx: click.Context, dao_id: str, proposal_id: str) -> None:
    """Show a single proposal (members only)."""
    caller = ctx.obj["caller"]
    proposal = _execute(
        ctx,
        lambda service: service.proposals.get_proposal(caller, dao_id, proposal_id),
    )
    display_proposals(ctx, [proposal], title=f"Proposal {proposal_id}")


@proposals.command("create")
@click.argument("dao_id")
@click.argument("title")
@click.option("--details", "-d", default="", help="Proposal details")
@click.pass_context
def create_proposal(ctx: click.Context, dao_id: str, title: str, details: str) -> None:
    """File a proposal under a DAO (members only)."""
    caller = ctx.obj["caller"]
    payload = ProposalPayload(title=title, details=details, dao_id=dao_id)
    proposal = _execute(
        ctx, lambda service: service.proposals.create_proposal(caller, payload)
    )
    display_proposals(ctx, [proposal], title="✅ Proposal created")


@proposals.command("vote")
@click.argument("dao_id")
@click.argument("proposal_id")
@click.pass_context
def vote(ctx: click.Context, dao_id: str, proposal_id: str) -> None:
    """Vote on a proposal (members only, once each)."""
    caller = ctx.obj["caller"]
    proposal = _execute(
        ctx,
        lambda service: service.proposals.vote_on_proposal(
            caller, dao_id, proposal_id
        ),
    )
    display_proposals(ctx, [proposal], title="🗳️ Vote recorded")


@proposals.command("edit")
@click.argument("proposal_id")
@click.argument("title")
@click.option("--details", "-d", default="", help="Proposal details")
@click.pass_context
def edit_proposal(
    ctx: click.Context, proposal_id: str, title: str, details: str
) -> None:
    """Replace a proposal's title and details (proposal owner only)."""
    caller = ctx.obj["caller"]
    payload = EditProposalPayload(id=proposal_id, title=title, details=details)
    proposal = _execute(
        ctx, lambda service: service.proposals.edit_proposal(caller, payload)
    )
    display_proposals(ctx, [proposal], title="✅ Proposal updated")


@proposals.command("delete")
@click.argument("proposal_id")
@click.pass_context
def delete_proposal(ctx: click.Context, proposal_id: str) -> None:
    """Delete a proposal (proposal owner only)."""
    caller = ctx.obj["caller"]
    proposal = _execute(
        ctx, lambda service: service.proposals.delete_proposal(caller, proposal_id)
    )
    display_proposals(ctx, [proposal], title="🗑️ Proposal deleted")


@proposals.command("votes")
@click.argument("dao_id")
@click.argument("proposal_id")
@click.pass_context
def vote_count(ctx: click.Context, dao_id: str, proposal_id: str) -> None:
    """Print how many members voted on a proposal."""
    caller = ctx.obj["caller"]
    count = _execute(
        ctx,
        lambda service: service.proposals.get_votes_for_proposal(
            caller, dao_id, proposal_id
        ),
    )
    if ctx.obj["output"] == "json":
        _emit_json({"proposal_id": proposal_id, "votes": count})
    else:
        console.print(f"[bold]{count}[/bold] vote(s) on {proposal_id}")


def main():
    """Main CLI entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        error_console.print("\n[yellow]⚠️ Operation cancelled by user[/yellow]")
        sys.exit(1)
    except Exception as e:
        logger.exception("Unexpected CLI failure")
        error_console.print(f"[red]❌ Unexpected error: {escape(str(e))}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
