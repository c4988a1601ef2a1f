"""Command-line entry points for running and exercising the bridge.

``serve`` runs the webhook server. ``whoami`` and ``analyse-assigned`` talk to
Linear and Nia directly, which is useful for checking credentials and the
comment format without wiring up a webhook.
"""

from __future__ import annotations

import argparse
import asyncio
import typing as typ

from niabridge.linear.client import LinearGraphQLClient, LinearGraphQLConfig
from niabridge.linear.errors import LinearConfigError, LinearError
from niabridge.runtime import build_relay_service, configure_from_env
from niabridge.runtime import main as serve

if typ.TYPE_CHECKING:
    from niabridge.linear.client import IssueTracker
    from niabridge.relay.service import RelayService


async def whoami(issue_tracker: IssueTracker) -> int:
    """Print the Linear user the API key authenticates as."""
    try:
        viewer = await issue_tracker.get_viewer()
    except LinearError as exc:
        print(f"Linear lookup failed: {exc}")
        return 1
    print(f"{viewer.name or '<unnamed>'} ({viewer.id})")
    return 0


async def analyse_assigned(service: RelayService) -> int:
    """Analyse the first issue assigned to the bridge user and report the result.

    Returns
    -------
    int
        Exit code: 0 when an issue was processed, 1 when none was found or
        Linear could not be reached.

    """
    try:
        issues = await service.issue_tracker.list_assigned_issues(limit=1)
    except LinearError as exc:
        print(f"Linear lookup failed: {exc}")
        return 1
    if not issues:
        print("No issues are assigned to this Linear user.")
        return 1

    issue = issues[0]
    print(f"Analysing {issue.id}: {issue.title}")
    outcome = await service.process(issue)
    print(f"Outcome: {outcome}")
    return 0


async def _run_whoami() -> int:
    try:
        config = LinearGraphQLConfig.from_env()
    except LinearConfigError as exc:
        print(f"Invalid configuration: {exc}")
        return 1
    client = LinearGraphQLClient(config)
    try:
        return await whoami(client)
    finally:
        await client.aclose()


async def _run_analyse_assigned() -> int:
    service = build_relay_service()
    try:
        return await analyse_assigned(service)
    finally:
        await service.aclose()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="niabridge", description=__doc__)
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("serve", help="Run the webhook server")
    commands.add_parser("whoami", help="Print the Linear user for LINEAR_API_KEY")
    commands.add_parser(
        "analyse-assigned",
        help="Analyse the first issue assigned to the Linear user",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Dispatch a niabridge sub-command.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Process exit code.

    """
    args = _build_parser().parse_args(argv)

    if args.command == "serve":
        serve()
        return 0

    configure_from_env()
    if args.command == "whoami":
        return asyncio.run(_run_whoami())
    return asyncio.run(_run_analyse_assigned())


if __name__ == "__main__":
    raise SystemExit(main())
