"""
Terminal front end for the livestock web client.

Mounts the list or form component against a running livestock service and
prints what it renders. Exit code 0 means the command succeeded, 1 that
the component ended in an error state.

Examples::

    livestock-web list --type cow --page 2
    livestock-web add --name Bessy --type cow --tag-number UK-0001
"""

import argparse
import asyncio
import sys
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .api_client import LivestockApiClient
from .components import LivestockFormComponent, LivestockListComponent
from .composition import LivestockFeature
from .config import settings
from .logging_config import get_logger, set_request_id, setup_logging
from .stores.livestock_store import LoadStatus

logger = get_logger(__name__)

FILTER_OPTIONS = ("type", "sex", "status", "tag_number")
FORM_OPTIONS = (
    "name",
    "type",
    "tag_number",
    "breed",
    "sex",
    "birth_date",
    "weight_kg",
    "notes",
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="livestock-web", description=settings.APP_NAME)
    parser.add_argument("--url", help="Livestock service base URL")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL)
    parser.add_argument("--json-logs", action="store_true", default=settings.LOG_JSON)
    commands = parser.add_subparsers(dest="command", required=True)

    list_cmd = commands.add_parser("list", help="Show one page of animals")
    list_cmd.add_argument("--page", type=int, default=1)
    for option in FILTER_OPTIONS:
        list_cmd.add_argument(f"--{option.replace('_', '-')}", dest=option)

    add_cmd = commands.add_parser("add", help="Register an animal")
    for option in FORM_OPTIONS:
        add_cmd.add_argument(f"--{option.replace('_', '-')}", dest=option)

    return parser


def _options(args: argparse.Namespace, names: Sequence[str]) -> Dict[str, Any]:
    return {name: getattr(args, name) for name in names if getattr(args, name) is not None}


async def _list(feature: LivestockFeature, args: argparse.Namespace) -> Tuple[List[str], bool]:
    component = LivestockListComponent(feature)
    try:
        await component.mount()
        filters = _options(args, FILTER_OPTIONS)
        if filters:
            await component.on_filter(**filters)
        if args.page != 1:
            await component.on_page(args.page)
        ok = component.facade.status_of("load_list").value != LoadStatus.ERROR
        return list(component.lines), ok
    finally:
        component.unmount()


async def _add(feature: LivestockFeature, args: argparse.Namespace) -> Tuple[List[str], bool]:
    form = LivestockFormComponent(feature)
    try:
        form.mount()
        for field, value in _options(args, FORM_OPTIONS).items():
            form.on_change(field, value)
        saved = await form.on_submit()
        lines = list(form.lines)
        if saved:
            lines.append(form.facade.notice.value)
        return lines, saved
    finally:
        form.unmount()


async def run(
    args: argparse.Namespace, client: Optional[LivestockApiClient] = None
) -> Tuple[List[str], bool]:
    """Execute one command; returns the rendered lines and whether it succeeded."""
    async with LivestockFeature(client=client or LivestockApiClient(base_url=args.url)) as feature:
        if args.command == "list":
            return await _list(feature, args)
        return await _add(feature, args)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, use_json=args.json_logs, stream=sys.stderr)
    set_request_id()
    logger.debug("Running command", extra={"extra_fields": {"command": args.command}})

    lines, ok = asyncio.run(run(args))
    for line in lines:
        print(line)
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
