"""CLI for strategic-planner: list, show, new, use, delete, swot and status commands."""

import argparse
import sys
from typing import Optional

from rich.console import Console

from .config import Config, load_config
from .connectivity import ConnectivityMonitor
from .logging_config import setup_logging
from .plans.models import SWOTType, enum_text
from .plans.repository import PlanRepository
from .plans.storage import open_storage
from .visualizer.plan_view import render_plan_list, render_plan_summary, render_plan_tree


def _open_repository(config: Config, probe: bool = False) -> PlanRepository:
	"""Open the configured storage and load (or bootstrap) the plans."""
	monitor = None
	if probe:
		monitor = ConnectivityMonitor.from_probe(config.probe_host, config.probe_port)
	repo = PlanRepository(open_storage(config), connectivity=monitor)
	repo.initialize()
	return repo


def _fail(message: str) -> None:
	print(message, file=sys.stderr)
	sys.exit(1)


def cmd_list(args: argparse.Namespace) -> None:
	"""List all plans."""
	with _open_repository(args.config) as repo:
		current_id = repo.current_plan.id if repo.current_plan else None
		render_plan_list(repo.plans, current_id, console=Console())


def cmd_show(args: argparse.Namespace) -> None:
	"""Show one plan (default: the current plan)."""
	with _open_repository(args.config) as repo:
		plan_id = getattr(args, "plan_id", None)
		plan = repo.get_plan(plan_id) if plan_id else repo.current_plan
		if plan is None:
			label = f"plan '{plan_id}'" if plan_id else "current plan"
			_fail(f"No {label} found.")
			return

		console = Console()
		if getattr(args, "summary", False):
			render_plan_summary(plan, console=console)
		else:
			render_plan_tree(plan, console=console)


def cmd_new(args: argparse.Namespace) -> None:
	"""Create a plan and make it current."""
	fields = {"name": args.name}
	if args.organization:
		fields["organization"] = args.organization
	if args.description:
		fields["description"] = args.description

	with _open_repository(args.config) as repo:
		plan = repo.create_plan(**fields)
		if plan is None:
			_fail("Could not create plan.")
			return
		print(f"Created plan {plan.id} ({plan.name})")


def cmd_use(args: argparse.Namespace) -> None:
	"""Switch the current plan."""
	with _open_repository(args.config) as repo:
		if repo.get_plan(args.plan_id) is None:
			_fail(f"Unknown plan: {args.plan_id}")
			return
		plan = repo.set_current_plan(args.plan_id)
		print(f"Current plan: {plan.name} ({plan.id})")


def cmd_delete(args: argparse.Namespace) -> None:
	"""Delete a plan."""
	with _open_repository(args.config) as repo:
		if not repo.delete_plan(args.plan_id):
			_fail(f"Unknown plan: {args.plan_id}")
			return
		print(f"Deleted plan {args.plan_id}")


def cmd_swot_add(args: argparse.Namespace) -> None:
	"""Add a SWOT item to the current plan."""
	item = {"type": args.type, "content": args.content}
	if args.category:
		item["category"] = args.category
	if args.priority:
		item["priority"] = args.priority

	with _open_repository(args.config) as repo:
		if repo.current_plan is None:
			_fail("No current plan. Run 'strategic-planner use <plan_id>' first.")
			return
		added = repo.add_swot_item(item)
		if added is None:
			_fail("Could not add SWOT item.")
			return
		print(f"Added {enum_text(added.type)} {added.id}")


def cmd_status(args: argparse.Namespace) -> None:
	"""Show storage backend, connectivity and plan counts."""
	config = args.config
	with _open_repository(config, probe=True) as repo:
		current = repo.current_plan
		print(f"  Storage:      {config.storage_backend}")
		print(f"  Data dir:     {config.data_dir}")
		print(f"  Online:       {'yes' if repo.is_online else 'no'}")
		print(f"  Plans:        {len(repo.plans)}")
		print(f"  Current plan: {current.name if current else '-'}")
		print(f"  Last synced:  {repo.last_synced or '-'}")


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(
		prog="strategic-planner",
		description="Strategic planning: SWOT, strategic options, Balanced Scorecard and action plans",
	)
	subparsers = parser.add_subparsers(dest="command")

	# list
	list_parser = subparsers.add_parser("list", help="List plans")
	list_parser.set_defaults(func=cmd_list)

	# show
	show_parser = subparsers.add_parser("show", help="Show a plan")
	show_parser.add_argument("plan_id", nargs="?", default=None, help="Plan ID (default: current)")
	show_parser.add_argument("--summary", action="store_true", help="Show summary panel instead of tree")
	show_parser.set_defaults(func=cmd_show)

	# new
	new_parser = subparsers.add_parser("new", help="Create a plan")
	new_parser.add_argument("--name", type=str, default="New Strategic Plan", help="Plan name")
	new_parser.add_argument("--organization", type=str, default=None, help="Organization name")
	new_parser.add_argument("--description", type=str, default=None, help="Plan description")
	new_parser.set_defaults(func=cmd_new)

	# use
	use_parser = subparsers.add_parser("use", help="Switch the current plan")
	use_parser.add_argument("plan_id", help="Plan ID")
	use_parser.set_defaults(func=cmd_use)

	# delete
	delete_parser = subparsers.add_parser("delete", help="Delete a plan")
	delete_parser.add_argument("plan_id", help="Plan ID")
	delete_parser.set_defaults(func=cmd_delete)

	# swot
	swot_parser = subparsers.add_parser("swot", help="Edit the current plan's SWOT analysis")
	swot_subparsers = swot_parser.add_subparsers(dest="swot_action")
	swot_add = swot_subparsers.add_parser("add", help="Add a SWOT item")
	swot_add.add_argument("--type", required=True, choices=[t.value for t in SWOTType])
	swot_add.add_argument("--content", required=True, help="Item text")
	swot_add.add_argument("--category", type=str, default=None)
	swot_add.add_argument("--priority", choices=["high", "medium", "low"], default=None)
	swot_add.set_defaults(func=cmd_swot_add)

	# status
	status_parser = subparsers.add_parser("status", help="Storage and connectivity status")
	status_parser.set_defaults(func=cmd_status)

	return parser


def main(argv: Optional[list[str]] = None) -> None:
	"""CLI entry point."""
	parser = build_parser()
	args = parser.parse_args(argv)

	if not getattr(args, "func", None):
		parser.print_help()
		sys.exit(1)

	try:
		config = load_config()
	except ValueError as e:
		_fail(f"Configuration error: {e}")
		return

	setup_logging(level=config.log_level, log_dir=config.log_dir)
	args.config = config
	args.func(args)
