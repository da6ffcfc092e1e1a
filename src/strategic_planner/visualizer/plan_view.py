"""Rich views for plans: plan list, summary panel and SWOT/BSC tree."""

from typing import Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from ..plans.models import KPIStatus, Perspective, Plan, SWOTType, enum_text

KPI_STATUS_STYLES = {
	KPIStatus.ON_TRACK: "green",
	KPIStatus.AT_RISK: "yellow",
	KPIStatus.OFF_TRACK: "red",
	KPIStatus.ACHIEVED: "bold green",
}

SWOT_LABELS = {
	SWOTType.STRENGTH: "[green]Strengths[/green]",
	SWOTType.WEAKNESS: "[red]Weaknesses[/red]",
	SWOTType.OPPORTUNITY: "[cyan]Opportunities[/cyan]",
	SWOTType.THREAT: "[yellow]Threats[/yellow]",
}

PERSPECTIVE_LABELS = {
	Perspective.FINANCIAL: "Financial",
	Perspective.CUSTOMER: "Customer",
	Perspective.INTERNAL: "Internal Processes",
	Perspective.LEARNING: "Learning & Growth",
}


def _text(value) -> str:
	"""Escaped display text for user-supplied values and open enums."""
	return escape(enum_text(value))


def _amount(value) -> str:
	return f"{value:g}" if isinstance(value, (int, float)) else _text(value)


def render_plan_list(
	plans: Sequence[Plan],
	current_plan_id: Optional[str] = None,
	console: Optional[Console] = None,
) -> None:
	"""Render all plans as a table, marking the current one."""
	console = console or Console()

	if not plans:
		console.print("[dim]No plans.[/dim]")
		return

	table = Table(title="Strategic Plans")
	table.add_column("", width=1)
	table.add_column("ID", style="dim")
	table.add_column("Name", style="bold")
	table.add_column("Organization")
	table.add_column("Status")
	table.add_column("Updated", style="dim")

	for plan in plans:
		marker = "[cyan]*[/cyan]" if plan.id == current_plan_id else ""
		table.add_row(
			marker,
			_text(plan.id),
			_text(plan.name),
			_text(plan.organization),
			_text(plan.status),
			_text(plan.updated_at),
		)

	console.print(table)


def render_plan_summary(plan: Plan, console: Optional[Console] = None) -> None:
	"""Render a summary panel for a plan."""
	console = console or Console()
	counts = plan.get_summary()

	lines = []
	lines.append(f"[bold]Organization:[/bold] {_text(plan.organization or '-')}")
	lines.append(f"[bold]Status:[/bold] {_text(plan.status)}")
	lines.append(f"[bold]Timeframe:[/bold] {_text(plan.timeframe.start)} - {_text(plan.timeframe.end)}")
	if plan.vision:
		lines.append(f"[bold]Vision:[/bold] {_text(plan.vision)}")
	if plan.mission:
		lines.append(f"[bold]Mission:[/bold] {_text(plan.mission)}")
	if plan.values:
		lines.append(f"[bold]Values:[/bold] {_text(', '.join(plan.values))}")
	lines.append("")
	lines.append(
		f"[bold]Contents:[/bold] {counts['swot_items']} SWOT items, "
		f"{counts['strategic_options']} options, {counts['objectives']} objectives, "
		f"{counts['kpis']} KPIs, {counts['paps']} action plans"
	)
	lines.append(f"[dim]Updated {_text(plan.updated_at)}[/dim]")

	console.print(Panel("\n".join(lines), title=f"Plan: {_text(plan.name)}", border_style="cyan"))


def render_plan_tree(plan: Plan, console: Optional[Console] = None) -> None:
	"""Render SWOT, options, scorecard objectives and action plans as a tree."""
	console = console or Console()
	tree = Tree(f"[bold]{_text(plan.name)}[/bold] [dim]({_text(plan.id)})[/dim]")

	swot = tree.add("[bold]SWOT[/bold]")
	groups = [(label, plan.swot_items_of(swot_type)) for swot_type, label in SWOT_LABELS.items()]
	groups.append(("Other", [item for item in plan.swot_items if item.type not in SWOT_LABELS]))
	for label, items in groups:
		if not items:
			continue
		branch = swot.add(label)
		for item in items:
			suffix = "" if item.type in SWOT_LABELS else f" ({_text(item.type)})"
			branch.add(f"{_text(item.content)}{suffix} [dim]{_text(item.id)}[/dim]")

	options = tree.add("[bold]Strategic Options[/bold]")
	for option in plan.strategic_options:
		options.add(
			f"{escape('[' + enum_text(option.category) + ']')} {_text(option.name)} "
			f"[dim]feasibility {_text(option.feasibility)}, impact {_text(option.impact)}, "
			f"{_text(option.status)}[/dim]"
		)

	scorecard = tree.add("[bold]Balanced Scorecard[/bold]")
	groups = [(label, plan.objectives_for(perspective)) for perspective, label in PERSPECTIVE_LABELS.items()]
	groups.append(("Other", [obj for obj in plan.objectives if obj.perspective not in PERSPECTIVE_LABELS]))
	for label, objectives in groups:
		if not objectives:
			continue
		branch = scorecard.add(label)
		for objective in objectives:
			obj_branch = branch.add(f"{_text(objective.name)} [dim]{_text(objective.status)}[/dim]")
			for kpi in objective.kpis:
				style = KPI_STATUS_STYLES.get(kpi.status, "white")
				obj_branch.add(
					f"[{style}]{_text(kpi.name)}[/{style}] "
					f"{_text(kpi.current)} / {_text(kpi.target)} {_text(kpi.unit)}".rstrip()
				)

	paps = tree.add("[bold]Action Plans[/bold]")
	for pap in plan.paps:
		paps.add(
			f"{_text(pap.name)} [dim]{_text(pap.status)}, {len(pap.activities)} activities, "
			f"{_amount(pap.budget.spent)}/{_amount(pap.budget.allocated)} {_text(pap.budget.currency)}[/dim]"
		)

	console.print(tree)
