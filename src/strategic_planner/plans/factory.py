"""Plan factories: defaults for new plans and the first-run sample plan."""

from ..ids import generate_id, now_iso
from .models import (
	KPI,
	BSCObjective,
	KPIFrequency,
	KPIStatus,
	ObjectiveStatus,
	OptionCategory,
	OptionStatus,
	Perspective,
	Plan,
	PlanStatus,
	Priority,
	StrategicOption,
	SWOTItem,
	SWOTType,
	Timeframe,
	normalize_keys,
)


def create_empty_plan(**fields) -> Plan:
	"""
	Build a new plan, defaulting every field that is not supplied.

	Defaults: name "New Strategic Plan", empty text fields and collections,
	a one-year timeframe starting today, status draft and
	created_at == updated_at == now. Explicit fields (snake_case or
	camelCase) win over the defaults, collections included.
	"""
	now = now_iso()
	data = {"id": generate_id(), "created_at": now, "updated_at": now}
	data.update(normalize_keys(Plan, fields))
	plan = Plan.model_validate(data)
	if plan.objectives:
		plan = plan.model_copy(
			update={"objectives": [obj.with_owned_kpis() for obj in plan.objectives]}
		)
	return plan


def create_sample_plan() -> Plan:
	"""Build the fully populated example plan used on first run."""
	now = now_iso()

	swot_items = [
		SWOTItem(
			type=SWOTType.STRENGTH,
			content="Strong brand reputation and customer loyalty",
			category="Market Position",
			priority=Priority.HIGH,
		),
		SWOTItem(
			type=SWOTType.STRENGTH,
			content="Experienced leadership team with deep industry knowledge",
			category="Human Resources",
			priority=Priority.HIGH,
		),
		SWOTItem(
			type=SWOTType.WEAKNESS,
			content="Limited digital transformation capabilities",
			category="Technology",
			priority=Priority.HIGH,
		),
		SWOTItem(
			type=SWOTType.OPPORTUNITY,
			content="Growing demand for sustainable and eco-friendly products",
			category="Market Trends",
			priority=Priority.HIGH,
		),
		SWOTItem(
			type=SWOTType.THREAT,
			content="Increasing competition from new market entrants",
			category="Competitive Landscape",
			priority=Priority.MEDIUM,
		),
	]

	option = StrategicOption(
		name="Digital Transformation Initiative",
		description="Accelerate digital capabilities to improve customer experience and operational efficiency",
		category=OptionCategory.SO,
		related_strengths=[swot_items[0].id, swot_items[1].id],
		related_weaknesses=[swot_items[2].id],
		feasibility=8,
		impact=9,
		priority=Priority.HIGH,
		status=OptionStatus.APPROVED,
	)

	objectives = [
		BSCObjective(
			perspective=Perspective.FINANCIAL,
			name="Increase Revenue Growth",
			description="Achieve 15% year-over-year revenue growth through market expansion and new product lines",
			strategic_option_ids=[option.id],
			kpis=[
				KPI(
					name="Revenue Growth Rate",
					description="Year-over-year revenue growth percentage",
					target="15%",
					current="8%",
					unit="%",
					frequency=KPIFrequency.QUARTERLY,
					status=KPIStatus.AT_RISK,
				),
			],
			status=ObjectiveStatus.IN_PROGRESS,
			start_date="2025-01-01",
			target_date="2025-12-31",
		),
		BSCObjective(
			perspective=Perspective.CUSTOMER,
			name="Enhance Customer Satisfaction",
			description="Improve customer satisfaction scores through better service and product quality",
			strategic_option_ids=[option.id],
			kpis=[
				KPI(
					name="Net Promoter Score",
					description="Customer loyalty and satisfaction metric",
					target="70",
					current="58",
					unit="score",
					frequency=KPIFrequency.MONTHLY,
					status=KPIStatus.ON_TRACK,
				),
			],
			status=ObjectiveStatus.IN_PROGRESS,
			start_date="2025-01-01",
			target_date="2025-12-31",
		),
	]

	return Plan(
		name="Sample Strategic Plan 2025-2027",
		description="Three-year strategic plan for organizational growth and digital transformation",
		organization="Sample Organization",
		timeframe=Timeframe(start="2025-01-01", end="2027-12-31"),
		vision="To be the leading provider of innovative solutions in our industry",
		mission="We deliver exceptional value to our customers through innovation, quality, and outstanding service",
		values=["Innovation", "Integrity", "Customer Focus", "Excellence", "Sustainability"],
		swot_items=swot_items,
		strategic_options=[option],
		objectives=[obj.with_owned_kpis() for obj in objectives],
		paps=[],
		status=PlanStatus.ACTIVE,
		created_at=now,
		updated_at=now,
	)
