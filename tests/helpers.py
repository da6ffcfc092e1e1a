"""Shared test fixtures and helpers for strategic-planner tests."""

from typing import Optional

from strategic_planner.plans.models import (
	KPI,
	BSCObjective,
	OptionCategory,
	Perspective,
	Plan,
	PlanStatus,
	StrategicOption,
	SWOTItem,
	SWOTType,
	Timeframe,
)
from strategic_planner.plans.repository import PlanRepository
from strategic_planner.plans.storage import MemoryBlobStore, PlanStorage


class RecordingStorage(PlanStorage):
	"""PlanStorage that remembers every save call."""

	def __init__(self, blob_store=None):
		super().__init__(blob_store or MemoryBlobStore())
		self.saves: list[tuple[list[Plan], Optional[str]]] = []

	def save(self, plans, current_plan_id):
		self.saves.append((list(plans), current_plan_id))
		return super().save(plans, current_plan_id)


class FailingBlobStore:
	"""Blob store whose reads and/or writes always fail."""

	def __init__(self, fail_get: bool = False, fail_put: bool = True):
		self.fail_get = fail_get
		self.fail_put = fail_put
		self.blobs: dict[str, str] = {}

	def get(self, key):
		if self.fail_get:
			raise OSError("storage unavailable")
		return self.blobs.get(key)

	def put(self, key, value):
		if self.fail_put:
			raise OSError("quota exceeded")
		self.blobs[key] = value

	def delete(self, key):
		self.blobs.pop(key, None)


def make_plan(
	plan_id: str = "plan-1",
	name: str = "Acme FY26",
	status: PlanStatus = PlanStatus.ACTIVE,
) -> Plan:
	"""Create a Plan with realistic content for testing."""
	strength = SWOTItem(id="s1", type=SWOTType.STRENGTH, content="Loyal customer base")
	weakness = SWOTItem(id="w1", type=SWOTType.WEAKNESS, content="Legacy ERP")
	return Plan(
		id=plan_id,
		name=name,
		organization="Acme",
		timeframe=Timeframe(start="2026-01-01", end="2026-12-31"),
		vision="Be the regional leader",
		values=["Integrity"],
		status=status,
		created_at="2026-01-01T00:00:00+00:00",
		updated_at="2026-01-01T00:00:00+00:00",
		swot_items=[strength, weakness],
		strategic_options=[
			StrategicOption(
				id="o1",
				name="Modernize ERP",
				category=OptionCategory.WO,
				related_strengths=["s1"],
				related_weaknesses=["w1"],
			),
		],
		objectives=[
			BSCObjective(
				id="obj-1",
				perspective=Perspective.FINANCIAL,
				name="Grow revenue",
				strategic_option_ids=["o1"],
				kpis=[
					KPI(id="k1", objective_id="obj-1", name="Revenue growth", target="10%", unit="%"),
					KPI(id="k2", objective_id="obj-1", name="Gross margin", target="40%", unit="%"),
				],
			),
		],
	)


def make_repository(plans: Optional[list[Plan]] = None, current_plan_id: Optional[str] = None, **kwargs) -> PlanRepository:
	"""Initialized repository over in-memory storage, optionally pre-seeded."""
	storage = RecordingStorage()
	if plans is not None:
		storage.save(plans, current_plan_id)
		storage.saves.clear()
	repo = PlanRepository(storage, **kwargs)
	repo.initialize()
	return repo
