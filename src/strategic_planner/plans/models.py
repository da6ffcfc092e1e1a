"""
Plan Models - Pydantic schemas for the strategic plan document.

A plan owns its SWOT analysis, the strategic options derived from it,
Balanced Scorecard objectives (each owning its KPIs) and the action
plans (PAPs) that implement those objectives.

Python attributes are snake_case; the serialized form uses camelCase
names, and both spellings are accepted on input.
"""

from enum import Enum
from typing import Annotated, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..ids import generate_id, now_iso, today_iso


class PlanModel(BaseModel):
	"""Base for every record in the plan document."""
	model_config = ConfigDict(
		alias_generator=to_camel,
		populate_by_name=True,
		extra="ignore",
	)


class PlanStatus(str, Enum):
	"""Status of a plan."""
	DRAFT = "draft"
	ACTIVE = "active"
	COMPLETED = "completed"
	ARCHIVED = "archived"


class SWOTType(str, Enum):
	STRENGTH = "strength"
	WEAKNESS = "weakness"
	OPPORTUNITY = "opportunity"
	THREAT = "threat"


class Priority(str, Enum):
	HIGH = "high"
	MEDIUM = "medium"
	LOW = "low"


class OptionCategory(str, Enum):
	"""SWOT quadrant combination a strategic option addresses."""
	SO = "SO"
	ST = "ST"
	WO = "WO"
	WT = "WT"


class OptionStatus(str, Enum):
	PROPOSED = "proposed"
	APPROVED = "approved"
	IN_PROGRESS = "in-progress"
	COMPLETED = "completed"
	REJECTED = "rejected"


class KPIFrequency(str, Enum):
	DAILY = "daily"
	WEEKLY = "weekly"
	MONTHLY = "monthly"
	QUARTERLY = "quarterly"
	YEARLY = "yearly"


class KPIStatus(str, Enum):
	ON_TRACK = "on-track"
	AT_RISK = "at-risk"
	OFF_TRACK = "off-track"
	ACHIEVED = "achieved"


class Perspective(str, Enum):
	"""The four Balanced Scorecard perspectives."""
	FINANCIAL = "financial"
	CUSTOMER = "customer"
	INTERNAL = "internal"
	LEARNING = "learning"


class ObjectiveStatus(str, Enum):
	NOT_STARTED = "not-started"
	IN_PROGRESS = "in-progress"
	COMPLETED = "completed"
	ON_HOLD = "on-hold"


class ActivityStatus(str, Enum):
	NOT_STARTED = "not-started"
	IN_PROGRESS = "in-progress"
	COMPLETED = "completed"
	DELAYED = "delayed"


class ResourceType(str, Enum):
	HUMAN = "human"
	FINANCIAL = "financial"
	MATERIAL = "material"
	TECHNOLOGICAL = "technological"


class RiskLevel(str, Enum):
	LOW = "low"
	MEDIUM = "medium"
	HIGH = "high"


class PAPStatus(str, Enum):
	"""Status of an action plan."""
	PLANNING = "planning"
	APPROVED = "approved"
	IN_PROGRESS = "in-progress"
	COMPLETED = "completed"
	ON_HOLD = "on-hold"


# Enum fields are open: known values parse to the enum member, anything else
# is kept as the plain string the caller supplied. Numbers work the same way.
PlanStatusValue = Annotated[Union[PlanStatus, str], Field(union_mode="left_to_right")]
SWOTTypeValue = Annotated[Union[SWOTType, str], Field(union_mode="left_to_right")]
PriorityValue = Annotated[Union[Priority, str], Field(union_mode="left_to_right")]
OptionCategoryValue = Annotated[Union[OptionCategory, str], Field(union_mode="left_to_right")]
OptionStatusValue = Annotated[Union[OptionStatus, str], Field(union_mode="left_to_right")]
KPIFrequencyValue = Annotated[Union[KPIFrequency, str], Field(union_mode="left_to_right")]
KPIStatusValue = Annotated[Union[KPIStatus, str], Field(union_mode="left_to_right")]
PerspectiveValue = Annotated[Union[Perspective, str], Field(union_mode="left_to_right")]
ObjectiveStatusValue = Annotated[Union[ObjectiveStatus, str], Field(union_mode="left_to_right")]
ActivityStatusValue = Annotated[Union[ActivityStatus, str], Field(union_mode="left_to_right")]
ResourceTypeValue = Annotated[Union[ResourceType, str], Field(union_mode="left_to_right")]
RiskLevelValue = Annotated[Union[RiskLevel, str], Field(union_mode="left_to_right")]
PAPStatusValue = Annotated[Union[PAPStatus, str], Field(union_mode="left_to_right")]
Score = Annotated[Union[int, str], Field(union_mode="left_to_right")]
Amount = Annotated[Union[float, str], Field(union_mode="left_to_right")]


def enum_text(value) -> str:
	"""Display text of an open enum field."""
	return value.value if isinstance(value, Enum) else str(value)


class SWOTItem(PlanModel):
	"""A single strength, weakness, opportunity or threat."""
	id: str = Field(default_factory=generate_id)
	type: SWOTTypeValue
	content: str
	category: Optional[str] = None
	priority: Annotated[Union[Priority, str, None], Field(union_mode="left_to_right")] = None
	notes: Optional[str] = None


class StrategicOption(PlanModel):
	"""
	A proposed strategy derived from the SWOT analysis.

	The related_* lists hold SWOT item ids. They are expected to point at
	items of the matching type, but nothing checks it and ids of removed
	items are left in place.
	"""
	id: str = Field(default_factory=generate_id)
	name: str
	description: str = ""
	category: OptionCategoryValue
	related_strengths: list[str] = Field(default_factory=list)
	related_weaknesses: list[str] = Field(default_factory=list)
	related_opportunities: list[str] = Field(default_factory=list)
	related_threats: list[str] = Field(default_factory=list)
	feasibility: Score = Field(default=5, description="Nominally 1-10")
	impact: Score = Field(default=5, description="Nominally 1-10")
	priority: PriorityValue = Priority.MEDIUM
	status: OptionStatusValue = OptionStatus.PROPOSED
	notes: Optional[str] = None


class DataPoint(PlanModel):
	"""One measurement in a KPI's history."""
	date: str
	value: Amount
	notes: Optional[str] = None


class KPI(PlanModel):
	"""
	A key performance indicator tracked under an objective.

	objective_id duplicates the physical nesting. The repository rewrites it
	on every write path so it always names the owning objective.
	"""
	id: str = Field(default_factory=generate_id)
	objective_id: str = ""
	name: str
	description: str = ""
	target: str = ""
	current: str = ""
	unit: str = ""
	frequency: KPIFrequencyValue = KPIFrequency.MONTHLY
	status: KPIStatusValue = KPIStatus.ON_TRACK
	owner: Optional[str] = None
	data_points: list[DataPoint] = Field(default_factory=list)


class BSCObjective(PlanModel):
	"""A Balanced Scorecard objective."""
	id: str = Field(default_factory=generate_id)
	perspective: PerspectiveValue
	name: str
	description: str = ""
	strategic_option_ids: list[str] = Field(default_factory=list)
	kpis: list[KPI] = Field(default_factory=list)
	status: ObjectiveStatusValue = ObjectiveStatus.NOT_STARTED
	owner: Optional[str] = None
	start_date: Optional[str] = None
	target_date: Optional[str] = None

	def with_owned_kpis(self) -> "BSCObjective":
		"""Copy of this objective whose KPIs all point back at it."""
		kpis = [kpi.model_copy(update={"objective_id": self.id}) for kpi in self.kpis]
		return self.model_copy(update={"kpis": kpis})


class Activity(PlanModel):
	id: str = Field(default_factory=generate_id)
	name: str
	description: str = ""
	start_date: str = ""
	end_date: str = ""
	status: ActivityStatusValue = ActivityStatus.NOT_STARTED
	progress: Amount = 0
	assigned_to: Optional[str] = None
	dependencies: list[str] = Field(default_factory=list, description="Activity ids")


class Budget(PlanModel):
	allocated: Amount = 0
	spent: Amount = 0
	currency: str = "USD"


class Resource(PlanModel):
	id: str = Field(default_factory=generate_id)
	type: ResourceTypeValue
	name: str
	quantity: str = ""
	notes: Optional[str] = None


class Risk(PlanModel):
	id: str = Field(default_factory=generate_id)
	description: str
	likelihood: RiskLevelValue = RiskLevel.MEDIUM
	impact: RiskLevelValue = RiskLevel.MEDIUM
	mitigation: str = ""


class PAP(PlanModel):
	"""An action plan implementing an objective (objective_id is not checked)."""
	id: str = Field(default_factory=generate_id)
	objective_id: str = ""
	name: str
	description: str = ""
	activities: list[Activity] = Field(default_factory=list)
	budget: Budget = Field(default_factory=Budget)
	resources: list[Resource] = Field(default_factory=list)
	risks: list[Risk] = Field(default_factory=list)
	status: PAPStatusValue = PAPStatus.PLANNING


class Timeframe(PlanModel):
	start: str = Field(default_factory=today_iso)
	end: str = Field(default_factory=lambda: today_iso(365))


class Plan(PlanModel):
	"""
	A complete strategic plan - the root aggregate.

	updated_at never decreases and is refreshed by every mutation of the
	plan or of any collection it owns.
	"""
	id: str = Field(default_factory=generate_id)
	name: str = "New Strategic Plan"
	description: str = ""
	organization: str = ""
	timeframe: Timeframe = Field(default_factory=Timeframe)
	vision: str = ""
	mission: str = ""
	values: list[str] = Field(default_factory=list)
	status: PlanStatusValue = PlanStatus.DRAFT

	# Timestamps
	created_at: str = Field(default_factory=now_iso)
	updated_at: str = Field(default_factory=now_iso)
	created_by: Optional[str] = None

	# Owned collections
	swot_items: list[SWOTItem] = Field(default_factory=list)
	strategic_options: list[StrategicOption] = Field(default_factory=list)
	objectives: list[BSCObjective] = Field(default_factory=list)
	paps: list[PAP] = Field(default_factory=list)

	def swot_items_of(self, swot_type: SWOTType) -> list[SWOTItem]:
		"""SWOT items of one type, in insertion order."""
		return [item for item in self.swot_items if item.type == swot_type]

	def find_objective(self, objective_id: str) -> Optional[BSCObjective]:
		for objective in self.objectives:
			if objective.id == objective_id:
				return objective
		return None

	def objectives_for(self, perspective: Perspective) -> list[BSCObjective]:
		"""Objectives grouped under one scorecard perspective."""
		return [obj for obj in self.objectives if obj.perspective == perspective]

	def get_summary(self) -> dict:
		"""Collection counts for dashboards and the CLI."""
		return {
			"swot_items": len(self.swot_items),
			"strategic_options": len(self.strategic_options),
			"objectives": len(self.objectives),
			"kpis": sum(len(obj.kpis) for obj in self.objectives),
			"paps": len(self.paps),
		}


class PlanDocument(PlanModel):
	"""The persisted blob: every plan plus the current-plan pointer."""
	plans: list[Plan] = Field(default_factory=list)
	current_plan_id: Optional[str] = None


def normalize_keys(model_cls: type[BaseModel], data: dict) -> dict:
	"""
	Map camelCase or snake_case keys onto ``model_cls`` field names.

	Keys that match no field are dropped.
	"""
	normalized = {}
	for name, info in model_cls.model_fields.items():
		if info.alias and info.alias in data:
			normalized[name] = data[info.alias]
		if name in data:
			normalized[name] = data[name]
	return normalized
