"""
Plan Repository - owns the plan list and the current plan.

Features:
- CRUD over the current plan's SWOT items, strategic options, objectives,
  KPIs and action plans
- Replace-by-id updates: plans and entities are never changed in place
- Monotonic updated_at bookkeeping
- Persist-then-notify after every mutation

Operations that cannot apply (no current plan, unknown id, a payload that
does not fit the model) return without changing anything and without
raising.
"""

import logging
from typing import Any, Callable, Iterable, Mapping, Optional, TypeVar, Union

from pydantic import BaseModel, ValidationError

from ..connectivity import ConnectivityMonitor, ConnectivityObserver
from ..ids import generate_id, next_timestamp, now_iso
from .factory import create_empty_plan, create_sample_plan
from .models import (
	KPI,
	PAP,
	BSCObjective,
	Plan,
	PlanModel,
	StrategicOption,
	SWOTItem,
	normalize_keys,
)
from .storage import PlanStorage

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=PlanModel)
Payload = Union[Mapping[str, Any], BaseModel]
Listener = Callable[["PlanRepository"], None]


def _as_dict(payload: Payload) -> dict:
	if isinstance(payload, BaseModel):
		return payload.model_dump()
	return dict(payload)


class PlanRepository:
	"""
	State controller for strategic plans.

	Usage:
		repo = PlanRepository(PlanStorage(FileBlobStore(path)))
		repo.initialize()

		repo.create_plan(name="Acme FY26")
		item = repo.add_swot_item({"type": "strength", "content": "Loyal customers"})
		repo.update_swot_item(item.id, {"priority": "high"})

	Every mutation builds a new Plan, swaps it into the plan list at the
	same index, saves the whole document and then notifies subscribers.
	"""

	def __init__(
		self,
		storage: PlanStorage,
		connectivity: Optional[ConnectivityMonitor] = None,
		user_id: Optional[str] = None,
	):
		self.storage = storage
		self._plans: list[Plan] = []
		self._current: Optional[Plan] = None
		self._loading = True
		self._last_synced: Optional[str] = None
		self._user_id = user_id
		self._listeners: list[Listener] = []
		self._connectivity: Optional[ConnectivityObserver] = (
			ConnectivityObserver(connectivity) if connectivity is not None else None
		)

	# -- lifecycle ---------------------------------------------------------

	def initialize(self) -> None:
		"""
		Load stored plans, or bootstrap the sample plan on first run.

		Afterwards the repository always holds at least one plan and
		is_loading is False. Calling it again does nothing.
		"""
		if not self._loading:
			return

		document = self.storage.load()
		if document.plans:
			self._plans = list(document.plans)
			self._current = self._find_plan(document.current_plan_id)
			logger.info(f"Loaded {len(self._plans)} plan(s), current: {document.current_plan_id}")
		else:
			sample = create_sample_plan()
			self._plans = [sample]
			self._current = sample
			if self.storage.load_failed:
				logger.warning(f"Stored plans could not be loaded, sample plan {sample.id} is not saved")
			else:
				logger.info(f"No stored plans, created sample plan {sample.id}")
				self._save()

		self._loading = False
		self._notify()

	def close(self) -> None:
		"""Release the connectivity listener and drop subscribers."""
		if self._connectivity is not None:
			self._connectivity.close()
		self._listeners.clear()

	def __enter__(self) -> "PlanRepository":
		self.initialize()
		return self

	def __exit__(self, exc_type, exc, tb) -> None:
		self.close()

	# -- read-only state -----------------------------------------------------

	@property
	def plans(self) -> list[Plan]:
		return list(self._plans)

	@property
	def current_plan(self) -> Optional[Plan]:
		return self._current

	@property
	def is_loading(self) -> bool:
		return self._loading

	@property
	def is_online(self) -> bool:
		if self._connectivity is None:
			return True
		return self._connectivity.online

	@property
	def last_synced(self) -> Optional[str]:
		"""When the document was last written successfully."""
		return self._last_synced

	@property
	def user_id(self) -> Optional[str]:
		return self._user_id

	def get_plan(self, plan_id: str) -> Optional[Plan]:
		return self._find_plan(plan_id)

	def set_identity(self, user_id: Optional[str]) -> None:
		"""Called by the identity provider when the session changes."""
		self._user_id = user_id

	def subscribe(self, listener: Listener) -> Callable[[], None]:
		"""
		Register a callback run after every state change.

		Returns:
			A function that removes the callback again
		"""
		self._listeners.append(listener)

		def unsubscribe() -> None:
			if listener in self._listeners:
				self._listeners.remove(listener)

		return unsubscribe

	# -- plans ---------------------------------------------------------------

	def create_plan(self, **fields) -> Optional[Plan]:
		"""
		Create a plan, append it and make it current.

		Args:
			**fields: Plan fields overriding the defaults (snake_case or camelCase)

		Returns:
			The new Plan, or None if the fields do not describe a valid plan
		"""
		if self._user_id and "created_by" not in fields and "createdBy" not in fields:
			fields["created_by"] = self._user_id

		try:
			plan = create_empty_plan(**fields)
		except ValidationError as e:
			logger.warning(f"Rejected plan fields: {e}")
			return None

		self._plans = [*self._plans, plan]
		self._current = plan
		logger.info(f"Created plan {plan.id} ({plan.name})")
		self._commit()
		return plan

	def set_current_plan(self, plan_id: Optional[str]) -> Optional[Plan]:
		"""Switch the current plan; an unknown id clears it."""
		self._current = self._find_plan(plan_id)
		self._commit()
		return self._current

	def update_plan(self, updates: Mapping[str, Any]) -> Optional[Plan]:
		"""
		Shallow-merge fields into the current plan.

		id is never changed and updated_at is always refreshed.
		"""
		plan = self._current
		if plan is None:
			return None

		changes = normalize_keys(Plan, updates)
		changes.pop("id", None)
		merged = self._merge(plan, changes)
		if merged is None:
			return None
		if "objectives" in changes:
			merged = merged.model_copy(
				update={"objectives": [obj.with_owned_kpis() for obj in merged.objectives]}
			)
		return self._replace_current(merged)

	def delete_plan(self, plan_id: str) -> bool:
		"""Remove a plan; clears the current plan if it was the one removed."""
		if self._find_plan(plan_id) is None:
			return False

		self._plans = [p for p in self._plans if p.id != plan_id]
		if self._current is not None and self._current.id == plan_id:
			self._current = None
		logger.info(f"Deleted plan {plan_id}")
		self._commit()
		return True

	# -- SWOT items ----------------------------------------------------------

	def add_swot_item(self, item: Payload) -> Optional[SWOTItem]:
		return self._add("swot_items", SWOTItem, item)

	def update_swot_item(self, item_id: str, updates: Mapping[str, Any]) -> Optional[SWOTItem]:
		return self._update("swot_items", item_id, updates)

	def remove_swot_item(self, item_id: str) -> bool:
		"""Remove a SWOT item. Strategic options keep referencing its id."""
		return self._remove("swot_items", item_id)

	def bulk_add_swot_items(self, items: Iterable[Payload]) -> list[SWOTItem]:
		return self._add_many("swot_items", SWOTItem, items)

	# -- strategic options ---------------------------------------------------

	def add_strategic_option(self, option: Payload) -> Optional[StrategicOption]:
		return self._add("strategic_options", StrategicOption, option)

	def update_strategic_option(self, option_id: str, updates: Mapping[str, Any]) -> Optional[StrategicOption]:
		return self._update("strategic_options", option_id, updates)

	def remove_strategic_option(self, option_id: str) -> bool:
		return self._remove("strategic_options", option_id)

	def bulk_add_strategic_options(self, options: Iterable[Payload]) -> list[StrategicOption]:
		return self._add_many("strategic_options", StrategicOption, options)

	# -- objectives ----------------------------------------------------------

	def add_objective(self, objective: Payload) -> Optional[BSCObjective]:
		"""Add an objective. KPIs it brings get fresh ids and point back at it."""
		return self._add("objectives", BSCObjective, objective)

	def update_objective(self, objective_id: str, updates: Mapping[str, Any]) -> Optional[BSCObjective]:
		return self._update("objectives", objective_id, updates)

	def remove_objective(self, objective_id: str) -> bool:
		"""Remove an objective and its KPIs. PAPs keep their objective_id."""
		return self._remove("objectives", objective_id)

	def bulk_add_objectives(self, objectives: Iterable[Payload]) -> list[BSCObjective]:
		return self._add_many("objectives", BSCObjective, objectives)

	# -- KPIs ----------------------------------------------------------------

	def add_kpi(self, objective_id: str, kpi: Payload) -> Optional[KPI]:
		"""
		Append a KPI to an objective.

		Args:
			objective_id: Owning objective; also written to the KPI's objective_id
			kpi: KPI fields (id and objective_id are assigned here)

		Returns:
			The stored KPI, or None if there is no such objective
		"""
		added = self.bulk_add_kpis(objective_id, [kpi])
		return added[0] if added else None

	def bulk_add_kpis(self, objective_id: str, kpis: Iterable[Payload]) -> list[KPI]:
		plan = self._current
		if plan is None:
			return []
		index = self._index_of(plan.objectives, objective_id)
		if index is None:
			return []

		new_kpis = self._build_all(KPI, kpis, objective_id=objective_id)
		if not new_kpis:
			return []

		objective = plan.objectives[index]
		objectives = list(plan.objectives)
		objectives[index] = objective.model_copy(update={"kpis": [*objective.kpis, *new_kpis]})
		self._replace_collection("objectives", objectives)
		return new_kpis

	def update_kpi(self, objective_id: str, kpi_id: str, updates: Mapping[str, Any]) -> Optional[KPI]:
		"""Merge fields into a KPI; its objective_id stays the owner's id."""
		plan = self._current
		if plan is None:
			return None
		obj_index = self._index_of(plan.objectives, objective_id)
		if obj_index is None:
			return None
		objective = plan.objectives[obj_index]
		kpi_index = self._index_of(objective.kpis, kpi_id)
		if kpi_index is None:
			return None

		changes = normalize_keys(KPI, updates)
		changes["objective_id"] = objective_id
		updated = self._merge(objective.kpis[kpi_index], changes)
		if updated is None:
			return None

		kpis = list(objective.kpis)
		kpis[kpi_index] = updated
		objectives = list(plan.objectives)
		objectives[obj_index] = objective.model_copy(update={"kpis": kpis})
		self._replace_collection("objectives", objectives)
		return updated

	def remove_kpi(self, objective_id: str, kpi_id: str) -> bool:
		plan = self._current
		if plan is None:
			return False
		obj_index = self._index_of(plan.objectives, objective_id)
		if obj_index is None:
			return False
		objective = plan.objectives[obj_index]
		if self._index_of(objective.kpis, kpi_id) is None:
			return False

		objectives = list(plan.objectives)
		objectives[obj_index] = objective.model_copy(
			update={"kpis": [k for k in objective.kpis if k.id != kpi_id]}
		)
		self._replace_collection("objectives", objectives)
		return True

	# -- action plans --------------------------------------------------------

	def add_pap(self, pap: Payload) -> Optional[PAP]:
		return self._add("paps", PAP, pap)

	def update_pap(self, pap_id: str, updates: Mapping[str, Any]) -> Optional[PAP]:
		return self._update("paps", pap_id, updates)

	def remove_pap(self, pap_id: str) -> bool:
		return self._remove("paps", pap_id)

	def bulk_add_paps(self, paps: Iterable[Payload]) -> list[PAP]:
		return self._add_many("paps", PAP, paps)

	# -- internals -----------------------------------------------------------

	def _find_plan(self, plan_id: Optional[str]) -> Optional[Plan]:
		if not plan_id:
			return None
		for plan in self._plans:
			if plan.id == plan_id:
				return plan
		return None

	@staticmethod
	def _index_of(items: list, item_id: str) -> Optional[int]:
		for i, item in enumerate(items):
			if item.id == item_id:
				return i
		return None

	def _build_all(self, model_cls: type[M], payloads: Iterable[Payload], **forced) -> list[M]:
		"""
		Validate a batch of new entities, each with a fresh id.

		An invalid payload rejects the whole batch (returns []).
		"""
		built = []
		for payload in payloads:
			data = normalize_keys(model_cls, _as_dict(payload))
			data.update(forced)
			data["id"] = generate_id()
			try:
				entity = model_cls.model_validate(data)
			except ValidationError as e:
				logger.warning(f"Rejected {model_cls.__name__} payload: {e}")
				return []
			if isinstance(entity, BSCObjective):
				entity = entity.model_copy(update={
					"kpis": [k.model_copy(update={"id": generate_id()}) for k in entity.kpis],
				}).with_owned_kpis()
			built.append(entity)
		return built

	def _merge(self, entity: M, changes: dict) -> Optional[M]:
		"""Validated copy of ``entity`` with ``changes`` (already normalized) applied."""
		data = entity.model_dump()
		data.update(changes)
		try:
			return type(entity).model_validate(data)
		except ValidationError as e:
			logger.warning(f"Rejected {type(entity).__name__} update for {entity.id}: {e}")
			return None

	def _add(self, collection: str, model_cls: type[M], payload: Payload) -> Optional[M]:
		added = self._add_many(collection, model_cls, [payload])
		return added[0] if added else None

	def _add_many(self, collection: str, model_cls: type[M], payloads: Iterable[Payload]) -> list[M]:
		plan = self._current
		if plan is None:
			return []
		entities = self._build_all(model_cls, payloads)
		if not entities:
			return []
		self._replace_collection(collection, [*getattr(plan, collection), *entities])
		return entities

	def _update(self, collection: str, entity_id: str, updates: Mapping[str, Any]) -> Optional[Any]:
		plan = self._current
		if plan is None:
			return None
		items = getattr(plan, collection)
		index = self._index_of(items, entity_id)
		if index is None:
			return None

		entity = items[index]
		changes = normalize_keys(type(entity), updates)
		changes.pop("id", None)
		updated = self._merge(entity, changes)
		if updated is None:
			return None
		if isinstance(updated, BSCObjective):
			updated = updated.with_owned_kpis()

		new_items = list(items)
		new_items[index] = updated
		self._replace_collection(collection, new_items)
		return updated

	def _remove(self, collection: str, entity_id: str) -> bool:
		plan = self._current
		if plan is None:
			return False
		items = getattr(plan, collection)
		if self._index_of(items, entity_id) is None:
			return False
		self._replace_collection(collection, [item for item in items if item.id != entity_id])
		return True

	def _replace_collection(self, collection: str, items: list) -> None:
		self._replace_current(self._current.model_copy(update={collection: items}))

	def _replace_current(self, plan: Plan) -> Plan:
		"""Stamp updated_at, swap the plan in at its index, persist and notify."""
		previous = self._current.updated_at if self._current is not None else None
		plan = plan.model_copy(update={"updated_at": next_timestamp(previous)})
		self._plans = [plan if p.id == plan.id else p for p in self._plans]
		self._current = plan
		self._commit()
		return plan

	def _commit(self) -> None:
		self._save()
		self._notify()

	def _save(self) -> None:
		current_id = self._current.id if self._current is not None else None
		if self.storage.save(self._plans, current_id):
			self._last_synced = now_iso()

	def _notify(self) -> None:
		for listener in list(self._listeners):
			try:
				listener(self)
			except Exception:
				logger.exception("Plan repository listener failed")
