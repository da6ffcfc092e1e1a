"""Plans module - strategic plan model, storage and repository."""

from .factory import create_empty_plan, create_sample_plan
from .models import (
	KPI,
	PAP,
	BSCObjective,
	Perspective,
	Plan,
	PlanDocument,
	PlanStatus,
	StrategicOption,
	SWOTItem,
	SWOTType,
)
from .repository import PlanRepository
from .storage import FileBlobStore, MemoryBlobStore, PlanStorage, SqliteBlobStore, open_storage

__all__ = [
	"Plan",
	"PlanDocument",
	"PlanStatus",
	"SWOTItem",
	"SWOTType",
	"StrategicOption",
	"BSCObjective",
	"Perspective",
	"KPI",
	"PAP",
	"PlanRepository",
	"PlanStorage",
	"MemoryBlobStore",
	"FileBlobStore",
	"SqliteBlobStore",
	"open_storage",
	"create_empty_plan",
	"create_sample_plan",
]
