from pydantic import BaseModel
from typing import Literal, List

ConflictType = Literal["teacher_conflict", "room_conflict", "class_conflict", "unique_conflict"]

class Conflict(BaseModel):
    conflict_type: ConflictType
    description: str
    severity: Literal["high"] = "high"
    conflicting_entry_id: str | None = None

class ResolutionAction(BaseModel):
    action_type: Literal["move_slot", "change_room"]
    description: str
    conflicting_entry_id: str | None = None
    parameters: dict  # the day and times of the slot being replaced

class ConflictReport(BaseModel):
    has_conflicts: bool
    conflicts: List[Conflict]
    suggested_resolutions: List[ResolutionAction]
