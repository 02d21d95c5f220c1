"""
Generation job payload.

Jobs carry only primitive identifiers and flags, never live objects, so the
worker can rebuild everything it needs from storage wherever it runs.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class GenerationJob:
    generated_plan_id: int
    user_id: int
    include_budget_breakdown: bool = True
    include_restaurants: bool = True

    def to_message(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_message(cls, message: Dict[str, Any]) -> "GenerationJob":
        return cls(
            generated_plan_id=int(message["generated_plan_id"]),
            user_id=int(message["user_id"]),
            include_budget_breakdown=bool(message.get("include_budget_breakdown", True)),
            include_restaurants=bool(message.get("include_restaurants", True)),
        )
