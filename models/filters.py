from dataclasses import dataclass, field
from typing import Dict, List

from models.unit import Unit


@dataclass
class UnitFilters:
    """Active table filters. An empty list places no constraint."""
    types: List[str] = field(default_factory=list)
    views: List[str] = field(default_factory=list)
    floors: List[str] = field(default_factory=list)
    additional: Dict[str, List[str]] = field(default_factory=dict)

    def matches(self, unit: Unit) -> bool:
        if self.types and unit.bedroom_type not in self.types:
            return False
        if self.views and unit.view not in self.views:
            return False
        if self.floors and str(unit.floor) not in [str(f) for f in self.floors]:
            return False
        for column, values in self.additional.items():
            if values and unit.categories.get(column) not in values:
                return False
        return True

    @property
    def is_empty(self) -> bool:
        return not (
            self.types or self.views or self.floors
            or any(self.additional.values())
        )
