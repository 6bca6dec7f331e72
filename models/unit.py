from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass(frozen=True)
class Unit:
    name: str
    bedroom_type: Optional[str]
    view: Optional[str]
    floor: int
    sell_area: float
    ac_area: float
    balcony_area: Optional[float] = None   # None = infer from sell - AC
    categories: Dict[str, str] = field(default_factory=dict)

    @property
    def resolved_balcony_area(self) -> float:
        """Explicit balcony area, else the positive sell - AC difference."""
        if self.balcony_area is not None and self.balcony_area > 0:
            return self.balcony_area
        if self.sell_area > 0 and self.ac_area > 0:
            return max(0.0, self.sell_area - self.ac_area)
        return 0.0

    @property
    def balcony_percentage(self) -> float:
        if self.sell_area <= 0:
            return 0.0
        return self.resolved_balcony_area / self.sell_area * 100

    def attribute(self, column: str) -> Optional[str]:
        """Resolve a filter column to this unit's value as a string."""
        if column in ("name", "Unit Name"):
            return self.name
        if column in ("type", "Type", "bedroom_type"):
            return self.bedroom_type
        if column in ("view", "View"):
            return self.view
        if column in ("floor", "Floor"):
            return str(self.floor)
        return self.categories.get(column)
