from models.unit import Unit
from models.pricing import (
    AdditionalCategoryPricing,
    BalconyPricing,
    BedroomTypePricing,
    FlatPriceAdder,
    FloorRiseRule,
    PricingConfiguration,
    ViewPricing,
)
from models.filters import UnitFilters
from models.priced_unit import PricedUnit
