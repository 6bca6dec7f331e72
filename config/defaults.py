"""Default configuration constants for the unit pricing engine."""

# Pricing modes: "apartment" prices floor premiums and balconies,
# "villa" prices the AC area only and ignores floors
PRICING_MODES = ["apartment", "villa"]
DEFAULT_PRICING_MODE = "apartment"

# Metric kinds the optimizer can target
METRIC_SELL_AREA = "sell_area"
METRIC_AC_AREA = "ac_area"
METRICS = [METRIC_SELL_AREA, METRIC_AC_AREA]

# Optimization modes for the multi-type optimizer
OPTIMIZATION_MODE_BASE_ONLY = "base_only"
OPTIMIZATION_MODE_ALL_PARAMETERS = "all_parameters"
OPTIMIZATION_MODES = [OPTIMIZATION_MODE_BASE_ONLY, OPTIMIZATION_MODE_ALL_PARAMETERS]

# Final prices are rounded UP to this increment
PRICE_ROUNDING_INCREMENT = 1000

# Ceiling used for open-ended floor rise rules (end_floor is None)
DEFAULT_MAX_FLOOR = 99

# Domain bounds applied after every gradient step
MIN_BASE_PSF = 1.0
FLOOR_INCREMENT_MIN = 0.01    # Floor psf_increment never drops below this
FLOOR_INCREMENT_MAX_FACTOR = 2.0
JUMP_INCREMENT_MIN = 0.0
JUMP_INCREMENT_MAX_FACTOR = 2.0
JUMP_INCREMENT_MAX_FLOOR = 1.0  # Upper bound is at least this

# Cost function weights
CONSTRAINT_FACTOR = 0.001            # Quadratic drift penalty per parameter
FLOOR_CONSTRAINT_MULTIPLIER = 2.0    # Floor parameters drift at double weight
NEGATIVE_FLOOR_PENALTY = 1_000_000   # Per unit of negative floor increment

# Gradient descent settings per variant.
# Learning rates are hand-tuned; the full variant has many floor parameters
# whose partial derivatives scale with the floor count, hence the finer rate.
SINGLE_OPTIMIZER = {
    "learning_rate": 0.25,
    "max_iterations": 200,
    "convergence_threshold": 1e-4,
    "epsilon": 1.0,
    "constraint_factor": CONSTRAINT_FACTOR,
}

MULTI_OPTIMIZER = {
    "learning_rate": 0.1,
    "max_iterations": 300,
    "convergence_threshold": 1e-4,
    "epsilon": 1.0,
    "constraint_factor": CONSTRAINT_FACTOR,
}

FULL_OPTIMIZER = {
    "learning_rate": 0.001,
    "max_iterations": 500,
    "convergence_threshold": 1e-4,
    "epsilon": 1.0,
    "constraint_factor": CONSTRAINT_FACTOR,
}

# Column names expected by the unit loader
UNIT_NAME_COLUMN = "Unit Name"
UNIT_TYPE_COLUMN = "Type"
UNIT_VIEW_COLUMN = "View"
UNIT_FLOOR_COLUMN = "Floor"
UNIT_SELL_AREA_COLUMN = "Sell Area"
UNIT_AC_AREA_COLUMN = "AC Area"
UNIT_BALCONY_COLUMN = "Balcony"

# Margin optimizer: default target margin (%) for the first bedroom type,
# reduced per subsequent type, and the tolerance in percentage points within
# which an achieved margin counts as on target
DEFAULT_TOP_MARGIN = 25.0
MARGIN_STEP_PER_TYPE = 3.0
MARGIN_TOLERANCE = 1.0
