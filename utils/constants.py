"""
Constants used throughout the EcoBlocks API
Intervention strategies, snapshot labels, and other fixed values
"""

from types import MappingProxyType

# ==================== Intervention Strategies ====================

DEFAULT_INTERVENTION = "Green Wall"

INTERVENTION_STRATEGIES = MappingProxyType({
    "Green Wall": MappingProxyType({"reduction_rate": 0.15, "base_cost": 12000}),
    "Algae Panel": MappingProxyType({"reduction_rate": 0.25, "base_cost": 25000}),
    "Direct Air Capture": MappingProxyType({"reduction_rate": 0.45, "base_cost": 80000}),
    "Building Retrofit": MappingProxyType({"reduction_rate": 0.20, "base_cost": 45000}),
    "Biochar": MappingProxyType({"reduction_rate": 0.10, "base_cost": 8000}),
    "Cool Roof + Solar": MappingProxyType({"reduction_rate": 0.22, "base_cost": 35000}),
})

# ==================== Fallback Insight Text ====================

TECH_SPECS = MappingProxyType({
    "Green Wall": "Hydroponic vertical matrix with automated irrigation",
    "Algae Panel": "Bio-reactive photo-bioreactor tubes",
    "Direct Air Capture": "Solid sorbent CO2 filters with fan arrays",
    "Building Retrofit": "High-efficiency HVAC with HEPA filtration",
    "Biochar": "Pyrolyzed organic carbon soil amendment",
    "Cool Roof + Solar": "High-albedo reflective coating with PV integration",
})

DEFAULT_TECH_SPEC = "Standard environmental control unit"

FALLBACK_HEADLINE = "{intervention} Successfully Optimized"

FALLBACK_CONTENT = (
    "Due to high API load, this is a procedural estimation. "
    "The deployment in this {density} density zone is calculated to stabilize AQI around {new_aqi}. "
    "The system detects high particulate matter and has adjusted filtration cycles accordingly."
)

FALLBACK_RECOMMENDATION = "Inspect filters in 14 days and monitor peak traffic hours."

FALLBACK_FORECAST_DAILY_DROP = 0.5
FALLBACK_TRAFFIC_SPEED = 30

# ==================== Traffic Labels ====================

# (upper bound on current/free-flow ratio, label prefix)
TRAFFIC_TIERS = (
    (0.5, "Severe Congestion"),
    (0.75, "Heavy Traffic"),
    (0.9, "Moderate Flow"),
)
TRAFFIC_CLEAR_LABEL = "Clear Flow"

TRAFFIC_ESTIMATE_AQI_THRESHOLD = 100
TRAFFIC_ESTIMATE_HEAVY = "Heavy Traffic (Est)"
TRAFFIC_ESTIMATE_CLEAR = "Clear Roads (Est)"

# ==================== Area Labels ====================

BUILDING_LAYER = "building"
LANDUSE_LAYER = "landuse"
NATURAL_LABEL_LAYER = "natural_label"
NATURE_CLASSES = frozenset({"park", "wood", "scrub"})

URBAN_BUILDING_THRESHOLD = 20
HIGH_DENSITY_THRESHOLD = 30
MEDIUM_DENSITY_THRESHOLD = 10

DENSITY_HIGH = "High (Urban Core)"
DENSITY_MEDIUM = "Medium"
DENSITY_LOW = "Low"

AREA_URBAN = "Urban/Commercial"
AREA_RESIDENTIAL = "Residential"
AREA_SUBURBAN = "Suburban"

# tree count, tree density label
TREES_NATURE = (80, "High")
TREES_RESIDENTIAL = (25, "Moderate")
TREES_SPARSE = (5, "Sparse")
TREES_UNKNOWN = (0, "Low")

# ==================== Traffic History ====================

WEEKEND_SPEED_BOOST = 15
TRAFFIC_JITTER = 5
MIN_TRAFFIC_SPEED = 10

# ==================== Weekly Summary ====================

WEEKS_PER_SUMMARY = 4
DAYS_PER_WEEK = 7
TREND_PAST = "Past"
TREND_CURRENT = "Current"

# ==================== Rewards ====================

REWARD_STATUS_MINTED = "MINTED"
