"""Menu photo to budget-constrained dish recommendations."""

from .budget import BudgetPlanner, create_planner
from .cache import RecommendationCache, SessionCacheStore, compute_menu_hash
from .config import MenuConfig, load_config
from .controller import MenuRecommender
from .errors import MenuAnalysisError
from .hard_filter import apply_hard_filter, matches_word
from .models import (
    FilterDebug,
    FilterResult,
    MenuInfo,
    MenuItem,
    PlanItem,
    RecommendationPlan,
    RecommendationResult,
)
from .tags import (
    build_dynamic_hard_terms,
    determine_final_tags,
    map_profile_dining_style_to_tags,
    normalize_tags,
    parse_dynamic_negative_keys,
    split_hard_soft_tags,
    tags_hash,
)
from .vision import MenuExtractor, create_extractor

__all__ = [
    "MenuRecommender",
    "MenuExtractor",
    "create_extractor",
    "BudgetPlanner",
    "create_planner",
    "RecommendationCache",
    "SessionCacheStore",
    "compute_menu_hash",
    "apply_hard_filter",
    "matches_word",
    "normalize_tags",
    "parse_dynamic_negative_keys",
    "build_dynamic_hard_terms",
    "split_hard_soft_tags",
    "tags_hash",
    "map_profile_dining_style_to_tags",
    "determine_final_tags",
    "MenuItem",
    "MenuInfo",
    "PlanItem",
    "RecommendationPlan",
    "FilterDebug",
    "FilterResult",
    "RecommendationResult",
    "MenuAnalysisError",
    "MenuConfig",
    "load_config",
]
