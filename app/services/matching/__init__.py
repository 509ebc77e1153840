"""Transaction matching engine."""

from .check import CheckNumberMatcher
from .confidence import CombineRule, MatchResult, MatchStage, MatchStatus
from .engine import MatchingEngine, ReconciliationRun
from .heuristic import HeuristicMatcher
from .known_vendor import KnownVendorMatcher
from .overlay import FeatureOverlayMatcher
from .relaxed import RelaxedMatcher
from .rules import DEFAULT_RULES, KnownVendorRule, RuleSet, load_rules
from .vendors import VendorInference, VendorKnowledgeBase, VendorProfile

__all__ = [
    "CheckNumberMatcher",
    "CombineRule",
    "DEFAULT_RULES",
    "FeatureOverlayMatcher",
    "HeuristicMatcher",
    "KnownVendorMatcher",
    "KnownVendorRule",
    "MatchResult",
    "MatchStage",
    "MatchStatus",
    "MatchingEngine",
    "ReconciliationRun",
    "RelaxedMatcher",
    "RuleSet",
    "VendorInference",
    "VendorKnowledgeBase",
    "VendorProfile",
    "load_rules",
]
