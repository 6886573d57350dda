# trusthealth/engine/__init__.py
from .compute import compute_trust_health
from .rules import calculate_priority, evaluate_next_best_actions
from .ruleset import get_ruleset, load_ruleset
