# trusthealth/engine/ruleset.py
"""
Versioned next-best-action rule tables.

Rules are data: each version lives in ``nba_rules_<version>.json`` beside
this module and is validated into a ``RuleSet`` on load.
"""
import json
import logging
from functools import lru_cache
from pathlib import Path

from pydantic import ValidationError

from ..errors import RulesetNotFound
from ..schemas import RuleSet

logger = logging.getLogger("trusthealth")

RULES_DIR = Path(__file__).resolve().parent


def ruleset_path(version: str) -> Path:
    return RULES_DIR / f"nba_rules_{version}.json"


def load_ruleset(path: Path) -> RuleSet:
    """
    Raises:
        RulesetNotFound: the file does not exist
        ValueError: the file is not JSON or does not match the rule schema
    """
    if not path.exists():
        raise RulesetNotFound(f"Rule set file missing: {path}")

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        ruleset = RuleSet.model_validate(data)
    except json.JSONDecodeError as e:
        raise ValueError(f"Rule set is not valid JSON: {e}")
    except ValidationError as e:
        raise ValueError(f"Rule set does not match schema: {e}")

    ids = [r.rule_id for r in ruleset.rules]
    if len(ids) != len(set(ids)):
        raise ValueError(f"Rule set {ruleset.version} has duplicate rule ids")

    logger.info(f"Rule set {ruleset.version} loaded: {len(ruleset.rules)} rules")
    return ruleset


@lru_cache(maxsize=8)
def get_ruleset(version: str = "v1") -> RuleSet:
    return load_ruleset(ruleset_path(version))
