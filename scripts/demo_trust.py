# scripts/demo_trust.py
import os, sys
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

import json

from trusthealth.demo_data import demo_input
from trusthealth.engine import compute_trust_health, evaluate_next_best_actions, get_ruleset


def main():
    inp = demo_input()
    results = compute_trust_health(inp)
    ruleset = get_ruleset("v1")
    actions = evaluate_next_best_actions(results, inp.trust, ruleset.rules)

    print(json.dumps(
        {
            "trust_id": inp.trust.id,
            "rules_version": ruleset.version,
            "results": results.model_dump(mode="json"),
            "next_best_actions": actions.model_dump(mode="json"),
        },
        indent=2,
    ))


if __name__ == "__main__":
    main()
