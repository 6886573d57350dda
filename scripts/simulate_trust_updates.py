# scripts/simulate_trust_updates.py
"""
Walk a running server through a client's funding work on the demo trust:
one change at a time, recomputing and printing the top actions after each.
"""
import os, sys
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

import uuid

import requests

from trusthealth.demo_data import demo_payload

BASE_URL = os.getenv("TRUSTHEALTH_URL", "http://localhost:8000")


def _set_asset(body, asset_id, **fields):
    for a in body["assets"]:
        if a["id"] == asset_id:
            a.update(fields)


def _set_doc(body, doc_id, **fields):
    for d in body["documents"]:
        if d["id"] == doc_id:
            d.update(fields)


# (trigger, description, mutation)
STEPS = [
    ("manual", "initial intake", lambda b: None),
    ("asset_change", "rental retitled to the trust",
     lambda b: _set_asset(b, "asset-002", funding_status="funded")),
    ("document_change", "rental deed recorded",
     lambda b: _set_doc(b, "doc-008", status="complete")),
    ("document_change", "financial POA signed",
     lambda b: _set_doc(b, "doc-003", status="complete")),
    ("asset_change", "LLC interest assigned",
     lambda b: _set_asset(b, "asset-006", funding_status="funded")),
    ("schedule", "nightly recompute, nothing changed", lambda b: None),
]


def run_simulation():
    trust_id = f"sim-{uuid.uuid4()}"
    body = demo_payload()
    body["trust"]["id"] = trust_id

    print(f"Simulating updates for {trust_id}")
    for i, (trigger, label, mutate) in enumerate(STEPS, start=1):
        mutate(body)
        res = requests.post(f"{BASE_URL}/trusts/{trust_id}/compute", params={"trigger": trigger}, json=body)
        if res.status_code != 200:
            print(f"[{i}] compute failed: {res.status_code} {res.text}")
            return
        comp = res.json()
        r = comp["results"]

        nba = requests.post(f"{BASE_URL}/trusts/{trust_id}/nba").json()
        top = ", ".join(a["rule_id"] for a in nba["top3"]) or "-"
        cached = " (cached)" if comp["cached"] else ""

        print(
            f"[{i}] {label}: v{comp['version']}{cached} | "
            f"funded {r['funding_coverage_value_pct']}% | "
            f"probate ${r['probate_exposure_amount']:,.0f} | "
            f"flags {len(r['red_flags'])} | top3 {top}"
        )

    print("Simulation complete.")


if __name__ == "__main__":
    try:
        requests.get(f"{BASE_URL}/", timeout=5)
    except requests.ConnectionError:
        print("Server not running!")
        sys.exit(1)

    run_simulation()
