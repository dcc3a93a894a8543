"""Run one NetSuite -> HubSpot AR sync from the command line.

Env vars (required):
- NETSUITE_ACCOUNT_ID, NETSUITE_CONSUMER_KEY, NETSUITE_CONSUMER_SECRET
- NETSUITE_TOKEN_ID, NETSUITE_TOKEN_SECRET
- HUBSPOT_ACCESS_TOKEN

Optional:
- NAME_MATCH_POLICY (exact|first_token)  [default: exact]
- UNMATCHED_POLICY (create|skip)         [default: create]

Run:
  python scripts/run_ar_sync.py --unmatched skip
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
from pathlib import Path
import sys

from dotenv import load_dotenv


# Ensure `import src.*` works when running as `python scripts/...` from repo root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.arsync.config.settings import NameMatchPolicy, SyncSettings, UnmatchedPolicy
from src.arsync.errors import AuthConfigError
from src.arsync.use_cases.ar_sync import build_ar_sync_service


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--name-policy",
        choices=[p.value for p in NameMatchPolicy],
        help="Override NAME_MATCH_POLICY",
    )
    parser.add_argument(
        "--unmatched",
        choices=[p.value for p in UnmatchedPolicy],
        help="Override UNMATCHED_POLICY",
    )
    args = parser.parse_args()

    # Avoid python-dotenv find_dotenv() issues in inline execution contexts.
    load_dotenv(dotenv_path=".env", override=False)

    try:
        settings = SyncSettings.from_env()
    except AuthConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    overrides = {}
    if args.name_policy:
        overrides["name_match_policy"] = NameMatchPolicy(args.name_policy)
    if args.unmatched:
        overrides["unmatched_policy"] = UnmatchedPolicy(args.unmatched)
    if overrides:
        settings = dataclasses.replace(settings, **overrides)

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    outcome = build_ar_sync_service(settings).run_sync()
    print(json.dumps(outcome.as_dict(), indent=2))
    return 1 if outcome.errors else 0


if __name__ == "__main__":
    raise SystemExit(main())
