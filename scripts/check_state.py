#!/usr/bin/env python
"""
Quick diagnostic script to check worker state and ledger.

Run: python scripts/check_state.py
"""

import os
import sys
from datetime import datetime

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from scout.services.scheduler import next_start
from scout.services.state_store import Ledger, StateStore
from scout.worker import load_config


def main():
    config = load_config()
    if config is None:
        return 1

    state = StateStore(config.state_path).load()
    ids = Ledger(config.ledger_path).read_ids()

    print("=" * 60)
    print("CAPTION SCOUT STATE")
    print("=" * 60)

    print(f"\nState file:          {config.state_path}")
    print(f"Last completed day:  {state.last_completed_day or 'never'}")
    print(f"Next page token:     {state.cursor or '(first page)'}")
    print(f"Next session:        {next_start(state.last_completed_day, datetime.now(), config.work_hour)}")

    print(f"\nLedger file:         {config.ledger_path}")
    print(f"Recorded ids:        {len(ids)}")
    duplicates = len(ids) - len(set(ids))
    if duplicates:
        print(f"Duplicate ids:       {duplicates} (rounds replayed after a crash)")

    print(f"\nQuota per day:       {config.daily_quota}")
    print(f"Cost per round:      {config.round_cost}")
    print(f"Rounds per day:      {config.rounds_per_day}")
    print(f"Required languages:  {', '.join(config.required_languages)}")

    if not os.path.exists(config.token_path):
        print(f"\n⚠️  No token at {config.token_path}; the first run will prompt for authorization")

    print("\n" + "=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
