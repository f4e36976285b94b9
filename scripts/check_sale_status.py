"""
Check the persisted sale state.

Prints the configuration, aggregate progress, pending claims and transfers,
and verifies the ledger conservation rule:

    current_sale == sum(purchases) + sum(pending claim units) + claimed_units

Exit code 1 when the rule does not hold.
"""

import argparse
import sys
from pathlib import Path

# Add parent directory to path so we can import from domain, services, repositories
sys.path.insert(0, str(Path(__file__).parent.parent))

from domain.time import datetime_from_seconds
from repositories.sale_state_repository import load_sale_state
from services.sale_service import get_status


def main() -> int:
    parser = argparse.ArgumentParser(description="Check the persisted token sale state")
    parser.add_argument(
        "--accounts",
        action="store_true",
        help="List every account with unclaimed units"
    )
    args = parser.parse_args()

    state = load_sale_state()
    if state is None:
        print("No sale initialized")
        return 1

    config = state.config
    ledger = state.ledger
    status = get_status(state)

    print("=" * 60)
    print("SALE STATUS")
    print("=" * 60)
    print(f"Owner:          {config.owner_id}")
    print(f"Treasury:       {config.treasury_id}")
    print(f"Token contract: {config.token_contract_id}")
    print(f"Unit price:     {config.unit_price}")
    print(f"Start:          {datetime_from_seconds(config.start_time).isoformat()}")
    print(f"End:            {datetime_from_seconds(config.end_time).isoformat()}")
    print()
    print(f"Sold:           {status.current_sale} / {status.total_sale_cap}")
    print(f"Unclaimed:      {sum(ledger.entries().values())} units in {len(ledger.entries())} accounts")
    print(f"Pending claims: {len(ledger.pending_claims())}")
    print(f"Claimed:        {ledger.claimed_units}")
    print(f"Transfers:      {len(state.outbox.pending())} pending of {len(state.outbox.requests)}")

    if args.accounts:
        print()
        for account_id, units in sorted(ledger.entries().items()):
            print(f"  {account_id}: {units}")

    print()
    if ledger.is_conserved():
        print("[OK] Ledger is conserved")
        return 0

    print("[FAIL] Ledger totals do not add up to current_sale")
    return 1


if __name__ == "__main__":
    sys.exit(main())
