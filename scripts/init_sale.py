"""
Initialize a token sale in Supabase.

Creates the sale_config row with the given owner and optional overrides.
Refuses to run if a sale already exists (initialization is one-time).
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

# Add parent directory to path so we can import from domain, services, repositories
sys.path.insert(0, str(Path(__file__).parent.parent))

from domain.time import seconds_from_datetime
from services.sale_service import initialize_sale


def _parse_utc(name: str, value: str) -> int:
    """Parse an ISO-8601 UTC timestamp (trailing 'Z' allowed) to epoch seconds."""
    return seconds_from_datetime(name, datetime.fromisoformat(value.replace("Z", "+00:00")))


def main() -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Initialize a token sale in Supabase",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Defaults for everything but the owner
  python init_sale.py owner.near

  # Custom window and price
  python init_sale.py owner.near --start 2025-03-01T00:00:00Z --end 2025-03-08T00:00:00Z --unit-price 100

  # Show what would be written
  python init_sale.py owner.near --dry-run
        """
    )

    parser.add_argument("owner_id", help="Account allowed to change the sale configuration")
    parser.add_argument("--treasury", help="Treasury account")
    parser.add_argument("--token-contract", help="Linked token contract account")
    parser.add_argument("--unit-price", type=int, help="Price per sale unit (smallest currency unit)")
    parser.add_argument("--start", help="Sale start, ISO-8601 UTC")
    parser.add_argument("--end", help="Sale end, ISO-8601 UTC")
    parser.add_argument("--cap", type=int, help="Total units offered")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Build the sale without writing to the database"
    )

    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        overrides = {}
        if args.treasury:
            overrides["treasury_id"] = args.treasury
        if args.token_contract:
            overrides["token_contract_id"] = args.token_contract
        if args.unit_price is not None:
            overrides["unit_price"] = args.unit_price
        if args.start:
            overrides["start_time"] = _parse_utc("start", args.start)
        if args.end:
            overrides["end_time"] = _parse_utc("end", args.end)
        if args.cap is not None:
            overrides["total_sale_cap"] = args.cap

        state = initialize_sale(args.owner_id, **overrides)
        config = state.config

        print(f"Owner:          {config.owner_id}")
        print(f"Treasury:       {config.treasury_id}")
        print(f"Token contract: {config.token_contract_id}")
        print(f"Unit price:     {config.unit_price}")
        print(f"Window:         [{config.start_time}, {config.end_time})")
        print(f"Cap:            {config.total_sale_cap}")

        if args.dry_run:
            print("\n[DRY RUN] Nothing written")
            return 0

        from repositories.sale_state_repository import load_sale_state, save_sale_state

        if load_sale_state() is not None:
            print("\n[ERROR] A sale is already initialized", file=sys.stderr)
            return 1

        save_sale_state(state)
        print("\n[SUCCESS] Sale initialized")
        return 0

    except ValueError as e:
        print(f"\n[ERROR] {e}", file=sys.stderr)
        return 2

    except Exception as e:
        print(f"\nFATAL ERROR: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
