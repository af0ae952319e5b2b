"""PartCart database management CLI.

Provides commands to create and drop database schemas for all domains and
to load the per-country shipping rate table.

Usage:
    python src/manage.py setup-db                 # Create all tables
    python src/manage.py drop-db                  # Drop all tables
    python src/manage.py seed-shipping rates.json # Upsert shipping rates
"""

import argparse
import json
import sys

DOMAIN_NAMES = ["ordering", "pricing"]


def _domains():
    from ordering.domain import ordering
    from pricing.domain import pricing

    return {"ordering": ordering, "pricing": pricing}


def setup_databases(domains=None):
    """Create database schemas for the specified (or all) domains."""
    from shared.db import setup_db

    all_domains = _domains()
    targets = {d: all_domains[d] for d in domains} if domains else all_domains

    for name, domain in targets.items():
        print(f"Initializing {name} domain...")
        domain.init()
        print(f"Creating {name} database schema...")
        touched = setup_db(domain)
        print(f"  {name} schema ready ({', '.join(touched) or 'in-memory, nothing to create'}).")

    print("Done.")


def drop_databases(domains=None):
    """Drop database schemas for the specified (or all) domains."""
    from shared.db import drop_db

    all_domains = _domains()
    targets = {d: all_domains[d] for d in domains} if domains else all_domains

    for name, domain in targets.items():
        print(f"Initializing {name} domain...")
        domain.init()
        print(f"Dropping {name} database schema...")
        drop_db(domain)
        print(f"  {name} schema dropped.")

    print("Done.")


def seed_shipping_rates(path):
    """Upsert shipping rates from a JSON array of {countryCode, countryName, baseRate, ...}."""
    from pricing.domain import pricing
    from pricing.shipping.calculator import ShippingCalculator

    with open(path, encoding="utf-8") as fh:
        rows = json.load(fh)

    pricing.init()
    with pricing.domain_context():
        result = ShippingCalculator().seed_rates(rows)

    print(f"Shipping rates: {result['created']} created, {result['updated']} updated.")


def main():
    from shared.logging import configure_logging

    configure_logging()

    parser = argparse.ArgumentParser(description="PartCart database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    setup_parser = subparsers.add_parser("setup-db", help="Create all database tables")
    setup_parser.add_argument(
        "--domain",
        choices=DOMAIN_NAMES,
        nargs="*",
        help="Specific domain(s) to set up (default: all)",
    )

    drop_parser = subparsers.add_parser("drop-db", help="Drop all database tables")
    drop_parser.add_argument(
        "--domain",
        choices=DOMAIN_NAMES,
        nargs="*",
        help="Specific domain(s) to drop (default: all)",
    )

    seed_parser = subparsers.add_parser("seed-shipping", help="Upsert the shipping rate table")
    seed_parser.add_argument("path", help="JSON file holding a list of shipping rates")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_databases(args.domain)
    elif args.command == "drop-db":
        drop_databases(args.domain)
    elif args.command == "seed-shipping":
        seed_shipping_rates(args.path)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
