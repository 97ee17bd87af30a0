"""Registration database management CLI.

Creates and drops the database schema of the registration domain using
the setup_db/drop_db utilities, and manages promo codes.

Usage:
    python src/manage.py setup-db                  # Create all tables
    python src/manage.py drop-db                   # Drop all tables
    python src/manage.py add-discount CODE 15      # Add a 15% promo code
    python src/manage.py deactivate-discount CODE  # Stop accepting a promo code
"""

import argparse
import sys


def setup_databases():
    """Create database schemas for the registration domain."""
    from registration.domain import registration
    from registration.utils.db import setup_db

    print("Initializing registration domain...")
    registration.init()
    print("Creating registration database schema...")
    touched = setup_db(registration)
    print(f"  schema ready ({', '.join(touched) or 'no relational providers'}).")
    print("Done.")


def drop_databases():
    """Drop database schemas for the registration domain."""
    from registration.domain import registration
    from registration.utils.db import drop_db

    print("Initializing registration domain...")
    registration.init()
    print("Dropping registration database schema...")
    touched = drop_db(registration)
    print(f"  schema dropped ({', '.join(touched) or 'no relational providers'}).")
    print("Done.")


def add_discount(code, percentage):
    """Persist a new promo code."""
    from registration.discount.discount import DiscountCode
    from registration.domain import registration

    registration.init()
    with registration.domain_context():
        discount = DiscountCode.create(code=code, discount_percentage=percentage)
        registration.repository_for(DiscountCode).add(discount)
    print(f"Discount code {discount.code} ({discount.discount_percentage}%) added.")


def deactivate_discount(code):
    """Stop accepting a promo code."""
    from registration.discount.discount import DiscountCode
    from registration.domain import registration

    registration.init()
    with registration.domain_context():
        repo = registration.repository_for(DiscountCode)
        discount = repo.find_by_code(code)
        if discount is None:
            print(f"Discount code {code} does not exist.")
            sys.exit(1)
        discount.deactivate()
        repo.add(discount)
    print(f"Discount code {code} deactivated.")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Registration database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    discount_parser = subparsers.add_parser("add-discount", help="Add a promo code")
    discount_parser.add_argument("code")
    discount_parser.add_argument("percentage", type=int)

    deactivate_parser = subparsers.add_parser("deactivate-discount", help="Deactivate a promo code")
    deactivate_parser.add_argument("code")

    args = parser.parse_args(argv)

    if args.command == "setup-db":
        setup_databases()
    elif args.command == "drop-db":
        drop_databases()
    elif args.command == "add-discount":
        add_discount(args.code, args.percentage)
    elif args.command == "deactivate-discount":
        deactivate_discount(args.code)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
