#!/usr/bin/env python3
"""Budget Recurrence CLI - recurring bill and income schedules."""
import argparse
import sys
import logging
from datetime import date
from pathlib import Path

from budget_recurrence.api.schedule_service import ScheduleService
from budget_recurrence.config import DEFAULT_UPCOMING_DAYS, MONTH_FORMAT
from budget_recurrence.schedule.formatting import format_date, format_days_until, format_frequency
from budget_recurrence.schedule.recurrence import parse_iso_date


logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S"
    )


def _open_service(args) -> ScheduleService:
    return ScheduleService(db_path=Path(args.db) if args.db else None)


def cmd_add(args):
    """Add a recurring payment."""
    with _open_service(args) as service:
        category_id = None
        if args.category:
            category = service.store.get_category_by_name(args.category)
            if not category:
                print(f"Error: Category '{args.category}' not found")
                return 1
            category_id = category["id"]

        payment_id = service.store.add_payment(
            name=args.name,
            amount=args.amount,
            frequency=args.frequency,
            start_date=args.start,
            type_="income" if args.income else "expense",
            end_date=args.end,
            category_id=category_id,
            business_days_only=args.business_days,
            last_business_day_of_month=args.last_business_day
        )
        print(f"Added recurring payment {payment_id}: {args.name}")

    return 0


def cmd_list(args):
    """List recurring payments."""
    with _open_service(args) as service:
        payments = service.store.get_payments(include_inactive=args.all)

        if not payments:
            print("No recurring payments.")
            return 0

        for p in payments:
            flags = []
            if p.last_business_day_of_month:
                flags.append("last business day")
            elif p.business_days_only:
                flags.append("business days")
            if not p.is_active:
                flags.append("paused")
            suffix = f" [{', '.join(flags)}]" if flags else ""
            print(f"  ID {p.id:4d} | {p.name:20s} | ${p.amount:10,.2f} {p.type:7s} | "
                  f"{format_frequency(p.frequency)} from {p.start_date}{suffix}")

    return 0


def cmd_next(args):
    """Show the next due date of a payment."""
    from_date = parse_iso_date(args.from_date) if args.from_date else date.today()
    with _open_service(args) as service:
        payment = service.store.get_payment(args.payment_id)
        if not payment:
            print(f"Recurring payment {args.payment_id} not found")
            return 1

        next_date = service.next_date(args.payment_id, from_date)
        if next_date is None:
            print(f"{payment.name}: no further payments")
        else:
            days = (next_date - from_date).days
            print(f"{payment.name}: {next_date} ({format_days_until(days)})")

    return 0


def cmd_dates(args):
    """List the due dates of a payment within a range."""
    start = parse_iso_date(args.start)
    end = parse_iso_date(args.end)
    with _open_service(args) as service:
        payment = service.store.get_payment(args.payment_id)
        if not payment:
            print(f"Recurring payment {args.payment_id} not found")
            return 1

        dates = service.dates_in_range(args.payment_id, start, end)
        print(f"{payment.name}: {len(dates)} payments between {start} and {end}")
        for d in dates:
            print(f"  {d} ({d:%a})")

    return 0


def cmd_upcoming(args):
    """Show payments due soon."""
    as_of = parse_iso_date(args.as_of) if args.as_of else date.today()
    with _open_service(args) as service:
        upcoming = service.upcoming(args.days, as_of=as_of)

        if not upcoming:
            print(f"Nothing due in the next {args.days} days.")
            return 0

        print(f"Due in the next {args.days} days:\n")
        for row in upcoming:
            print(f"  {format_date(row['next_date'], today=as_of):14s} | {row['name']:20s} | "
                  f"${row['amount']:10,.2f} | {format_days_until(row['days_until'])}")

    return 0


def cmd_projection(args):
    """Project recurring income and expenses for a month."""
    month = args.month or date.today().strftime(MONTH_FORMAT)
    with _open_service(args) as service:
        projection = service.projection(month)

        print("=" * 50)
        print(f"RECURRING PROJECTION {month}")
        print("=" * 50)
        print(f"\nIncome:    ${projection['income']:,.2f}")
        print(f"Expenses:  ${projection['expenses']:,.2f}")
        print(f"Net:       ${projection['net']:,.2f}")

        if projection["payments"]:
            print("\n" + "-" * 50)
            for p in projection["payments"]:
                print(f"  {p['date']} | {p['name']:20s} | ${p['amount']:10,.2f} {p['type']}")

    return 0


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Budget Recurrence - recurring bill and income schedules",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  budget-recurrence add "Rent" 1500 monthly 2026-01-01        Add a monthly bill
  budget-recurrence add "Salary" 4000 monthly 2026-01-01 --income --last-business-day
  budget-recurrence list                                     List recurring payments
  budget-recurrence next 1                                   Next due date of payment 1
  budget-recurrence dates 1 2026-01-01 2026-06-30            Due dates within a range
  budget-recurrence upcoming -d 14                           Payments due in two weeks
  budget-recurrence projection 2026-02                       Monthly income/expense projection
"""
    )

    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--db", help="SQLite database path (default: ~/.budget_recurrence/payments.db)")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Add command
    add_parser = subparsers.add_parser("add", help="Add a recurring payment")
    add_parser.add_argument("name", help="Payment name")
    add_parser.add_argument("amount", type=float, help="Amount per occurrence")
    add_parser.add_argument("frequency", help="weekly, biweekly, monthly, quarterly or yearly")
    add_parser.add_argument("start", help="Start date (YYYY-MM-DD)")
    add_parser.add_argument("--end", help="End date (YYYY-MM-DD)")
    add_parser.add_argument("--income", action="store_true", help="Record as income instead of expense")
    add_parser.add_argument("--business-days", action="store_true",
                            help="Move weekend dates to a business day")
    add_parser.add_argument("--last-business-day", action="store_true",
                            help="Due on the last business day of each month")
    add_parser.add_argument("--category", help="Category name")
    add_parser.set_defaults(func=cmd_add)

    # List command
    list_parser = subparsers.add_parser("list", help="List recurring payments")
    list_parser.add_argument("--all", action="store_true", help="Include paused payments")
    list_parser.set_defaults(func=cmd_list)

    # Next command
    next_parser = subparsers.add_parser("next", help="Show next due date")
    next_parser.add_argument("payment_id", type=int, help="Payment ID")
    next_parser.add_argument("--from", dest="from_date", help="Reference date (default: today)")
    next_parser.set_defaults(func=cmd_next)

    # Dates command
    dates_parser = subparsers.add_parser("dates", help="List due dates in a range")
    dates_parser.add_argument("payment_id", type=int, help="Payment ID")
    dates_parser.add_argument("start", help="Range start (YYYY-MM-DD)")
    dates_parser.add_argument("end", help="Range end (YYYY-MM-DD)")
    dates_parser.set_defaults(func=cmd_dates)

    # Upcoming command
    upcoming_parser = subparsers.add_parser("upcoming", help="Show payments due soon")
    upcoming_parser.add_argument("-d", "--days", type=int, default=DEFAULT_UPCOMING_DAYS,
                                 help="Days to look ahead")
    upcoming_parser.add_argument("--as-of", help="Reference date (default: today)")
    upcoming_parser.set_defaults(func=cmd_upcoming)

    # Projection command
    projection_parser = subparsers.add_parser("projection", help="Monthly projection")
    projection_parser.add_argument("month", nargs="?", help="Month (YYYY-MM, default: current)")
    projection_parser.set_defaults(func=cmd_projection)

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if not args.command:
        parser.print_help()
        return 0

    try:
        return args.func(args)
    except ValueError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
