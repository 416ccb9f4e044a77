"""Payment reconciliation CLI.

Confirms PENDING orders whose payment the gateway reports as captured but
whose confirmation callback never landed. Run it from cron, never from the
request path.

Usage:
    python src/reconcile.py                         # orders older than RECONCILE_AFTER_MINUTES
    python src/reconcile.py --older-than-minutes 60
    python src/reconcile.py --dry-run               # report only, change nothing
"""

import argparse
import sys
from datetime import timedelta

from storefront.config import Settings
from storefront.container import Container
from storefront.domain import init_domain


def print_report(report, dry_run: bool) -> None:
    title = "Reconciliation (dry run)" if dry_run else "Reconciliation"
    print(f"\n{'='*60}")
    print(f"  {title}")
    print(f"{'='*60}")
    print(f"  Checked:        {report.checked}")
    for label, refs in (
        ("Confirmed", report.confirmed),
        ("Still pending", report.still_pending),
        ("Failed", report.failed),
    ):
        print(f"  {label + ':':<15} {len(refs)}")
        for ref in refs:
            print(f"    - {ref}")
    print(f"{'='*60}\n")


def main(argv=None) -> int:
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(description="Reconcile pending orders against the payment gateway")
    parser.add_argument(
        "--older-than-minutes",
        type=int,
        default=settings.reconcile_after_minutes,
        help=f"Only check orders created more than this many minutes ago (default: {settings.reconcile_after_minutes})",
    )
    parser.add_argument("--dry-run", action="store_true", help="Report what would be confirmed without confirming")
    args = parser.parse_args(argv)

    domain = init_domain(settings)
    container = Container.build(settings)
    with domain.domain_context():
        report = container.reconciler.run(timedelta(minutes=args.older_than_minutes), dry_run=args.dry_run)

    print_report(report, args.dry_run)
    return 1 if report.failed else 0


if __name__ == "__main__":
    sys.exit(main())
