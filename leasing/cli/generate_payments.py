"""CLI entry point for monthly payment generation.

Creates pending payment records for every active schedule entry. Meant to
run once a month from cron; rerunning for the same month creates nothing new.

Usage:
    python -m leasing.cli.generate_payments            # current month
    python -m leasing.cli.generate_payments 2025-04    # specific month

Exit Codes:
    0 - Success: every schedule processed (created or skipped)
    1 - Failure: at least one schedule failed, or the month was invalid
"""

import asyncio
import logging
import sys
from datetime import date

from leasing.services.logging import setup_logging

logger = logging.getLogger(__name__)


def parse_month(value: str | None, today: date | None = None) -> date:
    """Parse ``YYYY-MM`` into the first day of that month; None means the current month."""
    if not value:
        today = today or date.today()
        return today.replace(day=1)
    year_text, _, month_text = value.strip().partition("-")
    try:
        return date(int(year_text), int(month_text), 1)
    except ValueError as e:
        raise ValueError(f"Invalid month '{value}', expected YYYY-MM") from e


async def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for payment generation CLI.

    Returns:
        Exit code: 0 for success, 1 for failure
    """
    setup_logging()
    args = sys.argv[1:] if argv is None else argv

    try:
        target_month = parse_month(args[0] if args else None)
    except ValueError as e:
        logger.error(str(e))
        return 1

    try:
        from leasing.services import AsyncSessionLocal
        from leasing.services.payment_generation_service import PaymentGenerationService

        async with AsyncSessionLocal() as session:
            stats = await PaymentGenerationService(session).generate_for_month(target_month)
    except KeyboardInterrupt:
        logger.warning("Payment generation interrupted by user")
        return 1
    except Exception as e:
        logger.error(f"Payment generation failed: {e}", exc_info=True)
        return 1

    logger.info(
        f"Generation summary for {target_month:%Y-%m}: "
        f"processed={stats.schedules_processed} created={stats.payments_created} "
        f"skipped={stats.payments_skipped} errors={stats.errors}"
    )
    if stats.errors:
        logger.warning("Some payments failed to generate, see errors above")
        return 1
    return 0


def run() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
