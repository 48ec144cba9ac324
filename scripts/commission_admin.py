#!/usr/bin/env python3
"""
Operator tool for commission payments.

Usage:
    python scripts/commission_admin.py create --deal 12 --amount 1000.00 --admin 1
    python scripts/commission_admin.py approve --payment 7 --admin 1
    python scripts/commission_admin.py mark-paid --payment 7 --admin 1 --reference BACS-001
    python scripts/commission_admin.py status --deal 12
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger

from partnerconnector.config.database import create_engine, create_session_maker
from partnerconnector.config.logging import setup_logging
from partnerconnector.services.commission import (
    CommissionDistributionService,
    DatabaseNotificationDispatcher,
)
from partnerconnector.utils.exceptions import CommissionError


async def run(args: argparse.Namespace) -> int:
    """Execute one subcommand, returning the process exit code."""
    engine = create_engine()
    session_maker = create_session_maker(engine)
    notifier = DatabaseNotificationDispatcher(session_maker)

    try:
        async with session_maker() as session:
            service = CommissionDistributionService(session, notifier=notifier)

            if args.command == "create":
                payment = await service.create_commission(
                    args.deal,
                    args.amount,
                    created_by=args.admin,
                    evidence_url=args.evidence,
                    notes=args.notes,
                )
                logger.success(
                    f"Commission payment {payment.id} created for deal "
                    f"{payment.deal_id}: {payment.gross_amount} {payment.currency}"
                )

            elif args.command == "approve":
                result = await service.approve_payment(args.payment, args.admin)
                logger.success(
                    f"Payment {result.payment_id} approved via {result.flow.value}"
                )

            elif args.command == "mark-paid":
                result = await service.mark_paid(
                    args.payment, args.admin, args.reference
                )
                logger.success(
                    f"Payment {result.payment_id} marked paid, "
                    f"reference {result.transfer_reference}"
                )

            elif args.command == "status":
                view = await service.get_payment_status(args.deal)
                if not view.has_payment:
                    logger.info(f"Deal {args.deal} has no active commission")
                else:
                    payment = view.payment
                    logger.info(
                        f"Payment {payment.id}: approval={payment.approval_status} "
                        f"payment={payment.payment_status} "
                        f"gross={payment.gross_basis}"
                    )
                    for split in view.splits:
                        logger.info(
                            f"  level {split.level}: user {split.beneficiary_user_id} "
                            f"{split.amount} ({split.percentage}%) {split.status}"
                        )

    except CommissionError as e:
        logger.error(f"{e.code}: {e.message}")
        return 1
    finally:
        await engine.dispose()

    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build command line parser."""
    parser = argparse.ArgumentParser(
        description="Create, approve and pay partner commissions"
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override LOG_LEVEL for this run",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    create = subparsers.add_parser("create", help="Finalize a deal's commission")
    create.add_argument("--deal", type=int, required=True, help="Deal ID")
    create.add_argument("--amount", required=True, help="Gross commission, e.g. 1000.00")
    create.add_argument("--admin", type=int, required=True, help="Admin user ID")
    create.add_argument("--evidence", default=None, help="Evidence URL")
    create.add_argument("--notes", default=None, help="Admin notes")

    approve = subparsers.add_parser("approve", help="Approve a payment")
    approve.add_argument("--payment", type=int, required=True, help="Payment ID")
    approve.add_argument("--admin", type=int, required=True, help="Admin user ID")

    paid = subparsers.add_parser("mark-paid", help="Mark an approved payment paid")
    paid.add_argument("--payment", type=int, required=True, help="Payment ID")
    paid.add_argument("--admin", type=int, required=True, help="Admin user ID")
    paid.add_argument("--reference", default=None, help="Bank transfer reference")

    status = subparsers.add_parser("status", help="Show a deal's commission")
    status.add_argument("--deal", type=int, required=True, help="Deal ID")

    return parser


def main() -> None:
    """Main entry point."""
    args = build_parser().parse_args()
    setup_logging(args.log_level)
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
