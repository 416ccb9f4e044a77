"""Out-of-band payment reconciliation.

Catches the orders whose confirmation callback never arrived (or arrived and
failed): every PENDING, unconfirmed order older than a cutoff is checked
against the gateway's own record, and captured payments are confirmed through
the same fulfillment unit the callback uses.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import structlog
from protean.exceptions import ProteanException
from protean.utils.globals import current_domain

from storefront.errors import error_message
from storefront.fulfillment.coordinator import FulfillmentCoordinator
from storefront.gateway.port import PaymentGateway
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


@dataclass
class ReconciliationReport:
    checked: int = 0
    confirmed: list[str] = field(default_factory=list)
    still_pending: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class PaymentReconciler:
    def __init__(self, gateway: PaymentGateway, coordinator: FulfillmentCoordinator, batch_size: int = 100) -> None:
        self._gateway = gateway
        self._coordinator = coordinator
        self._batch_size = batch_size

    def stale_references(self, older_than: timedelta) -> list[str]:
        cutoff = datetime.now(UTC) - older_than
        orders = current_domain.repository_for(Order).stale_pending(cutoff, limit=self._batch_size)
        return [order.payment_reference for order in orders]

    def run(self, older_than: timedelta, dry_run: bool = False) -> ReconciliationReport:
        report = ReconciliationReport()
        references = self.stale_references(older_than)
        logger.info("Reconciliation started", pending_orders=len(references), dry_run=dry_run)

        for reference in references:
            report.checked += 1
            status = self._gateway.fetch_payment_status(reference)

            if not status.success:
                logger.warning(
                    "Reconciliation lookup failed",
                    gateway_order_ref=reference,
                    status_code=status.status_code,
                    reason=status.failure_reason,
                )
                report.failed.append(reference)
                continue

            if not status.captured:
                report.still_pending.append(reference)
                continue

            if dry_run:
                logger.info("Reconciliation would confirm payment", gateway_order_ref=reference)
                report.confirmed.append(reference)
                continue

            try:
                self._coordinator.confirm_verified(reference, status.gateway_payment_ref)
            except ProteanException as exc:
                logger.error("Reconciliation confirm failed", gateway_order_ref=reference, error=error_message(exc))
                report.failed.append(reference)
                continue

            logger.info(
                "Reconciliation confirmed payment",
                gateway_order_ref=reference,
                gateway_payment_ref=status.gateway_payment_ref,
            )
            report.confirmed.append(reference)

        logger.info(
            "Reconciliation finished",
            checked=report.checked,
            confirmed=len(report.confirmed),
            still_pending=len(report.still_pending),
            failed=len(report.failed),
        )
        return report
