from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models.credit_ledger import CreditLedgerEntry
from ...models.organization import Organization
from ...platform.errors import NotFound

logger = logging.getLogger("introbridge.credits")


@dataclass
class DebitResult:
    ok: bool
    remaining: int
    entry: CreditLedgerEntry | None = None


class CreditLedger:
    """Introduction-credit balance of an organization.

    The balance column is only ever changed here, through single conditional
    UPDATE statements, and every change appends a ledger entry. Nothing in this
    class commits: callers own the transaction so that a debit and the row it
    pays for are committed or rolled back together.
    """

    def __init__(self, db: Session):
        self.db = db

    def balance(self, organization_id: int) -> int:
        value = self.db.execute(
            select(Organization.introduction_credit_balance).where(Organization.id == organization_id)
        ).scalar_one_or_none()
        if value is None:
            raise NotFound("Organization not found")
        return int(value)

    def try_debit(
        self,
        organization_id: int,
        amount: int = 1,
        *,
        reason: str = "introduction_sent",
        metadata: dict[str, Any] | None = None,
    ) -> DebitResult:
        if amount <= 0:
            raise ValueError("debit amount must be positive")

        result = self.db.execute(
            update(Organization)
            .where(
                Organization.id == organization_id,
                Organization.introduction_credit_balance >= amount,
            )
            .values(introduction_credit_balance=Organization.introduction_credit_balance - amount)
            .execution_options(synchronize_session=False)
        )
        remaining = self._reload_balance(organization_id)
        if result.rowcount != 1:
            logger.warning(
                "Insufficient introduction credits (balance=%s required=%s)",
                remaining,
                amount,
                extra={"organization_id": organization_id},
            )
            return DebitResult(ok=False, remaining=remaining)

        entry = self._append(
            organization_id,
            delta=-amount,
            balance_after=remaining,
            reason=reason,
            metadata=metadata,
        )
        return DebitResult(ok=True, remaining=remaining, entry=entry)

    def credit(
        self,
        organization_id: int,
        amount: int,
        *,
        reason: str,
        external_ref: str | None = None,
        introduction_id: int | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> tuple[CreditLedgerEntry, bool]:
        """Add credits. Returns ``(entry, created)``; replays of ``external_ref`` are no-ops.

        The balance update and the entry share a savepoint, so a grant that
        loses a race for ``external_ref`` leaves the balance untouched and
        returns the entry that won.
        """
        if amount <= 0:
            raise ValueError("credit amount must be positive")
        if external_ref:
            existing = self._entry_for_ref(external_ref)
            if existing:
                return existing, False

        try:
            with self.db.begin_nested():
                result = self.db.execute(
                    update(Organization)
                    .where(Organization.id == organization_id)
                    .values(introduction_credit_balance=Organization.introduction_credit_balance + amount)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    raise NotFound("Organization not found")
                entry = self._append(
                    organization_id,
                    delta=amount,
                    balance_after=self._reload_balance(organization_id),
                    reason=reason,
                    external_ref=external_ref,
                    introduction_id=introduction_id,
                    metadata=metadata,
                )
        except IntegrityError:
            existing = self._entry_for_ref(external_ref) if external_ref else None
            if existing is None:
                raise
            # Refresh any Organization loaded inside the discarded savepoint
            self._reload_balance(organization_id)
            logger.info(
                "Credit replay resolved by unique ref reason=%s",
                reason,
                extra={"organization_id": organization_id},
            )
            return existing, False
        logger.info(
            "Credited %s introduction credits reason=%s",
            amount,
            reason,
            extra={"organization_id": organization_id},
        )
        return entry, True

    def _entry_for_ref(self, external_ref: str) -> CreditLedgerEntry | None:
        return (
            self.db.query(CreditLedgerEntry)
            .filter(CreditLedgerEntry.external_ref == external_ref)
            .first()
        )

    def entries(self, organization_id: int, *, limit: int = 100) -> list[CreditLedgerEntry]:
        return (
            self.db.query(CreditLedgerEntry)
            .filter(CreditLedgerEntry.organization_id == organization_id)
            .order_by(CreditLedgerEntry.id.desc())
            .limit(limit)
            .all()
        )

    def _reload_balance(self, organization_id: int) -> int:
        # populate_existing refreshes any Organization already in the identity map
        org = self.db.execute(
            select(Organization)
            .where(Organization.id == organization_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if org is None:
            raise NotFound("Organization not found")
        return int(org.introduction_credit_balance or 0)

    def _append(
        self,
        organization_id: int,
        *,
        delta: int,
        balance_after: int,
        reason: str,
        external_ref: str | None = None,
        introduction_id: int | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> CreditLedgerEntry:
        entry = CreditLedgerEntry(
            organization_id=organization_id,
            delta=int(delta),
            balance_after=int(balance_after),
            reason=reason,
            external_ref=external_ref,
            introduction_id=introduction_id,
            entry_metadata=metadata or {},
        )
        self.db.add(entry)
        self.db.flush()
        return entry
