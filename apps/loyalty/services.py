"""Loyalty card ledger on the Django ORM."""

from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction  # type: ignore

from apps.loyalty.domain.exceptions import InsufficientFundsError
from apps.loyalty.domain.ledger import AbstractLoyaltyLedger, LedgerResult
from apps.loyalty.domain.tiers import MembershipTier
from shared.domain.exceptions import ValidationError
from shared.domain.value_objects import Money

from .models import LedgerEntry, LoyaltyCard

logger = logging.getLogger(__name__)


def find_card(user_id: str) -> LoyaltyCard | None:
    return LoyaltyCard.objects.filter(user_id=str(user_id)).first()


def get_or_create_card(user_id: str, *, lock: bool = False) -> LoyaltyCard:
    """Return the user's card, opening a Bronze card with zero balance on first use."""

    card, created = LoyaltyCard.objects.get_or_create(user_id=str(user_id))
    if created:
        logger.info(f"Opened loyalty card for user {user_id}")
    if lock:
        card = LoyaltyCard.objects.select_for_update().get(pk=card.pk)
    return card


class DjangoLoyaltyLedger(AbstractLoyaltyLedger):
    """
    Every movement runs in its own atomic block with the card row locked,
    and leaves a LedgerEntry with the balance before and after.
    """

    def get_balance(self, user_id: str) -> Money:
        return Money(get_or_create_card(user_id).balance)

    def get_tier(self, user_id: str) -> MembershipTier:
        return MembershipTier.parse(get_or_create_card(user_id).membership_level)

    def set_tier(self, user_id: str, tier: MembershipTier | str) -> MembershipTier:
        tier = MembershipTier.parse(tier)
        with transaction.atomic():
            card = get_or_create_card(user_id, lock=True)
            card.membership_level = tier.value
            card.save(update_fields=["membership_level", "updated_at"])
        logger.info(f"User {user_id} moved to {tier.value} tier")
        return tier

    def debit(self, user_id: str, amount: Money, reason: str, booking_id=None) -> LedgerResult:
        return self._move(
            user_id, amount, LedgerEntry.Kind.DEBIT, reason, booking_id,
            spent=amount.amount,
        )

    def credit(self, user_id: str, amount: Money, reason: str, booking_id=None) -> LedgerResult:
        return self._move(user_id, amount, LedgerEntry.Kind.CREDIT, reason, booking_id)

    def credit_cashback(self, user_id: str, amount: Money, booking_id=None) -> LedgerResult:
        return self._move(
            user_id, amount, LedgerEntry.Kind.CASHBACK,
            f"Cashback for booking {booking_id}", booking_id,
            earned=amount.amount,
        )

    def debit_cashback(self, user_id: str, amount: Money, booking_id=None) -> LedgerResult:
        return self._move(
            user_id, amount, LedgerEntry.Kind.CASHBACK_CLAWBACK,
            f"Cashback reversal for booking {booking_id}", booking_id,
            earned=-amount.amount,
        )

    def _move(
        self,
        user_id: str,
        amount: Money,
        kind: str,
        reason: str,
        booking_id,
        *,
        spent: Decimal = Decimal("0"),
        earned: Decimal = Decimal("0"),
    ) -> LedgerResult:
        if not isinstance(amount, Money):
            raise ValidationError(f"Ledger amount must be Money, got {amount!r}")

        outgoing = kind in (LedgerEntry.Kind.DEBIT, LedgerEntry.Kind.CASHBACK_CLAWBACK)

        with transaction.atomic():
            card = get_or_create_card(user_id, lock=True)
            balance_before = card.balance

            if outgoing:
                if balance_before < amount.amount:
                    logger.warning(
                        f"Insufficient balance for user {user_id}: "
                        f"{balance_before}, required {amount.amount}"
                    )
                    raise InsufficientFundsError(balance=balance_before, required=amount.amount)
                card.balance = balance_before - amount.amount
            else:
                card.balance = balance_before + amount.amount

            card.total_spent += spent
            card.total_earned = max(card.total_earned + earned, Decimal("0"))
            card.save(update_fields=["balance", "total_spent", "total_earned", "updated_at"])

            LedgerEntry.objects.create(
                card=card,
                kind=kind,
                amount=amount.amount,
                reason=reason[:255],
                balance_before=balance_before,
                balance_after=card.balance,
                booking_id=booking_id,
            )

        logger.info(
            f"Ledger {kind} of {amount} for user {user_id}: "
            f"{balance_before} -> {card.balance}"
        )
        return LedgerResult(new_balance=Money(card.balance))
