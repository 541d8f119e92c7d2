"""Integration tests for loyalty card API endpoints."""

from __future__ import annotations

from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.loyalty.models import LedgerEntry, LoyaltyCard
from apps.loyalty.services import DjangoLoyaltyLedger
from shared.domain.value_objects import Money


class LoyaltyCardAPITests(APITestCase):

    def test_card_summary(self) -> None:
        LoyaltyCard.objects.create(
            user_id="guest-1", balance=Decimal("640.00"), total_spent=Decimal("400.00"),
            total_earned=Decimal("40.00"), membership_level="Silver",
        )

        response = self.client.get(reverse("loyalty-card", args=["guest-1"]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["balance"], "640.00")
        self.assertEqual(response.data["total_earned"], "40.00")
        self.assertEqual(response.data["membership_level"], "Silver")

    def test_unknown_user_gets_empty_card_without_saving_one(self) -> None:
        response = self.client.get(reverse("loyalty-card", args=["stranger"]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["user_id"], "stranger")
        self.assertEqual(response.data["balance"], "0.00")
        self.assertEqual(response.data["membership_level"], "Bronze")
        self.assertFalse(LoyaltyCard.objects.exists())


class LoyaltyTopUpAPITests(APITestCase):

    def test_top_up_credits_card(self) -> None:
        LoyaltyCard.objects.create(user_id="guest-1", balance=Decimal("100.00"))

        response = self.client.post(
            reverse("loyalty-card-top-up", args=["guest-1"]),
            {"amount": "250.50", "payment_method": "kaspi"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["balance_before"], "100.00")
        self.assertEqual(response.data["balance_after"], "350.50")
        self.assertEqual(response.data["balance"], "350.50")
        entry = LedgerEntry.objects.get()
        self.assertEqual(entry.kind, LedgerEntry.Kind.CREDIT)
        self.assertEqual(entry.reason, "Top-up via kaspi")
        self.assertEqual(entry.balance_after, Decimal("350.50"))

    def test_first_top_up_opens_card(self) -> None:
        response = self.client.post(
            reverse("loyalty-card-top-up", args=["guest-2"]), {"amount": "1000"}, format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["payment_method"], "card")
        self.assertEqual(LoyaltyCard.objects.get(user_id="guest-2").balance, Decimal("1000.00"))

    def test_amount_must_be_positive(self) -> None:
        for amount in ("0", "-10", "abc"):
            response = self.client.post(
                reverse("loyalty-card-top-up", args=["guest-1"]), {"amount": amount}, format="json",
            )
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, amount)
            self.assertFalse(response.data["success"])

        self.assertFalse(LoyaltyCard.objects.exists())


class LoyaltyTransactionsAPITests(APITestCase):

    def setUp(self) -> None:
        ledger = DjangoLoyaltyLedger()
        for amount in ("100", "200", "300"):
            ledger.credit("guest-1", Money(Decimal(amount)), reason="Top-up")
        ledger.debit("guest-1", Money(Decimal("50")), reason="Payment")
        self.url = reverse("loyalty-card-transactions", args=["guest-1"])

    def test_newest_first_with_default_page(self) -> None:
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        kinds = [t["kind"] for t in response.data["transactions"]]
        self.assertEqual(kinds, ["debit", "credit", "credit", "credit"])
        self.assertEqual(response.data["transactions"][0]["balance_before"], "600.00")
        self.assertEqual(response.data["transactions"][0]["balance_after"], "550.00")
        self.assertEqual(
            response.data["pagination"], {"total": 4, "limit": 50, "offset": 0, "pages": 1},
        )

    def test_limit_and_offset(self) -> None:
        response = self.client.get(self.url, {"limit": 2, "offset": 2})

        amounts = [t["amount"] for t in response.data["transactions"]]
        self.assertEqual(amounts, ["200.00", "100.00"])
        self.assertEqual(
            response.data["pagination"], {"total": 4, "limit": 2, "offset": 2, "pages": 2},
        )

    def test_bad_paging_rejected(self) -> None:
        for params in ({"limit": 0}, {"limit": "ten"}, {"offset": -1}):
            response = self.client.get(self.url, params)
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, params)

    def test_user_without_card_has_no_transactions(self) -> None:
        response = self.client.get(reverse("loyalty-card-transactions", args=["stranger"]))

        self.assertEqual(response.data["transactions"], [])
        self.assertEqual(response.data["pagination"]["total"], 0)
        self.assertFalse(LoyaltyCard.objects.filter(user_id="stranger").exists())
