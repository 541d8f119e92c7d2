"""URL routing for loyalty cards."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import LoyaltyCardView, LoyaltyTopUpView, LoyaltyTransactionsView

urlpatterns = [
    path("<str:user_id>/", LoyaltyCardView.as_view(), name="loyalty-card"),
    path("<str:user_id>/top-up/", LoyaltyTopUpView.as_view(), name="loyalty-card-top-up"),
    path("<str:user_id>/transactions/", LoyaltyTransactionsView.as_view(), name="loyalty-card-transactions"),
]
