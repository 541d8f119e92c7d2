"""API views for loyalty cards."""

from __future__ import annotations

import logging
import math

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from shared.domain.exceptions import ValidationError
from shared.domain.value_objects import Money

from .models import LedgerEntry, LoyaltyCard
from .serializers import LedgerEntrySerializer, LoyaltyCardSerializer, TopUpSerializer
from .services import DjangoLoyaltyLedger, find_card

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200


def _query_int(request, name: str, default: int, minimum: int, maximum: int | None = None) -> int:
    raw = request.query_params.get(name)
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a whole number", field=name) from None
    if value < minimum or (maximum is not None and value > maximum):
        raise ValidationError(f"{name} is out of range", field=name)
    return value


class LoyaltyCardView(APIView):
    """Баланс, кэшбэк и уровень карты пользователя."""

    def get(self, request, user_id: str):  # type: ignore
        # Users without a card see an empty Bronze card; nothing is stored
        card = find_card(user_id) or LoyaltyCard(user_id=user_id)
        return Response(LoyaltyCardSerializer(card).data)


class LoyaltyTopUpView(APIView):
    """Пополнение карты."""

    def post(self, request, user_id: str):  # type: ignore
        serializer = TopUpSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        amount = Money(serializer.validated_data["amount"])
        method = serializer.validated_data["payment_method"]

        result = DjangoLoyaltyLedger().credit(user_id, amount, reason=f"Top-up via {method}")
        logger.info(f"Card of user {user_id} topped up by {amount} via {method}")

        data = LoyaltyCardSerializer(find_card(user_id)).data
        data.update({
            "amount": amount.to_plain(),
            "payment_method": method,
            "balance_before": (result.new_balance - amount).to_plain(),
            "balance_after": result.new_balance.to_plain(),
        })
        return Response(data, status=status.HTTP_200_OK)


class LoyaltyTransactionsView(APIView):
    """История движений по карте, новые сверху."""

    def get(self, request, user_id: str):  # type: ignore
        limit = _query_int(request, "limit", DEFAULT_PAGE_SIZE, 1, MAX_PAGE_SIZE)
        offset = _query_int(request, "offset", 0, 0)

        entries = LedgerEntry.objects.filter(card__user_id=user_id)
        total = entries.count()
        page = entries[offset:offset + limit]
        return Response({
            "user_id": user_id,
            "transactions": LedgerEntrySerializer(page, many=True).data,
            "pagination": {
                "total": total,
                "limit": limit,
                "offset": offset,
                "pages": math.ceil(total / limit),
            },
        })
