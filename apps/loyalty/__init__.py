"""Loyalty app package.

Prepaid loyalty cards: balance, cashback and membership tiers.
"""
