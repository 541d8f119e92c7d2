"""Bookings app package.

This app holds the availability and pricing engine: date reservations
across linked properties, itemized pricing, the booking lifecycle and
cancellation refunds. Double bookings are prevented by a per-group lock
around check-then-reserve plus row locks on the group's properties.
"""
