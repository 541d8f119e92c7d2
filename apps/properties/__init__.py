"""Properties app package.

This app holds the bookable properties and the links between them.
Linked properties share one calendar.
"""
