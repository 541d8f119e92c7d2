"""
Shared Kernel

Money and date ranges, entity/aggregate base classes, the unit of work and
the event bus used by the properties, bookings and loyalty contexts.
"""
