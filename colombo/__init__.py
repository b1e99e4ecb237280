"""
                Colombo Restaurant Ordering System

Order placement, order listing and sales statistics for a small
restaurant: customers pick a main dish, a side dish and an optional
dessert; staff review orders and daily/all-time highlights.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
