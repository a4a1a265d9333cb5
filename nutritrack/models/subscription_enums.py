"""Subscription-related enums.

SubscriptionStatus drives the subscription state machine:

    PENDING -> APPROVED | REJECTED
    APPROVED -> CANCELLED

REJECTED and CANCELLED are terminal.
"""

import enum


class SubscriptionStatus(str, enum.Enum):
    """Status of a subscription."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"
