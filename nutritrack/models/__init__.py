from nutritrack.models.base import Base
from nutritrack.models.models import User, UserRole
from nutritrack.models.nutrition_plan import NutritionPlan
from nutritrack.models.plan import Plan
from nutritrack.models.subscription import Subscription
from nutritrack.models.subscription_enums import SubscriptionStatus

__all__ = [
    "Base",
    "NutritionPlan",
    "Plan",
    "Subscription",
    "SubscriptionStatus",
    "User",
    "UserRole",
]
