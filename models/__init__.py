"""
Models Package

This file ensures all SQLAlchemy models are imported and registered,
which is required for relationships to work correctly.
"""

from models.base import Base
from models.auth_user import AuthUser, AuthSession
from models.profile import Profile
from models.product import Product
from models.article import Article
from models.subscription_plan import SubscriptionPlan
from models.cartItem import CartItem
from models.order import Order
from models.user_subscription import UserSubscription
from models.affiliate import Affiliate

__all__ = [
    'Base',
    'AuthUser',
    'AuthSession',
    'Profile',
    'Product',
    'Article',
    'SubscriptionPlan',
    'CartItem',
    'Order',
    'UserSubscription',
    'Affiliate',
]
