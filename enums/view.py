from enum import Enum


class View(str, Enum):
    HOME = "home"
    DASHBOARD = "dashboard"


class Modal(str, Enum):
    NONE = "none"
    CART = "cart"
    AUTH = "auth"


class AuthMode(str, Enum):
    LOGIN = "login"
    SIGNUP = "signup"


class DashboardTab(str, Enum):
    OVERVIEW = "overview"
    ORDERS = "orders"
    SUBSCRIPTIONS = "subscriptions"
    AFFILIATE = "affiliate"
    SETTINGS = "settings"
