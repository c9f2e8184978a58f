from . import auth
from . import customers
from . import payments
from . import suspensions
from . import reports

__all__ = [
    "auth",
    "customers",
    "payments",
    "suspensions",
    "reports",
]
