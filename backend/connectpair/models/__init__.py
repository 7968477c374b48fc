# Models package init
"""
ConnectPair Backend: ORM Models

Importing this package registers all five tables on `Base.metadata`.
"""

from connectpair.models.consultation import Consultation
from connectpair.models.customer import Customer
from connectpair.models.order import Order
from connectpair.models.phone_number import PhoneNumber
from connectpair.models.subscriber import EmailSubscriber

__all__ = ["Consultation", "Customer", "EmailSubscriber", "Order", "PhoneNumber"]
