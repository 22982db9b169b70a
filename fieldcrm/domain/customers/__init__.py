"""
Customer Domain
"""

from .entities import COLLECTION, Customer, GeoLocation, split_full_name
from .services import CustomerMatcher, search_customers

__all__ = [
    "COLLECTION",
    "Customer",
    "GeoLocation",
    "split_full_name",
    "CustomerMatcher",
    "search_customers",
]
