"""
Customer Services

Duplicate-avoidance matching for new leads and directory search.
"""

from typing import Iterable, List

from ..job_management.filters import digits_only
from .entities import Customer


class CustomerMatcher:
    """
    Domain service that suggests existing customers for a typed name.

    Matching is a case-insensitive substring test against ``first last``.
    Results keep the order of the customer list passed in, and each call
    starts from scratch; nothing is cached between keystrokes and the store
    is never queried.
    """

    @staticmethod
    def find_candidates(name_query: str, customers: Iterable[Customer]) -> List[Customer]:
        """
        Find customers whose full name contains ``name_query``.

        Args:
            name_query: Name typed so far
            customers: In-memory customer list, in store order

        Returns:
            Matching customers; empty for a blank query
        """
        if not (name_query or "").strip():
            return []
        lowered = name_query.lower()
        return [
            customer
            for customer in customers
            if lowered in f"{customer.first_name} {customer.last_name}".lower()
        ]


def search_customers(query: str, customers: Iterable[Customer]) -> List[Customer]:
    """
    Customer directory search.

    Matches first name, last name, full name, email and address
    case-insensitively, and phone by digits. A blank query returns every
    customer.
    """
    customers = list(customers)
    lowered = (query or "").strip().lower()
    if not lowered:
        return customers

    numeric = digits_only(query)
    results = []
    for customer in customers:
        fields = (
            customer.first_name.lower(),
            customer.last_name.lower(),
            f"{customer.first_name} {customer.last_name}".lower(),
            customer.email.lower(),
            customer.address.lower(),
        )
        if any(lowered in text for text in fields):
            results.append(customer)
        elif numeric and numeric in digits_only(customer.phone):
            results.append(customer)
    return results
