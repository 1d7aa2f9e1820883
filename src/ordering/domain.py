"""Ordering bounded context — cart checkout and the order approval workflow.

Handles conversion of a buyer's cart into a priced order, and the
buyer/admin negotiation that moves the order from approval to pickup.
"""

from protean.domain import Domain

from ordering.utils.logging import configure_logging

# Configure logging for the application
configure_logging()

ordering = Domain(name="ordering")
