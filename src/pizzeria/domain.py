"""Pizzeria bounded context: accounts, catalogue, orders and their lifecycle.

A single domain owns the whole model. Orders are kept in memory for the
lifetime of one interactive session and advanced by a background ticker.
"""

from protean.domain import Domain

from pizzeria.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
pizzeria = Domain(name="pizzeria")
