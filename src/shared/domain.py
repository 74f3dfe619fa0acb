"""Domain initialization and configuration."""

from protean.domain import Domain

from shared.logging import get_logger

logger = get_logger(__name__)

# Domain Composition Root
domain = Domain(name="marketplace")

_initialized = False


def init_domain() -> Domain:
    """Initialize the domain once every element module has been imported.

    Elements register through decorators at import time, so traversal is off:
    ``marketplace.py`` imports every bounded context before calling this.
    """
    global _initialized
    if not _initialized:
        domain.init(traverse=False)
        _initialized = True
        logger.debug("Domain initialized", domain=domain.name)
    return domain
