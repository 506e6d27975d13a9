"""Structured logging for the browse stats service.

Every module logs through get_logger(__name__, component=...) and tags each
record with an ``event`` name in ``extra`` (e.g. "facets.aggregation.started").
"""

import logging
from typing import Optional, Union


class ComponentLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that adds a default component to each call's extra fields."""

    def process(self, msg, kwargs):
        # Fields passed at the call site win over the adapter defaults
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(
    name: str, component: Optional[str] = None
) -> Union[logging.Logger, ComponentLoggerAdapter]:
    """Get a logger, optionally tagging every record with a component.

    Args:
        name: Logger name (typically __name__)
        component: Component identifier such as "facets" or "api"

    Returns:
        Logger or ComponentLoggerAdapter instance

    Example:
        >>> logger = get_logger(__name__, component="facets")
        >>> logger.info("Facet aggregation started", extra={"event": "facets.aggregation.started"})
    """
    logger = logging.getLogger(name)
    if component:
        return ComponentLoggerAdapter(logger, {"component": component})
    return logger
