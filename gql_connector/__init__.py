"""Introspection-driven GraphQL record connector."""

from .connector import GraphQLConnector, RunContext

__version__ = "0.1.0"

__all__ = ["GraphQLConnector", "RunContext", "__version__"]
