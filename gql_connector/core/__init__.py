"""Core modules: query AST, schema introspection, planning and fetching."""

from .arguments import ArgumentConfiguration, ArgumentTypeMapper, ConfiguredArgument, MergedArgument
from .auth import (
    ApiKeyAuth,
    Auth,
    BearerAuth,
    HeaderAuth,
    NoAuth,
    PreparedAuth,
    TokenProviderAuth,
)
from .errors import (
    AuthenticationError,
    ConnectorError,
    GraphQLCallError,
    IntrospectionError,
    SchemaResolutionError,
    TransportError,
)
from .executor import GraphQLResponse, RunSession
from .fetcher import RecordFetcher
from .ir import (
    ArgumentDescriptor,
    FetchScope,
    FetchStrategy,
    FetchStrategyKind,
    FieldInfo,
    OperationInfo,
    Record,
    ResolvedOperation,
    ResolvedType,
    TypeDescriptor,
)
from .planner import FetchPlanner
from .query_builder import Argument, Node, Query, build_selection_tree
from .scalars import DateTimeHandler, FilterDateTimeHandler
from .schema_navigator import SchemaNavigator
from .settings import ConnectorSettings
from .type_resolver import describe_type, unwrap_base_type

__all__ = [
    # Auth
    "Auth",
    "PreparedAuth",
    "ApiKeyAuth",
    "BearerAuth",
    "HeaderAuth",
    "NoAuth",
    "TokenProviderAuth",
    # Errors
    "ConnectorError",
    "TransportError",
    "GraphQLCallError",
    "SchemaResolutionError",
    "IntrospectionError",
    "AuthenticationError",
    # Scalars
    "DateTimeHandler",
    "FilterDateTimeHandler",
    # IR types
    "ArgumentDescriptor",
    "FetchScope",
    "FetchStrategy",
    "FetchStrategyKind",
    "FieldInfo",
    "OperationInfo",
    "Record",
    "ResolvedOperation",
    "ResolvedType",
    "TypeDescriptor",
    # Query AST
    "Argument",
    "Node",
    "Query",
    "build_selection_tree",
    # Type resolution
    "describe_type",
    "unwrap_base_type",
    # Arguments
    "ArgumentConfiguration",
    "ArgumentTypeMapper",
    "ConfiguredArgument",
    "MergedArgument",
    # Execution
    "ConnectorSettings",
    "GraphQLResponse",
    "RunSession",
    "SchemaNavigator",
    "FetchPlanner",
    "RecordFetcher",
]
