"""Operation catalog and handlers."""

from omnifocus_mcp.operations.base import Operation, OperationContext
from omnifocus_mcp.operations.catalog import OperationCatalog, build_catalog, default_operations

__all__ = [
    "Operation",
    "OperationCatalog",
    "OperationContext",
    "build_catalog",
    "default_operations",
]
