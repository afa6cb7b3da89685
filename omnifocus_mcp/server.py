"""FastMCP server initialization for OmniFocus MCP."""

import json
from typing import Any

from mcp.server.fastmcp import FastMCP

from omnifocus_mcp.config import configure_logging, load_settings
from omnifocus_mcp.operations.catalog import OperationCatalog, build_catalog

# Initialize the MCP server
mcp = FastMCP("omnifocus_mcp")

_catalog: OperationCatalog | None = None


def get_catalog() -> OperationCatalog:
    """Return the process-wide catalog, building it from the environment on first use."""
    global _catalog
    if _catalog is None:
        _catalog = build_catalog(load_settings())
    return _catalog


def set_catalog(catalog: OperationCatalog | None) -> None:
    """Replace the catalog the tools dispatch to (None rebuilds on next use)."""
    global _catalog
    _catalog = catalog


def dispatch(name: str, options: dict[str, Any]) -> str:
    """Run a catalog operation and return its payload as indented JSON."""
    result = get_catalog().run(name, options)
    return json.dumps(result.to_payload(), indent=2)


def run() -> None:
    """Run the MCP server over stdio."""
    settings = load_settings()
    configure_logging(settings.log_level)
    set_catalog(build_catalog(settings))

    mcp.run()


if __name__ == "__main__":
    run()
