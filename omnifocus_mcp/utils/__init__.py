"""Utility functions for OmniFocus MCP."""
