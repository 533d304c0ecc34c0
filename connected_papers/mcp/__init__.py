"""
MCP server exposing Connected Papers tools over stdio.
"""
