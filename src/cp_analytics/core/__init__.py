"""Core business logic: scoring, statistics, API clients, and data models.

This module is framework-agnostic. It has no dependency on MCP or any server
framework; the server and the dashboard both import from here.
"""
