"""
Schemas module - Request/Response schemas for API endpoints.

Schemas are the API contract (what client sends/receives); stored
documents use the same camelCase keys as the aliases.
"""
