"""
Authentication Package

Access control for the proxy routes:
- gate: optional shared-secret check on the x-app-token header
- gate: Freepik API key resolution (server key first, client header second)
"""

from .gate import require_app_token, resolve_api_key

__all__ = [
    "require_app_token",
    "resolve_api_key",
]
