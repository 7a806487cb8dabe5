"""
Proxy Package
=============

Endpoints that forward image-to-video requests to the Freepik API.

Main Components:
----------------
- routes.py: FastAPI router with the submit and poll endpoints
- forwarder.py: outbound multipart/GET calls returning explicit results

Usage:
------
    from kling_proxy.app.proxy import proxy_router
    app.include_router(proxy_router, prefix="/api")
"""

from .routes import proxy_router

__all__ = ["proxy_router"]
