"""
Kling Proxy Application
=======================

FastAPI service forwarding image-to-video task submissions and status polls
to the Freepik API while keeping the provider API key on the server.

Modules:
    - config: Settings loaded once from the environment
    - models: Pydantic request/result models
    - auth: x-app-token gate and API key resolution
    - proxy: Submit/poll routes and the upstream forwarder
    - main: Application factory and entry point
"""
