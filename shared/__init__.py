"""
shared/__init__.py

Shared models and helpers used across the command pipeline.

This package contains common functionality used by several components:
- models: the conversation message, reply envelope and completion request types
- errors: the reply tier failure taxonomy and the busy-orchestrator error
- utils: small formatting helpers
- reply_client: stdlib HTTP client for the completion proxy
"""
