"""ASGI middleware: security headers, request size limit, observability."""
