"""
Clients Package - outbound HTTP client factory.
"""

from toolplan.clients.http import create_http_client

__all__ = ["create_http_client"]
