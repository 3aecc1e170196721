"""Tool Plan Engine - plans and executes tool calls for inbound email replies."""

__version__ = "1.0.0"
