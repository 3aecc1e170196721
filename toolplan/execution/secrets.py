"""
Secrets resolvers - supply the credential attached to a tool call.

The executor asks a resolver for each tool's credential right before the
call is made. The default resolver uses the credential stored on the
ToolDefinition; ProviderSecretsResolver looks credentials up by provider
name, the way per-user connection parameters are shared by all tools of one
provider.

A credential is either an opaque string (bearer and header schemes) or a
JSON object of connection parameters (body scheme).
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional, Union

from pydantic import SecretStr

from toolplan.models.domain import ToolDefinition

Credential = Union[str, dict[str, Any]]


class SecretsResolver(ABC):
    """Port for credential lookup."""

    @abstractmethod
    async def resolve(self, tool: ToolDefinition) -> Optional[Credential]:
        """
        Return the credential for a tool, or None if none is available.

        Raises:
            ToolPlanException: If the backing secret store fails.
        """
        ...


class ToolCredentialResolver(SecretsResolver):
    """Returns the credential stored on the tool definition."""

    async def resolve(self, tool: ToolDefinition) -> Optional[Credential]:
        if tool.credential is None:
            return None
        return tool.credential.get_secret_value() or None


class ProviderSecretsResolver(SecretsResolver):
    """
    Looks up credentials by the tool's provider_name.

    Tools without a provider, or whose provider has no entry, fall back to
    their own credential unless fallback is disabled.

    Example:
        >>> resolver = ProviderSecretsResolver(
        ...     {"shopify": {"shop": "acme", "access_token": "shpat_..."}}
        ... )
    """

    def __init__(
        self,
        secrets: Mapping[str, Union[Credential, SecretStr]],
        fallback_to_tool: bool = True,
    ) -> None:
        self._secrets = dict(secrets)
        self._fallback = ToolCredentialResolver() if fallback_to_tool else None

    async def resolve(self, tool: ToolDefinition) -> Optional[Credential]:
        if tool.provider_name and tool.provider_name in self._secrets:
            value = self._secrets[tool.provider_name]
            if isinstance(value, SecretStr):
                return value.get_secret_value() or None
            return value or None
        if self._fallback is not None:
            return await self._fallback.resolve(tool)
        return None
