from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from .async_gateway import AsyncAWSGateway
from .async_provisioner import LOG_PREFIX, AsyncZoneProvisioner, Gateway
from .config import AWSConnection, ZoneConfig
from .errors import HostedZoneConfigError

COMMANDS: Dict[str, Dict[str, Any]] = {
    "create-zone": {
        "lifecycle_events": ["create"],
        "usage": "Creates a Route 53 hosted zone.",
    },
    "remove-zone": {
        "lifecycle_events": ["remove"],
        "usage": "Removes a Route 53 hosted zone.",
    },
    "create-aliases": {
        "lifecycle_events": ["create"],
        "usage": "Creates Route 53 aliases.",
    },
    "remove-aliases": {
        "lifecycle_events": ["remove"],
        "usage": "Removes Route 53 aliases.",
    },
}


class HostedZonePlugin:
    """Binds deployment lifecycle hooks to the zone provisioner.

    A service without a hosted zone block is not an error: every hook logs
    a warning and does nothing.
    """

    def __init__(
        self,
        config: Optional[ZoneConfig],
        provider: AWSConnection | Gateway,
        logger: Optional[logging.Logger] = None,
        on_alias_error: str = "continue",
        retries: int = 3,
        retry_backoff: float = 0.5,
        retry_max_backoff: float = 5.0,
        retry_jitter: float = 0.1,
    ):
        self.config = config
        self.logger = logger or logging.getLogger("hosted_zone_provisioner")
        self.gateway = (
            AsyncAWSGateway(
                provider,
                retries=retries,
                retry_backoff=retry_backoff,
                retry_max_backoff=retry_max_backoff,
                retry_jitter=retry_jitter,
            )
            if isinstance(provider, AWSConnection)
            else provider
        )
        self.provisioner = (
            AsyncZoneProvisioner(
                self.gateway,
                config,
                logger=self.logger,
                on_alias_error=on_alias_error,
            )
            if config is not None
            else None
        )
        self.commands = COMMANDS
        self.hooks: Dict[str, Callable[[], Awaitable[Any]]] = {
            "create-zone:create": self.create_hosted_zone,
            "remove-zone:remove": self.remove_hosted_zone,
            "create-aliases:create": self.create_aliases,
            "remove-aliases:remove": self.remove_aliases,
        }

    async def close(self) -> None:
        if isinstance(self.gateway, AsyncAWSGateway):
            await self.gateway.close()

    async def run(self, command: str) -> Any:
        spec = self.commands.get(command)
        if spec is None:
            raise HostedZoneConfigError(f"Unknown command: {command}")
        result = None
        for event in spec["lifecycle_events"]:
            hook = self.hooks.get(f"{command}:{event}")
            if hook is not None:
                result = await hook()
        return result

    def _report_missing_config(self) -> None:
        self.logger.warning("%sMissing config. Skipping...", LOG_PREFIX)

    async def create_hosted_zone(self) -> Dict[str, Any] | None:
        if self.provisioner is None:
            return self._report_missing_config()
        return await self.provisioner.create_zone()

    async def remove_hosted_zone(self) -> None:
        if self.provisioner is None:
            return self._report_missing_config()
        await self.provisioner.remove_zone()

    async def create_aliases(self) -> Dict[str, Any] | None:
        if self.provisioner is None:
            return self._report_missing_config()
        return await self.provisioner.create_aliases()

    async def remove_aliases(self) -> None:
        if self.provisioner is None:
            return self._report_missing_config()
        await self.provisioner.remove_aliases()

    async def print_summary(self) -> None:
        if self.provisioner is None:
            return self._report_missing_config()
        await self.provisioner.print_summary()
