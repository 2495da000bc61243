from __future__ import annotations

import asyncio
import logging
import random
from contextlib import AsyncExitStack
from typing import Any, Dict, Optional, cast

import aioboto3
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from .config import AWSConnection
from .errors import HostedZoneAPIError

RETRYABLE_CODES = {
    "Throttling",
    "ThrottlingException",
    "PriorRequestNotComplete",
    "RequestLimitExceeded",
    "ServiceUnavailable",
}
TRANSPORT_ERRORS = (
    EndpointConnectionError,
    ConnectionClosedError,
    ConnectTimeoutError,
    ReadTimeoutError,
    asyncio.TimeoutError,
)


class AsyncAWSGateway:
    """Async request gateway for the Route 53 and CloudFront APIs.

    ``request("route53", "list_hosted_zones")`` calls the boto3 operation of
    the same name and returns its parsed response. The session and clients
    are opened on first use and kept until ``close()``; a bad profile or
    endpoint surfaces as ``HostedZoneAPIError`` from that first request.
    """

    def __init__(
        self,
        connection: AWSConnection | None = None,
        retries: int = 3,
        retry_backoff: float = 0.5,
        retry_max_backoff: float = 5.0,
        retry_jitter: float = 0.1,
        session: Any = None,
    ):
        self.connection = connection or AWSConnection()
        self.retries = max(0, retries)
        self.retry_backoff = max(0.0, retry_backoff)
        self.retry_max_backoff = max(0.0, retry_max_backoff)
        self.retry_jitter = max(0.0, retry_jitter)
        self.session = session
        self._clients: Dict[str, Any] = {}
        self._exit_stack = AsyncExitStack()

    async def close(self) -> None:
        self._clients.clear()
        await self._exit_stack.aclose()

    async def _client(self, service: str) -> Any:
        client = self._clients.get(service)
        if client is None:
            if self.session is None:
                self.session = aioboto3.Session(**self.connection.session_kwargs())
            client = await self._exit_stack.enter_async_context(
                self.session.client(service, **self.connection.client_kwargs())
            )
            self._clients[service] = client
        return client

    async def request(
        self,
        service: str,
        operation: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        try:
            client = await self._client(service)
        except (BotoCoreError, ValueError) as exc:
            raise HostedZoneAPIError(
                service=service,
                operation=operation,
                code=exc.__class__.__name__,
                cause=exc,
            ) from exc
        method = getattr(client, operation, None)
        if method is None:
            raise HostedZoneAPIError(
                service=service,
                operation=operation,
                code="UnknownOperation",
                cause=ValueError(f"{service} has no operation {operation}"),
            )

        last_error: Exception | None = None
        last_code = ""
        for attempt in range(self.retries + 1):
            try:
                return cast(Dict[str, Any], await method(**(params or {})))
            except ClientError as exc:
                code = exc.response.get("Error", {}).get("Code", "")
                if code not in RETRYABLE_CODES:
                    raise HostedZoneAPIError(
                        service=service,
                        operation=operation,
                        code=code,
                        cause=exc,
                        retries_attempted=attempt,
                    ) from exc
                last_error, last_code = exc, code
            except TRANSPORT_ERRORS as exc:
                last_error, last_code = exc, exc.__class__.__name__
            except BotoCoreError as exc:
                raise HostedZoneAPIError(
                    service=service,
                    operation=operation,
                    code=exc.__class__.__name__,
                    cause=exc,
                    retries_attempted=attempt,
                ) from exc

            if attempt >= self.retries:
                break
            delay = self._retry_delay(attempt)
            logging.debug(
                "Retrying %s.%s in %.2fs (attempt %d/%d) after error: %s",
                service,
                operation,
                delay,
                attempt + 1,
                self.retries,
                last_error,
            )
            await asyncio.sleep(delay)

        raise HostedZoneAPIError(
            service=service,
            operation=operation,
            code=last_code,
            cause=last_error,
            retries_attempted=self.retries,
        )

    def _retry_delay(self, attempt: int) -> float:
        delay: float = min(self.retry_max_backoff, self.retry_backoff * (2**attempt))
        if self.retry_jitter > 0:
            delay += random.uniform(0, self.retry_jitter)  # nosec B311
        return float(delay)
