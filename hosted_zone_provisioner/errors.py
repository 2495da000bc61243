from __future__ import annotations


class HostedZoneError(Exception):
    """Base exception for all hosted-zone-provisioner errors.

    Catch this to handle any error originating from this package.
    """


class HostedZoneConfigError(HostedZoneError):
    """The ``custom.hostedZone`` block is missing a field or contradicts itself.

    Raised for problems like a VPC without a region, an empty zone
    ``config`` block, or an unreadable service file.
    """


class HostedZoneAPIError(HostedZoneError):
    """An AWS API call failed.

    Raised after all retry attempts are exhausted, or immediately for
    errors that are not worth retrying.

    Attributes:
        service: boto3 service name, e.g. ``route53``.
        operation: boto3 operation name, e.g. ``create_hosted_zone``.
        code: AWS error code, or the exception class name for transport errors.
        cause: The underlying exception that triggered the failure.
        retries_attempted: Number of retries performed before giving up.
    """

    def __init__(
        self,
        *,
        service: str,
        operation: str,
        code: str = "",
        cause: Exception | None = None,
        retries_attempted: int = 0,
    ) -> None:
        self.service = service
        self.operation = operation
        self.code = code
        self.cause = cause
        self.retries_attempted = retries_attempted
        detail = str(cause) if cause else "unknown"
        super().__init__(f"{service}.{operation} failed: {code or 'Error'}: {detail}")


class DistributionNotFoundError(HostedZoneError):
    """No CloudFront distribution lists the requested CNAME among its aliases."""


class FeatureNotImplementedError(HostedZoneError):
    """The requested lifecycle command has no implementation."""


class AliasBatchError(HostedZoneError):
    """One or more aliases in a ``create-aliases`` run failed.

    Attributes:
        outcomes: Per-alias outcomes for the whole batch, in declared order.
    """

    def __init__(self, message: str, *, outcomes: list | None = None) -> None:
        self.outcomes = outcomes or []
        super().__init__(message)
