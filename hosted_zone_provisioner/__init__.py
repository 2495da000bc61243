"""Route 53 hosted zone and CloudFront alias provisioner."""

from .async_gateway import AsyncAWSGateway
from .async_provisioner import AliasOutcome, AsyncZoneProvisioner
from .config import AliasSpec, AWSConnection, VpcConfig, ZoneConfig, ZoneMetaConfig
from .errors import (
    AliasBatchError,
    DistributionNotFoundError,
    FeatureNotImplementedError,
    HostedZoneAPIError,
    HostedZoneConfigError,
    HostedZoneError,
)
from .plugin import HostedZonePlugin

__all__ = [
    "AWSConnection",
    "AliasBatchError",
    "AliasOutcome",
    "AliasSpec",
    "AsyncAWSGateway",
    "AsyncZoneProvisioner",
    "DistributionNotFoundError",
    "FeatureNotImplementedError",
    "HostedZoneAPIError",
    "HostedZoneConfigError",
    "HostedZoneError",
    "HostedZonePlugin",
    "VpcConfig",
    "ZoneConfig",
    "ZoneMetaConfig",
]
