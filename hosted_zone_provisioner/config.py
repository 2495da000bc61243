from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .errors import HostedZoneConfigError
from .utils import normalize_zone_name

CONFIG_KEY = "custom.hostedZone"
CLOUDFRONT_DISTRIBUTION = "cloudfrontDistribution"


@dataclass(frozen=True)
class AWSConnection:
    """Connection settings for the Route 53 and CloudFront APIs."""

    region: str = "us-east-1"
    profile: Optional[str] = None
    endpoint_url: Optional[str] = None

    @classmethod
    def from_env(cls) -> "AWSConnection":
        return cls(
            region=os.environ.get("AWS_DEFAULT_REGION")
            or os.environ.get("AWS_REGION")
            or "us-east-1",
            profile=os.environ.get("AWS_PROFILE"),
            endpoint_url=os.environ.get("AWS_ENDPOINT_URL"),
        )

    def session_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {"region_name": self.region}
        if self.profile:
            kwargs["profile_name"] = self.profile
        return kwargs

    def client_kwargs(self) -> Dict[str, Any]:
        if self.endpoint_url:
            return {"endpoint_url": self.endpoint_url}
        return {}


@dataclass(frozen=True)
class VpcConfig:
    id: Optional[str] = None
    region: Optional[str] = None


@dataclass(frozen=True)
class ZoneMetaConfig:
    comment: Optional[str] = None
    private: Optional[bool] = None


@dataclass(frozen=True)
class AliasSpec:
    type: Optional[str]
    cname: Optional[str] = None


@dataclass(frozen=True)
class ZoneConfig:
    """The ``custom.hostedZone`` block of a service definition.

    ``name`` is stored in FQDN form. The optional blocks are kept as written
    and only validated when a zone is actually created, so a bad ``vpc``
    block never blocks alias creation on an existing zone.
    """

    name: str
    vpc: Optional[VpcConfig] = None
    zone_meta: Optional[ZoneMetaConfig] = None
    delegation_set_id: Optional[str] = None
    aliases: List[AliasSpec] = field(default_factory=list)

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", normalize_zone_name(self.name))

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ZoneConfig":
        if not isinstance(raw, Mapping):
            raise HostedZoneConfigError(
                f"{CONFIG_KEY} must be a mapping, got {type(raw).__name__}"
            )
        name = raw.get("name")
        if not name:
            raise HostedZoneConfigError(f"{CONFIG_KEY} needs the name property.")

        vpc = raw.get("vpc")
        meta = raw.get("config")
        aliases = raw.get("aliases") or []
        if not isinstance(aliases, list):
            raise HostedZoneConfigError(f"{CONFIG_KEY}.aliases must be a list.")

        return cls(
            name=str(name),
            vpc=(
                VpcConfig(id=vpc.get("id"), region=vpc.get("region"))
                if isinstance(vpc, Mapping)
                else None
            ),
            zone_meta=(
                ZoneMetaConfig(comment=meta.get("comment"), private=meta.get("private"))
                if isinstance(meta, Mapping)
                else None
            ),
            delegation_set_id=raw.get("delegationSetId"),
            aliases=[
                AliasSpec(type=alias.get("type"), cname=alias.get("cname"))
                if isinstance(alias, Mapping)
                else AliasSpec(type=None)
                for alias in aliases
            ],
        )


def _lookup(document: Any, dotted_key: str) -> Any:
    node = document
    for part in dotted_key.split("."):
        if not isinstance(node, Mapping):
            return None
        node = node.get(part)
    return node


def load_zone_config(path: str | Path, key: str = CONFIG_KEY) -> ZoneConfig | None:
    """Read the hosted zone block from a YAML or JSON service file.

    Returns ``None`` when the file has no block under ``key`` or the block
    has no ``name``; callers treat both as missing configuration.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise HostedZoneConfigError(f"Service file not found: {config_path}")
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            document = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise HostedZoneConfigError(f"Could not parse {config_path}: {exc}") from exc

    raw = _lookup(document, key)
    if raw is None or (isinstance(raw, Mapping) and not raw.get("name")):
        return None
    return ZoneConfig.from_dict(raw)
