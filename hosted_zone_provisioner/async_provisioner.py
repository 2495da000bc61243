from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, List, NoReturn, Optional, Protocol, Type

from .config import CLOUDFRONT_DISTRIBUTION, CONFIG_KEY, ZoneConfig
from .errors import (
    AliasBatchError,
    DistributionNotFoundError,
    FeatureNotImplementedError,
    HostedZoneAPIError,
    HostedZoneConfigError,
    HostedZoneError,
)
from .utils import caller_reference, normalize_zone_name, strip_zone_id

LOG_PREFIX = "Hosted Zone: "
CLOUDFRONT_HOSTED_ZONE_ID = "Z2FDTNDATAQYW2"
ALIAS_ERROR_POLICIES = ("continue", "stop")

ErrorReporter = Callable[..., NoReturn]


class Gateway(Protocol):
    """Anything with an async ``request``; failures must raise ``HostedZoneAPIError``."""

    async def request(
        self, service: str, operation: str, params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]: ...


def raise_error(
    message: str, error_cls: Type[HostedZoneError] = HostedZoneError, **details: Any
) -> NoReturn:
    raise error_cls(f"{LOG_PREFIX}{message}", **details)


@dataclass
class AliasOutcome:
    index: int
    cname: Optional[str]
    status: str
    message: str = ""
    error: Optional[str] = None


class AsyncZoneProvisioner:
    """Ensures a Route 53 hosted zone and its CloudFront aliases exist.

    Every remote call goes through ``gateway.request``; the provisioner never
    retries, paginates or caches. Fatal conditions are handed to ``fail``,
    which must raise.
    """

    def __init__(
        self,
        gateway: Gateway,
        config: ZoneConfig,
        logger: Optional[logging.Logger] = None,
        fail: ErrorReporter = raise_error,
        on_alias_error: str = "continue",
    ):
        if on_alias_error not in ALIAS_ERROR_POLICIES:
            raise HostedZoneConfigError(
                f"on_alias_error must be one of {', '.join(ALIAS_ERROR_POLICIES)}"
            )
        self.gateway = gateway
        self.config = config
        self.logger = logger or logging.getLogger("hosted_zone_provisioner")
        self.fail = fail
        self.on_alias_error = on_alias_error

    def _log(self, level: int, msg: str, *args: Any) -> None:
        self.logger.log(level, LOG_PREFIX + msg, *args)

    async def get_hosted_zone(self) -> Dict[str, Any] | None:
        response = await self.gateway.request("route53", "list_hosted_zones")
        for zone in response.get("HostedZones", []):
            if zone.get("Name") == self.config.name:
                return zone
        return None

    async def create_zone(self) -> Dict[str, Any]:
        name = self.config.name
        self._log(logging.INFO, "Attempting to create %s", name)
        try:
            hosted_zone = await self.get_hosted_zone()
            if hosted_zone:
                self._log(logging.INFO, "%s already exists.", name)
                return {"hosted_zone": hosted_zone, "action": "NOOP"}

            params = self._create_zone_params()
            response = await self.gateway.request(
                "route53", "create_hosted_zone", params
            )
        except HostedZoneAPIError as exc:
            self.fail(str(exc))

        created = response.get("HostedZone") or {}
        if not created.get("Id"):
            self.fail(f"Failed to create {name}")
        self._log(logging.INFO, "Created %s", name)
        return {"hosted_zone": created, "action": "CREATE_ZONE"}

    def _create_zone_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "CallerReference": caller_reference(),
            "Name": self.config.name,
        }
        if self.config.delegation_set_id:
            params["DelegationSetId"] = self.config.delegation_set_id

        vpc = self.config.vpc
        if vpc is not None:
            if not vpc.id:
                self.fail(
                    f"{CONFIG_KEY}.vpc needs the id property.", HostedZoneConfigError
                )
            if not vpc.region:
                self.fail(
                    f"{CONFIG_KEY}.vpc needs the region property.",
                    HostedZoneConfigError,
                )
            params["VPC"] = {"VPCId": vpc.id, "VPCRegion": vpc.region}

        meta = self.config.zone_meta
        if meta is not None:
            zone_config: Dict[str, Any] = {}
            if meta.comment:
                zone_config["Comment"] = meta.comment
            if meta.private is not None:
                zone_config["PrivateZone"] = bool(meta.private)
            if not zone_config:
                self.fail(
                    f"{CONFIG_KEY}.config needs a comment or private property.",
                    HostedZoneConfigError,
                )
            params["HostedZoneConfig"] = zone_config
        return params

    async def remove_zone(self) -> NoReturn:
        self._log(logging.INFO, "Removing...")
        self.fail(
            "The remove feature currently does not exist.", FeatureNotImplementedError
        )

    async def create_aliases(self) -> Dict[str, Any]:
        aliases = self.config.aliases
        if not aliases:
            self._log(logging.INFO, "No aliases to create.")
            return {"hosted_zone_id": None, "aliases": [], "action": "NOOP"}

        try:
            hosted_zone = await self.get_hosted_zone()
        except HostedZoneAPIError as exc:
            self.fail(str(exc))
        if not hosted_zone:
            self.fail("Could not find the hosted zone.")
        zone_id = strip_zone_id(hosted_zone["Id"])

        outcomes: List[AliasOutcome] = []
        for index, alias in enumerate(aliases):
            if alias.type != CLOUDFRONT_DISTRIBUTION or not alias.cname:
                self._log(
                    logging.WARNING, "Alias index %d does not have a valid entry.", index
                )
                outcomes.append(
                    AliasOutcome(index, alias.cname, "SKIPPED", "invalid entry")
                )
                continue
            try:
                outcome = await self.create_distribution_alias(
                    index, alias.cname, zone_id
                )
            except (HostedZoneAPIError, DistributionNotFoundError) as exc:
                if self.on_alias_error == "stop":
                    self.fail(
                        str(exc),
                        type(exc)
                        if isinstance(exc, DistributionNotFoundError)
                        else HostedZoneError,
                    )
                cname = normalize_zone_name(alias.cname)
                self._log(logging.ERROR, "Alias %s failed: %s", cname, exc)
                outcome = AliasOutcome(
                    index, cname, "FAILED", str(exc), exc.__class__.__name__
                )
            outcomes.append(outcome)

        failed = [outcome for outcome in outcomes if outcome.status == "FAILED"]
        if failed:
            details = "; ".join(
                f"{outcome.cname} ({outcome.message})" for outcome in failed
            )
            self.fail(
                f"Failed to create aliases: {details}",
                AliasBatchError,
                outcomes=[asdict(outcome) for outcome in outcomes],
            )
        created = any(outcome.status == "CREATED" for outcome in outcomes)
        return {
            "hosted_zone_id": zone_id,
            "aliases": [asdict(outcome) for outcome in outcomes],
            "action": "CREATE_ALIASES" if created else "NOOP",
        }

    async def create_distribution_alias(
        self, index: int, cname: str, hosted_zone_id: str
    ) -> AliasOutcome:
        cname = normalize_zone_name(cname)
        distribution = await self._find_distribution(cname)

        listing = await self.gateway.request(
            "route53",
            "list_resource_record_sets",
            {"HostedZoneId": hosted_zone_id},
        )
        for record_set in listing.get("ResourceRecordSets", []):
            if record_set.get("Name") == cname and record_set.get("Type") == "A":
                self._log(logging.INFO, "Route 53 record for %s already exists.", cname)
                return AliasOutcome(index, cname, "EXISTS")

        await self.gateway.request(
            "route53",
            "change_resource_record_sets",
            {
                "HostedZoneId": hosted_zone_id,
                "ChangeBatch": {
                    "Comment": f"CloudFront distribution for {cname}",
                    "Changes": [
                        {
                            "Action": "CREATE",
                            "ResourceRecordSet": {
                                "Name": cname,
                                "Type": "A",
                                "AliasTarget": {
                                    "HostedZoneId": CLOUDFRONT_HOSTED_ZONE_ID,
                                    "DNSName": distribution["DomainName"],
                                    "EvaluateTargetHealth": False,
                                },
                            },
                        }
                    ],
                },
            },
        )
        self._log(logging.INFO, "Created alias %s", cname)
        return AliasOutcome(index, cname, "CREATED")

    async def _find_distribution(self, cname: str) -> Dict[str, Any]:
        response = await self.gateway.request("cloudfront", "list_distributions")
        distributions = (response.get("DistributionList") or {}).get("Items") or []
        for distribution in distributions:
            aliases = (distribution.get("Aliases") or {}).get("Items") or []
            if any(normalize_zone_name(alias) == cname for alias in aliases):
                if not distribution.get("DomainName"):
                    raise HostedZoneAPIError(
                        service="cloudfront",
                        operation="list_distributions",
                        code="MissingDomainName",
                        cause=ValueError(
                            f"distribution {distribution.get('Id')} has no DomainName"
                        ),
                    )
                return distribution
        raise DistributionNotFoundError(f"No CloudFront distribution serves {cname}")

    async def remove_aliases(self) -> NoReturn:
        self._log(logging.INFO, "Removing...")
        self.fail(
            "The remove feature currently does not exist.", FeatureNotImplementedError
        )

    async def print_summary(self) -> NoReturn:
        self._log(logging.INFO, "Summary...")
        self.fail(
            "The summary feature currently does not exist.", FeatureNotImplementedError
        )
