from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import pytest

from hosted_zone_provisioner.errors import HostedZoneAPIError


class FakeGateway:
    """In-memory stand-in for the AWS gateway that records every call."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []
        self.hosted_zones: List[Dict[str, Any]] = []
        self.distributions: List[Dict[str, Any]] = []
        self.record_sets: List[Dict[str, Any]] = []
        self.failures: Dict[Tuple[str, str], str] = {}
        self.create_response: Optional[Dict[str, Any]] = None

    def operations(self) -> List[str]:
        return [operation for _, operation, _ in self.calls]

    def params_for(self, operation: str) -> List[Dict[str, Any]]:
        return [params for _, op, params in self.calls if op == operation]

    async def request(
        self, service: str, operation: str, params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        params = params or {}
        self.calls.append((service, operation, params))
        code = self.failures.get((service, operation))
        if code:
            raise HostedZoneAPIError(
                service=service,
                operation=operation,
                code=code,
                cause=RuntimeError("boom"),
            )

        if operation == "list_hosted_zones":
            return {"HostedZones": list(self.hosted_zones)}
        if operation == "create_hosted_zone":
            if self.create_response is not None:
                return self.create_response
            zone = {"Id": "/hostedzone/ZNEW123", "Name": params["Name"]}
            self.hosted_zones.append(zone)
            return {"HostedZone": zone}
        if operation == "list_distributions":
            return {"DistributionList": {"Items": list(self.distributions)}}
        if operation == "list_resource_record_sets":
            return {"ResourceRecordSets": list(self.record_sets)}
        if operation == "change_resource_record_sets":
            for change in params["ChangeBatch"]["Changes"]:
                self.record_sets.append(change["ResourceRecordSet"])
            return {"ChangeInfo": {"Id": "/change/C1", "Status": "PENDING"}}
        raise AssertionError(f"unexpected operation {service}.{operation}")


def distribution(domain_name: str, *aliases: str) -> Dict[str, Any]:
    return {
        "Id": "E" + domain_name.split(".")[0].upper(),
        "DomainName": domain_name,
        "Aliases": {"Quantity": len(aliases), "Items": list(aliases)},
    }


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()
