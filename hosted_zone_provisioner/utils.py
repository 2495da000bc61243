from datetime import datetime, timezone


def normalize_zone_name(name: str) -> str:
    """Ensure a zone or record name ends with a trailing dot."""
    return name if name.endswith(".") else f"{name}."


def strip_zone_id(zone_id: str) -> str:
    """Drop the ``/hostedzone/`` prefix Route 53 puts on zone ids."""
    return zone_id.replace("/hostedzone/", "")


def caller_reference() -> str:
    return datetime.now(timezone.utc).isoformat()
