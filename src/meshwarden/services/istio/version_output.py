"""Mapping of ``istioctl version -o json`` output to MeshStatus."""

import json
from typing import Any

from meshwarden.core.exceptions import IstioError
from meshwarden.core.models import MeshStatus


def _client_version(data: dict[str, Any]) -> str:
    client = data.get("clientVersion") or {}
    return client.get("version", "") or ""


def _pilot_version(data: dict[str, Any]) -> str:
    mesh = data.get("meshVersion") or []
    if not mesh:
        return ""
    info = mesh[0].get("Info") or {}
    return info.get("version", "") or ""


def _data_plane_versions(data: dict[str, Any]) -> frozenset[str]:
    proxies = data.get("dataPlaneVersion") or []
    return frozenset(p["IstioVersion"] for p in proxies if p.get("IstioVersion"))


def map_version_output(output: str, target_version: str, target_prefix: str = "") -> MeshStatus:
    """Build a MeshStatus from istioctl version output.

    istioctl may print warnings before the JSON document; anything before the
    first ``{`` is ignored.

    Args:
        output: Raw command output
        target_version: Version to converge to
        target_prefix: Proxy image prefix for the target version

    Returns:
        MeshStatus snapshot

    Raises:
        IstioError: If the output is empty or not valid JSON
    """
    if not output:
        raise IstioError("the result of the version command is empty")

    start = output.find("{")
    if start > 0:
        output = output[start:]

    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise IstioError(f"Failed to parse version JSON: {e}") from e

    if not isinstance(data, dict):
        raise IstioError("Unexpected istioctl version output")

    return MeshStatus(
        client_version=_client_version(data),
        target_version=target_version,
        target_prefix=target_prefix,
        pilot_version=_pilot_version(data),
        data_plane_versions=_data_plane_versions(data),
    )
