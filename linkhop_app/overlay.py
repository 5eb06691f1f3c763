"""
Tailnet node resolution for the admin listener.

The admin listener must only be reachable over Tailscale. The local
tailscaled already owns the node identity, so we ask it for the node's
tailnet address and MagicDNS name, bind there, and serve the node's
Tailscale certificate. Failures here are fatal and happen before any
listener starts.
"""

import ipaddress
import json
import logging
import os
import subprocess
from dataclasses import dataclass
from typing import List, Optional

from linkhop_app.config import Settings
from linkhop_app.exceptions import OverlayError

logger = logging.getLogger("linkhop.overlay")


@dataclass(frozen=True)
class OverlayNode:
    """Where and how the admin listener binds."""
    hostname: str
    dns_name: str
    address: str
    certfile: str
    keyfile: str


def _run(cmd: List[str]) -> str:
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=True)
    except FileNotFoundError as exc:
        raise OverlayError(f"{cmd[0]} not found; is Tailscale installed?") from exc
    except subprocess.CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        raise OverlayError(f"{' '.join(cmd)} failed ({exc.returncode}): {stderr}") from exc
    return result.stdout


def _pick_address(addresses: List[str]) -> Optional[str]:
    """Prefer the node's IPv4 tailnet address, fall back to IPv6."""
    parsed = []
    for raw in addresses:
        try:
            parsed.append(ipaddress.ip_address(raw))
        except ValueError:
            continue
    for addr in parsed:
        if addr.version == 4:
            return str(addr)
    return str(parsed[0]) if parsed else None


def node_status(tailscale_bin: str) -> dict:
    """The Self section of `tailscale status --json`."""
    output = _run([tailscale_bin, "status", "--json"])
    try:
        status = json.loads(output)
    except json.JSONDecodeError as exc:
        raise OverlayError(f"could not parse tailscale status: {exc}") from exc
    node = status.get("Self") if isinstance(status, dict) else None
    if not node:
        raise OverlayError("tailscale status has no Self node; is tailscaled logged in?")
    return node


def ensure_certificate(tailscale_bin: str, dns_name: str, tls_dir: str) -> tuple:
    """Return (certfile, keyfile) for dns_name, provisioning them if missing."""
    certfile = os.path.join(tls_dir, f"{dns_name}.crt")
    keyfile = os.path.join(tls_dir, f"{dns_name}.key")
    if os.path.exists(certfile) and os.path.exists(keyfile):
        return certfile, keyfile

    os.makedirs(tls_dir, exist_ok=True)
    logger.info(f"Provisioning TLS certificate for {dns_name}")
    _run([tailscale_bin, "cert", "--cert-file", certfile, "--key-file", keyfile, dns_name])
    return certfile, keyfile


def resolve_node(settings: Settings) -> OverlayNode:
    """
    Resolve the admin listener's bind address and TLS files.

    Raises:
        OverlayError: if the daemon is unreachable, reports a different
            hostname, has no address, or the certificate cannot be issued
    """
    node = node_status(settings.tailscale_bin)

    hostname = node.get("HostName", "")
    if hostname != settings.admin_hostname:
        raise OverlayError(
            f"tailscale node is {hostname!r}, expected {settings.admin_hostname!r}"
        )

    dns_name = (node.get("DNSName") or "").rstrip(".")
    if not dns_name:
        raise OverlayError("tailscale node has no MagicDNS name; enable MagicDNS and HTTPS")

    address = settings.admin_bind_host or _pick_address(node.get("TailscaleIPs") or [])
    if not address:
        raise OverlayError("tailscale node has no tailnet address")

    certfile, keyfile = ensure_certificate(settings.tailscale_bin, dns_name, settings.tls_dir)
    logger.info(f"Admin listener will bind {address}:{settings.admin_port} as {dns_name}")
    return OverlayNode(
        hostname=hostname,
        dns_name=dns_name,
        address=address,
        certfile=certfile,
        keyfile=keyfile,
    )
