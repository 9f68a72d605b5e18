"""Formatting helpers for rich-rendered CLI output."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from rich import box
from rich.table import Table

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from services.base import (
        ApplicationInfo,
        BandwidthUsage,
        Ipv4Address,
        Ipv6Address,
        OperatingSystemInfo,
        SshKey,
        Subscription,
    )
    from vmetal_core import AppConfig

_SECRET_PLACEHOLDER = "•••••"
_NONE = "[dim]n/a[/dim]"

_STATUS_STYLES = {
    "active": "green",
    "pending": "yellow",
    "suspended": "red",
    "closed": "dim",
}


def config_summary_table(config: "AppConfig") -> Table:
    """Return a Rich table summarising the current application configuration."""

    table = Table(title="Configuration", box=box.ROUNDED, show_header=False)
    table.add_column("Key", style="bold cyan")
    table.add_column("Value", overflow="fold")
    table.add_row("Vultr API key", _SECRET_PLACEHOLDER if config.api_key else _NONE)
    table.add_row("API base URL", config.base_url)
    table.add_row("Timeout (s)", str(config.timeout))
    return table


def subscriptions_table(subscriptions: Sequence["Subscription"]) -> Table:
    table = Table(title="Bare-metal servers", box=box.ROUNDED)
    table.add_column("SUBID", style="bold")
    table.add_column("Label")
    table.add_column("Status")
    table.add_column("Main IP")
    table.add_column("Location")
    table.add_column("OS")
    table.add_column("Plan")
    table.add_column("Tag")
    for sub in subscriptions:
        style = _STATUS_STYLES.get(sub.status, "white")
        table.add_row(
            str(sub.subscription_id),
            sub.label or _NONE,
            f"[{style}]{sub.status or 'unknown'}[/{style}]",
            sub.main_ip or _NONE,
            sub.location or _NONE,
            sub.os or _NONE,
            str(sub.plan_id) if sub.plan_id is not None else _NONE,
            sub.tag or _NONE,
        )
    return table


def subscription_detail_table(sub: "Subscription") -> Table:
    table = Table(show_header=False, box=box.ROUNDED)
    table.add_column("Field", style="bold")
    table.add_column("Value", overflow="fold")
    rows = (
        ("SUBID", str(sub.subscription_id)),
        ("Status", sub.status),
        ("Label", sub.label),
        ("Tag", sub.tag),
        ("Main IP", sub.main_ip),
        ("Gateway", sub.gateway_v4),
        ("Netmask", sub.netmask_v4),
        ("Location", f"{sub.location} (DCID {sub.region_id})" if sub.region_id is not None else sub.location),
        ("Plan", str(sub.plan_id) if sub.plan_id is not None else None),
        ("OS", f"{sub.os} (OSID {sub.os_id})" if sub.os_id is not None else sub.os),
        ("CPU / RAM / disk", f"{sub.cpu_count} / {sub.ram} / {sub.disk}"),
        ("Created", sub.created_at.isoformat(sep=" ") if sub.created_at else None),
    )
    for label, value in rows:
        table.add_row(label, value or _NONE)
    return table


def ssh_keys_table(keys: Sequence["SshKey"]) -> Table:
    table = Table(title="SSH keys", box=box.ROUNDED)
    table.add_column("SSHKEYID", style="bold")
    table.add_column("Name")
    table.add_column("Key", overflow="fold")
    for key in keys:
        table.add_row(key.identifier, key.name or _NONE, _short_key(key.public_key))
    return table


def ipv4_table(addresses: Sequence["Ipv4Address"]) -> Table:
    table = Table(title="IPv4", box=box.ROUNDED)
    for column in ("IP", "Netmask", "Gateway", "Type", "Reverse"):
        table.add_column(column)
    for item in addresses:
        table.add_row(item.ip, item.netmask or _NONE, item.gateway or _NONE, item.type or _NONE, item.reverse or _NONE)
    return table


def ipv6_table(addresses: Sequence["Ipv6Address"]) -> Table:
    table = Table(title="IPv6", box=box.ROUNDED)
    for column in ("IP", "Network", "Size", "Type"):
        table.add_column(column)
    for item in addresses:
        size = str(item.network_size) if item.network_size is not None else _NONE
        table.add_row(item.ip, item.network or _NONE, size, item.type or _NONE)
    return table


def bandwidth_table(usage: "BandwidthUsage") -> Table:
    table = Table(title="Bandwidth", box=box.ROUNDED)
    table.add_column("Date")
    table.add_column("Incoming", justify="right")
    table.add_column("Outgoing", justify="right")
    outgoing = dict(usage.outgoing)
    incoming = dict(usage.incoming)
    for day in sorted(set(incoming) | set(outgoing)):
        table.add_row(day.isoformat(), _format_bytes(incoming.get(day, 0)), _format_bytes(outgoing.get(day, 0)))
    return table


def change_options_table(options: Sequence["OperatingSystemInfo"] | Sequence["ApplicationInfo"], title: str) -> Table:
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Surcharge", justify="right")
    for option in options:
        identifier = getattr(option, "os_id", None)
        if identifier is None:
            identifier = getattr(option, "app_id")
        table.add_row(str(identifier), option.name, f"{option.surcharge:.2f}")
    return table


def _short_key(public_key: str) -> str:
    parts = public_key.split()
    if len(parts) < 2 or len(parts[1]) <= 24:
        return public_key
    parts[1] = f"{parts[1][:12]}…{parts[1][-8:]}"
    return " ".join(parts)


def _format_bytes(value: int) -> str:
    size = float(value)
    for unit in ("B", "KiB", "MiB", "GiB"):
        if size < 1024:
            return f"{size:.1f} {unit}" if unit != "B" else f"{int(size)} B"
        size /= 1024
    return f"{size:.1f} TiB"
