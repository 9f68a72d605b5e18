"""Typer commands for bare-metal server subscriptions."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from commands.common import load_adapter, reported_errors
from services.base import BaremetalCreateRequest
from services.baremetal import BaremetalService
from services.providers import build_baremetal_service
from ui.formatters import (
    bandwidth_table,
    change_options_table,
    ipv4_table,
    ipv6_table,
    subscription_detail_table,
    subscriptions_table,
)
from ui.menus import confirm_action

app = typer.Typer(help="Manage Vultr bare-metal servers")
console = Console()


def register(app_root: typer.Typer) -> None:
    """Attach bare-metal subcommands to the CLI."""

    app_root.add_typer(app, name="baremetal")


def _service() -> BaremetalService:
    return build_baremetal_service(load_adapter())


def _confirm(message: str, assume_yes: bool) -> None:
    if assume_yes or confirm_action(message):
        return
    typer.secho("Operation cancelled", fg=typer.colors.YELLOW)
    raise typer.Exit(code=1)


def _report(action: str, status: object) -> None:
    console.print(f"[green]{action}[/green] (HTTP {status})")


@app.command("list")
def list_servers(
    subscription_id: Optional[int] = typer.Option(None, "--subid", help="Only this subscription"),
    tag: Optional[str] = typer.Option(None, "--tag", help="Only servers with this tag"),
    label: Optional[str] = typer.Option(None, "--label", help="Only servers with this label"),
    main_ip: Optional[str] = typer.Option(None, "--main-ip", help="Only the server with this IPv4 address"),
) -> None:
    """List bare-metal servers, pending ones included."""

    service = _service()
    with reported_errors():
        servers = service.get_list(subscription_id, tag, label, main_ip)
    if not servers:
        typer.secho("No bare-metal servers found", fg=typer.colors.YELLOW)
        return
    console.print(subscriptions_table(servers))


@app.command("show")
def show(subscription_id: int = typer.Argument(..., help="Subscription ID")) -> None:
    """Show the details of one server."""

    service = _service()
    with reported_errors():
        servers = service.get_detail(subscription_id)
    if not servers:
        typer.secho(f"Server {subscription_id} not found", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    console.print(subscription_detail_table(servers[0]))


@app.command("create")
def create(
    region_id: int = typer.Option(..., "--region", help="Datacenter ID (DCID)"),
    plan_id: int = typer.Option(..., "--plan", help="Bare-metal plan ID (METALPLANID)"),
    os_id: int = typer.Option(..., "--os", help="Operating system ID (OSID)"),
    iso_id: Optional[str] = typer.Option(None, "--iso", help="ISO to mount for the custom OS"),
    script_id: Optional[int] = typer.Option(None, "--script", help="Startup script ID"),
    snapshot_id: Optional[str] = typer.Option(None, "--snapshot", help="Snapshot to restore"),
    enable_ipv6: Optional[bool] = typer.Option(None, "--ipv6/--no-ipv6", help="Assign an IPv6 subnet"),
    label: Optional[str] = typer.Option(None, "--label", help="Label shown in the control panel"),
    ssh_key_ids: Optional[List[str]] = typer.Option(None, "--ssh-key", help="SSHKEYID to install (repeatable)"),
    app_id: Optional[int] = typer.Option(None, "--app", help="Application ID to launch"),
    user_data_file: Optional[Path] = typer.Option(
        None, "--user-data-file", exists=True, dir_okay=False, help="Cloud-init user-data file"
    ),
    notify_activate: Optional[bool] = typer.Option(
        None, "--notify/--no-notify", help="Send an activation e-mail when ready"
    ),
    hostname: Optional[str] = typer.Option(None, "--hostname", help="Hostname to assign"),
    tag: Optional[str] = typer.Option(None, "--tag", help="Tag to assign"),
) -> None:
    """Provision a new bare-metal server. Billing starts immediately."""

    request = BaremetalCreateRequest(
        region_id=region_id,
        plan_id=plan_id,
        os_id=os_id,
        iso_id=iso_id,
        script_id=script_id,
        snapshot_id=snapshot_id,
        enable_ipv6=enable_ipv6,
        label=label,
        ssh_key_ids=tuple(ssh_key_ids or ()),
        app_id=app_id,
        user_data=user_data_file.read_text(encoding="utf-8") if user_data_file else None,
        notify_activate=notify_activate,
        hostname=hostname,
        tag=tag,
    )
    service = _service()
    with reported_errors():
        subscription_id = service.create(request)
    console.print(f"[green]Server requested: SUBID {subscription_id}[/green]")
    console.print("Provisioning takes a while; check progress with 'vmetal baremetal list'.")


@app.command("destroy")
def destroy(
    subscription_id: int = typer.Argument(..., help="Subscription ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Destroy a server. All data is lost and the IP address is released."""

    _confirm(f"Destroy server {subscription_id}? This cannot be undone.", yes)
    service = _service()
    with reported_errors():
        status = service.destroy(subscription_id)
    _report(f"Server {subscription_id} destroyed", status)


@app.command("reboot")
def reboot(subscription_id: int = typer.Argument(..., help="Subscription ID")) -> None:
    """Hard reboot a server."""

    service = _service()
    with reported_errors():
        status = service.reboot(subscription_id)
    _report(f"Server {subscription_id} rebooting", status)


@app.command("reinstall")
def reinstall(
    subscription_id: int = typer.Argument(..., help="Subscription ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Reinstall the operating system. All data is lost."""

    _confirm(f"Reinstall server {subscription_id}? All data will be lost.", yes)
    service = _service()
    with reported_errors():
        status = service.reinstall(subscription_id)
    _report(f"Server {subscription_id} reinstalling", status)


@app.command("label")
def set_label(
    subscription_id: int = typer.Argument(..., help="Subscription ID"),
    label: str = typer.Argument(..., help="New label"),
) -> None:
    """Set the label shown in the control panel."""

    service = _service()
    with reported_errors():
        status = service.set_label(subscription_id, label)
    _report(f"Label of server {subscription_id} updated", status)


@app.command("os-list")
def os_list(subscription_id: int = typer.Argument(..., help="Subscription ID")) -> None:
    """List operating systems the server can be changed to."""

    service = _service()
    with reported_errors():
        options = service.get_os_change_list(subscription_id)
    console.print(change_options_table(options, "Operating systems"))


@app.command("os-change")
def os_change(
    subscription_id: int = typer.Argument(..., help="Subscription ID"),
    os_id: int = typer.Argument(..., help="Target OSID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Change the operating system. All data is lost."""

    _confirm(f"Change OS of server {subscription_id} to {os_id}? All data will be lost.", yes)
    service = _service()
    with reported_errors():
        status = service.os_change(subscription_id, os_id)
    _report(f"Server {subscription_id} switching to OS {os_id}", status)


@app.command("app-list")
def app_list(subscription_id: int = typer.Argument(..., help="Subscription ID")) -> None:
    """List applications the server can be changed to."""

    service = _service()
    with reported_errors():
        options = service.get_app_change_list(subscription_id)
    console.print(change_options_table(options, "Applications"))


@app.command("app-change")
def app_change(
    subscription_id: int = typer.Argument(..., help="Subscription ID"),
    app_id: int = typer.Argument(..., help="Target APPID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Reinstall the server with an application. All data is lost."""

    _confirm(f"Change application of server {subscription_id} to {app_id}? All data will be lost.", yes)
    service = _service()
    with reported_errors():
        status = service.app_change(subscription_id, app_id)
    _report(f"Server {subscription_id} switching to application {app_id}", status)


@app.command("userdata-get")
def userdata_get(subscription_id: int = typer.Argument(..., help="Subscription ID")) -> None:
    """Print the decoded cloud-init user-data."""

    service = _service()
    with reported_errors():
        user_data = service.get_user_data(subscription_id)
    raw = user_data.encode("utf-8", "surrogateescape")
    typer.echo(raw, nl=not raw.endswith(b"\n"))


@app.command("userdata-set")
def userdata_set(
    subscription_id: int = typer.Argument(..., help="Subscription ID"),
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="File with the new user-data"),
) -> None:
    """Replace the cloud-init user-data."""

    content = path.read_text(encoding="utf-8")
    service = _service()
    with reported_errors():
        status = service.set_user_data(subscription_id, content)
    _report(f"User-data of server {subscription_id} updated", status)


@app.command("bandwidth")
def bandwidth(subscription_id: int = typer.Argument(..., help="Subscription ID")) -> None:
    """Show daily bandwidth usage."""

    service = _service()
    with reported_errors():
        usage = service.get_bandwidth(subscription_id)
    console.print(bandwidth_table(usage))


@app.command("ipv4")
def ipv4(subscription_id: int = typer.Argument(..., help="Subscription ID")) -> None:
    """List IPv4 addresses of an active server."""

    service = _service()
    with reported_errors():
        addresses = service.get_ipv4_list(subscription_id)
    console.print(ipv4_table(addresses))


@app.command("ipv6")
def ipv6(subscription_id: int = typer.Argument(..., help="Subscription ID")) -> None:
    """List IPv6 addresses of an active server."""

    service = _service()
    with reported_errors():
        addresses = service.get_ipv6_list(subscription_id)
    if addresses is None:
        typer.secho(f"Server {subscription_id} has no IPv6 configured", fg=typer.colors.YELLOW)
        return
    console.print(ipv6_table(addresses))


@app.command("available")
def available(
    region_id: int = typer.Argument(..., help="Datacenter ID (DCID)"),
    plan_id: int = typer.Argument(..., help="Bare-metal plan ID (METALPLANID)"),
) -> None:
    """Check whether a plan can be deployed in a region."""

    service = _service()
    with reported_errors():
        service.is_available(region_id, plan_id)
    console.print(f"[green]Plan {plan_id} is available in region {region_id}[/green]")
