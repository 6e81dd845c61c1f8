"""
Sub-commands: clone, destroy, ip, list and config.

Each action takes the execution context plus the keyword parameters produced
by its parse hook and returns an exit code. Everything real is done by the
external tools through ``ctx.runner``.
"""

import os

import click
import yaml

from . import parsers
from .config import ConfigLoader
from .context import ExecutionContext
from .exceptions import ImageNotReadableError, ValidationError, VMNotFoundError
from .logging import logger
from .registry import PROG_NAME, ClickParser, CommandRegistry
from .security import CommandBuilder, SecurityValidator

registry = CommandRegistry()


# Argument declarations. The callbacks never run; only the parameters matter.

@click.command("clone", add_help_option=False)
@click.argument("from_vm")
@click.argument("new_vm")
def clone_args(from_vm: str, new_vm: str) -> None:
    pass


@click.command("destroy", add_help_option=False)
@click.argument("vm_name")
def destroy_args(vm_name: str) -> None:
    pass


@click.command("ip", add_help_option=False)
@click.argument("vm_name")
def ip_args(vm_name: str) -> None:
    pass


@click.command("list", add_help_option=False)
def list_args() -> None:
    pass


@click.command("config", add_help_option=False)
@click.argument("what", type=click.Choice(["show", "path"]), default="show")
def config_args(what: str) -> None:
    pass


def validate_clone(ctx: ExecutionContext, from_vm: str, new_vm: str) -> None:
    SecurityValidator.validate_vm_name(from_vm)
    SecurityValidator.validate_vm_name(new_vm)
    if from_vm == new_vm:
        raise ValidationError("source and new VM names must differ", "vm_name")


def validate_vm(ctx: ExecutionContext, vm_name: str) -> None:
    SecurityValidator.validate_vm_name(vm_name)


@registry.command("clone", parse=ClickParser(clone_args), validate=validate_clone)
def clone_vm(ctx: ExecutionContext, from_vm: str, new_vm: str) -> int:
    """Clone a VM onto a copy-on-write overlay of its disk and start it."""
    cmds = ctx.commands

    dump = ctx.runner.capture(cmds.virsh("dumpxml", from_vm))
    if not dump.success:
        raise VMNotFoundError(from_vm)

    disk = parsers.primary_disk(parsers.parse_domain_disks(dump.stdout))
    source = disk.path if disk else ""
    try:
        SecurityValidator.validate_image_path(source)
    except ValidationError:
        raise ImageNotReadableError(from_vm, source)

    overlay = os.path.join(
        os.path.dirname(source), f"{new_vm}.{ctx.config.overlay_format}"
    )
    if os.path.exists(overlay):
        raise ValidationError(f"overlay image already exists: {overlay}", "image_path")

    logger.info(
        f"Cloning {from_vm} to {new_vm} on overlay {overlay}",
        from_vm=from_vm,
        new_vm=new_vm,
        backing_file=source,
    )

    status = ctx.runner.run(cmds.qemu_img_create(overlay, source, disk.format))
    if status != 0:
        logger.error(f"Failed to create overlay {overlay}")
        return status

    # Set once virt-clone has defined the VM on top of the overlay
    overlay_in_use = False

    if ctx.config.remove_overlay_on_failure:

        def remove_overlay() -> None:
            if ctx.hooks.exit_code != 0 and not overlay_in_use:
                logger.warning(f"Removing overlay {overlay} after failed clone")
                ctx.runner.run(CommandBuilder.rm_file(overlay))

        ctx.hooks.on_exit(remove_overlay)

    status = ctx.runner.run(cmds.virt_clone(from_vm, new_vm, overlay))
    if status != 0:
        logger.error(f"virt-clone failed for {new_vm}")
        if not ctx.config.remove_overlay_on_failure:
            logger.warning(f"Overlay {overlay} was left on disk")
        return status

    overlay_in_use = True

    ctx.runner.run(cmds.virsh("list", "--all"))
    status = ctx.runner.run(cmds.virsh("start", new_vm))
    if status != 0:
        logger.error(f"Failed to start {new_vm}")
        return status

    logger.info(f"Once {new_vm} has booted, get its address with: {PROG_NAME} ip {new_vm}")
    return 0


@registry.command("destroy", parse=ClickParser(destroy_args), validate=validate_vm)
def destroy_vm(ctx: ExecutionContext, vm_name: str) -> int:
    """Stop and undefine a VM, then delete its disk files."""
    cmds = ctx.commands

    listing = ctx.runner.capture(cmds.virsh("list", "--all", "--name"))
    if not listing.success:
        logger.error(f"Cannot list VMs: {listing.stderr.strip()}")
        return listing.returncode
    if vm_name not in parsers.parse_domain_names(listing.stdout):
        raise VMNotFoundError(vm_name)

    # Fails when the VM is already stopped
    ctx.runner.run(cmds.virsh("destroy", vm_name))

    blklist = ctx.runner.capture(cmds.virsh("domblklist", vm_name))
    if not blklist.success:
        logger.error(
            f"Cannot list disks of {vm_name}: {blklist.stderr.strip()}; not undefining it"
        )
        return blklist.returncode
    files = parsers.backing_files(parsers.parse_block_devices(blklist.stdout))

    status = ctx.runner.run(cmds.virsh("undefine", vm_name))
    if status != 0:
        logger.error(f"Failed to undefine {vm_name}; disk files were kept")
        return status

    for path in files:
        if ctx.runner.run(CommandBuilder.rm_file(path)) != 0:
            logger.warning(f"Could not remove {path}")

    logger.info(f"Destroyed {vm_name}", vm_name=vm_name, removed_files=len(files))
    return 0


@registry.command("ip", parse=ClickParser(ip_args), validate=validate_vm)
def vm_ip(ctx: ExecutionContext, vm_name: str) -> int:
    """Print the IP addresses a VM's MACs have in the ARP cache."""
    cmds = ctx.commands

    iflist = ctx.runner.capture(cmds.virsh("domiflist", vm_name))
    if not iflist.success:
        logger.error(f"Cannot list interfaces of {vm_name}: {iflist.stderr.strip()}")
        return iflist.returncode

    macs = parsers.parse_mac_addresses(iflist.stdout)
    if not macs:
        logger.debug(f"{vm_name} has no network interfaces")
        return 0

    arp = ctx.runner.capture(cmds.arp())
    if not arp.success:
        logger.error(f"Cannot read the ARP cache: {arp.stderr.strip()}")
        return arp.returncode

    for mac in macs:
        address = parsers.lookup_ip(arp.stdout, mac)
        if address:
            click.echo(address)
    return 0


@registry.command("list", parse=ClickParser(list_args))
def list_vms(ctx: ExecutionContext) -> int:
    """List all VMs known to libvirt."""
    return ctx.runner.run(ctx.commands.virsh("list", "--all"))


@registry.command("config", parse=ClickParser(config_args))
def show_config(ctx: ExecutionContext, what: str) -> int:
    """Show the effective configuration, or where it is looked up."""
    if what == "path":
        click.echo("Configuration search paths (in order):")
        for i, path in enumerate(ConfigLoader.search_paths(), 1):
            exists = "✓" if os.path.exists(path) else "✗"
            click.echo(f"  {i}. {exists} {path}")
        explicit = os.getenv("VIRTWRAP_CONFIG")
        if explicit:
            click.echo(f"\nVIRTWRAP_CONFIG overrides the search: {explicit}")
        return 0

    click.echo(yaml.safe_dump(ctx.config.model_dump(), default_flow_style=False), nl=False)
    return 0
