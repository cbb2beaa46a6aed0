"""
Command-line entry point for hostreconcile.

Examples:
    # Keep the Mellanox PriorityVLANTag setting converged until stopped
    hostreconcile --config /etc/hostreconcile.yaml monitor

    # Run a single reconciliation cycle and print the results
    hostreconcile reconcile

    # Apply the HNS SDNRemoteArpMacAddress setting once
    hostreconcile set-arp
"""

import argparse
import asyncio
import logging
import signal
import sys
from dataclasses import dataclass
from typing import Optional, Sequence

from .adapters import (
    MellanoxNetworkAdapter,
    PowerShellStateQuery,
    PriorityVLANTagMonitor,
    PriorityVLANTagReconciler,
    SdnRemoteArpSetter,
    has_network_adapter,
)
from .domain.models import CancellationToken
from .framework.configuration import (
    ConfigurationBuilder,
    ReconcilerConfiguration,
)
from .infrastructure.exceptions import ConfigurationError, HostReconcileException
from .infrastructure.executor import ShellCommandExecutor
from .infrastructure.observability import configure_from_settings

logger = logging.getLogger("hostreconcile.cli")


@dataclass
class Components:
    """Wired object graph for one process."""
    executor: ShellCommandExecutor
    query: PowerShellStateQuery
    adapter: MellanoxNetworkAdapter
    reconciler: PriorityVLANTagReconciler
    arp_setter: SdnRemoteArpSetter


def build_components(settings: ReconcilerConfiguration) -> Components:
    """Create the executor, query layer and reconcilers from configuration."""
    executor = ShellCommandExecutor(
        shell=settings.executor.shell,
        powershell_path=settings.executor.powershell_path,
        command_timeout=settings.executor.command_timeout,
    )
    query = PowerShellStateQuery(executor)
    adapter = MellanoxNetworkAdapter(query, verify_after_apply=settings.reconciliation.verify_after_apply)
    return Components(
        executor=executor,
        query=query,
        adapter=adapter,
        reconciler=PriorityVLANTagReconciler(adapter),
        arp_setter=SdnRemoteArpSetter(query),
    )


def load_settings(args: argparse.Namespace) -> ReconcilerConfiguration:
    builder = ConfigurationBuilder()
    if args.config:
        builder.add_yaml_source(args.config)
    builder.add_environment_source(env_file=args.env_file)

    overrides = {}
    if args.log_level:
        overrides["logging"] = {"level": args.log_level}
    if getattr(args, "interval", None) is not None:
        overrides["monitor"] = {"interval_seconds": args.interval}
    if overrides:
        builder.add_overrides(overrides)

    return builder.build().settings


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hostreconcile",
        description="Keep host network configuration converged to its desired values.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--env-file", help=".env file with HOSTRECONCILE_* variables")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured log level",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    monitor = subparsers.add_parser("monitor", help="Run the PriorityVLANTag monitor loop until stopped")
    monitor.add_argument("--interval", type=float, help="Seconds between cycles (non-positive means default)")

    subparsers.add_parser("reconcile", help="Run one PriorityVLANTag reconciliation cycle")
    subparsers.add_parser("set-arp", help="Apply the SDNRemoteArpMacAddress setting once")
    subparsers.add_parser("has-adapter", help="Exit 0 when a matching adapter exists")
    return parser


def _install_signal_handlers(token: CancellationToken) -> None:
    loop = asyncio.get_running_loop()

    def signal_handler():
        logger.info("Received shutdown signal")
        token.cancel("shutdown signal")

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, signal_handler)
        except NotImplementedError:
            # Windows event loops do not support add_signal_handler; the
            # token must be cancelled from inside the loop to wake its waiters.
            signal.signal(sig, lambda *_: loop.call_soon_threadsafe(signal_handler))


async def run_monitor(components: Components, settings: ReconcilerConfiguration) -> int:
    if not settings.monitor.enabled:
        logger.info("Monitor disabled by configuration")
        return 0

    if settings.sdn_remote_arp.enabled:
        try:
            await components.arp_setter.ensure()
        except HostReconcileException as e:
            logger.error(f"Failed to set SDNRemoteArpMacAddress: {e}")

    token = CancellationToken()
    _install_signal_handlers(token)
    monitor = PriorityVLANTagMonitor(components.reconciler, settings.monitor.interval_seconds)
    await monitor.run(token)
    return 0


async def run_reconcile(components: Components) -> int:
    results = await components.reconciler.reconcile_all()
    for result in results:
        print(result.describe())
    return 0 if all(result.succeeded for result in results) else 1


async def run_set_arp(components: Components) -> int:
    try:
        await components.arp_setter.ensure()
    except HostReconcileException as e:
        logger.error(f"Failed to set SDNRemoteArpMacAddress: {e}")
        return 1
    print("SDNRemoteArpMacAddress is set")
    return 0


async def run_has_adapter(components: Components) -> int:
    return 0 if await has_network_adapter(components.adapter) else 1


async def dispatch(args: argparse.Namespace, settings: ReconcilerConfiguration) -> int:
    components = build_components(settings)
    if args.command == "monitor":
        return await run_monitor(components, settings)
    if args.command == "reconcile":
        return await run_reconcile(components)
    if args.command == "set-arp":
        return await run_set_arp(components)
    if args.command == "has-adapter":
        return await run_has_adapter(components)
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args)
    except ConfigurationError as e:
        detail = e.get_detailed_message() if hasattr(e, "get_detailed_message") else str(e)
        print(f"Configuration error: {detail}", file=sys.stderr)
        return 2

    configure_from_settings(settings.logging)
    return asyncio.run(dispatch(args, settings))


if __name__ == "__main__":
    sys.exit(main())
