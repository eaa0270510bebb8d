"""Installation summary and network reachability probes."""

import socket
import subprocess

from . import services, shell
from .base import BaseOrchestrator
from .settings import InstallConfig


def probe_host(host: str, timeout: int = 2) -> bool:
    """Send a single ICMP echo to a host."""
    result = subprocess.run(
        ["ping", "-c", "1", "-W", str(timeout), host],
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )
    return result.returncode == 0


class Reporter(BaseOrchestrator):
    """Prints what was installed, what to do next, and probes peer hosts."""

    def __init__(
        self,
        config: InstallConfig,
        version: str = "",
        dry_run: bool = False,
        verbose: bool = False,
    ):
        super().__init__(dry_run=dry_run, verbose=verbose)
        self.config = config
        self.version = version

    def initiate_command(self, hostname: str = "") -> str:
        """The mongosh command that initializes a one-member replica set on this host."""
        cfg = self.config
        host = f"{hostname or socket.gethostname()}.{cfg.internal_domain}:{cfg.port}"
        return (
            f"mongosh --eval 'rs.initiate({{_id:\"{cfg.replset}\", "
            f"members:[{{_id:0, host:\"{host}\"}}]}})'"
        )

    def summary_lines(self) -> list[str]:
        """The installation summary table."""
        cfg = self.config
        version = self.version or shell.server_version(cfg.server_binary) or "unknown"
        return [
            f"MongoDB Version: {version}",
            f"Service Status: {services.active_state(cfg.service)}",
            f"Enabled on Boot: {services.enabled_state(cfg.service)}",
            f"Data Directory: {cfg.db_path}",
            f"Log File: {cfg.log_file}",
            f"Config File: {cfg.config_file}",
            f"Replica Set Name: {cfg.replset}",
        ]

    def next_steps(self) -> list[str]:
        cfg = self.config
        return [
            "Quick Commands:",
            f"  {cfg.status_script.name:<24} - Check MongoDB status",
            f"  {cfg.shell_binary:<24} - Connect to MongoDB",
            f"  sudo systemctl status {cfg.service}  - Service status",
            f"  sudo tail -f {cfg.log_file}  - Follow logs",
            "",
            "Next Steps:",
            "1. Install MongoDB on other VMs (if setting up replica set)",
            "2. Initialize replica set with:",
            f"   {self.initiate_command()}",
            "3. Create MongoDB users and enable authentication",
        ]

    def print_summary(self) -> None:
        print("")
        print("=" * 42)
        print("MongoDB Installation Summary")
        print("=" * 42)
        for line in self.summary_lines():
            print(line)
        print("")
        for line in self.next_steps():
            print(line)
        print("")

    def probe_network(self) -> dict[str, bool]:
        """
        Ping each peer host once; unreachable hosts are only a warning.

        Returns:
            Mapping of host to reachability
        """
        self.log("Testing network connectivity to common MongoDB DNS names...")
        reachable = {}
        for host in self.config.probe_hosts:
            ok = probe_host(host, self.config.probe_timeout)
            reachable[host] = ok
            if ok:
                self.success(f"Network connectivity to {host}: OK")
            else:
                self.warning(f"Network connectivity to {host}: FAILED (may not exist yet)")
        return reachable

    def run(self) -> None:
        if self.dry_run:
            self.log("Would print installation summary and probe peer hosts")
            return

        self.print_summary()
        self.success("MongoDB installation completed successfully!")
        self.probe_network()
