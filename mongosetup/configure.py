"""Service account, directories, mongod.conf and the status helper."""

from .base import BaseOrchestrator
from .files import backup_file, ensure_dir, render_template, set_permissions_recursive, write_file
from .settings import InstallConfig
from .users import create_system_user, describe_user, user_exists

MONGOD_CONF_TEMPLATE = "mongod.conf.j2"
STATUS_SCRIPT_TEMPLATE = "mongodb-status.j2"


def render_mongod_conf(config: InstallConfig) -> str:
    """Render mongod.conf for the given settings."""
    return render_template(MONGOD_CONF_TEMPLATE, {
        "db_path": config.db_path,
        "log_file": config.log_file,
        "port": config.port,
        "bind_ip": config.bind_ip,
        "timezone_info": config.timezone_info,
        "pid_file": config.pid_file,
        "replset": config.replset,
        "authorization": config.authorization,
    })


def render_status_script(config: InstallConfig) -> str:
    """Render the mongodb-status helper script."""
    return render_template(STATUS_SCRIPT_TEMPLATE, {
        "service": config.service,
        "server_binary": config.server_binary,
        "port": config.port,
        "log_file": config.log_file,
    })


class Configurator(BaseOrchestrator):
    """Prepares the host for mongod and writes its configuration."""

    def __init__(self, config: InstallConfig, dry_run: bool = False, verbose: bool = False):
        super().__init__(dry_run=dry_run, verbose=verbose)
        self.config = config

    def ensure_account(self) -> None:
        """Make sure the service user exists, recreating it if the package did not."""
        user = self.config.user
        self.log(f"Verifying {user} user...")
        if user_exists(user):
            self.success(f"MongoDB user exists: {describe_user(user)}")
            return

        self.warning(f"MongoDB user {user} does not exist, recreating...")
        if self.dry_run:
            return

        if not create_system_user(user, self.config.group):
            self.fatal(f"Failed to create {user} user")
        self.record_change(f"Created user: {user}")
        self.success(f"MongoDB user recreated: {describe_user(user)}")

    def prepare_directories(self) -> None:
        """Create data, log and PID directories owned by the service account."""
        cfg = self.config
        self.log("Setting up data directories...")
        if self.dry_run:
            for path in (cfg.db_path, cfg.data_logs_dir, cfg.pid_dir):
                self.log(f"Would create {path} owned by {cfg.user}:{cfg.group}")
            return

        ensure_dir(cfg.db_path)
        ensure_dir(cfg.data_logs_dir)
        set_permissions_recursive(cfg.data_root, owner=cfg.user, group=cfg.group, mode=cfg.dir_mode)
        ensure_dir(cfg.pid_dir, owner=cfg.user, group=cfg.group)
        self.record_change(f"Prepared {cfg.data_root} and {cfg.pid_dir}")

    def write_config(self) -> None:
        """Back up any existing config, then overwrite it from the template."""
        config_file = self.config.config_file
        self.log("Configuring MongoDB...")
        content = render_mongod_conf(self.config)
        self.log_verbose(content)
        if self.dry_run:
            self.log(f"Would write {config_file}")
            return

        backup = backup_file(config_file, label="backup")
        if backup:
            self.record_change(f"Backed up {config_file} to {backup}")

        write_file(config_file, content, mode=0o644)
        self.record_change(f"Wrote {config_file}")
        self.success("MongoDB configuration created")

    def install_status_script(self) -> None:
        """Install the mongodb-status helper for operators."""
        path = self.config.status_script
        self.log("Creating MongoDB status script...")
        if self.dry_run:
            self.log(f"Would install {path}")
            return

        write_file(path, render_status_script(self.config), mode=0o755)
        self.record_change(f"Installed {path}")

    def run(self) -> None:
        """Prepare the account and directories and write mongod.conf."""
        self.log("=== Configuring MongoDB ===")

        self.ensure_account()
        self.prepare_directories()
        self.write_config()
