"""mongosetup - install, configure and verify MongoDB on Ubuntu hosts."""

from .base import BaseOrchestrator, FatalError
from .checks import CheckResult, CheckStatus, Verifier
from .clean import Cleaner
from .configure import Configurator, render_mongod_conf
from .provision import Provisioner
from .report import Reporter
from .settings import InstallConfig, load_config

__all__ = [
    "BaseOrchestrator",
    "FatalError",
    "CheckResult",
    "CheckStatus",
    "Verifier",
    "Cleaner",
    "Configurator",
    "render_mongod_conf",
    "Provisioner",
    "Reporter",
    "InstallConfig",
    "load_config",
]
