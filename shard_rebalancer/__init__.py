# ruff: noqa: E402
try:
    from importlib.metadata import PackageNotFoundError, version
except (ImportError, ModuleNotFoundError):  # pragma:nocover
    from importlib_metadata import PackageNotFoundError, version  # type: ignore[assignment,no-redef,unused-ignore]

__appname__ = "shard-rebalancer"

try:
    __version__ = version(__appname__)
except PackageNotFoundError:  # pragma: no cover
    __version__ = "unknown"

from .config import RebalancerSettings
from .controller import RebalanceController
from .scheduler import Scheduler

__all__ = [
    "RebalanceController",
    "RebalancerSettings",
    "Scheduler",
]
