import dataclasses
import os
import typing as t

from dotenv import load_dotenv

from shard_rebalancer.exception import ConfigurationError
from shard_rebalancer.model import PlanStrategy

ENVVAR_PREFIX = "REBALANCER_"


def asbool(obj: t.Any) -> bool:
    if isinstance(obj, str):
        obj = obj.strip().lower()
        if obj in ["true", "yes", "on", "y", "t", "1"]:
            return True
        elif obj in ["false", "no", "off", "n", "f", "0"]:
            return False
        else:
            raise ValueError("String is not true/false: %r" % obj)
    return bool(obj)


@dataclasses.dataclass
class RebalancerSettings:
    """
    Connection and tuning parameters for the rebalancer.

    Each field can be defined by an environment variable `REBALANCER_<FIELD>`,
    also from a `.env` file in the working directory.
    """

    url: str = dataclasses.field(
        default="http://localhost:9200",
        metadata={"help": "Base URL of the cluster management endpoint"},
    )
    username: t.Optional[str] = dataclasses.field(default=None, metadata={"help": "Username for basic auth"})
    password: t.Optional[str] = dataclasses.field(default=None, metadata={"help": "Password for basic auth"})
    ssl_verify: bool = dataclasses.field(default=True, metadata={"help": "Verify TLS certificates"})
    timeout: float = dataclasses.field(default=30.0, metadata={"help": "HTTP timeout in seconds"})
    threshold: int = dataclasses.field(
        default=10,
        metadata={"help": "Maximum shard count difference between nodes considered balanced"},
    )
    poll_interval: float = dataclasses.field(default=60.0, metadata={"help": "Seconds to wait between passes"})
    move_delay: float = dataclasses.field(default=5.0, metadata={"help": "Seconds to wait after each move"})
    settle_timeout: float = dataclasses.field(
        default=0.0,
        metadata={"help": "Seconds to wait for a move to show up in the routing state, 0 turns it off"},
    )
    strategy: PlanStrategy = dataclasses.field(
        default=PlanStrategy.FIXED,
        metadata={"help": "How relief targets are picked: fixed or adaptive"},
    )

    def __post_init__(self):
        self.validate()

    def validate(self):
        if not self.url:
            raise ConfigurationError("Missing cluster URL")
        try:
            self.strategy = PlanStrategy(self.strategy)
        except ValueError as ex:
            choices = ", ".join(item.value for item in PlanStrategy)
            raise ConfigurationError(f"Unknown strategy '{self.strategy}', choose one of: {choices}") from ex
        if self.threshold < 0:
            raise ConfigurationError(f"Threshold must not be negative: {self.threshold}")
        for name in ["timeout", "poll_interval", "move_delay", "settle_timeout"]:
            value = getattr(self, name)
            if value < 0:
                raise ConfigurationError(f"Setting '{name}' must not be negative: {value}")

    @property
    def base_url(self) -> str:
        return self.url.rstrip("/")

    @property
    def auth(self) -> t.Optional[t.Tuple[str, str]]:
        if self.username and self.password:
            return self.username, self.password
        return None

    @classmethod
    def from_env(cls, dotenv: bool = True, **overrides) -> "RebalancerSettings":
        """
        Read settings from environment variables, then apply non-empty overrides.
        """
        if dotenv:
            load_dotenv()

        kwargs: t.Dict[str, t.Any] = {}
        for field in dataclasses.fields(cls):
            value = os.environ.get(ENVVAR_PREFIX + field.name.upper())
            if value is not None and value != "":
                kwargs[field.name] = cls._convert(field, value)
        for name, value in overrides.items():
            if value is not None:
                kwargs[name] = value
        return cls(**kwargs)

    @staticmethod
    def _convert(field: dataclasses.Field, value: str) -> t.Any:
        converters: t.Dict[str, t.Callable[[str], t.Any]] = {
            "ssl_verify": asbool,
            "timeout": float,
            "threshold": int,
            "poll_interval": float,
            "move_delay": float,
            "settle_timeout": float,
        }
        converter = converters.get(field.name)
        if converter is None:
            return value
        try:
            return converter(value)
        except ValueError as ex:
            raise ConfigurationError(f"Invalid value for {ENVVAR_PREFIX}{field.name.upper()}: {value}") from ex
