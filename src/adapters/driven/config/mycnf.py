"""Connection target resolution from a MySQL option file (.my.cnf)."""

from __future__ import annotations

import configparser
import logging
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator
from sqlalchemy.engine import URL

from src.core.errors import ConfigError

__all__ = [
    "ClientSection",
    "ConnectionTarget",
    "SocketAddress",
    "TcpAddress",
    "load_mycnf",
    "parse_mycnf",
]

logger = logging.getLogger(__name__)

DEFAULT_SECTION = "client"
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 3306
DRIVER_NAME = "mysql+aiomysql"


@dataclass(slots=True, frozen=True)
class SocketAddress:
    """Unix domain socket address."""

    path: str


@dataclass(slots=True, frozen=True)
class TcpAddress:
    """TCP address."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT


@dataclass(slots=True, frozen=True)
class ConnectionTarget:
    """Resolved credentials and address of the monitored server.

    Attributes:
        user: Login name.
        password: Login password.
        address: Socket or TCP address; never both.
    """

    user: str
    password: str
    address: SocketAddress | TcpAddress

    @property
    def location(self) -> str:
        """Address part of the DSN, safe to log: `tcp(host:port)` or `unix(path)`."""
        if isinstance(self.address, SocketAddress):
            return f"unix({self.address.path})"
        return f"tcp({self.address.host}:{self.address.port})"

    @property
    def dsn(self) -> str:
        """Data source name, e.g. `root:abc123@tcp(localhost:3306)/`."""
        return f"{self.user}:{self.password}@{self.location}/"

    def sqlalchemy_url(self) -> URL:
        """URL for an async SQLAlchemy engine using the aiomysql driver."""
        if isinstance(self.address, SocketAddress):
            return URL.create(
                DRIVER_NAME,
                username=self.user,
                password=self.password,
                host=DEFAULT_HOST,
                query={"unix_socket": self.address.path},
            )
        return URL.create(
            DRIVER_NAME,
            username=self.user,
            password=self.password,
            host=self.address.host,
            port=self.address.port,
        )

    def __repr__(self) -> str:
        return f"ConnectionTarget(user={self.user!r}, password='***', address={self.address!r})"


class ClientSection(BaseModel):
    """Validated connection options of the credentials section.

    Attributes:
        user: Login name (required, non-empty).
        password: Login password (required, non-empty).
        host: Server host; ignored when socket is set.
        port: Server port; ignored when socket is set.
        socket: Unix socket path; takes precedence over host/port.
    """

    user: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    host: str | None = None
    port: int | None = Field(default=None, ge=1, le=65535)
    socket: str | None = None

    @field_validator("host", "socket")
    @classmethod
    def validate_optional_text(cls, v: str | None) -> str | None:
        """Treat empty values as unset.

        Args:
            v: Option value.

        Returns:
            The value, or None if it is empty.
        """
        return v or None

    def to_target(self) -> ConnectionTarget:
        """Resolve the address; a socket always wins over host/port."""
        if self.socket is not None:
            if self.host is not None or self.port is not None:
                logger.debug("Both socket and host/port configured, using socket")
            return ConnectionTarget(self.user, self.password, SocketAddress(self.socket))
        return ConnectionTarget(
            self.user,
            self.password,
            TcpAddress(host=self.host or DEFAULT_HOST, port=self.port or DEFAULT_PORT),
        )


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def _read_sections(text: str) -> configparser.ConfigParser:
    parser = configparser.ConfigParser(
        delimiters=("=",),
        comment_prefixes=("#", ";"),
        inline_comment_prefixes=None,
        strict=False,
        empty_lines_in_values=False,
        interpolation=None,
        default_section="\x00",
    )
    # Every line stands alone: indentation never makes a continuation line.
    lines = "\n".join(line.strip() for line in text.splitlines())
    try:
        parser.read_string(lines)
    except configparser.Error as e:
        raise ConfigError(f"Invalid option file syntax: {e}") from e
    return parser


def parse_mycnf(text: str, section: str = DEFAULT_SECTION) -> ConnectionTarget:
    """Resolve an option file into a connection target.

    Every non-blank, non-comment line must be a `[section]` header or a
    `key = value` pair, in any section. The credentials section must hold
    `user` and `password`; `socket` takes precedence over `host`/`port`,
    which default to localhost:3306.

    Args:
        text: Option file contents.
        section: Name of the credentials section.

    Returns:
        The resolved target.

    Raises:
        ConfigError: If the file is malformed, the section is missing, or a
            required option is missing or invalid.
    """
    parser = _read_sections(text)
    if not parser.has_section(section):
        raise ConfigError(f"Option file has no [{section}] section")

    options = {key: _unquote(value) for key, value in parser.items(section)}
    try:
        client = ClientSection.model_validate(options)
    except ValidationError as e:
        problems = "; ".join(f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors())
        raise ConfigError(f"Invalid [{section}] section: {problems}") from e

    return client.to_target()


def load_mycnf(path: str | Path, section: str = DEFAULT_SECTION) -> ConnectionTarget:
    """Read and resolve an option file.

    Args:
        path: File path; `~` is expanded.
        section: Name of the credentials section.

    Raises:
        ConfigError: If the file cannot be read or does not resolve.
    """
    file_path = Path(path).expanduser()
    try:
        text = file_path.read_text()
    except OSError as e:
        raise ConfigError(f"Option file not readable: {file_path}") from e

    target = parse_mycnf(text, section)
    logger.debug(f"Resolved connection target from {file_path}: {target!r}")
    return target
