"""
Structured-record catalog probes.

The catalog answers whether a candidate qualified name exists, is free to be
created, or is rejected outright. Probes are read-only and idempotent, so a
transient failure may simply be retried.
"""

import logging
import subprocess
import time
from typing import Iterable, Optional, Protocol, Sequence

from ..config import CatalogConfig
from ..errors import AmbiguousName
from .escaping import escape_shell
from .models import CatalogStatus

logger = logging.getLogger(__name__)


class CatalogProbe(Protocol):
    """Protocol for dataset existence queries."""

    def probe(self, name: str) -> CatalogStatus:
        """Answer the existence query for ``name``.

        Raises:
            AmbiguousName: If the catalog backend could not answer.
        """
        ...


class OfflineCatalog:
    """Catalog backed by a fixed set of known dataset names.

    Any name not in the set is reported as not found, i.e. legal and
    creatable.
    """

    def __init__(self, known_names: Optional[Iterable[str]] = None):
        self.known_names = frozenset(known_names or ())

    def probe(self, name: str) -> CatalogStatus:
        if name in self.known_names:
            return CatalogStatus.EXISTS
        return CatalogStatus.NOT_FOUND


class CommandCatalog:
    """Catalog answered by running a shell command per candidate name.

    The command template receives the shell-escaped name through a ``{name}``
    placeholder; its exit status is mapped onto a catalog answer and its output
    is discarded.
    """

    def __init__(
        self,
        command: str,
        exists_exit_codes: Sequence[int] = (0,),
        not_found_exit_codes: Sequence[int] = (4,),
        timeout: int = 30,
        max_retries: int = 2,
        retry_delay: float = 0.5,
    ):
        if "{name}" not in command:
            raise ValueError("Catalog command must contain a {name} placeholder")
        self.command = command
        self.exists_exit_codes = frozenset(exists_exit_codes)
        self.not_found_exit_codes = frozenset(not_found_exit_codes)
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    def render(self, name: str) -> str:
        return self.command.replace("{name}", escape_shell(name))

    def probe(self, name: str) -> CatalogStatus:
        command = self.render(name)
        last_error: Optional[Exception] = None

        for attempt in range(self.max_retries + 1):
            try:
                result = subprocess.run(
                    ["sh", "-c", command],
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    timeout=self.timeout,
                )
                return self._map_exit_code(name, result.returncode)
            except (subprocess.TimeoutExpired, OSError) as e:
                last_error = e
                if attempt < self.max_retries:
                    wait_time = self.retry_delay * (2**attempt)
                    logger.debug(
                        f"Catalog probe for {name!r} failed ({e}), "
                        f"retrying in {wait_time:.2f}s"
                    )
                    time.sleep(wait_time)

        raise AmbiguousName(name, str(last_error))

    def _map_exit_code(self, name: str, returncode: int) -> CatalogStatus:
        if returncode in self.exists_exit_codes:
            return CatalogStatus.EXISTS
        if returncode in self.not_found_exit_codes:
            return CatalogStatus.NOT_FOUND
        logger.debug(f"Catalog command rejected {name!r} with exit code {returncode}")
        return CatalogStatus.INVALID_SYNTAX


def create_catalog_probe(config: CatalogConfig) -> CatalogProbe:
    """Build the catalog probe selected by configuration."""
    if config.mode == "command":
        if not config.command:
            raise ValueError("catalog.command is required when catalog.mode is 'command'")
        return CommandCatalog(
            command=config.command,
            exists_exit_codes=config.exists_exit_codes,
            not_found_exit_codes=config.not_found_exit_codes,
            timeout=config.timeout,
            max_retries=config.max_retries,
            retry_delay=config.retry_delay,
        )
    return OfflineCatalog(config.known_names)
