"""Process-wide generator and convenience functions.

The ``global_generator`` holder lazily creates a single ``Scru64Generator``
the first time it is used, reading the node configuration from the
``SCRU64_NODE_SPEC`` environment variable unless ``initialize`` was called
beforehand. The convenience functions delegate to it.

Example:
    >>> global_generator.initialize("42/8")
    True
    >>> len(scru64_string())
    12
"""

from __future__ import annotations

import threading

from scru64.config import GeneratorSettings
from scru64.generator import Scru64Generator
from scru64.identifier import Scru64Id
from scru64.node_spec import NodeSpec
from scru64.observability import get_logger

__all__ = [
    "GlobalGenerator",
    "global_generator",
    "scru64",
    "scru64_async",
    "scru64_string",
    "scru64_string_async",
]

logger = get_logger(__name__)


class GlobalGenerator:
    """Holds at most one lazily created generator shared by a process.

    Initialization happens exactly once, guarded by a lock; later calls to
    ``initialize`` leave the existing generator untouched.
    """

    def __init__(self) -> None:
        self._generator: Scru64Generator | None = None
        self._lock = threading.Lock()

    def initialize(self, node_spec: NodeSpec | str) -> bool:
        """Configure the holder with a node spec unless it is already configured.

        Returns:
            True if the generator was created by this call, False if one
            already existed.

        Raises:
            InvalidSyntaxError: If a node spec string is malformed.
            OutOfRangeError: If the node spec is out of its valid range.
        """
        if self._generator is not None:
            return False
        with self._lock:
            if self._generator is not None:
                return False
            self._generator = Scru64Generator(node_spec)
            logger.info(
                "scru64.global_generator.initialized",
                node_spec=str(self._generator.node_spec),
                source="initialize",
            )
            return True

    @property
    def is_initialized(self) -> bool:
        return self._generator is not None

    def get(self) -> Scru64Generator:
        """Return the generator, creating it from the environment on first use.

        Raises:
            GlobalGeneratorConfigError: If no node spec was configured and
                none can be read from the environment.
            InvalidSyntaxError: If the configured node spec is malformed.
            OutOfRangeError: If the configured node spec is out of range.
        """
        generator = self._generator
        if generator is not None:
            return generator
        with self._lock:
            if self._generator is None:
                self._generator = GeneratorSettings.from_env().create_generator()
                logger.info(
                    "scru64.global_generator.initialized",
                    node_spec=str(self._generator.node_spec),
                    source="env",
                )
            return self._generator

    @property
    def node_id(self) -> int:
        return self.get().node_id

    @property
    def node_id_size(self) -> int:
        return self.get().node_id_size

    @property
    def node_spec(self) -> NodeSpec:
        return self.get().node_spec

    def generate(self) -> Scru64Id | None:
        return self.get().generate()

    def generate_or_reset(self) -> Scru64Id:
        return self.get().generate_or_reset()

    def generate_or_sleep(self) -> Scru64Id:
        return self.get().generate_or_sleep()

    async def generate_or_await(self) -> Scru64Id:
        return await self.get().generate_or_await()


global_generator = GlobalGenerator()


def scru64() -> Scru64Id:
    """Generate a new SCRU64 ID using the global generator.

    Usually returns immediately; upon a significant clock rollback it blocks
    until the clock catches up. Use ``scru64_async`` in asynchronous code.

    Raises:
        GlobalGeneratorConfigError: If the global generator is not configured.
    """
    return global_generator.generate_or_sleep()


def scru64_string() -> str:
    """Generate a new SCRU64 ID string using the global generator."""
    return str(scru64())


async def scru64_async() -> Scru64Id:
    """Generate a new SCRU64 ID using the global generator without blocking.

    Raises:
        GlobalGeneratorConfigError: If the global generator is not configured.
    """
    return await global_generator.generate_or_await()


async def scru64_string_async() -> str:
    """Generate a new SCRU64 ID string using the global generator without blocking."""
    return str(await scru64_async())
