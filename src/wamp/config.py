"""
wamp - Configuration
====================

Transpiler configuration. Values can come from:
- Default values (defined here)
- Explicit keyword arguments
- Environment variables (via TranspilerConfig.from_env)

Memory sizes are in WebAssembly pages of 64 KiB:
- 1 page = 64 KiB
- 256 pages = 16 MiB (default)
- 65536 pages = 4 GiB (32-bit address space limit)
"""

from dataclasses import dataclass
import os

from wamp.errors import ConfigError


# Default page count for the synthesized memory import
DEFAULT_MEMORY_SIZE = 256

# Largest page count addressable with 32-bit offsets
MAX_MEMORY_SIZE = 65536

# Environment variable read by from_env() and the CLI
MEMORY_SIZE_ENV = "WAMP_MEMORY_SIZE"


@dataclass
class TranspilerConfig:
    """
    Configuration for one transpiler run.

    Attributes:
        memory_size: Page count of the imported memory (default: 256)
    """

    memory_size: int = DEFAULT_MEMORY_SIZE

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """
        Check that every option is in range.

        Raises:
            ConfigError: If an option is invalid
        """
        if isinstance(self.memory_size, bool) or not isinstance(self.memory_size, int):
            raise ConfigError(
                f"memory size must be an integer, got {self.memory_size!r}"
            )
        if not 1 <= self.memory_size <= MAX_MEMORY_SIZE:
            raise ConfigError(
                f"memory size must be between 1 and {MAX_MEMORY_SIZE} pages, "
                f"got {self.memory_size}"
            )

    @classmethod
    def from_env(cls) -> "TranspilerConfig":
        """
        Create a TranspilerConfig from environment variables.

        Environment variables (all optional):
            WAMP_MEMORY_SIZE: Page count of the imported memory

        Returns:
            TranspilerConfig with environment overrides applied
        """
        config = cls()

        if MEMORY_SIZE_ENV in os.environ:
            raw = os.environ[MEMORY_SIZE_ENV].strip()
            try:
                config.memory_size = int(raw, 0)
            except ValueError:
                raise ConfigError(
                    f"{MEMORY_SIZE_ENV} must be an integer, got {raw!r}"
                ) from None
            config.validate()

        return config
