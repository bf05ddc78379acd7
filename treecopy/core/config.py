"""Configuration dataclasses with validation."""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


MIN_BUFFER_SIZE = 1024                  # 1 KiB
MAX_BUFFER_SIZE = 100 * 1024 * 1024     # 100 MiB
MAX_CONCURRENCY = 65535

DEFAULT_CONCURRENCY = 8
DEFAULT_BUFFER_SIZE = 81920             # 80 KiB


class ConflictMode(Enum):
    """What to do when a destination file already exists."""
    OVERWRITE = "overwrite"
    SKIP = "skip"
    CANCEL = "cancel"


@dataclass(frozen=True, slots=True)
class CopyConfig:
    """Settings for one copy engine.

    All fields are validated on construction. The engine holds one instance
    and swaps it for a new one when a setter is called, so a running copy
    always sees a consistent snapshot.
    """
    # Performance
    concurrency: int = DEFAULT_CONCURRENCY
    buffer_size: int = DEFAULT_BUFFER_SIZE

    # Behaviour
    conflict_mode: ConflictMode = ConflictMode.SKIP
    include_non_regular: bool = False
    audit_logging: bool = True

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not 1 <= self.concurrency <= MAX_CONCURRENCY:
            raise ValueError(
                f"Concurrency must be between 1 and {MAX_CONCURRENCY}, got {self.concurrency}"
            )

        if not MIN_BUFFER_SIZE <= self.buffer_size <= MAX_BUFFER_SIZE:
            raise ValueError(
                f"Buffer size must be between {MIN_BUFFER_SIZE} and {MAX_BUFFER_SIZE} bytes, "
                f"got {self.buffer_size}"
            )

        if not isinstance(self.conflict_mode, ConflictMode):
            raise ValueError(f"Unknown conflict mode: {self.conflict_mode!r}")

    def with_overrides(self, **kwargs) -> "CopyConfig":
        """Create a new config with some values overridden."""
        return replace(self, **kwargs)
