"""Application configuration.

AppConfig is a frozen dataclass: immutable after creation, no string-key
dict lookups.
"""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application and server settings.  Override what you need::

        config = AppConfig(debug=True, port=3000)
    """

    # Application
    debug: bool = False  # 500 responses include the traceback
    strict: bool = False  # validate handler signatures at registration

    # Server (Granian)
    host: str = "127.0.0.1"
    port: int = 8000
    workers: int = 1
    reload: bool = False
    log_level: str = "info"
    log_access: bool = False

    def __post_init__(self) -> None:
        if not 0 < self.port < 65536:
            msg = f"port must be in 1..65535, got {self.port}"
            raise ValueError(msg)
        if self.workers < 1:
            msg = f"workers must be >= 1, got {self.workers}"
            raise ValueError(msg)

    def for_development(self) -> AppConfig:
        """Copy with dev-friendly server defaults (reload, debug and access logs)."""
        return replace(self, debug=True, reload=True, log_level="debug", log_access=True)
