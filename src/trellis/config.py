"""Engine configuration.

EngineConfig is a frozen dataclass — immutable after creation, no
string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Engine configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = EngineConfig(debug=True, port=3000)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    workers: int = 1

    # Logging
    log_level: str = "info"

    # Routing
    # When False, a path that exists under another method answers 404
    # instead of 405, and no Allow header is sent.
    handle_method_not_allowed: bool = True

    # Limits
    max_content_length: int = 16 * 1024 * 1024  # 16 MB
