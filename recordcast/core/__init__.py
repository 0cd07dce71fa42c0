# Core module exports
from recordcast.core.config import Settings, get_settings
from recordcast.core.logging import (
    configure_logging,
    get_logger,
    bind_context,
    clear_context,
    unbind_context,
    engine_logger,
    registry_logger,
)
