"""
Config — centralized configuration with env overrides.

All server and tool parameters are configurable via CB_* environment
variables with sensible defaults. Layout geometry is fixed and lives in
circuit_builder.schematic.layout, not here.
"""
import os
from dataclasses import dataclass


@dataclass(frozen=True)
class BuilderConfig:
    """Immutable server configuration. Env vars override defaults."""

    # Server
    host: str = os.getenv("CB_HOST", "0.0.0.0")
    port: int = int(os.getenv("CB_PORT", "3000"))
    base_url: str = os.getenv("CB_BASE_URL", "http://localhost:3000")

    # Output
    output_dir: str = os.getenv("CB_OUTPUT_DIR", "output")
    export_base_url: str = os.getenv("CB_EXPORT_BASE_URL", "https://example.local/exports")

    # Purchasing
    unit_price_estimate_usd: float = float(os.getenv("CB_UNIT_PRICE_USD", "1.25"))
    delivery_time: str = os.getenv("CB_DELIVERY_TIME", "3-7 business days")

    # Logging
    log_enabled: bool = os.getenv("CB_LOG", "1") not in ("0", "false", "no")


# Singleton
CONFIG = BuilderConfig()
