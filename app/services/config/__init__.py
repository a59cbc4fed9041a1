"""Configuration package (Facade).

Re-exports the public config types so callers import from a single, stable path:

	from app.services.config import ProvisioningConfig

The underlying module layout can then change without touching call sites.
"""

from app.services.config.provisioning_config import ProvisioningConfig

__all__ = ["ProvisioningConfig"]
