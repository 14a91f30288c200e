"""Release and config-file schema numbers for amazon_ecs."""

__all__ = ["__version__", "CONFIG_SCHEMA_VERSION"]

#: Package release, also sent in the default User-Agent.
__version__ = "0.1.0"

#: Version of the SearchConfig JSON layout; migrate_config upgrades older files.
CONFIG_SCHEMA_VERSION = 1
