"""
homevisit config: load from env.

load_postgres_config() for the data store, load_availability_config() for
slot computation and staff matching.
"""
from homevisit.config.availability import AvailabilityConfig, load_availability_config
from homevisit.config.postgres import PostgresConfig, load_postgres_config

__all__ = [
    "PostgresConfig",
    "load_postgres_config",
    "AvailabilityConfig",
    "load_availability_config",
]
