from __future__ import annotations

import importlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, cast

from folio.config import Config
from folio.core.db import Database

if TYPE_CHECKING:
    from folio.core.modules.access.service import AccessService
    from folio.core.modules.auth.service import AuthService
    from folio.core.modules.session.service import SessionService
    from folio.core.modules.user.service import UserService


class Service:
    """Base class for services with direct database access."""

    def __init__(self, database: Database) -> None:
        self.database = database
        self._core: Core | None = None

    async def on_start(self) -> None:
        """Initialize service on application startup."""

    async def on_stop(self) -> None:
        """Cleanup service on application shutdown."""

    @property
    def core(self) -> Core:
        """Get the core application context."""
        if self._core is None:
            raise RuntimeError("Core not set for service")
        return self._core

    def set_core(self, core: Core) -> None:
        """Set the core application context."""
        self._core = core


class Services:
    """Service registry that discovers and initializes services."""

    user: UserService
    session: SessionService
    auth: AuthService
    access: AccessService

    def __init__(self, database: Database) -> None:
        """Initialize all services using the service configuration."""
        self._services: list[Service] = []
        self._database = database

        # Service configuration: (attribute_name, module_path, class_name)
        # Order matters: user creates the schema the others read from
        service_configs = [
            ("user", "folio.core.modules.user.service", "UserService"),
            ("session", "folio.core.modules.session.service", "SessionService"),
            ("auth", "folio.core.modules.auth.service", "AuthService"),
            ("access", "folio.core.modules.access.service", "AccessService"),
        ]

        for attr_name, module_path, class_name in service_configs:
            module = importlib.import_module(module_path)
            service_class = cast(type[Service], getattr(module, class_name))
            service_instance = service_class(database)
            setattr(self, attr_name, service_instance)
            self._services.append(service_instance)

    def set_core(self, core: Core) -> None:
        """Set core reference for all services."""
        for service in self._services:
            service.set_core(core)

    async def start_all(self) -> None:
        for service in self._services:
            await service.on_start()

    async def stop_all(self) -> None:
        for service in reversed(self._services):
            await service.on_stop()


class Core:
    """Container providing config, database, and all service instances."""

    config: Config
    database: Database
    services: Services

    def __init__(self, config: Config, database: Database | None = None) -> None:
        """Initialize core with config and database, and register services.

        The database is created from config unless one is passed in.
        """
        self.config = config
        self.database = database or Database(config.database_url, config.db_pool_size, config.db_timeout)
        self.services = Services(self.database)
        self.services.set_core(self)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        """Open the pool, then start services."""
        await self.database.connect()
        await self.services.start_all()

    async def on_stop(self) -> None:
        """Stop services, then close the pool."""
        try:
            await self.services.stop_all()
        finally:
            await self.database.close()
