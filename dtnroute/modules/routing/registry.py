"""
Router registry for dtnroute.

This module provides a centralized registry for all routing policies that
follow the AbstractDTNRouter interface.
"""

from collections.abc import Hashable
from typing import Any

from dtnroute.configs.config import DTNConfig
from dtnroute.domain.config import RouterConfig
from dtnroute.interfaces.host import ClockLike, MessageBufferLike
from dtnroute.interfaces.router import AbstractDTNRouter
from dtnroute.modules.routing.epidemic import EpidemicRouter
from dtnroute.modules.routing.errors import RouterNotFoundError
from dtnroute.utils.logging_config import LoggerAdapter, configure_node_logging


class RouterRegistry:
    """Registry for managing routing policy implementations."""

    def __init__(self) -> None:
        """Initialize the router registry."""
        self._routers: dict[str, type[AbstractDTNRouter]] = {}
        self._register_default_routers()

    def _register_default_routers(self) -> None:
        """Register the built-in routing policies."""
        self.register("epidemic_rr", EpidemicRouter)

    def register(self, name: str, router_class: Any) -> None:
        """
        Register a routing policy.

        :param name: Unique name for the policy.
        :type name: str
        :param router_class: Class that implements AbstractDTNRouter.
        :type router_class: Any
        :raises TypeError: If router_class doesn't implement AbstractDTNRouter.
        :raises ValueError: If name is already registered.
        """
        if not isinstance(router_class, type) or not issubclass(
            router_class, AbstractDTNRouter
        ):
            raise TypeError(f"{router_class!r} must implement AbstractDTNRouter")

        if name in self._routers:
            raise ValueError(f"Router '{name}' is already registered")

        self._routers[name] = router_class

    def get(self, name: str) -> type[AbstractDTNRouter]:
        """
        Get a routing policy class by name.

        :param name: Name of the policy.
        :type name: str
        :return: Class that implements AbstractDTNRouter.
        :rtype: type[AbstractDTNRouter]
        :raises RouterNotFoundError: If the policy is not found.
        """
        if name not in self._routers:
            raise RouterNotFoundError(
                f"Router '{name}' not found. "
                f"Available routers: {list(self._routers.keys())}"
            )

        return self._routers[name]

    def create(
        self,
        name: str,
        node_id: Hashable,
        buffer: MessageBufferLike,
        clock: ClockLike,
        config: RouterConfig | None = None,
        seed: int | None = None,
        node_logger: LoggerAdapter | None = None,
    ) -> AbstractDTNRouter:
        """
        Create a router for one node.

        :param name: Name of the policy.
        :type name: str
        :param node_id: Identity of the node owning the router.
        :type node_id: Hashable
        :param buffer: Host message buffer of the node.
        :type buffer: MessageBufferLike
        :param clock: Host simulation clock.
        :type clock: ClockLike
        :param config: Router configuration.
        :type config: RouterConfig | None
        :param seed: Seed of the router's random generator.
        :type seed: int | None
        :param node_logger: Logger the router writes to.
        :type node_logger: LoggerAdapter | None
        :return: Configured router instance.
        :rtype: AbstractDTNRouter
        """
        router_class = self.get(name)
        return router_class(
            node_id, buffer, clock, config=config, seed=seed, node_logger=node_logger
        )

    def create_from_config(
        self,
        name: str,
        node_id: Hashable,
        buffer: MessageBufferLike,
        clock: ClockLike,
        dtn_config: DTNConfig,
        seed: int | None = None,
    ) -> AbstractDTNRouter:
        """
        Create a router configured by a loaded configuration file.

        The router settings become the router's configuration and the
        logging settings configure the node's logger.

        :param name: Name of the policy.
        :type name: str
        :param node_id: Identity of the node owning the router.
        :type node_id: Hashable
        :param buffer: Host message buffer of the node.
        :type buffer: MessageBufferLike
        :param clock: Host simulation clock.
        :type clock: ClockLike
        :param dtn_config: Configuration from ``ConfigManager``.
        :type dtn_config: DTNConfig
        :param seed: Seed of the router's random generator.
        :type seed: int | None
        :return: Configured router instance.
        :rtype: AbstractDTNRouter
        """
        node_logger = configure_node_logging(node_id, **dtn_config.logging)
        return self.create(
            name,
            node_id,
            buffer,
            clock,
            config=dtn_config.router,
            seed=seed,
            node_logger=node_logger,
        )

    def list_routers(self) -> list[str]:
        """List all registered router names."""
        return list(self._routers.keys())


# Global registry instance
_registry = RouterRegistry()


def get_router(name: str) -> type[AbstractDTNRouter]:
    """Get a routing policy class by name from the global registry."""
    return _registry.get(name)


def create_router(
    name: str,
    node_id: Hashable,
    buffer: MessageBufferLike,
    clock: ClockLike,
    config: RouterConfig | None = None,
    seed: int | None = None,
    node_logger: LoggerAdapter | None = None,
) -> AbstractDTNRouter:
    """Create a router from the global registry."""
    return _registry.create(
        name, node_id, buffer, clock, config=config, seed=seed, node_logger=node_logger
    )


def create_router_from_config(
    name: str,
    node_id: Hashable,
    buffer: MessageBufferLike,
    clock: ClockLike,
    dtn_config: DTNConfig,
    seed: int | None = None,
) -> AbstractDTNRouter:
    """Create a router from the global registry using a loaded configuration."""
    return _registry.create_from_config(
        name, node_id, buffer, clock, dtn_config, seed=seed
    )


def list_routers() -> list[str]:
    """List all routers available in the global registry."""
    return _registry.list_routers()
