from __future__ import annotations

import logging

from tokenwire.container import Container

logger = logging.getLogger(__name__)


class ContainerContext:
    """Process-wide holder of one root container.

    The binding is shared by every caller of this ``ContainerContext``
    instance. It is not task-local or thread-local. Applications that do not
    want ambient state can construct and pass their own ``Container``.
    """

    def __init__(self) -> None:
        self._container: Container | None = None

    def get_current(self) -> Container:
        """Return the bound container, creating a default one on first use."""
        if self._container is None:
            self._container = Container()
            logger.debug("Created default container %r", self._container)
        return self._container

    def set_current(self, container: Container) -> None:
        """Bind ``container`` as the ambient root container."""
        self._container = container

    def reset_current(self) -> None:
        """Drop the binding; the next ``get_current()`` creates a fresh container.

        The previous container is not disposed.
        """
        self._container = None

    @property
    def is_bound(self) -> bool:
        return self._container is not None


container_context = ContainerContext()
