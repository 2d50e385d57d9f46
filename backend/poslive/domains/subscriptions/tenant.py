"""Tenant context: the active restaurant plus a generation counter.

A tenant switch must leave no subscription state behind from the previous
tenant. Components that hold such state register a switch hook; the hooks
run synchronously inside ``set_tenant`` before the new tenant id becomes
visible, so nothing can be opened for the new tenant while the old one is
still being torn down.

The generation increments on every tenant change. Asynchronous callbacks
capture the generation they were issued under and check ``is_current``
before touching anything.
"""

from typing import Callable, Optional

from poslive.core.logging import logger

SwitchHook = Callable[[], object]


class TenantContext:
    """Current tenant id and generation counter."""

    def __init__(self, tenant_id: Optional[str] = None) -> None:
        self._tenant_id = tenant_id
        self._generation = 0
        self._hooks: list[SwitchHook] = []
        self._logger = logger.with_context(component="tenant_context")

    @property
    def tenant_id(self) -> Optional[str]:
        return self._tenant_id

    @property
    def generation(self) -> int:
        return self._generation

    def is_current(self, generation: int) -> bool:
        """Whether a callback stamped with ``generation`` may still act."""
        return generation == self._generation

    def advance(self) -> int:
        """Start a new generation and return it."""
        self._generation += 1
        return self._generation

    def on_switch(self, hook: SwitchHook) -> None:
        """Register a hook run synchronously on every tenant change.

        Hooks run in registration order, before the new tenant id is stored.
        """
        self._hooks.append(hook)

    def set_tenant(self, tenant_id: Optional[str]) -> bool:
        """Switch to ``tenant_id``.

        Returns:
            False if ``tenant_id`` is already current (nothing happens),
            True if the switch was performed.
        """
        if tenant_id == self._tenant_id:
            return False

        previous = self._tenant_id
        generation_before = self._generation

        for hook in list(self._hooks):
            hook()

        # Every switch starts a new generation, with or without a registry attached.
        if self._generation == generation_before:
            self.advance()

        self._tenant_id = tenant_id
        self._logger.info(
            f"Tenant switched from {previous!r} to {tenant_id!r} "
            f"(generation {generation_before} -> {self._generation})"
        )
        return True
