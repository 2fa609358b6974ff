"""BaseService — foundation for the launcher and bootstrap services.

Every service receives a :class:`Stack` at construction time. The Stack
provides the resolved credential, the runtime probe, the compose project
and the database engine.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from retailctl.infrastructure.stack import Stack


class BaseService:
    """Base for service-layer classes.

    Usage::

        class BootstrapService(BaseService):
            def run(self) -> ServiceResult:
                with self._stack.engine.connect() as conn:
                    ...
    """

    def __init__(self, stack: Stack) -> None:
        self._stack = stack
