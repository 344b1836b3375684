from types import TracebackType
from typing import TYPE_CHECKING

from ._logging import logger
from .config import ApiVersion

if TYPE_CHECKING:
    from .client import RechargeClient


class VersionContext:
    """
    Temporarily switches a client to another API version.

    The version active when the context was created is recorded, and restore()
    puts it back. Contexts nest like a stack: an inner context restores the
    version the outer one had set, not the one from before the outer context.

    Usage:
        with client.use_version(ApiVersion.V2021_11):
            client.get("/payment_methods")

        # or, without a with-block
        context = client.use_version(ApiVersion.V2021_11)
        try:
            ...
        finally:
            context.restore()

    Architectural Note:
    -------------------
    Paginators capture the client's version when they are built. A Paginator
    created inside the block keeps using the switched version even when it is
    drained after restore().
    """

    def __init__(self, client: "RechargeClient", target: ApiVersion | str) -> None:
        self._client = client
        self.target = ApiVersion.parse(target)
        self.original = client.api_version
        self.switched = self.original is not self.target
        self._restored = False

        if self.switched:
            client.api_version = self.target
            logger.debug(
                "Switched API version",
                extra={"from_version": self.original.value, "to_version": self.target.value},
            )

    @property
    def restored(self) -> bool:
        return self._restored

    def restore(self) -> None:
        """Puts back the version recorded at creation. Safe to call more than once."""
        if self._restored:
            return
        self._restored = True

        if self.switched:
            self._client.api_version = self.original
            logger.debug(
                "Restored API version",
                extra={"from_version": self.target.value, "to_version": self.original.value},
            )

    def __enter__(self) -> "VersionContext":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.restore()
