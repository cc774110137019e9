from __future__ import annotations

from typing import Any, ClassVar, FrozenSet, List, Optional, Type

from ..client import Client
from ..errors import UnsupportedOperationError
from .entities import Entity

__all__ = ["Resource"]


class Resource:
    """CRUD helpers shared by every API collection.

    Subclasses declare ``resource_name`` (collection path), ``item_name`` when
    single items live under a different path (``counterparties`` vs
    ``counterparty/{id}``), the ``entity`` responses are parsed into and the
    ``operations`` the API actually offers.
    """

    resource_name: ClassVar[str]
    item_name: ClassVar[Optional[str]] = None
    entity: ClassVar[Type[Entity]] = Entity
    operations: ClassVar[FrozenSet[str]] = frozenset()
    api_version: ClassVar[Optional[str]] = None

    def __init__(self, client: Optional[Client] = None) -> None:
        self._client = client

    @property
    def client(self) -> Client:
        return self._client or Client.instance()

    def _url(self, path: str) -> str:
        if self.api_version:
            return self.client.base_uri_for(self.api_version) + path
        return path

    def collection_path(self, *parts: Any) -> str:
        return self._url("/".join([self.resource_name, *map(str, parts)]))

    def item_path(self, *parts: Any) -> str:
        return self._url("/".join([self.item_name or self.resource_name, *map(str, parts)]))

    def _check(self, operation: str) -> None:
        if operation not in self.operations:
            raise UnsupportedOperationError(
                f"{type(self).__name__} does not support {operation}"
            )

    # ------------------------------------------------------------------
    # generic operations
    # ------------------------------------------------------------------

    def list(self, **filters: Any) -> List[Entity]:
        self._check("list")
        return self.entity.from_payload(self.client.get(self.collection_path(), **filters).body) or []

    def retrieve(self, id: str) -> Entity:
        self._check("retrieve")
        return self.entity.from_payload(self.client.get(self.item_path(id)).body)

    def create(self, **attributes: Any) -> Entity:
        self._check("create")
        return self.entity.from_payload(self.client.post(self.item_path(), data=attributes).body)

    def update(self, id: str, **attributes: Any) -> Entity:
        self._check("update")
        return self.entity.from_payload(self.client.patch(self.item_path(id), data=attributes).body)

    def delete(self, id: str) -> bool:
        self._check("delete")
        self.client.delete(self.item_path(id))
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path={self.resource_name!r})"
