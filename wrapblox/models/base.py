"""
Base entity model.
"""

from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel, ConfigDict, PrivateAttr

from wrapblox.services.client import ServiceClient
from wrapblox.services.errors import WrapBloxError

if TYPE_CHECKING:
    from wrapblox.client import WrapBlox

E = TypeVar("E", bound="Entity")


class Entity(BaseModel):
    """
    Base class for all entities.

    Entities are pydantic models shaped from raw API JSON and bound to the
    client context that fetched them. They only talk to upstream through
    the client's ServiceClient.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    _client: "WrapBlox | None" = PrivateAttr(default=None)
    _raw_data: dict[str, Any] = PrivateAttr(default_factory=dict)

    @classmethod
    def from_raw(cls: type[E], client: "WrapBlox", raw_data: dict[str, Any]) -> E:
        entity = cls.model_validate(raw_data)
        entity._client = client
        entity._raw_data = raw_data
        return entity

    @property
    def client(self) -> "WrapBlox":
        if self._client is None:
            raise WrapBloxError(f"{type(self).__name__} is not bound to a client")
        return self._client

    @property
    def http(self) -> ServiceClient:
        return self.client.service_client

    @property
    def raw_data(self) -> dict[str, Any]:
        return self._raw_data
