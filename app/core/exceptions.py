from uuid import UUID
from typing import Union


class NotFoundError(LookupError):
    """Raised when a caller references an identity that does not exist."""
    entity = "Entity"

    def __init__(self, entity_id: Union[UUID, str]):
        self.entity_id = entity_id
        super().__init__(f"{self.entity} {entity_id} not found")


class OrderNotFoundError(NotFoundError):
    entity = "Order"


class OrderItemNotFoundError(NotFoundError):
    entity = "Order item"


class TableNotFoundError(NotFoundError):
    entity = "Table"


class MenuItemNotFoundError(NotFoundError):
    entity = "Menu item"
