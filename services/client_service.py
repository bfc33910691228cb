"""Client management."""

import logging
from typing import Any, List, Optional

from services.models import Client
from services.repositories.interfaces import ClientStore
from services.validators import normalize_client

logger = logging.getLogger(__name__)


class ClientService:
    """Validated CRUD over the user's clients.

    Deleting a client does not touch its jobs; they keep the stale
    client_id and are shown without a client.
    """

    def __init__(self, clients: ClientStore):
        self.clients = clients

    def list_clients(self) -> List[Client]:
        return self.clients.list_all()

    def get_client(self, client_id: str) -> Optional[Client]:
        return self.clients.get_by_id(client_id)

    def create_client(self, **fields: Any) -> Client:
        client = self.clients.create(Client(**normalize_client(fields)))
        logger.info(f"Created client {client.id}: {client.name}")
        return client

    def update_client(self, client_id: str, **changes: Any) -> Optional[Client]:
        return self.clients.update(client_id, normalize_client(changes, partial=True))

    def delete_client(self, client_id: str) -> bool:
        deleted = self.clients.delete(client_id)
        if deleted:
            logger.info(f"Deleted client {client_id}")
        return deleted
