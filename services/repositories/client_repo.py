"""Client repository for client data access."""

import logging
from typing import Optional, List, Dict, Any

from .base import BaseRepository
from .interfaces import ClientStore
from services.models import Client, ClientStatus

logger = logging.getLogger(__name__)


class ClientRepository(BaseRepository, ClientStore):
    """Repository for client CRUD operations."""

    table = "clients"

    def list_all(self) -> List[Client]:
        query = "SELECT * FROM clients WHERE user_id = %s ORDER BY name ASC"
        return [self._from_row(row) for row in self._execute_many(query, (self.user_id,))]

    def get_by_id(self, client_id: str) -> Optional[Client]:
        query = "SELECT * FROM clients WHERE id = %s AND user_id = %s"
        row = self._execute_one(query, (client_id, self.user_id))
        return self._from_row(row) if row else None

    def create(self, client: Client) -> Client:
        values = {
            "user_id": self.user_id,
            "name": client.name,
            "phone": client.phone,
            "notes": client.notes,
            "status": ClientStatus(client.status).value,
        }
        row = self._execute_returning(self._insert_query(values.keys()), tuple(values.values()))
        created = self._from_row(row)
        logger.info(f"Created client {created.id} for user {self.user_id}: {created.name}")
        return created

    def update(self, client_id: str, changes: Dict[str, Any]) -> Optional[Client]:
        values = dict(changes)
        if "status" in values:
            values["status"] = ClientStatus(values["status"]).value
        row = self._update_row(client_id, values)
        return self._from_row(row) if row else None

    def delete(self, client_id: str) -> bool:
        """Delete client by ID.

        Jobs referencing the client are left as they are.
        """
        deleted = self._delete_row(client_id)
        if deleted:
            logger.info(f"Deleted client {client_id}")
        return deleted

    @staticmethod
    def _from_row(row: Dict) -> Client:
        return Client(
            id=str(row["id"]),
            user_id=row["user_id"],
            name=row["name"],
            phone=row.get("phone"),
            notes=row.get("notes"),
            status=ClientStatus(row.get("status") or ClientStatus.GOOD.value),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )
