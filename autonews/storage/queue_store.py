import logging
from typing import List

from pydantic import ValidationError as PydanticValidationError

from autonews.storage.json_document import JsonArrayDocument
from autonews.storage.models import PendingItem, new_item_id

logger = logging.getLogger(__name__)


class QueueStore:
    """
    Fila de pendentes: um único documento JSON, mais recente primeiro.

    Cada escrita é ler -> alterar -> sobrescrever o documento inteiro, sem
    lock nem compare-and-swap. Duas escritas concorrentes que leram o mesmo
    estado se sobrescrevem (a última vence).
    """

    def __init__(self, client, pathname: str = "pending.json"):
        self.document = JsonArrayDocument(client, pathname)

    def list_all(self) -> List[PendingItem]:
        items = []
        for entry in self.document.read():
            if not isinstance(entry, dict):
                continue
            try:
                items.append(PendingItem.model_validate(entry))
            except PydanticValidationError as e:
                logger.warning("Skipping malformed pending entry %r: %s", entry.get("id"), e)
        return items

    @staticmethod
    def _entry_id(entry):
        return entry.get("id") if isinstance(entry, dict) else None

    def append(self, item: PendingItem) -> PendingItem:
        # ler-alterar-escrever sobre o JSON cru: entradas que não validam continuam no documento
        current = self.document.read()
        taken = {self._entry_id(e) for e in current}
        while item.id in taken:
            item = item.model_copy(update={"id": new_item_id()})
        # novos itens entram no topo
        updated = [item.to_json()] + current
        self.document.write(updated)
        logger.info("Queued %s (%s); queue size %d", item.id, item.url, len(updated))
        return item

    def get(self, item_id: str):
        return next((i for i in self.list_all() if i.id == item_id), None)

    def remove(self, item_id: str) -> bool:
        current = self.document.read()
        remaining = [e for e in current if self._entry_id(e) != item_id]
        if len(remaining) == len(current):
            return False
        self.document.write(remaining)
        logger.info("Removed %s from queue; queue size %d", item_id, len(remaining))
        return True
