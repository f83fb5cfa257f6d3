import logging
from typing import List

from pydantic import ValidationError as PydanticValidationError

from autonews.storage.json_document import JsonArrayDocument
from autonews.storage.models import NewsRecord

logger = logging.getLogger(__name__)


class RecordStore:
    """Notícias já estruturadas; mesmo esquema de documento único da fila."""

    def __init__(self, client, pathname: str = "news.json"):
        self.document = JsonArrayDocument(client, pathname)

    def list_all(self) -> List[NewsRecord]:
        records = []
        for entry in self.document.read():
            if not isinstance(entry, dict):
                continue
            try:
                records.append(NewsRecord.model_validate(entry))
            except PydanticValidationError as e:
                logger.warning("Skipping malformed record %r: %s", entry.get("id"), e)
        return records

    def append(self, record: NewsRecord) -> NewsRecord:
        current = self.document.read()
        self.document.write([record.to_json()] + current)
        logger.info("Committed record %s (%s / %s)", record.id, record.brand, record.type.value)
        return record
