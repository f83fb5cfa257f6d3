import json
import logging
from typing import Any, List

logger = logging.getLogger(__name__)


class JsonArrayDocument:
    """
    Um array JSON inteiro guardado num único blob, sempre reescrito por
    completo. Não há versão nem compare-and-swap: a última escrita vence.
    """

    def __init__(self, client, pathname: str):
        self.client = client
        self.pathname = pathname

    def read(self) -> List[Any]:
        raw = self.client.read_text(self.pathname)
        if raw is None:
            logger.info("%s does not exist yet, starting empty", self.pathname)
            return []
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, ValueError):
            logger.warning("%s is empty or corrupted; treating it as an empty list", self.pathname)
            return []
        if not isinstance(data, list):
            logger.warning("%s is not a JSON array; treating it as an empty list", self.pathname)
            return []
        # entradas estranhas são mantidas: só a listagem as ignora, a escrita as preserva
        return data

    def write(self, entries: List[Any]) -> None:
        body = json.dumps(entries, ensure_ascii=False)
        self.client.put_text(self.pathname, body, content_type="application/json")
