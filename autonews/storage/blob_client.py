"""
Cliente HTTP mínimo para o object store remoto (API REST do Vercel Blob).

Só o que o pipeline usa: listar blobs, ler um blob público com cache-busting
e sobrescrever um blob num caminho fixo.
"""
import time
import logging
import requests
from typing import Dict, List, Optional
from requests.adapters import HTTPAdapter

from autonews.config import DEFAULT_BLOB_API_URL
from autonews.errors import StoreError

logger = logging.getLogger(__name__)

API_VERSION = "7"


class BlobClient:
    TIMEOUT = 15
    LIST_LIMIT = 100

    def __init__(self, token: str, api_url: str = DEFAULT_BLOB_API_URL,
                 timeout: float = TIMEOUT, session: Optional[requests.Session] = None):
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        if session is None:
            session = requests.Session()
            session.mount("https://", HTTPAdapter(pool_connections=4, pool_maxsize=10))
        self.session = session

    def _auth_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "x-api-version": API_VERSION,
        }

    def list_blobs(self, prefix: Optional[str] = None, limit: int = LIST_LIMIT) -> List[Dict]:
        params = {"limit": str(limit)}
        if prefix:
            params["prefix"] = prefix
        try:
            response = self.session.get(self.api_url, params=params,
                                        headers=self._auth_headers(), timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise StoreError(f"Storage list failed: {e}")
        except ValueError as e:
            raise StoreError(f"Storage list returned an invalid body: {e}")
        return payload.get("blobs") or []

    def find_url(self, pathname: str) -> Optional[str]:
        """URL pública atual do blob, ou None se ele ainda não existe."""
        for blob in self.list_blobs(prefix=pathname):
            if blob.get("pathname") == pathname:
                return blob.get("url")
        return None

    def read_text(self, pathname: str) -> Optional[str]:
        url = self.find_url(pathname)
        if not url:
            return None
        # parâmetro volátil: garante a cópia mais recente, furando caches intermediários
        params = {"t": str(int(time.time() * 1000))}
        try:
            response = self.session.get(url, params=params, timeout=self.timeout,
                                        headers={"Cache-Control": "no-cache"})
        except requests.RequestException as e:
            raise StoreError(f"Storage read failed: {e}")
        if response.status_code == 404:
            return None
        if not response.ok:
            raise StoreError(f"Storage read failed: status {response.status_code}")
        return response.text

    def put_text(self, pathname: str, body: str, content_type: str = "application/json") -> Dict:
        headers = self._auth_headers()
        headers.update({
            "x-content-type": content_type,
            "x-add-random-suffix": "0",
            "x-allow-overwrite": "1",
            "x-vercel-blob-access": "public",
        })
        try:
            response = self.session.put(f"{self.api_url}/{pathname}", data=body.encode("utf-8"),
                                        headers=headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise StoreError(f"Storage write failed: {e}")
        try:
            return response.json()
        except ValueError:
            return {"pathname": pathname}
