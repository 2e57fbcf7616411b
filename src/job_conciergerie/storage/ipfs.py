"""Pinata file pinning client.

Stored image references have the form ``"<cid>/<file id>"``: the CID builds the
gateway URL, the file id is needed to unpin.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

import requests

from ..common.datetime_utils import file_date, today_local
from ..common.logging import get_logger
from ..core.exceptions import StorageError

LOG = get_logger("job_conciergerie.storage")


@dataclass(frozen=True)
class IPFSSettings:
    jwt: str = ""
    api_url: str = ""
    public_url: str = ""
    gateway_domain: str = ""
    fallback_image_url: str = "/static/home.webp"
    timeout: int = 30


@dataclass(frozen=True)
class UploadedFile:
    cid: str
    id: str

    @property
    def reference(self) -> str:
        return f"{self.cid}/{self.id}"


def extract_cid(cid_id: str) -> str:
    return (cid_id or "").split("/")[0]


def extract_id(cid_id: str) -> str:
    parts = (cid_id or "").split("/")
    return parts[1] if len(parts) > 1 else parts[0]


def file_name(today: Optional[date] = None) -> str:
    return f"JobConciergerie_{file_date(today or today_local())}"


class IPFSStorage:
    def __init__(self, settings: IPFSSettings, *, session: Optional[requests.Session] = None):
        self._settings = settings
        self._session = session or requests.Session()

    @property
    def upload_configured(self) -> bool:
        return bool(self._settings.jwt and self._settings.api_url)

    @property
    def delete_configured(self) -> bool:
        return bool(self._settings.jwt and self._settings.public_url)

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self._settings.jwt}"}

    def upload(self, filename: str, content: bytes, content_type: str = "application/octet-stream") -> UploadedFile:
        if not self.upload_configured:
            LOG.error("IPFS upload requested but IPFS_JWT / IPFS_API_URL are not set")
            raise StorageError("Variables d'environnement IPFS non configurées", status_code=500)

        try:
            response = self._session.post(
                self._settings.api_url,
                headers=self._headers(),
                files={"file": (filename or file_name(), content, content_type)},
                data={"network": "public"},
                timeout=self._settings.timeout,
            )
        except requests.RequestException as exc:
            LOG.error("IPFS upload of %s failed: %s", filename, exc)
            raise StorageError(f"Échec de l'envoi du fichier: {exc}") from exc

        if not response.ok:
            body = response.text
            LOG.error("IPFS upload error (%s): %s", response.status_code, body[:500])
            raise StorageError(
                f"Échec de l'envoi du fichier sur IPFS: {response.reason}",
                status_code=response.status_code,
                details=body,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise StorageError("Réponse IPFS illisible", status_code=500) from exc
        data = (payload or {}).get("data") or {}
        if not data.get("cid") or not data.get("id"):
            LOG.error("Pinata response missing data.cid or data.id: %s", payload)
            raise StorageError("CID ou identifiant absent de la réponse IPFS", status_code=500)

        return UploadedFile(cid=str(data["cid"]), id=str(data["id"]))

    def delete(self, file_id: str) -> None:
        if not self.delete_configured:
            LOG.error("IPFS delete requested but IPFS_JWT / IPFS_PUBLIC_URL are not set")
            raise StorageError("Variables d'environnement IPFS non configurées", status_code=500)

        try:
            response = self._session.delete(
                f"{self._settings.public_url}{file_id}",
                headers=self._headers(),
                timeout=self._settings.timeout,
            )
        except requests.RequestException as exc:
            LOG.error("IPFS delete of %s failed: %s", file_id, exc)
            raise StorageError(f"Échec de la suppression du fichier: {exc}") from exc

        if not response.ok:
            body = response.text
            LOG.error("IPFS delete error (%s): %s", response.status_code, body[:500])
            raise StorageError(
                f"Échec de la suppression du fichier IPFS: {response.reason}",
                status_code=response.status_code,
                details=body,
            )

    def unpin_images(self, images) -> None:
        """Best-effort removal of ``cid/id`` references; failures are only logged."""
        for image in images:
            if not image or image.startswith("http"):
                continue
            try:
                self.delete(extract_id(image))
            except StorageError as exc:
                LOG.warning("could not unpin image %s: %s", image, exc)

    def image_url(self, cid_id: str) -> str:
        gateway = self._settings.gateway_domain
        if not gateway:
            LOG.warning("Gateway domain not configured, using fallback image")
            return self._settings.fallback_image_url

        cid = extract_cid(cid_id)
        if not cid:
            LOG.warning("Invalid CID/ID format %r", cid_id)
            return self._settings.fallback_image_url
        if cid_id.startswith("http"):
            return cid_id

        host = gateway.replace("https://", "").rstrip("/")
        return f"https://{host}/ipfs/{cid}"
