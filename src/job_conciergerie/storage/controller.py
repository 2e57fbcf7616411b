from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container
from ..core.exceptions import StorageError


def register(app: Flask, container: Container) -> None:
    storage = container.storage

    @app.route("/api/IPFS", methods=["POST"], endpoint="api_ipfs_upload")
    def api_ipfs_upload():
        if not storage.upload_configured:
            return jsonify({"error": "Variables d'environnement IPFS non configurées"}), 500

        uploaded = request.files.get("file")
        if uploaded is None:
            return jsonify({"error": "Aucun fichier fourni"}), 400

        try:
            result = storage.upload(
                uploaded.filename or "",
                uploaded.read(),
                uploaded.mimetype or "application/octet-stream",
            )
        except StorageError as e:
            body = {"error": str(e)}
            if e.details:
                body["details"] = e.details
            return jsonify(body), e.status_code

        return jsonify({"cid": result.cid, "id": result.id, "url": storage.image_url(result.reference)})

    @app.route("/api/IPFS/<file_id>", methods=["DELETE"], endpoint="api_ipfs_delete")
    def api_ipfs_delete(file_id: str):
        try:
            storage.delete(file_id)
        except StorageError as e:
            return jsonify({"error": str(e)}), e.status_code
        return jsonify({"success": True})
