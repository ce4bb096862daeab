"""
Backends de complétion générative utilisés pour l'extraction de relevés.

Le service d'extraction ne dépend que de l'interface ExtractionBackend ;
GeminiBackend l'implémente via l'API REST Generative Language (httpx).
Aucun retry n'est fait ici : la politique de réessai appartient à l'appelant.
"""

import json
import logging
from typing import Any, Dict, Optional

import httpx

from app.exceptions import BackendUnavailableError, SchemaViolationError
from app.services.document_encoder import split_data_uri

logger = logging.getLogger(__name__)


class ExtractionBackend:
    """Interface d'un backend d'extraction contraint par un schéma de sortie."""

    async def generate(self, prompt: str, document_uri: str, response_schema: Dict[str, Any]) -> Any:
        """
        Soumet l'instruction et le document, et retourne la réponse JSON décodée.
        Lève BackendUnavailableError en cas d'échec transport ou service.
        """
        raise NotImplementedError


class GeminiBackend(ExtractionBackend):
    """Appel à `models/{model}:generateContent` avec réponse JSON contrainte par responseSchema."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def build_request_body(self, prompt: str, document_uri: str, response_schema: Dict[str, Any]) -> dict:
        """Construit le corps de requête : instruction + document inline + configuration de sortie."""
        mime_type, payload = split_data_uri(document_uri)
        return {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {"text": prompt},
                        {"inline_data": {"mime_type": mime_type, "data": payload}},
                    ],
                }
            ],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": response_schema,
                "temperature": 0,
            },
        }

    async def generate(self, prompt: str, document_uri: str, response_schema: Dict[str, Any]) -> Any:
        if not self.api_key:
            raise BackendUnavailableError("Clé API du backend d'extraction non configurée.")

        body = self.build_request_body(prompt, document_uri, response_schema)
        url = f"{self.base_url}/models/{self.model}:generateContent"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    url,
                    json=body,
                    headers={"x-goog-api-key": self.api_key},
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning("Backend d'extraction, HTTP %s : %s", exc.response.status_code, exc.response.text[:500])
            raise BackendUnavailableError(
                f"Le backend d'extraction a répondu HTTP {exc.response.status_code}."
            ) from exc
        except httpx.RequestError as exc:
            logger.warning("Backend d'extraction injoignable : %s", exc)
            raise BackendUnavailableError(f"Backend d'extraction injoignable : {exc}") from exc

        text = self._candidate_text(response)
        try:
            return json.loads(text)
        except ValueError as exc:
            logger.warning("Réponse non JSON du backend d'extraction : %s", text[:200])
            raise SchemaViolationError(
                "La réponse du backend n'est pas un JSON valide.",
                errors=[str(exc)],
            ) from exc

    @staticmethod
    def _candidate_text(response: httpx.Response) -> str:
        """Concatène le texte du premier candidat ; une enveloppe inattendue est un échec service."""
        try:
            data = response.json()
            parts = data["candidates"][0]["content"]["parts"]
            text = "".join(part.get("text", "") for part in parts)
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as exc:
            logger.warning("Enveloppe de réponse inattendue du backend : %s", response.text[:500])
            raise BackendUnavailableError("Réponse inattendue du backend d'extraction.") from exc

        if not text:
            raise BackendUnavailableError("Le backend d'extraction n'a retourné aucun contenu.")
        return text
