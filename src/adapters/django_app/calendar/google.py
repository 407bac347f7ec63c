"""
Adapter da agenda externa (Google Calendar API v3).

Implementa CalendarSyncAdapter com um cliente httpx síncrono.
Falhas de rede ou respostas fora do esperado são logadas e viram
None/False; o CalendarSyncService decide o que reportar.
"""

from typing import Any, Dict, Optional
import logging

import httpx

from src.core.tickets.calendar_sync import EventoCalendario

logger = logging.getLogger(__name__)

GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"


class GoogleCalendarAdapter:
    """
    Cria, atualiza e remove eventos numa agenda do Google.

    Example:
        adapter = GoogleCalendarAdapter(access_token="ya29...", calendar_id="primary")
        evento_id = adapter.create_event(evento)
    """

    def __init__(
        self,
        access_token: str,
        calendar_id: str = "primary",
        timeout: float = 10.0,
        timezone: str = "UTC",
        client: Optional[httpx.Client] = None,
    ):
        self.access_token = access_token
        self.calendar_id = calendar_id
        self.timezone = timezone
        self._client = client or httpx.Client(timeout=timeout)

    @property
    def _eventos_url(self) -> str:
        return f"{GOOGLE_CALENDAR_API}/calendars/{self.calendar_id}/events"

    @property
    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

    def _payload(self, evento: EventoCalendario) -> Dict[str, Any]:
        timezone = evento.timezone or self.timezone
        return {
            "summary": evento.summary,
            "description": evento.description,
            "start": {"dateTime": evento.inicio.isoformat(), "timeZone": timezone},
            "end": {"dateTime": evento.fim.isoformat(), "timeZone": timezone},
        }

    def create_event(self, evento: EventoCalendario) -> Optional[str]:
        """Retorna o ID do evento criado ou None em caso de falha."""
        try:
            response = self._client.post(
                self._eventos_url, headers=self._headers, json=self._payload(evento)
            )
        except httpx.HTTPError as e:
            logger.error(f"Erro ao criar evento na agenda: {e}")
            return None

        if response.status_code not in (200, 201):
            logger.error(f"Falha ao criar evento na agenda: {response.status_code} {response.text}")
            return None

        evento_id = response.json().get("id")
        logger.info(f"Evento de agenda criado: {evento_id}")
        return evento_id

    def update_event(self, evento_id: str, evento: EventoCalendario) -> bool:
        try:
            response = self._client.put(
                f"{self._eventos_url}/{evento_id}",
                headers=self._headers,
                json=self._payload(evento),
            )
        except httpx.HTTPError as e:
            logger.error(f"Erro ao atualizar evento {evento_id}: {e}")
            return False

        if response.status_code != 200:
            logger.error(f"Falha ao atualizar evento {evento_id}: {response.status_code} {response.text}")
            return False

        logger.info(f"Evento de agenda atualizado: {evento_id}")
        return True

    def delete_event(self, evento_id: str) -> bool:
        try:
            response = self._client.delete(
                f"{self._eventos_url}/{evento_id}", headers=self._headers
            )
        except httpx.HTTPError as e:
            logger.error(f"Erro ao remover evento {evento_id}: {e}")
            return False

        if response.status_code not in (200, 204):
            logger.error(f"Falha ao remover evento {evento_id}: {response.status_code} {response.text}")
            return False

        logger.info(f"Evento de agenda removido: {evento_id}")
        return True
