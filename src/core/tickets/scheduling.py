"""
Detecção de conflito de agenda.

Verifica se uma janela proposta de um profissional sobrepõe outro
ticket com início e fim do mesmo profissional. Intervalos são
semiabertos: [10:00, 11:00) e [11:00, 12:00) não conflitam.

A verificação é consultiva: as leituras não são travadas contra
escritas concorrentes, e a aplicação da regra é opcional
(TICKETS_VERIFICAR_CONFLITOS), já que um profissional pode atender
mais de um cliente ao mesmo tempo.
"""

from datetime import datetime
from typing import List, Optional
import logging

from .entities import TicketEntity, TicketStatus
from .ports import TicketRepository

logger = logging.getLogger(__name__)


def janelas_sobrepostas(
    inicio_a: datetime,
    fim_a: datetime,
    inicio_b: datetime,
    fim_b: datetime,
) -> bool:
    """Sobreposição semiaberta: inicio_a < fim_b e inicio_b < fim_a."""
    return inicio_a < fim_b and inicio_b < fim_a


class SchedulingConflictDetector:
    """
    Detecta tickets do mesmo profissional com janela sobreposta.

    Tickets cancelados são ignorados.

    Example:
        detector = SchedulingConflictDetector(ticket_repo)
        if detector.has_conflict("staff-1", inicio, fim):
            ...
    """

    def __init__(self, ticket_repo: TicketRepository):
        self.ticket_repo = ticket_repo

    def conflitos(
        self,
        profissional_id: str,
        inicio: datetime,
        fim: datetime,
        excluir_ticket_id: Optional[str] = None,
    ) -> List[TicketEntity]:
        """
        Lista os tickets que conflitam com a janela proposta.

        Args:
            profissional_id: Profissional da janela
            inicio: Início proposto
            fim: Fim proposto
            excluir_ticket_id: Ticket ignorado (o próprio, numa atualização)
        """
        existentes = self.ticket_repo.list_agendados(
            profissional_id, excluir_ticket_id=excluir_ticket_id
        )
        return [
            ticket
            for ticket in existentes
            if ticket.profissional_id == profissional_id
            and ticket.id != excluir_ticket_id
            and ticket.status != TicketStatus.CANCELADO
            and ticket.possui_janela
            and janelas_sobrepostas(ticket.inicio, ticket.fim, inicio, fim)
        ]

    def has_conflict(
        self,
        profissional_id: str,
        inicio: datetime,
        fim: datetime,
        excluir_ticket_id: Optional[str] = None,
    ) -> bool:
        """True se existe ao menos um conflito."""
        encontrados = self.conflitos(profissional_id, inicio, fim, excluir_ticket_id)
        if encontrados:
            logger.info(
                f"Conflito de agenda para {profissional_id}: "
                f"{[t.id for t in encontrados]}"
            )
        return bool(encontrados)
