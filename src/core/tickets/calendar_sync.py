"""
Sincronização best-effort com a agenda externa.

A agenda é um espelho de conveniência: o ticket gravado é o registro
oficial. Por isso toda chamada ao CalendarSyncAdapter roda depois do
commit e qualquer falha (timeout, erro HTTP, exceção) vira apenas um
SyncResult com ok=False e uma linha de log. Nada aqui desfaz dados
já gravados.

Fluxo:
    TicketCriadoEvent     → sincronizar_criacao     → create_event + grava ID
    TicketAtualizadoEvent → sincronizar_atualizacao → update_event (ou create)
    TicketExcluidoEvent   → sincronizar_exclusao    → delete_event
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
import logging

from .entities import TicketEntity
from .ports import CalendarSyncAdapter, ServiceLookup, TicketRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventoCalendario:
    """Payload enviado à agenda externa."""

    summary: str
    description: str
    inicio: datetime
    fim: datetime
    timezone: str = "UTC"

    @classmethod
    def from_ticket(
        cls,
        ticket: TicketEntity,
        timezone: str = "UTC",
        nomes_servicos: Optional[dict] = None,
    ) -> "EventoCalendario":
        nomes_servicos = nomes_servicos or {}

        summary = f"Ticket {ticket.id}"
        nomes = [
            nomes_servicos[i.referencia.servico_id]
            for i in ticket.itens_servico
            if nomes_servicos.get(i.referencia.servico_id)
        ]
        if nomes:
            summary = f"{summary} - {', '.join(nomes)}"

        linhas = []
        if ticket.observacoes:
            linhas.append(ticket.observacoes)
            linhas.append("")
        for item in ticket.itens:
            linhas.append(
                f"- {item.tipo.value} {item.referencia.ref_id} "
                f"x{item.quantidade} = {item.total}"
            )
        linhas.append(f"Total: {ticket.total}")

        return cls(
            summary=summary,
            description="\n".join(linhas),
            inicio=ticket.inicio,
            fim=ticket.fim,
            timezone=timezone,
        )


@dataclass(frozen=True)
class SyncResult:
    """
    Resultado de uma sincronização.

    Consumido apenas para log e testes; nunca propagado como
    resultado da operação de ticket.
    """

    ok: bool
    operacao: str
    evento_id: Optional[str] = None
    erro: Optional[str] = None
    ignorado: bool = False

    @classmethod
    def ignorar(cls, operacao: str) -> "SyncResult":
        return cls(ok=True, operacao=operacao, ignorado=True)


class CalendarSyncService:
    """
    Orquestra create/update/delete na agenda externa.

    Example:
        sync = CalendarSyncService(ticket_repo, GoogleCalendarAdapter(token))
        resultado = sync.sincronizar_criacao("TK-2026-AB12CD")
        if not resultado.ok:
            ...  # já logado; o ticket continua gravado
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        adapter: CalendarSyncAdapter,
        timezone: str = "UTC",
        servicos: Optional[ServiceLookup] = None,
    ):
        self.ticket_repo = ticket_repo
        self.adapter = adapter
        self.timezone = timezone
        self.servicos = servicos

    def _evento(self, ticket: TicketEntity) -> EventoCalendario:
        nomes = {}
        ids = [i.referencia.servico_id for i in ticket.itens_servico]
        if self.servicos and ids:
            nomes = {sid: s.nome for sid, s in self.servicos.get_many(ids).items()}
        return EventoCalendario.from_ticket(ticket, self.timezone, nomes)

    def sincronizar_criacao(self, ticket_id: str) -> SyncResult:
        """Cria o evento se o ticket tiver janela e grava o ID retornado."""
        try:
            ticket = self.ticket_repo.get_by_id(ticket_id)
            if ticket is None or not ticket.possui_janela:
                return SyncResult.ignorar("create")
            return self._criar(ticket)
        except Exception as e:
            return self._falha("create", ticket_id, e)

    def sincronizar_atualizacao(self, ticket_id: str) -> SyncResult:
        """
        Atualiza o evento existente; sem evento, cria um e grava o ID.
        """
        try:
            ticket = self.ticket_repo.get_by_id(ticket_id)
            if ticket is None or not ticket.possui_janela:
                return SyncResult.ignorar("update")

            if not ticket.evento_calendario_id:
                return self._criar(ticket)

            ok = self.adapter.update_event(ticket.evento_calendario_id, self._evento(ticket))
            if not ok:
                logger.warning(
                    f"Agenda externa recusou atualização do evento "
                    f"{ticket.evento_calendario_id} (ticket {ticket_id})"
                )
                return SyncResult(
                    ok=False,
                    operacao="update",
                    evento_id=ticket.evento_calendario_id,
                    erro="update_event retornou False",
                )
            return SyncResult(ok=True, operacao="update", evento_id=ticket.evento_calendario_id)
        except Exception as e:
            return self._falha("update", ticket_id, e)

    def sincronizar_exclusao(
        self,
        ticket_id: str,
        evento_calendario_id: Optional[str],
    ) -> SyncResult:
        """Remove o evento externo de um ticket já excluído."""
        if not evento_calendario_id:
            return SyncResult.ignorar("delete")
        try:
            ok = self.adapter.delete_event(evento_calendario_id)
        except Exception as e:
            return self._falha("delete", ticket_id, e)

        if not ok:
            logger.warning(
                f"Falha ao remover evento {evento_calendario_id} do ticket {ticket_id}"
            )
            return SyncResult(
                ok=False,
                operacao="delete",
                evento_id=evento_calendario_id,
                erro="delete_event retornou False",
            )
        return SyncResult(ok=True, operacao="delete", evento_id=evento_calendario_id)

    def _criar(self, ticket: TicketEntity) -> SyncResult:
        evento_id = self.adapter.create_event(self._evento(ticket))
        if not evento_id:
            logger.warning(f"Agenda externa não criou evento para o ticket {ticket.id}")
            return SyncResult(ok=False, operacao="create", erro="create_event retornou None")

        self.ticket_repo.set_evento_calendario_id(ticket.id, evento_id)
        logger.info(f"Evento {evento_id} criado na agenda para o ticket {ticket.id}")
        return SyncResult(ok=True, operacao="create", evento_id=evento_id)

    @staticmethod
    def _falha(operacao: str, ticket_id: str, erro: Exception) -> SyncResult:
        logger.warning(f"Sincronização de agenda ({operacao}) falhou para {ticket_id}: {erro}")
        return SyncResult(ok=False, operacao=operacao, erro=str(erro))
