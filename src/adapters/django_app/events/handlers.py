"""
Event Handlers - Processadores de Eventos de Domínio.

A única reação aos eventos de ticket é a sincronização best-effort
com a agenda externa. Ela roda depois do commit, de um destes modos:

- sync: handlers locais registrados no LoggingEventPublisher
  (registrar_handlers_agenda), no mesmo processo do request
- celery: CeleryEventPublisher → dispatch_domain_event → tasks
  sincronizar_calendario_*

Nos dois modos o resultado é um SyncResult usado apenas para log;
no modo celery uma falha reenfileira a task até max_retries.

Padrão:
    @shared_task(bind=True, ...)
    def sincronizar_calendario_<operacao>(self, event_data: dict) -> dict:
        ...
"""

from typing import Any, Dict, Optional
import logging

from celery import shared_task

from src.core.tickets.calendar_sync import CalendarSyncService, SyncResult
from src.core.tickets.events import (
    TicketAtualizadoEvent,
    TicketCriadoEvent,
    TicketExcluidoEvent,
)

logger = logging.getLogger(__name__)


def _resumo(resultado: SyncResult) -> Dict[str, Any]:
    return {
        "ok": resultado.ok,
        "operacao": resultado.operacao,
        "evento_id": resultado.evento_id,
        "erro": resultado.erro,
        "ignorado": resultado.ignorado,
    }


# =============================================================================
# Handlers locais (modo sync)
# =============================================================================

def registrar_handlers_agenda(publisher, sync_service: CalendarSyncService) -> None:
    """
    Liga os eventos de ticket ao CalendarSyncService.

    Args:
        publisher: Publisher com register_handler (Logging ou InMemory)
        sync_service: Serviço de sincronização configurado
    """
    publisher.register_handler(
        TicketCriadoEvent.__name__,
        lambda event: sync_service.sincronizar_criacao(event.aggregate_id),
    )
    publisher.register_handler(
        TicketAtualizadoEvent.__name__,
        lambda event: sync_service.sincronizar_atualizacao(event.aggregate_id),
    )
    publisher.register_handler(
        TicketExcluidoEvent.__name__,
        lambda event: sync_service.sincronizar_exclusao(
            event.aggregate_id, event.evento_calendario_id
        ),
    )
    logger.info("Handlers de agenda externa registrados")


# =============================================================================
# Tasks Celery (modo celery)
# =============================================================================

def _sync_service() -> Optional[CalendarSyncService]:
    from src.config.container import get_container
    return get_container().calendar_sync_service()


def _executar(task, operacao: str, chamada) -> Dict[str, Any]:
    """
    Roda a sincronização e reenfileira a task enquanto houver tentativas.

    Esgotadas as tentativas, o resultado com falha é devolvido para log.
    """
    service = _sync_service()
    if service is None:
        logger.debug(f"[HANDLER] Agenda externa desligada, {operacao} ignorado")
        return _resumo(SyncResult.ignorar(operacao))

    resumo = _resumo(chamada(service))
    if not resumo["ok"] and task.request.retries < task.max_retries:
        logger.warning(
            f"[HANDLER] Falha em {operacao} na agenda ({resumo['erro']}), "
            f"tentativa {task.request.retries + 1}/{task.max_retries}"
        )
        raise task.retry()
    return resumo


@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def sincronizar_calendario_criacao(self, event_data: Dict[str, Any]) -> Dict[str, Any]:
    """Cria o evento externo do ticket recém-criado."""
    ticket_id = event_data.get("aggregate_id")
    logger.info(f"[HANDLER] TicketCriado: {ticket_id}")
    return _executar(self, "create", lambda s: s.sincronizar_criacao(ticket_id))


@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def sincronizar_calendario_atualizacao(self, event_data: Dict[str, Any]) -> Dict[str, Any]:
    """Atualiza (ou cria) o evento externo do ticket alterado."""
    ticket_id = event_data.get("aggregate_id")
    logger.info(f"[HANDLER] TicketAtualizado: {ticket_id}")
    return _executar(self, "update", lambda s: s.sincronizar_atualizacao(ticket_id))


@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def sincronizar_calendario_exclusao(self, event_data: Dict[str, Any]) -> Dict[str, Any]:
    """Remove o evento externo do ticket excluído."""
    ticket_id = event_data.get("aggregate_id")
    logger.info(f"[HANDLER] TicketExcluido: {ticket_id}")
    return _executar(
        self,
        "delete",
        lambda s: s.sincronizar_exclusao(ticket_id, event_data.get("evento_calendario_id")),
    )


HANDLERS = {
    "TicketCriadoEvent": sincronizar_calendario_criacao,
    "TicketAtualizadoEvent": sincronizar_calendario_atualizacao,
    "TicketExcluidoEvent": sincronizar_calendario_exclusao,
}


@shared_task(bind=True, max_retries=5, default_retry_delay=30)
def dispatch_domain_event(self, event_type: str, event_data: Dict[str, Any]) -> None:
    """
    Dispatcher central para Domain Events.

    Eventos sem handler (ex: EstoqueReservadoEvent) são apenas logados.

    Args:
        event_type: Tipo do evento (ex: 'TicketCriadoEvent')
        event_data: Dados do evento serializado
    """
    handler = HANDLERS.get(event_type)

    if handler:
        logger.info(f"[DISPATCHER] Roteando {event_type} para handler")
        handler.delay(event_data)
    else:
        logger.debug(f"[DISPATCHER] Nenhum handler para {event_type}")
