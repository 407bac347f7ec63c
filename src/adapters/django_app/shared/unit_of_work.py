"""
Unit of Work - Implementações.

Fronteira transacional do motor de tickets: leitura travada do
estoque, decremento, gravação do ticket e dos itens acontecem
dentro de um único bloco, persistido junto ou descartado junto.

Responsabilidades:
- Iniciar/finalizar transações
- Commit/Rollback coordenado
- Publicar eventos somente após commit bem-sucedido

ACID Guarantees:
- Atomicidade: Tudo ou nada (nenhum decremento parcial fica visível)
- Isolamento: SELECT ... FOR UPDATE nas linhas de produto
- Durabilidade: PostgreSQL garante
"""

from typing import List, Optional
import logging

from django.db import transaction

from src.core.shared.interfaces import EventPublisher, UnitOfWork
from src.core.shared.events import DomainEvent
from src.core.tickets.ports import InMemoryStore

logger = logging.getLogger(__name__)


class _PublicacaoMixin:
    """Entrega pós-commit; falha do publisher nunca desfaz o commit."""

    _event_publisher: Optional[EventPublisher]

    def _publish_events(self, events: List[DomainEvent]) -> None:
        for event in events:
            logger.info(
                f"Publishing event: {event.event_type} "
                f"for aggregate {event.aggregate_id}"
            )
            if self._event_publisher:
                try:
                    self._event_publisher.publish(event)
                except Exception as e:
                    logger.error(f"Failed to publish event {event.event_type}: {e}")


class DjangoUnitOfWork(_PublicacaoMixin, UnitOfWork):
    """
    Implementação Django do Unit of Work.

    Usa transaction.atomic; dentro de outra transação (ex: testes)
    o bloco vira um savepoint.

    Example:
        with DjangoUnitOfWork(event_publisher=publisher) as uow:
            reserva.reservar(requeridos)
            repo.create(ticket)
            uow.publish_event(TicketCriadoEvent(aggregate_id=ticket.id))
        # Commit automático + eventos publicados

    Example com rollback:
        with DjangoUnitOfWork() as uow:
            repo.create(ticket)
            raise EstoqueInsuficienteError("p-1", 3, 1)
        # Rollback automático, eventos descartados
    """

    def __init__(
        self,
        event_publisher: Optional[EventPublisher] = None,
        using: Optional[str] = None,
    ):
        """
        Args:
            event_publisher: Publicador de eventos (handlers locais ou Celery)
            using: Alias do banco (padrão: default)
        """
        super().__init__()
        self._event_publisher = event_publisher
        self._using = using
        self._atomic = None
        self._committed = False
        self._rolled_back = False

    def _begin_transaction(self) -> None:
        self._committed = False
        self._rolled_back = False
        self._atomic = transaction.atomic(using=self._using)
        self._atomic.__enter__()
        logger.debug("Transaction started")

    def commit(self) -> None:
        """
        Faz commit e publica os eventos enfileirados.

        Raises:
            Exception: Se o commit falhar (eventos são descartados)
        """
        if self._atomic is None:
            logger.warning("Transaction already finalized")
            return

        atomic, self._atomic = self._atomic, None
        try:
            atomic.__exit__(None, None, None)
        except Exception as e:
            logger.error(f"Commit failed: {e}")
            self._rolled_back = True
            self.clear_events()
            raise

        self._committed = True
        logger.debug("Transaction committed")

        events = self.collect_events()
        self.clear_events()
        self._publish_events(events)

    def rollback(self) -> None:
        """Desfaz todas as mudanças e descarta eventos."""
        if self._atomic is None:
            return

        atomic, self._atomic = self._atomic, None
        try:
            transaction.set_rollback(True, using=self._using)
            atomic.__exit__(None, None, None)
            logger.debug("Transaction rolled back")
        except Exception as e:
            logger.error(f"Rollback failed: {e}")
        finally:
            self._rolled_back = True
            self.clear_events()

    @property
    def is_committed(self) -> bool:
        return self._committed

    @property
    def is_rolled_back(self) -> bool:
        return self._rolled_back


class InMemoryUnitOfWork(_PublicacaoMixin, UnitOfWork):
    """
    Unit of Work em memória para testes.

    Com um InMemoryStore, segura o lock do store durante toda a
    transação (transações serializáveis entre threads) e restaura o
    snapshot no rollback. Sem store, apenas simula o comportamento.

    Example:
        store = InMemoryStore()
        uow = InMemoryUnitOfWork(store)
        with uow:
            reserva.reservar({"p-1": 1})
            uow.publish_event(event)

        assert uow.committed
        assert len(uow.published_events) == 1
    """

    def __init__(
        self,
        store: Optional[InMemoryStore] = None,
        event_publisher: Optional[EventPublisher] = None,
    ):
        super().__init__()
        self.store = store
        self._event_publisher = event_publisher
        self._snapshot = None
        self._committed = False
        self._rolled_back = False
        self._published_events: List[DomainEvent] = []

    def _begin_transaction(self) -> None:
        self._committed = False
        self._rolled_back = False
        if self.store is not None:
            self.store.lock.acquire()
            self._snapshot = self.store.snapshot()

    def commit(self) -> None:
        self._liberar()
        self._committed = True
        events = self.collect_events()
        self.clear_events()
        self._published_events.extend(events)
        self._publish_events(events)

    def rollback(self) -> None:
        if self.store is not None and self._snapshot is not None:
            self.store.restore(self._snapshot)
        self._liberar()
        self._rolled_back = True
        self.clear_events()

    def _liberar(self) -> None:
        if self.store is not None and self._snapshot is not None:
            self._snapshot = None
            self.store.lock.release()

    @property
    def committed(self) -> bool:
        """Verifica se foi comitado."""
        return self._committed

    @property
    def rolled_back(self) -> bool:
        """Verifica se foi revertido."""
        return self._rolled_back

    @property
    def published_events(self) -> List[DomainEvent]:
        """Eventos entregues após commit."""
        return self._published_events

    def reset(self) -> None:
        """Reset para próximo teste."""
        self._committed = False
        self._rolled_back = False
        self._published_events.clear()
        self.clear_events()
