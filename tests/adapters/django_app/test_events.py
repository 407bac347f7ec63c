"""
Testes para publishers e tasks de eventos.

As tasks Celery são executadas diretamente (.run), sem broker.
"""

from unittest.mock import Mock, patch

import pytest
from celery.exceptions import Retry

from src.adapters.django_app.events import handlers
from src.adapters.django_app.events.publishers import (
    CeleryEventPublisher,
    CompositeEventPublisher,
    InMemoryEventPublisher,
    LoggingEventPublisher,
    get_event_publisher,
)
from src.core.tickets.calendar_sync import SyncResult
from src.core.tickets.events import TicketCriadoEvent, TicketExcluidoEvent


def _evento():
    return TicketCriadoEvent(aggregate_id="TK-2026-EVT001", cliente_id="cli-1")


class TestPublishers:

    def test_factory(self):
        assert isinstance(get_event_publisher("sync"), LoggingEventPublisher)
        assert isinstance(get_event_publisher("CELERY"), CeleryEventPublisher)
        assert isinstance(get_event_publisher(None), LoggingEventPublisher)

    def test_handler_com_erro_nao_propaga(self):
        publisher = LoggingEventPublisher()
        chamados = []
        publisher.register_handler("TicketCriadoEvent", Mock(side_effect=RuntimeError("x")))
        publisher.register_handler("TicketCriadoEvent", chamados.append)

        publisher.publish(_evento())

        assert len(chamados) == 1

    def test_in_memory_por_tipo(self):
        publisher = InMemoryEventPublisher()
        publisher.publish(_evento())
        publisher.publish(TicketExcluidoEvent(aggregate_id="TK-2026-EVT001"))

        assert len(publisher.get_events_by_type("TicketExcluidoEvent")) == 1
        publisher.clear()
        assert publisher.published_events == []

    def test_composite_continua_apos_falha(self):
        quebrado = Mock()
        quebrado.publish.side_effect = ConnectionError("fora")
        memoria = InMemoryEventPublisher()

        CompositeEventPublisher([quebrado, memoria]).publish(_evento())

        assert len(memoria.published_events) == 1

    def test_celery_falha_ao_enfileirar(self):
        with patch.object(handlers.dispatch_domain_event, "delay", side_effect=OSError("broker")):
            CeleryEventPublisher().publish(_evento())

    def test_celery_enfileira(self):
        with patch.object(handlers.dispatch_domain_event, "delay") as delay:
            CeleryEventPublisher(also_log=False).publish(_evento())

        event_type, event_data = delay.call_args.args
        assert event_type == "TicketCriadoEvent"
        assert event_data["aggregate_id"] == "TK-2026-EVT001"


class TestTasksDeAgenda:

    def test_dispatch_roteia(self):
        with patch.object(handlers.sincronizar_calendario_criacao, "delay") as delay:
            handlers.dispatch_domain_event.run("TicketCriadoEvent", {"aggregate_id": "TK-1"})

        delay.assert_called_once_with({"aggregate_id": "TK-1"})

    def test_dispatch_sem_handler(self):
        with patch.object(handlers.sincronizar_calendario_criacao, "delay") as delay:
            handlers.dispatch_domain_event.run("EstoqueReservadoEvent", {})

        delay.assert_not_called()

    def test_agenda_desligada_ignora(self):
        with patch.object(handlers, "_sync_service", return_value=None):
            resultado = handlers.sincronizar_calendario_criacao.run({"aggregate_id": "TK-1"})

        assert resultado["ignorado"] is True
        assert resultado["operacao"] == "create"

    def test_falha_reenfileira(self):
        service = Mock()
        service.sincronizar_criacao.return_value = SyncResult(
            ok=False, operacao="create", erro="503"
        )
        task = handlers.sincronizar_calendario_criacao

        with patch.object(handlers, "_sync_service", return_value=service), \
                patch.object(task, "retry", return_value=Retry()) as retry:
            with pytest.raises(Retry):
                task.run({"aggregate_id": "TK-1"})

        retry.assert_called_once()

    def test_tentativas_esgotadas_devolvem_falha(self):
        service = Mock()
        service.sincronizar_criacao.return_value = SyncResult(
            ok=False, operacao="create", erro="503"
        )
        task = handlers.sincronizar_calendario_criacao

        task.push_request(retries=task.max_retries)
        try:
            with patch.object(handlers, "_sync_service", return_value=service), \
                    patch.object(task, "retry") as retry:
                resultado = task.run({"aggregate_id": "TK-1"})
        finally:
            task.pop_request()

        retry.assert_not_called()
        assert resultado["ok"] is False
        assert resultado["erro"] == "503"

    def test_exclusao_repassa_evento_externo(self):
        service = Mock()
        service.sincronizar_exclusao.return_value = SyncResult(
            ok=True, operacao="delete", evento_id="gcal-9"
        )

        with patch.object(handlers, "_sync_service", return_value=service):
            resultado = handlers.sincronizar_calendario_exclusao.run(
                {"aggregate_id": "TK-1", "evento_calendario_id": "gcal-9"}
            )

        service.sincronizar_exclusao.assert_called_once_with("TK-1", "gcal-9")
        assert resultado == {
            "ok": True,
            "operacao": "delete",
            "evento_id": "gcal-9",
            "erro": None,
            "ignorado": False,
        }
