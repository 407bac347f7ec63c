"""
Testes para CalendarSyncService (sincronização best-effort).

O adapter é um Mock: nenhuma falha dele pode propagar.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from src.adapters.django_app.events.handlers import registrar_handlers_agenda
from src.core.tickets.calendar_sync import CalendarSyncService, EventoCalendario
from src.core.tickets.dtos import CriarTicketInputDTO, ItemTicketInputDTO
from src.core.tickets.entities import ItemTicket, ReferenciaItem, TicketEntity, TicketStatus
from src.core.tickets.ports import InMemoryServiceLookup


INICIO = datetime(2026, 3, 10, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def adapter():
    adapter = Mock()
    adapter.create_event.return_value = "gcal-1"
    adapter.update_event.return_value = True
    adapter.delete_event.return_value = True
    return adapter


@pytest.fixture
def sync(ticket_repo, adapter, store):
    return CalendarSyncService(
        ticket_repo, adapter, timezone="America/Sao_Paulo",
        servicos=InMemoryServiceLookup(store),
    )


@pytest.fixture
def gravar(ticket_repo):
    def _gravar(com_janela=True, evento_id=None):
        ticket = TicketEntity.criar(
            id="TK-2026-SYNC01",
            cliente_id="cli-1",
            profissional_id="staff-1",
            status=TicketStatus.CONFIRMADO,
            itens=[ItemTicket(referencia=ReferenciaItem.servico("s-1"), total="60")],
            observacoes="Chegar cedo",
            inicio=INICIO if com_janela else None,
            fim=INICIO + timedelta(minutes=45) if com_janela else None,
        )
        ticket.evento_calendario_id = evento_id
        ticket_repo.create(ticket)
        return ticket

    return _gravar


class TestEventoCalendario:

    def test_from_ticket(self, gravar):
        ticket = gravar()
        evento = EventoCalendario.from_ticket(ticket, "UTC", {"s-1": "Corte"})

        assert evento.summary == "Ticket TK-2026-SYNC01 - Corte"
        assert evento.description.startswith("Chegar cedo")
        assert "- service s-1 x1 = 60.00" in evento.description
        assert evento.description.endswith("Total: 60.00")
        assert evento.fim - evento.inicio == timedelta(minutes=45)

    def test_sem_nomes(self, gravar):
        evento = EventoCalendario.from_ticket(gravar())
        assert evento.summary == "Ticket TK-2026-SYNC01"


class TestSincronizarCriacao:

    def test_cria_e_grava_id(self, sync, adapter, gravar, ticket_repo):
        ticket = gravar()

        resultado = sync.sincronizar_criacao(ticket.id)

        assert resultado.ok
        assert resultado.evento_id == "gcal-1"
        evento = adapter.create_event.call_args.args[0]
        assert evento.timezone == "America/Sao_Paulo"
        assert evento.summary.endswith("Corte")
        assert ticket_repo.get_by_id(ticket.id).evento_calendario_id == "gcal-1"

    def test_sem_janela_ignora(self, sync, adapter, gravar):
        ticket = gravar(com_janela=False)

        resultado = sync.sincronizar_criacao(ticket.id)

        assert resultado.ignorado
        adapter.create_event.assert_not_called()

    def test_ticket_inexistente_ignora(self, sync, adapter):
        assert sync.sincronizar_criacao("TK-2026-NADA00").ignorado

    def test_adapter_sem_id(self, sync, adapter, gravar, ticket_repo):
        adapter.create_event.return_value = None
        ticket = gravar()

        resultado = sync.sincronizar_criacao(ticket.id)

        assert not resultado.ok
        assert ticket_repo.get_by_id(ticket.id).evento_calendario_id is None

    def test_excecao_do_adapter_nao_propaga(self, sync, adapter, gravar):
        adapter.create_event.side_effect = TimeoutError("timeout")
        ticket = gravar()

        resultado = sync.sincronizar_criacao(ticket.id)

        assert not resultado.ok
        assert "timeout" in resultado.erro


class TestSincronizarAtualizacao:

    def test_atualiza_evento_existente(self, sync, adapter, gravar):
        ticket = gravar(evento_id="gcal-9")

        resultado = sync.sincronizar_atualizacao(ticket.id)

        assert resultado.ok
        assert adapter.update_event.call_args.args[0] == "gcal-9"
        adapter.create_event.assert_not_called()

    def test_sem_evento_cria(self, sync, adapter, gravar, ticket_repo):
        ticket = gravar()

        resultado = sync.sincronizar_atualizacao(ticket.id)

        assert resultado.operacao == "create"
        assert ticket_repo.get_by_id(ticket.id).evento_calendario_id == "gcal-1"

    def test_recusa_do_adapter(self, sync, adapter, gravar):
        adapter.update_event.return_value = False
        ticket = gravar(evento_id="gcal-9")

        assert not sync.sincronizar_atualizacao(ticket.id).ok


class TestSincronizarExclusao:

    def test_sem_evento_ignora(self, sync, adapter):
        assert sync.sincronizar_exclusao("TK-2026-SYNC01", None).ignorado
        adapter.delete_event.assert_not_called()

    def test_remove_evento(self, sync, adapter):
        resultado = sync.sincronizar_exclusao("TK-2026-SYNC01", "gcal-9")
        assert resultado.ok
        adapter.delete_event.assert_called_once_with("gcal-9")

    def test_falha_vira_resultado(self, sync, adapter):
        adapter.delete_event.side_effect = ConnectionError("offline")
        assert not sync.sincronizar_exclusao("TK-2026-SYNC01", "gcal-9").ok


class TestHandlersDeAgenda:
    """Fluxo completo: criar ticket → evento pós-commit → agenda."""

    def test_criacao_com_janela_sincroniza(
        self, criar_service, event_publisher, sync, adapter, ticket_repo
    ):
        registrar_handlers_agenda(event_publisher, sync)

        output = criar_service.execute(CriarTicketInputDTO(
            cliente_id="cli-1",
            profissional_id="staff-1",
            status="Confirmed",
            itens=(ItemTicketInputDTO(servico_id="s-1"),),
            inicio=INICIO,
            fim=INICIO + timedelta(hours=1),
        ))

        adapter.create_event.assert_called_once()
        assert ticket_repo.get_by_id(output.id).evento_calendario_id == "gcal-1"

    def test_falha_da_agenda_nao_afeta_ticket(
        self, criar_service, event_publisher, sync, adapter, ticket_repo
    ):
        adapter.create_event.side_effect = RuntimeError("503")
        registrar_handlers_agenda(event_publisher, sync)

        output = criar_service.execute(CriarTicketInputDTO(
            cliente_id="cli-1",
            profissional_id="staff-1",
            status="Confirmed",
            itens=(ItemTicketInputDTO(servico_id="s-1"),),
            inicio=INICIO,
            fim=INICIO + timedelta(hours=1),
        ))

        assert ticket_repo.exists(output.id)
        assert ticket_repo.get_by_id(output.id).evento_calendario_id is None
