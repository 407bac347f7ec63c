"""
Testes para SchedulingConflictDetector (sobreposição semiaberta).
"""

from datetime import datetime, timedelta, timezone

import pytest

from src.core.tickets.entities import ItemTicket, ReferenciaItem, TicketEntity, TicketStatus
from src.core.tickets.scheduling import SchedulingConflictDetector, janelas_sobrepostas


def _hora(h, m=0):
    return datetime(2026, 3, 10, h, m, tzinfo=timezone.utc)


@pytest.fixture
def detector(ticket_repo):
    return SchedulingConflictDetector(ticket_repo)


@pytest.fixture
def agendar(ticket_repo):
    """Grava um ticket com janela para o profissional."""
    contador = iter(range(100))

    def _agendar(inicio, fim, profissional_id="staff-1", status=TicketStatus.CONFIRMADO):
        ticket = TicketEntity.criar(
            id=f"TK-2026-AGD{next(contador):03d}",
            cliente_id="cli-1",
            profissional_id=profissional_id,
            status=status,
            itens=[ItemTicket(referencia=ReferenciaItem.servico("s-1"))],
            inicio=inicio,
            fim=fim,
        )
        ticket_repo.create(ticket)
        return ticket

    return _agendar


class TestJanelasSobrepostas:

    def test_sobreposicao_parcial(self):
        assert janelas_sobrepostas(_hora(10), _hora(11), _hora(10, 30), _hora(11, 30))

    def test_limite_encostado_nao_conflita(self):
        assert not janelas_sobrepostas(_hora(10), _hora(11), _hora(11), _hora(12))

    def test_janela_contida(self):
        assert janelas_sobrepostas(_hora(9), _hora(12), _hora(10), _hora(11))


class TestDetector:

    def test_conflito_mesmo_profissional(self, detector, agendar):
        agendar(_hora(10), _hora(11))
        assert detector.has_conflict("staff-1", _hora(10, 30), _hora(11, 30))

    def test_limite_encostado(self, detector, agendar):
        agendar(_hora(10), _hora(11))
        assert not detector.has_conflict("staff-1", _hora(11), _hora(12))

    def test_outro_profissional(self, detector, agendar):
        agendar(_hora(10), _hora(11), profissional_id="staff-2")
        assert not detector.has_conflict("staff-1", _hora(10, 30), _hora(11, 30))

    def test_exclui_o_proprio_ticket(self, detector, agendar):
        ticket = agendar(_hora(10), _hora(11))
        assert not detector.has_conflict(
            "staff-1", _hora(10), _hora(11), excluir_ticket_id=ticket.id
        )

    def test_cancelado_nao_bloqueia(self, detector, agendar):
        agendar(_hora(10), _hora(11), status=TicketStatus.CANCELADO)
        assert not detector.has_conflict("staff-1", _hora(10), _hora(11))

    def test_lista_conflitos(self, detector, agendar):
        a = agendar(_hora(9), _hora(10, 15))
        b = agendar(_hora(10), _hora(11))
        agendar(_hora(12), _hora(13))

        encontrados = detector.conflitos("staff-1", _hora(10), _hora(10) + timedelta(minutes=30))
        assert {t.id for t in encontrados} == {a.id, b.id}
