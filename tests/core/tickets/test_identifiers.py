"""
Testes para TicketIdGenerator.
"""

from datetime import datetime
from unittest.mock import Mock

import pytest

from src.core.tickets.exceptions import GeracaoIdEsgotadaError
from src.core.tickets.identifiers import PADRAO_ID, TicketIdGenerator


class TestTicketIdGenerator:

    def test_formato(self):
        gerador = TicketIdGenerator(existe=lambda _: False, relogio=lambda: datetime(2031, 5, 1))
        ticket_id = gerador.gerar()

        assert PADRAO_ID.match(ticket_id)
        assert ticket_id.startswith("TK-2031-")

    def test_mil_ids_distintos(self):
        """Cada ID gerado é registrado como usado; nenhum se repete."""
        usados = set()
        gerador = TicketIdGenerator(existe=usados.__contains__)

        for _ in range(1000):
            usados.add(gerador.gerar())

        assert len(usados) == 1000

    def test_colisao_sorteia_de_novo(self):
        existe = Mock(side_effect=[True, True, False])
        gerador = TicketIdGenerator(existe=existe)

        gerador.gerar()

        assert existe.call_count == 3

    def test_esgotado(self):
        existe = Mock(return_value=True)
        gerador = TicketIdGenerator(existe=existe, max_tentativas=4)

        with pytest.raises(GeracaoIdEsgotadaError) as exc_info:
            gerador.gerar()

        assert existe.call_count == 4
        assert exc_info.value.tentativas == 4
