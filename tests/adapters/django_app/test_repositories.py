"""
Testes para os repositórios Django (ORM sobre SQLite em memória).
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from src.adapters.django_app.tickets.models import ItemTicketModel, ProdutoModel, TicketModel
from src.adapters.django_app.tickets.repositories import (
    DjangoInventory,
    DjangoProductLookup,
    DjangoServiceLookup,
    DjangoTicketRepository,
)
from src.core.tickets.entities import ItemTicket, ReferenciaItem, TicketEntity, TicketStatus


INICIO = datetime(2026, 3, 10, 13, 0, tzinfo=timezone.utc)


def _ticket(ticket_id="TK-2026-REPO01", **kwargs):
    dados = dict(
        id=ticket_id,
        cliente_id="cli-1",
        profissional_id="staff-1",
        status=TicketStatus.PENDENTE,
        itens=[
            ItemTicket(referencia=ReferenciaItem.produto("p-1"), quantidade=2,
                       preco_unitario="10", total="20"),
            ItemTicket(referencia=ReferenciaItem.servico("s-1"), preco_unitario="60",
                       total="60", desconto_percentual="5"),
        ],
    )
    dados.update(kwargs)
    return TicketEntity.criar(**dados)


@pytest.fixture
def repo():
    return DjangoTicketRepository()


@pytest.mark.django_db
class TestDjangoTicketRepository:

    def test_create_e_get_by_id(self, repo, catalogo):
        repo.create(_ticket(observacoes="nota", inicio=INICIO, fim=INICIO + timedelta(hours=1)))

        ticket = repo.get_by_id("TK-2026-REPO01")

        assert ticket.status == TicketStatus.PENDENTE
        assert ticket.total == Decimal("80.00")
        assert ticket.quantidade == 3
        assert ticket.duracao_minutos == 60
        assert ticket.inicio == INICIO
        assert [i.referencia.ref_id for i in ticket.itens] == ["p-1", "s-1"]
        assert ticket.itens[1].desconto_percentual == Decimal("5.00")

    def test_get_inexistente(self, repo, catalogo):
        assert repo.get_by_id("TK-2026-NADA00") is None
        assert not repo.exists("TK-2026-NADA00")

    def test_replace_items(self, repo, catalogo):
        ticket = _ticket()
        repo.create(ticket)

        novo = [ItemTicket(referencia=ReferenciaItem.servico("s-1"), total="60")]
        repo.replace_items(ticket.id, novo)

        assert ItemTicketModel.objects.filter(ticket_id=ticket.id).count() == 1

    def test_update_campos_escalares(self, repo, catalogo):
        ticket = _ticket()
        repo.create(ticket)

        ticket.alterar_status(TicketStatus.CONCLUIDO)
        ticket.alterar_cliente("cli-2")
        repo.update(ticket)

        gravado = repo.get_by_id(ticket.id)
        assert gravado.status == TicketStatus.CONCLUIDO
        assert gravado.cliente_id == "cli-2"
        assert len(gravado.itens) == 2

    def test_delete(self, repo, catalogo):
        ticket = _ticket()
        repo.create(ticket)

        repo.delete_items(ticket.id)
        repo.delete(ticket.id)

        assert not TicketModel.objects.exists()
        assert not ItemTicketModel.objects.exists()

    def test_set_evento_calendario_id(self, repo, catalogo):
        repo.create(_ticket())
        repo.set_evento_calendario_id("TK-2026-REPO01", "gcal-1")
        assert repo.get_by_id("TK-2026-REPO01").evento_calendario_id == "gcal-1"

    def test_list_agendados(self, repo, catalogo):
        repo.create(_ticket("TK-2026-AGD001", inicio=INICIO, fim=INICIO + timedelta(hours=1)))
        repo.create(_ticket("TK-2026-AGD002"))

        agendados = repo.list_agendados("staff-1")
        assert [t.id for t in agendados] == ["TK-2026-AGD001"]
        assert repo.list_agendados("staff-1", excluir_ticket_id="TK-2026-AGD001") == []


@pytest.mark.django_db
class TestListPaginated:

    @pytest.fixture
    def carregados(self, repo, catalogo):
        base = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)
        ids = []
        for i in range(4):
            ticket = _ticket(f"TK-2026-LST00{i}", status=TicketStatus.PENDENTE)
            if i == 3:
                ticket.substituir_itens([
                    ItemTicket(referencia=ReferenciaItem.produto("p-2"), total="4.5"),
                ])
                ticket.alterar_status(TicketStatus.CANCELADO)
                ticket.alterar_cliente("cli-2")
            ticket.criado_em = base - timedelta(days=i)
            repo.create(ticket)
            ids.append(ticket.id)
        return ids

    def test_ordem_decrescente_e_total(self, repo, carregados):
        pagina, total = repo.list_paginated(None, None, None, None, 0, 2)
        assert total == 4
        assert [t.id for t in pagina] == carregados[:2]

    def test_busca_por_produto(self, repo, carregados):
        pagina, total = repo.list_paginated("pomada", None, None, None, 0, 10)
        assert total == 1
        assert pagina[0].id == carregados[3]

    def test_busca_por_cliente_sem_duplicar(self, repo, carregados):
        """Ticket com vários itens aparece uma única vez."""
        _, total = repo.list_paginated("ana", None, None, None, 0, 10)
        assert total == 3

    def test_busca_por_status(self, repo, carregados):
        _, total = repo.list_paginated("cancel", None, None, None, 0, 10)
        assert total == 1

    def test_filtro_status(self, repo, carregados):
        _, total = repo.list_paginated(None, TicketStatus.PENDENTE, None, None, 0, 10)
        assert total == 3

    def test_intervalo_semiaberto(self, repo, carregados):
        de = datetime(2026, 3, 9, tzinfo=timezone.utc)
        ate = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)
        pagina, total = repo.list_paginated(None, None, de, ate, 0, 10)
        assert [t.id for t in pagina] == [carregados[1]]


@pytest.mark.django_db
class TestLookupsEInventario:

    def test_product_lookup(self, catalogo):
        produtos = DjangoProductLookup().get_many(["p-1", "p-x"])
        assert list(produtos) == ["p-1"]
        assert produtos["p-1"].custo == Decimal("10.00")
        assert produtos["p-1"].estoque == 5

    def test_service_lookup(self, catalogo):
        servicos = DjangoServiceLookup().get_many(["s-1"])
        assert servicos["s-1"].preco == Decimal("60.00")
        assert servicos["s-1"].duracao_minutos == 45

    def test_lock_e_decrement(self, catalogo):
        from django.db import transaction

        inventario = DjangoInventory()
        with transaction.atomic():
            assert inventario.lock_stock(["p-2", "p-1", "p-x"]) == {"p-1": 5, "p-2": 1}
            inventario.decrement("p-1", 2)

        assert ProdutoModel.objects.get(id="p-1").estoque == 3
