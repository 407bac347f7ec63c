"""
Testes Unitários para Entidades do Domínio de Tickets.

Coverage:
- TicketEntity.criar(): validações e totais
- Janela de atendimento e duração derivada
- Troca completa de itens
- ReferenciaItem / ItemTicket: invariantes das linhas
- TicketStatus, FiltroData e calcular_intervalo
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from src.core.shared.exceptions import ValidationError
from src.core.tickets.entities import (
    FiltroData,
    ItemTicket,
    ReferenciaItem,
    TicketEntity,
    TicketStatus,
    TipoItem,
    calcular_duracao_minutos,
    calcular_intervalo,
    para_decimal,
)


INICIO = datetime(2026, 3, 10, 10, 0, tzinfo=timezone.utc)


def _item_produto(pid="p-1", quantidade=1, total="10.00"):
    return ItemTicket(
        referencia=ReferenciaItem.produto(pid),
        quantidade=quantidade,
        preco_unitario="10.00",
        total=total,
    )


def _item_servico(sid="s-1", total="60.00"):
    return ItemTicket(
        referencia=ReferenciaItem.servico(sid),
        preco_unitario=total,
        total=total,
    )


def _criar(**kwargs):
    dados = dict(
        id="TK-2026-AAAAAA",
        cliente_id="cli-1",
        profissional_id="staff-1",
        status=TicketStatus.PENDENTE,
        itens=[_item_produto(quantidade=2, total="20.00"), _item_servico()],
    )
    dados.update(kwargs)
    return TicketEntity.criar(**dados)


class TestTicketEntityCriacao:
    """Testes para criação de tickets."""

    def test_criar_ticket_valido(self):
        """Totais são a soma das linhas."""
        ticket = _criar(observacoes="  trazer toalha  ")

        assert ticket.id == "TK-2026-AAAAAA"
        assert ticket.quantidade == 3
        assert ticket.total == Decimal("80.00")
        assert ticket.observacoes == "trazer toalha"
        assert ticket.inicio is None
        assert ticket.duracao_minutos is None
        assert all(item.ticket_id == ticket.id for item in ticket.itens)

    def test_criar_sem_cliente_falha(self):
        with pytest.raises(ValidationError) as exc_info:
            _criar(cliente_id="")
        assert exc_info.value.field == "cliente_id"

    def test_criar_sem_profissional_falha(self):
        with pytest.raises(ValidationError) as exc_info:
            _criar(profissional_id="   ")
        assert exc_info.value.field == "profissional_id"

    def test_criar_sem_status_falha(self):
        with pytest.raises(ValidationError) as exc_info:
            _criar(status=None)
        assert exc_info.value.field == "status"

    def test_itens_ficam_na_ordem_informada(self):
        ticket = _criar()
        assert [i.tipo for i in ticket.itens] == [TipoItem.PRODUTO, TipoItem.SERVICO]
        assert len(ticket.itens_produto) == 1
        assert len(ticket.itens_servico) == 1


class TestJanelaAtendimento:
    """Testes para início/fim e duração."""

    def test_duracao_derivada_da_janela(self):
        ticket = _criar(inicio=INICIO, fim=INICIO + timedelta(minutes=45))
        assert ticket.duracao_minutos == 45
        assert ticket.possui_janela

    def test_duracao_explicita_vence(self):
        ticket = _criar(
            inicio=INICIO,
            fim=INICIO + timedelta(minutes=45),
            duracao_minutos=30,
        )
        assert ticket.duracao_minutos == 30

    def test_janela_vazia_permitida(self):
        ticket = _criar(inicio=INICIO, fim=INICIO)
        assert ticket.duracao_minutos == 0

    def test_apenas_inicio_falha(self):
        with pytest.raises(ValidationError) as exc_info:
            _criar(inicio=INICIO)
        assert exc_info.value.field == "fim"

    def test_fim_antes_do_inicio_falha(self):
        with pytest.raises(ValidationError):
            _criar(inicio=INICIO, fim=INICIO - timedelta(minutes=1))

    def test_duracao_negativa_falha(self):
        ticket = _criar()
        with pytest.raises(ValidationError):
            ticket.alterar_duracao(-5)

    def test_remover_janela_limpa_duracao(self):
        ticket = _criar(inicio=INICIO, fim=INICIO + timedelta(hours=1))
        ticket.definir_janela(None, None)
        assert ticket.duracao_minutos is None
        assert not ticket.possui_janela

    @pytest.mark.parametrize("segundos,esperado", [
        (45 * 60, 45),
        (45 * 60 + 29, 45),
        (45 * 60 + 30, 46),
        (59, 1),
    ])
    def test_arredondamento_de_minutos(self, segundos, esperado):
        fim = INICIO + timedelta(seconds=segundos)
        assert calcular_duracao_minutos(INICIO, fim) == esperado


class TestTrocaDeItens:
    """Itens são sempre substituídos, nunca mesclados."""

    def test_substituir_recalcula_totais(self):
        ticket = _criar()
        ticket.substituir_itens([_item_produto("p-2", quantidade=4, total="18.00")])

        assert len(ticket.itens) == 1
        assert ticket.quantidade == 4
        assert ticket.total == Decimal("18.00")

    def test_substituir_por_lista_vazia(self):
        ticket = _criar()
        ticket.substituir_itens([])

        assert ticket.itens == []
        assert ticket.quantidade == 0
        assert ticket.total == Decimal("0.00")


class TestItemTicket:
    """Invariantes das linhas."""

    def test_referencia_exige_exatamente_um(self):
        with pytest.raises(ValidationError):
            ReferenciaItem.from_ids()
        with pytest.raises(ValidationError):
            ReferenciaItem.from_ids(produto_id="p-1", servico_id="s-1")

    def test_referencia_produto(self):
        ref = ReferenciaItem.from_ids(produto_id="p-1")
        assert ref.tipo == TipoItem.PRODUTO
        assert ref.produto_id == "p-1"
        assert ref.servico_id is None

    def test_quantidade_minima(self):
        with pytest.raises(ValidationError):
            ItemTicket(referencia=ReferenciaItem.produto("p-1"), quantidade=0)

    def test_desconto_fora_da_faixa(self):
        with pytest.raises(ValidationError):
            ItemTicket(referencia=ReferenciaItem.produto("p-1"), desconto_percentual=101)

    def test_total_negativo(self):
        with pytest.raises(ValidationError):
            ItemTicket(referencia=ReferenciaItem.produto("p-1"), total="-1")

    def test_to_dict_marca_tipo(self):
        item = _item_servico()
        dados = item.to_dict()
        assert dados["type"] == "service"
        assert dados["serviceId"] == "s-1"
        assert dados["productId"] is None
        assert dados["total"] == 60.0


class TestValoresEEnums:

    def test_para_decimal_arredonda_centavos(self):
        assert para_decimal("10.005", "total") == Decimal("10.01")
        assert para_decimal(3, "total") == Decimal("3.00")

    @pytest.mark.parametrize("valor", ["abc", None, True, "NaN"])
    def test_para_decimal_invalido(self, valor):
        with pytest.raises(ValidationError):
            para_decimal(valor, "total")

    @pytest.mark.parametrize("texto", ["Pending", "pending", "PENDENTE", " Pending "])
    def test_status_from_string(self, texto):
        assert TicketStatus.from_string(texto) == TicketStatus.PENDENTE

    def test_status_invalido(self):
        with pytest.raises(ValueError):
            TicketStatus.from_string("Open")

    def test_filtro_vazio_e_todos(self):
        assert FiltroData.from_string(None) == FiltroData.TODOS
        assert FiltroData.from_string("thismonth") == FiltroData.ESTE_MES
        with pytest.raises(ValueError):
            FiltroData.from_string("lastYear")


class TestCalcularIntervalo:
    """Filtros de data sobre criado_em (intervalo semiaberto)."""

    def test_todos_sem_limites(self, agora):
        assert calcular_intervalo(FiltroData.TODOS, agora) == (None, None)

    def test_hoje(self, agora):
        de, ate = calcular_intervalo(FiltroData.HOJE, agora)
        assert de == datetime(2026, 3, 10, tzinfo=timezone.utc)
        assert ate == datetime(2026, 3, 11, tzinfo=timezone.utc)

    def test_este_mes(self, agora):
        de, ate = calcular_intervalo(FiltroData.ESTE_MES, agora)
        assert de == datetime(2026, 3, 1, tzinfo=timezone.utc)
        assert ate == datetime(2026, 4, 1, tzinfo=timezone.utc)

    def test_este_mes_em_dezembro(self):
        agora = datetime(2026, 12, 20, tzinfo=timezone.utc)
        de, ate = calcular_intervalo(FiltroData.ESTE_MES, agora)
        assert ate == datetime(2027, 1, 1, tzinfo=timezone.utc)

    def test_calendario(self, agora):
        de, ate = calcular_intervalo(
            FiltroData.CALENDARIO, agora, data_especifica=date(2026, 2, 14)
        )
        assert de == datetime(2026, 2, 14, tzinfo=timezone.utc)
        assert ate - de == timedelta(days=1)

    def test_calendario_sem_dia_nao_filtra(self, agora):
        assert calcular_intervalo(FiltroData.CALENDARIO, agora) == (None, None)

    def test_personalizado_ate_agora(self, agora):
        de, ate = calcular_intervalo(
            FiltroData.PERSONALIZADO, agora, data_inicio=date(2026, 1, 1)
        )
        assert de == datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert ate == agora
