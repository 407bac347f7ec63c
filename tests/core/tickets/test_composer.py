"""
Testes para OrderComposer (composição e precificação de pedidos).
"""

from decimal import Decimal

import pytest

from src.core.shared.exceptions import ValidationError
from src.core.tickets.composer import normalizar_quantidade
from src.core.tickets.dtos import ItemTicketInputDTO
from src.core.tickets.exceptions import ServicoInvalidoError


class TestPrecificacao:
    """Regras de preço unitário e total da linha."""

    def test_produto_usa_custo(self, composer):
        pedido = composer.compor([ItemTicketInputDTO(produto_id="p-1", quantidade=3)])

        item = pedido.itens[0]
        assert item.preco_unitario == Decimal("10.00")
        assert item.total == Decimal("30.00")
        assert pedido.total == Decimal("30.00")
        assert pedido.quantidade_total == 3

    def test_servico_usa_preco(self, composer):
        pedido = composer.compor([ItemTicketInputDTO(servico_id="s-1")])
        assert pedido.itens[0].preco_unitario == Decimal("60.00")
        assert pedido.itens[0].quantidade == 1

    def test_preco_explicito_vence(self, composer):
        pedido = composer.compor([
            ItemTicketInputDTO(produto_id="p-1", quantidade=2, preco_unitario="12.50"),
        ])
        assert pedido.itens[0].total == Decimal("25.00")

    def test_total_explicito_vence(self, composer):
        pedido = composer.compor([
            ItemTicketInputDTO(produto_id="p-1", quantidade=2, total="15"),
        ])
        assert pedido.itens[0].total == Decimal("15.00")

    def test_produto_desconhecido_precifica_zero(self, composer):
        """Produto inexistente só é rejeitado na reserva de estoque."""
        pedido = composer.compor([ItemTicketInputDTO(produto_id="p-x")])
        assert pedido.itens[0].preco_unitario == Decimal("0.00")
        assert pedido.requeridos_por_produto == {"p-x": 1}
        assert pedido.produtos_desconhecidos == ["p-x"]

    def test_desconto_armazenado_sem_alterar_total(self, composer):
        pedido = composer.compor([
            ItemTicketInputDTO(servico_id="s-1", desconto=10),
        ])
        assert pedido.itens[0].desconto_percentual == Decimal("10.00")
        assert pedido.itens[0].total == Decimal("60.00")


class TestQuantidades:

    def test_soma_requeridos_por_produto(self, composer):
        pedido = composer.compor([
            ItemTicketInputDTO(produto_id="p-1", quantidade=2),
            ItemTicketInputDTO(servico_id="s-1"),
            ItemTicketInputDTO(produto_id="p-1", quantidade=1),
        ])

        assert pedido.requeridos_por_produto == {"p-1": 3}
        assert pedido.quantidade_total == 4
        assert len(pedido.itens_produto) == 2
        assert len(pedido.itens_servico) == 1

    @pytest.mark.parametrize("valor,esperado", [
        (None, 1),
        (0, 1),
        (-3, 1),
        ("abc", 1),
        ("2", 2),
        (2.9, 2),
        (True, 1),
    ])
    def test_normalizar_quantidade(self, valor, esperado):
        assert normalizar_quantidade(valor) == esperado


class TestRejeicoes:

    def test_lista_vazia(self, composer):
        with pytest.raises(ValidationError) as exc_info:
            composer.compor([])
        assert exc_info.value.field == "itens"

    def test_item_sem_referencia(self, composer):
        with pytest.raises(ValidationError):
            composer.compor([ItemTicketInputDTO(quantidade=1)])

    def test_item_com_duas_referencias(self, composer):
        with pytest.raises(ValidationError):
            composer.compor([ItemTicketInputDTO(produto_id="p-1", servico_id="s-1")])

    def test_servico_inexistente(self, composer):
        with pytest.raises(ServicoInvalidoError) as exc_info:
            composer.compor([ItemTicketInputDTO(servico_id="s-404")])
        assert exc_info.value.servico_id == "s-404"

    def test_preco_invalido(self, composer):
        with pytest.raises(ValidationError):
            composer.compor([ItemTicketInputDTO(produto_id="p-1", preco_unitario="dez")])
