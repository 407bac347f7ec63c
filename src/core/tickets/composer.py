"""
Composição de pedidos.

Normaliza itens heterogêneos (produto ou serviço) em linhas
precificadas e quantificadas, com totais agregados e o mapa de
quantidade requerida por produto usado na reserva de estoque.

Regras de precificação:
- quantidade padrão 1, mínimo 1
- preço unitário explícito; senão CUSTO do produto; senão preço do serviço; senão 0
- total da linha explícito; senão preço unitário * quantidade
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Sequence
import logging

from src.core.shared.exceptions import ValidationError

from .dtos import ItemTicketInputDTO
from .entities import ItemTicket, ReferenciaItem, TipoItem, ZERO, para_decimal
from .exceptions import ServicoInvalidoError
from .ports import ProductLookup, ServiceLookup

logger = logging.getLogger(__name__)


def normalizar_quantidade(valor: Any) -> int:
    """Quantidade ausente, inválida ou menor que 1 vira 1."""
    if valor is None or isinstance(valor, bool):
        return 1
    try:
        quantidade = int(float(valor))
    except (TypeError, ValueError, OverflowError):
        return 1
    return max(1, quantidade)


@dataclass
class PedidoComposto:
    """
    Resultado da composição.

    Attributes:
        itens: Linhas precificadas, na ordem do pedido
        requeridos_por_produto: Soma de quantidades por produto
        produtos_desconhecidos: Produtos referenciados fora do catálogo
        total: Σ total das linhas
        quantidade_total: Σ quantidade das linhas
    """

    itens: List[ItemTicket] = field(default_factory=list)
    requeridos_por_produto: Dict[str, int] = field(default_factory=dict)
    produtos_desconhecidos: List[str] = field(default_factory=list)
    total: Decimal = ZERO
    quantidade_total: int = 0

    @property
    def itens_produto(self) -> List[ItemTicket]:
        return [i for i in self.itens if i.tipo == TipoItem.PRODUTO]

    @property
    def itens_servico(self) -> List[ItemTicket]:
        return [i for i in self.itens if i.tipo == TipoItem.SERVICO]


class OrderComposer:
    """
    Compõe o pedido consultando custo de produtos e preço de serviços.

    Produtos inexistentes não são rejeitados aqui: a reserva de estoque,
    dentro da transação, é quem reporta a referência inválida.
    Serviços inexistentes são rejeitados na composição.

    Example:
        composer = OrderComposer(produtos, servicos)
        pedido = composer.compor([
            ItemTicketInputDTO(produto_id="p-1", quantidade=2),
            ItemTicketInputDTO(servico_id="s-1"),
        ])
        pedido.requeridos_por_produto  # {"p-1": 2}
    """

    def __init__(self, produtos: ProductLookup, servicos: ServiceLookup):
        self.produtos = produtos
        self.servicos = servicos

    def compor(self, itens: Sequence[ItemTicketInputDTO]) -> PedidoComposto:
        """
        Compõe o pedido.

        Args:
            itens: Itens recebidos da API

        Returns:
            Pedido precificado com totais e mapa de estoque requerido

        Raises:
            ValidationError: Lista vazia ou item sem referência
            ServicoInvalidoError: Serviço inexistente
        """
        if not itens:
            raise ValidationError(
                "Pelo menos um item (produto ou serviço) é obrigatório",
                field="itens"
            )

        referencias = [
            ReferenciaItem.from_ids(item.produto_id, item.servico_id)
            for item in itens
        ]

        produto_ids = sorted({r.ref_id for r in referencias if r.tipo == TipoItem.PRODUTO})
        servico_ids = sorted({r.ref_id for r in referencias if r.tipo == TipoItem.SERVICO})

        produtos = self.produtos.get_many(produto_ids) if produto_ids else {}
        servicos = self.servicos.get_many(servico_ids) if servico_ids else {}

        for servico_id in servico_ids:
            if servico_id not in servicos:
                raise ServicoInvalidoError(servico_id)

        pedido = PedidoComposto(
            produtos_desconhecidos=[p for p in produto_ids if p not in produtos]
        )

        for item, referencia in zip(itens, referencias):
            quantidade = normalizar_quantidade(item.quantidade)
            preco = self._inferir_preco(item, referencia, produtos, servicos)

            if item.total is not None:
                total_linha = para_decimal(item.total, "total")
            else:
                total_linha = preco * quantidade

            desconto = ZERO if item.desconto is None else item.desconto

            pedido.itens.append(
                ItemTicket(
                    referencia=referencia,
                    quantidade=quantidade,
                    preco_unitario=preco,
                    total=total_linha,
                    desconto_percentual=desconto,
                )
            )
            pedido.quantidade_total += quantidade
            pedido.total += para_decimal(total_linha, "total")

            if referencia.tipo == TipoItem.PRODUTO:
                anterior = pedido.requeridos_por_produto.get(referencia.ref_id, 0)
                pedido.requeridos_por_produto[referencia.ref_id] = anterior + quantidade

        logger.debug(
            f"Pedido composto: {len(pedido.itens)} itens, "
            f"quantidade={pedido.quantidade_total}, total={pedido.total}"
        )
        return pedido

    @staticmethod
    def _inferir_preco(item, referencia, produtos, servicos) -> Decimal:
        if item.preco_unitario is not None:
            return para_decimal(item.preco_unitario, "preco_unitario")

        if referencia.tipo == TipoItem.PRODUTO and referencia.ref_id in produtos:
            return para_decimal(produtos[referencia.ref_id].custo, "preco_unitario")

        if referencia.tipo == TipoItem.SERVICO and referencia.ref_id in servicos:
            return para_decimal(servicos[referencia.ref_id].preco, "preco_unitario")

        return ZERO
