"""
Reserva de estoque.

Valida e decrementa, de forma atômica, o estoque de todos os produtos
referenciados por um pedido. Executa dentro da mesma transação que
persiste o ticket: qualquer falha desfaz tudo, e decrementos parciais
nunca ficam visíveis.

Concorrência:
    As linhas de produto são lidas com trava (InventoryPort.lock_stock)
    em ordem crescente de ID, o que serializa reservas concorrentes
    sobre o mesmo produto e evita deadlock entre pedidos com conjuntos
    de produtos sobrepostos. O decremento é comutativo (estoque - n).
"""

from typing import Dict
import logging

from .exceptions import EstoqueInsuficienteError, ProdutoInvalidoError
from .ports import InventoryPort

logger = logging.getLogger(__name__)


class InventoryReservation:
    """
    Check-then-decrement de estoque em duas fases.

    Fase 1 valida todos os produtos; só então a fase 2 decrementa.

    Example:
        with uow:
            reserva.reservar({"p-1": 2, "p-2": 1})
            repo.create(ticket)
    """

    def __init__(self, inventario: InventoryPort):
        self.inventario = inventario

    def reservar(self, requeridos: Dict[str, int]) -> None:
        """
        Reserva as quantidades requeridas por produto.

        Deve ser chamado dentro de um UnitOfWork aberto.

        Args:
            requeridos: Quantidade somada por produto

        Raises:
            ProdutoInvalidoError: Produto inexistente
            EstoqueInsuficienteError: Estoque menor que o requerido
        """
        if not requeridos:
            return

        ids = sorted(requeridos)
        disponiveis = self.inventario.lock_stock(ids)

        for produto_id in ids:
            if produto_id not in disponiveis:
                raise ProdutoInvalidoError(produto_id)
            if disponiveis[produto_id] < requeridos[produto_id]:
                raise EstoqueInsuficienteError(
                    produto_id=produto_id,
                    requerido=requeridos[produto_id],
                    disponivel=disponiveis[produto_id],
                )

        for produto_id in ids:
            self.inventario.decrement(produto_id, requeridos[produto_id])

        logger.info(
            "Estoque reservado: "
            + ", ".join(f"{pid}={requeridos[pid]}" for pid in ids)
        )
