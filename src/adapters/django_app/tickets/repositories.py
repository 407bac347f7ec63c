"""
Repositórios Django para o motor de Tickets.

Implementam as interfaces (Ports) definidas no Core.
São DRIVEN ADAPTERS - acionados pelo Core em resposta a operações.

Implementações:
- DjangoTicketRepository: ticket + itens
- DjangoProductLookup / DjangoServiceLookup: leituras em lote
- DjangoInventory: SELECT ... FOR UPDATE e decremento com F()

Princípios:
- Repository não contém lógica de negócio
- Usa Mapper para conversões
- Queries otimizadas para evitar N+1 (prefetch de itens)
"""

from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple
import logging

from django.db.models import F, Q

from src.core.tickets.entities import ItemTicket, ProdutoInfo, ServicoInfo, TicketEntity, TicketStatus

from .mappers import ItemTicketMapper, ProdutoMapper, ServicoMapper, TicketMapper
from .models import ItemTicketModel, ProdutoModel, ServicoModel, TicketModel

logger = logging.getLogger(__name__)


class DjangoTicketRepository:
    """
    Implementação Django do TicketRepository.

    Example:
        repo = DjangoTicketRepository()
        repo.create(ticket_entity)
        ticket = repo.get_by_id("TK-2026-AB12CD")
        pagina, total = repo.list_paginated("corte", None, None, None, 0, 5)
    """

    def __init__(self):
        self._mapper = TicketMapper()

    def _queryset(self):
        return TicketModel.objects.prefetch_related('itens')

    def exists(self, ticket_id: str) -> bool:
        return TicketModel.objects.filter(id=ticket_id).exists()

    def create(self, ticket: TicketEntity) -> None:
        """Insere ticket e itens (chamado dentro do UnitOfWork)."""
        self._mapper.to_model(ticket).save(force_insert=True)
        self._inserir_itens(ticket.id, ticket.itens)
        logger.debug(f"Ticket inserted: {ticket.id} ({len(ticket.itens)} itens)")

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        try:
            model = self._queryset().get(id=ticket_id)
        except TicketModel.DoesNotExist:
            logger.debug(f"Ticket not found: {ticket_id}")
            return None
        return self._mapper.to_entity(model)

    def update(self, ticket: TicketEntity) -> None:
        """Atualiza os campos escalares; itens ficam com replace_items."""
        try:
            model = TicketModel.objects.get(id=ticket.id)
        except TicketModel.DoesNotExist:
            logger.debug(f"Ticket not found for update: {ticket.id}")
            return
        self._mapper.update_model(model, ticket).save()

    def replace_items(self, ticket_id: str, itens: List[ItemTicket]) -> None:
        """Apaga todos os itens e recria o conjunto (nunca merge)."""
        self.delete_items(ticket_id)
        self._inserir_itens(ticket_id, itens)

    def delete_items(self, ticket_id: str) -> None:
        ItemTicketModel.objects.filter(ticket_id=ticket_id).delete()

    def delete(self, ticket_id: str) -> None:
        deleted_count, _ = TicketModel.objects.filter(id=ticket_id).delete()
        if deleted_count > 0:
            logger.debug(f"Ticket deleted: {ticket_id}")

    def _inserir_itens(self, ticket_id: str, itens: List[ItemTicket]) -> None:
        if not itens:
            return
        ItemTicketModel.objects.bulk_create([
            ItemTicketMapper.to_model(item, ticket_id, posicao)
            for posicao, item in enumerate(itens)
        ])

    def list_paginated(
        self,
        busca: Optional[str],
        status: Optional[TicketStatus],
        criado_de: Optional[datetime],
        criado_ate: Optional[datetime],
        offset: int,
        limite: int,
    ) -> Tuple[List[TicketEntity], int]:
        """
        Lista tickets com busca, filtros e paginação.

        A busca cobre nome do cliente, nome de produto ou serviço
        dos itens e o status.
        """
        queryset = TicketModel.objects.all()

        if busca:
            queryset = queryset.filter(
                Q(cliente__nome__icontains=busca)
                | Q(itens__produto__nome__icontains=busca)
                | Q(itens__servico__nome__icontains=busca)
                | Q(status__icontains=busca)
            ).distinct()

        if status:
            queryset = queryset.filter(status=status.value)

        if criado_de:
            queryset = queryset.filter(criado_em__gte=criado_de)

        if criado_ate:
            queryset = queryset.filter(criado_em__lt=criado_ate)

        total = queryset.count()

        models = (
            queryset
            .prefetch_related('itens')
            .order_by('-criado_em', '-id')[offset:offset + limite]
        )
        return self._mapper.to_entity_list(models), total

    def list_agendados(
        self,
        profissional_id: str,
        excluir_ticket_id: Optional[str] = None,
    ) -> List[TicketEntity]:
        queryset = self._queryset().filter(
            profissional_id=profissional_id,
            inicio__isnull=False,
            fim__isnull=False,
        )
        if excluir_ticket_id:
            queryset = queryset.exclude(id=excluir_ticket_id)
        return self._mapper.to_entity_list(queryset)

    def set_evento_calendario_id(self, ticket_id: str, evento_id: Optional[str]) -> None:
        """Grava o ID externo sem tocar em atualizado_em."""
        TicketModel.objects.filter(id=ticket_id).update(evento_calendario_id=evento_id)

    def count(self) -> int:
        return TicketModel.objects.count()


class DjangoProductLookup:
    """Leitura em lote de produtos (custo, estoque)."""

    def get_many(self, ids: Sequence[str]) -> Dict[str, ProdutoInfo]:
        return {
            model.id: ProdutoMapper.to_info(model)
            for model in ProdutoModel.objects.filter(id__in=list(ids))
        }


class DjangoServiceLookup:
    """Leitura em lote de serviços (preço, duração)."""

    def get_many(self, ids: Sequence[str]) -> Dict[str, ServicoInfo]:
        return {
            model.id: ServicoMapper.to_info(model)
            for model in ServicoModel.objects.filter(id__in=list(ids))
        }


class DjangoInventory:
    """
    Estoque via ORM.

    lock_stock trava as linhas com SELECT ... FOR UPDATE em ordem de
    ID; só pode ser usado dentro de transaction.atomic (DjangoUnitOfWork).
    """

    def lock_stock(self, ids: Sequence[str]) -> Dict[str, int]:
        linhas = (
            ProdutoModel.objects
            .select_for_update()
            .filter(id__in=list(ids))
            .order_by('id')
            .values_list('id', 'estoque')
        )
        return dict(linhas)

    def decrement(self, produto_id: str, quantidade: int) -> None:
        ProdutoModel.objects.filter(id=produto_id).update(
            estoque=F('estoque') - quantidade
        )
