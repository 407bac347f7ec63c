"""
Mappers para conversão entre Entities (Core) e Models (Django).

Responsabilidades:
- TicketModel (+ itens) → TicketEntity (para uso no Core)
- TicketEntity → TicketModel (para persistência)
- ItemTicket → ItemTicketModel, preservando a ordem (posicao)
- ProdutoModel / ServicoModel → ProdutoInfo / ServicoInfo

Princípios:
- Mappers são stateless
- Não contêm lógica de negócio
- Tratam apenas conversão de dados
"""

from typing import List

from src.core.tickets.entities import (
    ItemTicket,
    ProdutoInfo,
    ReferenciaItem,
    ServicoInfo,
    TicketEntity,
    TicketStatus,
)

from .models import ItemTicketModel, ProdutoModel, ServicoModel, TicketModel


class ItemTicketMapper:
    """Conversão entre ItemTicket e ItemTicketModel."""

    @staticmethod
    def to_model(item: ItemTicket, ticket_id: str, posicao: int) -> ItemTicketModel:
        return ItemTicketModel(
            id=item.id,
            ticket_id=ticket_id,
            produto_id=item.referencia.produto_id,
            servico_id=item.referencia.servico_id,
            quantidade=item.quantidade,
            preco_unitario=item.preco_unitario,
            total=item.total,
            desconto_percentual=item.desconto_percentual,
            posicao=posicao,
        )

    @staticmethod
    def to_entity(model: ItemTicketModel) -> ItemTicket:
        referencia = ReferenciaItem.from_ids(model.produto_id, model.servico_id)
        return ItemTicket(
            referencia=referencia,
            quantidade=model.quantidade,
            preco_unitario=model.preco_unitario,
            total=model.total,
            desconto_percentual=model.desconto_percentual,
            ticket_id=model.ticket_id,
            id=model.id,
        )


class TicketMapper:
    """
    Mapper para conversão entre TicketEntity e TicketModel.

    Responsável por:
    - to_model(): Entity → Model
    - to_entity(): Model → Entity (itens pré-carregados)
    - update_model(): aplica campos escalares num Model existente
    """

    @staticmethod
    def to_model(entity: TicketEntity) -> TicketModel:
        """
        Converte TicketEntity para TicketModel.

        Note:
            Não chama .save() - deixa isso para o Repository
        """
        model = TicketModel(id=entity.id, criado_em=entity.criado_em)
        return TicketMapper.update_model(model, entity)

    @staticmethod
    def to_entity(model: TicketModel) -> TicketEntity:
        """
        Converte TicketModel para TicketEntity.

        Note:
            Bypassa TicketEntity.criar(): dados já foram validados
            na gravação original.
        """
        itens = [ItemTicketMapper.to_entity(item) for item in model.itens.all()]

        return TicketEntity(
            id=model.id,
            cliente_id=model.cliente_id,
            profissional_id=model.profissional_id,
            status=TicketStatus(model.status),
            itens=itens,
            quantidade=model.quantidade,
            total=model.total,
            observacoes=model.observacoes,
            inicio=model.inicio,
            fim=model.fim,
            duracao_minutos=model.duracao_minutos,
            evento_calendario_id=model.evento_calendario_id,
            criado_em=model.criado_em,
            atualizado_em=model.atualizado_em,
        )

    @staticmethod
    def to_entity_list(models: List[TicketModel]) -> List[TicketEntity]:
        return [TicketMapper.to_entity(model) for model in models]

    @staticmethod
    def update_model(model: TicketModel, entity: TicketEntity) -> TicketModel:
        """Atualiza Model existente com os campos escalares da Entity."""
        model.cliente_id = entity.cliente_id
        model.profissional_id = entity.profissional_id
        model.quantidade = entity.quantidade
        model.total = entity.total
        model.status = entity.status.value
        model.observacoes = entity.observacoes
        model.inicio = entity.inicio
        model.fim = entity.fim
        model.duracao_minutos = entity.duracao_minutos
        model.evento_calendario_id = entity.evento_calendario_id
        return model


class ProdutoMapper:

    @staticmethod
    def to_info(model: ProdutoModel) -> ProdutoInfo:
        return ProdutoInfo(
            id=model.id,
            custo=model.custo,
            estoque=model.estoque,
            nome=model.nome,
        )


class ServicoMapper:

    @staticmethod
    def to_info(model: ServicoModel) -> ServicoInfo:
        return ServicoInfo(
            id=model.id,
            preco=model.preco,
            nome=model.nome,
            duracao_minutos=model.duracao_minutos,
        )
