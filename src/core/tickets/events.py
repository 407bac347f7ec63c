"""
Domain Events do Domínio de Tickets.

Este módulo define os eventos de domínio disparados quando um
ticket é gravado com sucesso.

Eventos:
- TicketCriadoEvent: Novo ticket foi criado
- TicketAtualizadoEvent: Ticket foi alterado
- TicketExcluidoEvent: Ticket foi removido
- EstoqueReservadoEvent: Estoque de produtos foi decrementado

Uso:
    Eventos são criados nos use cases e publicados através do
    UnitOfWork após commit bem-sucedido. Os handlers de agenda
    externa reagem a eles fora da transação.

    with uow:
        reserva.reservar(pedido.requeridos_por_produto)
        repo.create(ticket)
        uow.publish_event(TicketCriadoEvent(aggregate_id=ticket.id, ...))
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from src.core.shared.events import DomainEvent


@dataclass
class TicketCriadoEvent(DomainEvent):
    """
    Evento: Ticket foi criado.

    Handlers típicos:
    - Criar evento na agenda externa (se houver janela)

    Attributes:
        cliente_id: Cliente do ticket
        profissional_id: Profissional do ticket
        status: Status inicial
        total: Total do ticket em texto decimal
        possui_janela: Se o ticket tem início e fim
    """

    cliente_id: str = ""
    profissional_id: str = ""
    status: str = ""
    total: str = "0.00"
    possui_janela: bool = False

    @property
    def aggregate_type(self) -> str:
        return "Ticket"

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "cliente_id": self.cliente_id,
            "profissional_id": self.profissional_id,
            "status": self.status,
            "total": self.total,
            "possui_janela": self.possui_janela,
        }


@dataclass
class TicketAtualizadoEvent(DomainEvent):
    """
    Evento: Ticket foi alterado.

    Attributes:
        campos: Campos informados na atualização
        possui_janela: Se o ticket tem início e fim após a alteração
    """

    campos: tuple = field(default_factory=tuple)
    possui_janela: bool = False

    @property
    def aggregate_type(self) -> str:
        return "Ticket"

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "campos": list(self.campos),
            "possui_janela": self.possui_janela,
        }


@dataclass
class TicketExcluidoEvent(DomainEvent):
    """
    Evento: Ticket foi removido.

    Carrega o ID do evento externo, já que o ticket não existe mais
    quando o handler roda.
    """

    evento_calendario_id: Optional[str] = None

    @property
    def aggregate_type(self) -> str:
        return "Ticket"

    def _get_event_data(self) -> Dict[str, Any]:
        return {"evento_calendario_id": self.evento_calendario_id}


@dataclass
class EstoqueReservadoEvent(DomainEvent):
    """
    Evento: Estoque foi decrementado para um ticket.

    Attributes:
        quantidades: Quantidade decrementada por produto
    """

    quantidades: Dict[str, int] = field(default_factory=dict)

    @property
    def aggregate_type(self) -> str:
        return "Ticket"

    def _get_event_data(self) -> Dict[str, Any]:
        return {"quantidades": dict(self.quantidades)}
