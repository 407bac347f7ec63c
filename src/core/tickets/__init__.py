"""
Domínio de Tickets - Motor de Transações de Pedidos.

Este módulo contém a lógica de negócio que transforma um carrinho de
produtos e serviços num ticket comercial persistido:
- Entidades (TicketEntity, ItemTicket, ReferenciaItem, TicketStatus)
- Composição do pedido (OrderComposer)
- Reserva atômica de estoque (InventoryReservation)
- Geração de IDs legíveis sem colisão (TicketIdGenerator)
- Detecção de conflito de agenda (SchedulingConflictDetector)
- Sincronização best-effort com agenda externa (CalendarSyncService)
- Use Cases (Criar, Atualizar, Excluir, Obter, Listar)

Características do Domínio:
- Estoque validado e decrementado na mesma transação do ticket
- total/quantidade do ticket sempre iguais à soma dos itens
- Falhas da agenda externa nunca desfazem o ticket gravado
"""

from .entities import (
    FiltroData,
    ItemTicket,
    ProdutoInfo,
    ReferenciaItem,
    ServicoInfo,
    TicketEntity,
    TicketStatus,
    TipoItem,
)
from .events import (
    EstoqueReservadoEvent,
    TicketAtualizadoEvent,
    TicketCriadoEvent,
    TicketExcluidoEvent,
)
from .dtos import (
    NAO_INFORMADO,
    AtualizarTicketInputDTO,
    CriarTicketInputDTO,
    ItemTicketInputDTO,
    ListarTicketsQueryDTO,
    PaginatedResultDTO,
    TicketOutputDTO,
)
from .ports import (
    CalendarSyncAdapter,
    InventoryPort,
    ProductLookup,
    ServiceLookup,
    TicketRepository,
)
from .composer import OrderComposer, PedidoComposto
from .inventory import InventoryReservation
from .identifiers import TicketIdGenerator
from .scheduling import SchedulingConflictDetector
from .calendar_sync import CalendarSyncService, EventoCalendario, SyncResult
from .use_cases import (
    AtualizarTicketService,
    CriarTicketService,
    ExcluirTicketService,
    ListarTicketsService,
    ObterTicketService,
)

__all__ = [
    # Entities
    "FiltroData",
    "ItemTicket",
    "ProdutoInfo",
    "ReferenciaItem",
    "ServicoInfo",
    "TicketEntity",
    "TicketStatus",
    "TipoItem",
    # Events
    "EstoqueReservadoEvent",
    "TicketAtualizadoEvent",
    "TicketCriadoEvent",
    "TicketExcluidoEvent",
    # DTOs
    "NAO_INFORMADO",
    "AtualizarTicketInputDTO",
    "CriarTicketInputDTO",
    "ItemTicketInputDTO",
    "ListarTicketsQueryDTO",
    "PaginatedResultDTO",
    "TicketOutputDTO",
    # Ports
    "CalendarSyncAdapter",
    "InventoryPort",
    "ProductLookup",
    "ServiceLookup",
    "TicketRepository",
    # Engine
    "OrderComposer",
    "PedidoComposto",
    "InventoryReservation",
    "TicketIdGenerator",
    "SchedulingConflictDetector",
    "CalendarSyncService",
    "EventoCalendario",
    "SyncResult",
    # Use Cases
    "AtualizarTicketService",
    "CriarTicketService",
    "ExcluirTicketService",
    "ListarTicketsService",
    "ObterTicketService",
]
