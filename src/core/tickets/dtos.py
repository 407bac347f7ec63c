"""
Data Transfer Objects (DTOs) do Domínio de Tickets.

DTOs transportam dados entre a API e os Use Cases sem expor entidades.

Tipos de DTOs:
- Input DTOs: criação, atualização parcial e itens de pedido
- Query DTOs: filtros e paginação de listagem
- Output DTOs: ticket com itens achatados e resultado paginado

Os dicionários de saída usam as chaves camelCase do contrato HTTP
(clientId, staffId, startTime...).
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Optional

from .entities import TicketEntity


class _NaoInformado:
    """Sentinela para campo ausente em atualização parcial."""

    def __repr__(self) -> str:
        return "NAO_INFORMADO"

    def __bool__(self) -> bool:
        return False


NAO_INFORMADO = _NaoInformado()


def _iso(valor: Optional[datetime]) -> Optional[str]:
    return valor.isoformat() if valor else None


# =============================================================================
# INPUT DTOs (Entrada)
# =============================================================================

@dataclass(frozen=True)
class ItemTicketInputDTO:
    """
    Item de pedido como recebido da API.

    Exatamente um entre produto_id e servico_id deve ser informado;
    os demais campos são opcionais e inferidos na composição.

    Attributes:
        produto_id: Produto referenciado
        servico_id: Serviço referenciado
        quantidade: Unidades (padrão 1, mínimo 1)
        preco_unitario: Preço explícito (senão custo do produto / preço do serviço)
        total: Total explícito da linha (senão preço * quantidade)
        desconto: Desconto percentual 0-100
    """

    produto_id: Optional[str] = None
    servico_id: Optional[str] = None
    quantidade: Any = None
    preco_unitario: Any = None
    total: Any = None
    desconto: Any = None

    def to_dict(self) -> dict:
        return {
            "produto_id": self.produto_id,
            "servico_id": self.servico_id,
            "quantidade": self.quantidade,
            "preco_unitario": self.preco_unitario,
            "total": self.total,
            "desconto": self.desconto,
        }


@dataclass(frozen=True)
class CriarTicketInputDTO:
    """
    DTO de entrada para criar ticket.

    Attributes:
        cliente_id: ID do cliente (obrigatório)
        profissional_id: ID do profissional (obrigatório)
        status: Status em texto (obrigatório, ex: "Pending")
        itens: Itens do pedido (ao menos um)
        observacoes: Observações livres
        inicio: Início do atendimento
        fim: Fim do atendimento
        duracao_minutos: Duração explícita
    """

    cliente_id: Optional[str]
    profissional_id: Optional[str]
    status: Optional[str]
    itens: tuple = field(default_factory=tuple)
    observacoes: str = ""
    inicio: Optional[datetime] = None
    fim: Optional[datetime] = None
    duracao_minutos: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "cliente_id": self.cliente_id,
            "profissional_id": self.profissional_id,
            "status": self.status,
            "itens": [item.to_dict() for item in self.itens],
            "observacoes": self.observacoes,
            "inicio": _iso(self.inicio),
            "fim": _iso(self.fim),
            "duracao_minutos": self.duracao_minutos,
        }


@dataclass(frozen=True)
class AtualizarTicketInputDTO:
    """
    DTO de entrada para atualização parcial.

    Campos com NAO_INFORMADO não são tocados. `itens=()` é diferente
    de não informar itens: limpa todos os itens do ticket.

    Example:
        AtualizarTicketInputDTO(ticket_id="TK-2026-AAAAAA", status="Completed")
    """

    ticket_id: str
    cliente_id: Any = NAO_INFORMADO
    profissional_id: Any = NAO_INFORMADO
    status: Any = NAO_INFORMADO
    observacoes: Any = NAO_INFORMADO
    inicio: Any = NAO_INFORMADO
    fim: Any = NAO_INFORMADO
    duracao_minutos: Any = NAO_INFORMADO
    itens: Any = NAO_INFORMADO

    CAMPOS = (
        "cliente_id",
        "profissional_id",
        "status",
        "observacoes",
        "inicio",
        "fim",
        "duracao_minutos",
        "itens",
    )

    def informado(self, campo: str) -> bool:
        """Indica se o campo veio na requisição."""
        return getattr(self, campo) is not NAO_INFORMADO

    def to_dict(self) -> dict:
        result = {"ticket_id": self.ticket_id}
        for campo in self.CAMPOS:
            if not self.informado(campo):
                continue
            valor = getattr(self, campo)
            if campo == "itens":
                valor = [item.to_dict() for item in valor]
            elif isinstance(valor, datetime):
                valor = valor.isoformat()
            result[campo] = valor
        return result


# =============================================================================
# QUERY DTOs (Filtros de Busca)
# =============================================================================

@dataclass(frozen=True)
class ListarTicketsQueryDTO:
    """
    Parâmetros de busca/filtro de tickets.

    Attributes:
        busca: Texto livre (cliente, produto, serviço ou status)
        status: Igualdade de status
        filtro_data: all | today | thisMonth | calendar | custom
        data_especifica: Dia do modo calendar
        data_inicio: Início do modo custom (até agora)
        pagina: Página (1-indexed)
        por_pagina: Itens por página (None usa o padrão configurado)
    """

    busca: Optional[str] = None
    status: Optional[str] = None
    filtro_data: Optional[str] = None
    data_especifica: Optional[date] = None
    data_inicio: Optional[date] = None
    pagina: int = 1
    por_pagina: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "busca": self.busca,
            "status": self.status,
            "filtro_data": self.filtro_data,
            "data_especifica": self.data_especifica.isoformat() if self.data_especifica else None,
            "data_inicio": self.data_inicio.isoformat() if self.data_inicio else None,
            "pagina": self.pagina,
            "por_pagina": self.por_pagina,
        }


# =============================================================================
# OUTPUT DTOs (Saída)
# =============================================================================

@dataclass
class TicketOutputDTO:
    """
    DTO de saída com itens achatados numa lista única e ordenada,
    cada item marcado com seu tipo (product | service).
    """

    id: str
    cliente_id: str
    profissional_id: str
    status: str
    quantidade: int
    total: Decimal
    observacoes: str
    inicio: Optional[datetime]
    fim: Optional[datetime]
    duracao_minutos: Optional[int]
    evento_calendario_id: Optional[str]
    criado_em: datetime
    atualizado_em: datetime
    itens: List[dict] = field(default_factory=list)

    @classmethod
    def from_entity(cls, entity: TicketEntity) -> "TicketOutputDTO":
        return cls(
            id=entity.id,
            cliente_id=entity.cliente_id,
            profissional_id=entity.profissional_id,
            status=entity.status.value,
            quantidade=entity.quantidade,
            total=entity.total,
            observacoes=entity.observacoes,
            inicio=entity.inicio,
            fim=entity.fim,
            duracao_minutos=entity.duracao_minutos,
            evento_calendario_id=entity.evento_calendario_id,
            criado_em=entity.criado_em,
            atualizado_em=entity.atualizado_em,
            itens=[item.to_dict() for item in entity.itens],
        )

    def to_dict(self) -> dict:
        """Converte para dicionário (serialização JSON)."""
        return {
            "id": self.id,
            "clientId": self.cliente_id,
            "staffId": self.profissional_id,
            "status": self.status,
            "quantity": self.quantidade,
            "total": float(self.total),
            "notes": self.observacoes,
            "startTime": _iso(self.inicio),
            "endTime": _iso(self.fim),
            "duration": self.duracao_minutos,
            "externalCalendarEventId": self.evento_calendario_id,
            "createdAt": _iso(self.criado_em),
            "updatedAt": _iso(self.atualizado_em),
            "items": list(self.itens),
        }


@dataclass
class PaginatedResultDTO:
    """
    Resultado paginado.

    Attributes:
        items: Tickets da página atual
        total: Total de tickets que atendem aos filtros
        pagina: Página atual
        por_pagina: Itens por página
    """

    items: List[TicketOutputDTO]
    total: int
    pagina: int
    por_pagina: int

    @property
    def total_paginas(self) -> int:
        """ceil(total / por_pagina)."""
        if self.por_pagina <= 0:
            return 0
        return (self.total + self.por_pagina - 1) // self.por_pagina

    def to_dict(self) -> dict:
        return {
            "data": [item.to_dict() for item in self.items],
            "pagination": {
                "page": self.pagina,
                "pageSize": self.por_pagina,
                "total": self.total,
                "totalPages": self.total_paginas,
            },
        }
