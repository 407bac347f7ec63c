"""
Ports (Interfaces) do Domínio de Tickets.

Define os contratos que os Adapters de infraestrutura implementam:

- TicketRepository: persistência do agregado Ticket e seus itens
- ProductLookup / ServiceLookup: leitura de produtos e serviços
- InventoryPort: leitura travada e decremento de estoque
- CalendarSyncAdapter: agenda externa (colaborador não confiável)

Também traz implementações em memória sobre um InMemoryStore
compartilhado, usadas em testes e prototipagem.

Princípio:
    Core define interfaces → Adapters implementam
"""

from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    List,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    runtime_checkable,
)
import copy
import threading

from .entities import ItemTicket, ProdutoInfo, ServicoInfo, TicketEntity, TicketStatus

if TYPE_CHECKING:
    from .calendar_sync import EventoCalendario


@runtime_checkable
class TicketRepository(Protocol):
    """
    Interface para persistência de Tickets.

    Implementações:
    - DjangoTicketRepository (PostgreSQL via ORM)
    - InMemoryTicketRepository (para testes)
    """

    def exists(self, ticket_id: str) -> bool:
        """Verifica se o ID já está em uso."""
        ...

    def create(self, ticket: TicketEntity) -> None:
        """Persiste ticket novo junto com seus itens."""
        ...

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        """Busca ticket (com itens) por ID; None se não existir."""
        ...

    def update(self, ticket: TicketEntity) -> None:
        """Persiste os campos escalares do ticket (não toca nos itens)."""
        ...

    def replace_items(self, ticket_id: str, itens: List[ItemTicket]) -> None:
        """Apaga todos os itens do ticket e insere o novo conjunto."""
        ...

    def delete_items(self, ticket_id: str) -> None:
        """Remove todos os itens do ticket."""
        ...

    def delete(self, ticket_id: str) -> None:
        """Remove o ticket."""
        ...

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
        Lista tickets por criado_em decrescente.

        Args:
            busca: Texto livre em nome do cliente, produto, serviço ou status
            status: Igualdade de status
            criado_de: Limite inferior inclusivo de criado_em
            criado_ate: Limite superior exclusivo de criado_em
            offset: Quantos pular
            limite: Tamanho da página

        Returns:
            (tickets da página, total que atende aos filtros)
        """
        ...

    def list_agendados(
        self,
        profissional_id: str,
        excluir_ticket_id: Optional[str] = None,
    ) -> List[TicketEntity]:
        """Tickets do profissional com início e fim definidos."""
        ...

    def set_evento_calendario_id(self, ticket_id: str, evento_id: Optional[str]) -> None:
        """Grava o ID do evento externo fora de qualquer transação de pedido."""
        ...


class ProductLookup(Protocol):
    """Leitura de produtos (custo e estoque)."""

    def get_many(self, ids: Sequence[str]) -> Dict[str, ProdutoInfo]:
        ...


class ServiceLookup(Protocol):
    """Leitura de serviços (preço e duração)."""

    def get_many(self, ids: Sequence[str]) -> Dict[str, ServicoInfo]:
        ...


class InventoryPort(Protocol):
    """
    Acesso transacional ao estoque.

    lock_stock deve travar as linhas lidas até o fim da transação
    corrente (SELECT ... FOR UPDATE ou equivalente).
    """

    def lock_stock(self, ids: Sequence[str]) -> Dict[str, int]:
        """Estoque atual dos IDs existentes, com as linhas travadas."""
        ...

    def decrement(self, produto_id: str, quantidade: int) -> None:
        """estoque = estoque - quantidade."""
        ...


class CalendarSyncAdapter(Protocol):
    """
    Agenda externa.

    Contrato best-effort: falhas retornam None/False e nunca
    desfazem a gravação do ticket.
    """

    def create_event(self, evento: "EventoCalendario") -> Optional[str]:
        """Cria evento e devolve o ID externo (None em falha)."""
        ...

    def update_event(self, evento_id: str, evento: "EventoCalendario") -> bool:
        ...

    def delete_event(self, evento_id: str) -> bool:
        ...


# =============================================================================
# Implementações em memória
# =============================================================================

class InMemoryStore:
    """
    Armazenamento em memória compartilhado pelos fakes.

    O lock é adquirido pelo InMemoryUnitOfWork durante toda a
    transação, o que torna as transações serializáveis entre threads.
    snapshot/restore implementam o rollback.

    Não usar em produção!
    """

    def __init__(self):
        self.lock = threading.RLock()
        self.tickets: Dict[str, TicketEntity] = {}
        self.produtos: Dict[str, ProdutoInfo] = {}
        self.estoque: Dict[str, int] = {}
        self.servicos: Dict[str, ServicoInfo] = {}
        self.clientes: Dict[str, str] = {}

    def add_produto(
        self,
        produto_id: str,
        custo: Any = 0,
        estoque: int = 0,
        nome: str = "",
    ) -> ProdutoInfo:
        produto = ProdutoInfo(
            id=produto_id, custo=Decimal(str(custo)), estoque=estoque, nome=nome
        )
        self.produtos[produto_id] = produto
        self.estoque[produto_id] = estoque
        return produto

    def add_servico(
        self,
        servico_id: str,
        preco: Any = 0,
        nome: str = "",
        duracao_minutos: Optional[int] = None,
    ) -> ServicoInfo:
        servico = ServicoInfo(
            id=servico_id,
            preco=Decimal(str(preco)),
            nome=nome,
            duracao_minutos=duracao_minutos,
        )
        self.servicos[servico_id] = servico
        return servico

    def add_cliente(self, cliente_id: str, nome: str) -> None:
        self.clientes[cliente_id] = nome

    def snapshot(self) -> dict:
        return {
            "tickets": copy.deepcopy(self.tickets),
            "estoque": dict(self.estoque),
        }

    def restore(self, snapshot: dict) -> None:
        self.tickets = snapshot["tickets"]
        self.estoque = snapshot["estoque"]


class InMemoryTicketRepository:
    """
    Implementação em memória do TicketRepository.

    Guarda cópias das entidades para que alterações fora do
    repositório não vazem para o estado persistido.

    Example:
        store = InMemoryStore()
        repo = InMemoryTicketRepository(store)
        repo.create(ticket)
        found = repo.get_by_id(ticket.id)
    """

    def __init__(self, store: Optional[InMemoryStore] = None):
        self.store = store or InMemoryStore()

    def exists(self, ticket_id: str) -> bool:
        return ticket_id in self.store.tickets

    def create(self, ticket: TicketEntity) -> None:
        self.store.tickets[ticket.id] = copy.deepcopy(ticket)

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        ticket = self.store.tickets.get(ticket_id)
        return copy.deepcopy(ticket) if ticket else None

    def update(self, ticket: TicketEntity) -> None:
        atual = self.store.tickets.get(ticket.id)
        if atual is None:
            return
        atualizado = copy.deepcopy(ticket)
        atualizado.itens = atual.itens
        self.store.tickets[ticket.id] = atualizado

    def replace_items(self, ticket_id: str, itens: List[ItemTicket]) -> None:
        atual = self.store.tickets.get(ticket_id)
        if atual is not None:
            atual.itens = copy.deepcopy(list(itens))

    def delete_items(self, ticket_id: str) -> None:
        atual = self.store.tickets.get(ticket_id)
        if atual is not None:
            atual.itens = []

    def delete(self, ticket_id: str) -> None:
        self.store.tickets.pop(ticket_id, None)

    def list_paginated(
        self,
        busca: Optional[str],
        status: Optional[TicketStatus],
        criado_de: Optional[datetime],
        criado_ate: Optional[datetime],
        offset: int,
        limite: int,
    ) -> Tuple[List[TicketEntity], int]:
        tickets = list(self.store.tickets.values())

        if busca:
            tickets = [t for t in tickets if self._corresponde(t, busca.lower())]
        if status:
            tickets = [t for t in tickets if t.status == status]
        if criado_de:
            tickets = [t for t in tickets if t.criado_em >= criado_de]
        if criado_ate:
            tickets = [t for t in tickets if t.criado_em < criado_ate]

        tickets.sort(key=lambda t: t.criado_em, reverse=True)
        pagina = tickets[offset:offset + limite]
        return [copy.deepcopy(t) for t in pagina], len(tickets)

    def _corresponde(self, ticket: TicketEntity, termo: str) -> bool:
        nomes = [self.store.clientes.get(ticket.cliente_id, ""), ticket.status.value]
        for item in ticket.itens:
            if item.referencia.produto_id in self.store.produtos:
                nomes.append(self.store.produtos[item.referencia.produto_id].nome)
            if item.referencia.servico_id in self.store.servicos:
                nomes.append(self.store.servicos[item.referencia.servico_id].nome)
        return any(termo in nome.lower() for nome in nomes if nome)

    def list_agendados(
        self,
        profissional_id: str,
        excluir_ticket_id: Optional[str] = None,
    ) -> List[TicketEntity]:
        return [
            copy.deepcopy(t)
            for t in self.store.tickets.values()
            if t.profissional_id == profissional_id
            and t.id != excluir_ticket_id
            and t.possui_janela
        ]

    def set_evento_calendario_id(self, ticket_id: str, evento_id: Optional[str]) -> None:
        with self.store.lock:
            atual = self.store.tickets.get(ticket_id)
            if atual is not None:
                atual.evento_calendario_id = evento_id

    def count(self) -> int:
        return len(self.store.tickets)


class InMemoryProductLookup:
    """Leitura de produtos do InMemoryStore (estoque atual)."""

    def __init__(self, store: InMemoryStore):
        self.store = store

    def get_many(self, ids: Sequence[str]) -> Dict[str, ProdutoInfo]:
        return {
            pid: replace(self.store.produtos[pid], estoque=self.store.estoque[pid])
            for pid in ids
            if pid in self.store.produtos
        }


class InMemoryServiceLookup:
    """Leitura de serviços do InMemoryStore."""

    def __init__(self, store: InMemoryStore):
        self.store = store

    def get_many(self, ids: Sequence[str]) -> Dict[str, ServicoInfo]:
        return {sid: self.store.servicos[sid] for sid in ids if sid in self.store.servicos}


class InMemoryInventory:
    """
    Estoque em memória.

    A trava das linhas é o lock do store, mantido pelo
    InMemoryUnitOfWork até o commit/rollback.
    """

    def __init__(self, store: InMemoryStore):
        self.store = store

    def lock_stock(self, ids: Sequence[str]) -> Dict[str, int]:
        return {pid: self.store.estoque[pid] for pid in sorted(ids) if pid in self.store.estoque}

    def decrement(self, produto_id: str, quantidade: int) -> None:
        self.store.estoque[produto_id] -= quantidade
