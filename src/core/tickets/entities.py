"""
Entidades do Domínio de Tickets.

Um Ticket é um registro comercial/de atendimento composto por um ou
mais itens, cada item referenciando exatamente um produto ou um serviço.

Entidades:
- TicketEntity: Agregado principal (dono exclusivo dos itens)
- ItemTicket: Linha precificada do ticket
- ReferenciaItem: União marcada produto | serviço
- TicketStatus, TipoItem, FiltroData: Enumerações do domínio
- ProdutoInfo, ServicoInfo: Leituras de entidades externas

Regras de Negócio Encapsuladas:
- total do ticket == soma dos totais dos itens
- quantidade do ticket == soma das quantidades dos itens
- início e fim presentes juntos ou ausentes juntos
- duração recalculada sempre que a janela muda (duração explícita vence)
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any, List, Optional, Tuple
import math
import uuid

from src.core.shared.exceptions import ValidationError


CENTAVOS = Decimal("0.01")
ZERO = Decimal("0.00")
CEM = Decimal("100")


def _agora() -> datetime:
    return datetime.now(timezone.utc)


def para_decimal(valor: Any, campo: str) -> Decimal:
    """
    Converte valor monetário para Decimal com 2 casas.

    Args:
        valor: int, float, str ou Decimal
        campo: Nome do campo (para a mensagem de erro)

    Raises:
        ValidationError: Se o valor não for numérico
    """
    if isinstance(valor, bool):
        raise ValidationError(f"Valor numérico inválido: {valor}", field=campo)
    try:
        numero = valor if isinstance(valor, Decimal) else Decimal(str(valor))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"Valor numérico inválido: {valor}", field=campo)
    if not numero.is_finite():
        raise ValidationError(f"Valor numérico inválido: {valor}", field=campo)
    return numero.quantize(CENTAVOS, rounding=ROUND_HALF_UP)


def calcular_duracao_minutos(inicio: datetime, fim: datetime) -> int:
    """Duração da janela em minutos, arredondada (meio minuto sobe)."""
    minutos = (fim - inicio).total_seconds() / 60
    return int(math.floor(minutos + 0.5))


def validar_janela(inicio: Optional[datetime], fim: Optional[datetime]) -> None:
    """
    Valida o par início/fim.

    Raises:
        ValidationError: Se apenas um dos dois foi informado ou fim < início
    """
    if (inicio is None) != (fim is None):
        raise ValidationError(
            "Início e fim devem ser informados juntos",
            field="inicio" if inicio is None else "fim"
        )
    if inicio is not None and fim < inicio:
        raise ValidationError(
            "Fim deve ser igual ou posterior ao início",
            field="fim"
        )


class TicketStatus(Enum):
    """
    Estados possíveis de um ticket.

    Tickets cancelados não bloqueiam agenda de profissional.
    """

    PENDENTE = "Pending"
    CONFIRMADO = "Confirmed"
    CONCLUIDO = "Completed"
    CANCELADO = "Cancelled"

    @classmethod
    def from_string(cls, value: str) -> "TicketStatus":
        """
        Converte string para enum.

        Aceita o nome (PENDENTE) ou o valor ("Pending"),
        sem diferenciar maiúsculas.

        Raises:
            ValueError: Se valor inválido
        """
        if not isinstance(value, str):
            raise ValueError(f"Status inválido: {value}")

        try:
            return cls[value.strip().upper()]
        except KeyError:
            pass

        for status in cls:
            if status.value.lower() == value.strip().lower():
                return status

        raise ValueError(f"Status inválido: {value}")


class TipoItem(Enum):
    """Variantes da união marcada de itens."""

    PRODUTO = "product"
    SERVICO = "service"


class FiltroData(Enum):
    """Modos fechados de filtro por data de criação."""

    TODOS = "all"
    HOJE = "today"
    ESTE_MES = "thisMonth"
    CALENDARIO = "calendar"
    PERSONALIZADO = "custom"

    @classmethod
    def from_string(cls, value: Optional[str]) -> "FiltroData":
        """
        Converte string para enum; vazio significa TODOS.

        Raises:
            ValueError: Se valor inválido
        """
        if not value:
            return cls.TODOS
        for filtro in cls:
            if filtro.value.lower() == value.strip().lower():
                return filtro
        raise ValueError(f"Filtro de data inválido: {value}")


def calcular_intervalo(
    filtro: FiltroData,
    agora: datetime,
    data_especifica: Optional[date] = None,
    data_inicio: Optional[date] = None,
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Traduz o filtro de data em intervalo [de, ate) sobre `criado_em`.

    Os limites de dia são calculados no fuso de `agora`.

    Args:
        filtro: Modo do filtro
        agora: Instante de referência (com fuso)
        data_especifica: Dia usado pelo modo CALENDARIO
        data_inicio: Primeiro dia do modo PERSONALIZADO (até agora)

    Returns:
        Tupla (de, ate); None em qualquer ponta significa sem limite
    """
    fuso = agora.tzinfo

    def inicio_do_dia(dia: date) -> datetime:
        return datetime.combine(dia, time.min, tzinfo=fuso)

    if filtro == FiltroData.HOJE:
        de = inicio_do_dia(agora.date())
        return de, de + timedelta(days=1)

    if filtro == FiltroData.ESTE_MES:
        primeiro = agora.date().replace(day=1)
        if primeiro.month == 12:
            proximo = primeiro.replace(year=primeiro.year + 1, month=1)
        else:
            proximo = primeiro.replace(month=primeiro.month + 1)
        return inicio_do_dia(primeiro), inicio_do_dia(proximo)

    if filtro == FiltroData.CALENDARIO and data_especifica:
        de = inicio_do_dia(data_especifica)
        return de, de + timedelta(days=1)

    if filtro == FiltroData.PERSONALIZADO and data_inicio:
        return inicio_do_dia(data_inicio), agora

    return None, None


# =============================================================================
# Entidades externas (somente leitura neste domínio)
# =============================================================================

@dataclass(frozen=True)
class ProdutoInfo:
    """Produto como enxergado pelo motor: custo e estoque."""

    id: str
    custo: Decimal
    estoque: int
    nome: str = ""


@dataclass(frozen=True)
class ServicoInfo:
    """Serviço como enxergado pelo motor: preço e duração."""

    id: str
    preco: Decimal
    nome: str = ""
    duracao_minutos: Optional[int] = None


# =============================================================================
# Itens
# =============================================================================

@dataclass(frozen=True)
class ReferenciaItem:
    """
    União marcada: o item referencia um produto OU um serviço.

    A invariante "exatamente um" é garantida na construção.

    Example:
        ref = ReferenciaItem.from_ids(produto_id="p-1")
        ref.tipo  # TipoItem.PRODUTO
    """

    tipo: TipoItem
    ref_id: str

    def __post_init__(self):
        if not self.ref_id:
            raise ValidationError(
                "Item deve referenciar um produto ou um serviço",
                field="itens"
            )

    @classmethod
    def produto(cls, produto_id: str) -> "ReferenciaItem":
        return cls(TipoItem.PRODUTO, str(produto_id))

    @classmethod
    def servico(cls, servico_id: str) -> "ReferenciaItem":
        return cls(TipoItem.SERVICO, str(servico_id))

    @classmethod
    def from_ids(
        cls,
        produto_id: Optional[str] = None,
        servico_id: Optional[str] = None,
    ) -> "ReferenciaItem":
        """
        Constrói a referência a partir dos dois campos opcionais.

        Raises:
            ValidationError: Se nenhum ou ambos forem informados
        """
        if produto_id and servico_id:
            raise ValidationError(
                "Item não pode referenciar produto e serviço ao mesmo tempo",
                field="itens"
            )
        if produto_id:
            return cls.produto(produto_id)
        if servico_id:
            return cls.servico(servico_id)
        raise ValidationError(
            "Item deve referenciar um produto ou um serviço",
            field="itens"
        )

    @property
    def produto_id(self) -> Optional[str]:
        return self.ref_id if self.tipo == TipoItem.PRODUTO else None

    @property
    def servico_id(self) -> Optional[str]:
        return self.ref_id if self.tipo == TipoItem.SERVICO else None


@dataclass
class ItemTicket:
    """
    Linha precificada de um ticket.

    Invariantes:
    - quantidade >= 1
    - preco_unitario >= 0 e total >= 0
    - 0 <= desconto_percentual <= 100

    Attributes:
        referencia: Produto ou serviço referenciado
        quantidade: Unidades
        preco_unitario: Preço por unidade
        total: Total da linha
        desconto_percentual: Desconto informado (armazenado, não aplicado)
        ticket_id: Ticket dono do item
        id: Identificador do item
    """

    referencia: ReferenciaItem
    quantidade: int = 1
    preco_unitario: Decimal = ZERO
    total: Decimal = ZERO
    desconto_percentual: Decimal = ZERO
    ticket_id: str = ""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        if isinstance(self.quantidade, bool) or not isinstance(self.quantidade, int):
            raise ValidationError("Quantidade deve ser inteira", field="quantidade")
        if self.quantidade < 1:
            raise ValidationError("Quantidade deve ser no mínimo 1", field="quantidade")

        self.preco_unitario = para_decimal(self.preco_unitario, "preco_unitario")
        self.total = para_decimal(self.total, "total")
        self.desconto_percentual = para_decimal(
            self.desconto_percentual, "desconto_percentual"
        )

        if self.preco_unitario < ZERO:
            raise ValidationError(
                "Preço unitário não pode ser negativo",
                field="preco_unitario"
            )
        if self.total < ZERO:
            raise ValidationError("Total não pode ser negativo", field="total")
        if not ZERO <= self.desconto_percentual <= CEM:
            raise ValidationError(
                "Desconto deve estar entre 0 e 100",
                field="desconto_percentual"
            )

    @property
    def tipo(self) -> TipoItem:
        return self.referencia.tipo

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.tipo.value,
            "productId": self.referencia.produto_id,
            "serviceId": self.referencia.servico_id,
            "quantity": self.quantidade,
            "unitPrice": float(self.preco_unitario),
            "total": float(self.total),
            "discountPercent": float(self.desconto_percentual),
        }


# =============================================================================
# Agregado
# =============================================================================

@dataclass
class TicketEntity:
    """
    Entidade de Domínio: Ticket.

    Invariantes:
    - cliente e profissional obrigatórios
    - total == Σ item.total e quantidade == Σ item.quantidade
    - início/fim pareados, fim >= início
    - itens pertencem exclusivamente a este ticket

    Attributes:
        id: Identificador legível (TK-<ano>-<6 chars>)
        cliente_id: Referência ao cliente
        profissional_id: Referência ao profissional (staff)
        status: Estado atual
        itens: Linhas do ticket, em ordem
        quantidade: Soma das quantidades
        total: Soma dos totais
        observacoes: Texto livre
        inicio: Início do atendimento (opcional)
        fim: Fim do atendimento (opcional)
        duracao_minutos: Duração (derivada ou explícita)
        evento_calendario_id: ID opaco do evento na agenda externa
        criado_em: Data/hora de criação
        atualizado_em: Data/hora da última atualização

    Example:
        ticket = TicketEntity.criar(
            id="TK-2026-AB12CD",
            cliente_id="cli-1",
            profissional_id="staff-1",
            status=TicketStatus.PENDENTE,
            itens=pedido.itens,
        )
    """

    id: str
    cliente_id: str
    profissional_id: str
    status: TicketStatus = TicketStatus.PENDENTE
    itens: List[ItemTicket] = field(default_factory=list)
    quantidade: int = 0
    total: Decimal = ZERO
    observacoes: str = ""
    inicio: Optional[datetime] = None
    fim: Optional[datetime] = None
    duracao_minutos: Optional[int] = None
    evento_calendario_id: Optional[str] = None
    criado_em: datetime = field(default_factory=_agora)
    atualizado_em: datetime = field(default_factory=_agora)

    @classmethod
    def criar(
        cls,
        id: str,
        cliente_id: str,
        profissional_id: str,
        status: TicketStatus,
        itens: List[ItemTicket],
        observacoes: str = "",
        inicio: Optional[datetime] = None,
        fim: Optional[datetime] = None,
        duracao_minutos: Optional[int] = None,
    ) -> "TicketEntity":
        """
        Factory method para criar ticket com validações.

        Args:
            id: Identificador já gerado
            cliente_id: ID do cliente
            profissional_id: ID do profissional
            status: Status inicial
            itens: Itens já precificados
            observacoes: Observações livres
            inicio: Início da janela (opcional)
            fim: Fim da janela (opcional)
            duracao_minutos: Duração explícita (vence a derivada)

        Returns:
            Nova instância de TicketEntity

        Raises:
            ValidationError: Se dados de entrada inválidos
        """
        cls._validar_referencia(cliente_id, "cliente_id", "Cliente é obrigatório")
        cls._validar_referencia(
            profissional_id, "profissional_id", "Profissional é obrigatório"
        )
        if not isinstance(status, TicketStatus):
            raise ValidationError("Status é obrigatório", field="status")

        ticket = cls(
            id=id,
            cliente_id=str(cliente_id),
            profissional_id=str(profissional_id),
            status=status,
            observacoes=(observacoes or "").strip(),
        )
        ticket.definir_janela(inicio, fim, duracao_minutos)
        ticket.substituir_itens(itens)
        return ticket

    @staticmethod
    def _validar_referencia(valor: Optional[str], campo: str, mensagem: str) -> None:
        if not valor or not str(valor).strip():
            raise ValidationError(mensagem, field=campo)

    # -------------------------------------------------------------------------
    # Janela de atendimento
    # -------------------------------------------------------------------------

    def definir_janela(
        self,
        inicio: Optional[datetime],
        fim: Optional[datetime],
        duracao_minutos: Optional[int] = None,
    ) -> None:
        """
        Define início/fim e recalcula a duração.

        Duração explícita vence; sem ela, a duração é derivada da
        janela (ou fica vazia quando não há janela).

        Raises:
            ValidationError: Se a janela for inválida
        """
        validar_janela(inicio, fim)
        self.inicio = inicio
        self.fim = fim

        if duracao_minutos is not None:
            self.alterar_duracao(duracao_minutos)
        elif inicio is not None:
            self.duracao_minutos = calcular_duracao_minutos(inicio, fim)
        else:
            self.duracao_minutos = None

        self._atualizar_timestamp()

    def alterar_duracao(self, duracao_minutos: Optional[int]) -> None:
        """Define duração explícita em minutos (None limpa)."""
        if duracao_minutos is None:
            self.duracao_minutos = None
        else:
            try:
                minutos = int(duracao_minutos)
            except (TypeError, ValueError):
                raise ValidationError("Duração inválida", field="duracao_minutos")
            if minutos < 0:
                raise ValidationError(
                    "Duração não pode ser negativa",
                    field="duracao_minutos"
                )
            self.duracao_minutos = minutos
        self._atualizar_timestamp()

    @property
    def possui_janela(self) -> bool:
        """Ticket com início e fim (elegível para agenda externa)."""
        return self.inicio is not None and self.fim is not None

    # -------------------------------------------------------------------------
    # Itens e totais
    # -------------------------------------------------------------------------

    def substituir_itens(self, itens: List[ItemTicket]) -> None:
        """
        Substitui o conjunto de itens (troca completa, nunca merge).

        Totais são recalculados a partir do novo conjunto.
        """
        novos = list(itens)
        for item in novos:
            item.ticket_id = self.id
        self.itens = novos
        self._recalcular_totais()
        self._atualizar_timestamp()

    def _recalcular_totais(self) -> None:
        self.quantidade = sum(item.quantidade for item in self.itens)
        self.total = sum((item.total for item in self.itens), ZERO)

    @property
    def itens_produto(self) -> List[ItemTicket]:
        return [i for i in self.itens if i.tipo == TipoItem.PRODUTO]

    @property
    def itens_servico(self) -> List[ItemTicket]:
        return [i for i in self.itens if i.tipo == TipoItem.SERVICO]

    # -------------------------------------------------------------------------
    # Dados gerais
    # -------------------------------------------------------------------------

    def alterar_status(self, novo_status: TicketStatus) -> None:
        """Altera status (qualquer transição é permitida)."""
        self.status = novo_status
        self._atualizar_timestamp()

    def alterar_cliente(self, cliente_id: str) -> None:
        self._validar_referencia(cliente_id, "cliente_id", "Cliente é obrigatório")
        self.cliente_id = str(cliente_id)
        self._atualizar_timestamp()

    def alterar_profissional(self, profissional_id: str) -> None:
        self._validar_referencia(
            profissional_id, "profissional_id", "Profissional é obrigatório"
        )
        self.profissional_id = str(profissional_id)
        self._atualizar_timestamp()

    def alterar_observacoes(self, observacoes: Optional[str]) -> None:
        self.observacoes = (observacoes or "").strip()
        self._atualizar_timestamp()

    def _atualizar_timestamp(self) -> None:
        self.atualizado_em = _agora()

    def __repr__(self) -> str:
        return (
            f"TicketEntity("
            f"id={self.id}, "
            f"status={self.status.value}, "
            f"itens={len(self.itens)}, "
            f"total={self.total}"
            f")"
        )

    def __eq__(self, other: object) -> bool:
        """Comparação por ID (identidade de entidade)."""
        if not isinstance(other, TicketEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
