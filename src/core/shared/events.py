"""
Domain Events - Comunicação pós-commit entre o Core e os Adapters.

Eventos são enfileirados no UnitOfWork durante a transação e só
publicados depois do commit. É por eles que efeitos colaterais
não transacionais (sincronização de agenda externa) ficam fora do
caminho de escrita.

Características:
- Nomeados no passado (TicketCriado, não CriarTicket)
- Auto-geração de ID e timestamp (UTC)
- Serializáveis para transporte via Celery
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict
import uuid


def _agora_utc() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class DomainEvent(ABC):
    """
    Classe base abstrata para Domain Events.

    Attributes:
        event_id: Identificador único do evento
        aggregate_id: ID do agregado que gerou o evento
        occurred_at: Momento em que o evento ocorreu
        version: Versão do schema do evento

    Example:
        @dataclass
        class TicketExcluidoEvent(DomainEvent):
            evento_calendario_id: Optional[str] = None

            @property
            def aggregate_type(self) -> str:
                return "Ticket"
    """

    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    aggregate_id: str = ""
    occurred_at: datetime = field(default_factory=_agora_utc)
    version: int = 1

    def __post_init__(self):
        if not self.aggregate_id:
            raise ValueError("aggregate_id é obrigatório")

    @property
    @abstractmethod
    def aggregate_type(self) -> str:
        """Tipo do agregado que gerou este evento (ex: "Ticket")."""
        ...

    @property
    def event_type(self) -> str:
        """Nome da classe do evento, usado para roteamento."""
        return self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        """
        Serializa evento para dicionário.

        Os dados específicos ficam achatados no nível raiz para que
        as tasks Celery leiam `event_data.get(...)` diretamente.

        Returns:
            Dicionário JSON-serializável
        """
        data = {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "aggregate_id": self.aggregate_id,
            "aggregate_type": self.aggregate_type,
            "occurred_at": self.occurred_at.isoformat(),
            "version": self.version,
        }
        data.update(self._get_event_data())
        return data

    def _get_event_data(self) -> Dict[str, Any]:
        """Campos específicos da subclasse (tudo fora da base)."""
        base_fields = {"event_id", "aggregate_id", "occurred_at", "version"}
        return {
            key: value
            for key, value in self.__dict__.items()
            if key not in base_fields and not key.startswith("_")
        }

    def __repr__(self) -> str:
        return (
            f"{self.event_type}("
            f"event_id={self.event_id[:8]}..., "
            f"aggregate_id={self.aggregate_id}, "
            f"occurred_at={self.occurred_at.isoformat()}"
            f")"
        )
