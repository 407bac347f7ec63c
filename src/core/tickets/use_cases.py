"""
Use Cases (Application Services) do Domínio de Tickets.

Este módulo orquestra o motor de transações de tickets: composição do
pedido, geração de ID, reserva de estoque e persistência numa única
transação, e eventos para a sincronização best-effort da agenda.

Use Cases implementados:
- CriarTicketService: Cria ticket reservando estoque
- AtualizarTicketService: Atualização parcial (troca completa de itens)
- ExcluirTicketService: Remove ticket e itens (estoque não é devolvido)
- ObterTicketService: Obtém ticket específico
- ListarTicketsService: Lista paginada com busca e filtros de data

Responsabilidades dos Use Cases:
- Validar entrada antes de abrir transação
- Coordenar entidades, composer e reserva
- Gerenciar transações (via UoW)
- Disparar eventos de domínio (publicados após commit)
- Retornar DTOs de saída
"""

from datetime import datetime
from typing import Callable, Optional
import logging

from src.core.shared.interfaces import UnitOfWork
from src.core.shared.exceptions import EntityNotFoundError, ValidationError

from .composer import OrderComposer
from .dtos import (
    AtualizarTicketInputDTO,
    CriarTicketInputDTO,
    ListarTicketsQueryDTO,
    PaginatedResultDTO,
    TicketOutputDTO,
)
from .entities import FiltroData, TicketEntity, TicketStatus, calcular_intervalo
from .events import (
    EstoqueReservadoEvent,
    TicketAtualizadoEvent,
    TicketCriadoEvent,
    TicketExcluidoEvent,
)
from .exceptions import ConflitoAgendamentoError, ProdutoInvalidoError
from .identifiers import TicketIdGenerator
from .inventory import InventoryReservation
from .ports import TicketRepository
from .scheduling import SchedulingConflictDetector

logger = logging.getLogger(__name__)


PAGE_SIZE_PADRAO = 5


def _parse_status(valor: Optional[str]) -> TicketStatus:
    if valor is None or (isinstance(valor, str) and not valor.strip()):
        raise ValidationError("Status é obrigatório", field="status")
    try:
        return TicketStatus.from_string(valor)
    except ValueError:
        raise ValidationError(f"Status inválido: {valor}", field="status")


def _ticket_ou_404(ticket_repo: TicketRepository, ticket_id: str) -> TicketEntity:
    ticket = ticket_repo.get_by_id(ticket_id)
    if not ticket:
        raise EntityNotFoundError(
            f"Ticket {ticket_id} não encontrado",
            entity_type="Ticket",
            entity_id=ticket_id
        )
    return ticket


class CriarTicketService:
    """
    Use Case: Criar um novo ticket.

    Fluxo:
    1. Validar cliente, profissional e status
    2. Compor o pedido (preços, totais, quantidade por produto)
    3. Gerar ID livre (fora da transação)
    4. Verificar conflito de agenda (se habilitado)
    5. Em transação: reservar estoque e gravar ticket + itens
    6. Após commit: eventos (agenda externa reage a TicketCriado)

    Example:
        service = CriarTicketService(repo, composer, reserva, gerador, uow)
        output = service.execute(CriarTicketInputDTO(
            cliente_id="cli-1",
            profissional_id="staff-1",
            status="Pending",
            itens=(ItemTicketInputDTO(produto_id="p-1", quantidade=2),),
        ))
        output.id  # "TK-2026-AB12CD"
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        composer: OrderComposer,
        reserva: InventoryReservation,
        gerador_id: TicketIdGenerator,
        uow: UnitOfWork,
        detector: Optional[SchedulingConflictDetector] = None,
        verificar_conflitos: bool = False,
    ):
        self.ticket_repo = ticket_repo
        self.composer = composer
        self.reserva = reserva
        self.gerador_id = gerador_id
        self.uow = uow
        self.detector = detector
        self.verificar_conflitos = verificar_conflitos

    def execute(self, input_dto: CriarTicketInputDTO) -> TicketOutputDTO:
        """
        Executa criação de ticket.

        Args:
            input_dto: Dados de entrada

        Returns:
            DTO com o ticket criado e itens achatados

        Raises:
            ValidationError: Campos obrigatórios ausentes ou itens inválidos
            ServicoInvalidoError / ProdutoInvalidoError: Referência inexistente
            EstoqueInsuficienteError: Estoque menor que o requerido
            GeracaoIdEsgotadaError: Sem ID livre
            ConflitoAgendamentoError: Janela sobreposta (com verificação ligada)
        """
        if not input_dto.cliente_id:
            raise ValidationError("Cliente é obrigatório", field="cliente_id")
        if not input_dto.profissional_id:
            raise ValidationError("Profissional é obrigatório", field="profissional_id")
        status = _parse_status(input_dto.status)

        pedido = self.composer.compor(list(input_dto.itens))
        ticket_id = self.gerador_id.gerar()

        ticket = TicketEntity.criar(
            id=ticket_id,
            cliente_id=input_dto.cliente_id,
            profissional_id=input_dto.profissional_id,
            status=status,
            itens=pedido.itens,
            observacoes=input_dto.observacoes,
            inicio=input_dto.inicio,
            fim=input_dto.fim,
            duracao_minutos=input_dto.duracao_minutos,
        )

        self._verificar_agenda(ticket)

        with self.uow:
            self.reserva.reservar(pedido.requeridos_por_produto)
            self.ticket_repo.create(ticket)

            if pedido.requeridos_por_produto:
                self.uow.publish_event(
                    EstoqueReservadoEvent(
                        aggregate_id=ticket.id,
                        quantidades=dict(pedido.requeridos_por_produto),
                    )
                )
            self.uow.publish_event(
                TicketCriadoEvent(
                    aggregate_id=ticket.id,
                    cliente_id=ticket.cliente_id,
                    profissional_id=ticket.profissional_id,
                    status=ticket.status.value,
                    total=str(ticket.total),
                    possui_janela=ticket.possui_janela,
                )
            )

        logger.info(
            f"Ticket {ticket.id} criado: {len(ticket.itens)} itens, total={ticket.total}"
        )
        return TicketOutputDTO.from_entity(ticket)

    def _verificar_agenda(self, ticket: TicketEntity) -> None:
        if not (self.verificar_conflitos and self.detector and ticket.possui_janela):
            return
        if self.detector.has_conflict(ticket.profissional_id, ticket.inicio, ticket.fim):
            raise ConflitoAgendamentoError(ticket.profissional_id)


class AtualizarTicketService:
    """
    Use Case: Atualização parcial de ticket.

    Só os campos informados são aplicados. Itens informados substituem
    o conjunto inteiro (apagar tudo e recriar); lista vazia remove
    todos os itens. A troca de itens não reserva estoque.

    Se apenas início ou fim vier, o outro é lido do ticket gravado
    para recalcular a duração.
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        composer: OrderComposer,
        uow: UnitOfWork,
        detector: Optional[SchedulingConflictDetector] = None,
        verificar_conflitos: bool = False,
    ):
        self.ticket_repo = ticket_repo
        self.composer = composer
        self.uow = uow
        self.detector = detector
        self.verificar_conflitos = verificar_conflitos

    def execute(self, input_dto: AtualizarTicketInputDTO) -> TicketOutputDTO:
        """
        Executa atualização.

        Raises:
            EntityNotFoundError: Se ticket não existe
            ValidationError: Se algum campo informado for inválido
            ProdutoInvalidoError: Se um item novo referencia produto inexistente
            ServicoInvalidoError: Se um item novo referencia serviço inexistente
        """
        with self.uow:
            ticket = _ticket_ou_404(self.ticket_repo, input_dto.ticket_id)

            if input_dto.informado("cliente_id"):
                ticket.alterar_cliente(input_dto.cliente_id)
            if input_dto.informado("profissional_id"):
                ticket.alterar_profissional(input_dto.profissional_id)
            if input_dto.informado("status"):
                ticket.alterar_status(_parse_status(input_dto.status))
            if input_dto.informado("observacoes"):
                ticket.alterar_observacoes(input_dto.observacoes)

            self._aplicar_janela(ticket, input_dto)

            if input_dto.informado("itens"):
                if input_dto.itens:
                    pedido = self.composer.compor(list(input_dto.itens))
                    if pedido.produtos_desconhecidos:
                        raise ProdutoInvalidoError(pedido.produtos_desconhecidos[0])
                    ticket.substituir_itens(pedido.itens)
                else:
                    ticket.substituir_itens([])
                self.ticket_repo.replace_items(ticket.id, ticket.itens)

            self._verificar_agenda(ticket)

            self.ticket_repo.update(ticket)

            self.uow.publish_event(
                TicketAtualizadoEvent(
                    aggregate_id=ticket.id,
                    campos=tuple(c for c in input_dto.CAMPOS if input_dto.informado(c)),
                    possui_janela=ticket.possui_janela,
                )
            )

        logger.info(f"Ticket {ticket.id} atualizado")
        return TicketOutputDTO.from_entity(ticket)

    @staticmethod
    def _aplicar_janela(ticket: TicketEntity, input_dto: AtualizarTicketInputDTO) -> None:
        informou_inicio = input_dto.informado("inicio")
        informou_fim = input_dto.informado("fim")
        informou_duracao = input_dto.informado("duracao_minutos")

        if informou_inicio or informou_fim:
            inicio = input_dto.inicio if informou_inicio else ticket.inicio
            fim = input_dto.fim if informou_fim else ticket.fim
            duracao = input_dto.duracao_minutos if informou_duracao else None
            ticket.definir_janela(inicio, fim, duracao)
        elif informou_duracao:
            ticket.alterar_duracao(input_dto.duracao_minutos)

    def _verificar_agenda(self, ticket: TicketEntity) -> None:
        if not (self.verificar_conflitos and self.detector and ticket.possui_janela):
            return
        if self.detector.has_conflict(
            ticket.profissional_id, ticket.inicio, ticket.fim, excluir_ticket_id=ticket.id
        ):
            raise ConflitoAgendamentoError(ticket.profissional_id)


class ExcluirTicketService:
    """
    Use Case: Excluir ticket.

    Remove itens e ticket na mesma transação. O estoque consumido
    não é devolvido. A remoção do evento externo acontece depois do
    commit, via TicketExcluidoEvent.
    """

    def __init__(self, ticket_repo: TicketRepository, uow: UnitOfWork):
        self.ticket_repo = ticket_repo
        self.uow = uow

    def execute(self, ticket_id: str) -> str:
        """
        Exclui ticket.

        Returns:
            ID do ticket excluído

        Raises:
            EntityNotFoundError: Se ticket não existe
        """
        with self.uow:
            ticket = _ticket_ou_404(self.ticket_repo, ticket_id)

            self.ticket_repo.delete_items(ticket.id)
            self.ticket_repo.delete(ticket.id)

            self.uow.publish_event(
                TicketExcluidoEvent(
                    aggregate_id=ticket.id,
                    evento_calendario_id=ticket.evento_calendario_id,
                )
            )

        logger.info(f"Ticket {ticket_id} excluído")
        return ticket_id


class ObterTicketService:
    """
    Use Case: Obter detalhes de um ticket específico.
    """

    def __init__(self, ticket_repo: TicketRepository):
        self.ticket_repo = ticket_repo

    def execute(self, ticket_id: str) -> TicketOutputDTO:
        """
        Obtém ticket por ID.

        Raises:
            EntityNotFoundError: Se ticket não existe
        """
        return TicketOutputDTO.from_entity(_ticket_ou_404(self.ticket_repo, ticket_id))


class ListarTicketsService:
    """
    Use Case: Listar tickets paginados.

    Não usa UoW pois é operação de leitura (não precisa de transação).

    Attributes:
        page_size_padrao: Tamanho de página quando não informado
        relogio: Fonte de "agora" com fuso (limites de dia dos filtros)
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        page_size_padrao: int = PAGE_SIZE_PADRAO,
        relogio: Optional[Callable[[], datetime]] = None,
    ):
        self.ticket_repo = ticket_repo
        self.page_size_padrao = page_size_padrao
        self.relogio = relogio or (lambda: datetime.now().astimezone())

    def execute(self, query: ListarTicketsQueryDTO) -> PaginatedResultDTO:
        """
        Lista tickets por criado_em decrescente.

        Raises:
            ValidationError: Status ou filtro de data inválido
        """
        status = None
        if query.status:
            status = _parse_status(query.status)

        try:
            filtro = FiltroData.from_string(query.filtro_data)
        except ValueError:
            raise ValidationError(
                f"Filtro de data inválido: {query.filtro_data}",
                field="filtro_data"
            )

        criado_de, criado_ate = calcular_intervalo(
            filtro,
            self.relogio(),
            data_especifica=query.data_especifica,
            data_inicio=query.data_inicio,
        )

        pagina = max(1, query.pagina or 1)
        por_pagina = query.por_pagina if query.por_pagina and query.por_pagina > 0 else self.page_size_padrao

        tickets, total = self.ticket_repo.list_paginated(
            busca=(query.busca or "").strip() or None,
            status=status,
            criado_de=criado_de,
            criado_ate=criado_ate,
            offset=(pagina - 1) * por_pagina,
            limite=por_pagina,
        )

        return PaginatedResultDTO(
            items=[TicketOutputDTO.from_entity(t) for t in tickets],
            total=total,
            pagina=pagina,
            por_pagina=por_pagina,
        )
