"""
Dependency Injection Container.

Configura e gerencia todas as dependências do motor de Tickets.
Usa dependency-injector para lazy-loading e injeção automática.

Padrões:
- Singleton: Uma instância para toda app (repositories, lookups, publisher)
- Factory: Nova instância por chamada (services, UoW)
- Callable: Valores de settings lidos no momento da criação

Adapters Django são importados sob demanda (apps precisam estar
carregados antes de tocar nos models).
"""

from importlib import import_module
from typing import Optional

from dependency_injector import containers, providers
from django.conf import settings
from django.utils import timezone

from src.core.tickets.calendar_sync import CalendarSyncService
from src.core.tickets.composer import OrderComposer
from src.core.tickets.identifiers import TicketIdGenerator
from src.core.tickets.inventory import InventoryReservation
from src.core.tickets.scheduling import SchedulingConflictDetector
from src.core.tickets.use_cases import (
    AtualizarTicketService,
    CriarTicketService,
    ExcluirTicketService,
    ListarTicketsService,
    ObterTicketService,
)


def _lazy(modulo: str, nome: str):
    """Importa `nome` de `modulo` só quando o provider é chamado."""
    def _construir(*args, **kwargs):
        return getattr(import_module(modulo), nome)(*args, **kwargs)
    _construir.__name__ = nome
    return _construir


def _setting(nome: str, padrao=None):
    return getattr(settings, nome, padrao)


_REPOSITORIES = 'src.adapters.django_app.tickets.repositories'
_UNIT_OF_WORK = 'src.adapters.django_app.shared.unit_of_work'


def _criar_calendar_sync(ticket_repo, servicos) -> Optional[CalendarSyncService]:
    """Serviço de agenda, ou None quando a integração está desligada."""
    if not _setting('GOOGLE_CALENDAR_ENABLED', False):
        return None

    from src.adapters.django_app.calendar.google import GoogleCalendarAdapter

    fuso = _setting('GOOGLE_CALENDAR_TIMEZONE', 'UTC')
    adapter = GoogleCalendarAdapter(
        access_token=_setting('GOOGLE_CALENDAR_ACCESS_TOKEN', ''),
        calendar_id=_setting('GOOGLE_CALENDAR_ID', 'primary'),
        timeout=_setting('GOOGLE_CALENDAR_TIMEOUT', 10.0),
        timezone=fuso,
    )
    return CalendarSyncService(ticket_repo, adapter, timezone=fuso, servicos=servicos)


def _criar_event_publisher(calendar_sync_service: Optional[CalendarSyncService]):
    """
    Publisher conforme EVENT_PUBLISHER_MODE.

    No modo sync os handlers de agenda rodam no próprio processo;
    no modo celery o roteamento fica com dispatch_domain_event.
    """
    from src.adapters.django_app.events.publishers import (
        LoggingEventPublisher,
        get_event_publisher,
    )

    publisher = get_event_publisher(_setting('EVENT_PUBLISHER_MODE', 'sync'))

    if calendar_sync_service is not None and isinstance(publisher, LoggingEventPublisher):
        from src.adapters.django_app.events.handlers import registrar_handlers_agenda
        registrar_handlers_agenda(publisher, calendar_sync_service)

    return publisher


class Container(containers.DeclarativeContainer):
    """
    Container principal de Dependency Injection.

    Organização:
    - Repositories / Lookups: Persistência
    - Integração: agenda externa e publisher de eventos
    - Unit of Work: Transações
    - Motor: composer, reserva, gerador de ID, detector de conflito
    - Services: Use Cases

    Example:
        from src.config.container import get_container

        service = get_container().criar_ticket_service()
        output = service.execute(input_dto)
    """

    # =========================================================================
    # Repositories (Singleton - uma instância por app)
    # =========================================================================

    ticket_repository = providers.Singleton(_lazy(_REPOSITORIES, 'DjangoTicketRepository'))

    product_lookup = providers.Singleton(_lazy(_REPOSITORIES, 'DjangoProductLookup'))

    service_lookup = providers.Singleton(_lazy(_REPOSITORIES, 'DjangoServiceLookup'))

    inventory = providers.Singleton(_lazy(_REPOSITORIES, 'DjangoInventory'))

    # =========================================================================
    # Integração (agenda externa + eventos)
    # =========================================================================

    calendar_sync_service = providers.Singleton(
        _criar_calendar_sync,
        ticket_repo=ticket_repository,
        servicos=service_lookup,
    )

    event_publisher = providers.Singleton(
        _criar_event_publisher,
        calendar_sync_service=calendar_sync_service,
    )

    # =========================================================================
    # Unit of Work (Factory - nova instância por operação)
    # =========================================================================

    unit_of_work = providers.Factory(
        _lazy(_UNIT_OF_WORK, 'DjangoUnitOfWork'),
        event_publisher=event_publisher,
    )

    # =========================================================================
    # Motor
    # =========================================================================

    composer = providers.Factory(
        OrderComposer,
        produtos=product_lookup,
        servicos=service_lookup,
    )

    reserva = providers.Factory(InventoryReservation, inventario=inventory)

    gerador_id = providers.Factory(
        TicketIdGenerator,
        existe=ticket_repository.provided.exists,
        max_tentativas=providers.Callable(_setting, 'TICKET_ID_MAX_TENTATIVAS', 10),
    )

    detector = providers.Factory(SchedulingConflictDetector, ticket_repo=ticket_repository)

    verificar_conflitos = providers.Callable(_setting, 'TICKETS_VERIFICAR_CONFLITOS', False)

    # =========================================================================
    # Services / Use Cases (Factory - nova instância por chamada)
    # =========================================================================

    criar_ticket_service = providers.Factory(
        CriarTicketService,
        ticket_repo=ticket_repository,
        composer=composer,
        reserva=reserva,
        gerador_id=gerador_id,
        uow=unit_of_work,
        detector=detector,
        verificar_conflitos=verificar_conflitos,
    )

    atualizar_ticket_service = providers.Factory(
        AtualizarTicketService,
        ticket_repo=ticket_repository,
        composer=composer,
        uow=unit_of_work,
        detector=detector,
        verificar_conflitos=verificar_conflitos,
    )

    excluir_ticket_service = providers.Factory(
        ExcluirTicketService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
    )

    obter_ticket_service = providers.Factory(
        ObterTicketService,
        ticket_repo=ticket_repository,
    )

    # Listar Tickets (sem UoW - leitura)
    listar_tickets_service = providers.Factory(
        ListarTicketsService,
        ticket_repo=ticket_repository,
        page_size_padrao=providers.Callable(_setting, 'TICKETS_PAGE_SIZE_PADRAO', 5),
        relogio=providers.Object(timezone.localtime),
    )


# =============================================================================
# Container Global (Singleton)
# =============================================================================

_container: Optional[Container] = None


def get_container() -> Container:
    """
    Retorna instância global do container.

    Cria se não existir (lazy initialization).
    """
    global _container

    if _container is None:
        _container = Container()

    return _container


def reset_container() -> None:
    """
    Reset do container (para testes).

    Permite criar novo container limpo, relendo settings.
    """
    global _container
    _container = None
