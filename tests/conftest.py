"""
Configurações globais do Pytest para o motor de Tickets.

Este arquivo:
- Configura Django (SQLite em memória) antes da coleta
- Fornece o "mundo" em memória usado pelos testes do Core:
  store, repositório, lookups, estoque, composer e services
"""

from datetime import datetime, timezone

import pytest


def pytest_configure(config):
    """Configura Django antes dos testes."""
    import django
    from django.conf import settings

    if not settings.configured:
        settings.configure(
            DEBUG=True,
            SECRET_KEY='test-secret-key',
            DATABASES={
                'default': {
                    'ENGINE': 'django.db.backends.sqlite3',
                    'NAME': ':memory:',
                }
            },
            INSTALLED_APPS=[
                'django.contrib.admin',
                'django.contrib.auth',
                'django.contrib.contenttypes',
                'django.contrib.sessions',
                'django.contrib.messages',
                'src.adapters.django_app.tickets',
            ],
            MIDDLEWARE=[],
            ROOT_URLCONF='src.config.urls',
            DEFAULT_AUTO_FIELD='django.db.models.BigAutoField',
            USE_TZ=True,
            TIME_ZONE='America/Sao_Paulo',
            TICKETS_VERIFICAR_CONFLITOS=False,
            TICKETS_PAGE_SIZE_PADRAO=5,
            TICKET_ID_MAX_TENTATIVAS=10,
            GOOGLE_CALENDAR_ENABLED=False,
            EVENT_PUBLISHER_MODE='sync',
        )
        django.setup()


# =============================================================================
# Mundo em memória
# =============================================================================

@pytest.fixture
def store():
    """Store com catálogo mínimo: dois produtos, um serviço, um cliente."""
    from src.core.tickets.ports import InMemoryStore

    store = InMemoryStore()
    store.add_produto("p-1", custo="10.00", estoque=5, nome="Shampoo")
    store.add_produto("p-2", custo="4.50", estoque=1, nome="Pomada")
    store.add_servico("s-1", preco="60.00", nome="Corte", duracao_minutos=45)
    store.add_cliente("cli-1", "Ana Souza")
    return store


@pytest.fixture
def ticket_repo(store):
    from src.core.tickets.ports import InMemoryTicketRepository
    return InMemoryTicketRepository(store)


@pytest.fixture
def composer(store):
    from src.core.tickets.composer import OrderComposer
    from src.core.tickets.ports import InMemoryProductLookup, InMemoryServiceLookup
    return OrderComposer(InMemoryProductLookup(store), InMemoryServiceLookup(store))


@pytest.fixture
def reserva(store):
    from src.core.tickets.inventory import InventoryReservation
    from src.core.tickets.ports import InMemoryInventory
    return InventoryReservation(InMemoryInventory(store))


@pytest.fixture
def gerador_id(ticket_repo):
    from src.core.tickets.identifiers import TicketIdGenerator
    return TicketIdGenerator(existe=ticket_repo.exists)


@pytest.fixture
def event_publisher():
    from src.adapters.django_app.events.publishers import InMemoryEventPublisher
    return InMemoryEventPublisher()


@pytest.fixture
def uow_factory(store, event_publisher):
    """Cria um InMemoryUnitOfWork novo (um por operação/thread)."""
    from src.adapters.django_app.shared.unit_of_work import InMemoryUnitOfWork

    def _criar():
        return InMemoryUnitOfWork(store, event_publisher=event_publisher)

    return _criar


@pytest.fixture
def criar_service(ticket_repo, composer, reserva, gerador_id, uow_factory):
    from src.core.tickets.use_cases import CriarTicketService
    return CriarTicketService(ticket_repo, composer, reserva, gerador_id, uow_factory())


@pytest.fixture
def agora():
    return datetime(2026, 3, 10, 14, 30, tzinfo=timezone.utc)
