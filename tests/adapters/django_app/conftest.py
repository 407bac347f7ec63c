"""
Fixtures para testes dos adapters Django (banco SQLite em memória).
"""

import pytest


@pytest.fixture(autouse=True)
def container_limpo():
    """Cada teste começa com um container novo (settings relidos)."""
    from src.config.container import reset_container

    reset_container()
    yield
    reset_container()


@pytest.fixture
def catalogo(db):
    """Cliente, profissional, produtos e serviço gravados no banco."""
    from src.adapters.django_app.tickets.models import (
        ClienteModel,
        ProdutoModel,
        ProfissionalModel,
        ServicoModel,
    )

    return {
        'cliente': ClienteModel.objects.create(id='cli-1', nome='Ana Souza'),
        'outro_cliente': ClienteModel.objects.create(id='cli-2', nome='Bruno Lima'),
        'profissional': ProfissionalModel.objects.create(id='staff-1', nome='Carla Dias'),
        'shampoo': ProdutoModel.objects.create(
            id='p-1', nome='Shampoo', custo='10.00', preco='19.90', estoque=5
        ),
        'pomada': ProdutoModel.objects.create(
            id='p-2', nome='Pomada', custo='4.50', preco='9.90', estoque=1
        ),
        'corte': ServicoModel.objects.create(
            id='s-1', nome='Corte', preco='60.00', duracao_minutos=45
        ),
    }
