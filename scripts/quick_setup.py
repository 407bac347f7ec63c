#!/usr/bin/env python
"""
Setup rápido para desenvolvimento local.

Este script:
1. Configura Django settings (SQLite local)
2. Executa migrations
3. Cria cadastros e tickets de exemplo (opcional)

Uso:
    python scripts/quick_setup.py
    python scripts/quick_setup.py --with-sample-data
"""

import argparse
import os
import sys
from datetime import timedelta

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def setup_django():
    """Configura Django para uso standalone."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')

    # Sem DATABASE_URL/DATABASE_HOST o settings usa SQLite
    os.environ.pop('DATABASE_URL', None)
    os.environ.pop('DATABASE_HOST', None)

    import django
    django.setup()


def run_migrations():
    from django.core.management import call_command

    print("📦 Executando migrations...")
    call_command('migrate', verbosity=1)
    print("✅ Migrations concluídas!")


def create_sample_data():
    """Cria clientes, profissionais, produtos, serviços e alguns tickets."""
    from django.utils import timezone

    from src.adapters.django_app.tickets.models import (
        ClienteModel,
        ProdutoModel,
        ProfissionalModel,
        ServicoModel,
    )
    from src.config.container import get_container
    from src.core.tickets.dtos import CriarTicketInputDTO, ItemTicketInputDTO

    print("📝 Criando cadastros de exemplo...")

    ana, _ = ClienteModel.objects.get_or_create(id='cli-ana', defaults={'nome': 'Ana Souza'})
    bruno, _ = ClienteModel.objects.get_or_create(id='cli-bruno', defaults={'nome': 'Bruno Lima'})
    carla, _ = ProfissionalModel.objects.get_or_create(id='staff-carla', defaults={'nome': 'Carla Dias'})

    shampoo, _ = ProdutoModel.objects.get_or_create(
        id='prod-shampoo',
        defaults={'nome': 'Shampoo', 'custo': '25.00', 'preco': '39.90', 'estoque': 20},
    )
    pomada, _ = ProdutoModel.objects.get_or_create(
        id='prod-pomada',
        defaults={'nome': 'Pomada', 'custo': '18.50', 'preco': '29.90', 'estoque': 10},
    )
    corte, _ = ServicoModel.objects.get_or_create(
        id='serv-corte',
        defaults={'nome': 'Corte', 'preco': '60.00', 'duracao_minutos': 45},
    )

    print("📝 Criando tickets de exemplo...")

    service = get_container().criar_ticket_service()
    inicio = timezone.now().replace(minute=0, second=0, microsecond=0) + timedelta(days=1)

    pedidos = [
        CriarTicketInputDTO(
            cliente_id=ana.id,
            profissional_id=carla.id,
            status='Confirmed',
            itens=(
                ItemTicketInputDTO(servico_id=corte.id),
                ItemTicketInputDTO(produto_id=shampoo.id, quantidade=1),
            ),
            inicio=inicio,
            fim=inicio + timedelta(minutes=45),
        ),
        CriarTicketInputDTO(
            cliente_id=bruno.id,
            profissional_id=carla.id,
            status='Pending',
            itens=(ItemTicketInputDTO(produto_id=pomada.id, quantidade=2),),
            observacoes='Retirar no balcão',
        ),
    ]

    for pedido in pedidos:
        output = service.execute(pedido)
        print(f"   ✓ {output.id} total={output.total}")

    print(f"✅ {len(pedidos)} tickets criados!")


def check_connection():
    """Verifica conexão com o banco."""
    from django.db import connection

    print("🔍 Verificando conexão com o banco...")

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        print("✅ Conexão OK!")
        return True
    except Exception as e:
        print(f"❌ Erro de conexão: {e}")
        return False


def show_info():
    from django.conf import settings

    from src.config.container import get_container

    print("\n" + "=" * 60)
    print("📊 Informações do Setup")
    print("=" * 60)
    print(f"  Database Engine: {settings.DATABASES['default']['ENGINE']}")
    print(f"  Database Name: {settings.DATABASES['default']['NAME']}")
    print(f"  Tickets cadastrados: {get_container().ticket_repository().count()}")
    print(f"  Agenda externa: {'ligada' if settings.GOOGLE_CALENDAR_ENABLED else 'desligada'}")
    print("=" * 60)
    print("\n🚀 Próximos passos:")
    print("   1. django-admin runserver --settings=src.config.settings --pythonpath=.")
    print("   2. Acesse: http://localhost:8000/api/tickets/")
    print("\n")


def main():
    parser = argparse.ArgumentParser(description='Setup rápido para desenvolvimento')
    parser.add_argument(
        '--with-sample-data',
        action='store_true',
        help='Criar cadastros e tickets de exemplo'
    )
    parser.add_argument(
        '--check-only',
        action='store_true',
        help='Apenas verificar conexão'
    )

    args = parser.parse_args()

    print("\n" + "=" * 60)
    print("🔧 Motor de Tickets - Quick Setup")
    print("=" * 60 + "\n")

    setup_django()

    if args.check_only:
        check_connection()
        return

    if not check_connection():
        return

    run_migrations()

    if args.with_sample_data:
        create_sample_data()

    show_info()


if __name__ == '__main__':
    main()
