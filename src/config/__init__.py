"""
Configuração do projeto Tickets.

Módulos:
- settings: Configurações Django (python-dotenv)
- urls: Rotas principais
- celery: Configuração Celery para sincronização assíncrona da agenda
- container: Dependency Injection Container
"""

from .celery import app as celery_app

__all__ = ('celery_app',)
