"""
Configuração do Celery para processamento assíncrono.

Com EVENT_PUBLISHER_MODE=celery, os eventos de ticket são entregues
a workers que executam a sincronização com a agenda externa fora do
processo web.

Arquitetura:
- Broker: Redis (mensagens entre Django e Workers)
- Backend: Redis (resultados de tarefas)
- Workers: Processos que executam as tarefas

Uso:
    celery -A src.config.celery worker -l INFO -Q default,events
"""

import os

from celery import Celery
from kombu import Exchange, Queue

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')

app = Celery('tickets')

app.config_from_object('django.conf:settings', namespace='CELERY')

redis_url = os.environ.get('REDIS_URL', 'redis://localhost:6379/0')

app.conf.update(
    broker_url=os.environ.get('CELERY_BROKER_URL', redis_url),
    result_backend=os.environ.get('CELERY_RESULT_BACKEND', redis_url),

    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',

    timezone=os.environ.get('TIME_ZONE', 'America/Sao_Paulo'),
    enable_utc=True,

    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,

    task_default_retry_delay=60,
    task_max_retries=3,

    result_expires=3600,
)

app.conf.task_queues = (
    Queue('default', Exchange('default'), routing_key='default'),
    Queue('events', Exchange('events'), routing_key='events.#'),
)
app.conf.task_default_queue = 'default'

app.conf.task_routes = {
    'src.adapters.django_app.events.handlers.*': {'queue': 'events'},
}

app.autodiscover_tasks(['src.adapters.django_app.events'], related_name='handlers')
