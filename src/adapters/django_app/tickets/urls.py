"""
URL patterns para o motor de Tickets.

Endpoints API JSON:
- GET /api/tickets/ - Listar tickets
- POST /api/tickets/ - Criar ticket
- GET /api/tickets/<id>/ - Obter ticket
- PATCH /api/tickets/<id>/ - Atualizar ticket
- DELETE /api/tickets/<id>/ - Excluir ticket
"""

from django.urls import path

from . import api_views

app_name = 'tickets'

urlpatterns = [
    path('', api_views.TicketAPIListView.as_view(), name='api_list'),
    path('<str:pk>/', api_views.TicketAPIDetailView.as_view(), name='api_detail'),
]
