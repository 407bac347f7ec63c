"""
API Views JSON para o motor de Tickets.

Endpoints:
- GET /api/tickets/ - Listar tickets (busca, status, filtros de data, paginação)
- POST /api/tickets/ - Criar ticket (reserva estoque)
- GET /api/tickets/<id>/ - Obter ticket
- PATCH /api/tickets/<id>/ - Atualizar ticket parcial
- DELETE /api/tickets/<id>/ - Excluir ticket

Formato:
- Entrada: JSON com chaves camelCase (clientId, staffId, items...)
- Saída: JSON com estrutura {success, data/error, meta}; a listagem
  traz também {pagination}

Códigos:
- 400: validação ou regra de negócio (estoque, referência inválida...)
- 404: ticket inexistente
- 500: erro inesperado (mensagem genérica)
"""

import json
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from src.config.container import get_container
from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    EntityNotFoundError,
    ValidationError,
)
from src.core.tickets.dtos import (
    AtualizarTicketInputDTO,
    CriarTicketInputDTO,
    ItemTicketInputDTO,
    ListarTicketsQueryDTO,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Helpers
# =============================================================================

def json_response(success: bool, data: Any = None, error: str = None,
                  status: int = 200, meta: Dict = None, **extra) -> JsonResponse:
    """
    Cria resposta JSON padronizada.

    Args:
        success: Se operação foi bem sucedida
        data: Dados da resposta
        error: Mensagem de erro (se aplicável)
        status: HTTP status code
        meta: Metadados do erro (code, field, rule...)
        **extra: Chaves adicionais de nível raiz (ex: pagination)
    """
    response = {'success': success}

    if data is not None:
        response['data'] = data

    if error is not None:
        response['error'] = error

    if meta is not None:
        response['meta'] = meta

    response.update(extra)

    return JsonResponse(response, status=status)


def parse_json_body(request: HttpRequest) -> Dict:
    """
    Parseia body JSON do request.

    Raises:
        ValidationError: Se JSON inválido ou não for um objeto
    """
    if not request.body:
        return {}

    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError(f"JSON inválido: {e}", field="body")

    if not isinstance(data, dict):
        raise ValidationError("Corpo da requisição deve ser um objeto JSON", field="body")
    return data


def parse_instante(valor: Any, campo: str) -> Optional[datetime]:
    """ISO 8601 → datetime com fuso (sem fuso assume o fuso atual)."""
    if valor in (None, ''):
        return None
    resultado = parse_datetime(valor) if isinstance(valor, str) else None
    if resultado is None:
        raise ValidationError(f"Data/hora inválida: {valor}", field=campo)
    if timezone.is_naive(resultado):
        resultado = timezone.make_aware(resultado)
    return resultado


def parse_dia(valor: Optional[str], campo: str) -> Optional[date]:
    if not valor:
        return None
    try:
        resultado = parse_date(valor)
    except ValueError:
        resultado = None
    if resultado is None:
        raise ValidationError(f"Data inválida: {valor}", field=campo)
    return resultado


def parse_inteiro(valor: Any, campo: str) -> Optional[int]:
    if valor in (None, ''):
        return None
    if isinstance(valor, bool):
        raise ValidationError(f"Número inválido: {valor}", field=campo)
    try:
        return int(valor)
    except (TypeError, ValueError):
        raise ValidationError(f"Número inválido: {valor}", field=campo)


def parse_item(data: Any) -> ItemTicketInputDTO:
    if not isinstance(data, dict):
        raise ValidationError("Item deve ser um objeto", field="itens")
    return ItemTicketInputDTO(
        produto_id=data.get('productId') or None,
        servico_id=data.get('serviceId') or None,
        quantidade=data.get('quantity'),
        preco_unitario=data.get('unitPrice'),
        total=data.get('total'),
        desconto=data.get('discount', data.get('discountPercent')),
    )


def parse_itens(data: Any) -> List[ItemTicketInputDTO]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValidationError("items deve ser uma lista", field="itens")
    return [parse_item(item) for item in data]


def parse_itens_criacao(data: Dict) -> List[ItemTicketInputDTO]:
    """
    Itens da criação: `items` ou, quando ele vier vazio ou não for
    lista, os campos avulsos productId/serviceId/quantity/unitPrice/total
    como um único item.
    """
    itens = parse_itens(data['items']) if isinstance(data.get('items'), list) else []
    if not itens and (data.get('productId') or data.get('serviceId')):
        return [parse_item(data)]
    return itens


# =============================================================================
# Base API View
# =============================================================================

@method_decorator(csrf_exempt, name='dispatch')
class BaseAPIView(View):
    """
    View base para APIs JSON.

    Fornece:
    - Parsing de JSON
    - Acesso ao container DI
    - Tratamento de erros padronizado
    """

    def get_container(self):
        return get_container()

    def get_service(self, service_name: str):
        """Obtém service do container."""
        return getattr(self.get_container(), service_name)()

    def parse_body(self, request: HttpRequest) -> Dict:
        return parse_json_body(request)

    def handle_exception(self, e: Exception) -> JsonResponse:
        """
        Trata exceções e retorna resposta apropriada.

        Args:
            e: Exceção capturada

        Returns:
            JsonResponse com erro
        """
        if isinstance(e, ValidationError):
            return json_response(success=False, error=e.message, status=400, meta=e.to_dict())

        if isinstance(e, EntityNotFoundError):
            return json_response(success=False, error=e.message, status=404, meta=e.to_dict())

        if isinstance(e, BusinessRuleViolationError):
            return json_response(success=False, error=e.message, status=400, meta=e.to_dict())

        logger.exception(f"Erro inesperado na API: {e}")
        return json_response(
            success=False,
            error="Erro interno do servidor",
            status=500
        )


# =============================================================================
# Ticket API Views
# =============================================================================

class TicketAPIListView(BaseAPIView):
    """
    API para listar e criar tickets.

    GET /api/tickets/ - Lista tickets
    POST /api/tickets/ - Cria ticket
    """

    def get(self, request: HttpRequest) -> JsonResponse:
        """
        Lista tickets.

        Query params:
        - search: Texto livre (cliente, produto, serviço, status)
        - status: Pending | Confirmed | Completed | Cancelled
        - dateFilter: all | today | thisMonth | calendar | custom
        - specificDate: Dia do modo calendar (YYYY-MM-DD)
        - startDate: Início do modo custom (YYYY-MM-DD)
        - page: Página (default: 1)
        - pageSize: Itens por página (default: TICKETS_PAGE_SIZE_PADRAO)
        """
        try:
            query = ListarTicketsQueryDTO(
                busca=request.GET.get('search') or None,
                status=request.GET.get('status') or None,
                filtro_data=request.GET.get('dateFilter') or None,
                data_especifica=parse_dia(request.GET.get('specificDate'), 'specificDate'),
                data_inicio=parse_dia(request.GET.get('startDate'), 'startDate'),
                pagina=parse_inteiro(request.GET.get('page'), 'page') or 1,
                por_pagina=parse_inteiro(request.GET.get('pageSize'), 'pageSize'),
            )

            resultado = self.get_service('listar_tickets_service').execute(query)
            corpo = resultado.to_dict()

            return json_response(
                success=True,
                data=corpo['data'],
                pagination=corpo['pagination'],
            )

        except Exception as e:
            return self.handle_exception(e)

    def post(self, request: HttpRequest) -> JsonResponse:
        """
        Cria novo ticket.

        Body JSON:
        {
            "clientId": "string (obrigatório)",
            "staffId": "string (obrigatório)",
            "status": "Pending|Confirmed|Completed|Cancelled (obrigatório)",
            "items": [{"productId"|"serviceId", "quantity", "unitPrice", "total", "discount"}],
            "notes": "string (opcional)",
            "startTime": "ISO 8601 (opcional)",
            "endTime": "ISO 8601 (opcional)",
            "duration": minutos (opcional)
        }
        """
        try:
            data = self.parse_body(request)

            input_dto = CriarTicketInputDTO(
                cliente_id=data.get('clientId') or None,
                profissional_id=data.get('staffId') or None,
                status=data.get('status') or None,
                itens=tuple(parse_itens_criacao(data)),
                observacoes=data.get('notes') or '',
                inicio=parse_instante(data.get('startTime'), 'startTime'),
                fim=parse_instante(data.get('endTime'), 'endTime'),
                duracao_minutos=parse_inteiro(data.get('duration'), 'duration'),
            )

            output = self.get_service('criar_ticket_service').execute(input_dto)

            logger.info(f"API: Ticket criado: {output.id}")

            return json_response(success=True, data=output.to_dict(), status=201)

        except Exception as e:
            return self.handle_exception(e)


class TicketAPIDetailView(BaseAPIView):
    """
    API para operações em ticket específico.

    GET /api/tickets/<id>/ - Obter ticket
    PATCH /api/tickets/<id>/ - Atualizar ticket
    DELETE /api/tickets/<id>/ - Excluir ticket
    """

    CAMPOS = {
        'clientId': 'cliente_id',
        'staffId': 'profissional_id',
        'status': 'status',
        'notes': 'observacoes',
    }

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            ticket = self.get_service('obter_ticket_service').execute(pk)
            return json_response(success=True, data=ticket.to_dict())

        except Exception as e:
            return self.handle_exception(e)

    def patch(self, request: HttpRequest, pk: str) -> JsonResponse:
        """
        Atualiza ticket parcialmente.

        Apenas as chaves presentes são aplicadas; `items` substitui
        todos os itens (lista vazia remove todos).
        """
        try:
            data = self.parse_body(request)

            campos = {
                destino: data[origem]
                for origem, destino in self.CAMPOS.items()
                if origem in data
            }
            if 'startTime' in data:
                campos['inicio'] = parse_instante(data['startTime'], 'startTime')
            if 'endTime' in data:
                campos['fim'] = parse_instante(data['endTime'], 'endTime')
            if 'duration' in data:
                campos['duracao_minutos'] = parse_inteiro(data['duration'], 'duration')
            if 'items' in data:
                campos['itens'] = tuple(parse_itens(data['items']))

            input_dto = AtualizarTicketInputDTO(ticket_id=pk, **campos)
            output = self.get_service('atualizar_ticket_service').execute(input_dto)

            return json_response(success=True, data=output.to_dict())

        except Exception as e:
            return self.handle_exception(e)

    def delete(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            ticket_id = self.get_service('excluir_ticket_service').execute(pk)

            logger.info(f"API: Ticket {ticket_id} excluído")

            return json_response(success=True, data={'id': ticket_id})

        except Exception as e:
            return self.handle_exception(e)
