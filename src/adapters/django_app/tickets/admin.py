"""
Django Admin para o motor de Tickets.

Cadastros de apoio (clientes, profissionais, produtos, serviços) e
consulta de tickets com seus itens.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import (
    ClienteModel,
    ItemTicketModel,
    ProdutoModel,
    ProfissionalModel,
    ServicoModel,
    TicketModel,
)


@admin.register(ClienteModel)
class ClienteAdmin(admin.ModelAdmin):
    list_display = ['nome', 'email', 'telefone']
    search_fields = ['id', 'nome', 'email']


@admin.register(ProfissionalModel)
class ProfissionalAdmin(admin.ModelAdmin):
    list_display = ['nome', 'email']
    search_fields = ['id', 'nome']


@admin.register(ProdutoModel)
class ProdutoAdmin(admin.ModelAdmin):
    """Admin para produtos; estoque baixo aparece destacado."""

    list_display = ['nome', 'custo', 'preco', 'estoque_badge']
    search_fields = ['id', 'nome']

    def estoque_badge(self, obj):
        color = '#dc3545' if obj.estoque == 0 else '#28a745'
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color,
            obj.estoque
        )
    estoque_badge.short_description = 'Estoque'


@admin.register(ServicoModel)
class ServicoAdmin(admin.ModelAdmin):
    list_display = ['nome', 'preco', 'duracao_minutos']
    search_fields = ['id', 'nome']


class ItemTicketInline(admin.TabularInline):
    model = ItemTicketModel
    extra = 0
    fields = ['posicao', 'produto', 'servico', 'quantidade', 'preco_unitario',
              'desconto_percentual', 'total']
    readonly_fields = fields
    can_delete = False


@admin.register(TicketModel)
class TicketAdmin(admin.ModelAdmin):
    """Admin para TicketModel (somente leitura dos itens)."""

    list_display = [
        'id',
        'cliente',
        'profissional',
        'status_badge',
        'quantidade',
        'total',
        'inicio',
        'criado_em',
    ]

    list_filter = [
        'status',
        'criado_em',
    ]

    search_fields = [
        'id',
        'cliente__nome',
        'observacoes',
    ]

    readonly_fields = [
        'id',
        'quantidade',
        'total',
        'duracao_minutos',
        'evento_calendario_id',
        'criado_em',
        'atualizado_em',
    ]

    fieldsets = [
        ('Identificação', {
            'fields': ['id', 'cliente', 'profissional', 'status', 'observacoes'],
        }),
        ('Totais', {
            'fields': ['quantidade', 'total'],
        }),
        ('Agenda', {
            'fields': ['inicio', 'fim', 'duracao_minutos', 'evento_calendario_id'],
        }),
        ('Timestamps', {
            'fields': ['criado_em', 'atualizado_em'],
            'classes': ['collapse'],
        }),
    ]

    inlines = [ItemTicketInline]

    ordering = ['-criado_em']

    date_hierarchy = 'criado_em'

    def status_badge(self, obj):
        """Exibe status com badge colorido."""
        colors = {
            'Pending': '#ffc107',
            'Confirmed': '#17a2b8',
            'Completed': '#28a745',
            'Cancelled': '#343a40',
        }
        color = colors.get(obj.status, '#6c757d')
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 8px; '
            'border-radius: 3px; font-size: 11px;">{}</span>',
            color,
            obj.get_status_display()
        )
    status_badge.short_description = 'Status'
