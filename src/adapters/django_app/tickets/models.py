"""
Django Models para o domínio de Tickets.

Estes models são ADAPTERS - implementam a persistência para as
entidades de domínio definidas em src/core/tickets/entities.py.

IMPORTANTE:
- Models NÃO contêm lógica de negócio
- Lógica de negócio fica nas Entities do Core
- Models são mapeados para/de Entities via Mappers

Tabelas:
- clientes, profissionais, produtos, servicos: entidades externas
  referenciadas pelo ticket (somente leitura no motor, exceto estoque)
- tickets: agregado principal
- ticket_itens: linhas do ticket (produto OU serviço)
"""

import uuid

from django.db import models
from django.db.models import Q
from django.utils import timezone


def _uuid() -> str:
    return str(uuid.uuid4())


class TicketStatusChoices(models.TextChoices):
    """Choices para status de ticket (espelha TicketStatus do Core)."""
    PENDENTE = 'Pending', 'Pendente'
    CONFIRMADO = 'Confirmed', 'Confirmado'
    CONCLUIDO = 'Completed', 'Concluído'
    CANCELADO = 'Cancelled', 'Cancelado'


class ClienteModel(models.Model):
    """Cliente referenciado pelo ticket."""

    id = models.CharField(max_length=36, primary_key=True, default=_uuid)
    nome = models.CharField(max_length=200, db_index=True)
    email = models.EmailField(blank=True, default='')
    telefone = models.CharField(max_length=30, blank=True, default='')

    class Meta:
        db_table = 'clientes'
        verbose_name = 'Cliente'
        verbose_name_plural = 'Clientes'
        ordering = ['nome']

    def __str__(self):
        return self.nome


class ProfissionalModel(models.Model):
    """Profissional (staff) que atende o ticket."""

    id = models.CharField(max_length=36, primary_key=True, default=_uuid)
    nome = models.CharField(max_length=200)
    email = models.EmailField(blank=True, default='')

    class Meta:
        db_table = 'profissionais'
        verbose_name = 'Profissional'
        verbose_name_plural = 'Profissionais'
        ordering = ['nome']

    def __str__(self):
        return self.nome


class ProdutoModel(models.Model):
    """
    Produto com estoque.

    O preço unitário padrão de um item de produto é o CUSTO,
    não o preço de venda.
    """

    id = models.CharField(max_length=36, primary_key=True, default=_uuid)
    nome = models.CharField(max_length=200, db_index=True)
    custo = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    preco = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    estoque = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'produtos'
        verbose_name = 'Produto'
        verbose_name_plural = 'Produtos'
        ordering = ['nome']
        constraints = [
            models.CheckConstraint(
                condition=Q(estoque__gte=0),
                name='produto_estoque_nao_negativo',
            ),
        ]

    def __str__(self):
        return f"{self.nome} ({self.estoque})"


class ServicoModel(models.Model):
    """Serviço prestado (sem estoque)."""

    id = models.CharField(max_length=36, primary_key=True, default=_uuid)
    nome = models.CharField(max_length=200, db_index=True)
    preco = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    duracao_minutos = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        db_table = 'servicos'
        verbose_name = 'Serviço'
        verbose_name_plural = 'Serviços'
        ordering = ['nome']

    def __str__(self):
        return self.nome


class TicketModel(models.Model):
    """
    Model Django para persistência de Tickets.

    Fields:
        id: ID legível gerado pelo Core (TK-<ano>-<6 chars>)
        cliente / profissional: Referências (PROTECT)
        quantidade / total: Somas dos itens (mantidas pelo Core)
        status: Estado atual (choices)
        inicio / fim: Janela de atendimento (pareados)
        duracao_minutos: Duração derivada ou explícita
        evento_calendario_id: ID opaco na agenda externa
    """

    id = models.CharField(
        max_length=20,
        primary_key=True,
        editable=False,
        help_text="ID legível do ticket"
    )

    cliente = models.ForeignKey(
        ClienteModel,
        on_delete=models.PROTECT,
        related_name='tickets',
    )

    profissional = models.ForeignKey(
        ProfissionalModel,
        on_delete=models.PROTECT,
        related_name='tickets',
    )

    quantidade = models.PositiveIntegerField(default=0)

    total = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    status = models.CharField(
        max_length=20,
        choices=TicketStatusChoices.choices,
        default=TicketStatusChoices.PENDENTE,
        db_index=True,
    )

    observacoes = models.TextField(blank=True, default='')

    inicio = models.DateTimeField(null=True, blank=True)
    fim = models.DateTimeField(null=True, blank=True)
    duracao_minutos = models.PositiveIntegerField(null=True, blank=True)

    evento_calendario_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="ID do evento na agenda externa"
    )

    criado_em = models.DateTimeField(default=timezone.now, db_index=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'tickets'
        verbose_name = 'Ticket'
        verbose_name_plural = 'Tickets'
        ordering = ['-criado_em']
        indexes = [
            models.Index(fields=['status', 'criado_em'], name='tickets_status_criado_idx'),
            models.Index(fields=['profissional', 'inicio'], name='tickets_prof_inicio_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(inicio__isnull=True, fim__isnull=True)
                    | Q(inicio__isnull=False, fim__isnull=False)
                ),
                name='ticket_janela_pareada',
            ),
        ]

    def __str__(self):
        return f"[{self.id}] {self.status}"

    def __repr__(self):
        return f"<TicketModel id={self.id} status={self.status}>"


class ItemTicketModel(models.Model):
    """
    Linha do ticket: referencia exatamente um produto ou um serviço.

    Pertence exclusivamente ao ticket (CASCADE).
    """

    id = models.CharField(max_length=36, primary_key=True, default=_uuid)

    ticket = models.ForeignKey(
        TicketModel,
        on_delete=models.CASCADE,
        related_name='itens',
    )

    produto = models.ForeignKey(
        ProdutoModel,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='itens_ticket',
    )

    servico = models.ForeignKey(
        ServicoModel,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='itens_ticket',
    )

    quantidade = models.PositiveIntegerField(default=1)
    preco_unitario = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    total = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    desconto_percentual = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    posicao = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'ticket_itens'
        verbose_name = 'Item de Ticket'
        verbose_name_plural = 'Itens de Ticket'
        ordering = ['posicao']
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(produto__isnull=False, servico__isnull=True)
                    | Q(produto__isnull=True, servico__isnull=False)
                ),
                name='item_produto_xor_servico',
            ),
        ]

    def __str__(self):
        ref = self.produto_id or self.servico_id
        return f"{self.ticket_id} #{self.posicao} {ref} x{self.quantidade}"
