"""
Migration inicial para o domínio de Tickets.

Cria as tabelas:
- clientes, profissionais, produtos, servicos: entidades referenciadas
- tickets: Tabela principal de tickets
- ticket_itens: Linhas do ticket (produto XOR serviço)
"""

from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone

import src.adapters.django_app.tickets.models


class Migration(migrations.Migration):
    """Migration inicial."""

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='ClienteModel',
            fields=[
                ('id', models.CharField(
                    default=src.adapters.django_app.tickets.models._uuid,
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                )),
                ('nome', models.CharField(db_index=True, max_length=200)),
                ('email', models.EmailField(blank=True, default='', max_length=254)),
                ('telefone', models.CharField(blank=True, default='', max_length=30)),
            ],
            options={
                'verbose_name': 'Cliente',
                'verbose_name_plural': 'Clientes',
                'db_table': 'clientes',
                'ordering': ['nome'],
            },
        ),
        migrations.CreateModel(
            name='ProfissionalModel',
            fields=[
                ('id', models.CharField(
                    default=src.adapters.django_app.tickets.models._uuid,
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                )),
                ('nome', models.CharField(max_length=200)),
                ('email', models.EmailField(blank=True, default='', max_length=254)),
            ],
            options={
                'verbose_name': 'Profissional',
                'verbose_name_plural': 'Profissionais',
                'db_table': 'profissionais',
                'ordering': ['nome'],
            },
        ),
        migrations.CreateModel(
            name='ProdutoModel',
            fields=[
                ('id', models.CharField(
                    default=src.adapters.django_app.tickets.models._uuid,
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                )),
                ('nome', models.CharField(db_index=True, max_length=200)),
                ('custo', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('preco', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('estoque', models.PositiveIntegerField(default=0)),
            ],
            options={
                'verbose_name': 'Produto',
                'verbose_name_plural': 'Produtos',
                'db_table': 'produtos',
                'ordering': ['nome'],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(estoque__gte=0),
                        name='produto_estoque_nao_negativo',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='ServicoModel',
            fields=[
                ('id', models.CharField(
                    default=src.adapters.django_app.tickets.models._uuid,
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                )),
                ('nome', models.CharField(db_index=True, max_length=200)),
                ('preco', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('duracao_minutos', models.PositiveIntegerField(blank=True, null=True)),
            ],
            options={
                'verbose_name': 'Serviço',
                'verbose_name_plural': 'Serviços',
                'db_table': 'servicos',
                'ordering': ['nome'],
            },
        ),
        migrations.CreateModel(
            name='TicketModel',
            fields=[
                ('id', models.CharField(
                    editable=False,
                    help_text='ID legível do ticket',
                    max_length=20,
                    primary_key=True,
                    serialize=False,
                )),
                ('quantidade', models.PositiveIntegerField(default=0)),
                ('total', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('status', models.CharField(
                    choices=[
                        ('Pending', 'Pendente'),
                        ('Confirmed', 'Confirmado'),
                        ('Completed', 'Concluído'),
                        ('Cancelled', 'Cancelado'),
                    ],
                    db_index=True,
                    default='Pending',
                    max_length=20,
                )),
                ('observacoes', models.TextField(blank=True, default='')),
                ('inicio', models.DateTimeField(blank=True, null=True)),
                ('fim', models.DateTimeField(blank=True, null=True)),
                ('duracao_minutos', models.PositiveIntegerField(blank=True, null=True)),
                ('evento_calendario_id', models.CharField(
                    blank=True,
                    help_text='ID do evento na agenda externa',
                    max_length=255,
                    null=True,
                )),
                ('criado_em', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('atualizado_em', models.DateTimeField(auto_now=True)),
                ('cliente', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='tickets',
                    to='tickets.clientemodel',
                )),
                ('profissional', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='tickets',
                    to='tickets.profissionalmodel',
                )),
            ],
            options={
                'verbose_name': 'Ticket',
                'verbose_name_plural': 'Tickets',
                'db_table': 'tickets',
                'ordering': ['-criado_em'],
                'indexes': [
                    models.Index(fields=['status', 'criado_em'], name='tickets_status_criado_idx'),
                    models.Index(fields=['profissional', 'inicio'], name='tickets_prof_inicio_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(
                        condition=(
                            models.Q(inicio__isnull=True, fim__isnull=True)
                            | models.Q(inicio__isnull=False, fim__isnull=False)
                        ),
                        name='ticket_janela_pareada',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='ItemTicketModel',
            fields=[
                ('id', models.CharField(
                    default=src.adapters.django_app.tickets.models._uuid,
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                )),
                ('quantidade', models.PositiveIntegerField(default=1)),
                ('preco_unitario', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('total', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('desconto_percentual', models.DecimalField(decimal_places=2, default=0, max_digits=5)),
                ('posicao', models.PositiveIntegerField(default=0)),
                ('ticket', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='itens',
                    to='tickets.ticketmodel',
                )),
                ('produto', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='itens_ticket',
                    to='tickets.produtomodel',
                )),
                ('servico', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='itens_ticket',
                    to='tickets.servicomodel',
                )),
            ],
            options={
                'verbose_name': 'Item de Ticket',
                'verbose_name_plural': 'Itens de Ticket',
                'db_table': 'ticket_itens',
                'ordering': ['posicao'],
                'constraints': [
                    models.CheckConstraint(
                        condition=(
                            models.Q(produto__isnull=False, servico__isnull=True)
                            | models.Q(produto__isnull=True, servico__isnull=False)
                        ),
                        name='item_produto_xor_servico',
                    ),
                ],
            },
        ),
    ]
