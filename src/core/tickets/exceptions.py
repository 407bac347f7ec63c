"""
Exceções específicas do motor de Tickets.

Todas são violações de regra de negócio: lançadas durante a composição
do pedido, a reserva de estoque ou a geração de identificador, e
reportadas ao chamador como erro recuperável (corrigir entrada e repetir).
"""

from src.core.shared.exceptions import BusinessRuleViolationError


class EstoqueInsuficienteError(BusinessRuleViolationError):
    """Estoque disponível menor que a quantidade somada no pedido."""

    def __init__(self, produto_id: str, requerido: int, disponivel: int):
        self.produto_id = produto_id
        self.requerido = requerido
        self.disponivel = disponivel
        super().__init__(
            f"Estoque insuficiente para o produto {produto_id}: "
            f"requerido {requerido}, disponível {disponivel}",
            rule="estoque_insuficiente",
        )

    def to_dict(self) -> dict:
        result = super().to_dict()
        result.update({
            "produto_id": self.produto_id,
            "requerido": self.requerido,
            "disponivel": self.disponivel,
        })
        return result


class ProdutoInvalidoError(BusinessRuleViolationError):
    """Item referencia produto inexistente."""

    def __init__(self, produto_id: str):
        self.produto_id = produto_id
        super().__init__(
            f"Produto inválido nos itens do ticket: {produto_id}",
            rule="produto_invalido",
        )


class ServicoInvalidoError(BusinessRuleViolationError):
    """Item referencia serviço inexistente."""

    def __init__(self, servico_id: str):
        self.servico_id = servico_id
        super().__init__(
            f"Serviço inválido nos itens do ticket: {servico_id}",
            rule="servico_invalido",
        )


class GeracaoIdEsgotadaError(BusinessRuleViolationError):
    """Todas as tentativas de gerar um ID livre colidiram."""

    def __init__(self, tentativas: int):
        self.tentativas = tentativas
        super().__init__(
            f"Não foi possível gerar um ID único de ticket após {tentativas} tentativas",
            rule="geracao_id_esgotada",
        )


class ConflitoAgendamentoError(BusinessRuleViolationError):
    """Janela do ticket sobrepõe outro atendimento do mesmo profissional."""

    def __init__(self, profissional_id: str):
        self.profissional_id = profissional_id
        super().__init__(
            f"Profissional {profissional_id} já possui atendimento neste horário",
            rule="conflito_agendamento",
        )
