"""
Geração de identificadores legíveis de ticket.

Formato: TK-<ano>-<6 caracteres de [A-Z0-9]> (ex: TK-2026-7QX2LM).

Não é um identificador criptograficamente único: cada candidato é
conferido contra o repositório e, em caso de colisão, sorteado de novo
até um limite fixo de tentativas.
"""

from datetime import datetime
from typing import Callable, Optional
import logging
import re
import secrets
import string

from .exceptions import GeracaoIdEsgotadaError

logger = logging.getLogger(__name__)


ALFABETO = string.ascii_uppercase + string.digits
TAMANHO_SUFIXO = 6
MAX_TENTATIVAS = 10
PADRAO_ID = re.compile(r"^TK-\d{4}-[A-Z0-9]{6}$")


class TicketIdGenerator:
    """
    Gera IDs de ticket com retry limitado em caso de colisão.

    Attributes:
        existe: Verificação de uso (normalmente TicketRepository.exists)
        max_tentativas: Limite de sorteios antes de desistir
        relogio: Fonte do ano corrente

    Example:
        gerador = TicketIdGenerator(existe=ticket_repo.exists)
        ticket_id = gerador.gerar()  # "TK-2026-AB12CD"
    """

    def __init__(
        self,
        existe: Callable[[str], bool],
        max_tentativas: int = MAX_TENTATIVAS,
        relogio: Optional[Callable[[], datetime]] = None,
    ):
        self.existe = existe
        self.max_tentativas = max_tentativas
        self.relogio = relogio or datetime.now

    def candidato(self) -> str:
        """Sorteia um candidato sem consultar o repositório."""
        sufixo = "".join(secrets.choice(ALFABETO) for _ in range(TAMANHO_SUFIXO))
        return f"TK-{self.relogio().year}-{sufixo}"

    def gerar(self) -> str:
        """
        Gera um ID ainda não usado.

        Returns:
            ID livre no momento da consulta

        Raises:
            GeracaoIdEsgotadaError: Se todas as tentativas colidirem
        """
        for tentativa in range(1, self.max_tentativas + 1):
            candidato = self.candidato()
            if not self.existe(candidato):
                return candidato
            logger.warning(
                f"Colisão de ID de ticket: {candidato} "
                f"(tentativa {tentativa}/{self.max_tentativas})"
            )

        logger.error(f"Geração de ID esgotada após {self.max_tentativas} tentativas")
        raise GeracaoIdEsgotadaError(self.max_tentativas)
