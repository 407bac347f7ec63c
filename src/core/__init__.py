"""
Core do motor de Tickets.

Regras de composição de pedidos, reserva de estoque, identificadores
e agenda. Nada aqui importa Django: persistência, transação e agenda
externa chegam pelas ports definidas em cada domínio.
"""
