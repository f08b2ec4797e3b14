"""Plugin package initialiser.

Kept side-effect free: concrete plugins (``logging``, ``pydantic``) register
themselves when imported, which ``smartnav.__init__`` does eagerly.
"""

__all__: list[str] = []
