"""Контекст вызова и проверка ролей.

CallContext поставляется внешним механизмом аутентификации: проверенная
идентичность вызывающего и нативная сумма, приложенная к вызову.

require_role — явная проверка (caller, role) с возвратом AccessGrant; ledger
не опирается на неявные привилегии.
"""

from dataclasses import dataclass
from enum import Enum

from src.core.domain.amounts import validate_amount
from src.market.errors import NotOwner, Unauthorized


class Role(str, Enum):
    """Роль, требуемая операцией."""

    OPERATOR = "operator"  # Оператор маркетплейса
    CUSTODIAN = "custodian"  # Текущий держатель актива


@dataclass(frozen=True)
class CallContext:
    """Проверенная идентичность вызывающего и приложенная сумма."""

    caller: str
    value: int = 0

    def __post_init__(self):
        if not self.caller:
            raise ValueError("caller must be a non-empty identity")
        validate_amount(self.value, "value")


@dataclass(frozen=True)
class AccessGrant:
    """Подтверждение, что caller обладает ролью role."""

    caller: str
    role: Role


def require_role(ctx: CallContext, role: Role, holder: str) -> AccessGrant:
    """
    Проверка роли вызывающего.

    Args:
        ctx: контекст вызова
        role: требуемая роль
        holder: идентичность, которой роль принадлежит сейчас
            (оператор для OPERATOR, текущий custodian для CUSTODIAN)

    Returns:
        AccessGrant при совпадении

    Raises:
        Unauthorized: caller не оператор
        NotOwner: caller не текущий custodian
    """
    if ctx.caller == holder:
        return AccessGrant(caller=ctx.caller, role=role)

    if role == Role.OPERATOR:
        raise Unauthorized(f"{ctx.caller!r} is not the marketplace operator")
    raise NotOwner(f"{ctx.caller!r} is not the current custodian ({holder!r})")
