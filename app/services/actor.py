from dataclasses import dataclass
from typing import Optional

from app.constants.order_status import ActorRole, STAFF_ROLES


@dataclass(frozen=True)
class Actor:
    """Already-authenticated identity passed explicitly into every lifecycle operation."""

    user_id: Optional[int]
    role: ActorRole

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @property
    def label(self) -> str:
        if self.user_id is None:
            return self.role.value.lower()
        return f"{self.role.value.lower()}:{self.user_id}"


PAYMENT_GATEWAY_ACTOR = Actor(user_id=None, role=ActorRole.PAYMENT_GATEWAY)
LABEL_GENERATOR_ACTOR = Actor(user_id=None, role=ActorRole.LABEL_GENERATOR)
SYSTEM_ACTOR = Actor(user_id=None, role=ActorRole.SYSTEM)
