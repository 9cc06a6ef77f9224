from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    DIBAYAR = "DIBAYAR"        # paid
    DIKEMAS = "DIKEMAS"        # packed, waiting for a label
    DIKIRIM = "DIKIRIM"        # shipped
    SELESAI = "SELESAI"        # delivered
    EXPIRED = "EXPIRED"
    DIBATALKAN = "DIBATALKAN"  # cancelled


class ActorRole(str, Enum):
    # human roles, mirror UserRole
    CUSTOMER = "CUSTOMER"
    ADMIN = "ADMIN"
    GUDANG = "GUDANG"
    # non-human actors
    PAYMENT_GATEWAY = "PAYMENT_GATEWAY"
    LABEL_GENERATOR = "LABEL_GENERATOR"
    SYSTEM = "SYSTEM"


STAFF_ROLES = frozenset({ActorRole.ADMIN, ActorRole.GUDANG})

# forward sequence; EXPIRED/DIBATALKAN sit outside it
STATUS_SEQUENCE = (
    OrderStatus.PENDING,
    OrderStatus.DIBAYAR,
    OrderStatus.DIKEMAS,
    OrderStatus.DIKIRIM,
    OrderStatus.SELESAI,
)

TERMINAL_STATUSES = frozenset({
    OrderStatus.SELESAI,
    OrderStatus.EXPIRED,
    OrderStatus.DIBATALKAN,
})

# (from, to) -> actors allowed to make that move
ALLOWED_TRANSITIONS = {
    (OrderStatus.PENDING, OrderStatus.DIBAYAR): frozenset({ActorRole.PAYMENT_GATEWAY}),
    (OrderStatus.PENDING, OrderStatus.EXPIRED): frozenset({ActorRole.PAYMENT_GATEWAY, ActorRole.SYSTEM}),
    (OrderStatus.PENDING, OrderStatus.DIBATALKAN): frozenset({
        ActorRole.PAYMENT_GATEWAY,
        ActorRole.ADMIN,
        ActorRole.CUSTOMER,
    }),
    (OrderStatus.DIBAYAR, OrderStatus.DIKEMAS): STAFF_ROLES,
    (OrderStatus.DIKEMAS, OrderStatus.DIKIRIM): frozenset({ActorRole.LABEL_GENERATOR}),
    (OrderStatus.DIKIRIM, OrderStatus.SELESAI): STAFF_ROLES,
}


def status_rank(status: OrderStatus) -> int:
    """Position in the forward sequence; early exits rank after SELESAI."""
    if status in STATUS_SEQUENCE:
        return STATUS_SEQUENCE.index(status)
    return len(STATUS_SEQUENCE)
