# app/models/base.py
from enum import Enum


class LifecycleState(str, Enum):
    """Soft-delete marker shared by users, categories and products."""

    ACTIVE = "ACTIVE"
    DELETED = "DELETED"
