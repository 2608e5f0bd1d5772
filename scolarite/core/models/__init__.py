from scolarite.core.models.record import Record

__all__ = [
    "Record",
]
