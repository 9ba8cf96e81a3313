import enum


class ReceptionStatus(str, enum.Enum):
    IN_PROGRESS = "in_progress"  # Приёмка открыта, в неё можно добавлять и удалять товары
    CLOSED = "closed"  # Приёмка закрыта окончательно и больше не может быть открыта


class UserRole(str, enum.Enum):
    CLIENT = "client"
    EMPLOYEE = "employee"
    MODERATOR = "moderator"
