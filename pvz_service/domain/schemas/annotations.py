from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator


def as_naive_local(value: datetime) -> datetime:
    """ Время в хранилище хранится без часового пояса, в локальном времени сервиса """
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


LocalDatetime = Annotated[datetime, AfterValidator(as_naive_local)]
