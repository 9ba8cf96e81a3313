from collections import Counter, defaultdict
from typing import Dict, Any

from pvz_service.ports.outbound.metrics import BusinessMetrics, DatabaseMetrics

PVZ_CREATED = "pvz_created"
RECEPTIONS_CREATED = "receptions_created"
PRODUCTS_ADDED = "products_added"


class CounterBusinessMetrics(BusinessMetrics):
    """ Счётчики в памяти процесса. Все вызовы происходят в одном event loop """

    def __init__(self):
        self._counter = Counter({PVZ_CREATED: 0, RECEPTIONS_CREATED: 0, PRODUCTS_ADDED: 0})

    def pvz_created(self) -> None:
        self._counter[PVZ_CREATED] += 1

    def reception_created(self) -> None:
        self._counter[RECEPTIONS_CREATED] += 1

    def product_added(self) -> None:
        self._counter[PRODUCTS_ADDED] += 1

    def snapshot(self) -> Dict[str, int]:
        return dict(self._counter)


class CounterDatabaseMetrics(DatabaseMetrics):
    """ Агрегаты длительности запросов по ключу "<таблица>.<операция>" и число занятых соединений пула """

    def __init__(self):
        self._calls = Counter()
        self._errors = Counter()
        self._total_seconds = defaultdict(float)
        self._max_seconds = defaultdict(float)
        self._active_connections = 0

    def observe_query(self, table: str, operation: str, duration_seconds: float, success: bool) -> None:
        key = f"{table}.{operation}"
        self._calls[key] += 1
        if not success:
            self._errors[key] += 1
        self._total_seconds[key] += duration_seconds
        self._max_seconds[key] = max(self._max_seconds[key], duration_seconds)

    def connection_checked_out(self) -> None:
        self._active_connections += 1

    def connection_checked_in(self) -> None:
        self._active_connections -= 1

    def snapshot(self) -> Dict[str, Any]:
        queries = {}
        for key, calls in sorted(self._calls.items()):
            queries[key] = {
                "calls": calls,
                "errors": self._errors[key],
                "total_seconds": self._total_seconds[key],
                "max_seconds": self._max_seconds[key],
            }
        return {"active_connections": self._active_connections, "queries": queries}
