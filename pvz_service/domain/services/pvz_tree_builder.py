from typing import Iterable, List, Dict
from uuid import UUID

from pvz_service.domain.schemas.pvz import PvzFlatRow, PvzInfo, Pvz, ReceptionInfo, Reception, Product


def build_pvz_tree(rows: Iterable[PvzFlatRow]) -> List[PvzInfo]:
    """
    Собирает дерево ПВЗ -> приёмки -> товары из строк LEFT JOIN.
    Порядок ПВЗ, приёмок и товаров совпадает с порядком первого появления в строках.
    Строки без приёмки (или без товара) дают ПВЗ без приёмок (приёмку без товаров).
    """
    pvz_infos: Dict[UUID, PvzInfo] = {}
    reception_infos: Dict[UUID, ReceptionInfo] = {}
    for row in rows:
        pvz_info = pvz_infos.get(row.pvz_id)
        if pvz_info is None:
            pvz_info = PvzInfo(pvz=Pvz(id=row.pvz_id, city=row.city, registration_date=row.registration_date))
            pvz_infos[row.pvz_id] = pvz_info
        if row.reception_id is None:
            continue
        reception_info = reception_infos.get(row.reception_id)
        if reception_info is None:
            reception = Reception(id=row.reception_id,
                                  pvz_id=row.pvz_id,
                                  date_time=row.reception_date,
                                  status=row.status)
            reception_info = ReceptionInfo(reception=reception)
            reception_infos[row.reception_id] = reception_info
            pvz_info.receptions.append(reception_info)
        if row.product_id is None:
            continue
        reception_info.products.append(Product(id=row.product_id,
                                               reception_id=row.reception_id,
                                               type=row.product_type,
                                               date_time=row.product_date))
    return list(pvz_infos.values())
