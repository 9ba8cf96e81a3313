import enum
from typing import Optional, Any, List, Dict

from pydantic import BaseModel, Field


class ConditionOperation(str, enum.Enum):
    GTE = "GTE"
    LTE = "LTE"
    EQ = "EQ"


class BaseField(BaseModel):
    name: str
    value: Any


class UpdateField(BaseField):
    pass


class UpdateFields(BaseModel):
    group: List[UpdateField]

    def to_dict(self) -> Dict[str, Any]:
        return {update_field.name: update_field.value for update_field in self.group}

    @classmethod
    def single(cls, name: str, value: Any):
        return cls(group=[UpdateField(name=name, value=value)])


class FilterField(BaseField):
    operation: ConditionOperation = ConditionOperation.EQ


class FilterFieldsConjunct(BaseModel):
    group: List[FilterField]


class FilterFieldsDNF(BaseModel):
    """ Условие выборки в дизъюнктивной нормальной форме: OR из AND-групп """
    conjunctions: List[FilterFieldsConjunct]

    @classmethod
    def single(cls, name: str, value: Any, operation: ConditionOperation = ConditionOperation.EQ):
        return cls(conjunctions=[FilterFieldsConjunct(group=[FilterField(name=name,
                                                                         value=value,
                                                                         operation=operation)])])

    @classmethod
    def single_conjunct(cls, filter_fields: List[FilterField]):
        return cls(conjunctions=[FilterFieldsConjunct(group=filter_fields)])


class PaginationQuery(BaseModel):
    offset_page: Optional[int] = None
    limit_per_page: Optional[int] = None
    order_by: Optional[str] = None
    asc_sort: Optional[bool] = None
    # Дополнительные поля сортировки для однозначного порядка при равных значениях order_by
    then_order_by: List[str] = Field(default_factory=list)
    filter_fields_dnf: Optional[FilterFieldsDNF] = None

    @classmethod
    def page(cls, page: int, limit: int, **kwargs):
        return cls(offset_page=(page - 1) * limit, limit_per_page=limit, **kwargs)


def date_range_conditions(name: str, start_date=None, end_date=None) -> List[FilterField]:
    """ Условия на независимые необязательные границы диапазона дат (включительно) """
    conditions = []
    if start_date is not None:
        conditions.append(FilterField(name=name, value=start_date, operation=ConditionOperation.GTE))
    if end_date is not None:
        conditions.append(FilterField(name=name, value=end_date, operation=ConditionOperation.LTE))
    return conditions
