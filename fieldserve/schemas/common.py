from typing import Any, ClassVar, Dict, FrozenSet

from pydantic import BaseModel, ConfigDict


class PatchModel(BaseModel):
    """
    Partial update payload.

    Only fields declared on the subclass can reach the store. Omitted fields are
    left alone; an explicit null is applied only to fields listed in NULLABLE
    and ignored elsewhere.
    """

    model_config = ConfigDict(use_enum_values=True)

    NULLABLE: ClassVar[FrozenSet[str]] = frozenset()
    EXTRA: ClassVar[FrozenSet[str]] = frozenset()

    def to_patch(self) -> Dict[str, Any]:
        data = self.model_dump(exclude_unset=True, exclude=set(self.EXTRA))
        return {k: v for k, v in data.items() if v is not None or k in self.NULLABLE}


def empty_to_none(v):
    if v is None:
        return None
    v = str(v).strip()
    return v or None
