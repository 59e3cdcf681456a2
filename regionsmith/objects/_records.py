"""Shared validation for record-id indexed collections."""

from typing import Any, Optional, Union

import numpy as np
import pandas as pd

from regionsmith.utils.errors import raise_validation_error

CRSLike = Union[str, int, Any]


def coerce_attributes(
    attributes: Optional[Union[pd.DataFrame, dict]],
    index: Optional[Union[pd.Index, list, np.ndarray]],
    n_records: int,
    owner: str,
) -> pd.DataFrame:
    """Return an attribute table of ``n_records`` rows indexed by record id.

    The explicit ``index`` wins over the index of ``attributes``; without
    either a RangeIndex is used. Ids must be unique.
    """
    if attributes is None:
        table = pd.DataFrame(index=pd.RangeIndex(n_records))
    elif isinstance(attributes, pd.DataFrame):
        table = attributes.copy()
    else:
        table = pd.DataFrame(attributes)

    if len(table) != n_records:
        raise_validation_error(
            f"{owner} attributes must have one row per record",
            expected=str(n_records),
            received=str(len(table)),
        )

    if index is not None:
        ids = pd.Index(index)
        if len(ids) != n_records:
            raise_validation_error(
                f"{owner} index must have one id per record",
                expected=str(n_records),
                received=str(len(ids)),
            )
        table.index = ids
    if not table.index.is_unique:
        duplicated = table.index[table.index.duplicated()].unique().tolist()
        raise_validation_error(
            f"{owner} record ids must be unique",
            received=f"duplicated ids {duplicated[:5]}",
            suggestion="Pass an explicit index with one stable id per record.",
        )
    return table
