"""
Query string parsing for the gallery listing endpoint.
Turns `?page=2&count=5&enabled=1&orderBy[name]=ASC&context=news` into the
raw parameter mapping GalleryResource.list_galleries expects.
"""
from starlette.datastructures import QueryParams
from typing import Any, Dict
import re

from gallery_api.exceptions import FieldError, ValidationFailed

ORDER_BY_KEY = re.compile(r"^orderBy\[(?P<field>[^\[\]]+)\]$")
DIGITS = re.compile(r"^\d+$")
ORDER_DIRECTION = re.compile(r"^(ASC|DESC)$")
BOOLEAN_FLAG = re.compile(r"^(0|1)$")


def parse_listing_params(query_params: QueryParams) -> Dict[str, Any]:
    """
    Build listing parameters from a query string.

    - page, count: must match \\d+
    - enabled: must be 0 or 1; converted to bool, absent stays absent
    - orderBy[<field>]: ASC or DESC, collected into (field, direction) pairs
    - anything else is forwarded as a filter; repeated keys become a list

    Raises:
        ValidationFailed: if a pre-validated parameter has a bad value
    """
    params: Dict[str, Any] = {}
    order_by = []
    errors = []

    for key in query_params.keys():
        values = query_params.getlist(key)
        value = values[-1]

        match = ORDER_BY_KEY.match(key)
        if match:
            if ORDER_DIRECTION.match(value):
                order_by.append((match.group("field"), value))
            else:
                errors.append(FieldError(key, "Direction must be ASC or DESC"))
            continue

        if key in ("page", "count"):
            if DIGITS.match(value):
                params[key] = int(value)
            else:
                errors.append(FieldError(key, "Must match \\d+"))
        elif key == "enabled":
            if BOOLEAN_FLAG.match(value):
                params[key] = value == "1"
            else:
                errors.append(FieldError(key, "Must be 0 or 1"))
        else:
            params[key] = values[0] if len(values) == 1 else values

    if errors:
        raise ValidationFailed(errors)

    if order_by:
        params["orderBy"] = order_by
    return params
