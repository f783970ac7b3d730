"""Shared field types — integer ranges of the underlying columns."""

from typing import Annotated

from pydantic import Field

from storefront.core.domain_types import MAX_ID, MAX_QUANTITY

# Upper bounds only: sign rules are checked in the core so they surface
# with the same field names as the service-level rejections
RowId = Annotated[int, Field(le=MAX_ID)]
Quantity = Annotated[int, Field(le=MAX_QUANTITY)]
