"""Field types shared by the account and reading models."""

from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator

from weather_api.utils.timeutils import ensure_utc


# Naive input is read as UTC; everything is stored and compared as aware UTC
UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]
OptionalUtcDatetime = Annotated[Optional[datetime], AfterValidator(ensure_utc)]
