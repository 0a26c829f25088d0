from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated

from fastapi import Depends


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


async def get_now() -> datetime:
    # Overridden in tests to pin "today".
    return utc_now()


NowDep = Annotated[datetime, Depends(get_now)]
