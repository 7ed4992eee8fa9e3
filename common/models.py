from enum import Enum
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_FILE_TIMEOUT_MS = 200


class WatchState(str, Enum):
    STARTING = "starting"
    WATCHING = "watching"
    STOPPED = "stopped"


class WatchOptions(BaseModel):
    """Options recognised by a watch session.

    ``file_timeout`` is the quiet period, in milliseconds, a file must stay
    untouched before a change is considered settled. ``0`` or ``None`` makes
    the emission fire synchronously with the raw event.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    file_timeout: Optional[int] = Field(
        default=DEFAULT_FILE_TIMEOUT_MS, ge=0, alias="fileTimeout"
    )

    @property
    def is_eager(self) -> bool:
        return not self.file_timeout

    @classmethod
    def coerce(
        cls, options: Union["WatchOptions", Mapping[str, Any], None]
    ) -> "WatchOptions":
        if isinstance(options, cls):
            return options
        return cls.model_validate(dict(options or {}))
