from __future__ import annotations

import datetime
import logging
import sys
from typing import Any, Optional

import pydantic as pd
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.console import Console
from rich.logging import RichHandler

from stackdriver_adapter.core.models.objects import ResourceModel

logger = logging.getLogger("stackdriver-adapter")


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SD_ADAPTER_", frozen=True)

    quiet: bool = pd.Field(False)
    verbose: bool = pd.Field(False)

    # Cluster identity, as reported by the monitored resource labels
    project: str = pd.Field(..., min_length=1)
    cluster: str = pd.Field(..., min_length=1)
    location: str = pd.Field("")

    # Stackdriver Settings
    metrics_prefix: str = pd.Field("custom.googleapis.com", min_length=1)
    resource_model: ResourceModel = pd.Field(ResourceModel.Current)
    request_window: int = pd.Field(300, ge=1, description="The window of each time series query (in whole seconds).")

    # Logging Settings
    log_to_stderr: bool = pd.Field(False)
    width: Optional[int] = pd.Field(None, ge=1)

    _logging_console: Optional[Console] = pd.PrivateAttr(None)

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)

    @pd.field_validator("metrics_prefix")
    @classmethod
    def validate_metrics_prefix(cls, v: str) -> str:
        v = v.rstrip("/")
        if not v:
            raise ValueError("metrics_prefix can't consist of slashes only")
        return v

    @pd.model_validator(mode="after")
    def validate_location(self) -> Config:
        # NOTE: The legacy resource model never filters by location, so it is optional there
        if self.resource_model == ResourceModel.Current and not self.location:
            raise ValueError("location is required for the current resource model")
        return self

    @property
    def request_window_timedelta(self) -> datetime.timedelta:
        return datetime.timedelta(seconds=self.request_window)

    @property
    def project_path(self) -> str:
        return f"projects/{self.project}"

    @property
    def logging_console(self) -> Console:
        if self._logging_console is None:
            self._logging_console = Console(file=sys.stderr if self.log_to_stderr else sys.stdout, width=self.width)
        return self._logging_console

    def configure_logging(self) -> None:
        logging.basicConfig(
            level="NOTSET",
            format="%(message)s",
            datefmt="[%X]",
            handlers=[RichHandler(console=self.logging_console)],
            force=True,
        )
        logging.getLogger("").setLevel(logging.CRITICAL)
        logger.setLevel(logging.DEBUG if self.verbose else logging.CRITICAL if self.quiet else logging.INFO)
