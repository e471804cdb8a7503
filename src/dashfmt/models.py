from __future__ import annotations

from pydantic import BaseModel, Field


class AppSettings(BaseModel):
    env: str = Field(default="local")
    locale: str = Field(default="en")
    log_level: str = Field(default="WARNING")


class MarkupSettings(BaseModel):
    linkify: bool = Field(default=True, description="Turn bare URLs and e-mails into links")
    breaks: bool = Field(default=True, description="Render single newlines as <br>")


class Settings(BaseModel):
    """
    Shape of configs/settings.yaml. Every section is optional so an empty
    file still yields usable defaults.
    """
    app: AppSettings = Field(default_factory=AppSettings)
    markup: MarkupSettings = Field(default_factory=MarkupSettings)
