"""Pydantic models describing the treetags configuration file."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, model_validator


class BackendConfig(BaseModel):
    url: str = ""
    anon_key: str = ""
    access_token: Optional[str] = None
    timeout_seconds: float = 30.0

    @model_validator(mode="after")
    def check_fields(self) -> "BackendConfig":
        if self.url and not self.url.startswith(("http://", "https://")):
            raise ValueError("url must start with http:// or https://")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self.url = self.url.rstrip("/")
        return self

    @property
    def configured(self) -> bool:
        return bool(self.url and self.anon_key)


class WorkflowConfig(BaseModel):
    source_tag: str = "ui"
    correction_source_tag: str = "admin_correction"
    failure_sample_size: int = 3
    violation_sample_size: int = 3
    ready_notice_seconds: float = 6.0
    tags_view: str = "view_zone_tree_tags"
    tags_table: str = "tree_tags"
    inventory_table: str = "planting_plot_inventory"

    @model_validator(mode="after")
    def check_values(self) -> "WorkflowConfig":
        if not self.correction_source_tag:
            raise ValueError("correction_source_tag must not be empty")
        if self.failure_sample_size < 1 or self.violation_sample_size < 1:
            raise ValueError("sample sizes must be >= 1")
        if self.ready_notice_seconds <= 0:
            raise ValueError("ready_notice_seconds must be positive")
        return self


class ProceduresConfig(BaseModel):
    set_status: str = "set_tree_tag_status_v1"
    correct_status: str = "correct_tree_tag_status_v1"
    create_tag: str = "create_tree_tag"
    create_batch: str = "create_tree_tags_batch"
    tagged_qty: str = "get_tagged_qty"
    lifecycle_by_zone: str = "get_tag_lifecycle_by_zone"
    tag_timeline: str = "get_tag_timeline_v1"


class AppConfig(BaseModel):
    base_url: str = "https://app.avacrm.com"

    @model_validator(mode="after")
    def strip_slash(self) -> "AppConfig":
        self.base_url = self.base_url.rstrip("/")
        return self


class Settings(BaseModel):
    backend: BackendConfig = Field(default_factory=BackendConfig)
    workflow: WorkflowConfig = Field(default_factory=WorkflowConfig)
    procedures: ProceduresConfig = Field(default_factory=ProceduresConfig)
    app: AppConfig = Field(default_factory=AppConfig)
