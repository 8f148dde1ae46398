"""Site models for the preview and outline endpoints."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from pagesmith.kernel.types import Section


class PreviewSection(BaseModel):
    """One content record as the editor holds it, saved or not."""

    model_config = {"extra": "forbid"}

    id: str = Field(min_length=1)
    declared_type: str
    content: Any = Field(default_factory=dict)  # malformed payloads render degraded, not 422
    position: int = 0
    status: Literal["draft", "published"] = "draft"
    styling_overrides: dict[str, Any] | None = None
    anchor_id: str | None = None

    def to_section(self, page_id: str) -> Section:
        return Section(
            id=self.id,
            page_id=page_id,
            declared_type=self.declared_type,
            content=self.content,
            position=self.position,
            status=self.status,
            styling=self.styling_overrides,
            anchor_id=self.anchor_id,
        )


class PreviewRequest(BaseModel):
    """What the editor sends to POST /api/preview."""

    model_config = {"extra": "forbid"}

    page_id: str = "preview"
    title: str = ""
    site_name: str = ""
    sections: list[PreviewSection] = Field(default_factory=list)
    site_header: dict[str, Any] | None = None
    site_footer: dict[str, Any] | None = None
    page_header: dict[str, Any] | None = None
    page_footer: dict[str, Any] | None = None
    theme: dict[str, Any] | None = None
    color_mode: Literal["light", "dark", "system", "user_choice"] = "light"
    hovered_id: str | None = None
    selected_id: str | None = None


class OutlineRow(BaseModel):
    """One row of the editor's section outline."""

    id: str
    declared_type: str
    primitive: str
    preset: str | None
    label: str
    position: int
    status: str
    anchor_id: str | None = None


class OutlineResponse(BaseModel):
    """What the outline endpoint returns."""

    page_id: str
    header_id: str | None = None
    footer_id: str | None = None
    rows: list[OutlineRow]
