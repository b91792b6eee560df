"""Pydantic models for generation requests and job polling."""

from pydantic import AliasChoices, Field

from coinforge.models.common import CamelModel
from coinforge.models.enums import JobStatus

DEFAULT_PROJECT_DESCRIPTION = "memecoin style"


class UserInputs(CamelModel):
    """Branding parameters for one site. Presence is checked by the launcher."""

    coin_name: str | None = Field(None, max_length=200)
    color_palette: str | None = Field(None, max_length=500)
    project_description: str | None = Field(
        None,
        max_length=4000,
        validation_alias=AliasChoices("projectDescription", "projectDesc", "project_description"),
    )

    def missing_fields(self) -> list[str]:
        missing = []
        if not (self.coin_name or "").strip():
            missing.append("coinName")
        if not (self.color_palette or "").strip():
            missing.append("colorPalette")
        return missing

    def prompt_values(self) -> dict[str, str]:
        return {
            "coin_name": (self.coin_name or "").strip(),
            "color_palette": (self.color_palette or "").strip(),
            "project_description": (self.project_description or "").strip()
            or DEFAULT_PROJECT_DESCRIPTION,
        }


class StartGenerationRequest(CamelModel):
    wallet_address: str = Field(..., min_length=1, max_length=200)
    user_inputs: UserInputs


class StartGenerationResponse(CamelModel):
    job_id: str


class ProgressResponse(CamelModel):
    status: JobStatus
    percent: int


class ResultResponse(CamelModel):
    artifact: str
