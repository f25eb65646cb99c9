"""Configuration management."""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

HISTORY_NAMESPACE = "adstudio-history"


class Config(BaseModel):
    """Application configuration."""

    # API Keys
    anthropic_api_key: str = Field(
        default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""),
        description="Anthropic API key (script, concepts, ideas)"
    )
    google_application_credentials: str = Field(
        default_factory=lambda: os.getenv("GOOGLE_APPLICATION_CREDENTIALS", ""),
        description="Path to Google Cloud service account JSON"
    )
    google_cloud_project: str = Field(
        default_factory=lambda: os.getenv("GOOGLE_CLOUD_PROJECT", ""),
        description="Google Cloud project ID"
    )
    google_cloud_location: str = Field(
        default_factory=lambda: os.getenv("GOOGLE_CLOUD_LOCATION", "us-central1"),
        description="Vertex AI region"
    )
    veo_output_bucket: str = Field(
        default_factory=lambda: os.getenv("VEO_OUTPUT_BUCKET", ""),
        description="GCS bucket for Veo output"
    )

    # Paths
    workspace: Path = Field(
        default_factory=lambda: Path(os.getenv("ADSTUDIO_WORKSPACE", ".")),
        description="Workspace directory"
    )
    fonts_dir: Optional[Path] = Field(
        default_factory=lambda: Path(os.environ["ADSTUDIO_FONTS_DIR"]) if os.getenv("ADSTUDIO_FONTS_DIR") else None,
        description="Directory holding TrueType fonts for image export"
    )

    # Model settings
    default_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Claude model for scripts and concepts"
    )
    idea_model: str = Field(
        default="claude-3-5-haiku-latest",
        description="Claude model for quick random ideas"
    )
    imagen_model: str = Field(default="imagen-4.0-generate-001")
    veo_model: str = Field(default="veo-3.1-fast-generate-preview")
    veo_extend_model: str = Field(default="veo-3.1-generate-preview")
    tts_model: str = Field(default="gemini-2.5-flash-preview-tts")

    # Collaborator policy
    max_retries: int = Field(default=3, description="Attempts per collaborator call")
    retry_delay: float = Field(default=1.0, description="Linear backoff step in seconds")
    veo_poll_interval: float = Field(default=5.0)
    veo_max_poll_time: float = Field(default=900.0)

    # Export
    export_width: int = Field(default=1920, description="Reference width for still-image export")

    class Config:
        """Pydantic config."""
        frozen = False

    @property
    def state_dir(self) -> Path:
        return self.workspace / ".adstudio"

    @property
    def history_path(self) -> Path:
        """Durable history file, keyed by the history namespace."""
        return self.state_dir / f"{HISTORY_NAMESPACE}.json"

    @property
    def media_dir(self) -> Path:
        return self.state_dir / "media"

    def validate_required(self) -> None:
        """Validate that the text-generation credentials are set."""
        if not self.anthropic_api_key:
            raise ValueError("ANTHROPIC_API_KEY not set")

    def validate_google_required(self) -> None:
        """Validate that Vertex AI / Google Cloud settings are present.

        Raises:
            ValueError: If any required Google configuration is missing.
        """
        missing: list[str] = []

        if not self.google_cloud_project:
            missing.append("GOOGLE_CLOUD_PROJECT")
        if not self.veo_output_bucket:
            missing.append("VEO_OUTPUT_BUCKET")

        if missing:
            raise ValueError(
                f"Missing required Google configuration: {', '.join(missing)}. "
                "Set the corresponding environment variables."
            )

        # Validate bucket format
        if not self.veo_output_bucket.startswith("gs://"):
            raise ValueError(
                f"VEO_OUTPUT_BUCKET must be a GCS URI starting with 'gs://'. "
                f"Got: {self.veo_output_bucket}"
            )


# Global config instance
config = Config()
