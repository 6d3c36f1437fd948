"""
Annotation settings.

Pydantic model for the knobs of the annotation pipeline, loadable from a
YAML file.

Example YAML:
    ```yaml
    annotation:
      marker_style: label_suffix
      start_suffix: " (start)"
      accepting_shape: doublecircle
      rankdir: LR
      width: 800
    ```
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator

from .layout import RANKDIRS
from .markers import MarkerStyle, RoleMarkers, check_label_suffix


class AnnotationSettings(BaseModel):
    """
    Annotation pipeline configuration.

    Attributes:
        marker_style: How the start role is encoded (shape or label suffix)
        start_shape: Node shape marking the start state
        accepting_shape: Double-outline node shape marking accepting states
        plain_shape: Explicit shape for all other states
        start_suffix: Label suffix marking the start state (label_suffix style)
        rankdir: Layout direction injected into the description
        width: Layout width hint in pixels handed to the renderer
    """

    marker_style: MarkerStyle = Field(MarkerStyle.SHAPE, description="Start marker encoding")
    start_shape: str = Field("Mcircle", min_length=1, description="Start state shape")
    accepting_shape: str = Field("doublecircle", min_length=1, description="Accepting state shape")
    plain_shape: str = Field("circle", min_length=1, description="Plain state shape")
    start_suffix: str = Field(" ▸", min_length=1, description="Start label suffix")
    rankdir: str = Field("LR", description="Graphviz rank direction")
    width: Optional[int] = Field(None, gt=0, le=20000, description="Layout width hint (px)")

    model_config = {"extra": "forbid"}

    @field_validator("rankdir", mode="before")
    @classmethod
    def normalize_rankdir(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.upper()
            if v not in RANKDIRS:
                raise ValueError(f"rankdir must be one of {', '.join(RANKDIRS)}")
        return v

    @field_validator("start_shape", "accepting_shape", "plain_shape")
    @classmethod
    def check_shape(cls, v: str) -> str:
        if not v.isidentifier():
            raise ValueError(f"shape must be a bare Graphviz shape name, got {v!r}")
        return v

    @field_validator("start_suffix")
    @classmethod
    def check_suffix(cls, v: str) -> str:
        return check_label_suffix(v)

    def markers(self) -> RoleMarkers:
        """Build the marker encoding described by these settings."""
        return RoleMarkers(
            style=self.marker_style,
            start_shape=self.start_shape,
            accepting_shape=self.accepting_shape,
            plain_shape=self.plain_shape,
            start_suffix=self.start_suffix,
        )

    @classmethod
    def default(cls) -> "AnnotationSettings":
        return cls()

    @classmethod
    def from_yaml(cls, config: Optional[Dict[str, Any]]) -> "AnnotationSettings":
        """
        Parse settings from a YAML configuration dictionary.

        Accepts either the settings mapping itself or a document with an
        ``annotation`` section.

        Raises:
            ValidationError: If the configuration is invalid
        """
        if not config:
            return cls.default()
        if isinstance(config.get("annotation"), dict):
            config = config["annotation"]
        return cls(**config)


def load_settings(path: Union[str, Path]) -> AnnotationSettings:
    """
    Load settings from a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a YAML mapping
        ValidationError: If the configuration is invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")

    config = yaml.safe_load(path.read_text(encoding="utf-8"))
    if config is not None and not isinstance(config, dict):
        raise ValueError(f"Settings file must contain a mapping, got {type(config).__name__}")
    return AnnotationSettings.from_yaml(config)
