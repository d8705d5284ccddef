"""
Control Request Models
======================

Request bodies accepted by the control surface.

Range checks against the configured temperature bounds happen in the
endpoint, since the bounds come from settings.
"""

from pydantic import BaseModel, Field

from dance_generator.models.output import VisualizationMode


class TemperatureUpdate(BaseModel):
    """Body of PUT /temperature."""

    temperature: float = Field(..., gt=0, description="New sampling temperature")


class VisualizationUpdate(BaseModel):
    """Body of PUT /visualization."""

    mode: VisualizationMode = Field(..., description="Drawing style for renderers")
