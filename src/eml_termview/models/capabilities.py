"""Terminal capability flags passed explicitly through a render."""

from typing import Optional

from pydantic import BaseModel, Field


class Capabilities(BaseModel):
    """What the target terminal can display."""

    hyperlinks: bool = Field(False, description="OSC-8 hyperlinks are understood")
    raster_images: bool = Field(False, description="Graphics protocol images are shown")
    cell_height: Optional[int] = Field(
        None, description="Pixels per text row; None means detect on first image"
    )

    model_config = {"frozen": True}
