"""
Operation Descriptor schemas

Field names follow the canvas wire format (camelCase aliases) while the
Python attributes stay snake_case. Both spellings are accepted on input;
outbound payloads are always dumped by alias.
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ElementKind = Literal["rectangle", "frame", "text"]
Priority = Literal["high", "normal", "low"]

# Lower rank runs first
PRIORITY_RANK: Dict[str, int] = {
    "high": 0,
    "normal": 1,
    "low": 2,
}
DEFAULT_PRIORITY = "normal"


class RGBAColor(BaseModel):
    """Color with channels in [0, 1]"""

    r: float = Field(..., ge=0, le=1)
    g: float = Field(..., ge=0, le=1)
    b: float = Field(..., ge=0, le=1)
    a: Optional[float] = Field(default=None, ge=0, le=1)


class ElementStyles(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    fill_color: Optional[RGBAColor] = Field(default=None, alias="fillColor", description="Fill color in RGBA format")
    stroke_color: Optional[RGBAColor] = Field(default=None, alias="strokeColor", description="Stroke color in RGBA format")
    stroke_weight: Optional[float] = Field(default=None, gt=0, alias="strokeWeight", description="Stroke weight")
    corner_radius: Optional[float] = Field(default=None, ge=0, alias="cornerRadius", description="Corner radius")
    font_size: Optional[float] = Field(default=None, gt=0, alias="fontSize", description="Font size")
    font_weight: Optional[float] = Field(default=None, alias="fontWeight", description="Font weight")


class ElementDescriptor(BaseModel):
    """One element to create on the canvas.

    ``parent_id`` may name a node created earlier in the same batch; whether it
    exists is checked by the canvas at execution time, not here.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: ElementKind = Field(..., description="Type of element to create")
    x: float = Field(..., description="X position")
    y: float = Field(..., description="Y position")
    width: Optional[float] = Field(default=None, description="Width of the element")
    height: Optional[float] = Field(default=None, description="Height of the element")
    text: Optional[str] = Field(default=None, description="Text content for text elements")
    name: Optional[str] = Field(default=None, description="Optional name for the element")
    parent_id: Optional[str] = Field(default=None, alias="parentId", description="Optional parent node ID")
    styles: Optional[ElementStyles] = Field(default=None, description="Styling options for the element")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class BundledCommand(BaseModel):
    """One named canvas command; ``params`` is passed through untouched"""

    command: str = Field(..., description="The canvas command to execute")
    params: Any = Field(default=None, description="Parameters for the command")
    priority: Optional[Priority] = Field(default=None, description="Command priority")

    @property
    def effective_priority(self) -> str:
        return self.priority or DEFAULT_PRIORITY

    @property
    def rank(self) -> int:
        return PRIORITY_RANK[self.effective_priority]
