# layout_engine/request.py
"""
Layout request payload models.

A layout request is the structured form of a user's arrangement intent
("group employees around their company"). Natural-language understanding
happens elsewhere; this module only validates the shape of its output.

Field names accept both snake_case and the camelCase used on the wire
(`nodeType`, `groupBy`, `spatialPriority`, `nearTo`, ...).
"""

from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Strategy(str, Enum):
    """Layout strategy tags understood by the parser."""
    HIERARCHICAL_GROUPING = 'hierarchical-grouping'
    FORCE_DIRECTED = 'force-directed'
    RADIAL = 'radial'
    TEMPORAL = 'temporal'
    SEMANTIC = 'semantic'


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')


class RoleSpec(_Payload):
    """One role slot (primary / secondary / tertiary) of a request."""
    node_type: Optional[str] = Field(None, alias='nodeType', description="Node type filling this role")
    role: Optional[str] = Field(None, description="Free-form role name, e.g. 'group-center'")
    group_by: Optional[str] = Field(None, alias='groupBy', description="Relationship description")
    spatial_priority: Optional[str] = Field(None, alias='spatialPriority', description="'high' or other")
    near_to: Optional[str] = Field(None, alias='nearTo', description="Proximity target")


class LayoutHints(_Payload):
    """Per-request force modifications and axis hints."""
    type: Optional[str] = Field(None, description="Layout family hint (informational)")
    modifications: Dict[str, Union[str, Dict[str, str]]] = Field(
        default_factory=dict,
        description="Pair key ('A-B' or 'A-B via Rel') -> force description",
    )
    time_axis: Optional[str] = Field(None, alias='timeAxis')
    group_by_axis: Dict[str, str] = Field(default_factory=dict, alias='groupByAxis')
    attributes: Optional[List[str]] = Field(None, description="Attributes for semantic layouts")
    algorithm: Optional[str] = Field(None, description="Semantic projection algorithm")


class VisualHints(_Payload):
    emphasis: Optional[str] = None
    spacing: Optional[str] = None


class LayoutRequest(_Payload):
    """
    A structured layout request.

    `strategy` is kept as a plain string: unrecognized tags are not a
    validation error, the parser treats them as force-directed.

    Example:
    --------
    >>> LayoutRequest.model_validate({
    ...     "strategy": "hierarchical-grouping",
    ...     "primary": {"nodeType": "Company"},
    ...     "secondary": {"nodeType": "Person", "groupBy": "WorksAt relationship"},
    ... })
    """
    strategy: str = Field(Strategy.FORCE_DIRECTED.value, description="Strategy tag")
    primary: Optional[RoleSpec] = None
    secondary: Optional[RoleSpec] = None
    tertiary: Optional[RoleSpec] = None
    layout: LayoutHints = Field(default_factory=LayoutHints)
    visual: Optional[VisualHints] = None
    original_prompt: Optional[str] = Field(None, alias='originalPrompt')
