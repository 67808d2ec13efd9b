"""Form element tree and form state exchanged during builder round trips."""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field


class AjaxSettings(BaseModel):
    """Round-trip wiring of an element that triggers a partial refresh."""

    callback: str = Field(description="Name of the server-side callback to run")
    wrapper: str = Field(description="DOM id of the element to replace")


class FormElement(BaseModel):
    """A node of a renderable form tree.

    Children are keyed by their form key so that submitted values and the
    tree share the same paths.
    """

    type: str = Field(default="container", description="Element type")
    title: str | None = Field(default=None, description="Element label")
    name: str | None = Field(default=None, description="Submitted name (buttons, triggers)")
    value: Any = Field(default=None, description="Element value")
    default_value: Any = Field(default=None, description="Initial value of an input")
    options: dict[str, str] | None = Field(default=None, description="Select options")
    multiple: bool = Field(default=False, description="Whether several options can be chosen")
    header: list[str] | None = Field(default=None, description="Table header")
    rows: list[list[str]] | None = Field(default=None, description="Table rows")
    empty: str | None = Field(default=None, description="Text shown for an empty table")
    open: bool | None = Field(default=None, description="Whether a details element is open")
    parents: list[str] | None = Field(default=None, description="Value path of the element")
    attributes: dict[str, str] = Field(default_factory=dict, description="HTML attributes")
    ajax: AjaxSettings | None = Field(default=None, description="Round-trip wiring")
    children: dict[str, "FormElement"] = Field(default_factory=dict, description="Child elements")

    def __getitem__(self, key: str) -> "FormElement":
        return self.children[key]

    def __setitem__(self, key: str, element: "FormElement") -> None:
        self.children[key] = element

    def __contains__(self, key: object) -> bool:
        return key in self.children

    def get(self, key: str) -> "FormElement | None":
        """Get a child element or None."""
        return self.children.get(key)

    @property
    def element_id(self) -> str | None:
        """The DOM id used as an ajax wrapper target."""
        return self.attributes.get("id")


@dataclass
class FormState:
    """Submitted values and the element that triggered the round trip."""

    values: dict[str, Any] = field(default_factory=dict)
    triggering_element: str | None = None

    def get_value(self, *path: str, default: Any = None) -> Any:
        """Read a nested submitted value.

        Args:
            *path: Keys leading to the value.
            default: Returned when any key along the path is missing.
        """
        node: Any = self.values
        for key in path:
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return node
