"""Action data structures — one closed variant per browser interaction kind.

Actions are read from configuration and never mutated afterwards. The
``type`` tag selects the variant, so an unknown kind or a missing required
field is rejected while the configuration is parsed, before any browser work.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    model_validator,
)
from pydantic.alias_generators import to_camel

from ux_compare.errors import ConfigError

DEFAULT_NAVIGATION_TIMEOUT_MS = 10000

_WAIT_UNTIL_ALIASES = {"networkidle0": "networkidle", "networkidle2": "networkidle"}


def _normalize_wait_until(value: Any) -> Any:
    # Puppeteer-era configs use networkidle0/networkidle2
    if isinstance(value, str):
        return _WAIT_UNTIL_ALIASES.get(value, value)
    return value


WaitUntil = Annotated[
    Literal["load", "domcontentloaded", "networkidle", "commit"],
    BeforeValidator(_normalize_wait_until),
]
ElementState = Literal["attached", "detached", "visible", "hidden"]


class _ConfigModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class _ActionBase(_ConfigModel):
    description: str = ""


class NavigationOptions(_ConfigModel):
    timeout: int = DEFAULT_NAVIGATION_TIMEOUT_MS


class LoadStateOptions(_ConfigModel):
    wait_until: WaitUntil = "domcontentloaded"
    timeout: int = DEFAULT_NAVIGATION_TIMEOUT_MS


class TypeOptions(_ConfigModel):
    delay: Optional[int] = None


class WaitOptions(_ConfigModel):
    state: Optional[ElementState] = None
    visible: bool = False
    hidden: bool = False
    timeout: Optional[int] = None

    def resolved_state(self) -> ElementState:
        """Explicit ``state`` wins over the legacy visible/hidden flags."""
        if self.state:
            return self.state
        if self.visible:
            return "visible"
        if self.hidden:
            return "hidden"
        return "attached"


class GotoAction(_ActionBase):
    type: Literal["goto"]
    url: str
    wait_until: WaitUntil = "networkidle"
    timeout: Optional[int] = None


class ReloadAction(_ActionBase):
    type: Literal["reload"]
    wait_until: WaitUntil = "networkidle"


class ClickAction(_ActionBase):
    type: Literal["click"]
    selector: str
    options: dict[str, Any] = Field(default_factory=dict)
    wait_for_navigation: bool = False
    navigation_options: NavigationOptions = Field(default_factory=NavigationOptions)


class ClickXPathAction(_ActionBase):
    type: Literal["clickXPath"]
    xpath: str
    options: dict[str, Any] = Field(default_factory=dict)


class TypeAction(_ActionBase):
    type: Literal["type"]
    selector: str
    text: str = ""
    options: TypeOptions = Field(default_factory=TypeOptions)


class PressAction(_ActionBase):
    type: Literal["press"]
    key: str
    options: dict[str, Any] = Field(default_factory=dict)


class SelectAction(_ActionBase):
    type: Literal["select"]
    selector: str
    value: Optional[str] = None
    values: Optional[list[str]] = None

    @model_validator(mode="after")
    def _require_value(self) -> "SelectAction":
        if self.values is None and not self.value:
            raise ValueError(f"Select action missing value(s): {self.selector}")
        return self

    def choice(self) -> str | list[str]:
        return self.values if self.values is not None else self.value


class WaitForSelectorAction(_ActionBase):
    type: Literal["waitForSelector"]
    selector: str
    options: WaitOptions = Field(default_factory=WaitOptions)


class WaitForXPathAction(_ActionBase):
    type: Literal["waitForXPath"]
    xpath: str
    options: WaitOptions = Field(default_factory=WaitOptions)


class WaitForTimeoutAction(_ActionBase):
    type: Literal["waitForTimeout"]
    timeout: int = 0


class WaitForNavigationAction(_ActionBase):
    type: Literal["waitForNavigation"]
    options: LoadStateOptions = Field(default_factory=LoadStateOptions)


class SetCookieAction(_ActionBase):
    type: Literal["setCookie"]
    cookies: list[dict[str, Any]] = Field(default_factory=list)


class SetLocalStorageAction(_ActionBase):
    type: Literal["setLocalStorage"]
    items: dict[str, Any] = Field(default_factory=dict)


Action = Annotated[
    Union[
        GotoAction,
        ReloadAction,
        ClickAction,
        ClickXPathAction,
        TypeAction,
        PressAction,
        SelectAction,
        WaitForSelectorAction,
        WaitForXPathAction,
        WaitForTimeoutAction,
        WaitForNavigationAction,
        SetCookieAction,
        SetLocalStorageAction,
    ],
    Field(discriminator="type"),
]

_ACTION_LIST = TypeAdapter(list[Action])


def parse_actions(raw: list[dict[str, Any]]) -> list[Action]:
    """Parse a raw action list, failing on the first bad entry."""
    try:
        return _ACTION_LIST.validate_python(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid action list:\n{e}") from e
