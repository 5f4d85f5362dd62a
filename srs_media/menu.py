from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from .lib.prompt import Prompter

logger = logging.getLogger(__name__)


class MenuError(ValueError):
    pass


@dataclass(frozen=True)
class DownloadItem:
    name: str
    urls: Tuple[str, ...]
    message: Optional[str] = None
    variables: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SubMenuItem:
    name: str
    choices: Tuple[str, ...]
    message: Optional[str] = None
    variables: Mapping[str, Any] = field(default_factory=dict)
    has_default: bool = True


@dataclass(frozen=True)
class RedirectItem:
    name: str
    target: str
    variables: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class WarnItem:
    name: str
    message: str
    variables: Mapping[str, Any] = field(default_factory=dict)


MenuItem = Union[DownloadItem, SubMenuItem, RedirectItem, WarnItem]

# (url, label) -> verified local path
Fetcher = Callable[[str, str], Path]


def parse_menu_item(name: str, raw: Mapping[str, Any]) -> MenuItem:
    if not isinstance(raw, Mapping):
        raise MenuError(f"Menu item {name!r} must be a mapping")

    action = raw.get("Action")
    targets = raw.get("Targets")
    message = raw.get("Message")
    variables = dict(raw.get("Variables") or {})

    if action == "Download":
        if not isinstance(targets, list) or not targets:
            raise MenuError(f"Download item {name!r} needs a non-empty Targets list")
        return DownloadItem(name=name, urls=tuple(str(t) for t in targets), message=message, variables=variables)

    if action == "Menu":
        if not isinstance(targets, list) or not targets:
            raise MenuError(f"Menu item {name!r} needs a non-empty Targets list")
        return SubMenuItem(
            name=name,
            choices=tuple(str(t) for t in targets),
            message=message,
            variables=variables,
            has_default=not bool(raw.get("NoDefault", False)),
        )

    if action == "Redirect":
        if not isinstance(targets, Mapping) or not targets.get("Target"):
            raise MenuError(f"Redirect item {name!r} needs Targets.Target")
        return RedirectItem(name=name, target=str(targets["Target"]), variables=variables)

    if action == "Warn":
        if not message:
            raise MenuError(f"Warn item {name!r} needs a Message")
        return WarnItem(name=name, message=str(message), variables=variables)

    raise MenuError(f"Menu item {name!r} has unknown Action {action!r}")


def parse_menu_items(raw: Mapping[str, Any]) -> Dict[str, MenuItem]:
    return {str(name): parse_menu_item(str(name), item) for name, item in raw.items()}


@dataclass
class MenuRun:
    """Everything one pass over the menu tree shares.

    ``variables`` is the bag every visited item merges its Variables into;
    the orchestrator reads it after the pass.
    """

    items: Mapping[str, MenuItem]
    prompter: Prompter
    fetch: Fetcher
    variables: Dict[str, Any] = field(default_factory=dict)
    visited: List[str] = field(default_factory=list)


def resolve(run: MenuRun, name: str, _redirects: Tuple[str, ...] = ()) -> List[Path]:
    """Walk the menu from ``name`` and return the artifacts of the chosen path.

    ``_redirects`` holds the chain of Redirect items that led here; a target
    already on it is a cycle in the kit metadata.
    """

    item = run.items.get(name)
    if item is None:
        raise MenuError(f"Menu refers to undefined item {name!r}")

    run.visited.append(name)
    if item.variables:
        run.variables.update(item.variables)

    if isinstance(item, DownloadItem):
        artifacts: List[Path] = []
        for url in item.urls:
            artifacts.append(run.fetch(url, item.message or item.name))
        return artifacts

    if isinstance(item, SubMenuItem):
        for choice in item.choices:
            if choice not in run.items:
                raise MenuError(f"Menu {name!r} offers undefined item {choice!r}")
        idx = run.prompter.choose(
            item.message or f"Select {name}",
            list(item.choices),
            0 if item.has_default else None,
        )
        return resolve(run, item.choices[idx])

    if isinstance(item, RedirectItem):
        chain = _redirects + (name,)
        if item.target in chain:
            raise MenuError(
                f"Menu redirects form a cycle: {' -> '.join(chain + (item.target,))}"
            )
        logger.debug("Menu item %s redirects to %s", name, item.target)
        return resolve(run, item.target, chain)

    if isinstance(item, WarnItem):
        logger.warning("%s: %s", name, item.message)
        run.prompter.show(item.message)
        return []

    raise TypeError(f"Unhandled menu item type {type(item).__name__}")
