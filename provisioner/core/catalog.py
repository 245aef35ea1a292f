"""
Static catalog of installable applications and PowerShell modules.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from ..models.catalog import CatalogItem, Category, ItemKind
from .errors import UnknownCategoryError


def _packages(*pairs: Tuple[str, str]) -> Tuple[CatalogItem, ...]:
    return tuple(CatalogItem(id=item_id, display_name=name, kind=ItemKind.PACKAGE)
                 for item_id, name in pairs)


def _modules(*names: str) -> Tuple[CatalogItem, ...]:
    return tuple(CatalogItem(id=name, display_name=name, kind=ItemKind.MODULE)
                 for name in names)


CATEGORIES: Tuple[Category, ...] = (
    Category(
        name="core",
        description="Shell, terminal and version control",
        items=_packages(
            ("Microsoft.PowerShell", "PowerShell"),
            ("Microsoft.WindowsTerminal", "Windows Terminal"),
            ("Git.Git", "Git"),
            ("JanDeDobbeleer.OhMyPosh", "Oh My Posh"),
        ),
    ),
    Category(
        name="development",
        description="Editors, runtimes and developer CLIs",
        items=_packages(
            ("Microsoft.VisualStudioCode", "Visual Studio Code"),
            ("Python.Python.3.12", "Python 3.12"),
            ("OpenJS.NodeJS.LTS", "Node.js LTS"),
            ("GitHub.cli", "GitHub CLI"),
            ("Neovim.Neovim", "Neovim"),
        ),
    ),
    Category(
        name="infrastructure",
        description="Containers, cloud and infrastructure tooling",
        items=_packages(
            ("Docker.DockerDesktop", "Docker Desktop"),
            ("Kubernetes.kubectl", "kubectl"),
            ("Helm.Helm", "Helm"),
            ("Hashicorp.Terraform", "Terraform"),
            ("Microsoft.AzureCLI", "Azure CLI"),
        ),
    ),
    Category(
        name="utility",
        description="Everyday command line and desktop utilities",
        items=_packages(
            ("7zip.7zip", "7-Zip"),
            ("Microsoft.PowerToys", "PowerToys"),
            ("junegunn.fzf", "fzf"),
            ("BurntSushi.ripgrep.MSVC", "ripgrep"),
            ("jqlang.jq", "jq"),
        ),
    ),
    Category(
        name="shell",
        description="PowerShell profile modules",
        items=_modules(
            "PSReadLine",
            "Terminal-Icons",
            "posh-git",
            "z",
            "PSFzf",
        ),
    ),
)

_BY_NAME: Dict[str, Category] = {category.name: category for category in CATEGORIES}


def category_names(kind: Optional[ItemKind] = None) -> Tuple[str, ...]:
    """Category names in declaration order, optionally limited to one kind."""
    return tuple(c.name for c in CATEGORIES if kind is None or c.kind == kind)


def get_category(name: str) -> Category:
    """Look up a category by name."""
    try:
        return _BY_NAME[name]
    except KeyError:
        raise UnknownCategoryError(name, category_names()) from None


def select(categories: Iterable[str]) -> Tuple[CatalogItem, ...]:
    """
    Union of the items in the given categories.

    Items keep their declaration order within a category and categories are
    concatenated in the order requested. An id requested twice is kept at its
    first position.

    Args:
        categories: Category names

    Returns:
        Ordered tuple of catalog items
    """
    selected: List[CatalogItem] = []
    seen = set()
    for name in categories:
        for item in get_category(name).items:
            if item.id in seen:
                continue
            seen.add(item.id)
            selected.append(item)
    return tuple(selected)
