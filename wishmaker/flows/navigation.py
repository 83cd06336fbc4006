"""Top-level views and the three public addresses: ``/``, ``/create`` and
``/wishes/{slug}``."""

from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel

from wishmaker.flows.wish_view import WishView
from wishmaker.flows.wizard import WishWizard, WizardStep
from wishmaker.errors import WizardStateError


class View(str, Enum):
    HOME = "home"
    CREATE = "create"
    WISH = "wish"


class Route(BaseModel):
    view: View
    slug: Optional[str] = None


def resolve_path(path: str) -> Route:
    """Map an address to a view. Unknown addresses show the home page."""
    path = path.split("?", 1)[0].split("#", 1)[0]
    if path.startswith("/wishes/"):
        slug = path[len("/wishes/"):].strip("/")
        if slug and "/" not in slug:
            return Route(view=View.WISH, slug=slug)
    elif path.rstrip("/") == "/create":
        return Route(view=View.CREATE)
    return Route(view=View.HOME)


def path_for(route: Route) -> str:
    if route.view == View.CREATE:
        return "/create"
    if route.view == View.WISH and route.slug:
        return f"/wishes/{route.slug}"
    return "/"


class CelebrationApp:
    """Switches between home, the wizard and a wish page, recording each
    address it moves to in ``history``."""

    def __init__(self, path: str = "/",
                 wizard_factory: Callable[[], WishWizard] = WishWizard,
                 view_factory: Callable[..., WishView] = WishView):
        self._wizard_factory = wizard_factory
        self._view_factory = view_factory
        self.wizard: Optional[WishWizard] = None
        self.wish_view: Optional[WishView] = None
        self.history: list[str] = []

        self.route = resolve_path(path)
        if self.route.view == View.CREATE:
            self.wizard = self._wizard_factory()
        elif self.route.view == View.WISH:
            self.wish_view = self._view_factory(self.route.slug, on_back=self.back_to_home)

    def _push(self, route: Route) -> None:
        self.route = route
        self.history.append(path_for(route))

    def get_started(self) -> WishWizard:
        self.wish_view = None
        self.wizard = self._wizard_factory()
        self._push(Route(view=View.CREATE))
        return self.wizard

    def leave_wizard(self) -> None:
        """Back from the wizard's first step returns home."""
        if self.wizard is not None and self.wizard.step != WizardStep.OCCASION:
            raise WizardStateError("Only the first wizard step leaves the wizard")
        self.back_to_home()

    def complete_wizard(self) -> WishView:
        if self.wizard is None or self.wizard.step != WizardStep.COMPLETE:
            raise WizardStateError("The wizard has not finished")
        return self.open_wish(self.wizard.slug)

    def open_wish(self, slug: str) -> WishView:
        self.wizard = None
        self.wish_view = self._view_factory(slug, on_back=self.back_to_home)
        self._push(Route(view=View.WISH, slug=slug))
        return self.wish_view

    def back_to_home(self) -> None:
        self.wizard = None
        self.wish_view = None
        self._push(Route(view=View.HOME))
