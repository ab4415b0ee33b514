"""Page controllers for the login, signup, dashboard and logout pages.

Each page takes the application handle and the submitted form fields and
returns a PageResult describing what the browser should do next. Pages hold
no state of their own; everything goes through the RecordStore and
SessionManager on the App handle.
"""

from dataclasses import dataclass
from typing import Callable, Mapping, Protocol

from loklagbo.config import Config, get_config
from loklagbo.models import CreateStatus, UserRecord
from loklagbo.record_store import RecordStore
from loklagbo.session import SessionManager
from loklagbo.storage import Storage, open_storage
from loklagbo.utils import first_name, is_valid_email, normalize_email

MSG_EMAIL_REQUIRED = "Please enter your email."
MSG_INVALID_EMAIL = "Please enter a valid email address."
MSG_NO_ACCOUNT = "No account found for this email. Please sign up first."
MSG_FIELDS_REQUIRED = "Please fill in both name and email."
MSG_ALREADY_EXISTS = "An account with this email already exists. Please log in instead."
MSG_UNKNOWN_ROLE = "We couldn't determine your role. Please log in again."

HIRER_SERVICES = (
    "Cleaning",
    "Cooking",
    "Driving",
    "Plumbing",
    "Electrician",
    "House Help",
    "Security",
    "Task Runner",
)

WORKER_STEPS = (
    "Add your skills and availability",
    "Get rated by hirers and grow your reputation",
)


@dataclass
class App:
    """Per-page-load handle on storage, directory and session."""

    config: Config
    storage: Storage
    store: RecordStore
    session: SessionManager

    @classmethod
    def init(cls, config: Config | None = None, storage: Storage | None = None) -> "App":
        """Build the handle at page load.

        Args:
            config: Configuration; defaults to get_config().
            storage: Backing storage; defaults to the file storage from config.
        """
        config = config or get_config()
        storage = storage if storage is not None else open_storage(config)
        return cls(
            config=config,
            storage=storage,
            store=RecordStore(storage, key=config.users_key),
            session=SessionManager(storage, key=config.session_key),
        )


@dataclass(frozen=True)
class DashboardView:
    """Role-specific dashboard content."""

    kind: str
    title: str
    subtitle: str
    items: tuple[str, ...] = ()


@dataclass(frozen=True)
class PageResult:
    """What the page does after handling a request.

    ``message`` is an alert shown to the user; ``redirect`` is the page to
    navigate to, if any.
    """

    redirect: str | None = None
    message: str | None = None
    heading: str | None = None
    view: DashboardView | None = None


class PageFunc(Protocol):
    """Protocol defining page function signature."""

    def __call__(self, app: App, form: Mapping[str, str]) -> PageResult:
        """Handle a page load or form submission.

        Args:
            app: Application handle built by App.init().
            form: Submitted form fields (empty for plain page loads).
        """
        ...


# Global page registry
PAGES: dict[str, PageFunc] = {}


def register_page(name: str) -> Callable[[PageFunc], PageFunc]:
    """Decorator to register a page controller.

    Example:
        @register_page("login")
        def login_page(app: App, form: Mapping[str, str]) -> PageResult:
            ...
    """

    def decorator(func: PageFunc) -> PageFunc:
        PAGES[name] = func
        return func

    return decorator


def get_page(name: str) -> PageFunc | None:
    """Get the controller for a page, or None if not found."""
    return PAGES.get(name)


def render_dashboard(record: UserRecord) -> DashboardView:
    """Pick the dashboard content for a user's role."""
    if record.role == "hirer":
        return DashboardView(
            kind="hirer",
            title="Explore Our Services",
            subtitle="Find trusted help for your home and business.",
            items=HIRER_SERVICES,
        )
    if record.role == "worker":
        return DashboardView(
            kind="worker",
            title="Welcome, Worker",
            subtitle="Set up your profile and start receiving job offers.",
            items=WORKER_STEPS,
        )
    return DashboardView(kind="unknown", title="", subtitle=MSG_UNKNOWN_ROLE)


@register_page("login")
def login_page(app: App, form: Mapping[str, str]) -> PageResult:
    """Log in an existing user by email."""
    email = normalize_email(form.get("email"))
    if not email:
        return PageResult(message=MSG_EMAIL_REQUIRED)
    if not is_valid_email(email):
        return PageResult(message=MSG_INVALID_EMAIL)

    if app.store.get(email) is None:
        return PageResult(message=MSG_NO_ACCOUNT)

    app.session.login(email)
    return PageResult(redirect=app.config.dashboard_page)


def _signup(app: App, role: str, form: Mapping[str, str]) -> PageResult:
    name = (form.get("name") or "").strip()
    email = normalize_email(form.get("email"))

    if not name or not email:
        return PageResult(message=MSG_FIELDS_REQUIRED)

    result = app.store.create(email, role, name)
    if result.status is CreateStatus.INVALID_EMAIL:
        return PageResult(message=MSG_INVALID_EMAIL)
    if result.status is CreateStatus.ALREADY_EXISTS:
        return PageResult(message=MSG_ALREADY_EXISTS, redirect=app.config.login_page)

    app.session.login(result.email)
    return PageResult(redirect=app.config.dashboard_page)


@register_page("signup_hirer")
def signup_hirer_page(app: App, form: Mapping[str, str]) -> PageResult:
    """Sign up as a hirer."""
    return _signup(app, "hirer", form)


@register_page("signup_worker")
def signup_worker_page(app: App, form: Mapping[str, str]) -> PageResult:
    """Sign up as a worker."""
    return _signup(app, "worker", form)


@register_page("dashboard")
def dashboard_page(app: App, form: Mapping[str, str]) -> PageResult:
    """Show the logged-in user's dashboard, or send them to log in."""
    record = app.session.resolve(app.store)
    if record is None:
        return PageResult(redirect=app.config.login_page)

    return PageResult(
        heading=f"Welcome, {first_name(record.name)}!",
        view=render_dashboard(record),
    )


@register_page("logout")
def logout_page(app: App, form: Mapping[str, str]) -> PageResult:
    """Log out and return home."""
    app.session.logout()
    return PageResult(redirect=app.config.home_page)
