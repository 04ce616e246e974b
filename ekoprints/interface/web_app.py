"""Mini README: FastAPI-powered back office for EKO Prints.

Structure:
    * create_application - application factory wiring routes and templates.
    * Workspace sessions - per-user task board and expense ledger state.

The interface renders the production task board and the expense ledger,
accepts form posts for every dialog and confirmation, serves CSV downloads
and a printable report that opens the print dialog on load. Who is signed
in is read from a cookie set by the user switcher; only the role field is
consulted when deciding what each screen offers.
"""

from __future__ import annotations

from contextlib import asynccontextmanager, contextmanager
from datetime import date
from pathlib import Path
from typing import AsyncIterator, Iterator, Optional

from fastapi import FastAPI, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from ..clock import Clock, now_utc
from ..configuration import BackOfficeSettings, get_settings
from ..directory import User, find_user
from ..export import BrowserPrintSurface
from ..logging_utils import get_logger
from ..store import BackOfficeRepository, InMemoryBackOffice
from ..utils.formatting import format_currency, format_locale_date
from .sessions import SessionRegistry, WorkspaceSession

LOGGER = get_logger(__name__)

USER_COOKIE = "ekoprints_user"


@contextmanager
def _domain_errors() -> Iterator[None]:
    """Translate domain exceptions raised by the views into HTTP errors."""

    try:
        yield
    except PermissionError as error:
        raise HTTPException(status_code=403, detail=str(error)) from error
    except KeyError as error:
        detail = error.args[0] if error.args else "Not found"
        raise HTTPException(status_code=404, detail=str(detail)) from error
    except ValueError as error:
        raise HTTPException(status_code=400, detail=str(error)) from error


def _optional_date(value: str) -> Optional[date]:
    value = value.strip()
    return date.fromisoformat(value) if value else None


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=303)


def create_application(
    repository: Optional[BackOfficeRepository] = None,
    settings: Optional[BackOfficeSettings] = None,
    clock: Clock = now_utc,
) -> FastAPI:
    """Create the FastAPI application with routes and dependencies."""

    settings = settings or get_settings()
    if repository is None:
        repository = InMemoryBackOffice(
            seed_demo=settings.seed_demo_data, clock=clock, zone=settings.zone
        )
    sessions = SessionRegistry(repository, settings, clock=clock)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        sessions.close_all()

    app = FastAPI(title="EKO Prints Back Office", version="0.1.0", lifespan=lifespan)
    templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
    templates.env.filters["currency"] = lambda amount: format_currency(
        amount, settings.currency_code
    )
    templates.env.filters["locale_date"] = format_locale_date
    static_directory = Path(__file__).parent / "static"
    app.mount("/static", StaticFiles(directory=str(static_directory)), name="static")

    def current_user(request: Request) -> User:
        users = repository.snapshot().users
        user = find_user(users, request.cookies.get(USER_COOKIE, ""))
        if user is None:
            user = next((candidate for candidate in users if candidate.is_admin), None)
            user = user or (users[0] if users else None)
        if user is None:
            raise HTTPException(status_code=503, detail="No users are configured.")
        return user

    def workspace(request: Request) -> WorkspaceSession:
        return sessions.for_user(current_user(request))

    def render(
        request: Request, template: str, session: WorkspaceSession, **context: object
    ) -> HTMLResponse:
        return templates.TemplateResponse(
            request,
            template,
            {
                "user": session.user,
                "users": repository.snapshot().users,
                "toasts": session.notifier.drain(),
                "currency": settings.currency_code,
                **context,
            },
        )

    @app.get("/")
    async def index() -> RedirectResponse:
        return _redirect("/tasks")

    @app.post("/session")
    async def switch_user(request: Request, user_id: str = Form(...)) -> RedirectResponse:
        """Remember which user is operating the screens and close the previous board."""

        if find_user(repository.snapshot().users, user_id) is None:
            raise HTTPException(status_code=404, detail=f"User {user_id} not found")
        previous = current_user(request)
        if previous.user_id != user_id:
            sessions.close(previous.user_id)
        response = _redirect("/tasks")
        response.set_cookie(USER_COOKIE, user_id, httponly=True, samesite="lax")
        LOGGER.info("Session switched to %s", user_id)
        return response

    # -- task board -----------------------------------------------------------

    @app.get("/tasks", response_class=HTMLResponse)
    async def task_board(request: Request) -> HTMLResponse:
        """Render the production workflow with live countdowns."""

        session = workspace(request)
        board = session.tasks
        board.mount()
        LOGGER.debug(
            "Rendering task board for %s with %s tasks and %s timers",
            session.user.user_id,
            len(board.visible_tasks),
            board.active_timers,
        )
        return render(
            request,
            "tasks.html",
            session,
            board=board,
            refresh_seconds=int(settings.countdown_interval_seconds),
        )

    @app.get("/countdowns")
    async def countdowns(request: Request) -> JSONResponse:
        board = workspace(request).tasks
        return JSONResponse(
            {
                task.task_id: {
                    "label": board.countdown_for(task).label,
                    "overdue": board.countdown_for(task).is_overdue,
                }
                for task in board.visible_tasks
            }
        )

    @app.post("/tasks/new/open")
    async def open_task_dialog(request: Request) -> RedirectResponse:
        with _domain_errors():
            workspace(request).tasks.open_add()
        return _redirect("/tasks")

    @app.post("/tasks/new/close")
    async def close_task_dialog(request: Request) -> RedirectResponse:
        workspace(request).tasks.close_add()
        return _redirect("/tasks")

    @app.post("/tasks/new")
    async def create_task(
        request: Request,
        title: str = Form(""),
        description: str = Form(""),
        assigned_to: str = Form(""),
        deadline: str = Form(""),
        sale_id: str = Form(""),
    ) -> RedirectResponse:
        """Store the draft and submit it once the required fields are present."""

        board = workspace(request).tasks
        if not board.add_dialog.is_open:
            raise HTTPException(status_code=409, detail="The task dialog is not open.")
        board.add_dialog.draft.update(
            title=title,
            description=description,
            assigned_to=assigned_to,
            deadline=deadline,
            sale_id=sale_id,
        )
        if board.can_submit:
            with _domain_errors():
                await board.submit_add()
        return _redirect("/tasks")

    @app.post("/tasks/{task_id}/advance")
    async def advance_task(request: Request, task_id: str) -> RedirectResponse:
        board = workspace(request).tasks
        with _domain_errors():
            await board.advance(board.get_task(task_id))
        return _redirect("/tasks")

    @app.post("/tasks/{task_id}/pause")
    async def pause_task(request: Request, task_id: str) -> RedirectResponse:
        board = workspace(request).tasks
        with _domain_errors():
            await board.pause(board.get_task(task_id))
        return _redirect("/tasks")

    @app.post("/tasks/{task_id}/delete")
    async def request_task_delete(request: Request, task_id: str) -> RedirectResponse:
        board = workspace(request).tasks
        with _domain_errors():
            board.request_delete(board.get_task(task_id))
        return _redirect("/tasks")

    @app.post("/tasks/delete/confirm")
    async def confirm_task_delete(request: Request) -> RedirectResponse:
        with _domain_errors():
            await workspace(request).tasks.confirm_delete()
        return _redirect("/tasks")

    @app.post("/tasks/delete/cancel")
    async def cancel_task_delete(request: Request) -> RedirectResponse:
        workspace(request).tasks.cancel_delete()
        return _redirect("/tasks")

    # -- expense ledger -------------------------------------------------------

    @app.get("/expenses", response_class=HTMLResponse)
    async def expense_ledger(request: Request) -> HTMLResponse:
        """Render the ledger; leaving the task board stops its countdowns."""

        session = workspace(request)
        session.tasks.unmount()
        ledger = session.expenses
        return render(
            request,
            "expenses.html",
            session,
            ledger=ledger,
            rows=ledger.displayed_expenses(),
            summary=ledger.summary(),
            manager=ledger.category_manager,
        )

    @app.post("/expenses/tab")
    async def select_tab(request: Request, tab: str = Form(...)) -> RedirectResponse:
        with _domain_errors():
            workspace(request).expenses.select_tab(tab)
        return _redirect("/expenses")

    @app.post("/expenses/filters")
    async def apply_filters(
        request: Request,
        user_id: str = Form(""),
        category: str = Form(""),
        date_start: str = Form(""),
        date_end: str = Form(""),
    ) -> RedirectResponse:
        with _domain_errors():
            workspace(request).expenses.set_filters(
                user_id=user_id,
                category=category,
                date_start=_optional_date(date_start),
                date_end=_optional_date(date_end),
            )
        return _redirect("/expenses")

    @app.post("/expenses/filters/clear")
    async def clear_filters(request: Request) -> RedirectResponse:
        workspace(request).expenses.clear_filters()
        return _redirect("/expenses")

    @app.post("/expenses/new/open")
    async def open_expense_dialog(request: Request) -> RedirectResponse:
        workspace(request).expenses.open_add()
        return _redirect("/expenses")

    @app.post("/expenses/new/close")
    async def close_expense_dialog(request: Request) -> RedirectResponse:
        workspace(request).expenses.close_add()
        return _redirect("/expenses")

    @app.post("/expenses/new")
    async def create_expense(
        request: Request,
        date_value: str = Form("", alias="date"),
        category: str = Form(""),
        description: str = Form(""),
        amount: str = Form(""),
    ) -> RedirectResponse:
        ledger = workspace(request).expenses
        if not ledger.add_dialog.is_open:
            raise HTTPException(status_code=409, detail="The expense dialog is not open.")
        with _domain_errors():
            draft = ledger.add_dialog.draft.update(
                date=date_value, category=category, description=description, amount=amount
            )
            if draft.is_complete:
                await ledger.submit_add()
        return _redirect("/expenses")

    @app.post("/expenses/{expense_id}/edit")
    async def open_expense_edit(request: Request, expense_id: str) -> RedirectResponse:
        ledger = workspace(request).expenses
        with _domain_errors():
            ledger.open_edit(ledger.get_expense(expense_id))
        return _redirect("/expenses")

    @app.post("/expenses/edit")
    async def update_expense(
        request: Request,
        date_value: str = Form("", alias="date"),
        category: str = Form(""),
        description: str = Form(""),
        amount: str = Form(""),
    ) -> RedirectResponse:
        ledger = workspace(request).expenses
        if ledger.editing is None:
            raise HTTPException(status_code=409, detail="No expense is being edited.")
        with _domain_errors():
            draft = ledger.edit_dialog.draft.update(
                date=date_value, category=category, description=description, amount=amount
            )
            if draft.is_complete:
                await ledger.submit_edit()
        return _redirect("/expenses")

    @app.post("/expenses/edit/close")
    async def close_expense_edit(request: Request) -> RedirectResponse:
        workspace(request).expenses.close_edit()
        return _redirect("/expenses")

    @app.post("/expenses/{expense_id}/delete")
    async def request_expense_delete(request: Request, expense_id: str) -> RedirectResponse:
        ledger = workspace(request).expenses
        with _domain_errors():
            ledger.request_delete(ledger.get_expense(expense_id))
        return _redirect("/expenses")

    @app.post("/expenses/delete/confirm")
    async def confirm_expense_delete(request: Request) -> RedirectResponse:
        with _domain_errors():
            await workspace(request).expenses.confirm_delete()
        return _redirect("/expenses")

    @app.post("/expenses/delete/cancel")
    async def cancel_expense_delete(request: Request) -> RedirectResponse:
        workspace(request).expenses.cancel_delete()
        return _redirect("/expenses")

    @app.get("/expenses/export.csv")
    async def export_csv(request: Request) -> Response:
        """Download the rows currently shown in the ledger."""

        export = workspace(request).expenses.export_csv()
        return Response(
            content=export.content,
            media_type=export.media_type,
            headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
        )

    @app.get("/expenses/report", response_class=HTMLResponse)
    async def printable_report(request: Request) -> Response:
        """Serve the printable report in the tab the browser just opened."""

        ledger = workspace(request).expenses
        surface = ledger.print_report(BrowserPrintSurface)
        if not isinstance(surface, BrowserPrintSurface):
            return _redirect("/expenses")
        return HTMLResponse(surface.document)

    # -- categories -----------------------------------------------------------

    @app.post("/categories/new/open")
    async def open_category_dialog(request: Request) -> RedirectResponse:
        with _domain_errors():
            workspace(request).expenses.category_manager.open_add()
        return _redirect("/expenses")

    @app.post("/categories/new")
    async def create_category(request: Request, name: str = Form("")) -> RedirectResponse:
        manager = workspace(request).expenses.category_manager
        if not manager.add_dialog.is_open:
            raise HTTPException(status_code=409, detail="The category dialog is not open.")
        manager.add_dialog.draft.name = name
        if manager.add_dialog.draft.is_complete:
            with _domain_errors():
                await manager.submit_add()
        return _redirect("/expenses")

    @app.post("/categories/new/close")
    async def close_category_dialog(request: Request) -> RedirectResponse:
        workspace(request).expenses.category_manager.add_dialog.close()
        return _redirect("/expenses")

    @app.post("/categories/{category_id}/edit")
    async def open_category_edit(request: Request, category_id: str) -> RedirectResponse:
        manager = workspace(request).expenses.category_manager
        with _domain_errors():
            manager.open_edit(manager.get_category(category_id))
        return _redirect("/expenses")

    @app.post("/categories/edit")
    async def rename_category(request: Request, name: str = Form("")) -> RedirectResponse:
        manager = workspace(request).expenses.category_manager
        if manager.editing is None:
            raise HTTPException(status_code=409, detail="No category is being edited.")
        manager.edit_dialog.draft.name = name
        if manager.edit_dialog.draft.is_complete:
            with _domain_errors():
                await manager.submit_edit()
        return _redirect("/expenses")

    @app.post("/categories/edit/close")
    async def close_category_edit(request: Request) -> RedirectResponse:
        workspace(request).expenses.category_manager.close_edit()
        return _redirect("/expenses")

    @app.post("/categories/{category_id}/delete")
    async def request_category_delete(request: Request, category_id: str) -> RedirectResponse:
        manager = workspace(request).expenses.category_manager
        with _domain_errors():
            manager.request_delete(manager.get_category(category_id))
        return _redirect("/expenses")

    @app.post("/categories/delete/confirm")
    async def confirm_category_delete(request: Request) -> RedirectResponse:
        with _domain_errors():
            await workspace(request).expenses.category_manager.confirm_delete()
        return _redirect("/expenses")

    @app.post("/categories/delete/cancel")
    async def cancel_category_delete(request: Request) -> RedirectResponse:
        workspace(request).expenses.category_manager.cancel_delete()
        return _redirect("/expenses")

    app.state.sessions = sessions
    app.state.repository = repository
    return app
