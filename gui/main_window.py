import tkinter as tk
from tkinter import ttk, messagebox as mb, simpledialog
import datetime as dt
from typing import Dict, List, Optional
from core.config import SYNC_INTERVAL_MS, TOPMOST, WINDOW_GEOMETRY
from core.exceptions import VikunjaError
from core.logs import get_logger
from core.models import Project, ProjectTarget, RowTarget, TableTarget, Task
from controller.app_controller import DATE_FIELDS, AppController, parse_date
from gui.task_list import ScrollableTaskList
from services.checklist import checklist_progress

log = get_logger("gui")

PRIORITY_COLORS = {1: "#CBD5E1", 2: "#FDE68A", 3: "#F59E0B", 4: "#EF4444", 5: "#B00020"}
DATE_LABELS = {"start_date": "Start date", "due_date": "Due date", "end_date": "End date"}


class MainWindow(tk.Tk):
    def __init__(self, controller: AppController):
        super().__init__()
        self.controller = controller
        self.title("Vikunja · Task table")
        self.geometry(WINDOW_GEOMETRY)
        self.configure(padx=8, pady=8)
        if TOPMOST:
            self.attributes("-topmost", True)

        top = ttk.Frame(self)
        top.pack(fill="x", pady=(0, 6))
        ttk.Button(top, text="Sync", command=self._sync_all).pack(side="right")
        self.status_var = tk.StringVar(value="Ready")
        ttk.Label(top, textvariable=self.status_var).pack(side="left")

        # tabs double as "move to project" drop targets
        self.nb = ttk.Notebook(self)
        self.nb.pack(fill="both", expand=True)

        self.tabs: Dict[int, "ProjectTab"] = {}
        self._build_tabs()

        self.controller.watcher.callback = self._sync_all
        self.bind("<F5>", lambda e: self._sync_all())
        self.after(SYNC_INTERVAL_MS, self._auto_sync)

    # ---------- tabs ----------
    def _build_tabs(self):
        try:
            projects = self.controller.list_projects()
            user = self.controller.current_user()
        except VikunjaError as e:
            mb.showerror("Projects", f"Could not load projects: {e}")
            return
        if user:
            self.title(f"Vikunja · {user.name or user.username}")
        for p in projects:
            tab = ProjectTab(self.nb, self, self.controller, p)
            self.nb.add(tab, text=p.title or "Project")
            self.tabs[p.id] = tab
        self._sync_all()

    def project_at(self, x_root: int, y_root: int) -> Optional[int]:
        """Project id of the notebook tab under the pointer, if any."""
        x = x_root - self.nb.winfo_rootx()
        y = y_root - self.nb.winfo_rooty()
        try:
            index = self.nb.index(f"@{x},{y}")
        except (tk.TclError, ValueError):
            return None
        if index < 0:
            return None
        tab_widget = self.nametowidget(self.nb.tabs()[index])
        return getattr(tab_widget, "project_id", None)

    # ---------- sync ----------
    def _sync_all(self):
        total = 0
        for tab in self.tabs.values():
            total += tab.refresh()
        self.status_var.set(f"Synced {dt.datetime.now().strftime('%H:%M:%S')} · {total} items")

    def _auto_sync(self):
        try:
            self.controller.watcher.notify()
        finally:
            self.after(SYNC_INTERVAL_MS, self._auto_sync)

    def set_status(self, text: str):
        self.status_var.set(text)


class ProjectTab(ttk.Frame):
    def __init__(self, parent, window: MainWindow, controller: AppController, project: Project):
        super().__init__(parent)
        self.window = window
        self.controller = controller
        self.project_id = project.id
        self.view = controller.view(project.id)
        self.coordinator = self.view.coordinator

        header = ttk.Frame(self)
        header.pack(fill="x", pady=(6, 4))
        ttk.Label(header, text="New task:").pack(side="left")
        self.entry = ttk.Entry(header)
        self.entry.pack(side="left", fill="x", expand=True, padx=6)
        self.entry.bind("<Return>", self._on_add)
        ttk.Button(header, text="Add", command=self._on_add).pack(side="left")

        self.task_list = ScrollableTaskList(
            self,
            on_toggle=self._on_toggle_cb,
            on_menu=self._on_menu_cb,
            on_drag_start=self._on_drag_start,
            on_drag_motion=self._on_drag_motion,
            on_drop=self._on_drop,
        )
        self.task_list.pack(fill="both", expand=True)

    # ---------- data ----------
    def refresh(self) -> int:
        try:
            tasks = self.controller.list_project_tasks(self.project_id)
            rows = self.task_list.set_tasks([_row_data(t) for t in tasks])
            result = self.view.open_view(rows, tasks)
        except VikunjaError as e:
            log.warning("sync of project %s failed: %s", self.project_id, e)
            self.window.set_status(f"Sync error: {e}")
            return 0
        self.task_list.show_rows(result.rows)
        return len(tasks)

    def _redraw_task(self, task_id: int):
        task = self.view.store.get(task_id)
        if task:
            data = _row_data(task)
            self.task_list.update_task(task_id, text=data["text"], done=data["done"], tags=data["tags"])

    def _targets(self, task_id: int) -> List[int]:
        """The bulk selection if task_id is part of it, else just task_id."""
        selected = self.task_list.selected_task_ids()
        return selected if task_id in selected else [task_id]

    # ---------- callbacks from the list ----------
    def _on_toggle_cb(self, task_id: int, done: bool):
        ids = self._targets(task_id)
        try:
            self.view.set_done(ids, done)
        except VikunjaError as e:
            self.window.set_status(f"Update error: {e}")
        for i in ids:
            self._redraw_task(i)

    def _on_menu_cb(self, task_id: int):
        ids = self._targets(task_id)
        menu = tk.Menu(self, tearoff=False)
        menu.add_command(label="Rename", command=lambda: self._rename(task_id))

        prio = tk.Menu(menu, tearoff=False)
        for p in range(6):
            prio.add_command(label=str(p) if p else "Unset",
                             command=lambda p=p: self._bulk(ids, self.view.set_priority, p))
        menu.add_cascade(label="Priority", menu=prio)

        progress = tk.Menu(menu, tearoff=False)
        for pct in (0, 25, 50, 75, 100):
            progress.add_command(label=f"{pct}%",
                                 command=lambda pct=pct: self._bulk(ids, self.view.set_progress, pct))
        menu.add_cascade(label="Progress", menu=progress)

        dates = tk.Menu(menu, tearoff=False)
        for field in DATE_FIELDS:
            sub = tk.Menu(dates, tearoff=False)
            sub.add_command(label="Set…", command=lambda f=field: self._edit_date(ids, task_id, f))
            sub.add_command(label="Clear", command=lambda f=field: self._set_date(ids, f, None))
            dates.add_cascade(label=DATE_LABELS[field], menu=sub)
        menu.add_cascade(label="Dates", menu=dates)
        try:
            menu.tk_popup(self.winfo_pointerx(), self.winfo_pointery())
        finally:
            menu.grab_release()

    def _bulk(self, ids: List[int], action, value):
        try:
            action(ids, value)
        except VikunjaError as e:
            self.window.set_status(f"Update error: {e}")
        for i in ids:
            self._redraw_task(i)

    def _edit_date(self, ids: List[int], task_id: int, field: str):
        task = self.view.store.get(task_id)
        current = str(task.get(field) or "") if task else ""
        if current.startswith("0001-"):
            current = ""
        text = simpledialog.askstring(
            DATE_LABELS[field], "Date (YYYY-MM-DD or YYYY-MM-DD HH:MM, empty to clear):",
            initialvalue=current[:16].replace("T", " "), parent=self,
        )
        if text is None:
            return
        try:
            value = parse_date(text)
        except ValueError:
            mb.showerror(DATE_LABELS[field], f"Not a date: {text}")
            return
        self._set_date(ids, field, value)

    def _set_date(self, ids: List[int], field: str, value):
        self._bulk(ids, lambda task_ids, v: self.view.set_date(task_ids, field, v), value)

    def _rename(self, task_id: int):
        task = self.view.store.get(task_id)
        title = simpledialog.askstring("Rename", "Title:", initialvalue=task.title if task else "", parent=self)
        if not title or not title.strip():
            return
        try:
            self.view.rename_task(task_id, title)
        except VikunjaError as e:
            self.window.set_status(f"Rename error: {e}")
        self._redraw_task(task_id)

    # ---------- drag & drop ----------
    def _target_at(self, x_root: int, y_root: int):
        row = self.task_list.row_at(x_root, y_root)
        if row is not None:
            return RowTarget(row.task_id)
        if self.task_list.contains(x_root, y_root):
            return TableTarget()
        project_id = self.window.project_at(x_root, y_root)
        if project_id is not None:
            return ProjectTarget(project_id)
        return None

    def _on_drag_start(self, task_id: int) -> bool:
        return self.coordinator.begin(task_id, self.task_list.selected_task_ids())

    def _on_drag_motion(self, x_root: int, y_root: int):
        self.task_list.clear_drop_highlight()
        target = self._target_at(x_root, y_root)
        if not isinstance(target, RowTarget):
            return
        try:
            valid = self.coordinator.can_drop(target)
        except VikunjaError:
            valid = False
        if valid:
            row = self.task_list.row_at(x_root, y_root)
            row.set_drop_highlight(True)

    def _on_drop(self, x_root: int, y_root: int):
        self.task_list.clear_drop_highlight()
        target = self._target_at(x_root, y_root)
        if target is None:
            self.coordinator.cancel()
            return
        try:
            result = self.coordinator.drop(target, self.task_list.rows)
        except VikunjaError as e:
            mb.showerror("Move", f"Could not move tasks: {e}")
            return
        if result is not None:
            self.task_list.show_rows(result.rows)
            if isinstance(target, ProjectTarget) and target.project_id in self.window.tabs:
                self.window.tabs[target.project_id].refresh()

    # ---------- header actions ----------
    def _on_add(self, event=None):
        text = self.entry.get().strip()
        if not text:
            return
        try:
            self.view.add_task(text)
        except VikunjaError as e:
            self.window.set_status(f"Add error: {e}")
        finally:
            self.entry.delete(0, "end")
            self.refresh()


def _row_data(task: Task) -> Dict:
    tags = []
    pri = task.get("priority") or 0
    if pri:
        tags.append((f"P{pri}", PRIORITY_COLORS.get(pri, "#F59E0B")))

    percent = task.get("percent_done") or 0
    checklist = checklist_progress(task.get("description") or "")
    if percent:
        tags.append((f"{round(percent * 100)}%", "#A78BFA"))
    elif checklist:
        tags.append((f"☑ {checklist}%", "#A78BFA"))

    due = task.get("due_date")
    if due and not str(due).startswith("0001-"):
        try:
            d = dt.date.fromisoformat(str(due)[:10])
            overdue = d < dt.date.today() and not task.done
            tags.append(("Overdue" if overdue else f"Due {d.isoformat()}", "#B00020" if overdue else "#CBD5E1"))
        except ValueError:
            tags.append((str(due), "#CBD5E1"))

    return {"id": task.id, "text": task.title, "done": task.done, "tags": tags}
