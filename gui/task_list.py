"""
Scrollable task list for Tkinter
--------------------------------
Every task is its own row (a Frame) inside a scrollable Canvas, with:
- a Checkbutton to mark completion
- the task title, indented by the row's hierarchy depth
- optional colored tags (priority, progress, due date)
- an overflow menu button (⋮)

The widget only holds view state. Rows are shown in whatever order the
controller hands to `show_rows()`; selection and drag gestures are reported
through the callbacks given to the constructor.
"""
from __future__ import annotations
from typing import Callable, Dict, List, Optional, Tuple
import tkinter as tk
from tkinter import ttk

INDENT_PX = 20
DRAG_THRESHOLD_PX = 6


class TaskRow(ttk.Frame):
    """A single task row with checkbox, text, colored tags and a menu button."""
    def __init__(
        self,
        master,
        task_id: int,
        text: str,
        done: bool = False,
        tags: Optional[List[Tuple[str, str]]] = None,  # [(label, hex_color)]
        on_toggle: Optional[Callable[[int, bool], None]] = None,
        on_menu: Optional[Callable[[int], None]] = None,
        wrap: int = 600,
    ):
        super().__init__(master, style="Task.TFrame")
        self.task_id = task_id
        self._on_toggle = on_toggle
        self._on_menu = on_menu
        self._depth = 0
        self.selected = False
        self.var = tk.BooleanVar(value=done)

        self.columnconfigure(2, weight=1)

        # Checkbox
        self.chk = ttk.Checkbutton(self, variable=self.var, command=self._toggle)
        self.chk.grid(row=0, column=0, padx=(8, 6), pady=4, sticky="w")

        # Title, wraps and is indented through the checkbox padding
        self.lbl = ttk.Label(self, text=text, wraplength=wrap, anchor="w", justify="left")
        self.lbl.grid(row=0, column=2, sticky="we")

        # Tag container
        self.tag_container = ttk.Frame(self)
        self.tag_container.grid(row=1, column=2, sticky="w", pady=(2, 4))

        # Actions (⋮)
        self.menu_btn = ttk.Button(self, text="⋮", width=2, command=self._menu)
        self.menu_btn.grid(row=0, column=3, padx=(6, 8))

        self._render_tags(tags or [])
        self._apply_done_style(done)

    # --- Public API ---
    @property
    def depth(self) -> int:
        return self._depth

    @depth.setter
    def depth(self, level: int):
        self._depth = level
        self.chk.grid_configure(padx=(8 + INDENT_PX * level, 6))

    def set_text(self, text: str):
        self.lbl.configure(text=text)

    def set_done(self, done: bool):
        self.var.set(done)
        self._apply_done_style(done)

    def set_tags(self, tags: List[Tuple[str, str]]):
        for child in self.tag_container.winfo_children():
            child.destroy()
        self._render_tags(tags)

    def set_selected(self, selected: bool):
        self.selected = selected
        self.configure(style="Task.Selected.TFrame" if selected else "Task.TFrame")

    def set_drop_highlight(self, on: bool):
        if on:
            self.configure(style="Task.DropTarget.TFrame")
        else:
            self.set_selected(self.selected)

    # --- Internals ---
    def _render_tags(self, tags: List[Tuple[str, str]]):
        for label, color in tags:
            # tk.Label takes a plain bg color, ttk would need a style per tag
            tag = tk.Label(
                self.tag_container,
                text=label,
                bg=color,
                fg=_ideal_text_color(color),
                padx=4,
                pady=2,
                borderwidth=0,
                relief="flat",
            )
            tag.pack(side="left", padx=(0, 6))

    def _apply_done_style(self, done: bool):
        self.lbl.configure(style="Task.Done.TLabel" if done else "Task.Normal.TLabel")

    def _toggle(self):
        done = bool(self.var.get())
        self._apply_done_style(done)
        if self._on_toggle:
            self._on_toggle(self.task_id, done)

    def _menu(self):
        if self._on_menu:
            self._on_menu(self.task_id)


class ScrollableTaskList(ttk.Frame):
    """Canvas + interior Frame with bulk selection and drag reporting."""
    def __init__(
        self,
        master,
        on_toggle: Optional[Callable[[int, bool], None]] = None,
        on_menu: Optional[Callable[[int], None]] = None,
        on_drag_start: Optional[Callable[[int], bool]] = None,
        on_drag_motion: Optional[Callable[[int, int], None]] = None,
        on_drop: Optional[Callable[[int, int], None]] = None,
        row_wrap: int = 600,
        row_padding: Tuple[int, int] = (1, 1),
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self._on_toggle = on_toggle
        self._on_menu = on_menu
        self._on_drag_start = on_drag_start
        self._on_drag_motion = on_drag_motion
        self._on_drop = on_drop
        self._row_wrap = row_wrap
        self._row_padding = row_padding
        self._rows: List[TaskRow] = []
        self._last_clicked: Optional[TaskRow] = None
        self._press: Optional[Tuple[TaskRow, int, int]] = None
        self._dragging = False

        # --- styles ---
        style = ttk.Style(self)
        style.configure("Task.Normal.TLabel")
        style.configure("Task.Done.TLabel", foreground="#888888")
        style.configure("Task.TFrame")
        style.configure("Task.Selected.TFrame", background="#DBEAFE")
        style.configure("Task.DropTarget.TFrame", background="#93C5FD")

        # --- layout ---
        self.canvas = tk.Canvas(self, highlightthickness=0)
        self.vbar = ttk.Scrollbar(self, orient="vertical", command=self.canvas.yview)
        self.canvas.configure(yscrollcommand=self.vbar.set)

        self.canvas.grid(row=0, column=0, sticky="nsew")
        self.vbar.grid(row=0, column=1, sticky="ns")
        self.rowconfigure(0, weight=1)
        self.columnconfigure(0, weight=1)

        # Interior frame inside canvas
        self.interior = ttk.Frame(self.canvas)
        self._win_id = self.canvas.create_window(0, 0, window=self.interior, anchor="nw")

        # Resize/wrapping sync
        self.interior.bind("<Configure>", self._on_interior_configure)
        self.canvas.bind("<Configure>", self._on_canvas_configure)

        # Mousewheel support (Windows/macOS/Linux)
        self._bind_mousewheel(self.canvas)
        self._bind_mousewheel(self.interior)

    # --- Public API ---
    @property
    def rows(self) -> List[TaskRow]:
        return list(self._rows)

    def set_tasks(self, tasks: List[Dict]) -> List[TaskRow]:
        """Replace all rows. Each task dict: {
            'id': int,
            'text': str,
            'done': bool,
            'tags': List[Tuple[label, color]]
        }
        """
        # clear
        for row in self._rows:
            row.destroy()
        self._rows = []
        self._last_clicked = None

        for task in tasks:
            row = TaskRow(
                self.interior,
                task_id=task["id"],
                text=task.get("text", ""),
                done=task.get("done", False),
                tags=task.get("tags", []),
                on_toggle=self._on_toggle,
                on_menu=self._on_menu,
                wrap=self._row_wrap,
            )
            self._bind_row(row)
            self._rows.append(row)
        self.interior.columnconfigure(0, weight=1)
        self.show_rows(self._rows)
        return self.rows

    def show_rows(self, rows: List[TaskRow]):
        """Lay rows out top-to-bottom in the given order; rows left out are destroyed."""
        keep = set(map(id, rows))
        for row in self._rows:
            if id(row) not in keep:
                row.destroy()
        self._rows = list(rows)
        for i, row in enumerate(self._rows):
            row.grid(row=i, column=0, sticky="we", padx=(8, 8), pady=self._row_padding)
        self._update_scrollregion()

    def update_task(
        self,
        task_id: int,
        *,
        text: Optional[str] = None,
        done: Optional[bool] = None,
        tags: Optional[List[Tuple[str, str]]] = None,
    ):
        for row in self._rows:
            if row.task_id != task_id:
                continue
            if text is not None:
                row.set_text(text)
            if done is not None:
                row.set_done(done)
            if tags is not None:
                row.set_tags(tags)
        self._update_scrollregion()

    def selected_task_ids(self) -> List[int]:
        return [row.task_id for row in self._rows if row.selected]

    def row_at(self, x_root: int, y_root: int) -> Optional[TaskRow]:
        widget = self.winfo_containing(x_root, y_root)
        while widget is not None:
            if isinstance(widget, TaskRow):
                return widget
            widget = widget.master
        return None

    def contains(self, x_root: int, y_root: int) -> bool:
        widget = self.winfo_containing(x_root, y_root)
        while widget is not None:
            if widget is self:
                return True
            widget = widget.master
        return False

    def clear_drop_highlight(self):
        for row in self._rows:
            row.set_drop_highlight(False)

    # --- Selection & drag ---
    def _bind_row(self, row: TaskRow):
        for widget in (row, row.lbl, row.tag_container):
            widget.bind("<ButtonPress-1>", lambda e, r=row: self._on_press(e, r))
            widget.bind("<B1-Motion>", self._on_motion)
            widget.bind("<ButtonRelease-1>", lambda e, r=row: self._on_release(e, r))

    def _on_press(self, event, row: TaskRow):
        self._press = (row, event.x_root, event.y_root)
        self._dragging = False

    def _on_motion(self, event):
        if self._press is None:
            return
        row, x0, y0 = self._press
        if not self._dragging:
            if abs(event.x_root - x0) + abs(event.y_root - y0) < DRAG_THRESHOLD_PX:
                return
            if not row.selected or not self._on_drag_start or not self._on_drag_start(row.task_id):
                self._press = None
                return
            self._dragging = True
            self.configure(cursor="fleur")
        if self._on_drag_motion:
            self._on_drag_motion(event.x_root, event.y_root)

    def _on_release(self, event, row: TaskRow):
        was_dragging = self._dragging
        self._press = None
        self._dragging = False
        self.configure(cursor="")
        if was_dragging:
            if self._on_drop:
                self._on_drop(event.x_root, event.y_root)
            return
        # plain click: 0x0001 is Shift, 0x0004 is Control
        self._select(row, shift=bool(event.state & 0x0001), ctrl=bool(event.state & 0x0004))

    def _select(self, row: TaskRow, shift: bool, ctrl: bool):
        if shift and self._last_clicked in self._rows:
            start, end = sorted((self._rows.index(self._last_clicked), self._rows.index(row)))
            for i, r in enumerate(self._rows):
                r.set_selected(start <= i <= end)
        elif ctrl:
            row.set_selected(not row.selected)
        else:
            for r in self._rows:
                r.set_selected(r is row)
        self._last_clicked = row

    # --- Internals ---
    def _update_scrollregion(self):
        self.update_idletasks()
        self.canvas.configure(scrollregion=self.canvas.bbox("all"))

    def _on_interior_configure(self, _):
        self._update_scrollregion()

    def _on_canvas_configure(self, event):
        # Keep interior width synced to canvas for wrapping
        self.canvas.itemconfigure(self._win_id, width=event.width)
        for row in self._rows:
            row.lbl.configure(wraplength=event.width - 160)  # room for checkbox and menu button

    # Mousewheel helpers
    def _bind_mousewheel(self, widget):
        widget.bind_all("<MouseWheel>", self._on_mousewheel_windows_mac, add="+")
        widget.bind_all("<Button-4>", self._on_mousewheel_linux, add="+")
        widget.bind_all("<Button-5>", self._on_mousewheel_linux, add="+")

    def _on_mousewheel_windows_mac(self, event):
        # Windows reports +/-120 per notch, macOS smaller steps
        delta = int(-1 * (event.delta / 120))
        self.canvas.yview_scroll(delta, "units")

    def _on_mousewheel_linux(self, event):
        if event.num == 4:
            self.canvas.yview_scroll(-1, "units")
        elif event.num == 5:
            self.canvas.yview_scroll(1, "units")


# --- Utility: pick readable text color for a given bg ---

def _ideal_text_color(bg_hex: str) -> str:
    """Return black or white depending on background brightness."""
    bg_hex = bg_hex.strip().lstrip('#')
    if len(bg_hex) == 3:
        bg_hex = ''.join(c*2 for c in bg_hex)
    try:
        r = int(bg_hex[0:2], 16)
        g = int(bg_hex[2:4], 16)
        b = int(bg_hex[4:6], 16)
    except ValueError:
        return "black"
    # Perceived luminance
    luminance = 0.299*r + 0.587*g + 0.114*b
    return "black" if luminance > 186 else "white"
