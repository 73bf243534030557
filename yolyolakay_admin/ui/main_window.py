from __future__ import annotations

import json
import logging
import threading
from tkinter import filedialog, messagebox

import customtkinter as ctk

from yolyolakay_admin.admins import AdminPicker
from yolyolakay_admin.catalog import (
	CATALOG_TITLES,
	CHOICE,
	FLAG,
	CatalogEditor,
	catalog_fields,
	catalog_form_values,
)
from yolyolakay_admin.config import AppSettings, ConfigurationError
from yolyolakay_admin.exports import (
	default_export_filename,
	export_drivers_csv,
	export_orders_csv,
)
from yolyolakay_admin.filters import (
	DriverFilters,
	OrderFilters,
	PointPurchaseRequestFilters,
	PointTransactionFilters,
	UserFilters,
)
from yolyolakay_admin.guard import LOGIN_ROUTE
from yolyolakay_admin.labels import (
	UNKNOWN_LABEL,
	driver_approval_label,
	language_label,
	order_status_label,
	order_type_label,
	purchase_request_status_label,
	transaction_type_label,
)
from yolyolakay_admin.logging_utils import configure_logging
from yolyolakay_admin.models import (
	DRIVER_PHOTO_FIELDS,
	DRIVERS_PAGE_SIZE,
	ORDERS_PAGE_SIZE,
	POINT_TRANSACTIONS_PAGE_SIZE,
	USERS_PAGE_SIZE,
	Page,
	clamp_page,
	page_count,
)
from yolyolakay_admin.services import AdminService, build_service
from yolyolakay_admin.wizards import DriverCreationWizard, WizardError, WizardStep

logger = logging.getLogger(__name__)

TABS = ("Dashboard", "Users", "Drivers", "Orders", "Points", "Catalog", "Admins", "Bot settings")
ALL = "all"
CATALOG_KINDS = tuple(CATALOG_TITLES)


class LoginFrame(ctk.CTkFrame):
	def __init__(self, master, on_submit):
		super().__init__(master)
		self._on_submit = on_submit

		ctk.CTkLabel(self, text="Yo'l yo'lakay Admin", font=("", 22, "bold")).pack(pady=(48, 16))

		self._username = ctk.CTkEntry(self, width=280, placeholder_text="Username")
		self._username.pack(pady=6)

		self._password = ctk.CTkEntry(self, width=280, placeholder_text="Password", show="*")
		self._password.pack(pady=6)
		self._password.bind("<Return>", lambda _event: self._submit())

		self._submit_btn = ctk.CTkButton(self, text="Sign in", width=280, command=self._submit)
		self._submit_btn.pack(pady=12)

		self._error_label = ctk.CTkLabel(self, text="", text_color="#d14343")
		self._error_label.pack(pady=4)

	def _submit(self):
		self._error_label.configure(text="")
		self._submit_btn.configure(state="disabled")
		self._on_submit(self._username.get(), self._password.get())

	def show_error(self, message: str):
		self._error_label.configure(text=message)
		self._submit_btn.configure(state="normal")

	def reset(self):
		self._password.delete(0, "end")
		self._submit_btn.configure(state="normal")


class MainWindow(ctk.CTk):
	def __init__(self, service: AdminService):
		super().__init__()
		self._service = service
		self._generations: dict[str, int] = {}
		self._pages = {"users": 1, "drivers": 1, "orders": 1, "points": 1}
		self._last_drivers: list[dict] = []
		self._last_orders: list[dict] = []
		self._page_totals = {key: 1 for key in self._pages}
		self._catalog_editor = CatalogEditor(service)
		self._catalog_items: list[dict] = []
		self._admin_picker = AdminPicker(service)

		self.title("Yo'l yo'lakay Admin")
		self.geometry("1200x820")
		self.minsize(960, 700)

		self._login_frame = LoginFrame(self, on_submit=self._sign_in)
		self._main_frame = ctk.CTkFrame(self)
		self._build_main_frame()

		self._service.on_signed_out(lambda: self.after(0, self._show_login))

		self._show_loading()
		self._run_task(
			"guard",
			lambda: self._service.check_access("dashboard"),
			on_success=self._apply_guard_decision,
			on_error=lambda _exc: self._show_login(),
		)

	# Layout

	def _build_main_frame(self):
		top_row = ctk.CTkFrame(self._main_frame)
		top_row.pack(fill="x", padx=16, pady=(16, 8))

		ctk.CTkButton(top_row, text="☰", width=36, command=self._toggle_sidebar).pack(
			side="left", padx=(8, 6), pady=8
		)
		self._status_label = ctk.CTkLabel(top_row, text="Not signed in")
		self._status_label.pack(side="left", padx=6, pady=8)
		ctk.CTkButton(top_row, text="Sign out", command=self._sign_out).pack(
			side="right", padx=8, pady=8
		)

		body = ctk.CTkFrame(self._main_frame)
		body.pack(fill="both", expand=True, padx=16, pady=(0, 16))

		self._sidebar = ctk.CTkFrame(body, width=180)
		for tab_name in TABS:
			ctk.CTkButton(
				self._sidebar,
				text=tab_name,
				command=lambda name=tab_name: self._tabview.set(name),
			).pack(fill="x", padx=8, pady=4)

		self._tabview = ctk.CTkTabview(body)
		for tab_name in TABS:
			self._tabview.add(tab_name)

		self._sidebar_open = self._service.is_sidebar_open()
		self._layout_sidebar()

		self._build_dashboard_tab(self._tabview.tab("Dashboard"))
		self._build_users_tab(self._tabview.tab("Users"))
		self._build_drivers_tab(self._tabview.tab("Drivers"))
		self._build_orders_tab(self._tabview.tab("Orders"))
		self._build_points_tab(self._tabview.tab("Points"))
		self._build_catalog_tab(self._tabview.tab("Catalog"))
		self._build_admins_tab(self._tabview.tab("Admins"))
		self._build_bot_settings_tab(self._tabview.tab("Bot settings"))

	def _layout_sidebar(self):
		self._sidebar.pack_forget()
		self._tabview.pack_forget()
		if self._sidebar_open:
			self._sidebar.pack(side="left", fill="y", padx=(0, 8))
		self._tabview.pack(side="left", fill="both", expand=True)

	def _toggle_sidebar(self):
		self._sidebar_open = not self._sidebar_open
		self._service.set_sidebar_open(self._sidebar_open)
		self._layout_sidebar()

	@staticmethod
	def _create_output(parent, height: int = 380) -> ctk.CTkTextbox:
		output = ctk.CTkTextbox(parent, height=height)
		output.pack(fill="both", expand=True, padx=12, pady=(4, 12))
		return output

	@staticmethod
	def _row(parent) -> ctk.CTkFrame:
		row = ctk.CTkFrame(parent)
		row.pack(fill="x", padx=12, pady=4)
		return row

	def _paging_row(self, parent, key: str, reload):
		row = self._row(parent)
		label = ctk.CTkLabel(row, text="Page 1 / 1")

		def go(delta: int):
			page = clamp_page(self._pages[key] + delta, self._page_totals[key])
			if page == self._pages[key]:
				return
			self._pages[key] = page
			reload()

		ctk.CTkButton(row, text="< Prev", width=80, command=lambda: go(-1)).pack(side="left", padx=6, pady=6)
		label.pack(side="left", padx=6)
		ctk.CTkButton(row, text="Next >", width=80, command=lambda: go(1)).pack(side="left", padx=6, pady=6)
		return label

	def _build_dashboard_tab(self, tab):
		ctk.CTkButton(tab, text="Refresh", command=self._load_dashboard).pack(anchor="w", padx=12, pady=8)
		self._dashboard_output = self._create_output(tab)

	def _build_users_tab(self, tab):
		row = self._row(tab)
		self._users_query = ctk.CTkEntry(row, width=280, placeholder_text="Name, phone or Telegram ID")
		self._users_query.pack(side="left", padx=6, pady=6)
		self._users_language = ctk.StringVar(value=ALL)
		ctk.CTkOptionMenu(row, values=[ALL, "uz", "ru", "en"], variable=self._users_language).pack(
			side="left", padx=6
		)
		ctk.CTkButton(row, text="Search", command=lambda: self._reload("users", self._load_users)).pack(
			side="left", padx=6
		)

		action_row = self._row(tab)
		self._users_id = ctk.CTkEntry(action_row, width=120, placeholder_text="User ID")
		self._users_id.pack(side="left", padx=6, pady=6)
		ctk.CTkButton(action_row, text="Delete user", fg_color="#b83232", command=self._delete_user).pack(
			side="left", padx=6
		)

		self._users_page_label = self._paging_row(tab, "users", self._load_users)
		self._users_output = self._create_output(tab)

	def _build_drivers_tab(self, tab):
		row = self._row(tab)
		self._drivers_status = ctk.StringVar(value=ALL)
		ctk.CTkSegmentedButton(row, values=[ALL, "approved", "pending"], variable=self._drivers_status).pack(
			side="left", padx=6, pady=6
		)
		self._drivers_direction = ctk.CTkEntry(row, width=140, placeholder_text="Direction")
		self._drivers_direction.pack(side="left", padx=6)
		self._drivers_search = ctk.CTkEntry(row, width=200, placeholder_text="Search")
		self._drivers_search.pack(side="left", padx=6)
		ctk.CTkButton(row, text="Apply", command=lambda: self._reload("drivers", self._load_drivers)).pack(
			side="left", padx=6
		)

		action_row = self._row(tab)
		self._drivers_id = ctk.CTkEntry(action_row, width=120, placeholder_text="Driver ID")
		self._drivers_id.pack(side="left", padx=6, pady=6)
		ctk.CTkButton(action_row, text="Approve", command=lambda: self._approve_driver(True)).pack(
			side="left", padx=6
		)
		ctk.CTkButton(action_row, text="Revoke", command=lambda: self._approve_driver(False)).pack(
			side="left", padx=6
		)
		ctk.CTkButton(action_row, text="Delete", fg_color="#b83232", command=self._delete_driver).pack(
			side="left", padx=6
		)
		ctk.CTkButton(action_row, text="New driver", command=self._open_driver_wizard).pack(side="right", padx=6)
		ctk.CTkButton(action_row, text="Export CSV", command=self._export_drivers).pack(side="right", padx=6)

		self._drivers_page_label = self._paging_row(tab, "drivers", self._load_drivers)
		self._drivers_output = self._create_output(tab)

	def _build_orders_tab(self, tab):
		row = self._row(tab)
		self._orders_status = ctk.StringVar(value=ALL)
		ctk.CTkOptionMenu(
			row,
			values=[ALL, "pending", "accepted", "completed", "cancelled", "rejected"],
			variable=self._orders_status,
		).pack(side="left", padx=6, pady=6)
		self._orders_type = ctk.StringVar(value=ALL)
		ctk.CTkOptionMenu(
			row,
			values=[ALL, "taxi", "package", "cargo", "plane", "train"],
			variable=self._orders_type,
		).pack(side="left", padx=6)
		self._orders_date_from = ctk.CTkEntry(row, width=110, placeholder_text="From YYYY-MM-DD")
		self._orders_date_from.pack(side="left", padx=6)
		self._orders_date_to = ctk.CTkEntry(row, width=110, placeholder_text="To YYYY-MM-DD")
		self._orders_date_to.pack(side="left", padx=6)
		self._orders_search = ctk.CTkEntry(row, width=160, placeholder_text="Name or phone")
		self._orders_search.pack(side="left", padx=6)
		ctk.CTkButton(row, text="Apply", command=lambda: self._reload("orders", self._load_orders)).pack(
			side="left", padx=6
		)

		action_row = self._row(tab)
		self._orders_id = ctk.CTkEntry(action_row, width=120, placeholder_text="Order ID")
		self._orders_id.pack(side="left", padx=6, pady=6)
		self._orders_new_status = ctk.StringVar(value="completed")
		ctk.CTkOptionMenu(
			action_row,
			values=["pending", "accepted", "completed", "cancelled", "rejected"],
			variable=self._orders_new_status,
		).pack(side="left", padx=6)
		ctk.CTkButton(action_row, text="Set status", command=self._update_order_status).pack(side="left", padx=6)
		ctk.CTkButton(action_row, text="Delete", fg_color="#b83232", command=self._delete_order).pack(
			side="left", padx=6
		)
		ctk.CTkButton(action_row, text="Export CSV", command=self._export_orders).pack(side="right", padx=6)

		self._orders_page_label = self._paging_row(tab, "orders", self._load_orders)
		self._orders_output = self._create_output(tab)

	def _build_points_tab(self, tab):
		row = self._row(tab)
		self._points_type = ctk.StringVar(value=ALL)
		ctk.CTkSegmentedButton(row, values=[ALL, "add", "subtract"], variable=self._points_type).pack(
			side="left", padx=6, pady=6
		)
		self._points_driver_filter = ctk.CTkEntry(row, width=120, placeholder_text="Driver ID")
		self._points_driver_filter.pack(side="left", padx=6)
		ctk.CTkButton(row, text="Apply", command=lambda: self._reload("points", self._load_points)).pack(
			side="left", padx=6
		)

		create_row = self._row(tab)
		self._points_driver = ctk.CTkEntry(create_row, width=100, placeholder_text="Driver ID")
		self._points_driver.pack(side="left", padx=6, pady=6)
		self._points_amount = ctk.CTkEntry(create_row, width=100, placeholder_text="Amount")
		self._points_amount.pack(side="left", padx=6)
		self._points_new_type = ctk.StringVar(value="add")
		ctk.CTkOptionMenu(create_row, values=["add", "subtract"], variable=self._points_new_type).pack(
			side="left", padx=6
		)
		self._points_reason = ctk.CTkEntry(create_row, width=220, placeholder_text="Reason (optional)")
		self._points_reason.pack(side="left", padx=6)
		ctk.CTkButton(create_row, text="Create", command=self._create_point_transaction).pack(side="left", padx=6)

		delete_row = self._row(tab)
		self._points_id = ctk.CTkEntry(delete_row, width=120, placeholder_text="Transaction ID")
		self._points_id.pack(side="left", padx=6, pady=6)
		ctk.CTkButton(delete_row, text="Delete", fg_color="#b83232", command=self._delete_point_transaction).pack(
			side="left", padx=6
		)

		self._points_page_label = self._paging_row(tab, "points", self._load_points)
		self._points_output = self._create_output(tab)

	def _build_catalog_tab(self, tab):
		row = self._row(tab)
		self._catalog_title = ctk.StringVar(value=CATALOG_TITLES[CATALOG_KINDS[0]])
		ctk.CTkSegmentedButton(
			row,
			values=[CATALOG_TITLES[kind] for kind in CATALOG_KINDS],
			variable=self._catalog_title,
			command=lambda _title: self._switch_catalog(),
		).pack(side="left", padx=6, pady=6)
		ctk.CTkButton(row, text="Load", command=self._load_catalog).pack(side="left", padx=6)

		self._catalog_form = ctk.CTkFrame(tab)
		self._catalog_form.pack(fill="x", padx=12, pady=4)
		self._catalog_vars: dict[str, ctk.StringVar] = {}

		action_row = self._row(tab)
		self._catalog_id = ctk.CTkEntry(action_row, width=120, placeholder_text="ID (blank = new)")
		self._catalog_id.pack(side="left", padx=6, pady=6)
		ctk.CTkButton(action_row, text="Edit", command=self._edit_catalog_item).pack(side="left", padx=6)
		ctk.CTkButton(action_row, text="Save", command=self._save_catalog_item).pack(side="left", padx=6)
		ctk.CTkButton(action_row, text="Clear", command=self._clear_catalog_form).pack(side="left", padx=6)
		ctk.CTkButton(action_row, text="Delete", fg_color="#b83232", command=self._delete_catalog_item).pack(
			side="left", padx=6
		)

		self._catalog_output = self._create_output(tab, height=300)
		self._build_catalog_form()

	def _build_catalog_form(self):
		for child in self._catalog_form.winfo_children():
			child.destroy()
		self._catalog_vars = {}
		for index, field in enumerate(catalog_fields(self._catalog_kind())):
			variable = ctk.StringVar(value=field.default)
			self._catalog_vars[field.name] = variable
			cell = ctk.CTkFrame(self._catalog_form)
			cell.grid(row=index // 3, column=index % 3, sticky="ew", padx=4, pady=4)
			label = field.label + (" *" if field.required else "")
			if field.kind == FLAG:
				ctk.CTkCheckBox(cell, text=label, variable=variable, onvalue="true", offvalue="false").pack(
					side="left", padx=6, pady=6
				)
				continue
			ctk.CTkLabel(cell, text=label, width=110, anchor="w").pack(side="left", padx=6)
			if field.kind == CHOICE:
				ctk.CTkOptionMenu(cell, values=list(field.choices), variable=variable, width=150).pack(
					side="left", padx=6, pady=6
				)
			else:
				ctk.CTkEntry(cell, textvariable=variable, width=150).pack(side="left", padx=6, pady=6)

	def _build_admins_tab(self, tab):
		row = self._row(tab)
		ctk.CTkButton(row, text="Load", command=self._load_admins).pack(side="left", padx=6, pady=6)
		self._admins_query = ctk.CTkEntry(row, width=280, placeholder_text="Filter by ID, name, phone or Telegram ID")
		self._admins_query.pack(side="left", padx=6)
		self._admins_query.bind("<KeyRelease>", lambda _event: self._render_admins())

		action_row = self._row(tab)
		self._admins_user_id = ctk.CTkEntry(action_row, width=120, placeholder_text="User ID")
		self._admins_user_id.pack(side="left", padx=6, pady=6)
		ctk.CTkButton(action_row, text="Toggle admin", command=self._toggle_admin).pack(side="left", padx=6)
		ctk.CTkButton(action_row, text="Save admins", command=self._save_admins).pack(side="right", padx=6)

		self._admins_output = self._create_output(tab)

	def _build_bot_settings_tab(self, tab):
		row = self._row(tab)
		ctk.CTkButton(row, text="Load settings", command=self._load_bot_settings).pack(side="left", padx=6, pady=6)
		self._settings_field = ctk.StringVar(value="driver_request_group_id")
		ctk.CTkOptionMenu(
			row,
			values=[
				"driver_request_group_id",
				"taxi_group_id",
				"gruz_group_id",
				"avia_group_id",
				"point_purchase_group_id",
				"deport_check_group_id",
				"admin_username",
			],
			variable=self._settings_field,
		).pack(side="left", padx=6)
		self._settings_value = ctk.CTkEntry(row, width=200, placeholder_text="Value")
		self._settings_value.pack(side="left", padx=6)
		ctk.CTkButton(row, text="Save", command=self._save_bot_setting).pack(side="left", padx=6)
		ctk.CTkButton(row, text="Create invite link", command=self._create_invite_link).pack(side="left", padx=6)

		invite_row = self._row(tab)
		self._invite_link = ctk.CTkEntry(invite_row, width=320, placeholder_text="Invite link to revoke")
		self._invite_link.pack(side="left", padx=6, pady=6)
		ctk.CTkButton(invite_row, text="Revoke invite link", command=self._revoke_invite_link).pack(side="left", padx=6)

		requests_row = self._row(tab)
		self._purchase_status = ctk.StringVar(value=ALL)
		ctk.CTkSegmentedButton(
			requests_row,
			values=[ALL, "pending", "approved", "rejected"],
			variable=self._purchase_status,
		).pack(side="left", padx=6, pady=6)
		ctk.CTkButton(requests_row, text="Purchase requests", command=self._load_purchase_requests).pack(
			side="left", padx=6
		)
		self._purchase_id = ctk.CTkEntry(requests_row, width=100, placeholder_text="Request ID")
		self._purchase_id.pack(side="left", padx=6)
		self._purchase_comment = ctk.CTkEntry(requests_row, width=200, placeholder_text="Admin comment")
		self._purchase_comment.pack(side="left", padx=6)
		ctk.CTkButton(requests_row, text="Approve", command=lambda: self._review_purchase("approved")).pack(
			side="left", padx=6
		)
		ctk.CTkButton(requests_row, text="Reject", command=lambda: self._review_purchase("rejected")).pack(
			side="left", padx=6
		)

		self._settings_output = self._create_output(tab)

	# Screens

	def _show_loading(self):
		self._login_frame.pack_forget()
		self._main_frame.pack_forget()

	def _show_login(self):
		self._main_frame.pack_forget()
		self._login_frame.reset()
		self._login_frame.pack(fill="both", expand=True)
		self._status_label.configure(text="Not signed in")

	def _show_main(self):
		self._login_frame.pack_forget()
		self._main_frame.pack(fill="both", expand=True)
		state = self._service.auth_state()
		self._status_label.configure(text=f"Signed in as {state.username or 'admin'}")
		self._load_dashboard()

	def _apply_guard_decision(self, decision):
		if decision.allowed:
			self._show_main()
		else:
			self._show_login()

	def _sign_in(self, username: str, password: str):
		def on_success(_state):
			self._run_task(
				"guard",
				lambda: self._service.check_access("dashboard"),
				on_success=self._apply_guard_decision,
				on_error=lambda _exc: self._show_login(),
			)

		self._run_task(
			LOGIN_ROUTE,
			lambda: self._service.sign_in(username, password),
			on_success=on_success,
			on_error=lambda exc: self._login_frame.show_error(f"Sign in failed: {exc}"),
		)

	def _sign_out(self):
		try:
			self._service.sign_out()
		except Exception as exc:
			self._status_label.configure(text=f"Sign out failed: {exc}")

	# Background work

	def _run_task(self, key: str, call, on_success=None, on_error=None, output=None):
		generation = self._generations.get(key, 0) + 1
		self._generations[key] = generation
		if output is not None:
			self._render_output(output, "Loading...")

		def deliver(callback, value):
			# A newer request for the same view has started; drop this result.
			if self._generations.get(key) != generation:
				return
			if callback:
				callback(value)

		def worker():
			try:
				result = call()
			except Exception as exc:
				logger.debug("Background task %s failed", key, exc_info=True)
				if on_error is None and output is not None:
					message = f"{type(exc).__name__}: {exc}"
					self.after(0, lambda: deliver(lambda _: self._render_output(output, message), None))
				else:
					self.after(0, lambda failure=exc: deliver(on_error, failure))
				return
			self.after(0, lambda: deliver(on_success, result))

		threading.Thread(target=worker, daemon=True).start()

	def _reload(self, key: str, loader):
		self._pages[key] = 1
		loader()

	@staticmethod
	def _render_output(text_widget: ctk.CTkTextbox, text: str):
		text_widget.delete("1.0", "end")
		text_widget.insert("1.0", text)

	def _confirm(self, message: str) -> bool:
		return messagebox.askyesno("Confirm", message, parent=self)

	@staticmethod
	def _parse_id(entry: ctk.CTkEntry) -> int | None:
		try:
			value = int(entry.get().strip())
		except ValueError:
			return None
		return value if value > 0 else None

	def _render_page(self, key: str, label: ctk.CTkLabel, output, response, page_size: int, formatter):
		page = Page.from_response(response)
		total_pages = page_count(page.count, page_size)
		self._page_totals[key] = total_pages
		label.configure(text=f"Page {self._pages[key]} / {total_pages}  ({page.count} total)")
		self._render_output(output, formatter(page.results) or "Nothing found.")
		return page

	# Dashboard

	def _load_dashboard(self):
		self._run_task(
			"dashboard",
			self._service.get_statistics,
			on_success=lambda stats: self._render_output(self._dashboard_output, json.dumps(stats, indent=2)),
			output=self._dashboard_output,
		)

	# Users

	def _load_users(self):
		language = self._users_language.get()
		filters = UserFilters(
			query=self._users_query.get(),
			language=None if language == ALL else language,
		)
		page = self._pages["users"]
		self._run_task(
			"users",
			lambda: self._service.list_users(page, filters),
			on_success=lambda response: self._render_page(
				"users", self._users_page_label, self._users_output, response, USERS_PAGE_SIZE, _format_users
			),
			output=self._users_output,
		)

	def _delete_user(self):
		user_id = self._parse_id(self._users_id)
		if user_id is None or not self._confirm(f"Delete user #{user_id}? This cannot be undone."):
			return
		self._run_task(
			"users_delete",
			lambda: self._service.delete_user(user_id),
			on_success=lambda _result: self._load_users(),
			output=self._users_output,
		)

	# Drivers

	def _load_drivers(self):
		status = self._drivers_status.get()
		filters = DriverFilters(
			is_approved=None if status == ALL else status == "approved",
			direction=self._drivers_direction.get(),
			search=self._drivers_search.get(),
		)
		page = self._pages["drivers"]

		def on_success(response):
			result = self._render_page(
				"drivers", self._drivers_page_label, self._drivers_output, response, DRIVERS_PAGE_SIZE, _format_drivers
			)
			self._last_drivers = result.results

		self._run_task(
			"drivers",
			lambda: self._service.list_drivers(page, filters),
			on_success=on_success,
			output=self._drivers_output,
		)

	def _approve_driver(self, approved: bool):
		driver_id = self._parse_id(self._drivers_id)
		if driver_id is None:
			return
		self._run_task(
			"drivers_update",
			lambda: self._service.approve_driver(driver_id, approved),
			on_success=lambda _driver: self._load_drivers(),
			output=self._drivers_output,
		)

	def _delete_driver(self):
		driver_id = self._parse_id(self._drivers_id)
		if driver_id is None or not self._confirm(f"Delete driver #{driver_id}? This cannot be undone."):
			return
		self._run_task(
			"drivers_delete",
			lambda: self._service.delete_driver(driver_id),
			on_success=lambda _result: self._load_drivers(),
			output=self._drivers_output,
		)

	def _export_drivers(self):
		self._export_csv("haydovchilar", self._last_drivers, export_drivers_csv)

	def _open_driver_wizard(self):
		DriverWizardDialog(self, DriverCreationWizard(self._service), on_created=lambda _driver: self._load_drivers())

	# Orders

	def _load_orders(self):
		status = self._orders_status.get()
		order_type = self._orders_type.get()
		filters = OrderFilters(
			status=None if status == ALL else status,
			order_type=None if order_type == ALL else order_type,
			date_from=self._orders_date_from.get(),
			date_to=self._orders_date_to.get(),
			search=self._orders_search.get(),
		)
		page = self._pages["orders"]

		def on_success(response):
			result = self._render_page(
				"orders", self._orders_page_label, self._orders_output, response, ORDERS_PAGE_SIZE, _format_orders
			)
			self._last_orders = result.results

		self._run_task(
			"orders",
			lambda: self._service.list_orders(page, filters),
			on_success=on_success,
			output=self._orders_output,
		)

	def _update_order_status(self):
		order_id = self._parse_id(self._orders_id)
		if order_id is None:
			return
		status = self._orders_new_status.get()
		self._run_task(
			"orders_update",
			lambda: self._service.update_order(order_id, {"status": status}),
			on_success=lambda _order: self._load_orders(),
			output=self._orders_output,
		)

	def _delete_order(self):
		order_id = self._parse_id(self._orders_id)
		if order_id is None or not self._confirm(f"Delete order #{order_id}? This cannot be undone."):
			return
		self._run_task(
			"orders_delete",
			lambda: self._service.delete_order(order_id),
			on_success=lambda _result: self._load_orders(),
			output=self._orders_output,
		)

	def _export_orders(self):
		self._export_csv("buyurtmalar", self._last_orders, export_orders_csv)

	def _export_csv(self, prefix: str, rows: list[dict], writer):
		if not rows:
			messagebox.showinfo("Export", "Nothing to export. Load a page first.", parent=self)
			return
		path = filedialog.asksaveasfilename(
			parent=self,
			defaultextension=".csv",
			initialfile=default_export_filename(prefix),
			filetypes=[("CSV", "*.csv")],
		)
		if not path:
			return
		try:
			with open(path, "w", encoding="utf-8", newline="") as target:
				count = writer(rows, target)
		except OSError as exc:
			messagebox.showerror("Export", f"Could not write {path}: {exc}", parent=self)
			return
		messagebox.showinfo("Export", f"Exported {count} rows to {path}", parent=self)

	# Points

	def _load_points(self):
		transaction_type = self._points_type.get()
		driver_id = self._parse_id(self._points_driver_filter)
		filters = PointTransactionFilters(
			driver_id=driver_id,
			transaction_type=None if transaction_type == ALL else transaction_type,
		)
		page = self._pages["points"]
		self._run_task(
			"points",
			lambda: self._service.list_point_transactions(page, filters),
			on_success=lambda response: self._render_page(
				"points",
				self._points_page_label,
				self._points_output,
				response,
				POINT_TRANSACTIONS_PAGE_SIZE,
				_format_point_transactions,
			),
			output=self._points_output,
		)

	def _create_point_transaction(self):
		driver_id = self._parse_id(self._points_driver)
		amount = self._parse_id(self._points_amount)
		if driver_id is None or amount is None:
			self._render_output(self._points_output, "Driver ID and a positive amount are required.")
			return
		transaction_type = self._points_new_type.get()
		reason = self._points_reason.get()
		self._run_task(
			"points_create",
			lambda: self._service.create_point_transaction(driver_id, amount, transaction_type, reason),
			on_success=lambda _transaction: self._load_points(),
			output=self._points_output,
		)

	def _delete_point_transaction(self):
		transaction_id = self._parse_id(self._points_id)
		if transaction_id is None or not self._confirm(f"Delete transaction #{transaction_id}?"):
			return
		self._run_task(
			"points_delete",
			lambda: self._service.delete_point_transaction(transaction_id),
			on_success=lambda _result: self._load_points(),
			output=self._points_output,
		)

	# Catalog

	def _catalog_kind(self) -> str:
		title = self._catalog_title.get()
		for kind, kind_title in CATALOG_TITLES.items():
			if kind_title == title:
				return kind
		return CATALOG_KINDS[0]

	def _switch_catalog(self):
		self._catalog_items = []
		self._catalog_id.delete(0, "end")
		self._build_catalog_form()
		self._load_catalog()

	def _catalog_values(self) -> dict[str, str]:
		return {name: variable.get() for name, variable in self._catalog_vars.items()}

	def _clear_catalog_form(self):
		self._catalog_id.delete(0, "end")
		for field in catalog_fields(self._catalog_kind()):
			self._catalog_vars[field.name].set(field.default)

	def _load_catalog(self):
		kind = self._catalog_kind()

		def on_success(response):
			self._catalog_items = Page.from_response(response).results
			self._render_output(self._catalog_output, _format_catalog(kind, self._catalog_items) or "Nothing found.")

		self._run_task(
			"catalog",
			lambda: self._catalog_editor.list(kind),
			on_success=on_success,
			output=self._catalog_output,
		)

	def _edit_catalog_item(self):
		item_id = self._parse_id(self._catalog_id)
		item = next((item for item in self._catalog_items if item.get("id") == item_id), None)
		if item is None:
			self._render_output(self._catalog_output, "Load the list and enter the ID of an item from it.")
			return
		for name, value in catalog_form_values(self._catalog_kind(), item).items():
			self._catalog_vars[name].set(value)

	def _save_catalog_item(self):
		kind = self._catalog_kind()
		item_id = None
		if self._catalog_id.get().strip():
			item_id = self._parse_id(self._catalog_id)
			if item_id is None:
				self._render_output(self._catalog_output, "ID must be a positive number, or blank to create.")
				return
		values = self._catalog_values()

		def on_success(_item):
			self._clear_catalog_form()
			self._load_catalog()

		self._run_task(
			"catalog_save",
			lambda: self._catalog_editor.save(kind, values, item_id),
			on_success=on_success,
			on_error=lambda exc: self._render_output(self._catalog_output, f"Save failed: {exc}"),
		)

	def _delete_catalog_item(self):
		kind = self._catalog_kind()
		item_id = self._parse_id(self._catalog_id)
		if item_id is None or not self._confirm(f"Delete {CATALOG_TITLES[kind].lower()} item #{item_id}?"):
			return
		self._run_task(
			"catalog_delete",
			lambda: self._catalog_editor.delete(kind, item_id),
			on_success=lambda _result: self._load_catalog(),
			output=self._catalog_output,
		)

	# Admins

	def _load_admins(self):
		self._run_task(
			"admins",
			self._admin_picker.load,
			on_success=lambda _result: self._render_admins(),
			output=self._admins_output,
		)

	def _render_admins(self):
		users = self._admin_picker.visible_users(self._admins_query.get())
		text = _format_admin_choices(users, self._admin_picker.selected_ids)
		self._render_output(self._admins_output, text or "Nothing found.")

	def _toggle_admin(self):
		user_id = self._parse_id(self._admins_user_id)
		if user_id is None:
			return
		self._admin_picker.toggle(user_id)
		self._render_admins()

	def _save_admins(self):
		self._run_task(
			"admins",
			self._admin_picker.save,
			on_success=lambda _settings: self._render_admins(),
			output=self._admins_output,
		)

	# Bot settings

	def _load_bot_settings(self):
		self._run_task(
			"settings",
			self._service.get_bot_settings,
			on_success=lambda settings: self._render_output(self._settings_output, _format_bot_settings(settings)),
			output=self._settings_output,
		)

	def _save_bot_setting(self):
		field_name = self._settings_field.get()
		value = self._settings_value.get().strip() or None
		self._run_task(
			"settings",
			lambda: self._service.update_bot_settings({field_name: value}),
			on_success=lambda settings: self._render_output(self._settings_output, _format_bot_settings(settings)),
			output=self._settings_output,
		)

	def _create_invite_link(self):
		group_id = self._settings_value.get().strip()
		if not group_id:
			self._render_output(self._settings_output, "Enter a group ID in the value field first.")
			return
		self._run_task(
			"settings",
			lambda: self._service.create_invite_link(group_id),
			on_success=lambda result: self._render_output(self._settings_output, json.dumps(result, indent=2)),
			output=self._settings_output,
		)

	def _revoke_invite_link(self):
		group_id = self._settings_value.get().strip()
		invite_link = self._invite_link.get().strip()
		if not group_id or not invite_link:
			self._render_output(self._settings_output, "Enter the group ID in the value field and the invite link.")
			return
		self._run_task(
			"settings",
			lambda: self._service.revoke_invite_link(group_id, invite_link),
			on_success=lambda result: self._render_output(self._settings_output, json.dumps(result, indent=2)),
			output=self._settings_output,
		)

	def _load_purchase_requests(self):
		status = self._purchase_status.get()
		filters = PointPurchaseRequestFilters(status=None if status == ALL else status)
		self._run_task(
			"settings",
			lambda: self._service.list_point_purchase_requests(filters=filters),
			on_success=lambda response: self._render_output(
				self._settings_output,
				_format_purchase_requests(Page.from_response(response).results) or "Nothing found.",
			),
			output=self._settings_output,
		)

	def _review_purchase(self, status: str):
		request_id = self._parse_id(self._purchase_id)
		if request_id is None:
			return
		comment = self._purchase_comment.get()
		self._run_task(
			"settings",
			lambda: self._service.review_point_purchase_request(request_id, status, comment),
			on_success=lambda _request: self._load_purchase_requests(),
			output=self._settings_output,
		)


class DriverWizardDialog(ctk.CTkToplevel):
	def __init__(self, master: MainWindow, wizard: DriverCreationWizard, on_created):
		super().__init__(master)
		self._wizard = wizard
		self._on_created = on_created
		self._found_users: list[dict] = []
		self.title("New driver")
		self.geometry("560x520")

		self._step_label = ctk.CTkLabel(self, text="")
		self._step_label.pack(anchor="w", padx=16, pady=(16, 8))

		self._select_frame = ctk.CTkFrame(self)
		search_row = ctk.CTkFrame(self._select_frame)
		search_row.pack(fill="x", padx=8, pady=8)
		self._query = ctk.CTkEntry(search_row, width=260, placeholder_text="Name or phone")
		self._query.pack(side="left", padx=6)
		ctk.CTkButton(search_row, text="Search", command=self._search).pack(side="left", padx=6)
		self._user_choice = ctk.StringVar(value="")
		self._user_menu = ctk.CTkOptionMenu(self._select_frame, values=[""], variable=self._user_choice)
		self._user_menu.pack(fill="x", padx=8, pady=8)
		ctk.CTkButton(self._select_frame, text="Next", command=self._select).pack(anchor="e", padx=8, pady=8)

		self._details_frame = ctk.CTkFrame(self)
		self._direction = ctk.CTkEntry(self._details_frame, placeholder_text="Direction")
		self._direction.insert(0, self._wizard.direction)
		self._direction.pack(fill="x", padx=8, pady=8)
		self._photo_labels: dict[str, ctk.CTkLabel] = {}
		for field_name in DRIVER_PHOTO_FIELDS:
			row = ctk.CTkFrame(self._details_frame)
			row.pack(fill="x", padx=8, pady=4)
			ctk.CTkButton(
				row,
				text=field_name.replace("_", " ").capitalize(),
				width=200,
				command=lambda name=field_name: self._pick_photo(name),
			).pack(side="left", padx=6)
			label = ctk.CTkLabel(row, text="not selected")
			label.pack(side="left", padx=6)
			self._photo_labels[field_name] = label
		button_row = ctk.CTkFrame(self._details_frame)
		button_row.pack(fill="x", padx=8, pady=8)
		ctk.CTkButton(button_row, text="Back", command=self._back).pack(side="left", padx=6)
		self._submit_btn = ctk.CTkButton(button_row, text="Create driver", command=self._submit)
		self._submit_btn.pack(side="right", padx=6)

		self._error_label = ctk.CTkLabel(self, text="", text_color="#d14343", wraplength=520)
		self._error_label.pack(anchor="w", padx=16, pady=8)

		self._show_step()

	def _show_step(self):
		self._select_frame.pack_forget()
		self._details_frame.pack_forget()
		if self._wizard.step is WizardStep.SELECT_USER:
			self._step_label.configure(text="Step 1 of 2: select a user")
			self._select_frame.pack(fill="both", expand=True, padx=16)
		else:
			user = self._wizard.selected_user or {}
			self._step_label.configure(
				text=f"Step 2 of 2: driver details for {user.get('full_name') or user.get('id')}"
			)
			self._details_frame.pack(fill="both", expand=True, padx=16)

	def _search(self):
		query = self._query.get()

		def worker():
			try:
				users = self._wizard.search_users(query)
			except Exception as exc:
				message = f"Search failed: {exc}"
				self.after(0, lambda: self._error_label.configure(text=message))
				return
			self.after(0, lambda: self._show_users(users))

		threading.Thread(target=worker, daemon=True).start()

	def _show_users(self, users: list[dict]):
		self._found_users = users
		choices = [f"#{user.get('id')} {user.get('full_name') or ''} {user.get('phone_number') or ''}".strip() for user in users]
		self._user_menu.configure(values=choices or [""])
		self._user_choice.set(choices[0] if choices else "")
		self._error_label.configure(text="" if users else "No users found.")

	def _select(self):
		choice = self._user_choice.get()
		for user in self._found_users:
			if choice.startswith(f"#{user.get('id')} ") or choice == f"#{user.get('id')}":
				try:
					self._wizard.select_user(user)
				except WizardError as exc:
					self._error_label.configure(text=str(exc))
					return
				self._error_label.configure(text="")
				self._show_step()
				return
		self._error_label.configure(text="Search and pick a user first.")

	def _back(self):
		self._wizard.back()
		self._show_step()

	def _pick_photo(self, field_name: str):
		path = filedialog.askopenfilename(
			parent=self,
			filetypes=[("Images", "*.jpg *.jpeg *.png *.webp"), ("All files", "*.*")],
		)
		if not path:
			return
		self._wizard.set_photo(field_name, path)
		self._photo_labels[field_name].configure(text=path)

	def _submit(self):
		try:
			self._wizard.set_direction(self._direction.get())
		except WizardError as exc:
			self._error_label.configure(text=str(exc))
			return
		self._submit_btn.configure(state="disabled")

		def worker():
			try:
				driver = self._wizard.submit()
			except Exception as exc:
				message = str(exc) or "Haydovchi yaratishda xatolik yuz berdi."
				self.after(0, lambda: self._submit_failed(message))
				return
			self.after(0, lambda: self._submit_done(driver))

		threading.Thread(target=worker, daemon=True).start()

	def _submit_failed(self, message: str):
		self._error_label.configure(text=message)
		self._submit_btn.configure(state="normal")

	def _submit_done(self, driver):
		self._on_created(driver)
		self.destroy()


def _format_users(users: list[dict]) -> str:
	lines = []
	for user in users:
		lines.append(
			f"#{user.get('id')}  {user.get('full_name') or UNKNOWN_LABEL}  "
			f"tel: {user.get('phone_number') or '-'}  tg: {user.get('telegram_id')}  "
			f"til: {language_label(user.get('language'))}"
		)
	return "\n".join(lines)


def _format_drivers(drivers: list[dict]) -> str:
	lines = []
	for driver in drivers:
		user = driver.get("user") or {}
		lines.append(
			f"#{driver.get('id')}  {user.get('full_name') or UNKNOWN_LABEL}  "
			f"{driver.get('direction_display') or driver.get('direction') or '-'}  "
			f"{driver_approval_label(driver.get('is_approved'))}  "
			f"ball: {driver.get('points', 0)}  reyting: {driver.get('rating', 0)}"
		)
	return "\n".join(lines)


def _format_orders(orders: list[dict]) -> str:
	lines = []
	for order in orders:
		lines.append(
			f"#{order.get('id')}  {order_type_label(order.get('order_type'))}  "
			f"{order.get('full_name') or '-'}  {order.get('phone_number') or '-'}  "
			f"{order.get('order_date') or '-'}  {order_status_label(order.get('status'))}"
		)
	return "\n".join(lines)


def _format_point_transactions(transactions: list[dict]) -> str:
	lines = []
	for transaction in transactions:
		driver = transaction.get("driver") or {}
		user = driver.get("user") or {}
		lines.append(
			f"#{transaction.get('id')}  {transaction_type_label(transaction.get('transaction_type'))}  "
			f"{transaction.get('amount')}  {user.get('full_name') or '-'}  "
			f"{transaction.get('reason') or ''}".rstrip()
		)
	return "\n".join(lines)


def _format_purchase_requests(requests: list[dict]) -> str:
	lines = []
	for request in requests:
		driver = request.get("driver") or {}
		user = driver.get("user") or {}
		point_price = request.get("point_price") or {}
		lines.append(
			f"#{request.get('id')}  {purchase_request_status_label(request.get('status'))}  "
			f"{user.get('full_name') or '-'}  {point_price.get('name') or '-'}  "
			f"karta: {request.get('card_number') or '-'}"
		)
	return "\n".join(lines)


def _format_catalog(kind: str, items: list[dict]) -> str:
	lines = []
	for item in items:
		details = "  ".join(
			f"{field.name}: {item.get(field.name) if item.get(field.name) not in (None, '') else '-'}"
			for field in catalog_fields(kind)
		)
		lines.append(f"#{item.get('id')}  {details}")
	return "\n".join(lines)


def _format_admin_choices(users: list[dict], selected_ids: list[int]) -> str:
	lines = []
	for user in users:
		marker = "[x]" if user.get("id") in selected_ids else "[ ]"
		lines.append(
			f"{marker} #{user.get('id')}  {user.get('full_name') or UNKNOWN_LABEL}  "
			f"tel: {user.get('phone_number') or '-'}  tg: {user.get('telegram_id') or '-'}"
		)
	return "\n".join(lines)


def _format_bot_settings(settings: dict) -> str:
	if not isinstance(settings, dict):
		return json.dumps(settings, indent=2)
	lines = [f"{key}: {value}" for key, value in settings.items() if key != "admins"]
	admins = settings.get("admins") or []
	lines.append("admins: " + (", ".join(str(admin.get("full_name") or admin.get("id")) for admin in admins) or "-"))
	return "\n".join(lines)


def run_app() -> None:
	ctk.set_appearance_mode("System")
	ctk.set_default_color_theme("blue")

	try:
		settings = AppSettings.from_env()
	except ConfigurationError as exc:
		configure_logging()
		app = ctk.CTk()
		app.title("Yo'l yo'lakay Admin - Configuration Error")
		app.geometry("760x360")
		message = ctk.CTkTextbox(app)
		message.pack(fill="both", expand=True, padx=16, pady=16)
		message.insert(
			"1.0",
			"Configuration error. Fix the environment variables and restart:\n\n"
			f"{exc}\n\n"
			"Supported:\n"
			"- YOLYOLAKAY_API_URL\n"
			"- YOLYOLAKAY_TIMEOUT_SECONDS\n"
			"- YOLYOLAKAY_STORAGE_PATH\n"
			"- YOLYOLAKAY_LOG_LEVEL\n",
		)
		app.mainloop()
		return

	configure_logging(settings.log_level)
	service = build_service(settings)

	window = MainWindow(service)
	window.mainloop()
