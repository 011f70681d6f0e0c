from flask import Flask, flash, redirect, render_template, request, url_for
from config import Config
from api import ApiError
from services import backends
from forms import BookForm, MemberForm, LoanForm, GuestForm, RoomForm, BookingForm, ConfirmForm
from views import ListView, BookingListView, FormFlow, Shell
from dashboard import library_stats, hotel_stats
from helpers import gather
import logging
import os

# Folder settings
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
app = Flask(
    __name__,
    template_folder=os.path.join(BASE_DIR, "templates"),
    static_folder=os.path.join(BASE_DIR, "static")
)

app.config.from_object(Config)


def configure_logging(level):
    """Send module loggers and app.logger to stderr at ``level``."""
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(level)
    app.logger.setLevel(level)


configure_logging(app.config["LOG_LEVEL"])
backends.init_app(app)

app.logger.debug("TEMPLATE FOLDER: %s", app.template_folder)
app.logger.debug("STATIC FOLDER: %s", app.static_folder)


# ------------------------------------------------------
# SHARED LIST / MODAL FLOW
# ------------------------------------------------------

def _list_view(resource, service, shell, search_fields=(), view_class=ListView, **kwargs):
    return view_class(
        resource=resource,
        service=service,
        page=request.args.get("page", 1, type=int),
        page_size=app.config["PAGE_SIZE"],
        search=request.args.get("q", ""),
        status=request.args.get("status", "all"),
        search_fields=search_fields,
        bus=shell.bus,
        **kwargs
    )


def _back_to_list(endpoint):
    """Redirect to a list page, keeping its page, search and filter."""
    args = {name: request.args[name] for name in ("page", "q", "status") if request.args.get(name)}
    return redirect(url_for(endpoint, **args))


def _selected(service, shell, label):
    """Load the record a modal or a posted form refers to."""
    record_id = request.form.get("record_id") if request.method == "POST" else request.args.get("id")
    if not record_id:
        return None
    try:
        return service.get(record_id)
    except ApiError as e:
        app.logger.warning("loading %s %s failed: %s", label, record_id, e)
        flash(e.user_message(f"Failed to load {label.lower()}"), "error")
        shell.close()
        return None


def _crud_page(template, resource, label, view, shell, form_class, prepare_form=None,
               save_error="Operation failed"):
    """List page with its add/edit/delete modals; POST saves the form."""
    service = view.service
    record = _selected(service, shell, label)
    if request.method == "POST" and request.form.get("record_id") and record is None:
        # the record could not be loaded, do not save it as a new one
        return _render(template, view, shell)
    if shell.modal in ("edit", "delete", "return") and record is None:
        shell.close()

    form = None
    flow = None
    if request.method == "POST":
        form = form_class(obj=record)
        if prepare_form:
            prepare_form(form, record)
        shell.open("edit" if record else "add", record)
        flow = FormFlow(form, service, record, on_success=lambda saved: shell.saved(resource),
                        fallback_error=save_error)
        if flow.submit():
            flash(f"{label} {'updated' if record else 'created'} successfully!", "success")
            return _back_to_list(request.endpoint)
    elif shell.modal in ("add", "edit"):
        shell.open(shell.modal, record)
        form = form_class(obj=record)
        if record:
            form.record_id.data = record.id
        if prepare_form:
            prepare_form(form, record)
    elif record is not None:
        shell.open(shell.modal, record)

    return _render(template, view, shell, form=form, flow=flow)


def _render(template, view, shell, **context):
    view.ensure_loaded()
    context.setdefault("form", None)
    context.setdefault("flow", None)
    return render_template(template, view=view, shell=shell, confirm_form=ConfirmForm(), **context)


def _delete(template, endpoint, view, shell, record_id, label):
    if view.delete(record_id, confirmed=ConfirmForm().confirmed, bus=shell.bus):
        flash(f"{label} deleted successfully!", "success")
        return _back_to_list(endpoint)
    if view.error:
        flash(view.error, "error")
    return _render(template, view, shell)


# ------------------------------------------------------
# DASHBOARD
# ------------------------------------------------------

@app.route("/")
def index():
    stats = library_stats(backends.library)
    health = backends.library.health()
    for name in stats.failed:
        app.logger.warning("dashboard: %s figures unavailable", name)
    return render_template("index.html", stats=stats, health=health)


# ------------------------------------------------------
# BOOK CRUD
# ------------------------------------------------------

def _book_view(shell):
    return _list_view("books", backends.library.books, shell, ("title", "author", "isbn"))


@app.route("/books", methods=["GET", "POST"])
def books():
    shell = Shell.from_args(request.args)
    return _crud_page("books.html", "books", "Book", _book_view(shell), shell, BookForm)


@app.route("/books/<book_id>/delete", methods=["POST"])
def delete_book(book_id):
    shell = Shell()
    return _delete("books.html", "books", _book_view(shell), shell, book_id, "Book")


# ------------------------------------------------------
# MEMBER CRUD
# ------------------------------------------------------

def _member_view(shell):
    return _list_view("members", backends.library.members, shell, ("name", "email"))


@app.route("/members", methods=["GET", "POST"])
def members():
    shell = Shell.from_args(request.args)
    return _crud_page("members.html", "members", "Member", _member_view(shell), shell, MemberForm)


@app.route("/members/<member_id>/delete", methods=["POST"])
def delete_member(member_id):
    shell = Shell()
    return _delete("members.html", "members", _member_view(shell), shell, member_id, "Member")


# ------------------------------------------------------
# LOANS (ISSUE / RETURN)
# ------------------------------------------------------

def _loan_view(shell):
    return _list_view("loans", backends.library.loans, shell)


def _loan_options(form, loan):
    library = backends.library
    results, _ = gather({
        "members": lambda: library.members.list(1, 1000).items,
        "books": lambda: library.books.list(1, 1000).items,
    })
    form.set_options(
        results.get("members", []),
        results.get("books", []),
        current_book_id=loan.book_id if loan else None,
    )


@app.route("/loans", methods=["GET", "POST"])
def loans():
    shell = Shell.from_args(request.args)
    return _crud_page("loans.html", "loans", "Loan", _loan_view(shell), shell, LoanForm, _loan_options)


@app.route("/loans/<loan_id>/return", methods=["POST"])
def return_loan(loan_id):
    shell = Shell()
    view = _loan_view(shell)
    if ConfirmForm().confirmed:
        try:
            backends.library.loans.return_loan(loan_id)
        except ApiError as e:
            app.logger.warning("returning loan %s failed: %s", loan_id, e)
            flash(e.user_message("Failed to return book"), "error")
        else:
            shell.saved("loans")
            flash("Book returned successfully!", "success")
            return _back_to_list("loans")
    return _render("loans.html", view, shell)


@app.route("/loans/<loan_id>/delete", methods=["POST"])
def delete_loan(loan_id):
    shell = Shell()
    return _delete("loans.html", "loans", _loan_view(shell), shell, loan_id, "Loan")


# ------------------------------------------------------
# HOTEL OVERVIEW
# ------------------------------------------------------

@app.route("/hotel/")
def hotel_index():
    stats = hotel_stats(backends.hotel)
    health = backends.hotel.health()
    for name in stats.failed:
        app.logger.warning("hotel overview: %s figures unavailable", name)
    return render_template("hotel/index.html", stats=stats, health=health)


# ------------------------------------------------------
# GUEST CRUD
# ------------------------------------------------------

def _guest_view(shell):
    return _list_view("guests", backends.hotel.guests, shell, ("name", "email"),
                      fallback_error="Failed to fetch guests. Please try again later.",
                      delete_error="Failed to delete guest")


@app.route("/hotel/guests", methods=["GET", "POST"])
def guests():
    shell = Shell.from_args(request.args)
    return _crud_page("hotel/guests.html", "guests", "Guest", _guest_view(shell), shell, GuestForm,
                      save_error="Failed to save guest. Please try again.")


@app.route("/hotel/guests/<guest_id>/delete", methods=["POST"])
def delete_guest(guest_id):
    shell = Shell()
    return _delete("hotel/guests.html", "guests", _guest_view(shell), shell, guest_id, "Guest")


# ------------------------------------------------------
# ROOM CRUD
# ------------------------------------------------------

def _room_view(shell):
    return _list_view("rooms", backends.hotel.rooms, shell, ("number", "type"),
                      fallback_error="Failed to fetch rooms. Please try again later.",
                      delete_error="Failed to delete room")


@app.route("/hotel/rooms", methods=["GET", "POST"])
def rooms():
    shell = Shell.from_args(request.args)
    return _crud_page("hotel/rooms.html", "rooms", "Room", _room_view(shell), shell, RoomForm,
                      save_error="Failed to save room. Please try again.")


@app.route("/hotel/rooms/<room_id>/delete", methods=["POST"])
def delete_room(room_id):
    shell = Shell()
    return _delete("hotel/rooms.html", "rooms", _room_view(shell), shell, room_id, "Room")


# ------------------------------------------------------
# BOOKING CRUD
# ------------------------------------------------------

def _booking_view(shell):
    hotel = backends.hotel
    return _list_view("bookings", hotel.bookings, shell, ("status", "notes"),
                      view_class=BookingListView, guests=hotel.guests, rooms=hotel.rooms,
                      fallback_error="Failed to fetch data. Please try again later.",
                      delete_error="Failed to cancel booking")


def _booking_options(form, booking):
    hotel = backends.hotel
    results, _ = gather({
        "guests": lambda: hotel.guests.list(1, 1000).items,
        "rooms": lambda: hotel.rooms.list(1, 1000).items,
    })
    form.set_options(results.get("guests", []), results.get("rooms", []))


@app.route("/hotel/bookings", methods=["GET", "POST"])
def bookings():
    shell = Shell.from_args(request.args)
    return _crud_page("hotel/bookings.html", "bookings", "Booking", _booking_view(shell), shell,
                      BookingForm, _booking_options, save_error="Failed to save booking. Please try again.")


@app.route("/hotel/bookings/<booking_id>/delete", methods=["POST"])
def delete_booking(booking_id):
    shell = Shell()
    return _delete("hotel/bookings.html", "bookings", _booking_view(shell), shell, booking_id, "Booking")


# ------------------------------------------------------
# ERRORS
# ------------------------------------------------------

@app.errorhandler(404)
def not_found(e):
    return render_template("404.html"), 404


# ------------------------------------------------------
# RUN SERVER
# ------------------------------------------------------

if __name__ == "__main__":
    app.run(debug=True)
