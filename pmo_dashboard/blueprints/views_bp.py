"""
Views Blueprint — role-gated page shells for the three dashboards.

  GET /         — redirect to the caller's dashboard (or /login)
  GET /login    — login page
  GET /admin    — admin console (admin)
  GET /pmo      — manager dashboard (manager, admin)
  GET /viewer   — read-only dashboard (any signed-in user)

The pages are minimal shells; the dashboards themselves talk to the JSON API.
Unauthenticated GETs are redirected to /login by the AuthError handler.
"""

from flask import Blueprint, redirect, render_template

from pmo_dashboard.auth import current_identity, require_auth, require_role
from pmo_dashboard.blueprints.auth_bp import ROLE_HOME

views_bp = Blueprint("views_bp", __name__)


@views_bp.route("/", methods=["GET"])
def index():
    identity = current_identity()
    if not identity.is_authenticated:
        return redirect("/login")
    return redirect(ROLE_HOME.get(identity.role, "/viewer"))


@views_bp.route("/login", methods=["GET"])
def login_page():
    identity = current_identity()
    if identity.is_authenticated:
        return redirect(ROLE_HOME.get(identity.role, "/viewer"))
    return render_template("login.html")


@views_bp.route("/admin", methods=["GET"])
@require_role("admin")
def admin_page():
    return render_template("admin.html", identity=current_identity())


@views_bp.route("/pmo", methods=["GET"])
@require_role("manager")
def pmo_page():
    return render_template("pmo.html", identity=current_identity())


@views_bp.route("/viewer", methods=["GET"])
@require_auth
def viewer_page():
    return render_template("viewer.html", identity=current_identity())
