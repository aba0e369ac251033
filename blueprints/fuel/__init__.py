from flask import Blueprint
from flask_login import login_required

fuel_bp = Blueprint('fuel', __name__, url_prefix='/fuel')

# Require authentication for all routes in this blueprint
@fuel_bp.before_request
@login_required
def require_login():
    pass

from . import routes
