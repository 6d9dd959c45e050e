"""
Authentication routes: login, logout, CSRF token.
Identity is supplied to the calendar and booking routes through Flask-Login.
"""

from flask import Blueprint
from flask_login import login_user, logout_user, login_required, current_user
from flask_wtf.csrf import generate_csrf

from blueprints.auth.forms import LoginForm
from models.user import User, get_user_by_username, update_last_login, check_password
from utils.api_response import api_success, api_error
from utils.messages import MESSAGES

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/csrf-token')
def csrf_token():
    """Token for the X-CSRFToken header of later writes."""
    return api_success(csrfToken=generate_csrf())


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    Login with username and password.

    Request body (JSON or form):
        username, password, remember_me (optional)
    """
    form = LoginForm()

    if not form.validate_on_submit():
        errors = {field: messages[0] for field, messages in form.errors.items()}
        return api_error(MESSAGES['invalid_credentials'], status=400, errors=errors)

    account = get_user_by_username(form.username.data)

    # Check credentials
    if account is None or not check_password(account, form.password.data):
        return api_error(MESSAGES['invalid_credentials'], status=401)

    # Check if user is active
    if not account.get('active'):
        return api_error(MESSAGES['account_disabled'], status=403)

    user = User(account)
    login_user(user, remember=form.remember_me.data)
    update_last_login(user.id)

    return api_success(
        message=MESSAGES['login_success'].format(name=user.display_name),
        user=user.to_dict()
    )


@auth_bp.route('/logout', methods=['GET', 'POST'])
@login_required
def logout():
    """Logout current user."""
    logout_user()
    return api_success(message=MESSAGES['logout_success'])


@auth_bp.route('/me')
@login_required
def me():
    """Current user."""
    return api_success(user=current_user.to_dict())
