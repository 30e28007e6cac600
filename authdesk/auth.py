import time
import uuid

from nicegui import ui, app

from authdesk.claims import AdditionalUserClaimsPrincipalFactory, ClaimsPrincipal, AppClaims, ClaimTypes
from authdesk.crud import authenticate_user, user_has_permission
from authdesk.db_session import get_db
from authdesk.identity import UserManager
from authdesk.logger import log


# --- CURRENT USER ---
def get_current_principal():
    """Principal of the signed-in user, rebuilt from the session storage"""
    return ClaimsPrincipal.from_storage(app.storage.user.get('principal'))


def sign_in(db, user):
    principal = AdditionalUserClaimsPrincipalFactory(UserManager(db)).create(user)
    app.storage.user['principal'] = principal.to_storage()
    return principal


def login_user(login, password):
    """
    Checks the credentials and stores the enriched principal in the session.
    Returns the principal, or None when the login fails.
    """
    db = next(get_db())
    try:
        user = authenticate_user(db, login, password)
        if not user:
            log.warning(f"AUTH FAILED: attempt for {login}")
            return None
        principal = sign_in(db, user)
        log.info(f"AUTH SUCCESS: {user.user_name}")
        return principal
    finally:
        db.close()


# --- LOGOUT ---
def logout():
    """Clears the session and goes back to the login page"""
    app.storage.user.clear()
    ui.navigate.to('/login')


def require_permission(permission_name, forbidden_redirect='/'):
    """
    Page guard, returns the principal when access is granted.
    Anonymous visitors go to /login, users without the permission go to
    `forbidden_redirect`. Pass None on the page that redirect points at:
    the guard then shows a notice instead of looping.
    """
    principal = get_current_principal()
    if principal is None:
        ui.navigate.to('/login')
        return None

    user_id = principal.find_first_value(AppClaims.Id)
    db = next(get_db())
    try:
        allowed = user_has_permission(db, uuid.UUID(user_id), permission_name)
    finally:
        db.close()

    if allowed:
        return principal

    log.warning(f"ACCESS DENIED: {principal.find_first_value(ClaimTypes.NAME)} lacks {permission_name}")
    if forbidden_redirect:
        ui.navigate.to(forbidden_redirect)
        return None

    with ui.card().classes('absolute-center w-96 p-8'):
        ui.label('Access denied').classes('text-xl font-bold text-red-600')
        ui.label(f'Missing permission: {permission_name}').classes('text-sm text-gray-500')
        ui.button('LOG OUT', on_click=logout).classes('w-full mt-4')
    return None


def create_auth_routes():

    # --- LOGIN ---
    @ui.page('/login')
    def login_page():
        ui.add_head_html('<style>body { background-color: #f3f4f6; font-family: sans-serif; }</style>')

        with ui.card().classes('absolute-center w-96 p-8 shadow-2xl rounded-xl border border-gray-200'):
            ui.label('AUTHDESK').classes('text-xl font-black text-center text-blue-700 w-full mb-8 tracking-widest')

            login = ui.input('Email or user name').props('outlined dense').classes('w-full mb-3')
            password = ui.input('Password', password=True).props('outlined dense').classes('w-full mb-6')

            def try_login():
                if login_user(login.value, password.value):
                    ui.navigate.to('/')
                else:
                    time.sleep(1.0)
                    ui.notify('Invalid login or password', type='negative')

            ui.button('LOG IN', on_click=try_login).classes('w-full bg-black text-white font-bold shadow-none')
