from nicegui import ui

from authdesk.auth import require_permission, logout
from authdesk.claims import AppClaims, ClaimTypes
from authdesk.crud import get_all_users, get_dashboard_stats
from authdesk.db_session import get_db
from authdesk.schemas import UserExtra


def header(principal):
    with ui.header().classes('bg-slate-900 text-white px-8 py-4 flex justify-between items-center'):
        with ui.row().classes('items-center gap-3'):
            ui.icon('shield', size='md', color='blue-400')
            ui.label('AUTHDESK').classes('font-black tracking-widest text-lg')
            ui.link('Dashboard', '/').classes('text-white text-sm no-underline')
            ui.link('Users', '/users').classes('text-white text-sm no-underline')
        with ui.row().classes('items-center gap-3'):
            ui.label(principal.find_first_value(AppClaims.FullName) or '').classes('text-sm')
            ui.button('EXIT', icon='logout', on_click=logout).props('flat color=white dense')


def create_pages():

    # --- DASHBOARD ---
    @ui.page('/')
    def dashboard_page():
        # the dashboard is where forbidden pages send users, so it shows a notice instead
        principal = require_permission('CanViewDashboard', forbidden_redirect=None)
        if principal is None:
            return

        db = next(get_db())
        try:
            stats = get_dashboard_stats(db)
        finally:
            db.close()

        header(principal)
        with ui.column().classes('w-full p-8 max-w-5xl mx-auto gap-6'):
            with ui.row().classes('w-full gap-4'):
                for label, value in stats.items():
                    with ui.card().classes('flex-1 items-center'):
                        ui.label(str(value)).classes('text-3xl font-black')
                        ui.label(label.upper()).classes('text-xs text-gray-500 font-bold')

            with ui.card().classes('w-full'):
                ui.label('Your claims').classes('text-lg font-bold mb-2')
                rows = [{'type': c.type, 'value': c.value} for c in principal.claims]
                ui.table(
                    columns=[
                        {'name': 'type', 'label': 'Type', 'field': 'type', 'align': 'left'},
                        {'name': 'value', 'label': 'Value', 'field': 'value', 'align': 'left'},
                    ],
                    rows=rows,
                ).classes('w-full')

    # --- USERS (read only) ---
    @ui.page('/users')
    def users_page():
        principal = require_permission('CanViewUser')
        if principal is None:
            return

        db = next(get_db())
        try:
            rows = []
            for user in get_all_users(db):
                detail = user.detail
                extra = detail.get_extra(UserExtra) if detail else None
                rows.append({
                    'name': user.full_name,
                    'email': user.email,
                    'roles': ', '.join(sorted(ur.role.name for ur in user.user_roles)),
                    'birthdate': detail.birthdate.strftime('%Y-%m-%d') if detail and detail.birthdate else '',
                    'address': detail.address if detail else '',
                    'interests': ', '.join(extra.interests) if extra else '',
                })
        finally:
            db.close()

        header(principal)
        with ui.column().classes('w-full p-8 max-w-6xl mx-auto gap-4'):
            ui.label('Users').classes('text-xl font-bold')
            ui.table(
                columns=[{'name': k, 'label': k.capitalize(), 'field': k, 'align': 'left'} for k in
                         ('name', 'email', 'roles', 'birthdate', 'address', 'interests')],
                rows=rows,
                row_key='email',
            ).classes('w-full')
            if principal.is_in_role('Admin'):
                ui.label(f"Signed in as {principal.find_first_value(ClaimTypes.EMAIL)} (admin)").classes('text-xs text-gray-400')
