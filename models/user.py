"""
User accounts.
Hosts own listings and edit their calendars; guests book stays. The same
account can be both, so there is no role column: hosting is ownership.
"""

from werkzeug.security import generate_password_hash, check_password_hash
from database import get_db


class User:
    """Signed-in account as seen by Flask-Login."""

    def __init__(self, row):
        self.id = row['id']
        self.username = row['username']
        self.email = row['email']
        self.full_name = row['full_name']
        self.active = row['active']
        self.last_login = row.get('last_login')

    # Flask-Login protocol
    is_authenticated = True
    is_anonymous = False

    @property
    def is_active(self):
        return self.active == 1

    def get_id(self):
        return str(self.id)

    @property
    def display_name(self) -> str:
        return self.full_name or self.username

    def to_dict(self) -> dict:
        return {'id': self.id, 'username': self.username, 'fullName': self.full_name}


def _fetch_user(column: str, value):
    row = get_db().execute(f'SELECT * FROM users WHERE {column} = ?', (value,)).fetchone()
    return dict(row) if row else None


def get_user_by_id(user_id: int) -> dict:
    """User row by ID, or None."""
    return _fetch_user('id', user_id)


def get_user_by_username(username: str) -> dict:
    """User row by username, or None."""
    return _fetch_user('username', username)


def create_user(username: str, email: str, password: str, full_name: str = None) -> int:
    """
    Create an active account.

    Args:
        username: Unique username
        email: Unique email
        password: Plain text password (stored hashed)
        full_name: Display name

    Returns:
        New user ID

    Raises:
        sqlite3.IntegrityError: Username or email already taken
    """
    db = get_db()
    cursor = db.execute('''
        INSERT INTO users (username, email, password_hash, full_name)
        VALUES (?, ?, ?, ?)
    ''', (username, email, generate_password_hash(password), full_name))
    db.commit()
    return cursor.lastrowid


def update_last_login(user_id: int) -> None:
    db = get_db()
    db.execute('UPDATE users SET last_login = CURRENT_TIMESTAMP WHERE id = ?', (user_id,))
    db.commit()


def check_password(user_row: dict, password: str) -> bool:
    """Verify a password against the stored hash."""
    if not user_row or not password:
        return False
    return check_password_hash(user_row['password_hash'], password)
