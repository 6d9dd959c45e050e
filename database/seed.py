"""
Database seed data.
Initial data population for fresh database installations.
"""

from werkzeug.security import generate_password_hash


def seed_database(db):
    """Insert initial seed data."""

    # 1. Demo users: one host, one guest
    users_data = [
        ('host', 'host@wanderlust.local', 'host123', 'Demo Host'),
        ('guest', 'guest@wanderlust.local', 'guest123', 'Demo Guest'),
    ]

    for username, email, password, full_name in users_data:
        db.execute('''
            INSERT INTO users (username, email, password_hash, full_name, active)
            VALUES (?, ?, ?, ?, 1)
        ''', (username, email, generate_password_hash(password), full_name))

    host_id = db.execute("SELECT id FROM users WHERE username = 'host'").fetchone()[0]

    # 2. Demo listing owned by the host
    db.execute('''
        INSERT INTO listings (owner_id, title, location, base_price, currency)
        VALUES (?, ?, ?, ?, ?)
    ''', (host_id, 'Lakeview Cottage', 'Pune, Maharashtra', 2000, 'INR'))
