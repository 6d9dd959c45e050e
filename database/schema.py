"""
Database schema definitions.
Table creation, indexes, and structure management.

All dates are stored as ISO 'YYYY-MM-DD' text so that lexical
comparison in SQL matches calendar order.
"""


def drop_tables(db):
    """Drop all existing tables."""
    # Disable foreign key constraints before dropping
    db.execute('PRAGMA foreign_keys = OFF')

    tables = [
        'recurring_blocks',
        'pricing_variations',
        'booking_nights',
        'bookings',
        'listing_blocked_dates',
        'listings',
        'users'
    ]

    for table in tables:
        db.execute(f'DROP TABLE IF EXISTS {table}')

    # Re-enable foreign key constraints
    db.execute('PRAGMA foreign_keys = ON')


def create_tables(db):
    """Create all database tables."""

    # 1. Users (identity is owned by the auth collaborator)
    db.execute('''
        CREATE TABLE users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT UNIQUE NOT NULL,
            email TEXT UNIQUE NOT NULL,
            password_hash TEXT NOT NULL,
            full_name TEXT,
            active INTEGER DEFAULT 1,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            last_login TEXT
        )
    ''')

    # 2. Listings
    db.execute('''
        CREATE TABLE listings (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            owner_id INTEGER NOT NULL REFERENCES users(id),
            title TEXT NOT NULL,
            location TEXT,
            base_price REAL NOT NULL CHECK (base_price > 0),
            currency TEXT DEFAULT 'INR',
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            updated_at TEXT DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # Host-curated blocked dates, independent of bookings
    db.execute('''
        CREATE TABLE listing_blocked_dates (
            listing_id INTEGER NOT NULL REFERENCES listings(id) ON DELETE CASCADE,
            blocked_date TEXT NOT NULL,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            PRIMARY KEY (listing_id, blocked_date)
        )
    ''')

    # 3. Bookings
    db.execute('''
        CREATE TABLE bookings (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            listing_id INTEGER NOT NULL REFERENCES listings(id),
            guest_id INTEGER NOT NULL REFERENCES users(id),
            start_date TEXT NOT NULL,
            end_date TEXT NOT NULL,
            guest_count INTEGER NOT NULL DEFAULT 1,
            nights INTEGER NOT NULL,
            total_price REAL NOT NULL,
            status TEXT NOT NULL DEFAULT 'created'
                CHECK (status IN ('created', 'paid', 'cancelled')),
            payment_status TEXT NOT NULL DEFAULT 'pending'
                CHECK (payment_status IN ('pending', 'paid', 'failed')),
            checkout_session_id TEXT,
            checkout_url TEXT,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            updated_at TEXT DEFAULT CURRENT_TIMESTAMP,
            paid_at TEXT,
            cancelled_at TEXT,
            CHECK (start_date < end_date)
        )
    ''')

    # One row per occupied night of every non-cancelled booking.
    # The unique index on (listing_id, night_date) makes a double booking
    # impossible at the storage level.
    db.execute('''
        CREATE TABLE booking_nights (
            booking_id INTEGER NOT NULL REFERENCES bookings(id) ON DELETE CASCADE,
            listing_id INTEGER NOT NULL REFERENCES listings(id),
            night_date TEXT NOT NULL
        )
    ''')

    # 4. Pricing variations (start_date and end_date both inclusive)
    db.execute('''
        CREATE TABLE pricing_variations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            listing_id INTEGER NOT NULL REFERENCES listings(id) ON DELETE CASCADE,
            start_date TEXT NOT NULL,
            end_date TEXT NOT NULL,
            price REAL NOT NULL CHECK (price >= 0),
            reason TEXT DEFAULT 'Custom Pricing',
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            CHECK (start_date <= end_date)
        )
    ''')

    # 5. Applied recurring patterns (record only, never re-expanded)
    db.execute('''
        CREATE TABLE recurring_blocks (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            listing_id INTEGER NOT NULL REFERENCES listings(id) ON DELETE CASCADE,
            type TEXT NOT NULL CHECK (type IN ('weekly', 'monthly')),
            pattern TEXT NOT NULL,
            start_date TEXT NOT NULL,
            end_date TEXT NOT NULL,
            description TEXT DEFAULT 'Recurring Block',
            dates_added INTEGER DEFAULT 0,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP
        )
    ''')


def create_indexes(db):
    """Create database indexes."""
    db.execute('''
        CREATE UNIQUE INDEX idx_booking_nights_listing_night
        ON booking_nights(listing_id, night_date)
    ''')
    db.execute('CREATE INDEX idx_booking_nights_booking ON booking_nights(booking_id)')
    db.execute('CREATE INDEX idx_bookings_listing_dates ON bookings(listing_id, start_date, end_date)')
    db.execute('CREATE INDEX idx_bookings_guest ON bookings(guest_id)')
    db.execute('CREATE INDEX idx_pricing_variations_listing ON pricing_variations(listing_id, start_date)')
    db.execute('CREATE INDEX idx_recurring_blocks_listing ON recurring_blocks(listing_id)')
    db.execute('CREATE INDEX idx_listings_owner ON listings(owner_id)')
