"""
Centralized user-facing messages.
All API text lives here for consistency between routes and the editor.
"""

MESSAGES = {
    # Success messages
    'login_success': 'Welcome back {name}',
    'logout_success': 'Signed out',
    'availability_updated': 'Calendar updated successfully',
    'availability_partial': 'Calendar updated; {count} booked date(s) could not be blocked',
    'bulk_update_done': 'Bulk update completed successfully',
    'recurring_applied': 'Recurring pattern applied successfully',
    'recurring_removed': 'Recurring pattern removed successfully',
    'variation_added': 'Pricing variation added successfully',
    'variation_updated': 'Pricing variation updated successfully',
    'variation_removed': 'Pricing variation removed successfully',
    'booking_cancelled': 'Booking cancelled',

    # Error messages
    'invalid_credentials': 'Invalid username or password',
    'account_disabled': 'Your account has been disabled',
    'login_required': 'Please sign in to continue',
    'not_host': 'Only the host of this listing can change its calendar',
    'listing_not_found': 'Listing not found',
    'booking_not_found': 'Booking not found',
    'variation_not_found': 'Pricing variation not found',
    'recurring_not_found': 'Recurring pattern not found',
    'data_required': 'Request body is required',
    'date_required': '{field} is required',
    'invalid_date': 'Invalid date: {value}',
    'invalid_date_range': 'End date must be after start date',
    'invalid_window': 'End date must not be before start date',
    'window_too_long': 'Date window cannot exceed {days} days',
    'past_date': 'You cannot book for a past date',
    'invalid_price': 'Please enter a valid price',
    'invalid_guests': 'Guest count must be at least 1',
    'invalid_days': 'days must be between 1 and {max_days}',
    'invalid_action': 'Invalid action',
    'invalid_pattern_type': 'Pattern type must be weekly or monthly',
    'invalid_pattern': 'Pattern must be a non-empty list of {kind}',
    'own_listing': 'You cannot book your own listing',
    'dates_booked': 'These dates are already booked',
    'dates_blocked': 'These dates are not available',
    'variation_overlap': 'Pricing variation overlaps an existing one',
    'price_changed': 'The price for these dates has changed, please review it',
    'nights_mismatch': 'Number of nights does not match the selected dates',
    'booking_cancelled_already': 'Booking is already cancelled',
    'booking_not_payable': 'Cancelled bookings cannot be paid',
    'payment_unavailable': 'Payment service is unavailable, please try again',
    'persistence_failed': 'Something went wrong, please try again',

    # Editor notices
    'save_in_progress': 'A save is already in progress',
    'select_dates_first': 'Please select dates on the calendar first',
    'connection_error': 'Connection error. Please try again.',
    'undo': 'Undo',
    'redo': 'Redo',
    'blocked_next_days': 'Blocked next {days} days',
    'blocked_weekends': 'Blocked all weekends for next {months} months',
    'blocks_cleared': 'All blocks cleared',
    'price_set': 'Custom price set successfully',
}
