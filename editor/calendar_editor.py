"""
Calendar editor.

Client-side state machine behind the host's availability calendar. Edits
are staged in local sets and only reach the server on save(), which sends
the whole blocked set. Pointer handling is synchronous; server calls are
coroutines that run the blocking HTTP request in a worker thread.

States:
    Idle
    Dragging(anchor, action)        pointer is down, action fixed at anchor
    PriceModalOpen(selection)       price mode selection awaiting a price

Smart paint: the drag action is decided once, from the anchor's state
before the drag. Dragging from a blocked day frees every day entered;
dragging from a free day blocks them.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta

from editor.gateway import GatewayError
from editor.history import DEFAULT_LIMIT, History, Snapshot
from models.date_range import daterange, parse_date
from utils.messages import MESSAGES

logger = logging.getLogger(__name__)

MODE_BLOCK = 'block'
MODE_AVAILABLE = 'available'
MODE_PRICE = 'price'
MODES = (MODE_BLOCK, MODE_AVAILABLE, MODE_PRICE)

ACTION_BLOCK = 'block'
ACTION_AVAILABLE = 'available'
ACTION_SELECT = 'select'


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Dragging:
    anchor: date
    action: str


@dataclass(frozen=True)
class PriceModalOpen:
    selection: frozenset
    variation: Optional[dict] = None

    @property
    def start(self) -> date:
        return min(self.selection)

    @property
    def end(self) -> date:
        return max(self.selection)


@dataclass(frozen=True)
class Notice:
    """Transient message for the host (toast)."""

    level: str
    message: str


class CalendarEditor:
    """
    Host calendar editor for one listing.

    Args:
        listing_id: Listing being edited
        gateway: AvailabilityGateway (or anything with the same methods)
        blocked: Initially blocked dates
        booked: Booked nights (never selectable)
        variations: Pricing variations as served by the API
        today: Current date (days before it are not selectable)
        history_limit: Undo depth
    """

    def __init__(
        self,
        listing_id: int,
        gateway,
        blocked=(),
        booked=(),
        variations=(),
        today: date = None,
        history_limit: int = DEFAULT_LIMIT
    ):
        self.listing_id = listing_id
        self.gateway = gateway
        self.today = today or date.today()

        self.blocked = {parse_date(d) for d in blocked}
        self.booked = {parse_date(d) for d in booked}
        self.selected = set()
        self.variations = list(variations)
        self.analytics = None

        self.mode = MODE_BLOCK
        self.state = Idle()
        self.saving = False
        self.notices = []

        self.history = History(history_limit)
        self._commit()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def can_save(self) -> bool:
        return not self.saving

    @property
    def notice(self) -> Optional[Notice]:
        return self.notices[-1] if self.notices else None

    def is_selectable(self, day: date) -> bool:
        return day >= self.today and day not in self.booked

    def variation_for(self, day: date) -> Optional[dict]:
        """Variation pricing a day (most recently created wins)."""
        covering = [
            v for v in self.variations
            if parse_date(v['startDate']) <= day <= parse_date(v['endDate'])
        ]
        return max(covering, key=lambda v: v['id']) if covering else None

    # -------------------------------------------------------------------------
    # Local state
    # -------------------------------------------------------------------------

    def _notify(self, level: str, message: str) -> None:
        self.notices.append(Notice(level, message))

    def _commit(self) -> None:
        self.history.commit(Snapshot.capture(self.blocked, self.selected))

    def _restore(self, snapshot: Snapshot) -> None:
        self.blocked, self.selected = snapshot.restore()

    def set_mode(self, mode: str) -> None:
        if mode not in MODES:
            raise ValueError(f"Unknown mode: {mode}")
        self.mode = mode

    def apply_to_range(self, action: str, dates) -> bool:
        """
        Apply a paint action to every selectable date.

        Returns:
            bool: Whether any local state changed
        """
        changed = False
        for day in dates:
            if not self.is_selectable(day):
                continue
            if action == ACTION_SELECT:
                if day not in self.selected:
                    self.selected.add(day)
                    changed = True
            elif action == ACTION_AVAILABLE:
                if day in self.blocked:
                    self.blocked.discard(day)
                    changed = True
            elif day not in self.blocked:
                self.blocked.add(day)
                changed = True
        return changed

    # -------------------------------------------------------------------------
    # Pointer events
    # -------------------------------------------------------------------------

    def begin_drag(self, day) -> Optional[str]:
        """
        Pointer down on a day.

        Returns:
            str or None: The drag action, None if the day is not selectable
        """
        day = parse_date(day)
        if not isinstance(self.state, Idle) or not self.is_selectable(day):
            return None

        if self.mode == MODE_PRICE:
            action = ACTION_SELECT
            self.selected = {day}
        else:
            action = ACTION_AVAILABLE if day in self.blocked else ACTION_BLOCK
            self.apply_to_range(action, [day])
            self.selected.add(day)

        self.state = Dragging(day, action)
        return action

    def extend_drag(self, day) -> bool:
        """Pointer entered a day while dragging: paint anchor..day."""
        if not isinstance(self.state, Dragging):
            return False

        day = parse_date(day)
        first, last = sorted((self.state.anchor, day))
        return self.apply_to_range(self.state.action, daterange(first, last))

    def end_drag(self):
        """
        Pointer released.

        A paint drag commits one history snapshot. A price selection opens
        the price modal.
        """
        if not isinstance(self.state, Dragging):
            return self.state

        if self.state.action == ACTION_SELECT:
            if self.selected:
                self.state = PriceModalOpen(frozenset(self.selected))
            else:
                self.state = Idle()
            return self.state

        self._commit()
        self.state = Idle()
        return self.state

    def click(self, day):
        """
        Single click (pointer down and up on the same day).

        Priced days and price mode open the price modal; otherwise the
        day's blocked state is toggled and committed.
        """
        day = parse_date(day)
        if not isinstance(self.state, Idle) or not self.is_selectable(day):
            return self.state

        variation = self.variation_for(day)
        if variation is not None or self.mode == MODE_PRICE:
            self.selected = {day}
            self.state = PriceModalOpen(frozenset(self.selected), variation)
            return self.state

        action = ACTION_AVAILABLE if day in self.blocked else ACTION_BLOCK
        self.apply_to_range(action, [day])
        self.selected.add(day)
        self._commit()
        return self.state

    def close_modal(self) -> None:
        if isinstance(self.state, PriceModalOpen):
            self.state = Idle()

    # -------------------------------------------------------------------------
    # Quick actions
    # -------------------------------------------------------------------------

    def block_next_days(self, days: int = 30) -> None:
        last = self.today + timedelta(days=days - 1)
        self.apply_to_range(ACTION_BLOCK, daterange(self.today, last))
        self._commit()
        self._notify('success', MESSAGES['blocked_next_days'].format(days=days))

    def block_weekends(self, months: int = 3) -> None:
        last = self.today + relativedelta(months=months)
        weekends = [d for d in daterange(self.today, last) if d.weekday() >= 5]
        self.apply_to_range(ACTION_BLOCK, weekends)
        self._commit()
        self._notify('success', MESSAGES['blocked_weekends'].format(months=months))

    def clear_all_blocks(self) -> None:
        self.blocked.clear()
        self.selected.clear()
        self._commit()
        self._notify('success', MESSAGES['blocks_cleared'])

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    def undo(self) -> bool:
        snapshot = self.history.undo()
        if snapshot is None:
            return False
        self._restore(snapshot)
        self._notify('info', MESSAGES['undo'])
        return True

    def redo(self) -> bool:
        snapshot = self.history.redo()
        if snapshot is None:
            return False
        self._restore(snapshot)
        self._notify('info', MESSAGES['redo'])
        return True

    # -------------------------------------------------------------------------
    # Server calls
    # -------------------------------------------------------------------------

    async def save(self) -> bool:
        """
        Send the whole blocked set to the server.

        Only one save runs at a time; a call while one is pending sends
        nothing. Local state is never changed by the outcome.
        """
        if self.saving:
            self._notify('warning', MESSAGES['save_in_progress'])
            return False

        self.saving = True
        dates = sorted(self.blocked)
        try:
            result = await asyncio.to_thread(self.gateway.save_availability, self.listing_id, dates)
        except GatewayError as e:
            logger.warning(f"[Editor] Save failed for listing {self.listing_id}: {e.message}")
            self._notify('error', e.message)
            return False
        finally:
            self.saving = False

        rejected = result.get('rejected') or []
        if rejected:
            self._notify('warning', MESSAGES['availability_partial'].format(count=len(rejected)))
        else:
            self._notify('success', result.get('message') or MESSAGES['availability_updated'])

        await self.refresh_analytics()
        return True

    async def refresh_analytics(self, days: int = 90) -> Optional[dict]:
        try:
            result = await asyncio.to_thread(self.gateway.get_analytics, self.listing_id, days)
        except GatewayError as e:
            logger.warning(f"[Editor] Analytics failed for listing {self.listing_id}: {e.message}")
            self._notify('error', e.message)
            return None

        self.analytics = result.get('analytics')
        return self.analytics

    async def load_variations(self) -> bool:
        try:
            result = await asyncio.to_thread(self.gateway.get_pricing_variations, self.listing_id)
        except GatewayError as e:
            self._notify('error', e.message)
            return False

        self.variations = list(result.get('variations') or [])
        return True

    async def apply_recurring(self, pattern_type: str, selectors, first, last) -> bool:
        """
        Apply a weekly/monthly pattern on the server and mirror the dates
        it blocked locally, as one history entry.
        """
        try:
            result = await asyncio.to_thread(
                self.gateway.apply_recurring_pattern,
                self.listing_id, pattern_type, selectors, parse_date(first), parse_date(last)
            )
        except GatewayError as e:
            self._notify('error', e.message)
            return False

        self.blocked.update(parse_date(d) for d in result.get('applied') or [])
        self._commit()
        self._notify('success', MESSAGES['recurring_applied'])
        return True

    async def submit_price(self, price, reason: str = '') -> bool:
        """
        Store a custom price for the open modal's selection.

        Editing a priced day updates its variation in place over the same
        span; if that fails the server keeps the old price.
        """
        if not isinstance(self.state, PriceModalOpen):
            self._notify('warning', MESSAGES['select_dates_first'])
            return False

        try:
            price = float(price)
        except (TypeError, ValueError):
            price = 0
        if price <= 0:
            self._notify('warning', MESSAGES['invalid_price'])
            return False

        modal = self.state
        try:
            if modal.variation is not None:
                await asyncio.to_thread(
                    self.gateway.update_pricing_variation,
                    self.listing_id,
                    modal.variation['id'],
                    parse_date(modal.variation['startDate']),
                    parse_date(modal.variation['endDate']),
                    price,
                    reason,
                )
            else:
                await asyncio.to_thread(
                    self.gateway.add_pricing_variation,
                    self.listing_id, modal.start, modal.end, price, reason
                )
        except GatewayError as e:
            self._notify('error', e.message)
            return False

        await self.load_variations()
        self.selected.clear()
        self.state = Idle()
        self._notify('success', MESSAGES['price_set'])
        return True

    async def remove_price(self, variation_id: int = None) -> bool:
        if variation_id is None and isinstance(self.state, PriceModalOpen) and self.state.variation:
            variation_id = self.state.variation['id']
        if variation_id is None:
            return False

        try:
            await asyncio.to_thread(self.gateway.remove_pricing_variation, self.listing_id, variation_id)
        except GatewayError as e:
            self._notify('error', e.message)
            return False

        await self.load_variations()
        self.selected.clear()
        self.state = Idle()
        self._notify('success', MESSAGES['variation_removed'])
        return True
