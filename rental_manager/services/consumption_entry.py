# rental_manager/services/consumption_entry.py
"""
Create/edit workflow for a monthly utility reading.

``ConsumptionEntry`` holds the form state of the "add/edit utility
consumption" dialog. New records look up last month's readings as soon as
the period is chosen; edits always start from the stored values. Both the
lookup and the save go through a gateway so the same workflow can run
against the service layer directly or over HTTP.
"""
import logging
from datetime import date
from enum import Enum

from ..errors import ServiceError
from .readings import consumption

logger = logging.getLogger(__name__)

GENERIC_SAVE_ERROR = 'Failed to save record'


class EntryState(str, Enum):
    IDLE = "IDLE"
    FETCHING_PREVIOUS = "FETCHING_PREVIOUS"
    SUBMITTING = "SUBMITTING"
    SAVED = "SAVED"
    FAILED = "FAILED"


class ServiceGateway:
    """Talks to the service layer in-process (needs an app context)."""

    def fetch_previous(self, room_id, month, year):
        from .utility_consumption import previous_readings
        return previous_readings(room_id, month, year)

    def create(self, payload):
        from .utility_consumption import create_consumption
        return create_consumption(payload).to_dict()

    def update(self, record_id, payload):
        from .utility_consumption import update_consumption
        return update_consumption(record_id, payload).to_dict()


class ConsumptionEntry:
    def __init__(self, room_id, gateway=None, today=None):
        self.room_id = room_id
        self.gateway = gateway or ServiceGateway()
        self.today = today or date.today()
        self.record_id = None
        self.state = EntryState.IDLE
        self.error = ''
        self.saved = None
        self._reset_form(self.today.month, self.today.year)

    def _reset_form(self, month, year):
        self.month = month
        self.year = year
        self.electric_number = 0
        self.water_number = 0
        self.previous_electric_number = 0
        self.previous_water_number = 0
        self.electric_cost = 0
        self.water_cost = 0
        self.notes = ''

    @property
    def is_new(self):
        return self.record_id is None

    @property
    def can_submit(self):
        return self.state not in (EntryState.FETCHING_PREVIOUS, EntryState.SUBMITTING)

    @property
    def electric_consumption(self):
        return consumption(self.electric_number, self.previous_electric_number)

    @property
    def water_consumption(self):
        return consumption(self.water_number, self.previous_water_number)

    def start_new(self, month=None, year=None):
        self.record_id = None
        self.error = ''
        self.saved = None
        self._reset_form(month or self.today.month, year or self.today.year)
        self._fetch_previous()

    def start_edit(self, record):
        """Load a stored record (camelCase dict); never looks up last month."""
        self.record_id = record['id']
        self.error = ''
        self.saved = None
        self.state = EntryState.IDLE
        self.month = record['month']
        self.year = record['year']
        self.electric_number = record['electricNumber']
        self.water_number = record['waterNumber']
        self.previous_electric_number = record.get('previousElectricNumber') or 0
        self.previous_water_number = record.get('previousWaterNumber') or 0
        self.electric_cost = record.get('electricCost') or 0
        self.water_cost = record.get('waterCost') or 0
        self.notes = record.get('notes') or ''

    def change_period(self, month=None, year=None):
        if month is not None:
            self.month = month
        if year is not None:
            self.year = year
        if self.is_new:
            self._fetch_previous()

    def _fetch_previous(self):
        self.state = EntryState.FETCHING_PREVIOUS
        try:
            found = self.gateway.fetch_previous(self.room_id, self.month, self.year) or {}
        except Exception as e:
            # a failed lookup only means the baseline has to be typed in
            logger.warning("Could not fetch previous readings for room %s: %s", self.room_id, e)
            found = {}
        self.previous_electric_number = found.get('previousElectricNumber') or 0
        self.previous_water_number = found.get('previousWaterNumber') or 0
        self.state = EntryState.IDLE

    def payload(self):
        return {
            'roomId': self.room_id,
            'month': self.month,
            'year': self.year,
            'electricNumber': self.electric_number,
            'waterNumber': self.water_number,
            # zero/empty means "not given"
            'previousElectricNumber': self.previous_electric_number or None,
            'previousWaterNumber': self.previous_water_number or None,
            'electricCost': self.electric_cost or None,
            'waterCost': self.water_cost or None,
            'notes': self.notes or None,
        }

    def submit(self):
        """Save the form. Returns True on success; ``error`` holds the message otherwise."""
        if not self.can_submit:
            return False
        self.state = EntryState.SUBMITTING
        self.error = ''
        try:
            if self.is_new:
                self.saved = self.gateway.create(self.payload())
            else:
                self.saved = self.gateway.update(self.record_id, self.payload())
        except ServiceError as e:
            self.error = e.message or GENERIC_SAVE_ERROR
            self.state = EntryState.FAILED
            return False
        except Exception:
            logger.exception("Error saving utility consumption for room %s", self.room_id)
            self.error = GENERIC_SAVE_ERROR
            self.state = EntryState.FAILED
            return False
        self.state = EntryState.SAVED
        return True
