import logging
from dataclasses import dataclass, asdict, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .catalog import Catalog
from .exceptions import DoseRefusedError
from .models import DrugRecord, _as_bool

# Set up logging
logger = logging.getLogger(__name__)

EXPIRING_THRESHOLD_DAYS = 30
LOW_STOCK_THRESHOLD = 5
NO_EXPIRY_DAYS = 999

_MONTHS = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']


class ExpiryAlertLevel(Enum):
    NONE = "none"
    SAFE = "safe"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"


_LEVEL_ORDER = {
    ExpiryAlertLevel.EXPIRED: 0,
    ExpiryAlertLevel.EXPIRING_SOON: 1,
    ExpiryAlertLevel.SAFE: 2,
    ExpiryAlertLevel.NONE: 3,
}


def _parse_expiry(value: Any) -> Optional[date]:
    """Accept a date, a datetime, 'YYYY-MM-DD' or a month-only 'YYYY-MM'"""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if len(text) == 7:
        # Strips print month/year only; use the first of the month
        text = f"{text}-01"
    return date.fromisoformat(text[:10])


@dataclass
class UserMedicine:
    """A medicine strip in the user's cabinet"""
    drug_id: str
    medicine_name: str
    medicine_id: Optional[str] = None
    category: Optional[str] = None
    expiry_date: Optional[date] = None
    tablet_count: int = 0
    expiry_alert_shown: bool = False
    doses_per_day: int = 1  # 1 to 4
    schedule_times: List[str] = field(default_factory=list)  # e.g. ['08:00', '20:00']
    food_warnings: List[str] = field(default_factory=list)

    def days_until_expiry(self, today: Optional[date] = None) -> int:
        if self.expiry_date is None:
            return NO_EXPIRY_DAYS
        return (self.expiry_date - (today or date.today())).days

    def is_expired(self, today: Optional[date] = None) -> bool:
        return self.expiry_date is not None and self.days_until_expiry(today) < 0

    def is_expiring_soon(self, today: Optional[date] = None) -> bool:
        return (self.expiry_date is not None and not self.is_expired(today)
                and self.days_until_expiry(today) <= EXPIRING_THRESHOLD_DAYS)

    @property
    def is_low_stock(self) -> bool:
        return self.tablet_count <= LOW_STOCK_THRESHOLD

    def expiry_status_text(self, today: Optional[date] = None) -> str:
        if self.expiry_date is None:
            return 'No expiry set'
        if self.is_expired(today):
            return 'Expired'
        if self.is_expiring_soon(today):
            return f'Expiring in {self.days_until_expiry(today)} days'
        return 'Valid'

    @property
    def formatted_expiry_date(self) -> str:
        if self.expiry_date is None:
            return 'Not set'
        return f"{_MONTHS[self.expiry_date.month - 1]} {self.expiry_date.year}"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], medicine_id: Optional[str] = None) -> "UserMedicine":
        def pick(*keys, default=None):
            for key in keys:
                if data.get(key) is not None:
                    return data[key]
            return default

        return cls(
            medicine_id=medicine_id or pick('id', 'medicine_id'),
            drug_id=str(pick('drugId', 'drug_id', default='')),
            medicine_name=str(pick('medicineName', 'medicine_name', default='')),
            category=pick('category'),
            expiry_date=_parse_expiry(pick('expiryDate', 'expiry_date')),
            tablet_count=int(pick('tabletCount', 'tablet_count', default=0)),
            expiry_alert_shown=_as_bool(pick('expiryAlertShown', 'expiry_alert_shown', default=False)),
            doses_per_day=int(pick('dosesPerDay', 'doses_per_day', default=1)),
            schedule_times=list(pick('scheduleTimes', 'schedule_times', default=[])),
            food_warnings=list(pick('foodWarnings', 'food_warnings', default=[])),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['expiry_date'] = self.expiry_date.isoformat() if self.expiry_date else None
        return data


@dataclass(frozen=True)
class ExpiryAlert:
    medicine: UserMedicine
    level: ExpiryAlertLevel
    days_remaining: int

    @property
    def message(self) -> str:
        if self.level is ExpiryAlertLevel.EXPIRED:
            days_past = abs(self.days_remaining)
            return f"Expired {'today' if days_past == 0 else f'{days_past} days ago'}"
        if self.level is ExpiryAlertLevel.EXPIRING_SOON:
            return f"Expires in {self.days_remaining} days"
        if self.level is ExpiryAlertLevel.SAFE:
            return f"Valid for {self.days_remaining} more days"
        return "No expiry date set"

    @property
    def severity(self) -> str:
        return {
            ExpiryAlertLevel.EXPIRED: 'critical',
            ExpiryAlertLevel.EXPIRING_SOON: 'warning',
            ExpiryAlertLevel.SAFE: 'safe',
            ExpiryAlertLevel.NONE: 'unknown',
        }[self.level]


@dataclass(frozen=True)
class CabinetStatusSummary:
    total_medicines: int
    expired_count: int
    expiring_soon_count: int
    low_stock_count: int
    needs_attention: bool

    @property
    def attention_count(self) -> int:
        return self.expired_count + self.expiring_soon_count + self.low_stock_count


@dataclass(frozen=True)
class DoseLog:
    """A dose the user marked as taken"""
    medicine_id: str
    medicine_name: str
    taken_at: datetime
    scheduled_time: Optional[str] = None  # dose slot, e.g. '08:00'
    quantity_taken: int = 1
    log_id: Optional[str] = None

    @property
    def formatted_taken_time(self) -> str:
        hour = self.taken_at.hour % 12 or 12
        period = 'PM' if self.taken_at.hour >= 12 else 'AM'
        return f"{hour}:{self.taken_at.minute:02d} {period}"

    @property
    def formatted_date(self) -> str:
        return f"{_MONTHS[self.taken_at.month - 1]} {self.taken_at.day}, {self.taken_at.year}"

    def is_taken_on(self, day: Optional[date] = None) -> bool:
        return self.taken_at.date() == (day or date.today())

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], log_id: Optional[str] = None) -> "DoseLog":
        taken_at = data.get('takenAt', data.get('taken_at'))
        if not isinstance(taken_at, datetime):
            taken_at = datetime.fromisoformat(str(taken_at)) if taken_at else datetime.now()
        return cls(
            log_id=log_id or data.get('id'),
            medicine_id=str(data.get('medicineId', data.get('medicine_id', ''))),
            medicine_name=str(data.get('medicineName', data.get('medicine_name', ''))),
            taken_at=taken_at,
            scheduled_time=data.get('scheduledTime', data.get('scheduled_time')),
            quantity_taken=int(data.get('quantityTaken', data.get('quantity_taken', 1))),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['taken_at'] = self.taken_at.isoformat()
        return data

    def __str__(self) -> str:
        return f"DoseLog({self.medicine_name} x{self.quantity_taken} at {self.formatted_taken_time})"


def check_expiry_status(expiry_date: Optional[date], today: Optional[date] = None) -> ExpiryAlertLevel:
    """
    Classify a medicine by its expiry date

    Returns:
        NONE without a date, EXPIRED once the date has passed, EXPIRING_SOON
        within 30 days, otherwise SAFE
    """
    if expiry_date is None:
        return ExpiryAlertLevel.NONE

    days_until_expiry = (expiry_date - (today or date.today())).days

    if days_until_expiry < 0:
        return ExpiryAlertLevel.EXPIRED
    elif days_until_expiry <= EXPIRING_THRESHOLD_DAYS:
        return ExpiryAlertLevel.EXPIRING_SOON
    else:
        return ExpiryAlertLevel.SAFE


def create_alert(medicine: UserMedicine, today: Optional[date] = None) -> ExpiryAlert:
    return ExpiryAlert(
        medicine=medicine,
        level=check_expiry_status(medicine.expiry_date, today),
        days_remaining=medicine.days_until_expiry(today),
    )


def check_all_medicines(medicines: Iterable[UserMedicine], today: Optional[date] = None) -> List[ExpiryAlert]:
    """Alerts for every medicine with an expiry date, most urgent first"""
    alerts = [create_alert(medicine, today) for medicine in medicines]
    alerts = [alert for alert in alerts if alert.level is not ExpiryAlertLevel.NONE]
    alerts.sort(key=lambda alert: (_LEVEL_ORDER[alert.level], alert.days_remaining))
    return alerts


def should_show_blocking_modal(medicine: UserMedicine, today: Optional[date] = None) -> bool:
    """The blocking modal is shown once, on first detection of an expired strip"""
    return medicine.is_expired(today) and not medicine.expiry_alert_shown


def should_block_dose_marking(medicine: UserMedicine, today: Optional[date] = None) -> bool:
    return medicine.is_expired(today)


def should_show_expiry_banner(medicines: Iterable[UserMedicine], today: Optional[date] = None) -> bool:
    return any(medicine.is_expired(today) for medicine in medicines)


def take_dose(medicine: UserMedicine,
              today: Optional[date] = None,
              quantity: int = 1,
              scheduled_time: Optional[str] = None,
              taken_at: Optional[datetime] = None) -> Tuple[UserMedicine, DoseLog]:
    """
    Log a dose and take the tablets out of the strip

    Args:
        medicine: The cabinet medicine being taken
        today: Date used for the expiry check
        quantity: Tablets taken
        scheduled_time: Dose slot the dose belongs to, e.g. '08:00'
        taken_at: When the dose was taken, defaults to now

    Returns:
        The updated medicine (count never below zero) and the dose log

    Raises:
        DoseRefusedError: if the strip is expired or out of stock
    """
    if quantity < 1:
        raise ValueError(f"Dose quantity must be at least 1, got {quantity}")
    if should_block_dose_marking(medicine, today):
        raise DoseRefusedError(f"Cannot log dose: {medicine.medicine_name} is expired")
    if medicine.tablet_count <= 0:
        raise DoseRefusedError(f"Cannot log dose: {medicine.medicine_name} is out of stock")

    dose = DoseLog(
        medicine_id=medicine.medicine_id or medicine.drug_id,
        medicine_name=medicine.medicine_name,
        taken_at=taken_at or datetime.now(),
        scheduled_time=scheduled_time,
        quantity_taken=quantity,
    )
    updated = replace(medicine, tablet_count=max(medicine.tablet_count - quantity, 0))

    logger.info(f"Logged {quantity} dose(s) of {medicine.medicine_name}, {updated.tablet_count} left")
    if updated.is_low_stock:
        logger.warning(f"{medicine.medicine_name} is running low ({updated.tablet_count} left)")
    return updated, dose


def mark_expiry_alert_shown(medicine: UserMedicine) -> UserMedicine:
    """Record that the blocking expiry modal was shown for this strip"""
    return replace(medicine, expiry_alert_shown=True)


def refill_strip(medicine: UserMedicine, new_expiry_date: date, add_quantity: int) -> UserMedicine:
    """A new strip: new expiry date, more tablets, and the expiry alert armed again"""
    return replace(
        medicine,
        expiry_date=_parse_expiry(new_expiry_date),
        tablet_count=medicine.tablet_count + add_quantity,
        expiry_alert_shown=False,
    )


def cabinet_status(medicines: Iterable[UserMedicine], today: Optional[date] = None) -> CabinetStatusSummary:
    medicines = list(medicines)
    return CabinetStatusSummary(
        total_medicines=len(medicines),
        expired_count=sum(1 for m in medicines if m.is_expired(today)),
        expiring_soon_count=sum(1 for m in medicines if m.is_expiring_soon(today)),
        low_stock_count=sum(1 for m in medicines if m.is_low_stock),
        needs_attention=any(m.is_expired(today) or m.is_expiring_soon(today) for m in medicines),
    )


def drugs_in_use(medicines: Iterable[UserMedicine],
                 catalog: Union[Catalog, Iterable[DrugRecord]]) -> List[DrugRecord]:
    """
    Resolve cabinet medicines to catalog records, for use as the drugs
    already being taken when evaluating a new scan
    """
    drugs = catalog.snapshot() if isinstance(catalog, Catalog) else catalog
    by_id = {drug.drug_id: drug for drug in drugs if drug.drug_id is not None}

    resolved: List[DrugRecord] = []
    for medicine in medicines:
        drug = by_id.get(medicine.drug_id)
        if drug is None:
            logger.warning(f"Cabinet medicine {medicine.medicine_name} refers to unknown drug {medicine.drug_id}")
            continue
        if drug not in resolved:
            resolved.append(drug)
    return resolved
