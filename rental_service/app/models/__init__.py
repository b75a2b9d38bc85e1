# Import all models to ensure they are registered with SQLAlchemy
from .assets.properties import Property, PgRoom, PgBed
from .bookings.bookings import Booking, BookingRef
from .bookings.monthly_payments import MonthlyPayment
from .wallet.wallets import Wallet, WalletTransaction
from .notifications.booking_notifications import BookingNotification
