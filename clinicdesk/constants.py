from zoneinfo import ZoneInfo

from clinicdesk.models.invoice import InvoiceStatus, PaymentMethod
from clinicdesk.models.subscription import SubscriptionStatus
from clinicdesk.settings import settings

CLINIC_TZ = ZoneInfo(settings.timezone)

NEAR_EXPIRY_DAYS = 7
TRIAL_DAYS = 7

INVOICE_STATUS_LABELS = {
    InvoiceStatus.DRAFT: "Draft",
    InvoiceStatus.PENDING: "Pending",
    InvoiceStatus.PAID: "Paid",
    InvoiceStatus.OVERDUE: "Overdue",
    InvoiceStatus.CANCELLED: "Cancelled",
}

PAYMENT_METHOD_LABELS = {
    PaymentMethod.CASH: "Cash",
    PaymentMethod.CARD: "Card",
    PaymentMethod.UPI: "UPI",
    PaymentMethod.NETBANKING: "Net banking",
    PaymentMethod.OTHER: "Other",
}

SUBSCRIPTION_STATUS_LABELS = {
    SubscriptionStatus.NONE: "No subscription",
    SubscriptionStatus.TRIALING: "Trial Period",
    SubscriptionStatus.ACTIVE: "Active",
    SubscriptionStatus.PAST_DUE: "Payment Past Due",
    SubscriptionStatus.CANCELLED: "Subscription Cancelled",
    SubscriptionStatus.EXPIRED: "Expired",
}
