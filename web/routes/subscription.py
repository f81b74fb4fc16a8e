from __future__ import annotations

import hmac
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from clinicdesk.models.subscription import Plan, ProviderEvent, Subscription
from clinicdesk.services import subscription_lifecycle
from clinicdesk.settings import settings
from web.deps import get_clinic_id, get_clinic_service, get_subscription_service
from web.schemas import SubscriptionOut

logger = logging.getLogger(__name__)

router = APIRouter()

WEBHOOK_SECRET_HEADER = "X-Webhook-Secret"


def _out(sub: Subscription) -> SubscriptionOut:
    return SubscriptionOut(
        subscription=sub,
        is_near_expiry=subscription_lifecycle.is_near_expiry(sub.current_period_end),
        can_renew=subscription_lifecycle.can_renew(sub),
        days_remaining=subscription_lifecycle.days_remaining(sub),
    )


@router.get("/plans")
async def plan_list(request: Request) -> list[Plan]:
    return get_subscription_service(request).list_plans()


@router.get("/subscription")
async def subscription_detail(request: Request) -> SubscriptionOut:
    clinic_id = get_clinic_id(request)
    logger.info("GET /subscription — clinic=%s", clinic_id)
    return _out(get_subscription_service(request).refresh(clinic_id))


@router.post("/subscription/trial")
async def subscription_start_trial(request: Request) -> SubscriptionOut:
    clinic_id = get_clinic_id(request)
    logger.info("POST /subscription/trial — clinic=%s", clinic_id)
    return _out(get_subscription_service(request).start_trial(clinic_id))


@router.post("/subscription/cancel")
async def subscription_cancel(request: Request) -> SubscriptionOut:
    clinic_id = get_clinic_id(request)
    logger.info("POST /subscription/cancel — clinic=%s", clinic_id)
    return _out(get_subscription_service(request).cancel(clinic_id))


@router.post("/subscription/refresh")
async def subscription_refresh(request: Request) -> SubscriptionOut:
    clinic_id = get_clinic_id(request)
    logger.info("POST /subscription/refresh — clinic=%s", clinic_id)
    return _out(get_subscription_service(request).refresh(clinic_id))


@router.post("/webhooks/payments")
async def payment_webhook(request: Request, event: ProviderEvent):
    supplied = request.headers.get(WEBHOOK_SECRET_HEADER, "")
    if not settings.webhook_enabled() or not hmac.compare_digest(
        supplied.encode(), settings.webhook_secret.encode()
    ):
        logger.warning("Webhook rejected: bad secret (event=%s)", event.event)
        return JSONResponse({"detail": "Invalid webhook secret"}, status_code=401)

    if get_clinic_service(request).get_clinic(event.clinic_id) is None:
        logger.warning("Webhook for unknown clinic=%s (event=%s)", event.clinic_id, event.event)
        return JSONResponse({"detail": "Clinic not found"}, status_code=404)

    logger.info("Webhook %s for clinic=%s payment=%s", event.event, event.clinic_id, event.payment_id)
    sub = get_subscription_service(request).handle_provider_event(event)
    if sub is None:
        return {"status": "ignored"}
    return {"status": "processed", "subscription": _out(sub).model_dump(mode="json")}
