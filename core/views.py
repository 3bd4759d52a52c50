"""HTTP entry points for attack report parsing."""

from __future__ import annotations

import json
import logging

from django.http import HttpRequest, JsonResponse, QueryDict
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from core.forms import AttackReportForm
from core.parsers.attack_report import compute_attack_report_checksum

logger = logging.getLogger(__name__)


def _request_payload(request: HttpRequest) -> QueryDict | dict[str, object] | None:
    """Return submitted fields from a form-encoded or JSON request body.

    Returns:
        The submitted fields, or None when a JSON body cannot be decoded.
    """

    if request.content_type != "application/json":
        return request.POST
    try:
        payload = json.loads(request.body or b"{}")
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None
    if not isinstance(payload, dict):
        return None
    return payload


@csrf_exempt
@require_POST
def parse_attack_report_api(request: HttpRequest) -> JsonResponse:
    """Validate and parse a pasted attack report, returning JSON.

    Accepts `raw_text` as a form field or as a key of a JSON object body.
    Responds with 400 and per-field errors when the text fails validation.
    """

    payload = _request_payload(request)
    if payload is None:
        return JsonResponse({"ok": False, "errors": {"__all__": ["Request body must be a JSON object."]}}, status=400)

    form = AttackReportForm(data={"raw_text": payload.get("raw_text") or ""})
    if not form.is_valid():
        logger.info("Rejected attack report: %s", list(form.errors.get("raw_text", [])))
        return JsonResponse({"ok": False, "errors": form.errors.get_json_data()}, status=400)

    report = form.parse()
    return JsonResponse(
        {
            "ok": True,
            "checksum": compute_attack_report_checksum(form.cleaned_data["raw_text"]),
            "report": report.as_json(),
        }
    )
