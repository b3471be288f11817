from __future__ import annotations

import hmac
import logging
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Mapping, Optional

from flask import Flask, current_app, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..core.exceptions import (
    AlreadyClosedError,
    AuthorizationError,
    DomainError,
    DuplicateError,
    LocationError,
    NotFoundError,
    ValidationError,
)
from .model import AttendanceSubmission, DeviceInfo, GeoLocation

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (DuplicateError, 409),
    (AlreadyClosedError, 409),
    (LocationError, 422),
)


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """ISO-8601 string or epoch milliseconds; naive values are UTC."""

    if value is None or value == "":
        return None
    try:
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except (TypeError, ValueError, OverflowError, OSError) as e:
        raise ValidationError("Invalid timestamp") from e
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def parse_location(data: Any) -> Optional[GeoLocation]:
    if not data:
        return None
    if not isinstance(data, Mapping):
        raise ValidationError("Location must be an object")
    try:
        latitude = float(data["latitude"]) if data.get("latitude") is not None else None
        longitude = float(data["longitude"]) if data.get("longitude") is not None else None
        accuracy = float(data["accuracy"]) if data.get("accuracy") is not None else None
    except (TypeError, ValueError) as e:
        raise ValidationError("Location coordinates must be numbers") from e
    return GeoLocation(
        latitude=latitude,
        longitude=longitude,
        accuracy=accuracy,
        address=data.get("address"),
        captured_at=parse_timestamp(data.get("timestamp")),
    )


def submission_from_json(
    data: Mapping[str, Any],
    *,
    user_agent: Optional[str] = None,
    ip_address: Optional[str] = None,
) -> AttendanceSubmission:
    return AttendanceSubmission(
        username=str(data.get("username") or ""),
        work_mode=str(_pick(data, "workMode", "workType") or ""),
        location=parse_location(data.get("location")),
        notes=str(data.get("notes") or ""),
        timestamp=parse_timestamp(data.get("timestamp")),
        device=DeviceInfo(
            user_agent=data.get("userAgent") or user_agent,
            ip_address=data.get("ipAddress") or ip_address,
            fingerprint=data.get("fingerprint"),
        ),
    )


def error_response(e: DomainError):
    status = next((code for cls, code in _STATUS_BY_ERROR if isinstance(e, cls)), 400)
    body: dict[str, Any] = {"success": False, "error": type(e).__name__, "message": str(e)}
    if isinstance(e, LocationError):
        body["distances"] = [{"site": d.site, "distance": d.distance_m} for d in e.distances]
    return jsonify(body), status


def register(app: Flask, container) -> None:
    def json_endpoint(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except DomainError as e:
                return error_response(e)
            except Exception:
                logger.exception("Unhandled error in %s", request.path)
                return jsonify({"success": False, "message": "Internal error while processing attendance"}), 500

        return wrapper

    def admin_required(view):
        """Require the shared ``ADMIN_TOKEN`` in ``X-Admin-Token``.

        The token is global, not scoped to a tenant: its holder names the
        tenant per request, so the service's cross-tenant check only guards
        against a mismatched tenant ID, not against the token holder.
        """

        @wraps(view)
        def wrapper(*args, **kwargs):
            expected = current_app.config.get("ADMIN_TOKEN")
            supplied = request.headers.get("X-Admin-Token", "")
            if not expected or not hmac.compare_digest(str(expected), supplied):
                return jsonify({"success": False, "message": "Administrator access required"}), 403
            return view(*args, **kwargs)

        return wrapper

    def _body() -> dict:
        return request.get_json(silent=True) or {}

    def _tenant_id(body: Optional[Mapping[str, Any]] = None) -> str:
        tenant_id = request.headers.get("X-Tenant-ID") or (body or {}).get("tenantId") or request.args.get("tenantId")
        if not tenant_id:
            raise ValidationError("Tenant ID is required")
        return str(tenant_id)

    @app.route("/api/attendance", methods=["POST"], endpoint="mark_attendance")
    @json_endpoint
    def mark_attendance():
        body = _body()
        submission = submission_from_json(
            body,
            user_agent=request.headers.get("User-Agent"),
            ip_address=request.remote_addr,
        )
        record = container.attendance_service.mark_attendance(submission, _tenant_id(body))
        return jsonify({"success": True, "record": record.to_dict()}), 201

    @app.route("/api/attendance/checkout", methods=["POST"], endpoint="checkout")
    @json_endpoint
    def checkout():
        body = _body()
        record = container.attendance_service.check_out(str(body.get("username") or ""), _tenant_id(body))
        return jsonify({"success": True, "record": record.to_dict()}), 200

    @app.route("/api/attendance/today", methods=["GET"], endpoint="today_attendance")
    @json_endpoint
    def today_attendance():
        record = container.attendance_service.get_today_record(request.args.get("username", ""), _tenant_id())
        return jsonify({"success": True, "record": record.to_dict() if record else None}), 200

    @app.route("/api/attendance", methods=["GET"], endpoint="list_attendance")
    @json_endpoint
    def list_attendance():
        args = request.args
        try:
            start = parse_iso_date(args["startDate"]) if args.get("startDate") else None
            end = parse_iso_date(args["endDate"]) if args.get("endDate") else None
            limit = int(args["limit"]) if args.get("limit") else None
        except ValueError as e:
            raise ValidationError("Invalid date range or limit") from e

        records = container.attendance_service.get_records(
            args.get("username", ""),
            _tenant_id(),
            start_date=start,
            end_date=end,
            limit=limit,
        )
        return jsonify({"success": True, "records": [r.to_dict() for r in records]}), 200

    @app.route("/api/attendance/<int:record_id>", methods=["PUT"], endpoint="update_attendance")
    @admin_required
    @json_endpoint
    def update_attendance(record_id: int):
        body = _body()
        changes = {
            "date": body.get("date"),
            "clock_in": _pick(body, "clockIn", "checkIn"),
            "clock_out": _pick(body, "clockOut", "checkOut"),
            "status": body.get("status"),
            "work_mode": _pick(body, "workMode", "workType"),
            "notes": body.get("notes"),
        }
        record = container.attendance_service.update_record(record_id, _tenant_id(body), changes)
        return jsonify({"success": True, "record": record.to_dict()}), 200

    @app.route("/api/attendance/recalculate", methods=["POST"], endpoint="recalculate_hours")
    @admin_required
    @json_endpoint
    def recalculate_hours():
        result = container.attendance_service.recalculate_total_hours(_tenant_id(_body()))
        return jsonify({"success": True, **result}), 200

    @app.route("/api/attendance/suspicious", methods=["GET"], endpoint="list_suspicious")
    @admin_required
    @json_endpoint
    def list_suspicious():
        entries = container.fraud_service.list_unresolved(_tenant_id())
        return jsonify(
            {
                "success": True,
                "entries": [
                    {
                        "id": e.entry_id,
                        "username": e.username,
                        "recordId": e.record_id,
                        "reasons": list(e.reasons),
                        "riskLevel": e.risk_level.value,
                        "resolved": e.resolved,
                        "createdAt": e.created_at.isoformat() if e.created_at else None,
                    }
                    for e in entries
                ],
            }
        ), 200

    @app.route("/api/attendance/suspicious/<int:entry_id>/resolve", methods=["POST"], endpoint="resolve_suspicious")
    @admin_required
    @json_endpoint
    def resolve_suspicious(entry_id: int):
        entry = container.fraud_service.resolve(entry_id, _tenant_id(_body()))
        return jsonify({"success": True, "id": entry.entry_id, "resolved": entry.resolved}), 200
