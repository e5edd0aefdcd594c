from __future__ import annotations

import io
import json
import unicodedata
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import qrcode

from tallycheck.errors import ValidationError
from tallycheck.models import CheckInToken
from tallycheck.utils import optional_datetime


@dataclass(slots=True, frozen=True)
class TokenPayload:
    token_id: str
    course_id: Optional[str] = None
    expires_at: Optional[datetime] = None


def _normalize_scanned_text(raw: bytes | str) -> str:
    if not raw:
        return ""

    if isinstance(raw, str):
        decoded = raw
    else:
        try:
            decoded = raw.decode("utf-8")
        except UnicodeDecodeError:
            decoded = raw.decode("utf-8", errors="ignore")

    normalized = unicodedata.normalize("NFC", decoded)
    return normalized.strip()


def encode_token_payload(token: CheckInToken) -> str:
    payload = {
        "token_id": token.id,
        "course_id": token.course_id,
        "expires_at": token.expires_at.isoformat(),
    }
    return json.dumps(payload, separators=(",", ":"))


def decode_token_payload(raw: bytes | str) -> TokenPayload:
    """Parse scanned QR text; a bare token id is accepted as well as the JSON form."""

    text = _normalize_scanned_text(raw)
    if not text:
        raise ValidationError("Scanned code is empty.")

    if not text.startswith("{"):
        return TokenPayload(token_id=text)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValidationError("Scanned code is not a check-in token.") from exc

    token_id = data.get("token_id") if isinstance(data, dict) else None
    if not token_id:
        raise ValidationError("Scanned code is missing its token id.")

    return TokenPayload(
        token_id=str(token_id),
        course_id=data.get("course_id"),
        expires_at=optional_datetime(data.get("expires_at")),
    )


def render_token_qr(token: CheckInToken, *, box_size: int = 10, border: int = 4) -> bytes:
    """Render the token payload as a PNG image."""

    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(encode_token_payload(token))
    qr.make(fit=True)

    image = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
