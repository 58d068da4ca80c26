# engine/audit_log.py
from __future__ import annotations
import os, json, hashlib, hmac, time, uuid
from typing import Any, Dict, List


def _audit_root() -> str:
    return os.environ.get("XCSHIP_AUDIT_DIR", os.path.abspath(".xcship_audit"))

def _log_path() -> str:
    return os.path.join(_audit_root(), "audit.log.jsonl")

def _ensure():
    os.makedirs(_audit_root(), exist_ok=True)

def _canonical(obj: Any) -> bytes:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")

def _sign_entry(entry_body: Dict[str,Any]) -> Dict[str,Any]:
    """
    Signs the event body. HMAC-SHA256 when XCSHIP_AUDIT_KEY is set,
    otherwise a plain SHA-256 fingerprint.
    """
    key = os.environ.get("XCSHIP_AUDIT_KEY")
    canon = _canonical(entry_body)
    if key:
        sig = hmac.new(key.encode("utf-8"), canon, hashlib.sha256).hexdigest()
        return {"mode": "hmac-sha256", "value": sig}
    return {"mode": "sha256", "value": hashlib.sha256(canon).hexdigest()}

def record_event(event: str, payload: Dict[str,Any], *, severity: str = "info") -> Dict[str,Any]:
    """Appends one signed event to audit.log.jsonl and returns it."""
    _ensure()
    body = {
        "id": str(uuid.uuid4()),
        "ts": time.time(),
        "event": event,
        "severity": severity,
        "payload": payload or {},
        "version": 1
    }
    entry = {"signature": _sign_entry(body), **body}
    with open(_log_path(), "a", encoding="utf-8") as f:
        f.write(json.dumps(entry, ensure_ascii=False) + "\n")
    return entry

def read_events(event: str | None = None) -> List[Dict[str,Any]]:
    path = _log_path()
    if not os.path.exists(path):
        return []
    out: List[Dict[str,Any]] = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            if not line.strip():
                continue
            entry = json.loads(line)
            if event is None or entry.get("event") == event:
                out.append(entry)
    return out

def verify_entry(entry: Dict[str,Any]) -> bool:
    body = {k: v for k, v in entry.items() if k != "signature"}
    return hmac.compare_digest(_sign_entry(body)["value"], entry.get("signature", {}).get("value", ""))
