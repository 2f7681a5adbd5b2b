import json, logging, sys, time, uuid, datetime as dt
from typing import Optional

OPLOG_LOGGER = "inventory.oplog"

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

oplog = logging.getLogger(OPLOG_LOGGER)


def setup_logging(level: str = "INFO") -> None:
    """Configure the root handler once (stderr). Later calls only adjust the level."""
    root = logging.getLogger()
    lvl = getattr(logging, str(level).upper(), logging.INFO)
    if not root.handlers:
        logging.basicConfig(level=lvl, format=_LOG_FORMAT, stream=sys.stderr)
    root.setLevel(lvl)


class LogContext:
    """One record per operation: action, payload, outcome, error, latency."""

    def __init__(self, action: str, user: str = "owner"):
        self.action = action
        self.user = user
        self.request_id = str(uuid.uuid4())
        self.start = time.perf_counter()
        self.after = None
        self.payload = None
        self.entity_type = None
        self.entity_id = None
        self.record = None

    def set_entity(self, etype: str, eid: Optional[str]):
        self.entity_type = etype
        self.entity_id = eid

    def set_after(self, obj): self.after = obj
    def set_payload(self, obj): self.payload = obj

    def write(self, result: str = "OK", err: Optional[str] = None) -> dict:
        elapsed_ms = int((time.perf_counter() - self.start) * 1000)
        rec = {
            "ts": dt.datetime.now().astimezone().isoformat(),
            "user": self.user,
            "action": self.action,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "request_id": self.request_id,
            "after_json": json.dumps(self.after, ensure_ascii=False) if self.after is not None else None,
            "payload_json": json.dumps(self.payload, ensure_ascii=False) if self.payload is not None else None,
            "result": result,
            "err_msg": err,
            "latency_ms": elapsed_ms,
        }
        self.record = rec
        level = {"OK": logging.INFO, "WARN": logging.WARNING}.get(result, logging.ERROR)
        oplog.log(level, json.dumps(rec, ensure_ascii=False))
        return rec
