"""
Typed exceptions for the BLS Groth16 prover.

Every error is structured: a machine-readable code, a human message, a small
context dict (byte offsets, section types, JSON field names, batch indices)
and an optional underlying cause. ``to_dict()`` gives a transport-friendly
view for CLI/JSON output.

Hierarchy
  ProverError (base)
    FormatError
      TruncationError
    MissingSectionError
    LengthMismatchError
    InvalidWitnessError
    SetupNotPerformedError
    ExternalToolError
    CalldataUnavailableError
    ProvingTimeoutError
    BatchProvingError

A proof that fails the pairing check is NOT an error: ``verify`` returns
``False`` for it. Everything here is fatal for the call that raised it and is
never retried internally.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence


class ProverErrorCode(str, Enum):
    """Canonical error codes."""

    UNKNOWN = "UNKNOWN"

    # Parsing / decoding
    FORMAT = "FORMAT"  # bad magic, malformed JSON, bad coordinates
    TRUNCATED = "TRUNCATED"  # cursor walked past the end of a buffer
    MISSING_SECTION = "MISSING_SECTION"

    # Engine
    LENGTH_MISMATCH = "LENGTH_MISMATCH"  # public inputs vs IC size
    INVALID_WITNESS = "INVALID_WITNESS"
    SETUP_NOT_PERFORMED = "SETUP_NOT_PERFORMED"
    ALREADY_SET_UP = "ALREADY_SET_UP"
    TIMEOUT = "TIMEOUT"

    # Collaborators / outputs
    EXTERNAL_TOOL = "EXTERNAL_TOOL"
    CALLDATA_UNAVAILABLE = "CALLDATA_UNAVAILABLE"
    BATCH = "BATCH"


@dataclass(eq=False)
class ProverError(Exception):
    """
    Base structured error.

    Fields:
      code:  stable machine code (ProverErrorCode | str)
      msg:   human-readable summary
      ctx:   small dict of contextual fields
      cause: optional underlying exception (not serialized)
    """

    code: ProverErrorCode | str = ProverErrorCode.UNKNOWN
    msg: str = "prover error"
    ctx: Dict[str, Any] = field(default_factory=dict)
    cause: Optional[BaseException] = None

    def __post_init__(self) -> None:
        if not isinstance(self.ctx, dict):
            self.ctx = {"_ctx_type_error": str(type(self.ctx)), "repr": repr(self.ctx)}

    def __str__(self) -> str:
        code = self.code.value if isinstance(self.code, ProverErrorCode) else self.code
        parts = [f"[{code}] {self.msg}"]
        if self.ctx:
            parts.append(f"ctx={self.ctx}")
        if self.cause:
            parts.append(f"cause={self.cause!r}")
        return " ".join(parts)

    def with_context(self, **extra: Any) -> "ProverError":
        """Return a shallow copy (same class) with merged context."""
        clone = self.__class__.__new__(self.__class__)
        clone.__dict__.update(self.__dict__)
        clone.ctx = {**self.ctx, **extra}
        return clone

    def to_dict(self) -> Dict[str, Any]:
        code = self.code.value if isinstance(self.code, ProverErrorCode) else str(self.code)
        return {"code": code, "msg": self.msg, "ctx": self.ctx}

    @classmethod
    def wrap(
        cls,
        code: ProverErrorCode | str,
        msg: str,
        *,
        ctx: Optional[Mapping[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> "ProverError":
        return ProverError(code=code, msg=msg, ctx=dict(ctx or {}), cause=cause)


def _ctx(base: Dict[str, Any], extra: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    out = {k: v for k, v in base.items() if v is not None}
    if extra:
        out.update(extra)
    return out


class FormatError(ProverError):
    """Malformed input: bad magic, bad coordinate array, non-digit field string."""

    def __init__(
        self,
        msg: str = "malformed input",
        *,
        offset: Optional[int] = None,
        section: Optional[int] = None,
        field: Optional[str] = None,
        ctx: Optional[Mapping[str, Any]] = None,
        cause: Optional[BaseException] = None,
        code: ProverErrorCode | str = ProverErrorCode.FORMAT,
    ) -> None:
        base = _ctx({"offset": offset, "section": section, "field": field}, ctx)
        super().__init__(code=code, msg=msg, ctx=base, cause=cause)


class TruncationError(FormatError):
    """A read would run past the end of the buffer."""

    def __init__(
        self,
        msg: str = "buffer truncated",
        *,
        offset: int,
        needed: int,
        available: int,
        section: Optional[int] = None,
        ctx: Optional[Mapping[str, Any]] = None,
    ) -> None:
        extra = {"needed": int(needed), "available": int(available)}
        if ctx:
            extra.update(ctx)
        super().__init__(
            msg,
            offset=offset,
            section=section,
            ctx=extra,
            code=ProverErrorCode.TRUNCATED,
        )


class MissingSectionError(ProverError):
    """The requested section type is absent from the container."""

    def __init__(self, section: int, *, present: Sequence[int] = ()) -> None:
        super().__init__(
            code=ProverErrorCode.MISSING_SECTION,
            msg=f"section {section} not found",
            ctx={"section": int(section), "present": [int(s) for s in present]},
        )


class LengthMismatchError(ProverError):
    """Public input count does not match the verifying key's IC length."""

    def __init__(
        self,
        msg: str = "public input count does not match verifying key",
        *,
        expected: int,
        got: int,
        ctx: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(
            code=ProverErrorCode.LENGTH_MISMATCH,
            msg=msg,
            ctx=_ctx({"expected": int(expected), "got": int(got)}, ctx),
        )


class InvalidWitnessError(ProverError):
    """Witness is structurally wrong, out of range, non-numeric or unsatisfying."""

    def __init__(
        self,
        msg: str = "invalid witness",
        *,
        index: Optional[int] = None,
        field: Optional[str] = None,
        ctx: Optional[Mapping[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            code=ProverErrorCode.INVALID_WITNESS,
            msg=msg,
            ctx=_ctx({"index": index, "field": field}, ctx),
            cause=cause,
        )


class SetupNotPerformedError(ProverError):
    def __init__(self, operation: str) -> None:
        super().__init__(
            code=ProverErrorCode.SETUP_NOT_PERFORMED,
            msg=f"{operation} requires setup; engine is uninitialized",
            ctx={"operation": operation},
        )


class ExternalToolError(ProverError):
    """An external collaborator (node, snarkjs, ...) failed; carries its diagnostics."""

    def __init__(
        self,
        msg: str = "external tool failed",
        *,
        tool: str,
        returncode: Optional[int] = None,
        stderr: str = "",
        stdout: str = "",
        cause: Optional[BaseException] = None,
    ) -> None:
        self.stderr = stderr
        self.stdout = stdout
        super().__init__(
            code=ProverErrorCode.EXTERNAL_TOOL,
            msg=msg,
            ctx=_ctx({"tool": tool, "returncode": returncode, "stderr": stderr[-2000:] or None}, None),
            cause=cause,
        )


class CalldataUnavailableError(ProverError):
    """On-chain calldata could not be produced from the available source."""

    def __init__(self, msg: str = "calldata unavailable", *, source: Optional[str] = None) -> None:
        snippet = source[:200] if source is not None else None
        super().__init__(
            code=ProverErrorCode.CALLDATA_UNAVAILABLE,
            msg=msg,
            ctx=_ctx({"source": snippet}, None),
        )


class ProvingTimeoutError(ProverError):
    def __init__(self, timeout: float) -> None:
        super().__init__(
            code=ProverErrorCode.TIMEOUT,
            msg=f"proving exceeded {timeout:g}s",
            ctx={"timeout_s": float(timeout)},
        )


class BatchProvingError(ProverError):
    """A batch aborted at ``index``; ``cause`` is the per-item error."""

    def __init__(self, index: int, cause: BaseException, *, total: Optional[int] = None) -> None:
        self.index = int(index)
        super().__init__(
            code=ProverErrorCode.BATCH,
            msg=f"batch aborted at index {index}",
            ctx=_ctx({"index": self.index, "total": total}, None),
            cause=cause,
        )


# Guard helpers ---------------------------------------------------------------


def ensure_format(condition: bool, msg: str, **ctx: Any) -> None:
    """Raise FormatError(msg, ctx) if condition is False."""
    if not condition:
        raise FormatError(msg, ctx=ctx)


def rethrow_as(code: ProverErrorCode | str, *, msg: str, **ctx: Any):
    """
    Context-manager converting arbitrary exceptions into a ProverError with
    the original attached as cause.
      with rethrow_as(ProverErrorCode.FORMAT, msg="bad artifact", path=str(p)):
          ...
    """

    class _Ctx:
        def __enter__(self) -> None:
            return None

        def __exit__(self, exc_type, exc, tb) -> bool:
            if exc is None or isinstance(exc, ProverError):
                return False
            raise ProverError.wrap(code, msg, ctx=ctx, cause=exc) from exc

    return _Ctx()


__all__ = [
    "ProverError",
    "ProverErrorCode",
    "FormatError",
    "TruncationError",
    "MissingSectionError",
    "LengthMismatchError",
    "InvalidWitnessError",
    "SetupNotPerformedError",
    "ExternalToolError",
    "CalldataUnavailableError",
    "ProvingTimeoutError",
    "BatchProvingError",
    "ensure_format",
    "rethrow_as",
]
