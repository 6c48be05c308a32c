"""Operation registry and dispatcher.

``OperationDispatcher.invoke`` is the single entry point the MCP layer calls.
It validates arguments, obtains a request capability from the credential
manager, runs the handler and turns any failure into a
:class:`~integrations.paypal.errors.NormalizedError`. It returns an
:class:`OperationResult` and does not raise for operation failures.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Type

import pydantic

from common.metrics import operation_results_total
from common.redaction import redact
from integrations.paypal.auth import CredentialManager
from integrations.paypal.errors import (
    ErrorKind,
    InputValidationError,
    NormalizedError,
    normalize_error,
)
from integrations.paypal.http import PayPalHTTP

from .schemas import ArgumentsModel

__all__ = ["Handler", "OperationDefinition", "OperationResult", "OperationDispatcher"]

_LOG = logging.getLogger(__name__)

Handler = Callable[[Any, PayPalHTTP], Awaitable[Any]]


@dataclass(frozen=True)
class OperationDefinition:
    name: str
    description: str
    arguments: Type[ArgumentsModel]
    handler: Handler
    # False for operations authorised by a caller-supplied token
    authenticated: bool = True

    def parse(self, raw: Optional[Mapping[str, Any]]) -> ArgumentsModel:
        try:
            return self.arguments.model_validate(raw if raw is not None else {})
        except pydantic.ValidationError as exc:
            raise InputValidationError.from_pydantic(exc) from exc

    def input_schema(self) -> Dict[str, Any]:
        return self.arguments.model_json_schema()


@dataclass(frozen=True)
class OperationResult:
    """Either the provider's payload or a normalized error, never both."""

    payload: Any = None
    error: Optional[NormalizedError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, payload: Any) -> "OperationResult":
        return cls(payload=payload)

    @classmethod
    def failure(cls, error: NormalizedError) -> "OperationResult":
        return cls(error=error)


class OperationDispatcher:
    def __init__(
        self,
        credentials: CredentialManager,
        operations: Iterable[OperationDefinition] = (),
    ) -> None:
        self._credentials = credentials
        self._operations: Dict[str, OperationDefinition] = {}
        for op in operations:
            self.register(op)

    def register(self, op: OperationDefinition) -> None:
        if op.name in self._operations:
            raise ValueError(f"Operation already registered: {op.name}")
        self._operations[op.name] = op

    @property
    def operations(self) -> List[OperationDefinition]:
        return list(self._operations.values())

    def get(self, name: str) -> Optional[OperationDefinition]:
        return self._operations.get(name)

    async def invoke(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> OperationResult:
        definition = self._operations.get(name)
        if definition is None:
            error = NormalizedError(ErrorKind.VALIDATION, f"Unknown operation: {name}")
            _LOG.warning("Rejected call to unknown operation %r", name)
            return OperationResult.failure(error)

        extra = {"operation": name}
        try:
            args = definition.parse(arguments)
            _LOG.info("Invoking %s", name, extra=extra)
            _LOG.debug("%s arguments: %s", name, redact(args), extra=extra)
            if definition.authenticated:
                http = await self._credentials.authenticated_client()
            else:
                http = self._credentials.anonymous_client()
            payload = await definition.handler(args, http)
        except Exception as exc:
            error = normalize_error(exc, on_auth_failure=self._credentials.invalidate)
            self._log_failure(name, error, exc)
            operation_results_total.labels(name, error.kind.value).inc()
            return OperationResult.failure(error)

        operation_results_total.labels(name, "ok").inc()
        return OperationResult.success(payload)

    async def aclose(self) -> None:
        await self._credentials.aclose()

    def _log_failure(self, name: str, error: NormalizedError, exc: Exception) -> None:
        extra = {"operation": name, "error_kind": error.kind.value, "status": error.status}
        if error.kind is ErrorKind.UNKNOWN:
            _LOG.error(
                "%s failed unexpectedly: %s detail=%s",
                name,
                error.message,
                redact(error.detail),
                exc_info=exc,
                extra=extra,
            )
        elif error.kind is ErrorKind.PROVIDER:
            _LOG.error(
                "%s failed: %s detail=%s", name, error.message, redact(error.detail), extra=extra
            )
        elif error.kind is ErrorKind.VALIDATION:
            _LOG.info("%s rejected: %s", name, error.message, extra=extra)
        else:
            _LOG.warning("%s failed: %s", name, error, extra=extra)
